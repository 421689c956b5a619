# Pico Battery Bridge - Exceptions
# Author: IntelligentToasters
# License: GNU General Public License v3.0
#
# Error hierarchy shared by the dump source, the level extractor and the OSC
# publisher.
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""Exceptions raised by the battery bridge.

Two tiers:
- `SubprocessError` and `ExtractionError` subclasses abort a single poll
  cycle. The monitor logs them and tries again on the next cycle.
- `PublishError` subclasses mean the outbound OSC path is broken (bad
  message or unreachable/misconfigured socket) and are left to terminate
  the process.
"""
from __future__ import annotations


class BatteryError(Exception):
    """Base class for all bridge errors."""
    pass


class SubprocessError(BatteryError):
    """The device bridge could not be run or returned unusable output."""
    pass


class ExtractionError(BatteryError):
    """A dump did not contain the structure needed to read a level."""
    pass


class NotFound(ExtractionError):
    """An expected line is missing from a dump."""
    pass


class CaptureNotFound(ExtractionError):
    def __init__(self, side: str):
        self.side = side
        super().__init__(f"failed to capture {side} controller battery level")


class ParseError(ExtractionError):
    def __init__(self, what: str, text: str):
        self.what = what
        self.text = text
        super().__init__(f"failed to parse {what} battery level from {text!r}")


class PublishError(BatteryError):
    """Base class for fatal outbound protocol failures."""
    pass


class EncodeError(PublishError):
    pass


class SendError(PublishError):
    pass
