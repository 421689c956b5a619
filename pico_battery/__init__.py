# Pico Battery Bridge - Headset Battery to OSC
# Author: IntelligentToasters
# License: GNU General Public License v3.0
#
# This package reads headset and controller battery levels from a Pico
# headset over adb and forwards them as OSC avatar parameters over UDP.
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

"""Pico battery bridge package

This package polls a Pico headset for battery diagnostics and republishes the
levels as OSC messages. It exposes:

- `BatteryMonitor`: the fixed-interval poll loop tying everything together.
- `AdbDumpSource`, `Subsystem`, `start_server`: adb access to `dumpsys`.
- `extract_headset`, `extract_controllers`: parsing helpers turning dump text
  into raw readings.
- `normalize`, `BatteryLevels`: raw readings -> 0.0-1.0 levels.
- `OscPublisher`, `parse_address`: OSC over UDP to the receiver.
"""

from .dump import AdbDumpSource, DumpSource, Subsystem, start_server
from .exceptions import (
    BatteryError,
    CaptureNotFound,
    EncodeError,
    ExtractionError,
    NotFound,
    ParseError,
    PublishError,
    SendError,
    SubprocessError,
)
from .levels import BatteryLevels, normalize
from .monitor import BatteryMonitor
from .parser import extract_controller, extract_controllers, extract_headset
from .publisher import OscPublisher, parse_address

__all__ = [
    "AdbDumpSource",
    "DumpSource",
    "Subsystem",
    "start_server",
    "BatteryError",
    "CaptureNotFound",
    "EncodeError",
    "ExtractionError",
    "NotFound",
    "ParseError",
    "PublishError",
    "SendError",
    "SubprocessError",
    "BatteryLevels",
    "normalize",
    "BatteryMonitor",
    "extract_controller",
    "extract_controllers",
    "extract_headset",
    "OscPublisher",
    "parse_address",
]
__version__ = "0.1.0"
