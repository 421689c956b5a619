# Pico Battery Bridge - Battery Monitor
# Author: IntelligentToasters
# License: GNU General Public License v3.0
#
# Provides the BatteryMonitor class: a fixed-interval poll loop that reads
# the headset and controller dumps, extracts and normalizes the battery
# levels, and hands them to the OSC publisher.
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

"""pico_battery.monitor

BatteryMonitor: a blocking poll loop around a dump source and a publisher.

High-level responsibilities
- Once per `poll_interval`, fetch the battery and controller service dumps,
  extract the three raw readings and normalize them.
- Publish all three levels when extraction succeeds. Nothing is published
  for a cycle in which any part of extraction failed.
- Keep running through extraction failures (a controller that is switched
  off is a normal, temporary condition) and log them.

Primary types / functions
- class BatteryMonitor
    - get_levels(): one fetch + extract + normalize, raising on failure
    - run_once(): one full cycle with the error policy applied
    - run(): loop forever, or until stop() is called
    - stop(): cancellation signal, safe from a signal handler

Design notes
- Everything runs on the caller's thread. The wait between cycles uses a
  `threading.Event` so `stop()` ends it immediately instead of after a full
  interval.
- Publisher errors (`EncodeError`, `SendError`) are not caught here; they
  propagate out of `run()` and end the process.
"""
from __future__ import annotations

import logging
import threading
from typing import Optional, Protocol

from .dump import DumpSource, Subsystem
from .exceptions import ExtractionError, SubprocessError
from .levels import BatteryLevels, normalize
from .parser import extract_controllers, extract_headset

log = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 60.0


class Publisher(Protocol):
    def publish(self, levels: BatteryLevels) -> None:
        ...


class BatteryMonitor:
    """Poll the device for battery levels and publish them.

    - Each cycle builds a fresh BatteryLevels; nothing carries over except
      the `last_levels` / `last_error` diagnostics.
    - Extraction errors are logged and skipped; publish errors propagate.
    """

    def __init__(self, source: DumpSource, publisher: Publisher, poll_interval: float = DEFAULT_POLL_INTERVAL):
        self.source = source
        self.publisher = publisher

        self._poll_interval = float(poll_interval)
        if self._poll_interval <= 0:
            raise ValueError("poll_interval must be > 0")

        self._stop_event = threading.Event()

        # diagnostics
        self.last_levels: Optional[BatteryLevels] = None
        self.last_error: Optional[str] = None

    @property
    def poll_interval(self) -> float:
        return self._poll_interval

    def get_levels(self) -> BatteryLevels:
        """Fetch both dumps and return normalized levels.

        Raises SubprocessError or an ExtractionError subclass on failure.
        """
        headset = extract_headset(self.source.fetch(Subsystem.BATTERY))
        left, right = extract_controllers(self.source.fetch(Subsystem.CONTROLLER_SERVICE))
        return normalize(headset, left, right)

    def run_once(self) -> Optional[BatteryLevels]:
        """Run a single poll cycle. Returns the published levels, or None."""
        try:
            levels = self.get_levels()
        except (SubprocessError, ExtractionError) as exc:
            self.last_error = str(exc)
            log.error("Failed to retrieve battery levels: %s", exc)
            return None

        log.info("%s", levels)
        log.debug("levels: %s", levels.as_dict())
        self.publisher.publish(levels)
        self.last_levels = levels
        self.last_error = None
        return levels

    def run(self) -> None:
        log.info("Polling battery levels every %.0f second(s)", self._poll_interval)
        while not self._stop_event.is_set():
            self.run_once()
            # returns early when stop() is called
            if self._stop_event.wait(self._poll_interval):
                break
        log.debug("BatteryMonitor stopped")

    def stop(self) -> None:
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()
