"""Shared fixtures for the pico_battery tests."""

from __future__ import annotations

from typing import Dict, List

import pytest

from pico_battery.dump import Subsystem
from pico_battery.levels import BatteryLevels


BATTERY_DUMP = """Current Battery Service state:
  AC powered: false
  USB powered: true
  Wireless powered: false
  Max charging current: 500000
  status: 2
  health: 2
  present: true
  level: 73
  scale: 100
  voltage: 4123
  temperature: 290
  technology: Li-ion
"""

CONTROLLER_DUMP = """PxrControllerService state:
 controller count: 2
  controller 0:
   handler: left
   connectionState: 2
   battery: 4
   version: 1.2.7
  controller 1:
   handler: right
   connectionState: 2
   battery: 5
   version: 1.2.7
"""


class FakeDumpSource:
    """In-memory DumpSource returning fixed text per subsystem."""

    def __init__(self, dumps: Dict[Subsystem, object]):
        self.dumps = dumps
        self.calls: List[Subsystem] = []

    def fetch(self, subsystem: Subsystem) -> str:
        self.calls.append(subsystem)
        value = self.dumps[subsystem]
        if isinstance(value, Exception):
            raise value
        return value


class RecordingPublisher:
    """Publisher that keeps every BatteryLevels it is given."""

    def __init__(self):
        self.published: List[BatteryLevels] = []

    def publish(self, levels: BatteryLevels) -> None:
        self.published.append(levels)


class FakeSocket:
    """Stand-in for a bound UDP socket."""

    def __init__(self, fail_on: int = -1):
        self.sent: List[tuple] = []
        self.closed = False
        self._fail_on = fail_on

    def sendto(self, data: bytes, address) -> int:
        if len(self.sent) == self._fail_on:
            raise OSError("network unreachable")
        self.sent.append((data, address))
        return len(data)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def battery_dump() -> str:
    return BATTERY_DUMP


@pytest.fixture
def controller_dump() -> str:
    return CONTROLLER_DUMP


@pytest.fixture
def fake_source() -> FakeDumpSource:
    return FakeDumpSource({
        Subsystem.BATTERY: BATTERY_DUMP,
        Subsystem.CONTROLLER_SERVICE: CONTROLLER_DUMP,
    })


@pytest.fixture
def recording_publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def fake_socket() -> FakeSocket:
    return FakeSocket()
