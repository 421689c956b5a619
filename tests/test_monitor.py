"""Tests for the BatteryMonitor poll loop.

This module tests a full cycle end to end with fake dump sources, the error
policy for failed cycles, and loop cancellation.
"""

from __future__ import annotations

import logging
import threading

import pytest
from pythonosc.osc_message import OscMessage

from pico_battery.dump import Subsystem
from pico_battery.exceptions import SendError, SubprocessError
from pico_battery.levels import BatteryLevels
from pico_battery.monitor import BatteryMonitor
from pico_battery.publisher import OscPublisher

from conftest import (
    BATTERY_DUMP,
    CONTROLLER_DUMP,
    FakeDumpSource,
    FakeSocket,
    RecordingPublisher,
)


# ============================================================================
# Construction Tests
# ============================================================================


class TestConstruction:
    def test_default_interval(self, fake_source, recording_publisher) -> None:
        monitor = BatteryMonitor(fake_source, recording_publisher)
        assert monitor.poll_interval == 60.0

    @pytest.mark.parametrize("interval", [0, -1])
    def test_rejects_non_positive_interval(self, fake_source, recording_publisher, interval) -> None:
        with pytest.raises(ValueError):
            BatteryMonitor(fake_source, recording_publisher, poll_interval=interval)


# ============================================================================
# Single Cycle Tests
# ============================================================================


class TestRunOnce:
    """Tests for one poll cycle."""

    def test_get_levels(self, fake_source, recording_publisher) -> None:
        monitor = BatteryMonitor(fake_source, recording_publisher)
        levels = monitor.get_levels()
        assert levels == BatteryLevels(0.73, 0.8, 1.0)
        assert fake_source.calls == [Subsystem.BATTERY, Subsystem.CONTROLLER_SERVICE]

    def test_success_publishes_and_logs(self, fake_source, recording_publisher, caplog) -> None:
        monitor = BatteryMonitor(fake_source, recording_publisher)
        with caplog.at_level(logging.INFO, logger="pico_battery.monitor"):
            levels = monitor.run_once()
        assert levels == BatteryLevels(0.73, 0.8, 1.0)
        assert recording_publisher.published == [levels]
        assert monitor.last_levels == levels
        assert monitor.last_error is None
        assert "headset=0.73" in caplog.text

    def test_debug_log_has_all_fields(self, fake_source, recording_publisher, caplog) -> None:
        monitor = BatteryMonitor(fake_source, recording_publisher)
        with caplog.at_level(logging.DEBUG, logger="pico_battery.monitor"):
            monitor.run_once()
        assert "'left_controller': 0.8" in caplog.text
        assert "'right_controller': 1.0" in caplog.text

    def test_end_to_end_three_messages(self, fake_source) -> None:
        """One cycle through the real publisher sends exactly three OSC messages."""
        sock = FakeSocket()
        publisher = OscPublisher(("127.0.0.1", 9000), ("127.0.0.1", 9003), sock=sock)
        BatteryMonitor(fake_source, publisher).run_once()

        decoded = [OscMessage(data) for data, _ in sock.sent]
        assert [m.address for m in decoded] == [
            "/avatar/parameters/BatteryLevelHeadset",
            "/avatar/parameters/BatteryLevelControllerLeft",
            "/avatar/parameters/BatteryLevelControllerRight",
        ]
        assert decoded[0].params[0] == pytest.approx(0.73)
        assert decoded[1].params[0] == pytest.approx(0.8)
        assert decoded[2].params[0] == 1.0

    @pytest.mark.parametrize("dumps", [
        {Subsystem.BATTERY: "  status: 2\n", Subsystem.CONTROLLER_SERVICE: CONTROLLER_DUMP},
        {Subsystem.BATTERY: BATTERY_DUMP, Subsystem.CONTROLLER_SERVICE: "nothing here\n"},
        {Subsystem.BATTERY: BATTERY_DUMP, Subsystem.CONTROLLER_SERVICE: "   handler: left\n   battery: 4\n"},
        {Subsystem.BATTERY: "  level: full\n", Subsystem.CONTROLLER_SERVICE: CONTROLLER_DUMP},
    ], ids=["no-level", "no-markers", "right-missing", "bad-level"])
    def test_extraction_failure_publishes_nothing(self, dumps) -> None:
        """Any extraction failure skips publishing for the whole cycle."""
        sock = FakeSocket()
        publisher = OscPublisher(("127.0.0.1", 9000), ("127.0.0.1", 9003), sock=sock)
        monitor = BatteryMonitor(FakeDumpSource(dumps), publisher)
        assert monitor.run_once() is None
        assert sock.sent == []
        assert monitor.last_error

    def test_subprocess_failure_is_logged(self, recording_publisher, caplog) -> None:
        source = FakeDumpSource({
            Subsystem.BATTERY: SubprocessError("adb not found on PATH"),
            Subsystem.CONTROLLER_SERVICE: CONTROLLER_DUMP,
        })
        monitor = BatteryMonitor(source, recording_publisher)
        with caplog.at_level(logging.ERROR, logger="pico_battery.monitor"):
            assert monitor.run_once() is None
        assert recording_publisher.published == []
        assert "adb not found on PATH" in caplog.text

    def test_failure_keeps_previous_levels(self, recording_publisher) -> None:
        source = FakeDumpSource({
            Subsystem.BATTERY: BATTERY_DUMP,
            Subsystem.CONTROLLER_SERVICE: CONTROLLER_DUMP,
        })
        monitor = BatteryMonitor(source, recording_publisher)
        first = monitor.run_once()
        source.dumps[Subsystem.CONTROLLER_SERVICE] = ""
        assert monitor.run_once() is None
        assert monitor.last_levels == first
        assert "left" in monitor.last_error

    def test_publish_errors_propagate(self, fake_source) -> None:
        """Send failures are fatal, not swallowed by the cycle."""
        publisher = OscPublisher(("127.0.0.1", 9000), ("127.0.0.1", 9003), sock=FakeSocket(fail_on=0))
        with pytest.raises(SendError):
            BatteryMonitor(fake_source, publisher).run_once()


# ============================================================================
# Loop Tests
# ============================================================================


class StoppingPublisher(RecordingPublisher):
    """Stops the monitor after a fixed number of publishes."""

    def __init__(self, stop_after: int):
        super().__init__()
        self.monitor = None
        self.stop_after = stop_after

    def publish(self, levels: BatteryLevels) -> None:
        super().publish(levels)
        if len(self.published) >= self.stop_after:
            self.monitor.stop()


class TestRun:
    """Tests for the run loop and cancellation."""

    def test_stop_ends_loop(self, fake_source) -> None:
        publisher = StoppingPublisher(stop_after=1)
        monitor = BatteryMonitor(fake_source, publisher, poll_interval=3600)
        publisher.monitor = monitor
        monitor.run()
        assert len(publisher.published) == 1
        assert monitor.stopped

    def test_waits_between_cycles(self, fake_source, monkeypatch) -> None:
        publisher = StoppingPublisher(stop_after=3)
        monitor = BatteryMonitor(fake_source, publisher, poll_interval=60)
        publisher.monitor = monitor
        waits = []
        real_wait = monitor._stop_event.wait

        def fake_wait(timeout=None):
            waits.append(timeout)
            return real_wait(0)

        monkeypatch.setattr(monitor._stop_event, "wait", fake_wait)
        monitor.run()
        assert len(publisher.published) == 3
        assert waits == [60.0, 60.0, 60.0]

    def test_continues_after_failed_cycle(self, monkeypatch) -> None:
        source = FakeDumpSource({
            Subsystem.BATTERY: "  status: 2\n",
            Subsystem.CONTROLLER_SERVICE: CONTROLLER_DUMP,
        })
        publisher = StoppingPublisher(stop_after=1)
        monitor = BatteryMonitor(source, publisher, poll_interval=60)
        publisher.monitor = monitor
        cycles = []

        def fake_wait(timeout=None):
            cycles.append(timeout)
            source.dumps[Subsystem.BATTERY] = BATTERY_DUMP
            return monitor._stop_event.is_set()

        monkeypatch.setattr(monitor._stop_event, "wait", fake_wait)
        monitor.run()
        assert len(cycles) == 2
        assert len(publisher.published) == 1

    def test_stop_from_other_thread(self, fake_source, recording_publisher) -> None:
        monitor = BatteryMonitor(fake_source, recording_publisher, poll_interval=3600)
        thread = threading.Thread(target=monitor.run, daemon=True)
        thread.start()
        monitor.stop()
        thread.join(timeout=5.0)
        assert not thread.is_alive()
