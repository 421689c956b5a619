#!/usr/bin/env python3
# Pico Battery Bridge - OSC Client
# Author: IntelligentToasters
# License: GNU General Public License v3.0
#
# Polls a Pico headset over adb for headset and controller battery levels
# and publishes them as OSC avatar parameters to a local receiver.
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
"""
OSC Client for Pico headset battery levels
Publishes battery levels as avatar parameters

Every 60 seconds this client reads `dumpsys battery` and
`dumpsys pxrcontrollerservice` over adb, and sends three OSC float messages
(headset, left controller, right controller) to the receiver.

Logging verbosity follows the LOG_LEVEL environment variable (default INFO).

Usage:
    scripts/battery_osc.py --receiver 127.0.0.1:9000 --sender 127.0.0.1:9003
"""

import argparse
import logging
import os
import signal
import sys

# Add parent directory to path so we can import pico_battery
sys.path.insert(0, '.')

from pico_battery import (
    AdbDumpSource,
    BatteryMonitor,
    OscPublisher,
    __version__,
    parse_address,
    start_server,
)
from pico_battery.publisher import DEFAULT_RECEIVER, DEFAULT_SENDER

log = logging.getLogger(__name__)

LOG_FORMAT = '[%(asctime)s] %(levelname)s: %(message)s'


def build_parser():
    parser = argparse.ArgumentParser(description="Forward Pico headset battery levels over OSC")
    parser.add_argument("-r", "--receiver", default=DEFAULT_RECEIVER, help=f"Receiver address (default: {DEFAULT_RECEIVER})")
    parser.add_argument("--sender", default=DEFAULT_SENDER, help=f"Sender address (default: {DEFAULT_SENDER})")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def configure_logging():
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt='%H:%M:%S')


def main(argv=None):
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging()

    try:
        receiver = parse_address(args.receiver)
        sender = parse_address(args.sender)
    except ValueError as exc:
        parser.error(str(exc))

    publisher = OscPublisher(receiver=receiver, sender=sender)
    monitor = BatteryMonitor(AdbDumpSource(), publisher)

    def signal_handler(sig, frame):
        """Stop polling on SIGINT (Ctrl+C) or SIGTERM"""
        log.info("Shutting down...")
        monitor.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    with publisher:
        start_server()
        log.info("Sending to %s, press Ctrl+C to stop", args.receiver)
        monitor.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
