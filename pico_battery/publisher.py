# Pico Battery Bridge - OSC Publisher
# Author: IntelligentToasters
# License: GNU General Public License v3.0
#
# Encodes normalized battery levels as OSC avatar parameters and sends them
# over UDP to a local receiver.
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

"""pico_battery.publisher

OscPublisher: owns a single UDP socket, bound once to the sender address,
and sends three OSC messages per cycle (headset, left controller, right
controller) to the receiver. Each message carries one float32 argument.

All three messages are encoded before the first one is sent, so an encoding
problem never leaves a cycle half published. Failures surface as
`EncodeError` / `SendError`; callers are not expected to recover from them.
"""
from __future__ import annotations

import logging
import socket
from typing import List, Optional, Tuple

from pythonosc.osc_message import OscMessage
from pythonosc.osc_message_builder import BuildError, OscMessageBuilder

from .exceptions import EncodeError, SendError
from .levels import BatteryLevels

log = logging.getLogger(__name__)

Address = Tuple[str, int]

DEFAULT_RECEIVER = "127.0.0.1:9000"
DEFAULT_SENDER = "127.0.0.1:9003"

HEADSET_ADDRESS = "/avatar/parameters/BatteryLevelHeadset"
CONTROLLER_LEFT_ADDRESS = "/avatar/parameters/BatteryLevelControllerLeft"
CONTROLLER_RIGHT_ADDRESS = "/avatar/parameters/BatteryLevelControllerRight"


def parse_address(value: str) -> Address:
    """Split `host:port` into a socket address tuple."""
    host, sep, port = value.rpartition(":")
    if not sep or not host:
        raise ValueError(f"expected host:port, got {value!r}")
    try:
        port_num = int(port)
    except ValueError:
        raise ValueError(f"invalid port in {value!r}") from None
    if not 0 <= port_num <= 65535:
        raise ValueError(f"port out of range in {value!r}")
    return host, port_num


def encode_message(address: str, value: float) -> OscMessage:
    builder = OscMessageBuilder(address=address)
    builder.add_arg(value, OscMessageBuilder.ARG_TYPE_FLOAT)
    try:
        return builder.build()
    except BuildError as exc:
        raise EncodeError(f"failed to encode {address}: {exc}") from exc


def build_messages(levels: BatteryLevels) -> List[OscMessage]:
    """Encode the three level messages in fixed order: headset, left, right."""
    return [
        encode_message(HEADSET_ADDRESS, levels.headset),
        encode_message(CONTROLLER_LEFT_ADDRESS, levels.left_controller),
        encode_message(CONTROLLER_RIGHT_ADDRESS, levels.right_controller),
    ]


class OscPublisher:
    """Send battery levels to an OSC receiver over UDP."""

    def __init__(self, receiver: Address, sender: Address, sock: Optional[socket.socket] = None):
        self.receiver = receiver
        self.sender = sender
        if sock is None:
            sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            try:
                sock.bind(sender)
            except OSError:
                sock.close()
                raise
        self._sock = sock
        log.debug("OSC socket bound to %s:%s, sending to %s:%s", *sender, *receiver)

    def publish(self, levels: BatteryLevels) -> None:
        messages = build_messages(levels)
        for msg in messages:
            try:
                self._sock.sendto(msg.dgram, self.receiver)
            except OSError as exc:
                raise SendError(f"failed to send {msg.address} to {self.receiver[0]}:{self.receiver[1]}: {exc}") from exc
            log.debug("sent %s %s", msg.address, msg.params)

    def close(self) -> None:
        try:
            self._sock.close()
        except OSError as exc:
            log.debug("socket close failed: %s", exc)

    def __enter__(self) -> "OscPublisher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
