# Pico Battery Bridge - Dump Parser
# Author: IntelligentToasters
# License: GNU General Public License v3.0
#
# Provides deterministic helpers for pulling raw battery readings out of the
# free-form `dumpsys` text produced by the headset, for both the headset
# battery and the two tracked controllers.
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

"""Parsing helpers for `dumpsys` battery text.

The dumps have no stable schema, so extraction works on exact,
whitespace-sensitive line prefixes.

Key functions
- extract_headset(dump: str) -> int
    Return the raw headset level (0-100) from `dumpsys battery` output.
    Raises NotFound when no `level` line exists and ParseError when its value
    is not an unsigned 8-bit integer.

- controller_block(dump: str) -> str
    Keep only the `handler:` and `battery:` lines of a
    `dumpsys pxrcontrollerservice` dump, in their original order.

- extract_controller(dump: str, side: str) -> int
- extract_controllers(dump: str) -> tuple[int, int]
    Return the raw controller readings (ticks, observed 0-5). A handler line
    and its battery line are not always adjacent, so the filtered block is
    searched with a non-greedy pattern spanning lines. Raises
    CaptureNotFound(side) when a side never matches and ParseError when the
    captured digits are not an unsigned 8-bit integer.

Notes and conventions
- Only the first match counts, for the headset line and for each controller
  side. Later matches are ignored, not reported.
- This is a heuristic over diagnostic output. A reordered dump or a third
  controller block can change which battery line pairs with which handler.
"""
from __future__ import annotations

import re
from typing import Dict, List, Tuple

from .exceptions import CaptureNotFound, NotFound, ParseError

# Line prefixes, leading whitespace included
LEVEL_KEY = "  level: "
HANDLER_KEY = "   handler: "
BATTERY_KEY = "   battery: "

LEFT = "left"
RIGHT = "right"

CONTROLLER_PATTERNS: Dict[str, re.Pattern] = {
    LEFT: re.compile(r"handler: left[.\s\S]*?battery: ([0-9]*)"),
    RIGHT: re.compile(r"handler: right[.\s\S]*?battery: ([0-9]*)"),
}

_U8_RE = re.compile(r"\+?[0-9]+")
_U8_MAX = 255


def _parse_u8(what: str, text: str) -> int:
    """Parse `text` as an unsigned 8-bit integer.

    Accepts ASCII digits with an optional leading '+', nothing else: no
    surrounding whitespace, no sign other than '+', no value above 255.
    """
    if not _U8_RE.fullmatch(text):
        raise ParseError(what, text)
    value = int(text)
    if value > _U8_MAX:
        raise ParseError(what, text)
    return value


def _lines(dump: str) -> List[str]:
    r"""Split on "\n" only, dropping one trailing "\r" per line.

    `str.splitlines` also breaks on \v, \f, \x85 and friends, which would
    cut a malformed value short instead of failing to parse it.
    """
    return [line[:-1] if line.endswith("\r") else line for line in dump.split("\n")]


def extract_headset(dump: str) -> int:
    """Return the raw headset battery level from a `dumpsys battery` dump."""
    for line in _lines(dump):
        if line.startswith(LEVEL_KEY):
            return _parse_u8("headset", line[len(LEVEL_KEY):])
    raise NotFound("failed to find headset battery level")


def controller_block(dump: str) -> str:
    lines = [
        line for line in _lines(dump)
        if line.startswith(HANDLER_KEY) or line.startswith(BATTERY_KEY)
    ]
    return "\n".join(lines)


def _search_side(block: str, side: str) -> int:
    match = CONTROLLER_PATTERNS[side].search(block)
    if match is None:
        raise CaptureNotFound(side)
    return _parse_u8(f"{side} controller", match.group(1))


def extract_controller(dump: str, side: str) -> int:
    """Return the raw reading for one controller side ('left' or 'right')."""
    if side not in CONTROLLER_PATTERNS:
        raise ValueError(f"unknown controller side: {side!r}")
    return _search_side(controller_block(dump), side)


def extract_controllers(dump: str) -> Tuple[int, int]:
    """Return `(left, right)` raw readings from a controller service dump.

    The block is filtered once and shared by both searches. Left is tried
    first, so a dump missing both sides reports the left side.
    """
    block = controller_block(dump)
    left = _search_side(block, LEFT)
    right = _search_side(block, RIGHT)
    return left, right
