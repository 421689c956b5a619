# Pico Battery Bridge - Battery Levels
# Author: IntelligentToasters
# License: GNU General Public License v3.0
#
# Converts raw device readings into normalized 0.0-1.0 battery levels.
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

"""Normalized battery levels.

The headset reports a percentage, the controllers report ticks out of 5.
`normalize` divides each reading by its scale and does NOT clamp: a reading
above its scale (e.g. a headset level of 150) comes through as a value above
1.0, exactly as the device reported it.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict

HEADSET_SCALE = 100
CONTROLLER_SCALE = 5


@dataclass(frozen=True, slots=True)
class BatteryLevels:
    """One poll cycle's worth of normalized levels."""

    headset: float
    left_controller: float
    right_controller: float

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)

    def __str__(self) -> str:
        return (
            f"headset={self.headset:.2f} "
            f"left={self.left_controller:.2f} "
            f"right={self.right_controller:.2f}"
        )


def normalize(headset_raw: int, left_raw: int, right_raw: int) -> BatteryLevels:
    return BatteryLevels(
        headset=headset_raw / HEADSET_SCALE,
        left_controller=left_raw / CONTROLLER_SCALE,
        right_controller=right_raw / CONTROLLER_SCALE,
    )
