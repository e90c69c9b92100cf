"""
Axis order switch (latitude/longitude <-> longitude/latitude).
"""

from typing import Any, Tuple

from common.identifiers import Identifier
from common.types import Coordinate
from operations.base import CoordinateOperation


class CoordinateSwitch(CoordinateOperation):
    """Swaps the first two ordinates. Self-inverse.

    Use the shared instance :attr:`SWITCH_LAT_LON`.
    """

    SWITCH_LAT_LON: 'CoordinateSwitch'

    def _transform(self, coord: Coordinate) -> Coordinate:
        coord[0], coord[1] = coord[1], coord[0]
        return coord

    def inverse(self) -> 'CoordinateSwitch':
        return self

    def _parameters(self) -> Tuple[Any, ...]:
        return (0, 1)


CoordinateSwitch.SWITCH_LAT_LON = CoordinateSwitch(
    Identifier("LOCAL", "SWITCH_LAT_LON", "Switch latitude and longitude")
)
