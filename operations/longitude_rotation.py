"""
Change of prime meridian.
"""

from typing import Any, Tuple

import numpy as np

from common.identifiers import Identifier
from common.types import Coordinate
from operations.base import CoordinateOperation


class LongitudeRotation(CoordinateOperation):
    """Adds ``rotation`` radians to the longitude (second ordinate).

    A rotation by the longitude of a prime meridian converts longitudes
    counted from that meridian into longitudes from Greenwich.
    """

    def __init__(self, rotation: float, identifier: Identifier = None):
        self.rotation = float(rotation)
        super().__init__(
            identifier or Identifier.local(
                "LongitudeRotation", f"Longitude rotation of {np.degrees(rotation):.9f} degrees"
            )
        )

    def _transform(self, coord: Coordinate) -> Coordinate:
        coord[1] += self.rotation
        return coord

    def inverse(self) -> 'LongitudeRotation':
        return LongitudeRotation(-self.rotation)

    def is_identity(self) -> bool:
        return self.rotation == 0.0

    def _parameters(self) -> Tuple[Any, ...]:
        return (self.rotation,)
