"""
Snapping coordinates to a resolution.
"""

from typing import Any, Tuple

import numpy as np

from common.exceptions import MalformedDefinitionError, NonInvertibleOperationError
from common.identifiers import Identifier
from common.types import Coordinate
from operations.base import CoordinateOperation


class CoordinateRounding(CoordinateOperation):
    """Rounds each finite ordinate to the nearest multiple of ``resolution``.

    Ties go to the even multiple (``numpy.rint``). NaN ordinates pass
    through. Rounding destroys information and has no inverse.
    """

    dimensions = (1, 2, 3)

    MILLIMETER: 'CoordinateRounding'
    CENTIMETER: 'CoordinateRounding'
    DECIMETER: 'CoordinateRounding'
    METER: 'CoordinateRounding'
    KILOMETER: 'CoordinateRounding'

    def __init__(self, resolution: float, identifier: Identifier = None):
        if not np.isfinite(resolution) or resolution <= 0:
            raise MalformedDefinitionError(f"Rounding resolution must be positive, got {resolution}")
        self.resolution = float(resolution)
        super().__init__(
            identifier or Identifier.local("Rounding", f"Rounding to {resolution}"),
            resolution / 2
        )

    @classmethod
    def from_decimal_places(cls, places: int) -> 'CoordinateRounding':
        """Rounding to ``places`` decimals (a negative count rounds to tens...)."""
        return cls(10.0 ** -places, Identifier.local("Rounding", f"Rounding to {places} decimal places"))

    def _transform(self, coord: Coordinate) -> Coordinate:
        for i, value in enumerate(coord):
            if np.isfinite(value):
                coord[i] = float(np.rint(value / self.resolution) * self.resolution)
        return coord

    def inverse(self) -> CoordinateOperation:
        raise NonInvertibleOperationError(self.name, "rounding loses information")

    def _parameters(self) -> Tuple[Any, ...]:
        return (self.resolution,)


CoordinateRounding.MILLIMETER = CoordinateRounding(0.001, Identifier("LOCAL", "ROUND_MM", "Rounding to millimeter"))
CoordinateRounding.CENTIMETER = CoordinateRounding(0.01, Identifier("LOCAL", "ROUND_CM", "Rounding to centimeter"))
CoordinateRounding.DECIMETER = CoordinateRounding(0.1, Identifier("LOCAL", "ROUND_DM", "Rounding to decimeter"))
CoordinateRounding.METER = CoordinateRounding(1.0, Identifier("LOCAL", "ROUND_M", "Rounding to meter"))
CoordinateRounding.KILOMETER = CoordinateRounding(1000.0, Identifier("LOCAL", "ROUND_KM", "Rounding to kilometer"))
