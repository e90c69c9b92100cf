"""
Three-parameter datum shift.
"""

from typing import Any, Tuple

from common.identifiers import Identifier
from common.types import Coordinate
from operations.base import GeoTransformation, PRECISION_FLOOR


class GeocentricTranslation(GeoTransformation):
    """Translation of geocentric coordinates: X' = X + tx, Y' = Y + ty, Z' = Z + tz.

    Parameters
    ----------
    tx, ty, tz : float
        Translation in meters.
    precision : float
        Error bound of the published parameters, in meters.
    identifier : Identifier, optional
        Defaults to the EPSG method (9603).
    """

    def __init__(
        self,
        tx: float,
        ty: float,
        tz: float,
        precision: float = PRECISION_FLOOR,
        identifier: Identifier = None
    ):
        self.tx = float(tx)
        self.ty = float(ty)
        self.tz = float(tz)
        super().__init__(
            identifier or Identifier(
                "EPSG", 9603, f"Geocentric translation ({tx}, {ty}, {tz})", "Translation"
            ),
            precision
        )

    def _transform(self, coord: Coordinate) -> Coordinate:
        return [coord[0] + self.tx, coord[1] + self.ty, coord[2] + self.tz]

    def inverse(self) -> 'GeocentricTranslation':
        return GeocentricTranslation(-self.tx, -self.ty, -self.tz, self.precision)

    def is_identity(self) -> bool:
        return self.tx == 0.0 and self.ty == 0.0 and self.tz == 0.0

    def _parameters(self) -> Tuple[Any, ...]:
        return (self.tx, self.ty, self.tz)

    def to_wkt(self) -> str:
        return f",TOWGS84[{self.tx:g},{self.ty:g},{self.tz:g}]"
