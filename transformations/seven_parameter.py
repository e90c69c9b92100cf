"""
Seven-Parameter (Bursa-Wolf) Datum Transformation.

Linearized 3D similarity between two geocentric frames: three translations,
three small rotations and a scale difference.

Scientific Context
------------------
With rotations expressed in radians and ds the scale difference, the
position vector convention (EPSG 1033) reads

    X' = tx + (1 + ds)·X -    rz·Y +    ry·Z
    Y' = ty +    rz·X + (1 + ds)·Y -    rx·Z
    Z' = tz -    ry·X +    rx·Y + (1 + ds)·Z

The coordinate frame convention (EPSG 1032) is the same formula with the
three rotations negated. The small-angle model is itself an approximation,
so the inverse simply negates all seven parameters.

Writing the transformation X' = T + (I + S)·X, the negated inverse brings
X back to (I - S²)·X - S·T. With k = |ds| + ‖r‖ bounding the norm of S, a
round trip is off by at most k²·|X| + k·|T|. That bound, taken for |X| up
to MAX_GEOCENTRIC_RADIUS, is the least precision of each direction.

References
----------
- IOGP Guidance Note 7-2, section 2.4.3.3
"""

import math
from enum import Enum
from typing import Any, Tuple

from common.constants import GeodeticConstants
from common.identifiers import Identifier
from common.types import Coordinate
from common.units import ARC_SECOND, PPM, RADIAN, UNIT
from operations.base import GeoTransformation, PRECISION_FLOOR


class RotationConvention(Enum):
    """Sign convention of the rotation parameters."""

    POSITION_VECTOR = "position_vector"
    COORDINATE_FRAME = "coordinate_frame"


class SevenParameterTransformation(GeoTransformation):
    """Bursa-Wolf transformation.

    Parameters
    ----------
    tx, ty, tz : float
        Translations in meters.
    rx, ry, rz : float
        Rotations in radians.
    ds : float
        Scale difference (unitless, e.g. 1e-6 for 1 ppm).
    convention : RotationConvention
        Sign convention of ``rx``, ``ry``, ``rz``.
    precision : float
        Error bound in meters. Raised to :meth:`inversion_bound` when lower.
    """

    def __init__(
        self,
        tx: float,
        ty: float,
        tz: float,
        rx: float,
        ry: float,
        rz: float,
        ds: float,
        convention: RotationConvention = RotationConvention.POSITION_VECTOR,
        precision: float = PRECISION_FLOOR,
        identifier: Identifier = None
    ):
        self.tx, self.ty, self.tz = float(tx), float(ty), float(tz)
        self.rx, self.ry, self.rz = float(rx), float(ry), float(rz)
        self.ds = float(ds)
        self.convention = convention
        if precision is not None:
            precision = max(precision, self.inversion_bound())
        code = 1033 if convention is RotationConvention.POSITION_VECTOR else 1032
        super().__init__(
            identifier or Identifier(
                "EPSG", code, f"Seven-parameter transformation ({convention.value})", "BursaWolf"
            ),
            precision
        )

    @classmethod
    def create_bursa_wolf_transformation(
        cls,
        tx: float,
        ty: float,
        tz: float,
        rx_arcsec: float,
        ry_arcsec: float,
        rz_arcsec: float,
        ds_ppm: float,
        precision: float = PRECISION_FLOOR
    ) -> 'SevenParameterTransformation':
        """Position vector transformation from published parameters.

        Rotations are given in arc-seconds and the scale in ppm.
        """
        return cls(
            tx, ty, tz,
            ARC_SECOND.convert(rx_arcsec, RADIAN),
            ARC_SECOND.convert(ry_arcsec, RADIAN),
            ARC_SECOND.convert(rz_arcsec, RADIAN),
            PPM.convert(ds_ppm, UNIT),
            RotationConvention.POSITION_VECTOR,
            precision
        )

    @classmethod
    def create_coordinate_frame_transformation(
        cls,
        tx: float,
        ty: float,
        tz: float,
        rx_arcsec: float,
        ry_arcsec: float,
        rz_arcsec: float,
        ds_ppm: float,
        precision: float = PRECISION_FLOOR
    ) -> 'SevenParameterTransformation':
        """Coordinate frame rotation from published parameters."""
        return cls(
            tx, ty, tz,
            ARC_SECOND.convert(rx_arcsec, RADIAN),
            ARC_SECOND.convert(ry_arcsec, RADIAN),
            ARC_SECOND.convert(rz_arcsec, RADIAN),
            PPM.convert(ds_ppm, UNIT),
            RotationConvention.COORDINATE_FRAME,
            precision
        )

    def inversion_bound(self) -> float:
        """Round trip error bound, in meters, of this transformation and its inverse."""
        k = abs(self.ds) + math.sqrt(self.rx ** 2 + self.ry ** 2 + self.rz ** 2)
        t = math.sqrt(self.tx ** 2 + self.ty ** 2 + self.tz ** 2)
        return k * k * GeodeticConstants.MAX_GEOCENTRIC_RADIUS.value + k * t

    def _rotations(self) -> Tuple[float, float, float]:
        """Rotations in the position vector convention."""
        if self.convention is RotationConvention.COORDINATE_FRAME:
            return -self.rx, -self.ry, -self.rz
        return self.rx, self.ry, self.rz

    def _transform(self, coord: Coordinate) -> Coordinate:
        X, Y, Z = coord
        rx, ry, rz = self._rotations()
        k = 1.0 + self.ds
        return [
            self.tx + k * X - rz * Y + ry * Z,
            self.ty + rz * X + k * Y - rx * Z,
            self.tz - ry * X + rx * Y + k * Z,
        ]

    def inverse(self) -> 'SevenParameterTransformation':
        return SevenParameterTransformation(
            -self.tx, -self.ty, -self.tz,
            -self.rx, -self.ry, -self.rz,
            -self.ds,
            self.convention,
            self.precision
        )

    def is_identity(self) -> bool:
        return all(v == 0.0 for v in (self.tx, self.ty, self.tz, self.rx, self.ry, self.rz, self.ds))

    def _parameters(self) -> Tuple[Any, ...]:
        rx, ry, rz = self._rotations()
        return (self.tx, self.ty, self.tz, rx, ry, rz, self.ds)

    def to_wkt(self) -> str:
        """TOWGS84 clause, rotations in arc-seconds (position vector) and scale in ppm."""
        rx, ry, rz = (RADIAN.convert(r, ARC_SECOND) for r in self._rotations())
        values = [self.tx, self.ty, self.tz, rx, ry, rz, UNIT.convert(self.ds, PPM)]
        return ",TOWGS84[" + ",".join(f"{v:g}" for v in values) + "]"

