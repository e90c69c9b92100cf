"""
Type Definitions for Coordinates.

Operations consume and produce ordered tuples of one to three floats in a
fixed convention: radians for angles, metres for lengths. NaN is a valid
ordinate meaning "absent dimension" and is propagated unchanged by unit and
rounding operations.

Design Rationale
----------------
Coordinates travel through the engine as plain lists so an operation can
return a fresh list without imposing a container type on callers. :func:`as_coordinate` is
how an operation takes its private float copy of any input sequence or
array. The :class:`GeographicPoint` dataclass is a convenience for the
boundaries of the system (validation, reference cross-checks) where named
fields read better than indices.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union

import numpy as np

Coordinate = List[float]
CoordinateLike = Union[Sequence[float], np.ndarray]


def as_coordinate(values: CoordinateLike) -> Coordinate:
    """Copy any sequence of numbers into a new coordinate list."""
    return [float(v) for v in values]


@dataclass(frozen=True)
class GeographicPoint:
    """A geographic position relative to some datum.

    Attributes
    ----------
    latitude : float
        Geodetic latitude in RADIANS. Range: [-π/2, π/2].
    longitude : float
        Longitude in RADIANS from the datum's prime meridian.
    height : float, optional
        Ellipsoidal height in METERS. Default is 0.

    Examples
    --------
    >>> point = GeographicPoint.from_degrees(-12.791, 45.118)
    >>> lat_deg, lon_deg = point.to_degrees()
    >>> print(f"{lat_deg:.3f}, {lon_deg:.3f}")
    -12.791, 45.118
    """
    latitude: float  # radians
    longitude: float  # radians
    height: float = 0.0  # meters above ellipsoid

    def __post_init__(self):
        if not -np.pi / 2 - 1e-12 <= self.latitude <= np.pi / 2 + 1e-12:
            raise ValueError(
                f"Latitude {self.latitude} rad out of range [-π/2, π/2]. "
                f"Did you pass degrees instead of radians?"
            )

    def to_degrees(self) -> Tuple[float, float]:
        """(latitude_degrees, longitude_degrees)"""
        return float(np.degrees(self.latitude)), float(np.degrees(self.longitude))

    @classmethod
    def from_degrees(cls, lat_deg: float, lon_deg: float, height: float = 0.0) -> 'GeographicPoint':
        return cls(
            latitude=float(np.radians(lat_deg)),
            longitude=float(np.radians(lon_deg)),
            height=height
        )

    def as_coordinate(self, dimension: int = 3) -> Coordinate:
        """The point as a (lat, lon[, h]) coordinate list in radians/metres."""
        if dimension == 2:
            return [self.latitude, self.longitude]
        return [self.latitude, self.longitude, self.height]
