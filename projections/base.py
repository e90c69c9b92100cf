"""
Map Projections.

This module defines the contract every map projection satisfies and the
machinery they share: the parameter map, classification of the projection
surface and of the preserved property, the cached inverse, and numerical
distortion analysis.

Scientific Context
------------------
Domain: Cartography, mathematical geodesy
Model: Conformal and equal-area projections of an ellipsoid

1. No flat map can perfectly represent a curved surface.
2. Different projections preserve different properties:
   - Conformal: preserves angles (shapes of small figures)
   - Equal-area: preserves area
   - Equidistant: preserves distance along specific lines

Conventions
-----------
A projection transforms (lat, lon[, h]) in radians, longitudes counted from
the datum's prime meridian, into (x, y[, h]) in meters. The height passes
through unchanged.

References
----------
- Snyder, J.P. (1987). Map Projections - A Working Manual. USGS Prof. Paper 1395.
- IOGP Guidance Note 7-2 (EPSG coordinate conversions).
- Tissot, A. (1859). Mémoire sur la représentation des surfaces.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

import numpy as np

from common.exceptions import IllegalCoordinateError, MalformedDefinitionError
from common.identifiers import Identifier
from common.types import Coordinate
from common.units import DEGREE, METER, UNIT, Measure, Quantity
from datum.ellipsoid import Ellipsoid
from operations.base import CoordinateOperation, OperationKind


class Parameter:
    """Names of projection parameters."""

    LATITUDE_OF_ORIGIN = "latitude_of_origin"
    CENTRAL_MERIDIAN = "central_meridian"
    STANDARD_PARALLEL_1 = "standard_parallel_1"
    STANDARD_PARALLEL_2 = "standard_parallel_2"
    LATITUDE_OF_TRUE_SCALE = "latitude_of_true_scale"
    SCALE_FACTOR = "scale_factor"
    FALSE_EASTING = "false_easting"
    FALSE_NORTHING = "false_northing"
    AZIMUTH = "azimuth"
    RECTIFIED_GRID_ANGLE = "rectified_grid_angle"

    ANGLES = frozenset({
        LATITUDE_OF_ORIGIN, CENTRAL_MERIDIAN, STANDARD_PARALLEL_1, STANDARD_PARALLEL_2,
        LATITUDE_OF_TRUE_SCALE, AZIMUTH, RECTIFIED_GRID_ANGLE,
    })
    LENGTHS = frozenset({FALSE_EASTING, FALSE_NORTHING})


class Surface(Enum):
    """Developable surface of the projection."""

    CONICAL = "conical"
    CYLINDRICAL = "cylindrical"
    AZIMUTHAL = "azimuthal"
    PSEUDOCYLINDRICAL = "pseudocylindrical"


class Property(Enum):
    """Property preserved by the projection."""

    CONFORMAL = "conformal"
    EQUAL_AREA = "equal_area"
    EQUIDISTANT = "equidistant"
    APHYLACTIC = "aphylactic"


class Orientation(Enum):
    """Orientation of the developable surface."""

    TANGENT = "tangent"
    SECANT = "secant"


def _default_measure(name: str) -> Measure:
    if name == Parameter.SCALE_FACTOR:
        return Measure(1.0, UNIT)
    if name in Parameter.LENGTHS:
        return Measure(0.0, METER)
    return Measure(0.0, DEGREE)


def _check_parameters(parameters: Mapping[str, Measure]) -> None:
    for name, measure in parameters.items():
        if not isinstance(measure, Measure):
            raise MalformedDefinitionError(f"Projection parameter {name} must be a Measure")
        if name in Parameter.ANGLES and measure.unit.quantity is not Quantity.ANGLE:
            raise MalformedDefinitionError(f"Projection parameter {name} must be an angle")
        if name in Parameter.LENGTHS and measure.unit.quantity is not Quantity.LENGTH:
            raise MalformedDefinitionError(f"Projection parameter {name} must be a length")
        if not np.isfinite(measure.value):
            raise MalformedDefinitionError(f"Projection parameter {name} is not finite")


class Projection(CoordinateOperation, ABC):
    """Base class of map projections.

    Parameters
    ----------
    identifier : Identifier
        Identifier of the projection method.
    ellipsoid : Ellipsoid
        Ellipsoid being projected.
    parameters : mapping of str to Measure
        Projection parameters keyed by :class:`Parameter` names. Missing
        parameters default to 0 (1 for the scale factor).
    """

    kind = OperationKind.PROJECTION
    surface: Surface = Surface.CYLINDRICAL
    projection_property: Property = Property.CONFORMAL
    orientation: Orientation = Orientation.TANGENT

    def __init__(
        self,
        identifier: Identifier,
        ellipsoid: Ellipsoid,
        parameters: Mapping[str, Measure]
    ):
        _check_parameters(parameters)
        super().__init__(identifier)
        self.ellipsoid = ellipsoid
        self._parameters_map: Mapping[str, Measure] = MappingProxyType(dict(parameters))
        self._inverse: Optional[InverseProjection] = None

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    @property
    def parameters(self) -> Mapping[str, Measure]:
        return self._parameters_map

    def parameter(self, name: str) -> Measure:
        return self._parameters_map.get(name) or _default_measure(name)

    @property
    def latitude_of_origin(self) -> float:
        """Latitude of origin in radians."""
        return self.parameter(Parameter.LATITUDE_OF_ORIGIN).to_si()

    @property
    def central_meridian(self) -> float:
        """Central meridian in radians from the datum's prime meridian."""
        return self.parameter(Parameter.CENTRAL_MERIDIAN).to_si()

    @property
    def standard_parallel_1(self) -> float:
        return self.parameter(Parameter.STANDARD_PARALLEL_1).to_si()

    @property
    def standard_parallel_2(self) -> float:
        return self.parameter(Parameter.STANDARD_PARALLEL_2).to_si()

    @property
    def latitude_of_true_scale(self) -> float:
        return self.parameter(Parameter.LATITUDE_OF_TRUE_SCALE).to_si()

    @property
    def scale_factor(self) -> float:
        return self.parameter(Parameter.SCALE_FACTOR).to_si()

    @property
    def false_easting(self) -> float:
        """False easting in meters."""
        return self.parameter(Parameter.FALSE_EASTING).to_si()

    @property
    def false_northing(self) -> float:
        """False northing in meters."""
        return self.parameter(Parameter.FALSE_NORTHING).to_si()

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    @property
    def preserves_angles(self) -> bool:
        """Whether this is a conformal projection."""
        return self.projection_property is Property.CONFORMAL

    @property
    def preserves_area(self) -> bool:
        """Whether this is an equal-area projection."""
        return self.projection_property is Property.EQUAL_AREA

    # ------------------------------------------------------------------
    # Projection math
    # ------------------------------------------------------------------

    @property
    @abstractmethod
    def proj4_string(self) -> str:
        """PROJ.4 definition string."""

    @abstractmethod
    def to_projected(self, lat_rad: float, lon_rad: float) -> Tuple[float, float]:
        """Transform geodetic coordinates to projected coordinates.

        Parameters
        ----------
        lat_rad, lon_rad : float
            Geodetic coordinates in radians.

        Returns
        -------
        Tuple[float, float]
            (x, y) projected coordinates in meters.
        """

    @abstractmethod
    def to_geodetic(self, x: float, y: float) -> Tuple[float, float]:
        """Transform projected coordinates to geodetic.

        Parameters
        ----------
        x, y : float
            Projected coordinates in meters.

        Returns
        -------
        Tuple[float, float]
            (lat_rad, lon_rad) geodetic coordinates in radians.
        """

    def _ellipsoid_proj4(self) -> str:
        return (
            f"+a={self.ellipsoid.a!r} +b={self.ellipsoid.b!r} "
            f"+x_0={self.false_easting!r} +y_0={self.false_northing!r} +units=m +no_defs"
        )

    def _transform(self, coord: Coordinate) -> Coordinate:
        if np.isnan(coord[0]) or np.isnan(coord[1]):
            raise IllegalCoordinateError(f"{self.name} cannot project {coord}")
        coord[0], coord[1] = self.to_projected(coord[0], coord[1])
        return coord

    def inverse(self) -> 'InverseProjection':
        if self._inverse is None:
            self._inverse = InverseProjection(self)
        return self._inverse

    # ------------------------------------------------------------------
    # Equality
    # ------------------------------------------------------------------

    def _parameters(self) -> Tuple[Any, ...]:
        values = tuple(sorted((name, m.to_si()) for name, m in self._parameters_map.items()))
        return (self.ellipsoid, values)

    def __repr__(self) -> str:
        params = ", ".join(
            f"{name}={m.value}" for name, m in sorted(self._parameters_map.items())
        )
        return f"{type(self).__name__}({self.ellipsoid.name}, {params})"


class InverseProjection(CoordinateOperation):
    """(x, y[, h]) meters -> (lat, lon[, h]) radians through a projection.

    Its inverse is the projection it was built from.
    """

    kind = OperationKind.PROJECTION

    def __init__(self, projection: Projection):
        self.projection = projection
        super().__init__(
            Identifier.local("InverseProjection", f"Inverse of {projection.name}"),
            projection.precision
        )

    def _transform(self, coord: Coordinate) -> Coordinate:
        if np.isnan(coord[0]) or np.isnan(coord[1]):
            raise IllegalCoordinateError(f"{self.name} cannot unproject {coord}")
        coord[0], coord[1] = self.projection.to_geodetic(coord[0], coord[1])
        return coord

    def inverse(self) -> Projection:
        return self.projection

    def _parameters(self) -> Tuple[Any, ...]:
        return (self.projection,)


# ---------------------------------------------------------------------------
# Distortion analysis
# ---------------------------------------------------------------------------

@dataclass
class TissotIndicatrix:
    """Tissot's indicatrix describing local distortion at a point.

    Attributes
    ----------
    meridian_scale : float
        h: scale factor along the meridian.
    parallel_scale : float
        k: scale factor along the parallel.
    area_scale : float
        Area distortion factor.
    angular_distortion_rad : float
        Maximum angular distortion in radians.

    Notes
    -----
    - For a conformal projection: h = k (no angular distortion)
    - For an equal-area projection: area_scale = 1.0
    """
    meridian_scale: float
    parallel_scale: float
    area_scale: float
    angular_distortion_rad: float

    @property
    def is_conformal(self) -> bool:
        return np.abs(self.meridian_scale - self.parallel_scale) < 1e-6

    @property
    def is_equal_area(self) -> bool:
        return np.abs(self.area_scale - 1.0) < 1e-6


def compute_tissot_indicatrix(
    projection: Projection,
    lat_rad: float,
    lon_rad: float,
    delta: float = 1e-6
) -> TissotIndicatrix:
    """Compute Tissot's indicatrix numerically.

    The partial derivatives of the projection are estimated by central
    differences and scaled by the ellipsoid's radii of curvature.

    Parameters
    ----------
    projection : Projection
        The projection to analyze.
    lat_rad, lon_rad : float
        Location in geodetic coordinates (radians).
    delta : float
        Small angular offset for numerical differentiation.
    """
    x_e, y_e = projection.to_projected(lat_rad, lon_rad + delta)
    x_w, y_w = projection.to_projected(lat_rad, lon_rad - delta)
    dxdl = (x_e - x_w) / (2 * delta)
    dydl = (y_e - y_w) / (2 * delta)

    x_n, y_n = projection.to_projected(lat_rad + delta, lon_rad)
    x_s, y_s = projection.to_projected(lat_rad - delta, lon_rad)
    dxdp = (x_n - x_s) / (2 * delta)
    dydp = (y_n - y_s) / (2 * delta)

    M = projection.ellipsoid.radius_of_curvature_meridian(lat_rad)
    N = projection.ellipsoid.radius_of_curvature_prime_vertical(lat_rad)
    parallel_radius = N * np.cos(lat_rad)

    h = np.hypot(dxdp, dydp) / M
    k = np.hypot(dxdl, dydl) / parallel_radius

    # Jacobian determinant over the ellipsoid area element
    area_scale = np.abs(dxdp * dydl - dydp * dxdl) / (M * parallel_radius)

    # a' + b' and a' - b' from h, k and the area scale
    sum_ab = np.sqrt(max(h * h + k * k + 2 * area_scale, 0.0))
    diff_ab = np.sqrt(max(h * h + k * k - 2 * area_scale, 0.0))
    omega = 2 * np.arcsin(np.clip(diff_ab / sum_ab, -1.0, 1.0)) if sum_ab > 0 else 0.0

    return TissotIndicatrix(
        meridian_scale=float(h),
        parallel_scale=float(k),
        area_scale=float(area_scale),
        angular_distortion_rad=float(omega)
    )


def degrees(rad: float) -> float:
    """Radians to degrees as a plain float (for PROJ strings)."""
    return float(np.degrees(rad))
