"""
Coordinate Reference Systems.

A CRS ties a geodetic datum to a coordinate system: geographic (latitude,
longitude and optionally height, in angular units), geocentric (X, Y, Z) or
projected (easting, northing through a map projection).

Every CRS converts its own coordinates to and from the common geographic
form used by the transformation graph: 3D (lat, lon, h) in radians and
meters, longitudes counted from the datum's prime meridian. A pipeline
between two CRS is then

    source.to_geographic_converter()
    → datum transformation (geographic)
    → target.from_geographic_converter()

Each CRS also keeps the grid transformations registered towards other
datums and a cache of the pipelines already resolved from it.
"""

import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from common.exceptions import MalformedDefinitionError
from common.identifiers import Identifier
from common.logging_config import get_logger
from common.units import DEGREE, METER, RADIAN, Quantity, Unit
from datum.geodetic_datum import GeodeticDatum
from operations.axis import CoordinateSwitch
from operations.base import CoordinateOperation, Identity
from operations.dimension import ChangeCoordinateDimension
from operations.geocentric import Geocentric2Geographic, Geographic2Geocentric
from operations.longitude_rotation import LongitudeRotation
from operations.sequence import CoordinateOperationSequence, flatten
from operations.unit_conversion import create_unit_converter
from projections.base import Projection

logger = get_logger(__name__)


class AxisOrder(Enum):
    """Order of the horizontal axes of a geographic CRS."""

    LAT_LON = "lat_lon"
    LON_LAT = "lon_lat"


def _pipeline(name: str, operations: Sequence[CoordinateOperation]) -> CoordinateOperation:
    operations = flatten(operations)
    if not operations:
        return Identity.IDENTITY
    if len(operations) == 1:
        return operations[0]
    return CoordinateOperationSequence(Identifier.local("Sequence", name), *operations)


class GeodeticCRS(ABC):
    """Base class of the CRS built on a geodetic datum.

    Parameters
    ----------
    identifier : Identifier
        Identifier of the CRS.
    datum : GeodeticDatum
        Geodetic datum; required.

    Raises
    ------
    MalformedDefinitionError
        If ``datum`` is None.
    """

    dimension: int = 3

    def __init__(self, identifier: Identifier, datum: GeodeticDatum):
        if datum is None:
            raise MalformedDefinitionError(f"CRS {identifier.name} has no geodetic datum")
        self._identifier = identifier
        self.datum = datum
        self._grid_transformations: List[Tuple[GeodeticDatum, List[CoordinateOperation]]] = []
        self._operations_cache: Dict[Tuple[Any, Any], List[CoordinateOperation]] = {}
        self._lock = threading.RLock()

    @property
    def identifier(self) -> Identifier:
        return self._identifier

    @property
    def name(self) -> str:
        return self._identifier.name

    @abstractmethod
    def to_geographic_converter(self) -> CoordinateOperation:
        """Operation from this CRS to 3D geographic radians on its datum."""

    @abstractmethod
    def from_geographic_converter(self) -> CoordinateOperation:
        """Operation from 3D geographic radians on the datum to this CRS."""

    # ------------------------------------------------------------------
    # Grid transformations
    # ------------------------------------------------------------------

    def add_grid_transformation(self, target_datum: GeodeticDatum, op: CoordinateOperation) -> None:
        """Register a grid-based geographic transformation to ``target_datum``.

        Resolved pipelines are dropped from the cache, as they may no longer
        list every candidate.
        """
        with self._lock:
            for datum, ops in self._grid_transformations:
                if datum == target_datum:
                    if op not in ops:
                        ops.append(op)
                    break
            else:
                self._grid_transformations.append((target_datum, [op]))
            self._operations_cache.clear()

    def grid_transformations(self, target_datum: GeodeticDatum) -> Optional[List[CoordinateOperation]]:
        """Grid transformations to ``target_datum``, or None if there is none."""
        with self._lock:
            for datum, ops in self._grid_transformations:
                if datum == target_datum:
                    return list(ops)
        return None

    # ------------------------------------------------------------------
    # Operation cache
    # ------------------------------------------------------------------

    def cached_operations(self, target: 'GeodeticCRS', registry: Any = None) -> Optional[List[CoordinateOperation]]:
        with self._lock:
            ops = self._operations_cache.get((target, registry))
            return None if ops is None else list(ops)

    def cache_operations(
        self,
        target: 'GeodeticCRS',
        operations: List[CoordinateOperation],
        registry: Any = None
    ) -> List[CoordinateOperation]:
        """Store the pipelines to ``target`` unless already cached.

        Returns the cached list, which is the first one stored when two
        threads race on the same target.
        """
        with self._lock:
            return list(self._operations_cache.setdefault((target, registry), list(operations)))

    def clear_cache(self) -> None:
        with self._lock:
            self._operations_cache.clear()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, datum={self.datum.short_name!r})"


class GeographicCRS(GeodeticCRS):
    """Latitude, longitude and optionally ellipsoidal height.

    Parameters
    ----------
    identifier : Identifier
        Identifier of the CRS.
    datum : GeodeticDatum
        Geodetic datum.
    dimension : int
        2 for (lat, lon), 3 for (lat, lon, h).
    axis_order : AxisOrder
        Order of the horizontal ordinates.
    angle_unit : Unit
        Unit of latitude and longitude.
    height_unit : Unit
        Unit of the height.
    """

    def __init__(
        self,
        identifier: Identifier,
        datum: GeodeticDatum,
        dimension: int = 2,
        axis_order: AxisOrder = AxisOrder.LAT_LON,
        angle_unit: Unit = DEGREE,
        height_unit: Unit = METER
    ):
        super().__init__(identifier, datum)
        if dimension not in (2, 3):
            raise MalformedDefinitionError(f"Geographic CRS dimension must be 2 or 3, got {dimension}")
        if angle_unit.quantity is not Quantity.ANGLE:
            raise MalformedDefinitionError(f"{angle_unit.name} is not an angle unit")
        if height_unit.quantity is not Quantity.LENGTH:
            raise MalformedDefinitionError(f"{height_unit.name} is not a length unit")
        self.dimension = dimension
        self.axis_order = axis_order
        self.angle_unit = angle_unit
        self.height_unit = height_unit

    def to_geographic_converter(self) -> CoordinateOperation:
        ops: List[CoordinateOperation] = []
        if self.axis_order is AxisOrder.LON_LAT:
            ops.append(CoordinateSwitch.SWITCH_LAT_LON)
        ops.append(create_unit_converter(self.angle_unit, RADIAN, self.height_unit, METER))
        if self.dimension == 2:
            ops.append(ChangeCoordinateDimension.TO3D)
        return _pipeline(f"{self.name} to geographic", ops)

    def from_geographic_converter(self) -> CoordinateOperation:
        ops: List[CoordinateOperation] = []
        if self.dimension == 2:
            ops.append(ChangeCoordinateDimension.TO2D)
        ops.append(create_unit_converter(RADIAN, self.angle_unit, METER, self.height_unit))
        if self.axis_order is AxisOrder.LON_LAT:
            ops.append(CoordinateSwitch.SWITCH_LAT_LON)
        return _pipeline(f"Geographic to {self.name}", ops)


class GeocentricCRS(GeodeticCRS):
    """Earth-centered cartesian coordinates (X, Y, Z).

    The X axis goes through the Greenwich meridian whatever the prime
    meridian of the datum.
    """

    def __init__(self, identifier: Identifier, datum: GeodeticDatum, unit: Unit = METER):
        super().__init__(identifier, datum)
        if unit.quantity is not Quantity.LENGTH:
            raise MalformedDefinitionError(f"{unit.name} is not a length unit")
        self.unit = unit

    def _meridian_rotation(self) -> List[CoordinateOperation]:
        rotation = self.datum.prime_meridian.longitude_from_greenwich
        return [LongitudeRotation(rotation)] if rotation != 0.0 else []

    def to_geographic_converter(self) -> CoordinateOperation:
        ops: List[CoordinateOperation] = [
            create_unit_converter(self.unit, METER),
            Geocentric2Geographic(self.datum.ellipsoid),
        ]
        ops.extend(op.inverse() for op in self._meridian_rotation())
        return _pipeline(f"{self.name} to geographic", ops)

    def from_geographic_converter(self) -> CoordinateOperation:
        ops: List[CoordinateOperation] = self._meridian_rotation()
        ops.append(Geographic2Geocentric(self.datum.ellipsoid))
        ops.append(create_unit_converter(METER, self.unit))
        return _pipeline(f"Geographic to {self.name}", ops)


class ProjectedCRS(GeodeticCRS):
    """Easting and northing through a map projection.

    Parameters
    ----------
    identifier : Identifier
        Identifier of the CRS.
    datum : GeodeticDatum
        Geodetic datum; the projection should use its ellipsoid.
    projection : Projection
        Map projection, central meridian counted from the datum's prime
        meridian.
    unit : Unit
        Unit of easting and northing.
    dimension : int
        2 for (E, N), 3 for (E, N, h) with the height in meters.
    """

    def __init__(
        self,
        identifier: Identifier,
        datum: GeodeticDatum,
        projection: Projection,
        unit: Unit = METER,
        dimension: int = 2
    ):
        super().__init__(identifier, datum)
        if projection is None:
            raise MalformedDefinitionError(f"Projected CRS {identifier.name} has no projection")
        if unit.quantity is not Quantity.LENGTH:
            raise MalformedDefinitionError(f"{unit.name} is not a length unit")
        if dimension not in (2, 3):
            raise MalformedDefinitionError(f"Projected CRS dimension must be 2 or 3, got {dimension}")
        if projection.ellipsoid != datum.ellipsoid:
            logger.warning(
                f"Projection of {identifier.name} uses {projection.ellipsoid.name} "
                f"but its datum uses {datum.ellipsoid.name}"
            )
        self.projection = projection
        self.unit = unit
        self.dimension = dimension

    def to_geographic_converter(self) -> CoordinateOperation:
        ops: List[CoordinateOperation] = [
            create_unit_converter(self.unit, METER, METER, METER),
            self.projection.inverse(),
        ]
        if self.dimension == 2:
            ops.append(ChangeCoordinateDimension.TO3D)
        return _pipeline(f"{self.name} to geographic", ops)

    def from_geographic_converter(self) -> CoordinateOperation:
        ops: List[CoordinateOperation] = []
        if self.dimension == 2:
            ops.append(ChangeCoordinateDimension.TO2D)
        ops.append(self.projection)
        ops.append(create_unit_converter(METER, self.unit, METER, METER))
        return _pipeline(f"Geographic to {self.name}", ops)
