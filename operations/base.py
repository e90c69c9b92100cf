"""
Coordinate Operation Contract.

A coordinate operation maps a coordinate (1 to 3 ordinates, radians for
angles and meters for lengths) to another coordinate. Operations are
immutable: ``transform`` returns a new list and never modifies its input,
and ``inverse`` returns another operation instead of mutating this one.

Every operation carries a ``kind`` tag (:class:`OperationKind`) so that code
assembling pipelines can dispatch on the tag rather than on concrete
classes, and a ``precision``, the error bound of the operation in meters.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional, Tuple

from common.constants import GeodeticConstants
from common.exceptions import CoordinateDimensionError, NonInvertibleOperationError
from common.identifiers import Identifier
from common.types import Coordinate, CoordinateLike, as_coordinate

PRECISION_FLOOR = GeodeticConstants.DEFAULT_PRECISION.value


class OperationKind(Enum):
    """Tag of the operation variants."""

    IDENTITY = "identity"
    CONVERSION = "conversion"
    PROJECTION = "projection"
    GEO_TRANSFORMATION = "geo_transformation"
    GRID_SHIFT = "grid_shift"
    SEQUENCE = "sequence"


class CoordinateOperation(ABC):
    """Base class of all coordinate operations.

    Parameters
    ----------
    identifier : Identifier
        Identifier of the operation.
    precision : float
        Error bound in meters. Values under 1e-9 (zero and negatives
        included) are raised to 1e-9.

    Notes
    -----
    Subclasses implement :meth:`_transform`, which receives a private copy
    of the input already checked against :attr:`dimensions`, and
    :meth:`_parameters`, the tuple that defines value equality.
    """

    kind: OperationKind = OperationKind.CONVERSION
    dimensions: Tuple[int, ...] = (2, 3)

    def __init__(self, identifier: Identifier, precision: float = PRECISION_FLOOR):
        self._identifier = identifier
        if precision is None or not precision >= PRECISION_FLOOR:
            precision = PRECISION_FLOOR
        self._precision = float(precision)

    @property
    def identifier(self) -> Identifier:
        return self._identifier

    @property
    def name(self) -> str:
        return self._identifier.name

    @property
    def precision(self) -> float:
        return self._precision

    def check_dimension(self, coord: CoordinateLike) -> None:
        if len(coord) not in self.dimensions:
            raise CoordinateDimensionError(self.name, self.dimensions, len(coord))

    def transform(self, coord: CoordinateLike) -> Coordinate:
        """Apply the operation.

        Parameters
        ----------
        coord : sequence of float or numpy.ndarray
            Input coordinate. It is not modified.

        Returns
        -------
        list of float
            The transformed coordinate.

        Raises
        ------
        CoordinateDimensionError
            If the arity of ``coord`` is not in :attr:`dimensions`.
        """
        self.check_dimension(coord)
        return self._transform(as_coordinate(coord))

    @abstractmethod
    def _transform(self, coord: Coordinate) -> Coordinate:
        """Transform a private copy of the input (may be modified in place)."""

    def inverse(self) -> 'CoordinateOperation':
        """The inverse operation.

        Raises
        ------
        NonInvertibleOperationError
            If the operation has no inverse.
        """
        raise NonInvertibleOperationError(self.name)

    def is_identity(self) -> bool:
        return False

    def _parameters(self) -> Optional[Tuple[Any, ...]]:
        """Values defining equality, or None for identity-based equality."""
        return None

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, CoordinateOperation):
            return NotImplemented
        if type(self) is not type(other):
            return False
        params = self._parameters()
        return params is not None and params == other._parameters()

    def __hash__(self) -> int:
        params = self._parameters()
        if params is None:
            return id(self)
        return hash((type(self).__name__, params))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class GeoTransformation(CoordinateOperation):
    """A datum-to-datum transformation of 3D geocentric coordinates.

    Transformations that reduce to the identity compare equal whatever
    their concrete class.
    """

    kind = OperationKind.GEO_TRANSFORMATION
    dimensions = (3,)

    def to_wkt(self) -> str:
        """The TOWGS84 clause of the transformation ('' when identity)."""
        return ""

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if isinstance(other, GeoTransformation) and self.is_identity() and other.is_identity():
            return True
        return super().__eq__(other)

    def __hash__(self) -> int:
        if self.is_identity():
            return hash(OperationKind.IDENTITY)
        return super().__hash__()


class Identity(GeoTransformation):
    """The operation that leaves every coordinate unchanged.

    Use the shared instance :attr:`Identity.IDENTITY`.
    """

    kind = OperationKind.IDENTITY
    dimensions = (1, 2, 3)

    IDENTITY: 'Identity'

    def __init__(self):
        super().__init__(Identifier("LOCAL", "Identity", "Identity"))

    def _transform(self, coord: Coordinate) -> Coordinate:
        return coord

    def inverse(self) -> 'Identity':
        return self

    def is_identity(self) -> bool:
        return True

    def _parameters(self) -> Tuple[Any, ...]:
        return ()

    def to_wkt(self) -> str:
        return ",TOWGS84[0,0,0]"


Identity.IDENTITY = Identity()