"""
Exception taxonomy of the coordinate operation engine.

Every error raised by the engine derives from :class:`GeodesyError`, so a
caller can trap the whole family at once. Classes that describe a bad input
value additionally derive from :class:`ValueError`; non-convergence of an
iterative algorithm derives from :class:`ArithmeticError`.
"""

from typing import Any, List, Optional, Sequence


class GeodesyError(Exception):
    """Base class of all coordinate operation errors."""


class CoordinateDimensionError(GeodesyError, ValueError):
    """The coordinate arity does not match what the operation accepts.

    Parameters
    ----------
    operation : str
        Name of the operation that rejected the coordinate.
    expected : sequence of int
        Accepted arities.
    actual : int
        Arity of the rejected coordinate.
    """

    def __init__(self, operation: str, expected: Sequence[int], actual: int):
        self.operation = operation
        self.expected = tuple(expected)
        self.actual = actual
        super().__init__(
            f"{operation} expects a coordinate with "
            f"{' or '.join(str(d) for d in self.expected)} ordinates, got {actual}"
        )


class NonInvertibleOperationError(GeodesyError):
    """``inverse()`` was requested on an operation that has none."""

    def __init__(self, operation: str, reason: str = ""):
        self.operation = operation
        message = f"{operation} is not invertible"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class OutOfExtentError(GeodesyError):
    """A geographic point lies outside the domain of a bounded object."""

    def __init__(self, lat: float, lon: float, extent: str = ""):
        self.lat = lat
        self.lon = lon
        self.extent = extent
        where = f" {extent}" if extent else ""
        super().__init__(f"Point (lat={lat}, lon={lon}) is outside the extent of{where or ' the domain'}")


class NoPathFoundError(GeodesyError):
    """No candidate pipeline could be assembled between two CRS.

    Attributes
    ----------
    source : str
        Name of the source CRS.
    target : str
        Name of the target CRS.
    skipped : list
        Derivations that were attempted and skipped while resolving
        (:class:`common.logging_config.SkippedDerivation` records).
    """

    def __init__(self, source: str, target: str, skipped: Optional[List[Any]] = None):
        self.source = source
        self.target = target
        self.skipped = list(skipped or [])
        message = f"No coordinate operation found from {source} to {target}"
        if self.skipped:
            message += f" ({len(self.skipped)} derivation(s) skipped)"
        super().__init__(message)


class MalformedDefinitionError(GeodesyError, ValueError):
    """An ellipsoid, datum, CRS or operation definition is inconsistent."""


class ConvergenceError(GeodesyError, ArithmeticError):
    """An iterative algorithm exceeded its iteration bound."""

    def __init__(self, algorithm: str, iterations: int, residual: float):
        self.algorithm = algorithm
        self.iterations = iterations
        self.residual = residual
        super().__init__(
            f"{algorithm} did not converge after {iterations} iterations "
            f"(last residual {residual:.3e})"
        )


class IllegalCoordinateError(GeodesyError, ValueError):
    """A coordinate value is not acceptable input (e.g. NaN for a projection)."""


class ValidationError(GeodesyError):
    """A runtime validation check failed in strict mode."""
