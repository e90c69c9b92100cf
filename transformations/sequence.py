"""
Composite datum transformation.
"""

from typing import Optional

from common.identifiers import Identifier
from operations.base import GeoTransformation, OperationKind
from operations.sequence import CoordinateOperationSequence


class GeocentricTransformationSequence(CoordinateOperationSequence, GeoTransformation):
    """A sequence of geo-transformations that is itself a geo-transformation.

    Built by the transformation graph when a path goes through the pivot
    datum: ``GeocentricTransformationSequence(None, a_to_ref, b_to_ref.inverse())``.
    """

    kind = OperationKind.GEO_TRANSFORMATION

    def __init__(self, identifier: Optional[Identifier], *operations: GeoTransformation):
        super().__init__(identifier, *operations)

    def inverse(self) -> 'GeocentricTransformationSequence':
        identifier = Identifier.local("Sequence", f"Inverse of {self.name}")
        return GeocentricTransformationSequence(identifier, *self._inverse_operations())

    def to_wkt(self) -> str:
        return "".join(op.to_wkt() for op in self.operations if isinstance(op, GeoTransformation))
