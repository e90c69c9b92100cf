"""
Ordered composition of coordinate operations.
"""

from typing import Any, List, Optional, Sequence, Tuple

from common.exceptions import NonInvertibleOperationError
from common.identifiers import Identifier
from common.types import Coordinate
from operations.base import CoordinateOperation, OperationKind


class CoordinateOperationSequence(CoordinateOperation):
    """A list of operations applied left to right.

    Parameters
    ----------
    identifier : Identifier, optional
        Identifier of the sequence; built from the element names if omitted.
    *operations : CoordinateOperation
        Elements, in application order.

    Notes
    -----
    The precision of a sequence is the sum of the precisions of its
    elements. Its inverse is the reversed list of the element inverses.
    """

    kind = OperationKind.SEQUENCE

    def __init__(self, identifier: Optional[Identifier], *operations: CoordinateOperation):
        self._operations: Tuple[CoordinateOperation, ...] = tuple(operations)
        if identifier is None:
            identifier = Identifier.local(
                "Sequence", " | ".join(op.name for op in self._operations) or "Empty sequence"
            )
        super().__init__(identifier, sum(op.precision for op in self._operations))

    @property
    def operations(self) -> Tuple[CoordinateOperation, ...]:
        return self._operations

    @property
    def dimensions(self) -> Tuple[int, ...]:
        if not self._operations:
            return (1, 2, 3)
        return self._operations[0].dimensions

    def _transform(self, coord: Coordinate) -> Coordinate:
        for op in self._operations:
            coord = op.transform(coord)
        return coord

    def _inverse_operations(self) -> List[CoordinateOperation]:
        inverses = []
        for op in reversed(self._operations):
            try:
                inverses.append(op.inverse())
            except NonInvertibleOperationError as e:
                raise NonInvertibleOperationError(self.name, f"element {op.name} has no inverse") from e
        return inverses

    def inverse(self) -> 'CoordinateOperationSequence':
        identifier = Identifier.local("Sequence", f"Inverse of {self.name}")
        return CoordinateOperationSequence(identifier, *self._inverse_operations())

    def is_identity(self) -> bool:
        return all(op.is_identity() for op in self._operations)

    def _parameters(self) -> Tuple[Any, ...]:
        return self._operations

    def __len__(self) -> int:
        return len(self._operations)

    def __iter__(self):
        return iter(self._operations)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({[op.name for op in self._operations]})"


def flatten(operations: Sequence[CoordinateOperation]) -> List[CoordinateOperation]:
    """Inline nested plain sequences and drop identities.

    Returns ``[]`` when every element is an identity.
    """
    flat: List[CoordinateOperation] = []
    for op in operations:
        if type(op) is CoordinateOperationSequence:
            flat.extend(flatten(op.operations))
        elif op.kind is not OperationKind.IDENTITY:
            flat.append(op)
    return flat
