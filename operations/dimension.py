"""
Arity adapters between 2D and 3D coordinates.
"""

from typing import Any, Tuple

from common.identifiers import Identifier
from common.types import Coordinate
from operations.base import CoordinateOperation


class ChangeCoordinateDimension(CoordinateOperation):
    """Adds or drops the trailing (height) ordinate.

    Only the two shared instances :attr:`TO3D` and :attr:`TO2D` exist; each
    is the inverse of the other. Both accept 2D and 3D input: a coordinate
    already at the target arity passes through unchanged.
    """

    dimensions = (2, 3)

    TO3D: 'ChangeCoordinateDimension'
    TO2D: 'ChangeCoordinateDimension'

    def __init__(self, identifier: Identifier, target_dimension: int):
        super().__init__(identifier)
        self.target_dimension = target_dimension

    def _transform(self, coord: Coordinate) -> Coordinate:
        if self.target_dimension == 3 and len(coord) == 2:
            coord.append(0.0)
        elif self.target_dimension == 2 and len(coord) == 3:
            del coord[2]
        return coord

    def inverse(self) -> 'ChangeCoordinateDimension':
        if self.target_dimension == 3:
            return ChangeCoordinateDimension.TO2D
        return ChangeCoordinateDimension.TO3D

    def _parameters(self) -> Tuple[Any, ...]:
        return (self.target_dimension,)


ChangeCoordinateDimension.TO3D = ChangeCoordinateDimension(
    Identifier("LOCAL", "TO3D", "Change coordinate dimension to 3D", "TO3D"), 3
)
ChangeCoordinateDimension.TO2D = ChangeCoordinateDimension(
    Identifier("LOCAL", "TO2D", "Change coordinate dimension to 2D", "TO2D"), 2
)
