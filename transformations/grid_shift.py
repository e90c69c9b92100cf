"""
Grid-based datum shift of geographic coordinates.
"""

from typing import Any, Optional, Tuple

import numpy as np

from common.identifiers import Identifier
from common.types import Coordinate
from operations.base import CoordinateOperation, OperationKind, PRECISION_FLOOR
from transformations.grids import GridOffsetProvider


class GridShiftTransformation(CoordinateOperation):
    """Shifts (lat, lon[, h]) radians by offsets interpolated in a grid.

    Parameters
    ----------
    provider : GridOffsetProvider
        Source of the offsets.
    forward : bool
        True to go from ``provider.from_datum`` to ``provider.to_datum``,
        False for the reverse direction.
    precision : float
        Error bound in meters.

    Notes
    -----
    Points outside the grid coverage are returned unchanged. The inverse
    uses the same provider in the other direction and is built once; the
    inverse of the inverse is this very instance.
    """

    kind = OperationKind.GRID_SHIFT

    def __init__(
        self,
        provider: GridOffsetProvider,
        forward: bool = True,
        precision: float = PRECISION_FLOOR,
        identifier: Identifier = None
    ):
        self.provider = provider
        self.forward = forward
        self._inverse: Optional['GridShiftTransformation'] = None
        direction = "" if forward else "Inverse of "
        super().__init__(
            identifier or Identifier("EPSG", 9615, f"{direction}NTv2 Geographic Offset ({provider!r})", "NTv2"),
            precision
        )

    @property
    def from_datum(self) -> str:
        """Short name of the datum the grid starts from, lowercased."""
        return self.provider.from_datum.strip().lower()

    @property
    def to_datum(self) -> str:
        return self.provider.to_datum.strip().lower()

    def load(self) -> None:
        self.provider.load()

    def unload(self) -> None:
        self.provider.unload()

    def is_loaded(self) -> bool:
        return self.provider.is_loaded()

    def _transform(self, coord: Coordinate) -> Coordinate:
        lat_deg = float(np.degrees(coord[0]))
        lon_deg = float(np.degrees(coord[1]))
        if self.forward:
            offset = self.provider.forward_lookup(lat_deg, lon_deg)
        else:
            offset = self.provider.reverse_lookup(lat_deg, lon_deg)
        if offset is None:
            return coord
        coord[0] = float(np.radians(lat_deg + offset[0]))
        coord[1] = float(np.radians(lon_deg + offset[1]))
        return coord

    def inverse(self) -> 'GridShiftTransformation':
        if self._inverse is None:
            inverse = GridShiftTransformation(self.provider, not self.forward, self.precision)
            inverse._inverse = self
            self._inverse = inverse
        return self._inverse

    def _parameters(self) -> Tuple[Any, ...]:
        return (self.provider, self.forward)
