"""
Coordinate Operation Factory.

Entry point of the engine: given a source and a target CRS, assemble every
candidate pipeline converting coordinates from one to the other.

Strategy
--------
1. Pipelines already resolved are taken from the source CRS cache.
2. Grid transformations registered on the source CRS towards the target
   datum give [source → geographic, grid shift, geographic → target]. When
   the grid starts from another datum than the source one, a transformation
   from the source datum to the grid's datum is spliced in first.
3. Otherwise grid transformations registered on the target CRS towards the
   source datum are used the same way, through their inverse.
4. Two CRS on the same datum only need [source → geographic,
   geographic → target].
5. Otherwise each geographic transformation of the graph between the two
   datums (possibly derived through the reference datum) gives one
   candidate.

Candidates are kept in this order, without duplicates, and cached on the
source CRS. Callers pick one, usually the most precise.
"""

from typing import List, Optional, Sequence

from common.exceptions import MalformedDefinitionError, NoPathFoundError, NonInvertibleOperationError
from common.identifiers import Identifier
from common.logging_config import SkipReason, get_logger
from common.types import Coordinate
from crs.reference_systems import GeodeticCRS
from datum.geodetic_datum import KNOWN_DATUMS, DatumRegistry, GeodeticDatum
from datum.transformation_graph import TransformationRegistry, default_registry
from operations.base import CoordinateOperation, OperationKind
from operations.sequence import CoordinateOperationSequence, flatten

logger = get_logger(__name__)


class CoordinateOperationFactory:
    """Resolves coordinate operations between two CRS.

    Parameters
    ----------
    registry : TransformationRegistry, optional
        Transformation graph to resolve datum transformations with; the
        process-wide registry by default.
    datums : DatumRegistry
        Known datums, used to find the datum a grid transformation starts
        from.

    Examples
    --------
    >>> factory = CoordinateOperationFactory(TransformationRegistry())
    >>> ops = factory.create_coordinate_operations(source_crs, target_crs)  # doctest: +SKIP
    >>> factory.get_most_precise(ops).transform([48.85, 2.35])  # doctest: +SKIP
    """

    def __init__(
        self,
        registry: Optional[TransformationRegistry] = None,
        datums: DatumRegistry = KNOWN_DATUMS
    ):
        self.registry = registry if registry is not None else default_registry()
        self.datums = datums

    def create_coordinate_operations(
        self,
        source: GeodeticCRS,
        target: GeodeticCRS
    ) -> List[CoordinateOperation]:
        """All candidate pipelines from ``source`` to ``target``.

        Raises
        ------
        MalformedDefinitionError
            If a CRS is missing.
        NoPathFoundError
            If no pipeline could be assembled. The error carries the
            derivations skipped while resolving the datum pair.
        """
        if source is None or target is None:
            raise MalformedDefinitionError("Source and target CRS are required")

        cached = source.cached_operations(target, self.registry)
        if cached is not None:
            return cached

        source_datum = source.datum
        target_datum = target.datum
        candidates: List[CoordinateOperation] = []

        grids = source.grid_transformations(target_datum)
        if grids:
            self._add_grid_operations(source, target, grids, candidates)
        else:
            grids = target.grid_transformations(source_datum)
            if grids:
                self._add_inverse_grid_operations(source, target, grids, candidates)

        if source_datum == target_datum:
            self._add_candidate(candidates, source, target, [])
        else:
            for op in self.registry.get_geographic_transformations(source_datum, target_datum):
                self._add_candidate(candidates, source, target, [op], through=op.name)

        if not candidates:
            raise NoPathFoundError(
                source.name, target.name, self.registry.skipped(source_datum, target_datum)
            )

        logger.info(f"Resolved {len(candidates)} operation(s) from {source.name} to {target.name}")
        return source.cache_operations(target, candidates, self.registry)

    resolve = create_coordinate_operations

    # ------------------------------------------------------------------
    # Candidate assembly
    # ------------------------------------------------------------------

    @staticmethod
    def _add_candidate(
        candidates: List[CoordinateOperation],
        source: GeodeticCRS,
        target: GeodeticCRS,
        datum_operations: Sequence[CoordinateOperation],
        through: str = ""
    ) -> None:
        name = f"{source.name} to {target.name}"
        if through:
            name += f" through {through}"
        operations = flatten([
            source.to_geographic_converter(),
            *datum_operations,
            target.from_geographic_converter(),
        ])
        candidate = CoordinateOperationSequence(Identifier.local("Sequence", name), *operations)
        if candidate not in candidates:
            candidates.append(candidate)

    def _datum_named(self, name: str) -> Optional[GeodeticDatum]:
        datum = self.datums.get(name)
        if datum is None:
            logger.warning(f"Grid transformation starts from unknown datum {name!r}")
        return datum

    def _first_geographic(self, source: GeodeticDatum, target: GeodeticDatum) -> Optional[CoordinateOperation]:
        if source == target:
            return None
        ops = self.registry.get_geographic_transformations(source, target)
        if not ops:
            self.registry.audit.record(
                source.short_name, target.short_name, "",
                SkipReason.NO_REFERENCE_TRANSFORMATION,
                "no transformation to reach the datum of a grid"
            )
            return None
        return ops[0]

    def _add_grid_operations(
        self,
        source: GeodeticCRS,
        target: GeodeticCRS,
        grids: Sequence[CoordinateOperation],
        candidates: List[CoordinateOperation]
    ) -> None:
        source_datum = source.datum
        for op in grids:
            if op.kind is OperationKind.GRID_SHIFT and op.from_datum != source_datum.short_name.lower():
                grid_source = self._datum_named(op.from_datum)
                if grid_source is None:
                    continue
                if grid_source == source_datum:
                    self._add_candidate(candidates, source, target, [op], through=op.name)
                    continue
                leg = self._first_geographic(source_datum, grid_source)
                if leg is None:
                    continue
                self._add_candidate(candidates, source, target, [leg, op], through=op.name)
            else:
                self._add_candidate(candidates, source, target, [op], through=op.name)

    def _add_inverse_grid_operations(
        self,
        source: GeodeticCRS,
        target: GeodeticCRS,
        grids: Sequence[CoordinateOperation],
        candidates: List[CoordinateOperation]
    ) -> None:
        target_datum = target.datum
        for op in grids:
            try:
                inverse = op.inverse()
            except NonInvertibleOperationError as e:
                self.registry.audit.record(
                    source.datum.short_name, target_datum.short_name, op.name,
                    SkipReason.NON_INVERTIBLE, str(e)
                )
                continue
            if op.kind is OperationKind.GRID_SHIFT and op.from_datum != target_datum.short_name.lower():
                grid_source = self._datum_named(op.from_datum)
                if grid_source is None:
                    continue
                if grid_source == target_datum:
                    self._add_candidate(candidates, source, target, [inverse], through=inverse.name)
                    continue
                leg = self._first_geographic(grid_source, target_datum)
                if leg is None:
                    continue
                self._add_candidate(candidates, source, target, [inverse, leg], through=inverse.name)
            else:
                self._add_candidate(candidates, source, target, [inverse], through=inverse.name)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    @staticmethod
    def get_most_precise(operations: Sequence[CoordinateOperation]) -> Optional[CoordinateOperation]:
        """The operation with the smallest precision, or None if empty.

        Ties go to the first operation.
        """
        best = None
        for op in operations:
            if best is None or op.precision < best.precision:
                best = op
        return best

    def transform(self, source: GeodeticCRS, target: GeodeticCRS, coord: Coordinate) -> Coordinate:
        """Transform ``coord`` with the most precise pipeline."""
        return self.get_most_precise(self.create_coordinate_operations(source, target)).transform(coord)
