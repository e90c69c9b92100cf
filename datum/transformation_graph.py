"""
Datum Transformation Graph.

Each datum owns two registries of transformations to other datums:

- geocentric: datum-to-datum operations on (X, Y, Z) meters
- geographic: operations on (lat, lon, h) radians/meters, each datum's
  longitudes counted from its own prime meridian

Registering a geocentric transformation A→B also registers its inverse
B→A and the derived geographic sequence. Paths that are not registered are
built on demand through the reference datum (WGS 84), which acts as a pivot,
and cached.

Concurrency
-----------
:class:`TransformationRegistry` is the resolution context owning the graphs.
One re-entrant lock makes every check → compute → insert sequence atomic, so
concurrent resolutions of the same pair cannot corrupt the registries.
Read-only lookups never extend the graph.
"""

import threading
from typing import Dict, List, Optional, Tuple

from common.exceptions import NonInvertibleOperationError
from common.identifiers import Identifier
from common.logging_config import ResolutionAudit, SkipReason, get_logger
from datum.geodetic_datum import WGS84, GeodeticDatum
from operations.base import CoordinateOperation, GeoTransformation, Identity
from operations.geocentric import Geocentric2Geographic, Geographic2Geocentric
from operations.longitude_rotation import LongitudeRotation
from operations.sequence import CoordinateOperationSequence
from transformations.sequence import GeocentricTransformationSequence

logger = get_logger(__name__)


def _add_unique(bucket: List[CoordinateOperation], op: CoordinateOperation) -> bool:
    """Append ``op`` unless an equal operation is present. True if added."""
    if op in bucket:
        return False
    bucket.append(op)
    return True


class DatumTransformationGraph:
    """Registries of the transformations from one datum to the others.

    Buckets keep insertion order and contain no two equal operations.
    """

    def __init__(self, datum: GeodeticDatum):
        self.datum = datum
        self.geocentric: Dict[GeodeticDatum, List[GeoTransformation]] = {}
        self.geographic: Dict[GeodeticDatum, List[CoordinateOperation]] = {}

    def geocentric_bucket(self, target: GeodeticDatum) -> List[GeoTransformation]:
        return self.geocentric.setdefault(target, [])

    def geographic_bucket(self, target: GeodeticDatum) -> List[CoordinateOperation]:
        return self.geographic.setdefault(target, [])

    def forget(self, datum: GeodeticDatum) -> None:
        self.geocentric.pop(datum, None)
        self.geographic.pop(datum, None)

    def __repr__(self) -> str:
        return (
            f"DatumTransformationGraph({self.datum.short_name}, "
            f"geocentric={sum(map(len, self.geocentric.values()))}, "
            f"geographic={sum(map(len, self.geographic.values()))})"
        )


class TransformationRegistry:
    """Resolution context holding the transformation graph of every datum.

    Parameters
    ----------
    reference_datum : GeodeticDatum
        Pivot datum, WGS 84 by default. The ``to_reference`` transformation
        of a datum is taken to target this datum.
    audit : ResolutionAudit, optional
        Recorder of the derivations skipped while populating the graph.

    Examples
    --------
    >>> from datum.geodetic_datum import NTF, ED50
    >>> registry = TransformationRegistry()
    >>> len(registry.get_geocentric_transformations(NTF, ED50))
    1
    """

    def __init__(
        self,
        reference_datum: GeodeticDatum = WGS84,
        audit: Optional[ResolutionAudit] = None
    ):
        self.reference_datum = reference_datum
        self.audit = audit if audit is not None else ResolutionAudit(logger)
        self._graphs: Dict[GeodeticDatum, DatumTransformationGraph] = {}
        self._default_references: List[Tuple[GeodeticDatum, GeoTransformation]] = []
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Graph access
    # ------------------------------------------------------------------

    def graph(self, datum: GeodeticDatum) -> DatumTransformationGraph:
        with self._lock:
            graph = self._graphs.get(datum)
            if graph is None:
                graph = DatumTransformationGraph(datum)
                self._graphs[datum] = graph
            return graph

    def reference_transformation(self, datum: GeodeticDatum) -> Optional[GeoTransformation]:
        """Default transformation from ``datum`` to the reference datum."""
        with self._lock:
            for known, op in self._default_references:
                if known == datum:
                    return op
        return datum.to_reference

    def set_default_reference_transformation(self, datum: GeodeticDatum, op: GeoTransformation) -> None:
        """Override the transformation of ``datum`` to the reference datum.

        The transformation is registered in the graph immediately.
        """
        with self._lock:
            self._default_references = [
                (d, o) for d, o in self._default_references if d != datum
            ]
            self._default_references.append((datum, op))
            self.add_geocentric_transformation(datum, self.reference_datum, op)

    def lookup_geocentric(self, source: GeodeticDatum, target: GeodeticDatum) -> Tuple[GeoTransformation, ...]:
        """Registered geocentric transformations, without deriving any."""
        with self._lock:
            graph = self._graphs.get(source)
            if graph is None:
                return ()
            return tuple(graph.geocentric.get(target, ()))

    def lookup_geographic(self, source: GeodeticDatum, target: GeodeticDatum) -> Tuple[CoordinateOperation, ...]:
        """Registered geographic transformations, without deriving any."""
        with self._lock:
            graph = self._graphs.get(source)
            if graph is None:
                return ()
            return tuple(graph.geographic.get(target, ()))

    def reset(self, datum: Optional[GeodeticDatum] = None) -> None:
        """Forget the registered transformations of ``datum``, or of all datums."""
        with self._lock:
            if datum is None:
                self._graphs.clear()
                self._default_references.clear()
                return
            self._graphs.pop(datum, None)
            for graph in self._graphs.values():
                graph.forget(datum)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add_geocentric_transformation(
        self,
        source: GeodeticDatum,
        target: GeodeticDatum,
        op: GeoTransformation,
        add_inverse: bool = True
    ) -> None:
        """Register a geocentric transformation from ``source`` to ``target``.

        The derived geographic sequence is registered with it and, unless
        ``add_inverse`` is False, the inverse transformation from ``target``
        to ``source``.
        """
        with self._lock:
            added = _add_unique(self.graph(source).geocentric_bucket(target), op)

            # The inverse is registered even when op was already known, for
            # target may be an equal but distinct datum
            if add_inverse:
                try:
                    inverse = op.inverse()
                except NonInvertibleOperationError as e:
                    self.audit.record(
                        target.short_name, source.short_name, op.name,
                        SkipReason.NON_INVERTIBLE, str(e)
                    )
                else:
                    self.add_geocentric_transformation(target, source, inverse, add_inverse=False)

            if not added:
                return
            _add_unique(
                self.graph(source).geographic_bucket(target),
                self._geographic_sequence(source, target, op)
            )

    def add_geographic_transformation(
        self,
        source: GeodeticDatum,
        target: GeodeticDatum,
        op: CoordinateOperation,
        add_inverse: bool = True
    ) -> None:
        """Register a geographic transformation (radians, each datum's meridian)."""
        with self._lock:
            if not _add_unique(self.graph(source).geographic_bucket(target), op):
                return
            if add_inverse:
                try:
                    inverse = op.inverse()
                except NonInvertibleOperationError as e:
                    self.audit.record(
                        target.short_name, source.short_name, op.name,
                        SkipReason.NON_INVERTIBLE, str(e)
                    )
                else:
                    self.add_geographic_transformation(target, source, inverse, add_inverse=False)

    @staticmethod
    def _geographic_sequence(
        source: GeodeticDatum,
        target: GeodeticDatum,
        op: GeoTransformation
    ) -> CoordinateOperationSequence:
        identifier = Identifier.local(
            "Sequence",
            f"Geographic transformation from {source.short_name} to {target.short_name}"
        )
        to_greenwich = LongitudeRotation(source.prime_meridian.longitude_from_greenwich)
        from_greenwich = LongitudeRotation(target.prime_meridian.longitude_from_greenwich).inverse()
        if op.is_identity() and source.ellipsoid == target.ellipsoid:
            # Only the prime meridian may differ
            return CoordinateOperationSequence(identifier, to_greenwich, from_greenwich)
        return CoordinateOperationSequence(
            identifier,
            to_greenwich,
            Geographic2Geocentric(source.ellipsoid),
            op,
            Geocentric2Geographic(target.ellipsoid),
            from_greenwich
        )

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def get_geocentric_transformations(
        self,
        source: GeodeticDatum,
        target: GeodeticDatum
    ) -> List[GeoTransformation]:
        """Geocentric transformations from ``source`` to ``target``.

        Registered transformations are returned as they are. Otherwise the
        transformation is built from the default reference transformations,
        through the reference datum when neither datum is the reference, and
        registered. An empty list means no path was found.
        """
        with self._lock:
            registered = self.lookup_geocentric(source, target)
            if registered:
                return list(registered)

            reference = self.reference_datum
            if target == reference:
                op = self.reference_transformation(source)
                if op is None:
                    self._no_reference(source, target, source)
                else:
                    self.add_geocentric_transformation(source, target, op)
            elif source == reference:
                op = self.reference_transformation(target)
                if op is None:
                    self._no_reference(source, target, target)
                else:
                    try:
                        inverse = op.inverse()
                    except NonInvertibleOperationError as e:
                        self.audit.record(
                            source.short_name, target.short_name, op.name,
                            SkipReason.NON_INVERTIBLE, str(e)
                        )
                    else:
                        self.add_geocentric_transformation(source, target, inverse)
            else:
                self._pivot_geocentric(source, target)

            return list(self.lookup_geocentric(source, target))

    def _pivot_geocentric(self, source: GeodeticDatum, target: GeodeticDatum) -> None:
        reference = self.reference_datum
        source_legs = self.get_geocentric_transformations(source, reference)
        target_legs = self.get_geocentric_transformations(target, reference)
        for op1 in source_legs:
            for op2 in target_legs:
                try:
                    combined = self._combine_geocentric(op1, op2)
                except NonInvertibleOperationError as e:
                    self.audit.record(
                        source.short_name, target.short_name, op2.name,
                        SkipReason.NON_INVERTIBLE, str(e)
                    )
                    continue
                self.add_geocentric_transformation(source, target, combined)

    @staticmethod
    def _combine_geocentric(op1: GeoTransformation, op2: GeoTransformation) -> GeoTransformation:
        """op1 (A→REF) followed by the inverse of op2 (B→REF)."""
        if op1 == op2 or (op1.is_identity() and op2.is_identity()):
            return Identity.IDENTITY
        if op1.is_identity():
            return op2.inverse()
        if op2.is_identity():
            return op1
        return GeocentricTransformationSequence(None, op1, op2.inverse())

    def get_geographic_transformations(
        self,
        source: GeodeticDatum,
        target: GeodeticDatum
    ) -> List[CoordinateOperation]:
        """Geographic transformations from ``source`` to ``target``.

        The geocentric resolution runs first and registers the derived
        geographic sequences. When it leaves no geographic path, the
        geographic transformations of both datums to the reference datum
        (grid shifts for instance) are combined through the pivot.
        """
        with self._lock:
            self.get_geocentric_transformations(source, target)
            registered = self.lookup_geographic(source, target)
            if registered:
                return list(registered)

            reference = self.reference_datum
            if source != reference and target != reference:
                source_legs = self.get_geographic_transformations(source, reference)
                target_legs = self.get_geographic_transformations(target, reference)
                for op1 in source_legs:
                    for op2 in target_legs:
                        try:
                            combined = self._combine_geographic(op1, op2)
                        except NonInvertibleOperationError as e:
                            self.audit.record(
                                source.short_name, target.short_name, op2.name,
                                SkipReason.NON_INVERTIBLE, str(e)
                            )
                            continue
                        self.add_geographic_transformation(source, target, combined)

            return list(self.lookup_geographic(source, target))

    @staticmethod
    def _combine_geographic(op1: CoordinateOperation, op2: CoordinateOperation) -> CoordinateOperation:
        if op1 == op2 or (op1.is_identity() and op2.is_identity()):
            return Identity.IDENTITY
        return CoordinateOperationSequence(None, op1, op2.inverse())

    def _no_reference(self, source: GeodeticDatum, target: GeodeticDatum, missing: GeodeticDatum) -> None:
        self.audit.record(
            source.short_name, target.short_name, "",
            SkipReason.NO_REFERENCE_TRANSFORMATION,
            f"{missing.short_name} has no transformation to {self.reference_datum.short_name}"
        )

    def skipped(self, source: GeodeticDatum, target: GeodeticDatum):
        """Audit records involving either datum."""
        return self.audit.records(source.short_name, target.short_name)

    def __repr__(self) -> str:
        return f"TransformationRegistry(reference={self.reference_datum.short_name}, datums={len(self._graphs)})"


_default_registry: Optional[TransformationRegistry] = None
_default_lock = threading.Lock()


def default_registry() -> TransformationRegistry:
    """Process-wide registry shared by callers that do not bring their own."""
    global _default_registry
    with _default_lock:
        if _default_registry is None:
            _default_registry = TransformationRegistry()
        return _default_registry
