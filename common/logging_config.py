"""
Logging Configuration and Resolution Audit Trail.

This module provides the loggers used throughout the engine and the audit
recorder of the transformation graph.

Audit Requirements
------------------
Populating the transformation graph is best-effort: a derived path whose leg
cannot be inverted, or a datum without any reference transformation, is
logged and skipped rather than failing the resolution. When the resolution
eventually finds no path at all, the caller must be able to tell these two
situations apart. :class:`ResolutionAudit` keeps one record per skipped
derivation, tagged with a :class:`SkipReason`.
"""

import logging
import sys
import threading
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional


# Configure root logger for the package
def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Get a logger configured for the coordinate operation engine.

    Parameters
    ----------
    name : str
        Logger name (typically __name__).
    level : int
        Logging level.

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            '%(asctime)s | %(name)s | %(levelname)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


class SkipReason(Enum):
    """Why a derivation was dropped while populating the graph."""

    NON_INVERTIBLE = "non_invertible"
    """A path existed but one of its legs has no inverse."""

    NO_REFERENCE_TRANSFORMATION = "no_reference_transformation"
    """A datum has no transformation to the reference datum."""


@dataclass(frozen=True)
class SkippedDerivation:
    """Record of a derivation skipped during graph population.

    Attributes
    ----------
    timestamp : datetime
        When the derivation was skipped.
    source : str
        Name of the source datum.
    target : str
        Name of the target datum.
    operation : str
        Name of the operation that could not be used, or an empty string.
    reason : SkipReason
        Why the derivation was skipped.
    message : str
        Detail of the underlying error.
    """
    timestamp: datetime
    source: str
    target: str
    operation: str
    reason: SkipReason
    message: str = ""


class ResolutionAudit:
    """Thread-safe recorder of skipped derivations.

    Examples
    --------
    >>> audit = ResolutionAudit()
    >>> _ = audit.record("NTF", "WGS84", "grid", SkipReason.NON_INVERTIBLE)
    >>> audit.summary()
    {'non_invertible': 1}
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._records: List[SkippedDerivation] = []
        self._lock = threading.Lock()
        self._logger = logger or get_logger("audit")

    def record(
        self,
        source: str,
        target: str,
        operation: str,
        reason: SkipReason,
        message: str = ""
    ) -> SkippedDerivation:
        """Store a skipped derivation and log it at WARNING level."""
        entry = SkippedDerivation(
            timestamp=datetime.now(),
            source=source,
            target=target,
            operation=operation,
            reason=reason,
            message=message
        )
        with self._lock:
            self._records.append(entry)

        self._logger.warning(
            f"SKIPPED DERIVATION | {source} -> {target} | {reason.value} | "
            f"{operation or '-'} | {message}"
        )
        return entry

    def records(
        self,
        source: Optional[str] = None,
        target: Optional[str] = None
    ) -> List[SkippedDerivation]:
        """Snapshot of the records, optionally filtered on datum names.

        A filter on a pair matches records in either direction.
        """
        with self._lock:
            snapshot = list(self._records)
        if source is None and target is None:
            return snapshot
        names = {n for n in (source, target) if n is not None}
        return [r for r in snapshot if r.source in names or r.target in names]

    def summary(self) -> Dict[str, int]:
        """Number of records per skip reason."""
        with self._lock:
            counts = Counter(r.reason.value for r in self._records)
        return dict(counts)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
