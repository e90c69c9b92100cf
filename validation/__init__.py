"""
Validation framework for coordinate operations.

This module provides runtime checks of operations and transformation graphs
and a cross-check of projections against PROJ.
"""

from validation.round_trip import RoundTripChecker, ValidationResult
from validation.reference import ProjReferenceChecker

__all__ = [
    "RoundTripChecker",
    "ValidationResult",
    "ProjReferenceChecker",
]
