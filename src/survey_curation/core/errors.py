"""
Failure taxonomy for a curation run.

Structural and aggregation errors are fatal to the run. Field and taxonomy
errors are per record: the record is dropped, the reason is recorded and the
batch continues. Geometry errors only suppress the spatial summary.
"""

from typing import Any


class CurationError(Exception):
    """Base class for every error raised by the curation pipeline."""


class StructuralError(CurationError):
    """Raised when the input table fails the schema gate."""

    def __init__(self, violations: list[Any]):
        self.violations = violations
        details = "; ".join(str(v) for v in violations)
        super().__init__(f"{len(violations)} schema violation(s): {details}")


class TaxonomyError(CurationError):
    """Raised when a taxon label cannot be decomposed."""

    UNPARSABLE_LABEL = "UnparsableLabel"

    def __init__(self, reason: str, label: Any, message: str | None = None):
        self.reason = reason
        self.label = label
        self.message = message or f"Cannot parse taxon label {label!r}"
        super().__init__(f"[{reason}] {self.message}")


class AggregationInvariantViolation(CurationError):
    """Raised when duplicate (sample key, family, genus, species) tuples survive aggregation."""

    def __init__(self, duplicates: list[tuple[str, str, str, str]]):
        self.duplicates = duplicates
        super().__init__(
            f"{len(duplicates)} duplicate species/sample tuple(s) after aggregation: {duplicates[:5]}"
        )


class GeometryError(CurationError):
    """Raised when the coordinate set cannot produce a spatial summary."""
