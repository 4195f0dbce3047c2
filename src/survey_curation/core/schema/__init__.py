"""
Schema gate: column presence and declared type checks.
"""

from .schema_validator import (
    SchemaValidator,
    infer_observed_types,
    observed_types_from_spark,
    refine_text_columns,
)

__all__ = [
    "SchemaValidator",
    "infer_observed_types",
    "observed_types_from_spark",
    "refine_text_columns",
]
