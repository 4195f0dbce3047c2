"""
Schema validation for contributed tables.

Checks that every expected column is present and that each column's declared
type belongs to the expected type class. Observed types come either from a
Spark schema or from inspecting plain row dicts.
"""

import math
from typing import Any, Iterable

from pyspark.sql.types import (
    BooleanType,
    ByteType,
    DateType,
    DecimalType,
    DoubleType,
    FloatType,
    IntegerType,
    LongType,
    NullType,
    ShortType,
    StringType,
    StructType,
    TimestampType,
)

from survey_curation.core.errors import StructuralError
from survey_curation.core.models import MissingColumn, SchemaViolation, WrongType
from survey_curation.observability.logger import get_logger

logger = get_logger(__name__)

# Observed type names accepted by each expected type class.
# "null" is a column with no non-blank value; its type is undecidable.
ACCEPTED_TYPES = {
    "numeric": {"integer", "numeric", "null"},
    "integer_or_categorical": {"integer", "text", "null"},
    "text_or_categorical": {"text", "null"},
    "any": {"integer", "numeric", "text", "boolean", "date", "null", "other"},
}

# Widening order used when one column holds several kinds of value
_WIDENING = ["null", "integer", "numeric", "text"]


def observed_types_from_spark(schema: StructType) -> dict[str, str]:
    """
    Map a Spark schema onto observed type names.

    Args:
        schema: Spark StructType of the source DataFrame

    Returns:
        Column name -> observed type name
    """
    observed = {}
    for field in schema.fields:
        data_type = field.dataType
        if isinstance(data_type, (IntegerType, LongType, ShortType, ByteType)):
            observed[field.name] = "integer"
        elif isinstance(data_type, (DoubleType, FloatType, DecimalType)):
            observed[field.name] = "numeric"
        elif isinstance(data_type, StringType):
            observed[field.name] = "text"
        elif isinstance(data_type, BooleanType):
            observed[field.name] = "boolean"
        elif isinstance(data_type, (DateType, TimestampType)):
            observed[field.name] = "date"
        elif isinstance(data_type, NullType):
            observed[field.name] = "null"
        else:
            observed[field.name] = "other"
    return observed


def _value_type(value: Any, blank_markers: frozenset[str]) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "null" if math.isnan(value) else "numeric"
    if isinstance(value, str):
        text = value.strip()
        if text in blank_markers:
            return "null"
        try:
            int(text)
            return "integer"
        except ValueError:
            pass
        try:
            float(text)
            return "numeric"
        except ValueError:
            return "text"
    return "other"


def infer_observed_types(
    rows: Iterable[dict[str, Any]],
    blank_markers: frozenset[str] = frozenset({""}),
) -> dict[str, str]:
    """
    Infer observed column types from plain row dicts.

    Numeric-looking text is read as a number, the way a CSV reader with
    schema inference would.

    Args:
        rows: Table rows keyed by column name
        blank_markers: Text values treated as blank

    Returns:
        Column name -> observed type name
    """
    observed: dict[str, str] = {}
    for row in rows:
        for column, value in row.items():
            value_type = _value_type(value, blank_markers)
            current = observed.get(column, "null")
            if current == value_type or value_type == "null":
                observed.setdefault(column, current)
                continue
            if current in _WIDENING and value_type in _WIDENING:
                observed[column] = max(current, value_type, key=_WIDENING.index)
            elif current == "null":
                observed[column] = value_type
            else:
                observed[column] = "text"
    return observed


class SchemaValidator:
    """
    Checks a table's columns against an expected-type manifest.

    Never mutates or coerces the table: type coercion is the
    FieldNormalizer's job. A non-empty report is fatal to the run.
    """

    def __init__(self, manifest: dict[str, str]):
        """
        Args:
            manifest: Column name -> expected type class
                      (numeric, integer_or_categorical, text_or_categorical, any)
        """
        unknown = {c: t for c, t in manifest.items() if t not in ACCEPTED_TYPES}
        if unknown:
            raise ValueError(f"Unknown expected type class(es): {unknown}")
        self.manifest = dict(manifest)

    def validate(self, observed: dict[str, str]) -> list[SchemaViolation]:
        """
        Report every violation, in manifest order.

        Args:
            observed: Column name -> observed type name

        Returns:
            List of MissingColumn / WrongType violations (empty when valid)
        """
        violations: list[SchemaViolation] = []
        for column, expected in self.manifest.items():
            if column not in observed:
                violations.append(MissingColumn(column=column))
                continue
            observed_type = observed[column]
            if observed_type not in ACCEPTED_TYPES[expected]:
                violations.append(WrongType(column=column, expected=expected, observed=observed_type))
        return violations

    def ensure_valid(self, observed: dict[str, str]) -> None:
        """
        Raise StructuralError when the table violates the manifest.

        Raises:
            StructuralError: With the full violation list
        """
        violations = self.validate(observed)
        if violations:
            for violation in violations:
                logger.error(f"Schema violation: {violation}")
            raise StructuralError(violations)


def refine_text_columns(
    observed: dict[str, str],
    rows: Iterable[dict[str, Any]],
    blank_markers: frozenset[str],
) -> dict[str, str]:
    """
    Re-type the columns a reader could only call text.

    Spark types a numeric column holding "NA" or "NaN" cells as a string
    column. Such columns are inferred again from their values with the
    dataset's blank markers set aside.

    Returns:
        A new observed-type mapping
    """
    text_columns = [column for column, kind in observed.items() if kind == "text"]
    if not text_columns:
        return dict(observed)
    refined = infer_observed_types(
        ({column: row.get(column) for column in text_columns} for row in rows),
        blank_markers,
    )
    changed = {column: kind for column, kind in refined.items() if kind != observed[column]}
    if changed:
        logger.debug("Text columns re-typed after blank markers", extra={"columns": changed})
    return {**observed, **refined}
