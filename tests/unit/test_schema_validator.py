"""
Unit tests for the schema gate.
"""

import pytest
from pyspark.sql.types import (
    DoubleType,
    IntegerType,
    StringType,
    StructField,
    StructType,
)

from survey_curation.core.errors import StructuralError
from survey_curation.core.models import MissingColumn, WrongType
from survey_curation.core.schema import (
    SchemaValidator,
    infer_observed_types,
    observed_types_from_spark,
    refine_text_columns,
)

MANIFEST = {
    "Count": "numeric",
    "Species": "text_or_categorical",
    "Year": "integer_or_categorical",
    "Site": "any",
}


@pytest.mark.unit
class TestSchemaValidator:
    """Tests for SchemaValidator"""

    def test_valid_table_has_no_violations(self):
        """Test a table matching the manifest"""
        observed = {"Count": "integer", "Species": "text", "Year": "integer", "Site": "text"}

        assert SchemaValidator(MANIFEST).validate(observed) == []

    def test_missing_column(self):
        """Test an expected column absent from the table"""
        observed = {"Count": "numeric", "Species": "text", "Year": "integer"}

        violations = SchemaValidator(MANIFEST).validate(observed)

        assert violations == [MissingColumn(column="Site")]

    def test_wrong_type(self):
        """Test a text measurement column is reported with both types"""
        observed = {"Count": "text", "Species": "text", "Year": "integer", "Site": "text"}

        violations = SchemaValidator(MANIFEST).validate(observed)

        assert violations == [WrongType(column="Count", expected="numeric", observed="text")]
        assert "expected numeric" in str(violations[0])

    def test_continuous_temporal_field_rejected(self):
        """Test a year column of floats is not integer-or-categorical"""
        observed = {"Count": "numeric", "Species": "text", "Year": "numeric", "Site": "text"}

        violations = SchemaValidator(MANIFEST).validate(observed)

        assert [v.column for v in violations] == ["Year"]

    def test_categorical_temporal_field_accepted(self):
        """Test month names are a valid temporal column"""
        validator = SchemaValidator({"Month": "integer_or_categorical"})

        assert validator.validate({"Month": "text"}) == []

    def test_numeric_taxon_rejected(self):
        """Test a numeric taxon column is reported"""
        validator = SchemaValidator({"Species": "text_or_categorical"})

        assert validator.validate({"Species": "integer"}) == [
            WrongType(column="Species", expected="text_or_categorical", observed="integer")
        ]

    def test_all_violations_reported(self):
        """Test the report lists every violation, not just the first"""
        violations = SchemaValidator(MANIFEST).validate({"Count": "text"})

        assert len(violations) == 4

    def test_ensure_valid_raises_structural_error(self):
        """Test a non-empty report is fatal"""
        with pytest.raises(StructuralError) as exc_info:
            SchemaValidator(MANIFEST).ensure_valid({"Count": "text"})

        assert len(exc_info.value.violations) == 4
        assert "MissingColumn" in str(exc_info.value)

    def test_does_not_mutate_observed(self):
        """Test the validator never changes its input"""
        observed = {"Count": "text"}
        SchemaValidator(MANIFEST).validate(observed)

        assert observed == {"Count": "text"}

    def test_unknown_type_class(self):
        """Test an unknown expected class is a configuration error"""
        with pytest.raises(ValueError):
            SchemaValidator({"Count": "decimal"})


@pytest.mark.unit
class TestObservedTypes:
    """Tests for observed type detection"""

    def test_from_spark_schema(self):
        """Test Spark types map onto observed type names"""
        schema = StructType([
            StructField("Count", IntegerType()),
            StructField("Mass", DoubleType()),
            StructField("Species", StringType()),
        ])

        assert observed_types_from_spark(schema) == {
            "Count": "integer",
            "Mass": "numeric",
            "Species": "text",
        }

    def test_infer_from_rows(self):
        """Test inference from plain dicts"""
        rows = [
            {"Count": "3", "Mass": 0.5, "Species": "Lycosa sp1", "Month": "June", "Note": ""},
            {"Count": 4, "Mass": "1", "Species": "Araneus sp.", "Month": 6, "Note": "NA"},
        ]

        observed = infer_observed_types(rows, frozenset({"", "NA"}))

        assert observed == {
            "Count": "integer",
            "Mass": "numeric",
            "Species": "text",
            "Month": "text",
            "Note": "null",
        }

    def test_blank_values_do_not_widen(self):
        """Test blank markers leave the column's type unchanged"""
        rows = [{"Count": "NA"}, {"Count": 2}, {"Count": None}]

        assert infer_observed_types(rows, frozenset({"NA"})) == {"Count": "integer"}

    def test_absent_column_is_missing(self):
        """Test a column that no row carries is not observed"""
        observed = infer_observed_types([{"Count": 1}])

        assert "Species" not in observed

    def test_text_columns_retyped_without_blank_markers(self):
        """Test a string-typed column of numbers and NA cells is numeric"""
        observed = {"Count": "text", "Species": "text", "Year": "integer"}
        rows = [
            {"Count": "3", "Species": "Lycosa sp1", "Year": 1998},
            {"Count": "NA", "Species": "Araneus sp.", "Year": 1998},
            {"Count": "5.5", "Species": "Lycosa sp2", "Year": 1999},
        ]

        refined = refine_text_columns(observed, rows, frozenset({"", "NA"}))

        assert refined == {"Count": "numeric", "Species": "text", "Year": "integer"}
        assert SchemaValidator(MANIFEST).validate({**refined, "Site": "text"}) == []
        assert observed["Count"] == "text"
