"""
Unit tests for FieldNormalizer: mapping, coercion, primary-field rules and pooling.
"""

from datetime import date

import pytest

from survey_curation.core.normalization import FieldNormalizer, build_field_rules
from survey_curation.core.rules import CurationConfig


def config_with(**overrides) -> CurationConfig:
    base = {
        "studyId": "3",
        "columnMapping": {
            "abundance": "Count",
            "taxon": "Species",
            "latitude": "Lat",
            "longitude": "Long",
            "day": "Day",
            "month": "Month",
            "year": "Year",
        },
    }
    return CurationConfig.model_validate({**base, **overrides})


def row(**values) -> dict:
    base = {"Count": 1, "Species": "Lycosa sp1", "Lat": 51.0, "Long": 1.0, "Day": 3, "Month": 5, "Year": 2001}
    return {**base, **values}


def reasons_for(config: CurationConfig, rows: list[dict]) -> list[str]:
    return [rejected.reason for rejected in FieldNormalizer(config).normalize(rows).rejected]


@pytest.mark.unit
class TestPrimaryFieldRules:
    """Tests for the ordered primary-field rules"""

    def test_valid_row_accepted(self):
        """Test a clean row becomes a ValidatedRecord"""
        result = FieldNormalizer(config_with()).normalize([row(Count="3", Year="2001.0")])

        assert result.rejected == []
        record = result.accepted[0]
        assert record.record_id == "1"
        assert record.study_id == "3"
        assert record.abundance == 3.0
        assert record.year == 2001
        assert record.taxon == "Lycosa sp1"

    def test_zero_abundance_dropped(self):
        """Test Abundance 0 is dropped as non-positive"""
        assert reasons_for(config_with(), [row(Count=0)]) == ["NonPositiveMeasurement"]

    def test_negative_longitude_dropped(self):
        """Test Longitude -5 is outside the dataset's [0, 180] convention"""
        assert reasons_for(config_with(), [row(Long=-5)]) == ["CoordinateOutOfRange"]

    def test_longitude_range_is_configurable(self):
        """Test a dataset using [-180, 180] keeps western longitudes"""
        config = config_with(longitudeRange=[-180, 180])

        assert reasons_for(config, [row(Long=-5)]) == []

    def test_blank_measurement_dropped(self):
        """Test blank markers and NaN count as missing measurements"""
        rows = [row(Count="NA"), row(Count=""), row(Count=float("nan")), row(Count=None)]

        assert reasons_for(config_with(), rows) == ["MissingMeasurement"] * 4

    def test_biomass_alone_is_enough(self):
        """Test a row with only biomass passes the presence rule"""
        config = config_with(columnMapping={
            "abundance": "Count", "biomass": "Mass", "taxon": "Species", "year": "Year",
        })

        result = FieldNormalizer(config).normalize([{"Count": "", "Mass": "2.5", "Species": "Lycosa sp1", "Year": 2001}])

        assert result.accepted[0].abundance is None
        assert result.accepted[0].biomass == 2.5

    def test_non_numeric_measurement_dropped(self):
        """Test text in a measurement column is rejected"""
        assert reasons_for(config_with(), [row(Count="many")]) == ["InvalidMeasurement"]

    def test_missing_coordinates_dropped(self):
        """Test blank coordinates are rejected when the dataset has coordinates"""
        assert reasons_for(config_with(), [row(Lat="")]) == ["MissingCoordinates"]

    def test_first_failure_wins(self):
        """Test a row failing several rules reports the first one"""
        assert reasons_for(config_with(), [row(Count=0, Long=-5, Month=13)]) == ["NonPositiveMeasurement"]

    def test_invalid_calendar_values_dropped(self):
        """Test out-of-range and non-existent dates are rejected"""
        rows = [
            row(Month=13),
            row(Day=0),
            row(Day=31, Month=4),
            row(Day=29, Month=2, Year=2001),
            row(Year=date.today().year + 1),
            row(Month=6.5),
        ]

        assert reasons_for(config_with(), rows) == ["InvalidDate"] * 6

    def test_leap_day_accepted(self):
        """Test 29 February in a leap year"""
        assert reasons_for(config_with(), [row(Day=29, Month=2, Year=2000)]) == []

    def test_month_names_converted(self):
        """Test month names and abbreviations become numbers"""
        result = FieldNormalizer(config_with()).normalize([row(Month="June"), row(Month="sep")])

        assert [record.month for record in result.accepted] == [6, 9]

    def test_unrecoverable_secondary_field(self):
        """Test a blank unrecoverable field drops the row"""
        config = config_with(
            columnMapping={**config_with().column_mapping, "plot": "Quadrat"},
            unrecoverableFields=["plot"],
        )

        assert reasons_for(config, [row(Quadrat="Q1"), row(Quadrat="  ")]) == ["UnrecoverableSecondaryField"]

    def test_rejections_keep_raw_row(self):
        """Test dropped rows keep the contributor's values for review"""
        result = FieldNormalizer(config_with()).normalize([row(), row(Count=0)])

        rejected = result.rejected[0]
        assert rejected.record_id == "2"
        assert rejected.stage == "field"
        assert rejected.field_name == "abundance"
        assert rejected.raw_payload["Count"] == 0
        assert result.reasons == {"NonPositiveMeasurement": 1}

    def test_rule_order(self):
        """Test rules are built measurement first, then coordinates, then dates"""
        rules = build_field_rules(config_with())
        reasons = [rule["reason"] for rule in rules]

        assert reasons[0] == "MissingMeasurement"
        assert reasons.index("NonPositiveMeasurement") < reasons.index("CoordinateOutOfRange")
        assert reasons.index("CoordinateOutOfRange") < reasons.index("InvalidDate")

    def test_no_coordinate_rules_without_coordinates(self):
        """Test datasets without coordinates don't require them"""
        config = config_with(columnMapping={"abundance": "Count", "taxon": "Species", "year": "Year"})

        assert "MissingCoordinates" not in [rule["reason"] for rule in build_field_rules(config)]

    def test_rule_summary_of_dataset(self):
        """Test the engine built for a dataset holds one rule set per mapped field"""
        summary = FieldNormalizer(config_with()).rule_engine.get_rule_summary()

        assert summary["rules_by_type"] == {"custom": 2, "type_check": 6, "range": 6, "required_field": 2}
        assert summary["total_rules"] == 16


@pytest.mark.unit
class TestFieldMapping:
    """Tests for mapping contributor columns onto canonical fields"""

    def test_fixed_coordinates_broadcast(self, fixed_site_config, fixed_site_rows):
        """Test a fixed site is applied to every record"""
        result = FieldNormalizer(fixed_site_config).normalize(fixed_site_rows)

        assert {(r.latitude, r.longitude) for r in result.accepted} == {(51.75, 1.25)}
        assert len(result.accepted) == 9
        assert result.reasons == {"NonPositiveMeasurement": 1}

    def test_genus_and_species_columns_joined(self):
        """Test separate genus and species columns form the taxon label"""
        config = CurationConfig.model_validate({
            "studyId": "3",
            "columnMapping": {"abundance": "N", "genus": "G", "species": "S", "family": "F"},
        })

        result = FieldNormalizer(config).normalize([{"N": 1, "G": "Lycosa", "S": "sp1", "F": "Lycosidae"}])

        assert result.accepted[0].taxon == "Lycosa sp1"
        assert result.accepted[0].family == "Lycosidae"

    def test_secondary_values_renamed(self):
        """Test known misspellings of secondary values are corrected"""
        config = config_with(
            columnMapping={**config_with().column_mapping, "plot": "Quadrat", "treatment": "Trt"},
            secondaryFieldRenames={"Q 1": "Q1", "grazed ": "grazed", "Controll": "Control"},
        )

        result = FieldNormalizer(config).normalize([row(Quadrat="Q 1", Trt="Controll")])

        assert result.accepted[0].plot == "Q1"
        assert result.accepted[0].treatment == "Control"

    def test_numeric_plot_kept_as_text(self):
        """Test plot numbers read as floats become their integer text"""
        config = config_with(columnMapping={**config_with().column_mapping, "plot": "Quadrat"})

        result = FieldNormalizer(config).normalize([row(Quadrat=3.0)])

        assert result.accepted[0].plot == "3"

    def test_unmapped_columns_kept_in_extra(self):
        """Test unmapped contributor columns travel with the record"""
        result = FieldNormalizer(config_with()).normalize([row(Trap=" T4 ", Notes="NA")])

        assert result.accepted[0].extra == {"Trap": "T4", "Notes": None}

    def test_date_column_fills_calendar_fields(self):
        """Test a mapped date column supplies day, month and year"""
        config = CurationConfig.model_validate({
            "studyId": "3",
            "columnMapping": {"abundance": "Count", "taxon": "Species", "date": "Date"},
            "dateFormat": "%d/%m/%Y",
        })

        result = FieldNormalizer(config).normalize([
            {"Count": 1, "Species": "Lycosa sp1", "Date": "03/05/2001"},
            {"Count": 1, "Species": "Lycosa sp1", "Date": "2001-05-03"},
        ])

        record = result.accepted[0]
        assert (record.day, record.month, record.year) == (3, 5, 2001)
        assert [r.reason for r in result.rejected] == ["InvalidDate"]

    def test_date_column_without_format(self):
        """Test a date column needs a configured format"""
        config = CurationConfig.model_validate({
            "studyId": "3",
            "columnMapping": {"abundance": "Count", "taxon": "Species", "date": "Date"},
        })

        assert reasons_for(config, [{"Count": 1, "Species": "Lycosa sp1", "Date": "03/05/2001"}]) == ["InvalidDate"]


@pytest.mark.unit
class TestPooling:
    """Tests for pooling configured subdivisions"""

    def test_replicates_pooled(self, plot_config, plot_rows):
        """Test replicate rows of one taxon in one quadrat are summed"""
        result = FieldNormalizer(plot_config).normalize(plot_rows)

        littorina = result.accepted[0]
        assert littorina.taxon == "Littorina littorea"
        assert littorina.abundance == 5.0
        assert littorina.record_id == "1,2"
        assert littorina.extra["Replicate"] is None
        assert result.pooled_rows == 1

    def test_exempt_taxa_not_pooled(self, plot_config, plot_rows):
        """Test exempt taxa keep their replicate rows and values"""
        result = FieldNormalizer(plot_config).normalize(plot_rows)

        patella = [r for r in result.accepted if r.taxon == "Patella vulgata"]
        assert [r.extra["Replicate"] for r in patella] == ["a", "b"]
        assert [r.biomass for r in patella] == [0.5, 0.7]

    def test_pooling_keeps_first_appearance_order(self, plot_config, plot_rows):
        """Test pooled output order follows the first row of each group"""
        result = FieldNormalizer(plot_config).normalize(plot_rows)

        assert [r.record_id for r in result.accepted] == ["1,2", "3", "4", "5"]
        assert sorted(r.reason for r in result.rejected) == ["CoordinateOutOfRange", "MissingMeasurement"]

    def test_different_descriptors_not_pooled(self, plot_config, plot_rows):
        """Test rows in different quadrats stay apart"""
        rows = [plot_rows[0], {**plot_rows[1], "Quadrat": "Q3"}]

        result = FieldNormalizer(plot_config).normalize(rows)

        assert len(result.accepted) == 2
        assert result.pooled_rows == 0

    def test_no_pool_fields_is_identity(self, fixed_site_config, fixed_site_rows):
        """Test pooling does nothing when no pool fields are configured"""
        normalizer = FieldNormalizer(fixed_site_config)
        records = normalizer.normalize(fixed_site_rows).accepted

        assert normalizer.pool(records) == records

    @pytest.mark.parametrize("pool_entry", ["Stage", "treatment"])
    def test_mapped_pool_field_pooled(self, pool_entry):
        """Test a pool field mapped onto a canonical field is summed away, by column or field name"""
        mapping = {**config_with().column_mapping, "treatment": "Stage"}
        config = config_with(columnMapping=mapping, poolFields=[pool_entry])
        rows = [row(Count=3, Stage="adult"), row(Count=4, Stage="juvenile")]

        result = FieldNormalizer(config).normalize(rows)

        assert len(result.accepted) == 1
        assert result.accepted[0].abundance == 7.0
        assert result.accepted[0].treatment is None
        assert result.accepted[0].record_id == "1,2"
        assert result.pooled_rows == 1
