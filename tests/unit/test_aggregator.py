"""
Unit tests for the Aggregator.

Includes property-based testing with hypothesis for idempotence and conservation.
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from survey_curation.core.aggregator import Aggregator, sum_optional
from survey_curation.core.errors import AggregationInvariantViolation
from survey_curation.core.models import ValidatedRecord


def keyed(record_id: str, key: str, genus: str, species: str, abundance: float | None = 1.0,
          biomass: float | None = None) -> ValidatedRecord:
    return ValidatedRecord(
        record_id=record_id,
        study_id="512",
        abundance=abundance,
        biomass=biomass,
        family="Lycosidae",
        genus=genus,
        species=species,
        sample_key=key,
    )


@pytest.mark.unit
class TestAggregator:
    """Tests for Aggregator"""

    def test_duplicates_summed(self):
        """Test the same species at the same event is collapsed"""
        records = [
            keyed("1", "512_1998", "Lycosa", "sp1", 3.0),
            keyed("2", "512_1998", "Lycosa", "sp2", 5.0),
            keyed("4", "512_1998", "Lycosa", "sp1", 4.0),
        ]

        result = Aggregator().aggregate(records)

        assert [(r.species, r.abundance) for r in result] == [("sp1", 7.0), ("sp2", 5.0)]
        assert result[0].record_id == "1,4"

    def test_different_events_kept(self):
        """Test the same species at different events stays apart"""
        records = [keyed("1", "512_1998", "Lycosa", "sp1"), keyed("2", "512_1999", "Lycosa", "sp1")]

        assert len(Aggregator().aggregate(records)) == 2

    def test_blank_measurements_stay_blank(self):
        """Test summing two blank biomasses gives blank, one value gives that value"""
        records = [
            keyed("1", "k", "Lycosa", "sp1", 1.0, None),
            keyed("2", "k", "Lycosa", "sp1", 2.0, None),
            keyed("3", "k", "Pardosa", "sp", None, 0.5),
            keyed("4", "k", "Pardosa", "sp", 1.0, None),
        ]

        result = Aggregator().aggregate(records)

        assert (result[0].abundance, result[0].biomass) == (3.0, None)
        assert (result[1].abundance, result[1].biomass) == (1.0, 0.5)

    def test_requires_sample_key(self):
        """Test unkeyed records are rejected"""
        record = ValidatedRecord(record_id="1", study_id="512", abundance=1.0, species="sp")

        with pytest.raises(ValueError, match="no sample key"):
            Aggregator().aggregate([record])

    def test_check_unique_raises(self):
        """Test duplicate tuples are an invariant violation"""
        records = [keyed("1", "k", "Lycosa", "sp1"), keyed("2", "k", "Lycosa", "sp1")]

        with pytest.raises(AggregationInvariantViolation) as exc_info:
            Aggregator.check_unique(records)

        assert exc_info.value.duplicates == [("k", "Lycosidae", "Lycosa", "sp1")]

    def test_sum_optional(self):
        """Test blank-aware addition"""
        assert sum_optional(None, None) is None
        assert sum_optional(None, 2.0) == 2.0
        assert sum_optional(1.5, None) == 1.5
        assert sum_optional(1.5, 2.0) == 3.5


record_rows = st.lists(
    st.tuples(
        st.sampled_from(["512_1998", "512_1999", "512_Q1_1998"]),
        st.sampled_from([("Lycosa", "sp1"), ("Lycosa", "sp2"), ("Araneus", "sp")]),
        st.integers(min_value=1, max_value=1000),
    ),
    max_size=30,
)


def build_records(rows) -> list[ValidatedRecord]:
    return [
        keyed(str(index), key, genus, species, float(abundance))
        for index, (key, (genus, species), abundance) in enumerate(rows, start=1)
    ]


@pytest.mark.unit
class TestAggregatorProperties:
    """Property tests for Aggregator"""

    @given(record_rows)
    def test_property_idempotent(self, rows):
        """Property test: aggregating the output again changes nothing"""
        aggregator = Aggregator()
        once = aggregator.aggregate(build_records(rows))
        twice = aggregator.aggregate(once)

        assert twice == once

    @given(record_rows)
    def test_property_abundance_conserved(self, rows):
        """Property test: total abundance before equals total after"""
        records = build_records(rows)
        result = Aggregator().aggregate(records)

        assert sum(r.abundance for r in result) == sum(r.abundance for r in records)

    @given(record_rows)
    def test_property_group_keys_unique(self, rows):
        """Property test: no (key, family, genus, species) tuple repeats"""
        result = Aggregator().aggregate(build_records(rows))
        keys = [r.group_key() for r in result]

        assert len(keys) == len(set(keys))
