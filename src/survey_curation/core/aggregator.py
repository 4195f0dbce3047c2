"""
Aggregator: one record per species per sampling event.

Records sharing (sample key, family, genus, species) are collapsed into one,
summing their measurements. This is what enforces the uniqueness of
(SampleDescription, Family, Genus, Species) in the export.
"""

from collections import Counter

from survey_curation.core.errors import AggregationInvariantViolation
from survey_curation.core.models import ValidatedRecord
from survey_curation.core.rules.curation_config import MEASUREMENT_FIELDS
from survey_curation.observability.logger import get_logger

logger = get_logger(__name__)


def sum_optional(left: float | None, right: float | None) -> float | None:
    if left is None:
        return right
    if right is None:
        return left
    return left + right


class Aggregator:
    """
    Groups keyed records and sums their measurements.

    The first record of each group is the representative for every
    non-measurement field. Output keeps first-appearance order, so running
    the aggregator on its own output returns it unchanged.
    """

    def __init__(self, measurement_fields: tuple[str, ...] = MEASUREMENT_FIELDS):
        self.measurement_fields = measurement_fields

    def aggregate(self, records: list[ValidatedRecord]) -> list[ValidatedRecord]:
        """
        Collapse records of the same species at the same sampling event.

        Args:
            records: Records that all carry a sample key

        Returns:
            Aggregated records (len <= len(records))

        Raises:
            ValueError: If a record has no sample key
            AggregationInvariantViolation: If duplicate group tuples remain
        """
        groups: dict[tuple[str, str, str, str], ValidatedRecord] = {}

        for record in records:
            if record.sample_key is None:
                raise ValueError(f"record {record.record_id} has no sample key")

            key = record.group_key()
            existing = groups.get(key)
            if existing is None:
                groups[key] = record
                continue

            update = {"record_id": f"{existing.record_id},{record.record_id}"}
            for name in self.measurement_fields:
                update[name] = sum_optional(existing.measurement(name), record.measurement(name))
            groups[key] = existing.model_copy(update=update)

        aggregated = list(groups.values())
        merged = len(records) - len(aggregated)
        if merged:
            logger.info(f"Aggregated {merged} duplicate species/sample rows into existing rows")

        self.check_unique(aggregated)
        return aggregated

    @staticmethod
    def check_unique(records: list[ValidatedRecord]) -> None:
        """
        Raise when any (sample key, family, genus, species) tuple repeats.

        Raises:
            AggregationInvariantViolation: Listing the repeated tuples
        """
        counts = Counter(record.group_key() for record in records)
        duplicates = [key for key, count in counts.items() if count > 1]
        if duplicates:
            raise AggregationInvariantViolation(duplicates)
