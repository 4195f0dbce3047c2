"""
SampleKeyBuilder: deterministic identity strings for sampling events.

The set of descriptor fields is chosen once per dataset, before any row is
keyed: a configured field takes part only when at least one record carries a
non-blank value for it. Every record of the run is then keyed with the same
fields, in the configured order.
"""

from typing import Any, Iterable

from survey_curation.core.models import ValidatedRecord
from survey_curation.core.rules import CurationConfig
from survey_curation.observability.logger import get_logger

logger = get_logger(__name__)

KEY_DELIMITER = "_"
ESCAPE = "\\"

COORDINATE_FIELDS = ("latitude", "longitude")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _key_part(value: Any) -> str:
    """Text form of one key value, with the delimiter and backslash escaped."""
    if _is_blank(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        text = str(int(value))
    else:
        text = str(value).strip()
    return text.replace(ESCAPE, ESCAPE * 2).replace(KEY_DELIMITER, ESCAPE + KEY_DELIMITER)


def field_value(record: ValidatedRecord, field_name: str) -> Any:
    """Value of a canonical field, or of an unmapped source column kept in ``extra``."""
    if field_name in ValidatedRecord.model_fields and field_name != "extra":
        return getattr(record, field_name)
    return record.extra.get(field_name)


class SampleKeyBuilder:
    """
    Builds the sample key of every record in one dataset run.

    Use ``SampleKeyBuilder.for_dataset`` to select the key fields from the
    whole table, then ``build`` / ``assign`` per record.
    """

    def __init__(self, key_fields: list[str], clear_after_key: Iterable[str] = ()):
        """
        Args:
            key_fields: Ordered descriptor fields, already restricted to
                fields populated somewhere in the dataset
            clear_after_key: Fields blanked in the output once keyed
        """
        if not key_fields:
            raise ValueError("at least one sample key field is required")
        self.key_fields = list(key_fields)
        self.clear_after_key = [name for name in clear_after_key if name in self.key_fields]

    @classmethod
    def select_fields(
        cls,
        records: list[ValidatedRecord],
        configured: list[str],
        exclude: Iterable[str] = (),
    ) -> list[str]:
        """
        Keep the configured fields that are non-blank for at least one record.

        Args:
            records: Every record of the dataset
            configured: Ordered candidate fields
            exclude: Fields never used (e.g. broadcast coordinates)

        Returns:
            Selected fields in configured order
        """
        excluded = set(exclude)
        return [
            name for name in configured
            if name not in excluded
            and any(not _is_blank(field_value(record, name)) for record in records)
        ]

    @classmethod
    def for_dataset(cls, records: list[ValidatedRecord], config: CurationConfig) -> "SampleKeyBuilder":
        """
        Decide the key fields for a dataset from its complete record set.

        Raises:
            ValueError: If no configured field is populated
        """
        exclude: tuple[str, ...] = ()
        if config.fixed_coordinates is not None and not config.key_includes_fixed_coordinates:
            exclude = COORDINATE_FIELDS

        fields = cls.select_fields(records, config.sample_key_fields, exclude)
        skipped = [name for name in config.sample_key_fields if name not in fields]
        logger.info(
            f"Sample key fields: {fields}",
            extra={"study_id": config.study_id, "key_fields": fields, "skipped_fields": skipped},
        )
        return cls(fields, config.clear_after_key)

    def build(self, record: ValidatedRecord) -> str:
        """Join the record's key field values with the delimiter."""
        return KEY_DELIMITER.join(_key_part(field_value(record, name)) for name in self.key_fields)

    def assign(self, record: ValidatedRecord) -> ValidatedRecord:
        """
        Return a copy of the record carrying its sample key.

        Fields listed in ``clear_after_key`` are blanked after the key is
        built; the key keeps their values.

        Raises:
            ValueError: If the record already has a sample key
        """
        if record.sample_key is not None:
            raise ValueError(f"record {record.record_id} already has a sample key")

        update: dict[str, Any] = {"sample_key": self.build(record)}
        extra = dict(record.extra)
        for name in self.clear_after_key:
            if name in ValidatedRecord.model_fields:
                update[name] = None
            else:
                extra[name] = None
        if extra != record.extra:
            update["extra"] = extra
        return record.model_copy(update=update)

    def assign_all(self, records: list[ValidatedRecord]) -> list[ValidatedRecord]:
        return [self.assign(record) for record in records]
