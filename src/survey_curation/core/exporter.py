"""
Exporter: projection of aggregated records onto the canonical schema.

The projection is by field name, never by column position. Sorting is by
(Year, Family, Genus, Species) ascending with blanks last. Serialization
writes blanks as empty strings.
"""

import csv
import io
from typing import Any, TextIO

from survey_curation.core.models import CANONICAL_COLUMNS, CanonicalRecord, ValidatedRecord


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    return str(value)


def _blank_last(value: str) -> tuple[bool, str]:
    return (value == "", value)


def sort_key(record: CanonicalRecord) -> tuple:
    return (
        record.year is None,
        record.year if record.year is not None else 0,
        _blank_last(record.family),
        _blank_last(record.genus),
        _blank_last(record.species),
    )


class Exporter:
    """Projects, orders and serializes the canonical table."""

    def project(self, record: ValidatedRecord) -> CanonicalRecord:
        """
        Map one aggregated record onto the canonical columns.

        Raises:
            ValueError: If the record has no sample key
        """
        if not record.sample_key:
            raise ValueError(f"record {record.record_id} has no sample key")
        return CanonicalRecord(
            abundance=record.abundance,
            biomass=record.biomass,
            family=record.family,
            genus=record.genus,
            species=record.species,
            sample_description=record.sample_key,
            plot=_text(record.plot),
            latitude=record.latitude,
            longitude=record.longitude,
            depth_elevation=_text(record.depth_elevation),
            day=_text(record.day),
            month=_text(record.month),
            year=record.year,
            study_id=record.study_id,
        )

    def export(self, records: list[ValidatedRecord]) -> list[CanonicalRecord]:
        """Project every record and sort the table."""
        return sorted((self.project(record) for record in records), key=sort_key)

    @staticmethod
    def to_rows(records: list[CanonicalRecord]) -> list[dict[str, str]]:
        """Canonical rows keyed by output column, blanks as ""."""
        rows = []
        for record in records:
            values = record.model_dump(by_alias=True)
            rows.append({column: _format_cell(values[column]) for column in CANONICAL_COLUMNS})
        return rows

    def serialize(self, records: list[CanonicalRecord], stream: TextIO) -> None:
        """Write the table as CSV with the canonical header."""
        writer = csv.DictWriter(stream, fieldnames=CANONICAL_COLUMNS, lineterminator="\n")
        writer.writeheader()
        writer.writerows(self.to_rows(records))

    def to_csv(self, records: list[CanonicalRecord]) -> str:
        buffer = io.StringIO()
        self.serialize(records, buffer)
        return buffer.getvalue()
