"""
FieldNormalizer: maps contributor rows onto canonical fields, coerces types,
drops rows that violate primary-field rules and pools configured
subdivisions.

Rules are applied in a fixed order and a row is rejected on its first
failure:

1. a measurement is present (not blank/NaN)
2. every present measurement is a number > 0
3. coordinates are inside the dataset's ranges (fixed sites are broadcast first)
4. year/month/day are whole numbers inside calendar bounds
5. unrecoverable secondary fields are not blank

Pooling runs afterwards over the accepted rows.
"""

import calendar
import math
from datetime import date, datetime
from typing import Any

from survey_curation.core.aggregator import sum_optional
from survey_curation.core.models import NormalizationResult, RejectedRecord, SurveyRecord, ValidatedRecord
from survey_curation.core.rules import CurationConfig, RuleConfigBuilder, RuleEngine
from survey_curation.core.rules.curation_config import MEASUREMENT_FIELDS, SECONDARY_FIELDS
from survey_curation.observability.logger import get_logger

logger = get_logger(__name__)

MONTH_NAMES = {
    name.lower(): number
    for number in range(1, 13)
    for name in (calendar.month_name[number], calendar.month_abbr[number])
}


def _measurement_present(measurement_fields: list[str]):
    def check(value: Any, record: dict[str, Any]) -> None:
        if all(record.get(name) is None for name in measurement_fields):
            raise ValueError(f"no value for any of {measurement_fields}")
    return check


def _day_exists(value: Any, record: dict[str, Any]) -> None:
    month = record.get("month")
    if not isinstance(month, int):
        return
    year = record.get("year")
    year = year if isinstance(year, int) else 2000  # leap year when unknown
    last_day = calendar.monthrange(year, month)[1]
    if value > last_day:
        raise ValueError(f"day {value} does not exist in {year}-{month:02d}")


def _date_parses(date_format: str | None):
    def check(value: Any, record: dict[str, Any]) -> None:
        if isinstance(value, (date, datetime)):
            return
        if not date_format:
            raise ValueError("a date column is mapped but no dateFormat is configured")
        datetime.strptime(str(value), date_format)
    return check


def build_field_rules(config: CurationConfig) -> list[dict[str, Any]]:
    """
    Build the ordered primary-field rules for a dataset.

    Args:
        config: Dataset configuration

    Returns:
        Rule configurations for the RuleEngine
    """
    builder = RuleConfigBuilder()
    measurements = config.measurement_fields

    builder.add_custom(
        "measurement_present",
        measurements[0],
        _measurement_present(measurements),
        reason="MissingMeasurement",
        error_message="Measurement is blank",
    )
    for name in measurements:
        builder.add_type_check(name, "float", reason="InvalidMeasurement")
        builder.add_range(name, min_exclusive=0, reason="NonPositiveMeasurement")

    if config.has_coordinates:
        lat_min, lat_max = config.latitude_range
        lon_min, lon_max = config.longitude_range
        for name, low, high in (("latitude", lat_min, lat_max), ("longitude", lon_min, lon_max)):
            builder.add_required_field(name, reason="MissingCoordinates")
            builder.add_type_check(name, "float", reason="InvalidCoordinates")
            builder.add_range(name, min_value=low, max_value=high, reason="CoordinateOutOfRange")

    mapping = config.column_mapping
    if "date" in mapping:
        builder.add_custom(
            "date_parses",
            "date",
            _date_parses(config.date_format),
            reason="InvalidDate",
            error_message="Date does not match the configured format",
            skip_blank=True,
        )
    if "year" in mapping:
        builder.add_type_check("year", "int", reason="InvalidDate")
        builder.add_range("year", min_value=1, max_value=date.today().year, reason="InvalidDate")
    if "month" in mapping:
        builder.add_type_check("month", "int", reason="InvalidDate")
        builder.add_range("month", min_value=1, max_value=12, reason="InvalidDate")
    if "day" in mapping:
        builder.add_type_check("day", "int", reason="InvalidDate")
        builder.add_range("day", min_value=1, max_value=31, reason="InvalidDate")
        builder.add_custom(
            "day_exists",
            "day",
            _day_exists,
            reason="InvalidDate",
            error_message="Day is outside the month",
            skip_blank=True,
        )

    for name in config.unrecoverable_fields:
        builder.add_required_field(name, reason="UnrecoverableSecondaryField")

    return builder.build()


class FieldNormalizer:
    """
    Turns raw contributor rows into ValidatedRecords.

    Returns accepted and rejected rows plus the rejection reasons; one bad row
    never aborts the batch.
    """

    def __init__(self, config: CurationConfig):
        """
        Args:
            config: Dataset configuration (mapping, ranges, rename and pooling tables)
        """
        self.config = config
        self.rule_engine = RuleEngine(build_field_rules(config))
        self._mapped_columns = set(config.column_mapping.values())
        logger.debug(
            "Field rules built",
            extra={"study_id": config.study_id, **self.rule_engine.get_rule_summary()},
        )

    def normalize(self, rows: list[dict[str, Any]]) -> NormalizationResult:
        """
        Apply the primary-field rules, then pooling, to a whole table.

        Args:
            rows: Contributor rows keyed by source column name

        Returns:
            NormalizationResult with accepted records, rejections and reasons
        """
        accepted: list[ValidatedRecord] = []
        rejected: list[RejectedRecord] = []
        reasons: dict[str, int] = {}

        for index, row in enumerate(rows, start=1):
            record = SurveyRecord(
                record_id=str(index),
                source_id=self.config.study_id,
                raw_payload=dict(row),
                processed_payload=self._map_row(row),
            )
            result = self.rule_engine.validate_record(record)

            if not result.passed:
                reason = result.reasons[0]
                rejected.append(RejectedRecord(
                    record_id=record.record_id,
                    stage="field",
                    reason=reason,
                    field_name=result.failed_fields[0],
                    message=result.error_messages[0],
                    raw_payload=record.raw_payload,
                ))
                reasons[reason] = reasons.get(reason, 0) + 1
                logger.debug(
                    f"Dropped row {record.record_id}: {reason}",
                    extra={"record_id": record.record_id, "reason": reason},
                )
                continue

            accepted.append(self._to_validated(record))

        pooled = self.pool(accepted)
        pooled_rows = len(accepted) - len(pooled)
        if pooled_rows:
            logger.info(
                f"Pooled {pooled_rows} rows across {sorted(self.config.pool_fields)}",
                extra={"study_id": self.config.study_id},
            )

        return NormalizationResult(
            accepted=pooled,
            rejected=rejected,
            reasons=reasons,
            pooled_rows=pooled_rows,
        )

    def _clean(self, value: Any) -> Any:
        """Trim text and turn blank markers and NaN into None."""
        if isinstance(value, str):
            value = value.strip()
            return None if value in self.config.blank_markers else value
        if isinstance(value, float) and math.isnan(value):
            return None
        return value

    @staticmethod
    def _as_text(value: Any) -> str | None:
        if value is None:
            return None
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)

    def _map_row(self, row: dict[str, Any]) -> dict[str, Any]:
        """Project a contributor row onto canonical field names."""
        payload: dict[str, Any] = {}
        for field_name, column in self.config.column_mapping.items():
            payload[field_name] = self._clean(row.get(column))

        month = payload.get("month")
        if isinstance(month, str) and month.lower() in MONTH_NAMES:
            payload["month"] = MONTH_NAMES[month.lower()]

        renames = self.config.secondary_field_renames
        for field_name in SECONDARY_FIELDS:
            if field_name in payload:
                text = self._as_text(payload[field_name])
                payload[field_name] = renames.get(text, text) if text is not None else None

        if self.config.fixed_coordinates is not None:
            payload["latitude"], payload["longitude"] = self.config.fixed_coordinates

        payload["extra"] = {
            column: self._clean(value)
            for column, value in row.items()
            if column not in self._mapped_columns
        }
        return payload

    def _to_validated(self, record: SurveyRecord) -> ValidatedRecord:
        payload = record.processed_payload
        day, month, year = payload.get("day"), payload.get("month"), payload.get("year")

        raw_date = payload.get("date")
        if raw_date is not None:
            parsed = raw_date if isinstance(raw_date, (date, datetime)) else datetime.strptime(
                str(raw_date), self.config.date_format
            )
            day = day if day is not None else parsed.day
            month = month if month is not None else parsed.month
            year = year if year is not None else parsed.year

        if "taxon" in payload:
            taxon = self._as_text(payload.get("taxon")) or ""
        else:
            parts = [self._as_text(payload.get(name)) for name in ("genus", "species")]
            taxon = " ".join(part for part in parts if part)

        return ValidatedRecord(
            record_id=record.record_id,
            study_id=self.config.study_id,
            abundance=payload.get("abundance"),
            biomass=payload.get("biomass"),
            taxon=taxon,
            family=self._as_text(payload.get("family")) or "",
            plot=payload.get("plot"),
            latitude=payload.get("latitude"),
            longitude=payload.get("longitude"),
            depth_elevation=payload.get("depth_elevation"),
            day=day,
            month=month,
            year=year,
            treatment=payload.get("treatment"),
            extra=payload["extra"],
        )

    def pool(self, records: list[ValidatedRecord]) -> list[ValidatedRecord]:
        """
        Sum measurements across the configured pool fields.

        Records are grouped by every field except the measurements and the
        pool fields. Records of exempt taxa are passed through unchanged and
        keep their pool field values; pooled records have them blanked.

        Args:
            records: Accepted records in input order

        Returns:
            Records with pooled groups collapsed, in first-appearance order
        """
        if not self.config.pool_fields:
            return records
        pooled_fields = self.config.pooled_fields
        pooled_columns = self.config.pooled_columns

        groups: dict[tuple, ValidatedRecord] = {}
        output: list[ValidatedRecord | tuple] = []

        for record in records:
            if record.taxon in self.config.pool_exempt_taxa:
                output.append(record)
                continue

            key = self._pool_key(record)
            existing = groups.get(key)
            if existing is None:
                blanked: dict[str, Any] = {name: None for name in pooled_fields}
                blanked["extra"] = {
                    column: (None if column in pooled_columns else value)
                    for column, value in record.extra.items()
                }
                groups[key] = record.model_copy(update=blanked)
                output.append(key)
                continue

            update: dict[str, Any] = {"record_id": f"{existing.record_id},{record.record_id}"}
            for name in MEASUREMENT_FIELDS:
                update[name] = sum_optional(existing.measurement(name), record.measurement(name))
            groups[key] = existing.model_copy(update=update)

        return [groups[item] if isinstance(item, tuple) else item for item in output]

    def _pool_key(self, record: ValidatedRecord) -> tuple:
        fields = record.model_dump(
            exclude={"record_id", "extra", "sample_key", *MEASUREMENT_FIELDS, *self.config.pooled_fields}
        )
        extra = {
            column: value
            for column, value in record.extra.items()
            if column not in self.config.pooled_columns
        }
        return (
            tuple(sorted((name, str(value)) for name, value in fields.items())),
            tuple(sorted((name, str(value)) for name, value in extra.items())),
        )
