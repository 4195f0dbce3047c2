"""
Curation pipeline orchestration.

Coordinates one dataset run:
schema gate → field normalization → taxon parsing → sample keys →
aggregation → export, with the spatial summary computed from the export.

Every stage consumes the complete output of the previous one. Nothing is
written here; persisting the result is the caller's choice.
"""

from typing import Any

from pyspark.sql import SparkSession

from survey_curation.core.aggregator import Aggregator
from survey_curation.core.errors import GeometryError, TaxonomyError
from survey_curation.core.exporter import Exporter
from survey_curation.core.models import (
    CanonicalRecord,
    CurationResult,
    CurationWarning,
    DatasetSummary,
    RejectedRecord,
    RunReport,
    SpatialSummary,
    ValidatedRecord,
)
from survey_curation.core.normalization import FieldNormalizer
from survey_curation.core.rules import CurationConfig
from survey_curation.core.sample_key import SampleKeyBuilder
from survey_curation.core.schema import (
    SchemaValidator,
    infer_observed_types,
    observed_types_from_spark,
    refine_text_columns,
)
from survey_curation.core.spatial import SpatialSummarizer, distinct_coordinates
from survey_curation.core.taxonomy import TaxonParser
from survey_curation.observability.logger import get_logger, log_operation
from survey_curation.observability.metrics import record_run, stage_duration_seconds, track_duration
from survey_curation.batch.readers import FileReader

logger = get_logger(__name__)


class CurationPipeline:
    """
    Orchestrates the curation of one contributed dataset.

    Flow:
    1. Check column presence and declared types (fatal on violation)
    2. Coerce types and drop rows failing primary-field rules; pool subdivisions
    3. Parse taxon labels (unparsable labels dropped, anomalies flagged)
    4. Choose key fields over the whole table and key every record
    5. Aggregate to one record per species per sampling event
    6. Project and sort into the canonical table
    7. Summarize the spatial extent of the exported sites
    """

    def __init__(self, config: CurationConfig, spark: SparkSession | None = None):
        """
        Initialize curation pipeline.

        Args:
            config: Dataset configuration
            spark: Spark session, required only for process_file
        """
        self.config = config
        self.spark = spark

        self.file_reader = FileReader(spark) if spark is not None else None
        self.schema_validator = SchemaValidator(config.type_manifest())
        self.normalizer = FieldNormalizer(config)
        self.taxon_parser = TaxonParser(config.genus_corrections, config.promote_subgenus)
        self.aggregator = Aggregator()
        self.exporter = Exporter()
        self.spatial_summarizer = SpatialSummarizer()

    def read_file(
        self,
        file_path: str,
        file_format: str = "csv",
        **read_options,
    ) -> tuple[list[dict[str, Any]], dict[str, str]]:
        """
        Read a contributed table with Spark.

        Returns:
            (rows as dicts, observed column types)
        """
        if self.file_reader is None:
            raise ValueError("A Spark session is required to read files")

        logger.info(f"Reading {file_format} file: {file_path}")
        df = self.file_reader.read(file_path, file_format=file_format, **read_options)
        rows = [row.asDict() for row in df.collect()]
        observed = refine_text_columns(observed_types_from_spark(df.schema), rows, self.config.blank_markers)
        logger.info(f"Read {len(rows)} rows with columns {df.columns}")
        return rows, observed

    def process_file(self, file_path: str, file_format: str = "csv", **read_options) -> CurationResult:
        """
        Read and curate a contributed file.

        Raises:
            StructuralError: If the table fails the schema gate
        """
        rows, observed = self.read_file(file_path, file_format=file_format, **read_options)
        return self.run(rows, observed)

    def check_schema(self, rows: list[dict[str, Any]], observed: dict[str, str] | None = None) -> list:
        """Return schema violations without processing any record."""
        observed = observed if observed is not None else infer_observed_types(rows, self.config.blank_markers)
        return self.schema_validator.validate(observed)

    def run(self, rows: list[dict[str, Any]], observed: dict[str, str] | None = None) -> CurationResult:
        """
        Curate a table already in memory.

        Args:
            rows: Contributor rows keyed by column name
            observed: Observed column types; inferred from the rows when omitted

        Returns:
            CurationResult with the canonical table, run report and metadata

        Raises:
            StructuralError: If the table fails the schema gate
            AggregationInvariantViolation: If aggregation leaves duplicates
        """
        study_id = self.config.study_id
        report = RunReport(study_id=study_id, input_rows=len(rows))

        with log_operation("Curation run", logger=logger, study_id=study_id):
            with track_duration(stage_duration_seconds, study_id=study_id, stage="schema"):
                observed = observed if observed is not None else infer_observed_types(
                    rows, self.config.blank_markers
                )
                self.schema_validator.ensure_valid(observed)

            with track_duration(stage_duration_seconds, study_id=study_id, stage="normalize"):
                normalized = self.normalizer.normalize(rows)
            report.add_rejections(normalized.rejected)
            report.pooled_rows = normalized.pooled_rows

            with track_duration(stage_duration_seconds, study_id=study_id, stage="taxonomy"):
                parsed = self._parse_taxa(normalized.accepted, report)

            with track_duration(stage_duration_seconds, study_id=study_id, stage="aggregate"):
                keyed = self._assign_keys(parsed)
                aggregated = self.aggregator.aggregate(keyed)

            with track_duration(stage_duration_seconds, study_id=study_id, stage="export"):
                records = self.exporter.export(aggregated)

            spatial = self._summarize_space(records, report)

        report.accepted_rows = report.input_rows - report.dropped_rows
        report.output_rows = len(records)
        summary = self._summarize_dataset(records, spatial)

        self._log_report(report)
        record_run(
            study_id,
            accepted_rows=report.accepted_rows,
            dropped_by_reason=report.dropped_by_reason,
            warnings_by_kind=report.warnings_by_kind(),
            output_rows=report.output_rows,
        )
        return CurationResult(records=records, report=report, summary=summary)

    def _parse_taxa(self, records: list[ValidatedRecord], report: RunReport) -> list[ValidatedRecord]:
        parsed: list[ValidatedRecord] = []
        rejected: list[RejectedRecord] = []

        for record in records:
            try:
                parsed_record, warnings = self.taxon_parser.parse_record(record)
            except TaxonomyError as e:
                rejected.append(RejectedRecord(
                    record_id=record.record_id,
                    stage="taxonomy",
                    reason=e.reason,
                    field_name="taxon",
                    message=e.message,
                    raw_payload={"taxon": record.taxon, "family": record.family, **record.extra},
                ))
                logger.debug(f"Dropped record {record.record_id}: {e}")
                continue

            for warning in warnings:
                logger.warning(
                    warning.message,
                    extra={"record_id": warning.record_id, "kind": warning.kind},
                )
            report.warnings.extend(warnings)
            parsed.append(parsed_record)

        report.add_rejections(rejected)
        return parsed

    def _assign_keys(self, records: list[ValidatedRecord]) -> list[ValidatedRecord]:
        if not records:
            return []
        builder = SampleKeyBuilder.for_dataset(records, self.config)
        return builder.assign_all(records)

    def _summarize_space(self, records: list[CanonicalRecord], report: RunReport) -> SpatialSummary | None:
        coordinates = distinct_coordinates(records)
        if not coordinates:
            return None
        try:
            return self.spatial_summarizer.summarize(coordinates)
        except GeometryError as e:
            logger.warning(f"Spatial summary omitted: {e}", extra={"study_id": self.config.study_id})
            report.warnings.append(CurationWarning(record_id="*", kind="GeometryError", message=str(e)))
            return None

    def _summarize_dataset(
        self,
        records: list[CanonicalRecord],
        spatial: SpatialSummary | None,
    ) -> DatasetSummary:
        years = [record.year for record in records if record.year is not None]
        return DatasetSummary(
            study_id=self.config.study_id,
            total_records=len(records),
            distinct_species=len({(r.family, r.genus, r.species) for r in records}),
            distinct_samples=len({r.sample_description for r in records}),
            start_year=min(years) if years else None,
            end_year=max(years) if years else None,
            spatial=spatial,
        )

    def _log_report(self, report: RunReport) -> None:
        logger.info(
            f"Curation complete: {report.input_rows} rows in, {report.accepted_rows} accepted, "
            f"{report.dropped_rows} dropped, {report.output_rows} exported",
            extra={
                "study_id": report.study_id,
                "input_rows": report.input_rows,
                "accepted_rows": report.accepted_rows,
                "dropped_rows": report.dropped_rows,
                "dropped_by_reason": report.dropped_by_reason,
                "pooled_rows": report.pooled_rows,
                "output_rows": report.output_rows,
                "warnings": len(report.warnings),
            },
        )
