"""
Command-line interface for dataset curation.

Usage:
    survey-curate process --config <config.yaml> --input <file_path> --output <dir> [options]
    survey-curate validate --config <config.yaml> --input <file_path> [options]
"""

import argparse
import sys
from pathlib import Path

from pyspark.sql import SparkSession

from survey_curation.batch.pipeline import CurationPipeline
from survey_curation.batch.writers import CanonicalWriter
from survey_curation.core.errors import CurationError, StructuralError
from survey_curation.core.rules import CurationConfigLoader
from survey_curation.observability.logger import configure_all, get_logger
from survey_curation.observability.metrics import generate_metrics


logger = get_logger(__name__)


def create_spark_session(app_name: str = "SurveyCuration") -> SparkSession:
    """
    Create a local Spark session for reading contributed tables.

    Args:
        app_name: Application name

    Returns:
        SparkSession
    """
    spark = SparkSession.builder \
        .appName(app_name) \
        .master("local[*]") \
        .config("spark.sql.adaptive.enabled", "true") \
        .config("spark.ui.enabled", "false") \
        .getOrCreate()

    return spark


def _load_config(args):
    try:
        return CurationConfigLoader(args.config).load()
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)


def _check_input(args) -> Path:
    input_path = Path(args.input)
    if not input_path.exists():
        logger.error(f"Input file not found: {args.input}")
        sys.exit(1)
    return input_path


def process_command(args):
    """
    Curate one dataset and write its canonical table, metadata and report.

    Args:
        args: Command-line arguments
    """
    config = _load_config(args)
    input_path = _check_input(args)

    logger.info(f"Starting curation for study: {config.study_id}")
    logger.info(f"Input file: {input_path}")

    spark = create_spark_session(f"SurveyCuration-{config.study_id}")

    try:
        pipeline = CurationPipeline(config, spark=spark)
        result = pipeline.process_file(str(input_path), file_format=args.format)
        paths = CanonicalWriter(args.output).write(result)

        if args.metrics_output:
            Path(args.metrics_output).write_bytes(generate_metrics())

        report = result.report
        logger.info("=" * 60)
        logger.info("CURATION COMPLETE")
        logger.info("=" * 60)
        logger.info(f"Rows read: {report.input_rows}")
        logger.info(f"Rows accepted: {report.accepted_rows}")
        logger.info(f"Rows dropped: {report.dropped_rows}")
        for reason, count in sorted(report.dropped_by_reason.items()):
            logger.info(f"  {reason}: {count}")
        logger.info(f"Rows pooled: {report.pooled_rows}")
        logger.info(f"Warnings: {len(report.warnings)}")
        logger.info(f"Canonical rows written: {report.output_rows} -> {paths['table']}")
        logger.info("=" * 60)

    except StructuralError as e:
        for violation in e.violations:
            logger.error(f"Schema violation: {violation}")
        sys.exit(1)
    except CurationError as e:
        logger.error(f"Curation failed: {e}", exc_info=True)
        sys.exit(1)
    finally:
        spark.stop()


def validate_command(args):
    """
    Run the schema gate only and list every violation.

    Args:
        args: Command-line arguments
    """
    config = _load_config(args)
    input_path = _check_input(args)

    spark = create_spark_session(f"SurveyCuration-validate-{config.study_id}")

    try:
        pipeline = CurationPipeline(config, spark=spark)
        rows, observed = pipeline.read_file(str(input_path), file_format=args.format)
        violations = pipeline.check_schema(rows, observed)
    finally:
        spark.stop()

    if violations:
        for violation in violations:
            logger.error(f"Schema violation: {violation}")
        sys.exit(1)

    logger.info(f"Schema OK: {len(observed)} columns match the configuration for study {config.study_id}")


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Ecological survey dataset curation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Curate a CSV file
  survey-curate process --config config/study_512.yaml --input data/study_512.csv --output out/

  # Check columns and types only
  survey-curate validate --config config/study_512.yaml --input data/study_512.csv

  # Curate a JSON file with text logs
  survey-curate process --config config/study_77.yaml --input data/study_77.json \\
      --format json --output out/ --log-format text
        """
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: LOG_LEVEL or INFO)"
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "text"],
        help="Log format (default: LOG_FORMAT or json)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    process_parser = subparsers.add_parser("process", help="Curate a dataset file")
    validate_parser = subparsers.add_parser("validate", help="Check a dataset file against its configuration")

    for sub in (process_parser, validate_parser):
        sub.add_argument(
            "--config",
            required=True,
            help="Path to the dataset configuration YAML file"
        )
        sub.add_argument(
            "--input",
            required=True,
            help="Path to input file"
        )
        sub.add_argument(
            "--format",
            default="csv",
            choices=["csv", "json", "parquet"],
            help="Input file format (default: csv)"
        )

    process_parser.add_argument(
        "--output",
        required=True,
        help="Output directory for the canonical table, metadata and report"
    )
    process_parser.add_argument(
        "--metrics-output",
        default=None,
        help="Write Prometheus metrics in text format to this file"
    )

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    configure_all(level=args.log_level, format_type=args.log_format)

    if args.command == "process":
        process_command(args)
    elif args.command == "validate":
        validate_command(args)


if __name__ == "__main__":
    main()
