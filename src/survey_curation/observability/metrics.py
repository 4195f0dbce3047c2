"""
Prometheus metrics collection for survey-curation

Counts what happens to rows during a curation run so that data-quality
trends across contributed datasets can be monitored.
"""
from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)


# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# PIPELINE METRICS
# =======================

records_processed_total = Counter(
    name="curation_records_processed_total",
    documentation="Total number of raw rows processed by the curation pipeline",
    labelnames=["study_id", "status"],  # status: accepted, dropped, exported
    registry=REGISTRY,
)

stage_duration_seconds = Histogram(
    name="curation_stage_duration_seconds",
    documentation="Time spent in each pipeline stage in seconds",
    labelnames=["study_id", "stage"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0, 120.0],
    registry=REGISTRY,
)

# =======================
# DATA QUALITY METRICS
# =======================

records_dropped_total = Counter(
    name="curation_records_dropped_total",
    documentation="Total number of rows dropped, by reason",
    labelnames=["study_id", "reason"],
    registry=REGISTRY,
)

warnings_total = Counter(
    name="curation_warnings_total",
    documentation="Total number of flagged-but-retained rows, by kind",
    labelnames=["study_id", "kind"],
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)


class track_duration:
    """
    Context manager for tracking stage duration

    Usage:
        with track_duration(stage_duration_seconds, study_id="42", stage="aggregate"):
            # do work
            pass
    """

    def __init__(self, histogram: Histogram, **labels):
        self.histogram = histogram
        self.labels = labels
        self.timer = None

    def __enter__(self):
        self.timer = self.histogram.labels(**self.labels).time()
        self.timer.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.timer.__exit__(exc_type, exc_val, exc_tb)
        return False


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """Increment a counter metric"""
    counter.labels(**labels).inc(value)


def record_run(
    study_id: str,
    accepted_rows: int,
    dropped_by_reason: dict[str, int],
    warnings_by_kind: dict[str, int],
    output_rows: int,
) -> None:
    """
    Record the outcome of one curation run.

    Args:
        study_id: Dataset identifier
        accepted_rows: Rows that passed field and taxon checks
        dropped_by_reason: Dropped row counts keyed by reason
        warnings_by_kind: Warning counts keyed by kind
        output_rows: Rows in the canonical export
    """
    increment_counter(records_processed_total, accepted_rows, study_id=study_id, status="accepted")
    increment_counter(records_processed_total, output_rows, study_id=study_id, status="exported")

    for reason, count in dropped_by_reason.items():
        increment_counter(records_processed_total, count, study_id=study_id, status="dropped")
        increment_counter(records_dropped_total, count, study_id=study_id, reason=reason)

    for kind, count in warnings_by_kind.items():
        increment_counter(warnings_total, count, study_id=study_id, kind=kind)
