"""
CurationResult model: everything one run produces.
"""

from pydantic import BaseModel, Field

from .canonical_record import CanonicalRecord
from .run_report import RunReport
from .spatial_summary import DatasetSummary


class CurationResult(BaseModel):
    """
    Attributes:
        records: Canonical table, sorted
        report: End-of-run accounting
        summary: Dataset metadata artifact
    """

    records: list[CanonicalRecord] = Field(default_factory=list)
    report: RunReport
    summary: DatasetSummary
