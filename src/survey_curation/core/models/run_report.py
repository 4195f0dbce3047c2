"""
RunReport model: end-of-run accounting of every row.
"""

from pydantic import BaseModel, Field

from .curation_warning import CurationWarning
from .rejected_record import RejectedRecord


class RunReport(BaseModel):
    """
    Curators see the full picture of a run, not just the first error.

    Attributes:
        study_id: Dataset identifier
        input_rows: Rows read from the source table
        accepted_rows: Rows that passed field and taxonomy checks
        dropped_rows: Rows dropped for any reason
        dropped_by_reason: Dropped counts keyed by reason
        pooled_rows: Rows folded into others by pooling
        output_rows: Rows in the canonical export
        warnings: Flagged-but-retained records
        rejected: Every dropped record
    """

    study_id: str
    input_rows: int = 0
    accepted_rows: int = 0
    dropped_rows: int = 0
    dropped_by_reason: dict[str, int] = Field(default_factory=dict)
    pooled_rows: int = 0
    output_rows: int = 0
    warnings: list[CurationWarning] = Field(default_factory=list)
    rejected: list[RejectedRecord] = Field(default_factory=list)

    def add_rejections(self, rejected: list[RejectedRecord]) -> None:
        for record in rejected:
            self.rejected.append(record)
            count = record.row_count
            self.dropped_by_reason[record.reason] = self.dropped_by_reason.get(record.reason, 0) + count
            self.dropped_rows += count

    def warnings_by_kind(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for warning in self.warnings:
            counts[warning.kind] = counts.get(warning.kind, 0) + 1
        return counts
