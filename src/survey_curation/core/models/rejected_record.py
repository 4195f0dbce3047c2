"""
RejectedRecord model representing a dropped row with its reason.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field


class RejectedRecord(BaseModel):
    """
    A row dropped during the run.

    Attributes:
        record_id: Source row identifier
        stage: Pipeline stage that dropped the row
        reason: Machine-readable reason code (e.g. "NonPositiveMeasurement")
        field_name: Field that failed, when the failure is field-specific
        message: Human-readable explanation
        raw_payload: Original row for curator review
    """

    record_id: str
    stage: Literal["field", "taxonomy"]
    reason: str = Field(..., min_length=1)
    field_name: str | None = None
    message: str
    raw_payload: dict[str, Any] = Field(default_factory=dict)

    @property
    def row_count(self) -> int:
        """Source rows behind this record (pooled records carry several ids)."""
        return len(self.record_id.split(","))

    class Config:
        json_schema_extra = {
            "example": {
                "record_id": "4",
                "stage": "field",
                "reason": "NonPositiveMeasurement",
                "field_name": "abundance",
                "message": "Value 0.0 must be greater than 0",
                "raw_payload": {"Count": "0", "Taxon": "Lycosa sp1"},
            }
        }
