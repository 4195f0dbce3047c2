"""
SurveyRecord model representing one contributed row (ephemeral).
"""

from typing import Any, Literal

from pydantic import BaseModel, Field


class SurveyRecord(BaseModel):
    """
    A single contributed row moving through one curation run.

    Attributes:
        record_id: Row identifier (1-based position in the source table)
        source_id: Dataset identifier the row belongs to
        raw_payload: Original unmodified row keyed by source column name
        processed_payload: Row keyed by canonical field after coercion
        validation_status: "pending", "valid" or "invalid"
    """

    record_id: str = Field(..., min_length=1)
    source_id: str
    raw_payload: dict[str, Any]
    processed_payload: dict[str, Any] | None = None
    validation_status: Literal["pending", "valid", "invalid"] = "pending"

    class Config:
        json_schema_extra = {
            "example": {
                "record_id": "17",
                "source_id": "study_512",
                "raw_payload": {
                    "Count": "3",
                    "Taxon": "Araneus sp.",
                    "Year": "1998"
                },
                "processed_payload": {
                    "abundance": 3.0,
                    "taxon": "Araneus sp.",
                    "year": 1998
                },
                "validation_status": "valid",
            }
        }
