"""
NormalizationResult model: the outcome of the FieldNormalizer over a table.
"""

from pydantic import BaseModel, Field

from .rejected_record import RejectedRecord
from .validated_record import ValidatedRecord


class NormalizationResult(BaseModel):
    """
    Attributes:
        accepted: Records that passed every primary-field rule (after pooling)
        rejected: Records dropped on their first failing rule
        reasons: Dropped-record counts keyed by reason
        pooled_rows: Number of input rows folded away by pooling
    """

    accepted: list[ValidatedRecord] = Field(default_factory=list)
    rejected: list[RejectedRecord] = Field(default_factory=list)
    reasons: dict[str, int] = Field(default_factory=dict)
    pooled_rows: int = 0
