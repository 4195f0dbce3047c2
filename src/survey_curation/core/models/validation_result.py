"""
ValidationResult model representing the outcome of checking one record (ephemeral).
"""

from pydantic import BaseModel, Field, field_validator
from typing import List


class ValidationResult(BaseModel):
    """
    Outcome of running the field rules over one record.

    Attributes:
        record_id: Which record was validated
        passed: Overall validation status
        passed_rules: Rules that succeeded
        failed_rules: Rules that failed (at most one: evaluation stops at the first failure)
        reasons: Reason codes of the failed rules, same order as failed_rules
        error_messages: Messages of the failed rules, same order as failed_rules
        failed_fields: Field names of the failed rules, same order as failed_rules
        transformations_applied: Coercions applied (e.g. "year_coerced_to_int")
    """

    record_id: str
    passed: bool
    passed_rules: List[str] = Field(default_factory=list)
    failed_rules: List[str] = Field(default_factory=list)
    reasons: List[str] = Field(default_factory=list)
    error_messages: List[str] = Field(default_factory=list)
    failed_fields: List[str] = Field(default_factory=list)
    transformations_applied: List[str] = Field(default_factory=list)

    @field_validator('failed_rules')
    @classmethod
    def check_passed_consistency(cls, v, info):
        """Validate that passed=True implies failed_rules is empty."""
        if info.data.get('passed') and len(v) > 0:
            raise ValueError("passed=True but failed_rules is not empty")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "record_id": "4",
                "passed": False,
                "passed_rules": ["measurement_present", "abundance_type_check"],
                "failed_rules": ["abundance_range"],
                "reasons": ["NonPositiveMeasurement"],
                "error_messages": ["Value 0.0 must be greater than 0"],
                "failed_fields": ["abundance"],
                "transformations_applied": ["abundance_coerced_to_float"],
            }
        }
