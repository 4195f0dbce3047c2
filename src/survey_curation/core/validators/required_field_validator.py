"""
RequiredFieldValidator - a field must hold a usable value.
"""

import math
from typing import Any, Dict, Optional

from .base_validator import BaseValidator, FieldValidationError


class RequiredFieldValidator(BaseValidator):
    """
    Fails when the column is absent, the value is None or NaN, or the value
    is an all-whitespace string (unless ``allow_empty_string`` is set).

    Used for coordinates and for secondary fields a dataset cannot do
    without (a plot code, say).
    """

    def __init__(self, field_name: str, parameters: Dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        self.allow_empty_string = self.parameters.get("allow_empty_string", False)

    def _problem(self, value: Any, record: Dict[str, Any]) -> Optional[str]:
        if self.field_name not in record:
            return "Field is missing from record"
        if value is None or (isinstance(value, float) and math.isnan(value)):
            return "Field value is null"
        if isinstance(value, str) and not value.strip() and not self.allow_empty_string:
            return "Field value is empty string"
        return None

    def validate(self, value: Any, record: Dict[str, Any]) -> None:
        problem = self._problem(value, record)
        if problem:
            raise FieldValidationError(rule_name="required_field", field_name=self.field_name, message=problem)

    @property
    def rule_type(self) -> str:
        return "required_field"
