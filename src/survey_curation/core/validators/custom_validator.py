"""
CustomValidator - delegates to a function of (value, record).
"""

from typing import Any, Callable

from .base_validator import BaseValidator, FieldValidationError


class CustomValidator(BaseValidator):
    """
    Rule backed by a plain function, for checks that need the whole record
    (a day that must exist in the record's month, a measurement that may sit
    in either of two columns).

    Parameters:
    - validator_func: callable(value, record) raising ValueError or TypeError on failure
    - error_message: prefix for the failure message
    - skip_blank: don't call the function when the value is None (default False)
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        func = self.parameters.get("validator_func")
        if func is None:
            raise ValueError("CustomValidator requires 'validator_func' parameter")
        if not callable(func):
            raise ValueError("validator_func must be callable")

        self.validator_func: Callable[[Any, dict[str, Any]], None] = func
        self.error_message = self.parameters.get("error_message", "Custom validation failed")
        self.skip_blank = self.parameters.get("skip_blank", False)

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        if value is None and self.skip_blank:
            return
        try:
            self.validator_func(value, record)
        except (ValueError, TypeError) as e:
            raise FieldValidationError(
                rule_name="custom",
                field_name=self.field_name,
                message=f"{self.error_message}: {e}",
            )

    @property
    def rule_type(self) -> str:
        return "custom"
