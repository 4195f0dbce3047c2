"""
TypeValidator - checks, and by default coerces, a field's type.
"""

import math
from typing import Any

from .base_validator import BaseValidator, FieldValidationError


class TypeValidator(BaseValidator):
    """
    Contributed tables are often all text, so string values are coerced by
    default: "99.5" -> 99.5 for float, "1998" or "1998.0" -> 1998 for int.
    The rule engine stores the coerced value back into the record.

    Booleans never pass as numbers, and NaN/inf never pass as floats.

    Parameters:
    - expected_type: a type, or one of int/integer, float/decimal/double, str/string
    - coerce: convert compatible values (default True)
    """

    TYPE_MAPPING = {
        "integer": int,
        "int": int,
        "decimal": float,
        "float": float,
        "double": float,
        "string": str,
        "str": str,
    }

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        expected_type = self.parameters.get("expected_type")
        if not expected_type:
            raise ValueError("TypeValidator requires 'expected_type' parameter")
        if isinstance(expected_type, str):
            expected_type = self.TYPE_MAPPING.get(expected_type.lower())
            if expected_type is None:
                raise ValueError(f"Unsupported type: {self.parameters['expected_type']}")

        self.expected_type: type = expected_type
        self.coerce = self.parameters.get("coerce", True)

    def _fail(self, message: str) -> FieldValidationError:
        return FieldValidationError(rule_name="type_check", field_name=self.field_name, message=message)

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        # blanks belong to the required-field rule
        if value is None:
            return

        type_name = self.expected_type.__name__
        if not self.coerce:
            if isinstance(value, bool) or not isinstance(value, self.expected_type):
                raise self._fail(f"Expected {type_name}, got {type(value).__name__}")
            return

        try:
            self._coerce_type(value)
        except (ValueError, TypeError, OverflowError) as e:
            raise self._fail(f"Cannot coerce {type(value).__name__} to {type_name}: {e}")

    def transform(self, value: Any) -> Any:
        if value is None or not self.coerce:
            return value
        return self._coerce_type(value)

    def _coerce_type(self, value: Any) -> Any:
        if isinstance(value, bool):
            raise TypeError("booleans are not measurements")

        if self.expected_type is int:
            number = float(value)
            if not number.is_integer():
                raise ValueError(f"{value!r} is not a whole number")
            return int(number)

        if self.expected_type is float:
            number = float(value)
            if not math.isfinite(number):
                raise ValueError(f"{value!r} is not a finite number")
            return number

        if self.expected_type is str and isinstance(value, float) and value.is_integer():
            return str(int(value))

        return self.expected_type(value)

    @property
    def rule_type(self) -> str:
        return "type_check"
