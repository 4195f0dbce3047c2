"""
RangeValidator - checks a numeric value against inclusive/exclusive bounds.
"""

import operator
from typing import Any

from .base_validator import BaseValidator, FieldValidationError

# parameter name -> (comparison that must hold, message template)
BOUNDS = {
    "min": (operator.ge, "Value {value} is less than minimum {bound}"),
    "min_exclusive": (operator.gt, "Value {value} must be greater than {bound}"),
    "max": (operator.le, "Value {value} exceeds maximum {bound}"),
    "max_exclusive": (operator.lt, "Value {value} must be less than {bound}"),
}


class RangeValidator(BaseValidator):
    """
    Checks that a numeric field lies within bounds.

    Parameters (at least one):
    - min / max: inclusive bounds, e.g. latitude in [-90, 90]
    - min_exclusive / max_exclusive: strict bounds, e.g. abundance > 0

    Runs after the type check, so the value is already a number; blank
    values are left to the required-field rule.
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        self.bounds = [
            (name, self.parameters[name])
            for name in BOUNDS
            if self.parameters.get(name) is not None
        ]
        if not self.bounds:
            raise ValueError(f"RangeValidator requires at least one of: {', '.join(BOUNDS)}")

    @property
    def min_value(self) -> float | None:
        return self.parameters.get("min")

    @property
    def max_value(self) -> float | None:
        return self.parameters.get("max")

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        """
        Raises:
            FieldValidationError: If the value is not a number or is out of bounds
        """
        if value is None:
            return

        if isinstance(value, bool) or not isinstance(value, int | float):
            raise FieldValidationError(
                rule_name="range",
                field_name=self.field_name,
                message=f"Value must be numeric, got {type(value).__name__}",
            )

        for name, bound in self.bounds:
            holds, template = BOUNDS[name]
            if not holds(value, bound):
                raise FieldValidationError(
                    rule_name="range",
                    field_name=self.field_name,
                    message=template.format(value=value, bound=bound),
                )

    @property
    def rule_type(self) -> str:
        return "range"
