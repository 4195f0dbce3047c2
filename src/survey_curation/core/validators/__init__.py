"""
Primary-field validation rules.

Provides validators for required fields, type checking and coercion, ranges,
and custom (record-context) validation logic.
"""

from .base_validator import BaseValidator, FieldValidationError
from .custom_validator import CustomValidator
from .range_validator import RangeValidator
from .required_field_validator import RequiredFieldValidator
from .type_validator import TypeValidator

__all__ = [
    "BaseValidator",
    "FieldValidationError",
    "RequiredFieldValidator",
    "TypeValidator",
    "RangeValidator",
    "CustomValidator",
]
