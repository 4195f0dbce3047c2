"""
Field rule interface.

A rule checks one field of a record. Rules run after the source columns
have been renamed to canonical fields, so ``record`` is keyed by canonical
names (abundance, latitude, month...).
"""

from abc import ABC, abstractmethod
from typing import Any

from survey_curation.core.errors import CurationError


class FieldValidationError(CurationError):
    """A field rule failed for one record."""

    def __init__(self, rule_name: str, field_name: str, message: str):
        self.rule_name = rule_name
        self.field_name = field_name
        self.message = message
        super().__init__(f"[{rule_name}] {field_name}: {message}")


class BaseValidator(ABC):
    """
    One rule on one canonical field.

    Subclasses implement ``validate`` and ``rule_type``; those that coerce
    (the type check) also override ``transform``.
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        self.field_name = field_name
        self.parameters = parameters or {}

    @abstractmethod
    def validate(self, value: Any, record: dict[str, Any]) -> None:
        """
        Check ``value``; ``record`` is the whole payload for cross-field rules.

        Raises:
            FieldValidationError: If the rule fails
        """

    def transform(self, value: Any) -> Any:
        """Value stored back into the record once the rule passed."""
        return value

    @property
    @abstractmethod
    def rule_type(self) -> str:
        """Registry key (required_field, type_check, range, custom)."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(field={self.field_name}, params={self.parameters})"
