"""
Rule configuration management.

Loads per-dataset curation configuration from YAML files and builds the
ordered field rules the FieldNormalizer applies.
"""

from pathlib import Path
from typing import Any, Callable

import yaml
from pydantic import ValidationError

from .curation_config import CurationConfig


class CurationConfigLoader:
    """
    Loads a dataset's curation configuration from a YAML file.

    Expected YAML format:
    ```yaml
    studyId: 512
    columnMapping:
      abundance: Count
      taxon: Species
      family: Family
      year: Year
    fixedCoordinates: [51.75, 1.25]
    poolFields: [Stage]
    poolExemptTaxa: ["Lycosa sp1"]
    genusCorrections:
      Aranaeus: Araneus
    secondaryFieldRenames:
      Plot A: PlotA
    ```
    """

    def __init__(self, config_path: str | Path):
        """
        Initialize the config loader.

        Args:
            config_path: Path to the YAML configuration file
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Curation configuration file not found: {config_path}")

    def load(self) -> CurationConfig:
        """
        Load and validate the configuration.

        Returns:
            CurationConfig for the dataset

        Raises:
            ValueError: If YAML is invalid or the configuration is inconsistent
        """
        with open(self.config_path) as f:
            try:
                raw = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {self.config_path}: {e}")

        if not isinstance(raw, dict):
            raise ValueError("Configuration file must contain a mapping")

        # A top-level "curation" section is accepted for shared config files
        section = raw.get("curation", raw)

        try:
            return CurationConfig.model_validate(section)
        except ValidationError as e:
            raise ValueError(f"Invalid curation configuration in {self.config_path}: {e}")


class RuleConfigBuilder:
    """
    Programmatically build ordered field rule configurations.

    Every rule carries a ``reason`` code that ends up in the run report when
    the rule drops a record.
    """

    def __init__(self):
        """Initialize empty rule configuration."""
        self.rules: list[dict[str, Any]] = []

    def _add(
        self,
        rule_name: str,
        rule_type: str,
        field_name: str,
        parameters: dict[str, Any],
        reason: str,
    ) -> "RuleConfigBuilder":
        self.rules.append({
            "rule_name": rule_name,
            "rule_type": rule_type,
            "field_name": field_name,
            "parameters": parameters,
            "reason": reason,
            "enabled": True,
        })
        return self

    def add_required_field(
        self,
        field_name: str,
        reason: str = "MissingValue",
        allow_empty_string: bool = False,
    ) -> "RuleConfigBuilder":
        """Add a required field rule."""
        return self._add(
            f"{field_name}_required",
            "required_field",
            field_name,
            {"allow_empty_string": allow_empty_string},
            reason,
        )

    def add_type_check(
        self,
        field_name: str,
        expected_type: str,
        reason: str = "InvalidType",
        coerce: bool = True,
    ) -> "RuleConfigBuilder":
        """Add a type check rule; the coerced value replaces the original."""
        return self._add(
            f"{field_name}_type_check",
            "type_check",
            field_name,
            {"expected_type": expected_type, "coerce": coerce},
            reason,
        )

    def add_range(
        self,
        field_name: str,
        min_value: float | None = None,
        max_value: float | None = None,
        min_exclusive: float | None = None,
        reason: str = "OutOfRange",
    ) -> "RuleConfigBuilder":
        """Add a range validation rule."""
        params: dict[str, Any] = {}
        if min_value is not None:
            params["min"] = min_value
        if max_value is not None:
            params["max"] = max_value
        if min_exclusive is not None:
            params["min_exclusive"] = min_exclusive
        return self._add(f"{field_name}_range", "range", field_name, params, reason)

    def add_custom(
        self,
        rule_name: str,
        field_name: str,
        validator_func: Callable[[Any, dict[str, Any]], None],
        reason: str,
        error_message: str = "Custom validation failed",
        skip_blank: bool = False,
    ) -> "RuleConfigBuilder":
        """Add a rule backed by a function of (value, record)."""
        params = {
            "validator_func": validator_func,
            "error_message": error_message,
            "skip_blank": skip_blank,
        }
        return self._add(rule_name, "custom", field_name, params, reason)

    def build(self) -> list[dict[str, Any]]:
        """Build and return the rule configuration."""
        return self.rules
