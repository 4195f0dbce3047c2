"""
Applies the ordered field rules of a dataset to survey records.

Each rule is compiled once into a validator. Validating a record runs the
rules in order over its processed payload, writes coerced values back, and
reports the outcome as a ValidationResult whose first reason is the one a
rejected record is reported under.
"""

from collections import Counter
from typing import Any, NamedTuple

from survey_curation.core.models import SurveyRecord, ValidationResult
from survey_curation.core.validators import (
    BaseValidator,
    CustomValidator,
    FieldValidationError,
    RangeValidator,
    RequiredFieldValidator,
    TypeValidator,
)


class CompiledRule(NamedTuple):
    name: str
    reason: str
    validator: BaseValidator


class RuleEngine:
    """
    Runs field rules over survey records.

    Rule configurations are dicts with rule_name, rule_type, field_name and
    optionally parameters, reason (the code reported for a rejected record,
    defaults to the rule name) and enabled.
    Build them with RuleConfigBuilder.

    A record stops at its first failing rule, so every rejection carries
    exactly one reason.
    """

    VALIDATOR_REGISTRY = {
        "required_field": RequiredFieldValidator,
        "type_check": TypeValidator,
        "range": RangeValidator,
        "custom": CustomValidator,
    }

    def __init__(self, rules: list[dict[str, Any]]):
        self.rules = rules
        self.validators: list[CompiledRule] = [
            self._compile(rule) for rule in rules if rule.get("enabled", True)
        ]

    def _compile(self, rule: dict[str, Any]) -> CompiledRule:
        rule_name = rule["rule_name"]
        validator_class = self.VALIDATOR_REGISTRY.get(rule["rule_type"])
        if validator_class is None:
            raise ValueError(f"Unknown rule type: {rule['rule_type']}")
        try:
            validator = validator_class(rule["field_name"], rule.get("parameters", {}))
        except ValueError as e:
            raise ValueError(f"Failed to create validator for rule '{rule_name}': {e}")
        return CompiledRule(
            name=rule_name,
            reason=rule.get("reason", rule_name),
            validator=validator,
        )

    def validate_record(self, record: SurveyRecord) -> ValidationResult:
        """
        Validate one record, coercing values in place.

        ``record.processed_payload`` is created from ``raw_payload`` when
        absent; the record's validation_status is set to valid or invalid.
        """
        if record.processed_payload is None:
            record.processed_payload = dict(record.raw_payload)
        payload = record.processed_payload
        result = ValidationResult(record_id=record.record_id, passed=True)

        for rule in self.validators:
            field_name = rule.validator.field_name
            value = payload.get(field_name)
            try:
                rule.validator.validate(value, payload)
            except FieldValidationError as e:
                result.failed_rules.append(rule.name)
                result.reasons.append(rule.reason)
                result.error_messages.append(e.message)
                result.failed_fields.append(field_name)
                break

            result.passed_rules.append(rule.name)
            coerced = rule.validator.transform(value)
            if field_name in payload and type(coerced) is not type(value):
                payload[field_name] = coerced
                result.transformations_applied.append(f"{field_name}_coerced_to_{type(coerced).__name__}")

        result.passed = not result.failed_rules
        record.validation_status = "valid" if result.passed else "invalid"
        return result

    def get_rule_summary(self) -> dict[str, Any]:
        """Rule counts overall and by rule type."""
        return {
            "total_rules": len(self.validators),
            "rules_by_type": dict(Counter(rule.validator.rule_type for rule in self.validators)),
        }
