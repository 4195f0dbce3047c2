"""
Field rule engine and curation configuration management.
"""

from .curation_config import CANONICAL_FIELDS, CurationConfig
from .rule_config import CurationConfigLoader, RuleConfigBuilder
from .rule_engine import RuleEngine

__all__ = [
    "CANONICAL_FIELDS",
    "CurationConfig",
    "CurationConfigLoader",
    "RuleConfigBuilder",
    "RuleEngine",
]
