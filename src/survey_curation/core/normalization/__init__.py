"""
Field normalization: coercion, primary-field rules and pooling.
"""

from .field_normalizer import FieldNormalizer, build_field_rules

__all__ = [
    "FieldNormalizer",
    "build_field_rules",
]
