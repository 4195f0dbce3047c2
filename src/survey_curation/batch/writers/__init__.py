"""
Export sinks for curated datasets.
"""

from .canonical_writer import CanonicalWriter

__all__ = [
    "CanonicalWriter",
]
