"""
Taxon label decomposition and correction.
"""

from .taxon_parser import TaxonParser

__all__ = [
    "TaxonParser",
]
