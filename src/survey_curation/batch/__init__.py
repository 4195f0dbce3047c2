"""
Batch curation of contributed datasets.
"""

from .pipeline import CurationPipeline
from .readers import CSVReader, FileReader
from .writers import CanonicalWriter

__all__ = [
    "CurationPipeline",
    "CSVReader",
    "FileReader",
    "CanonicalWriter",
]
