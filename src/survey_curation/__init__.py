"""
survey-curation: validation and normalization of contributed ecological
survey datasets into the canonical long-term database schema.
"""

__version__ = "0.1.0"
