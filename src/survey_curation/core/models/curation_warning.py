"""
CurationWarning model: a flagged-but-retained record for curator review.
"""

from pydantic import BaseModel


class CurationWarning(BaseModel):
    """
    Attributes:
        record_id: Source row identifier
        kind: Warning kind (e.g. "FamilyInGenusPosition")
        message: What was observed and what was done about it
    """

    record_id: str
    kind: str
    message: str
