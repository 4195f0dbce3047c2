"""
TaxonComponents model: a taxon label decomposed into family, genus and species.
"""

import re
from enum import Enum

from pydantic import BaseModel, field_validator

FAMILY_SUFFIXES = ("idae", "eae")


class Qualifier(str, Enum):
    """How far a determination was resolved."""

    NONE = "none"
    UNCERTAIN = "uncertain"
    AGGREGATE = "aggregate"


class TaxonComponents(BaseModel):
    """
    Parsed taxonomic identity of one record.

    Attributes:
        family: Family name, or "" when not supplied
        genus: Single capitalized genus word, or "" for family-level records
        species: Epithet only, "sp"/"sp<N>" when unresolved, or "<epithet> agg."
        qualifier: none, uncertain or aggregate
    """

    family: str = ""
    genus: str = ""
    species: str
    qualifier: Qualifier = Qualifier.NONE

    @field_validator("genus")
    @classmethod
    def check_genus(cls, v: str) -> str:
        """Genus must be one capitalized word that is not a family name."""
        if not v:
            return v
        if not re.fullmatch(r"[A-Z][a-z\-]*", v):
            raise ValueError(f"genus must be a single capitalized word, got {v!r}")
        if v.lower().endswith(FAMILY_SUFFIXES):
            raise ValueError(f"genus {v!r} carries a family suffix")
        return v

    @field_validator("species")
    @classmethod
    def check_species(cls, v: str) -> str:
        """Species holds only the epithet, never the bound genus."""
        if not v:
            raise ValueError("species must not be blank")
        if " " in v and not v.endswith(" agg."):
            raise ValueError(f"species must be a single epithet, got {v!r}")
        return v

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "family": "Lycosidae",
                "genus": "Lycosa",
                "species": "sp2",
                "qualifier": "uncertain",
            }
        }
