"""
ValidatedRecord model: a contributed row after coercion and primary-field checks.
"""

import calendar
import math
from typing import Any

from pydantic import BaseModel, Field, model_validator

from .taxon_components import Qualifier


class ValidatedRecord(BaseModel):
    """
    A row that survived field normalization.

    Taxonomic fields start as the contributor's text and are replaced by the
    parsed components once the TaxonParser has run. ``sample_key`` is set
    exactly once by the SampleKeyBuilder.

    Attributes:
        record_id: Source row identifier(s); aggregated rows join their ids with ","
        study_id: Dataset identifier
        abundance: Positive count/density, or None
        biomass: Positive biomass, or None
        taxon: Contributor's taxon label (genus + epithet text)
        family: Family text, or ""
        genus: Parsed genus, or ""
        species: Parsed species epithet marker, or ""
        qualifier: Determination qualifier from the taxon parser
        plot: Plot identifier text, or None
        latitude: Decimal degrees
        longitude: Decimal degrees in the dataset's convention
        depth_elevation: Depth or elevation text, or None
        day, month, year: Calendar components
        treatment: Free secondary descriptor, or None
        extra: Unmapped source columns kept for pooling and key fields
        sample_key: Sampling-event identity
    """

    record_id: str = Field(..., min_length=1)
    study_id: str
    abundance: float | None = Field(None, gt=0)
    biomass: float | None = Field(None, gt=0)
    taxon: str = ""
    family: str = ""
    genus: str = ""
    species: str = ""
    qualifier: Qualifier = Qualifier.NONE
    plot: str | None = None
    latitude: float | None = Field(None, ge=-90.0, le=90.0)
    longitude: float | None = None
    depth_elevation: str | None = None
    day: int | None = Field(None, ge=1, le=31)
    month: int | None = Field(None, ge=1, le=12)
    year: int | None = Field(None, ge=1, le=9999)
    treatment: str | None = None
    extra: dict[str, Any] = Field(default_factory=dict)
    sample_key: str | None = None

    @model_validator(mode="after")
    def check_calendar_date(self) -> "ValidatedRecord":
        """Day must exist in the given month (and year, when known)."""
        if self.day is not None and self.month is not None:
            year = self.year if self.year is not None else 2000  # leap year
            last_day = calendar.monthrange(year, self.month)[1]
            if self.day > last_day:
                raise ValueError(f"day {self.day} does not exist in month {self.month} of {year}")
        for name in ("abundance", "biomass", "latitude", "longitude"):
            value = getattr(self, name)
            if value is not None and not math.isfinite(value):
                raise ValueError(f"{name} must be finite")
        return self

    def measurement(self, field_name: str) -> float | None:
        return getattr(self, field_name)

    def group_key(self) -> tuple[str, str, str, str]:
        """Identity of one species at one sampling event."""
        return (self.sample_key or "", self.family, self.genus, self.species)

    class Config:
        json_schema_extra = {
            "example": {
                "record_id": "17",
                "study_id": "512",
                "abundance": 3.0,
                "taxon": "Araneus sp.",
                "family": "Araneidae",
                "genus": "Araneus",
                "species": "sp",
                "qualifier": "uncertain",
                "latitude": 51.75,
                "longitude": 1.25,
                "year": 1998,
                "sample_key": "512_51.75_1.25_1998",
            }
        }
