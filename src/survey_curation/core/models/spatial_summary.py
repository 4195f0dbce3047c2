"""
Derived metadata artifacts: spatial summary and dataset summary.
"""

from pydantic import BaseModel, Field


class SpatialSummary(BaseModel):
    """Centroid and convex-hull area of the exported coordinate set."""

    central_latitude: float = Field(..., alias="centralLatitude", ge=-90.0, le=90.0)
    central_longitude: float = Field(..., alias="centralLongitude")
    area_sq_km: float = Field(..., alias="areaSqKm", ge=0.0)

    class Config:
        populate_by_name = True
        frozen = True


class DatasetSummary(BaseModel):
    """
    Metadata written alongside the canonical table.

    ``spatial`` is None when the spatial summary could not be computed.
    """

    study_id: str = Field(..., alias="studyId")
    total_records: int = Field(..., alias="totalRecords", ge=0)
    distinct_species: int = Field(..., alias="distinctSpecies", ge=0)
    distinct_samples: int = Field(..., alias="distinctSamples", ge=0)
    start_year: int | None = Field(None, alias="startYear")
    end_year: int | None = Field(None, alias="endYear")
    spatial: SpatialSummary | None = None

    class Config:
        populate_by_name = True
