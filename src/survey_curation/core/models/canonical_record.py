"""
CanonicalRecord model: one row of the exported long-term database table.
"""

from pydantic import BaseModel, Field

# Fixed output column order
CANONICAL_COLUMNS = [
    "Abundance",
    "Biomass",
    "Family",
    "Genus",
    "Species",
    "SampleDescription",
    "Plot",
    "Latitude",
    "Longitude",
    "DepthElevation",
    "Day",
    "Month",
    "Year",
    "StudyID",
]


class CanonicalRecord(BaseModel):
    """
    The exported unit.

    Blank is a meaningful value for Plot, DepthElevation, Day, Month and
    StudyID: it is held as "" rather than None so that serialization never
    writes a null marker such as "None" or "nan".
    """

    abundance: float | None = Field(None, alias="Abundance")
    biomass: float | None = Field(None, alias="Biomass")
    family: str = Field("", alias="Family")
    genus: str = Field("", alias="Genus")
    species: str = Field(..., alias="Species")
    sample_description: str = Field(..., min_length=1, alias="SampleDescription")
    plot: str = Field("", alias="Plot")
    latitude: float | None = Field(None, alias="Latitude")
    longitude: float | None = Field(None, alias="Longitude")
    depth_elevation: str = Field("", alias="DepthElevation")
    day: str = Field("", alias="Day")
    month: str = Field("", alias="Month")
    year: int | None = Field(None, alias="Year")
    study_id: str = Field("", alias="StudyID")

    def identity(self) -> tuple[str, str, str, str]:
        return (self.sample_description, self.family, self.genus, self.species)

    class Config:
        populate_by_name = True
        frozen = True
        json_schema_extra = {
            "example": {
                "Abundance": 4.0,
                "Biomass": None,
                "Family": "Lycosidae",
                "Genus": "Lycosa",
                "Species": "sp1",
                "SampleDescription": "512_51.75_1.25_1998",
                "Plot": "",
                "Latitude": 51.75,
                "Longitude": 1.25,
                "DepthElevation": "",
                "Day": "",
                "Month": "6",
                "Year": 1998,
                "StudyID": "512",
            }
        }
