"""
Per-dataset curation configuration.

One CurationConfig is built per contributed dataset and passed explicitly to
every component. Correction and rename tables are read-only for the lifetime
of a run.
"""

import re
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from survey_curation.core.models.taxon_components import FAMILY_SUFFIXES

MEASUREMENT_FIELDS = ("abundance", "biomass")
TAXONOMIC_FIELDS = ("taxon", "family", "genus", "species")
TEMPORAL_FIELDS = ("year", "month", "day")
SECONDARY_FIELDS = ("plot", "depth_elevation", "treatment")

# Canonical fields a source column can be mapped onto
CANONICAL_FIELDS = (
    *MEASUREMENT_FIELDS,
    *TAXONOMIC_FIELDS,
    "latitude",
    "longitude",
    *TEMPORAL_FIELDS,
    "date",
    *SECONDARY_FIELDS,
)

DEFAULT_SAMPLE_KEY_FIELDS = [
    "study_id",
    "plot",
    "latitude",
    "longitude",
    "depth_elevation",
    "day",
    "month",
    "year",
]

GENUS_WORD_RE = re.compile(r"[A-Za-z][A-Za-z\-]*")

DEFAULT_BLANK_MARKERS = frozenset({"", "NA", "N/A", "n/a", "NaN", "nan", "NULL", "null", "None", "-"})

# Canonical fields whose subdivisions may be summed away
POOLABLE_FIELDS = (*TEMPORAL_FIELDS, *SECONDARY_FIELDS)

# Expected type class per kind of canonical field
TYPE_CLASS_BY_FIELD = {
    **{name: "numeric" for name in MEASUREMENT_FIELDS},
    **{name: "text_or_categorical" for name in TAXONOMIC_FIELDS},
    **{name: "integer_or_categorical" for name in TEMPORAL_FIELDS},
}


class CurationConfig(BaseModel):
    """
    Configuration for curating one dataset.

    YAML keys use camelCase (``poolFields``, ``genusCorrections``...); the
    snake_case attribute names are accepted as well.

    Attributes:
        study_id: Dataset identifier, written to every exported row
        column_mapping: Canonical field -> contributor column name
        expected_types: Contributor column -> type class; derived from the
            mapping when omitted
        pool_fields: Contributor columns whose subdivisions are summed away
        pool_exempt_taxa: Taxon labels never pooled
        fixed_coordinates: (latitude, longitude) broadcast to every row
        sample_key_fields: Ordered descriptor fields forming the sample key
        genus_corrections: Known genus misspelling -> correct genus
        secondary_field_renames: Known secondary-value misspelling -> correct value
        clear_after_key: Key fields blanked in the output once the key is built
        unrecoverable_fields: Secondary fields whose blank value drops the row
        key_includes_fixed_coordinates: Whether broadcast coordinates enter the key
        promote_subgenus: Replace the genus with a parenthetical subgenus
        latitude_range: Inclusive valid latitude range
        longitude_range: Inclusive valid longitude range (dataset convention)
        blank_markers: Text values treated as blank
        date_format: strptime format for a mapped "date" column
    """

    study_id: str = Field(..., min_length=1, alias="studyId")
    column_mapping: dict[str, str] = Field(..., alias="columnMapping")
    expected_types: dict[str, str] | None = Field(None, alias="expectedTypes")
    pool_fields: frozenset[str] = Field(default_factory=frozenset, alias="poolFields")
    pool_exempt_taxa: frozenset[str] = Field(default_factory=frozenset, alias="poolExemptTaxa")
    fixed_coordinates: tuple[float, float] | None = Field(None, alias="fixedCoordinates")
    sample_key_fields: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SAMPLE_KEY_FIELDS), alias="sampleKeyFields"
    )
    genus_corrections: dict[str, str] = Field(default_factory=dict, alias="genusCorrections")
    secondary_field_renames: dict[str, str] = Field(default_factory=dict, alias="secondaryFieldRenames")
    clear_after_key: list[str] = Field(default_factory=list, alias="clearAfterKey")
    unrecoverable_fields: list[str] = Field(default_factory=list, alias="unrecoverableFields")
    key_includes_fixed_coordinates: bool = Field(True, alias="keyIncludesFixedCoordinates")
    promote_subgenus: bool = Field(True, alias="promoteSubgenus")
    latitude_range: tuple[float, float] = Field((-90.0, 90.0), alias="latitudeRange")
    longitude_range: tuple[float, float] = Field((0.0, 180.0), alias="longitudeRange")
    blank_markers: frozenset[str] = Field(DEFAULT_BLANK_MARKERS, alias="blankMarkers")
    date_format: str | None = Field(None, alias="dateFormat")

    @field_validator("study_id", mode="before")
    @classmethod
    def coerce_study_id(cls, v: Any) -> Any:
        """YAML reads bare study numbers as ints."""
        return str(v) if isinstance(v, int) else v

    @field_validator("column_mapping")
    @classmethod
    def check_column_mapping(cls, v: dict[str, str]) -> dict[str, str]:
        unknown = sorted(set(v) - set(CANONICAL_FIELDS))
        if unknown:
            raise ValueError(f"Unknown canonical field(s) in columnMapping: {unknown}")
        if not any(name in v for name in MEASUREMENT_FIELDS):
            raise ValueError("columnMapping must map at least one of: abundance, biomass")
        if "taxon" not in v and "genus" not in v and "family" not in v:
            raise ValueError("columnMapping must map taxon, genus or family")
        return v

    @field_validator("genus_corrections")
    @classmethod
    def check_genus_corrections(cls, v: dict[str, str]) -> dict[str, str]:
        """A correction must name one genus word."""
        bad = {
            wrong: right for wrong, right in v.items()
            if not GENUS_WORD_RE.fullmatch(right) or right.lower().endswith(FAMILY_SUFFIXES)
        }
        if bad:
            raise ValueError(f"genusCorrections targets must be single genus words, got {bad}")
        return v

    @field_validator("expected_types")
    @classmethod
    def check_expected_types(cls, v: dict[str, str] | None) -> dict[str, str] | None:
        if v is None:
            return v
        allowed = {"numeric", "integer_or_categorical", "text_or_categorical", "any"}
        bad = {column: type_class for column, type_class in v.items() if type_class not in allowed}
        if bad:
            raise ValueError(f"Unknown type class(es) in expectedTypes: {bad}; expected one of {sorted(allowed)}")
        return v

    @model_validator(mode="after")
    def check_consistency(self) -> "CurationConfig":
        lat_min, lat_max = self.latitude_range
        lon_min, lon_max = self.longitude_range
        if not -90.0 <= lat_min <= lat_max <= 90.0:
            raise ValueError(f"latitudeRange {self.latitude_range} must lie within [-90, 90]")
        if not -180.0 <= lon_min <= lon_max <= 360.0:
            raise ValueError(f"longitudeRange {self.longitude_range} is not a valid longitude range")

        if ("latitude" in self.column_mapping) != ("longitude" in self.column_mapping):
            raise ValueError("latitude and longitude must be mapped together")

        unmapped = sorted(set(self.unrecoverable_fields) - set(self.column_mapping))
        if unmapped:
            raise ValueError(f"unrecoverableFields must be mapped fields, got {unmapped}")

        if self.fixed_coordinates is not None:
            if "latitude" in self.column_mapping or "longitude" in self.column_mapping:
                raise ValueError("fixedCoordinates cannot be combined with mapped latitude/longitude columns")

        self._check_pool_fields()

        stray = sorted(set(self.clear_after_key) - set(self.sample_key_fields))
        if stray:
            raise ValueError(f"clearAfterKey field(s) not in sampleKeyFields: {stray}")
        if len(set(self.sample_key_fields)) != len(self.sample_key_fields):
            raise ValueError("sampleKeyFields must not contain duplicates")
        return self

    def _check_pool_fields(self) -> None:
        mapped_columns = {column: name for name, column in self.column_mapping.items()}
        for entry in sorted(self.pool_fields):
            name = entry if entry in self.column_mapping else mapped_columns.get(entry)
            if name is None and entry in CANONICAL_FIELDS:
                raise ValueError(f"poolFields entry {entry!r} names a canonical field that is not mapped")
            if name is not None and name not in POOLABLE_FIELDS:
                raise ValueError(
                    f"poolFields entry {entry!r} resolves to {name!r}; only {list(POOLABLE_FIELDS)} can be pooled"
                )

    @property
    def pooled_fields(self) -> frozenset[str]:
        """Mapped canonical fields named in poolFields, directly or by source column."""
        return frozenset(
            name for name, column in self.column_mapping.items()
            if name in self.pool_fields or column in self.pool_fields
        )

    @property
    def pooled_columns(self) -> frozenset[str]:
        """Unmapped source columns named in poolFields."""
        mapped = set(self.column_mapping) | set(self.column_mapping.values())
        return frozenset(self.pool_fields - mapped)

    @property
    def measurement_fields(self) -> list[str]:
        """Mapped measurement fields, abundance first."""
        return [name for name in MEASUREMENT_FIELDS if name in self.column_mapping]

    @property
    def has_coordinates(self) -> bool:
        return self.fixed_coordinates is not None or (
            "latitude" in self.column_mapping and "longitude" in self.column_mapping
        )

    def type_manifest(self) -> dict[str, str]:
        """
        Contributor column -> expected type class.

        Explicit ``expected_types`` entries win over the classes derived from
        the mapped canonical field.
        """
        manifest = {
            column: TYPE_CLASS_BY_FIELD.get(field_name, "any")
            for field_name, column in self.column_mapping.items()
        }
        for column in self.pooled_columns:
            manifest.setdefault(column, "any")
        if self.expected_types:
            manifest.update(self.expected_types)
        return manifest

    class Config:
        populate_by_name = True
        frozen = True
        json_schema_extra = {
            "example": {
                "studyId": "512",
                "columnMapping": {
                    "abundance": "Count",
                    "taxon": "Species",
                    "family": "Family",
                    "year": "Year",
                    "month": "Month",
                },
                "fixedCoordinates": [51.75, 1.25],
                "poolFields": ["Stage"],
                "genusCorrections": {"Aranaeus": "Araneus"},
            }
        }
