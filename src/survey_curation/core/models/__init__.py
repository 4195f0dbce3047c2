"""
Core data models for the survey curation pipeline.

All models use Pydantic for runtime validation and type safety.
"""

from .canonical_record import CANONICAL_COLUMNS, CanonicalRecord
from .curation_result import CurationResult
from .curation_warning import CurationWarning
from .normalization_result import NormalizationResult
from .rejected_record import RejectedRecord
from .run_report import RunReport
from .schema_violation import MissingColumn, SchemaViolation, WrongType
from .spatial_summary import DatasetSummary, SpatialSummary
from .survey_record import SurveyRecord
from .taxon_components import Qualifier, TaxonComponents
from .validated_record import ValidatedRecord
from .validation_result import ValidationResult

__all__ = [
    "CANONICAL_COLUMNS",
    "CanonicalRecord",
    "CurationResult",
    "CurationWarning",
    "DatasetSummary",
    "MissingColumn",
    "NormalizationResult",
    "Qualifier",
    "RejectedRecord",
    "RunReport",
    "SchemaViolation",
    "SpatialSummary",
    "SurveyRecord",
    "TaxonComponents",
    "ValidatedRecord",
    "ValidationResult",
    "WrongType",
]
