"""
Assessment records: canonical models, payload normalisation and aggregation.
"""

from .models import (
    AdditionalLine,
    Adjustment,
    AssessmentRecord,
    AssessmentSummary,
    BaseFields,
    Boundaries,
    BuildingAppraisal,
    FloorLine,
    ImprovementLine,
    LandAppraisal,
    MachineryAppraisal,
    MaterialLine,
    Owner,
    PropertyKind,
    PropertyLocation,
    SupersededRecord,
)
from .normalizer import normalize_payload, parse_number
from .aggregation import Aggregates, compute_aggregates, improvements_total

__all__ = [
    "AdditionalLine",
    "Adjustment",
    "AssessmentRecord",
    "AssessmentSummary",
    "BaseFields",
    "Boundaries",
    "BuildingAppraisal",
    "FloorLine",
    "ImprovementLine",
    "LandAppraisal",
    "MachineryAppraisal",
    "MaterialLine",
    "Owner",
    "PropertyKind",
    "PropertyLocation",
    "SupersededRecord",
    "normalize_payload",
    "parse_number",
    "Aggregates",
    "compute_aggregates",
    "improvements_total",
]
