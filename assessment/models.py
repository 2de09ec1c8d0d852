"""
Canonical data models for assessment records.

One AssessmentRecord is built per document request from the raw FAAS
payload. The kind-specific appraisal is a tagged union: exactly one of
LandAppraisal, BuildingAppraisal or MachineryAppraisal, selected by
PropertyKind. All records are immutable.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Union


class PropertyKind(Enum):
    """
    Kind of real property covered by a FAAS.

    Determines which appraisal variant a record holds.
    """
    LAND = "Land"
    BUILDING = "Building"
    MACHINERY = "Machinery"

    @classmethod
    def from_string(cls, value: Optional[str]) -> Optional["PropertyKind"]:
        """Convert string to PropertyKind, case-insensitive."""
        if not value:
            return None
        normalised = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == normalised:
                return member
        return None


# =============================================================================
# Base Fields
# =============================================================================

@dataclass(frozen=True)
class Owner:
    """A declared owner of the property."""
    first_name: str = ""
    middle_name: str = ""
    last_name: str = ""
    suffix: str = ""
    tin: str = ""
    contact_no: str = ""
    address: str = ""

    @property
    def display_name(self) -> str:
        """Name as printed on the forms: First M. Last Suffix."""
        middle = f"{self.middle_name[0]}." if self.middle_name else ""
        parts = [self.first_name, middle, self.last_name, self.suffix]
        return " ".join(part for part in parts if part)


@dataclass(frozen=True)
class PropertyLocation:
    street: str = ""
    barangay: str = ""
    municipality: str = ""
    province: str = ""


@dataclass(frozen=True)
class Boundaries:
    north: str = ""
    east: str = ""
    south: str = ""
    west: str = ""


@dataclass(frozen=True)
class BaseFields:
    """
    Identifiers, ownership and location shared by every property kind.

    Every field is a string and defaults to "" so layout never has to
    special-case missing values.
    """
    faas_id: str = ""
    faas_no: str = ""
    arp_no: str = ""
    pin: str = ""
    transaction_code: str = ""

    # Owner
    owner_name: str = ""
    owner_address: str = ""
    owner_tin: str = ""
    owner_tel: str = ""

    # Administrator / beneficial user
    admin_name: str = ""
    admin_address: str = ""
    admin_tin: str = ""
    admin_tel: str = ""

    location: PropertyLocation = PropertyLocation()
    boundaries: Boundaries = Boundaries()

    # Title and survey
    title_no: str = ""
    title_date: str = ""
    survey_no: str = ""
    lot_no: str = ""
    block_no: str = ""
    cct_no: str = ""

    # Record keeping
    effectivity_date: str = ""
    created_by: str = ""
    created_date: str = ""
    description: str = ""


# =============================================================================
# Line Items
# =============================================================================

@dataclass(frozen=True)
class Adjustment:
    """One step of the land market value adjustment chain (percent)."""
    factor_label: str = ""
    adjustment_value: float = 0.0


@dataclass(frozen=True)
class ImprovementLine:
    """Other improvement on land (trees, fences, and the like)."""
    name: str = ""
    quantity: float = 0.0
    unit_value: float = 0.0

    @property
    def line_total(self) -> float:
        return self.quantity * self.unit_value


@dataclass(frozen=True)
class AdditionalLine:
    """Additional item on a building (extra works not in the unit cost)."""
    name: str = ""
    quantity: float = 0.0
    unit_value: float = 0.0

    @property
    def line_total(self) -> float:
        return self.quantity * self.unit_value


@dataclass(frozen=True)
class FloorLine:
    floor_no: str = ""
    area: float = 0.0


@dataclass(frozen=True)
class MaterialLine:
    part: str = ""
    material: str = ""
    floor_no: str = ""


# =============================================================================
# Kind Appraisals (tagged union)
# =============================================================================

@dataclass(frozen=True)
class LandAppraisal:
    kind: ClassVar[PropertyKind] = PropertyKind.LAND

    classification: str = ""
    subclassification: str = ""
    area: float = 0.0
    unit_value: float = 0.0
    base_market_value: float = 0.0
    adjustments: tuple[Adjustment, ...] = ()
    improvements: tuple[ImprovementLine, ...] = ()


@dataclass(frozen=True)
class BuildingAppraisal:
    kind: ClassVar[PropertyKind] = PropertyKind.BUILDING

    building_kind: str = ""
    structural_type: str = ""
    storeys: float = 0.0
    building_age: float = 0.0
    floors: tuple[FloorLine, ...] = ()
    materials: tuple[MaterialLine, ...] = ()
    unit_cost: float = 0.0
    base_market_value: float = 0.0
    additional_items: tuple[AdditionalLine, ...] = ()
    additional_total: float = 0.0
    depreciation_rate: float = 0.0  # percent
    depreciation_cost: float = 0.0
    final_market_value: float = 0.0


@dataclass(frozen=True)
class MachineryAppraisal:
    kind: ClassVar[PropertyKind] = PropertyKind.MACHINERY

    machinery_type: str = ""
    brand_model: str = ""
    capacity: str = ""
    condition: str = ""
    date_acquired: str = ""
    year_installed: str = ""
    estimated_life: float = 0.0
    remaining_life: float = 0.0
    original_cost: float = 0.0
    conversion_factor: float = 0.0
    rcn: float = 0.0
    years_used: float = 0.0
    depreciation_rate: float = 0.0  # percent
    depreciation_value: float = 0.0


KindAppraisal = Union[LandAppraisal, BuildingAppraisal, MachineryAppraisal]


# =============================================================================
# Assessment
# =============================================================================

@dataclass(frozen=True)
class AssessmentSummary:
    """Stored assessment values. These take precedence over derived ones."""
    actual_use: str = ""
    market_value: float = 0.0
    assessment_level: float = 0.0  # percent
    assessed_value: float = 0.0
    taxable: bool = True


@dataclass(frozen=True)
class SupersededRecord:
    """The assessment this FAAS supersedes, printed at the end of the sheet."""
    pin: str = ""
    arp_no: str = ""
    td_no: str = ""
    assessed_value: float = 0.0
    previous_owner: str = ""
    effectivity: str = ""
    ar_page_no: str = ""
    recording_person: str = ""
    recorded_date: str = ""


@dataclass(frozen=True)
class AssessmentRecord:
    """
    Canonical assessment record for one property.

    Built fresh per document request and never mutated.
    """
    id: str
    kind: PropertyKind
    base: BaseFields
    appraisal: KindAppraisal
    assessment: AssessmentSummary = AssessmentSummary()
    owners: tuple[Owner, ...] = ()
    superseded: SupersededRecord = SupersededRecord()
    warnings: tuple[str, ...] = ()

    def __post_init__(self):
        """Exactly one appraisal variant, matching the kind."""
        if self.appraisal.kind is not self.kind:
            raise ValueError(
                f"{type(self.appraisal).__name__} cannot back a {self.kind.value} record"
            )

    @property
    def classification_label(self) -> str:
        """Classification printed on the Tax Declaration assessment row."""
        if isinstance(self.appraisal, LandAppraisal) and self.appraisal.classification:
            return self.appraisal.classification
        return self.kind.value
