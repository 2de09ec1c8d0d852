"""
Canonical Record Normalizer

Converts a raw FAAS payload, whose shape varies with property_kind, into a
single AssessmentRecord.

Rules:
- The faas.property_kind discriminator selects the kind-specific sub-object.
  If it disagrees with the sub-objects present, the discriminator wins and
  the appraisal is left at its defaults.
- Numbers arrive as strings, numbers or nulls. Unparsable values become 0.
- Text never becomes None; absent text is "".
- Normalisation never raises on bad data. Data-quality problems are logged
  and kept on record.warnings for the caller.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Mapping, Optional

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


logger = logging.getLogger(__name__)

_TRUE_FLAGS = {"1", "true", "yes", "y", "t", "taxable"}
_FALSE_FLAGS = {"0", "false", "no", "n", "f", "exempt"}

# Order used to infer the kind when the discriminator is missing or unknown
_KIND_SUB_OBJECTS: tuple[tuple[PropertyKind, str], ...] = (
    (PropertyKind.LAND, "land"),
    (PropertyKind.BUILDING, "building"),
    (PropertyKind.MACHINERY, "machinery"),
)


# =============================================================================
# Field Parsers
# =============================================================================

def parse_number(value: Any) -> float:
    """
    Parse a numeric source field.

    Accepts numbers and numeric strings (thousands separators and a trailing
    % are tolerated). Missing, unparsable, NaN or infinite values yield 0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", "").rstrip("%").strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            logger.debug("Unparsable numeric value %r treated as 0", value)
            return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def parse_text(value: Any) -> str:
    """Parse a text source field; None becomes ""."""
    if value is None:
        return ""
    return str(value).strip()


def parse_flag(value: Any, default: Optional[bool] = None) -> Optional[bool]:
    """Parse a 0/1 style flag. Unknown or absent values return the default."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    text = str(value).strip().lower()
    if text in _TRUE_FLAGS:
        return True
    if text in _FALSE_FLAGS:
        return False
    return default


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _sequence(value: Any) -> list[Mapping[str, Any]]:
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    """Return the first present, non-empty value among alternative field names."""
    for key in keys:
        value = raw.get(key)
        if value is not None and value != "":
            return value
    return None


def _join(values: Iterable[str]) -> str:
    return ", ".join(value for value in values if value)


# =============================================================================
# Base Fields
# =============================================================================

def normalize_owners(raw_owners: Any) -> tuple[Owner, ...]:
    """Normalise the optional owners list."""
    return tuple(
        Owner(
            first_name=parse_text(raw.get("first_name")),
            middle_name=parse_text(raw.get("middle_name")),
            last_name=parse_text(raw.get("last_name")),
            suffix=parse_text(raw.get("suffix")),
            tin=parse_text(raw.get("tin_no")),
            contact_no=parse_text(raw.get("contact_no")),
            address=parse_text(raw.get("address_house_no")),
        )
        for raw in _sequence(raw_owners)
    )


def normalize_base_fields(faas: Mapping[str, Any], owners: tuple[Owner, ...]) -> BaseFields:
    """
    Normalise identifiers, ownership and location.

    The owner name falls back to the joined owners list; TIN and telephone
    come from the owners list when the FAAS does not carry them.
    """
    owner_name = parse_text(faas.get("owner_name")) or _join(o.display_name for o in owners)
    owner_address = parse_text(faas.get("owner_address")) or (owners[0].address if owners else "")
    owner_tin = parse_text(faas.get("owner_tin")) or _join(o.tin for o in owners)
    owner_tel = parse_text(faas.get("owner_tel")) or _join(o.contact_no for o in owners)

    return BaseFields(
        faas_id=parse_text(faas.get("faas_id")),
        faas_no=parse_text(faas.get("faas_no")),
        arp_no=parse_text(faas.get("arp_no")),
        pin=parse_text(faas.get("pin")),
        transaction_code=parse_text(faas.get("faas_type")),
        owner_name=owner_name,
        owner_address=owner_address,
        owner_tin=owner_tin,
        owner_tel=owner_tel,
        admin_name=parse_text(faas.get("admin_name")),
        admin_address=parse_text(faas.get("admin_address")),
        admin_tin=parse_text(faas.get("admin_tin")),
        admin_tel=parse_text(_first(faas, "admin_tel", "admin_contact_no")),
        location=PropertyLocation(
            street=parse_text(_first(faas, "street", "location_street")),
            barangay=parse_text(_first(faas, "barangay", "location_barangay")),
            municipality=parse_text(_first(faas, "lg_code", "municipality", "location_municipality")),
            province=parse_text(_first(faas, "province", "location_province")),
        ),
        boundaries=Boundaries(
            north=parse_text(faas.get("boundary_north")),
            east=parse_text(faas.get("boundary_east")),
            south=parse_text(faas.get("boundary_south")),
            west=parse_text(faas.get("boundary_west")),
        ),
        title_no=parse_text(_first(faas, "oct_no", "title_no")),
        title_date=parse_text(faas.get("title_date")),
        survey_no=parse_text(faas.get("survey_no")),
        lot_no=parse_text(faas.get("lot_no")),
        block_no=parse_text(faas.get("block_no")),
        cct_no=parse_text(faas.get("cct_no")),
        effectivity_date=parse_text(faas.get("effectivity_date")),
        created_by=parse_text(faas.get("created_by")),
        created_date=parse_text(faas.get("created_date")),
        description=parse_text(faas.get("description")),
    )


def normalize_superseded(raw: Any) -> SupersededRecord:
    """Normalise the optional superseded-assessment block."""
    raw = _mapping(raw)
    return SupersededRecord(
        pin=parse_text(raw.get("pin")),
        arp_no=parse_text(raw.get("arp_no")),
        td_no=parse_text(raw.get("td_no")),
        assessed_value=parse_number(raw.get("assessed_value")),
        previous_owner=parse_text(_first(raw, "owner_name", "previous_owner")),
        effectivity=parse_text(raw.get("effectivity")),
        ar_page_no=parse_text(raw.get("ar_page_no")),
        recording_person=parse_text(raw.get("recorded_by")),
        recorded_date=parse_text(raw.get("recorded_date")),
    )


# =============================================================================
# Kind Appraisals
# =============================================================================

def normalize_land(raw: Mapping[str, Any]) -> LandAppraisal:
    appraisal = _mapping(raw.get("appraisal"))
    return LandAppraisal(
        classification=parse_text(appraisal.get("classification")),
        subclassification=parse_text(appraisal.get("subclassification")),
        area=parse_number(appraisal.get("area")),
        unit_value=parse_number(appraisal.get("unit_value")),
        base_market_value=parse_number(appraisal.get("base_market_value")),
        adjustments=tuple(
            Adjustment(
                factor_label=parse_text(_first(adj, "factor", "factor_label")),
                adjustment_value=parse_number(_first(adj, "adjustment", "adjustment_value")),
            )
            for adj in _sequence(raw.get("adjustments"))
        ),
        improvements=tuple(
            ImprovementLine(
                name=parse_text(_first(imp, "improvement_name", "name")),
                quantity=parse_number(_first(imp, "qty", "quantity")),
                unit_value=parse_number(imp.get("unit_value")),
            )
            for imp in _sequence(raw.get("improvements"))
        ),
    )


def _additional_line(raw: Mapping[str, Any]) -> AdditionalLine:
    quantity = parse_number(raw.get("quantity"))
    unit_value = parse_number(_first(raw, "unit_cost", "unit_value"))
    total_cost = parse_number(raw.get("total_cost"))
    if not unit_value and total_cost and quantity:
        unit_value = total_cost / quantity
    return AdditionalLine(
        name=parse_text(_first(raw, "item_name", "name")),
        quantity=quantity,
        unit_value=unit_value,
    )


def normalize_building(raw: Mapping[str, Any]) -> BuildingAppraisal:
    general = _mapping(raw.get("general"))
    appraisal = _mapping(raw.get("appraisal"))
    return BuildingAppraisal(
        building_kind=parse_text(_first(general, "buildingKind", "building_kind")),
        structural_type=parse_text(_first(general, "structuralType", "structural_type")),
        storeys=parse_number(general.get("storeys")),
        building_age=parse_number(_first(general, "buildingAge", "building_age")),
        floors=tuple(
            FloorLine(
                floor_no=parse_text(floor.get("floor_no")),
                area=parse_number(floor.get("floor_area")),
            )
            for floor in _sequence(raw.get("floors"))
        ),
        materials=tuple(
            MaterialLine(
                part=parse_text(material.get("part")),
                material=parse_text(material.get("material")),
                floor_no=parse_text(material.get("floor_no")),
            )
            for material in _sequence(raw.get("materials"))
        ),
        unit_cost=parse_number(appraisal.get("unit_cost")),
        base_market_value=parse_number(appraisal.get("base_market_value")),
        additional_items=tuple(_additional_line(item) for item in _sequence(raw.get("additionals"))),
        additional_total=parse_number(appraisal.get("additional_total")),
        # The source API spells this field "deprication_rate"
        depreciation_rate=parse_number(_first(appraisal, "depreciation_rate", "deprication_rate")),
        depreciation_cost=parse_number(appraisal.get("depreciation_cost")),
        final_market_value=parse_number(appraisal.get("final_market_value")),
    )


def normalize_machinery(raw: Mapping[str, Any]) -> MachineryAppraisal:
    appraisal = _mapping(raw.get("appraisal"))
    return MachineryAppraisal(
        machinery_type=parse_text(appraisal.get("machinery_type")),
        brand_model=parse_text(appraisal.get("brand_model")),
        capacity=parse_text(_first(appraisal, "capacity_hp", "capacity")),
        condition=parse_text(appraisal.get("machinery_condition")),
        date_acquired=parse_text(appraisal.get("date_acquired")),
        year_installed=parse_text(appraisal.get("year_installed")),
        estimated_life=parse_number(appraisal.get("estimated_life")),
        remaining_life=parse_number(appraisal.get("remaining_life")),
        original_cost=parse_number(appraisal.get("original_cost")),
        conversion_factor=parse_number(appraisal.get("conversion_factor")),
        rcn=parse_number(appraisal.get("rcn")),
        years_used=parse_number(appraisal.get("years_used")),
        depreciation_rate=parse_number(appraisal.get("depreciation_rate")),
        depreciation_value=parse_number(appraisal.get("depreciation_value")),
    )


_APPRAISAL_NORMALIZERS = {
    PropertyKind.LAND: normalize_land,
    PropertyKind.BUILDING: normalize_building,
    PropertyKind.MACHINERY: normalize_machinery,
}


def normalize_assessment(
    raw: Mapping[str, Any],
    kind: PropertyKind,
    faas: Mapping[str, Any],
) -> AssessmentSummary:
    """
    Normalise the stored assessment values.

    Land takes its taxable flag from the FAAS; buildings and machinery carry
    it on their own assessment. Each falls back to the other, then to taxable.
    """
    faas_flag = parse_flag(faas.get("taxable"))
    own_flag = parse_flag(raw.get("taxable"))
    if kind is PropertyKind.LAND:
        taxable = faas_flag if faas_flag is not None else own_flag
    else:
        taxable = own_flag if own_flag is not None else faas_flag

    return AssessmentSummary(
        actual_use=parse_text(raw.get("actual_use")),
        market_value=parse_number(raw.get("market_value")),
        assessment_level=parse_number(raw.get("assessment_level")),
        assessed_value=parse_number(raw.get("assessed_value")),
        taxable=True if taxable is None else taxable,
    )


# =============================================================================
# Record
# =============================================================================

def resolve_kind(payload: Mapping[str, Any]) -> tuple[PropertyKind, list[str]]:
    """
    Resolve the property kind and any data-quality warnings.

    A recognised discriminator always wins. Otherwise the kind is inferred
    from the first sub-object present, defaulting to Land.
    """
    faas = _mapping(payload.get("faas"))
    raw_kind = faas.get("property_kind")
    kind = PropertyKind.from_string(raw_kind)
    warnings: list[str] = []

    if kind is None:
        inferred = next(
            (k for k, key in _KIND_SUB_OBJECTS if isinstance(payload.get(key), Mapping)),
            PropertyKind.LAND,
        )
        warnings.append(
            f"Unrecognised property_kind {raw_kind!r}; composing as {inferred.value}"
        )
        kind = inferred

    sub_object = dict(_KIND_SUB_OBJECTS)[kind]
    if not isinstance(payload.get(sub_object), Mapping):
        warnings.append(f"property_kind is {kind.value} but no {sub_object} details were supplied")

    return kind, warnings


def normalize_payload(payload: Optional[Mapping[str, Any]]) -> AssessmentRecord:
    """
    Convert a raw FAAS payload into a canonical AssessmentRecord.

    Args:
        payload: The JSON object returned by the FAAS record API.

    Returns:
        AssessmentRecord. Never raises on malformed data; missing pieces
        are defaulted and reported on record.warnings.
    """
    payload = _mapping(payload)
    faas = _mapping(payload.get("faas"))
    kind, warnings = resolve_kind(payload)
    kind_raw = _mapping(payload.get(dict(_KIND_SUB_OBJECTS)[kind]))

    owners = normalize_owners(payload.get("owners"))
    base = normalize_base_fields(faas, owners)
    record_id = base.faas_id or base.faas_no or base.arp_no

    for warning in warnings:
        logger.warning("FAAS %s: %s", record_id or "<unsaved>", warning)

    return AssessmentRecord(
        id=record_id,
        kind=kind,
        base=base,
        appraisal=_APPRAISAL_NORMALIZERS[kind](kind_raw),
        assessment=normalize_assessment(_mapping(kind_raw.get("assessment")), kind, faas),
        owners=owners,
        superseded=normalize_superseded(payload.get("superseded")),
        warnings=tuple(warnings),
    )
