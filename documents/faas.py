"""
Field Appraisal & Assessment Sheet (FAAS)

Fixed template for the FAAS form. Sections print in this order:

Page one
  1. Header and transaction code
  2. Property identification, location and boundaries
  3. Kind-specific appraisal
     - Land: land appraisal, other improvements
     - Building: general description, floor areas, structural materials,
       additional items
     - Machinery: machinery description, depreciation
  -- forced page break --
Page two
  4. Market value (land adjustment table, or building/machinery summary)
  5. Property assessment, taxability and effectivity
  6. Signatories, memoranda, ROA entry, record of superseded assessment
"""

from __future__ import annotations

from typing import Final, Optional, Union

from assessment.aggregation import compute_aggregates
from assessment.models import AssessmentRecord, PropertyKind
from assessment.normalizer import normalize_payload
from utils.config import Config
from utils.formatting import Formatter

from .layout import (
    CompositionContext,
    SectionSlot,
    VariantTemplate,
    build_table,
    compose,
    data_row,
    exclusive_checkboxes,
    field_table,
    make_columns,
    text_block,
    total_row,
)
from .tree import Cell, ColumnAlign, DocumentTree, Row, RowKind, Table

RIGHT = ColumnAlign.RIGHT
CENTER = ColumnAlign.CENTER

# Form-mandated minimum body rows
LAND_APPRAISAL_MIN_ROWS: Final[int] = 3
IMPROVEMENTS_MIN_ROWS: Final[int] = 2
ADJUSTMENTS_MIN_ROWS: Final[int] = 2
FLOORS_MIN_ROWS: Final[int] = 2
MATERIALS_MIN_ROWS: Final[int] = 2
ADDITIONALS_MIN_ROWS: Final[int] = 2
ASSESSMENT_MIN_ROWS: Final[int] = 2
MEMORANDA_MIN_ROWS: Final[int] = 4

FAAS_TITLES: Final[dict] = {
    PropertyKind.LAND: "REAL PROPERTY FIELD APPRAISAL & ASSESSMENT SHEET - LAND / OTHER IMPROVEMENTS",
    PropertyKind.BUILDING: "REAL PROPERTY FIELD APPRAISAL & ASSESSMENT SHEET - BUILDING",
    PropertyKind.MACHINERY: "REAL PROPERTY FIELD APPRAISAL & ASSESSMENT SHEET - MACHINERY",
}

TAXABILITY_GROUP: Final[str] = "taxability"


# =============================================================================
# Shared Sections
# =============================================================================

def _header(ctx: CompositionContext):
    base = ctx.record.base
    return (
        text_block("Republic of the Philippines", style="subtitle"),
        text_block(f"Province of {ctx.config.province}", style="subtitle"),
        text_block(FAAS_TITLES[ctx.kind], style="title"),
        field_table("transaction", ctx.width, [
            [("TRANSACTION CODE", base.transaction_code), ("FAAS No.", base.faas_no)],
        ]),
    )


def _identification(ctx: CompositionContext):
    base = ctx.record.base
    return (
        field_table("identification", ctx.width, [
            [("ARP No.", base.arp_no, 2), ("PIN", base.pin, 2)],
            [("OCT/TCT/CLOA No.", base.title_no, 2), ("Dated", ctx.fmt.date(base.title_date), 2)],
            [("Survey No.", base.survey_no), ("Lot No.", base.lot_no), ("Blk No.", base.block_no)],
            [("Owner", base.owner_name, 2), ("TIN", base.owner_tin, 2)],
            [("Address", base.owner_address, 2), ("Tel No.", base.owner_tel, 2)],
            [("Administrator/Beneficial User", base.admin_name, 2), ("TIN", base.admin_tin, 2)],
            [("Address", base.admin_address, 2), ("Tel No.", base.admin_tel, 2)],
        ]),
    )


def _location(ctx: CompositionContext):
    location = ctx.record.base.location
    return (
        field_table("location", ctx.width, [
            [("No./Street", location.street, 2), ("Barangay/District", location.barangay, 2)],
            [("Municipality", location.municipality, 2),
             ("Province/City", location.province or ctx.config.province, 2)],
        ]),
    )


def _boundaries(ctx: CompositionContext):
    boundaries = ctx.record.base.boundaries
    blocks = [
        field_table("boundaries", ctx.width, [
            [("North", boundaries.north, 2), ("East", boundaries.east, 2)],
            [("South", boundaries.south, 2), ("West", boundaries.west, 2)],
        ]),
    ]
    if ctx.kind is PropertyKind.LAND:
        blocks.append(text_block("(Not necessarily drawn to scale)", style="caption", label="Land Sketch"))
    return tuple(blocks)


# =============================================================================
# Land
# =============================================================================

def _land_appraisal(ctx: CompositionContext):
    land = ctx.appraisal
    fmt = ctx.fmt
    columns = make_columns(ctx.width, [
        ("classification", "Classification", 3),
        ("subclassification", "Sub-Class", 2),
        ("area", "Area", 2, RIGHT),
        ("unit_value", "Unit Value", 2, RIGHT),
        ("base_market_value", "Base Market Value", 3, RIGHT),
    ])
    row = data_row([
        land.classification,
        land.subclassification,
        fmt.quantity(land.area),
        fmt.amount(land.unit_value),
        Cell(text=fmt.amount(ctx.aggregates.base_market_value), style="amount"),
    ])
    footer = total_row(["Total", "", "", "", fmt.amount(ctx.aggregates.base_market_value)])
    return (
        build_table("land_appraisal", columns, [row], LAND_APPRAISAL_MIN_ROWS, footer=[footer]),
    )


def _other_improvements(ctx: CompositionContext):
    fmt = ctx.fmt
    columns = make_columns(ctx.width, [
        ("kind", "Kind", 4),
        ("quantity", "Total Number", 2, RIGHT),
        ("unit_value", "Unit Value", 2, RIGHT),
        ("base_market_value", "Base Market Value", 3, RIGHT),
    ])
    rows = [
        data_row([line.name, fmt.quantity(line.quantity), fmt.amount(line.unit_value),
                  fmt.amount(line.line_total)])
        for line in ctx.appraisal.improvements
    ]
    footer = total_row(["Total", "", "", fmt.amount(ctx.aggregates.improvements_total)])
    return (
        build_table("improvements", columns, rows, IMPROVEMENTS_MIN_ROWS, footer=[footer]),
    )


def _land_adjustments(ctx: CompositionContext) -> Table:
    """
    Market value adjustment table.

    Only the first row carries the base and market values; later rows
    carry the factor and its percentage. Value adjustments are left blank
    per row and only their total prints in the footer.
    """
    fmt = ctx.fmt
    aggregates = ctx.aggregates
    base = aggregates.base_market_value
    columns = make_columns(ctx.width, [
        ("base_market_value", "Base Market Value", 3, RIGHT),
        ("factor", "Adjustment Factors", 4),
        ("percent", "% Adjustment", 2, RIGHT),
        ("value_adjustment", "Value Adjustment", 3, RIGHT),
        ("market_value", "Market Value", 3, RIGHT),
    ])

    adjustments = ctx.appraisal.adjustments
    if not adjustments:
        rows = [data_row([fmt.amount(base), "", "", "", fmt.amount(aggregates.market_value)])]
    else:
        rows = []
        for index, adjustment in enumerate(adjustments):
            first = index == 0
            rows.append(data_row([
                fmt.amount(base) if first else "",
                adjustment.factor_label,
                fmt.percent(adjustment.adjustment_value),
                "",
                fmt.amount(aggregates.market_value) if first else "",
            ]))

    footer = total_row([
        "Total", "", "", fmt.amount(aggregates.adjustment_total), fmt.amount(aggregates.market_value),
    ])
    return build_table("adjustments", columns, rows, ADJUSTMENTS_MIN_ROWS, footer=[footer])


# =============================================================================
# Building
# =============================================================================

def _building_description(ctx: CompositionContext):
    building = ctx.appraisal
    fmt = ctx.fmt
    return (
        field_table("building_description", ctx.width, [
            [("Kind of Building", building.building_kind, 2),
             ("Structural Type", building.structural_type, 2)],
            [("No. of Storeys", fmt.quantity(building.storeys)),
             ("Building Age", fmt.quantity(building.building_age)),
             ("Total Floor Area", fmt.quantity(ctx.aggregates.total_floor_area))],
        ]),
    )


def _floor_areas(ctx: CompositionContext):
    fmt = ctx.fmt
    columns = make_columns(ctx.width, [
        ("floor_no", "Floor No.", 1, CENTER),
        ("area", "Area (sq.m.)", 2, RIGHT),
    ])
    rows = [data_row([floor.floor_no, fmt.quantity(floor.area)]) for floor in ctx.appraisal.floors]
    footer = total_row(["Total", fmt.quantity(ctx.aggregates.total_floor_area)])
    return (build_table("floors", columns, rows, FLOORS_MIN_ROWS, footer=[footer]),)


def _structural_materials(ctx: CompositionContext):
    columns = make_columns(ctx.width, [
        ("part", "Part", 2),
        ("material", "Material", 3),
        ("floor_no", "Floor No.", 1, CENTER),
    ])
    rows = [
        data_row([material.part, material.material, material.floor_no])
        for material in ctx.appraisal.materials
    ]
    return (build_table("materials", columns, rows, MATERIALS_MIN_ROWS),)


def _additional_items(ctx: CompositionContext):
    fmt = ctx.fmt
    columns = make_columns(ctx.width, [
        ("item", "Additional Item", 4),
        ("quantity", "Quantity", 2, RIGHT),
        ("unit_value", "Unit Cost", 2, RIGHT),
        ("total", "Total Cost", 3, RIGHT),
    ])
    rows = [
        data_row([line.name, fmt.quantity(line.quantity), fmt.amount(line.unit_value),
                  fmt.amount(line.line_total)])
        for line in ctx.appraisal.additional_items
    ]
    footer = total_row(["Total", "", "", fmt.amount(ctx.aggregates.additionals_total)])
    return (build_table("additionals", columns, rows, ADDITIONALS_MIN_ROWS, footer=[footer]),)


def _building_summary(ctx: CompositionContext) -> Table:
    building = ctx.appraisal
    aggregates = ctx.aggregates
    fmt = ctx.fmt
    return field_table("valuation_summary", ctx.width, [
        [("Unit Construction Cost", fmt.amount(building.unit_cost), 2),
         ("Total Floor Area", fmt.quantity(aggregates.total_floor_area), 2)],
        [("Base Market Value", fmt.amount(aggregates.base_market_value), 2),
         ("Additional Items", fmt.amount(aggregates.additionals_total), 2)],
        [("Depreciation Rate", fmt.percent(building.depreciation_rate), 2),
         ("Depreciation Cost", fmt.amount(aggregates.depreciation_amount), 2)],
        [("Depreciated Market Value", fmt.amount(aggregates.final_market_value), 2),
         ("Market Value", fmt.amount(aggregates.market_value), 2)],
    ])


# =============================================================================
# Machinery
# =============================================================================

def _machinery_description(ctx: CompositionContext):
    machinery = ctx.appraisal
    fmt = ctx.fmt
    return (
        field_table("machinery_description", ctx.width, [
            [("Kind of Machinery", machinery.machinery_type, 2),
             ("Brand & Model", machinery.brand_model, 2)],
            [("Capacity/HP", machinery.capacity, 2), ("Condition", machinery.condition, 2)],
            [("Date Acquired", fmt.date(machinery.date_acquired), 2),
             ("Year Installed", machinery.year_installed, 2)],
            [("Estimated Economic Life", fmt.quantity(machinery.estimated_life), 2),
             ("Remaining Economic Life", fmt.quantity(machinery.remaining_life), 2)],
        ]),
    )


def _machinery_depreciation(ctx: CompositionContext):
    machinery = ctx.appraisal
    fmt = ctx.fmt
    columns = make_columns(ctx.width, [
        ("original_cost", "Original Cost", 3, RIGHT),
        ("conversion_factor", "Conversion Factor", 2, RIGHT),
        ("rcn", "RCN", 3, RIGHT),
        ("years_used", "Years Used", 2, RIGHT),
        ("depreciation_rate", "Rate of Depreciation", 2, RIGHT),
        ("depreciation_value", "Total Depreciation Value", 3, RIGHT),
    ])
    row = data_row([
        fmt.amount(machinery.original_cost),
        fmt.quantity(machinery.conversion_factor),
        fmt.amount(machinery.rcn),
        fmt.quantity(machinery.years_used),
        fmt.percent(machinery.depreciation_rate),
        fmt.amount(ctx.aggregates.depreciation_amount),
    ])
    return (build_table("depreciation", columns, [row], min_rows=1),)


def _machinery_summary(ctx: CompositionContext) -> Table:
    aggregates = ctx.aggregates
    fmt = ctx.fmt
    return field_table("valuation_summary", ctx.width, [
        [("Replacement Cost New", fmt.amount(aggregates.base_market_value), 2),
         ("Depreciation", fmt.amount(aggregates.depreciation_amount), 2)],
        [("Depreciated Value", fmt.amount(aggregates.final_market_value), 2),
         ("Market Value", fmt.amount(aggregates.market_value), 2)],
    ])


# =============================================================================
# Assessment and Record Keeping
# =============================================================================

_MARKET_VALUE_BUILDERS = {
    PropertyKind.LAND: _land_adjustments,
    PropertyKind.BUILDING: _building_summary,
    PropertyKind.MACHINERY: _machinery_summary,
}


def _market_value(ctx: CompositionContext):
    return (_MARKET_VALUE_BUILDERS[ctx.kind](ctx),)


def _property_assessment(ctx: CompositionContext):
    fmt = ctx.fmt
    summary = ctx.record.assessment
    aggregates = ctx.aggregates
    columns = make_columns(ctx.width, [
        ("actual_use", "Actual Use", 3),
        ("market_value", "Market Value", 3, RIGHT),
        ("assessment_level", "Assessment Level", 2, RIGHT),
        ("assessed_value", "Assessed Value", 3, RIGHT),
    ])
    row = data_row([
        summary.actual_use,
        fmt.amount(aggregates.market_value),
        fmt.percent(summary.assessment_level),
        fmt.amount(aggregates.assessed_value),
    ])
    footer = total_row([
        "Total", fmt.amount(aggregates.market_value), "", fmt.amount(aggregates.assessed_value),
    ])
    return (build_table("property_assessment", columns, [row], ASSESSMENT_MIN_ROWS, footer=[footer]),)


def _taxability(ctx: CompositionContext):
    taxable = ctx.record.assessment.taxable
    effectivity = ctx.record.base.effectivity_date
    return exclusive_checkboxes(
        TAXABILITY_GROUP, [("Taxable", taxable), ("Exempt", not taxable)],
    ) + (
        field_table("effectivity", ctx.width, [
            [("Effectivity of Assessment/Reassessment (Qtr.)", ctx.fmt.quarter(effectivity), 2),
             ("Yr.", ctx.fmt.year(effectivity), 2)],
        ]),
    )


def _signatories(ctx: CompositionContext):
    config = ctx.config
    columns = make_columns(ctx.width, [
        ("role", "", 3),
        ("name", "", 4, CENTER),
        ("title", "", 3, CENTER),
        ("date", "Date", 2, CENTER),
    ])
    entries = [
        ("APPRAISED/ASSESSED BY:", config.municipal_assessor, "Municipal Assessor",
         ctx.fmt.date(ctx.record.base.created_date)),
        ("RECOMMENDING APPROVAL:", config.recommending_assessor, "Municipal Assessor", ""),
        ("APPROVED BY:", config.provincial_assessor, "Provincial Assessor", ""),
    ]
    rows = [
        Row(cells=(
            Cell(text=role, style="label", border=False),
            Cell(text=name, style="signature", border=False, underline=True),
            Cell(text=title, style="caption", border=False),
            Cell(text=signed, style="center", border=False, underline=True),
        ), kind=RowKind.DATA)
        for role, name, title, signed in entries
    ]
    return (build_table("signatories", columns, rows, show_header=False, bordered=False),)


def _memoranda(ctx: CompositionContext):
    columns = make_columns(ctx.width, [("memoranda", "MEMORANDA:", 1)])
    description = ctx.record.base.description
    rows = [data_row([line]) for line in description.splitlines() if line.strip()]
    return (build_table("memoranda", columns, rows, MEMORANDA_MIN_ROWS, bordered=False),)


def _roa_entry(ctx: CompositionContext):
    base = ctx.record.base
    return (
        field_table("roa_entry", ctx.width, [
            [("Date of Entry in the ROA", ctx.fmt.date(base.created_date), 2),
             ("By", base.created_by, 2)],
        ]),
    )


def _superseded(ctx: CompositionContext):
    superseded = ctx.record.superseded
    fmt = ctx.fmt
    columns = make_columns(ctx.width, [
        ("pin", "PIN", 3),
        ("arp_no", "ARP No.", 2),
        ("td_no", "TD No.", 2),
        ("assessed_value", "Total Assessed Value", 3, RIGHT),
        ("previous_owner", "Previous Owner", 3),
        ("effectivity", "Effectivity of Assessment", 2),
        ("ar_page_no", "AR Page No.", 2),
        ("recording_person", "Recording Person", 3),
        ("date", "Date", 2),
    ])
    row = data_row([
        superseded.pin,
        superseded.arp_no,
        superseded.td_no,
        fmt.amount(superseded.assessed_value),
        superseded.previous_owner,
        superseded.effectivity,
        superseded.ar_page_no,
        superseded.recording_person,
        fmt.date(superseded.recorded_date),
    ])
    return (build_table("superseded", columns, [row], min_rows=1),)


# =============================================================================
# Template
# =============================================================================

LAND = frozenset({PropertyKind.LAND})
BUILDING = frozenset({PropertyKind.BUILDING})
MACHINERY = frozenset({PropertyKind.MACHINERY})

FAAS_TEMPLATE = VariantTemplate(
    variant="faas",
    title=lambda ctx: FAAS_TITLES[ctx.kind],
    slots=(
        SectionSlot("header", "Header", _header),
        SectionSlot("property_identification", "Property Identification", _identification),
        SectionSlot("property_location", "Property Location", _location),
        SectionSlot("property_boundaries", "Property Boundaries", _boundaries),
        # Land, page one
        SectionSlot("land_appraisal", "Land Appraisal", _land_appraisal, LAND),
        SectionSlot("other_improvements", "Other Improvements", _other_improvements, LAND,
                    page_break_after=True),
        # Building, page one
        SectionSlot("general_description", "General Description", _building_description, BUILDING),
        SectionSlot("floor_areas", "Floor Areas", _floor_areas, BUILDING),
        SectionSlot("structural_materials", "Structural Materials", _structural_materials, BUILDING),
        SectionSlot("additional_items", "Additional Items", _additional_items, BUILDING,
                    page_break_after=True),
        # Machinery, page one
        SectionSlot("machinery_description", "Machinery Description", _machinery_description, MACHINERY),
        SectionSlot("depreciation", "Depreciation", _machinery_depreciation, MACHINERY,
                    page_break_after=True),
        # Page two
        SectionSlot("market_value", "Market Value", _market_value),
        SectionSlot("property_assessment", "Property Assessment", _property_assessment),
        SectionSlot("taxability", "Taxability and Effectivity", _taxability),
        SectionSlot("signatories", "Signatories", _signatories),
        SectionSlot("memoranda", "Memoranda", _memoranda),
        SectionSlot("roa_entry", "Date of Entry in the Record of Assessment", _roa_entry),
        SectionSlot("superseded", "Record of Superseded Assessment", _superseded),
    ),
)


def compose_faas_document(
    payload_or_record: Union[AssessmentRecord, dict, None],
    config: Optional[Config] = None,
) -> DocumentTree:
    """
    Compose the FAAS for one property.

    Args:
        payload_or_record: A raw FAAS payload or an already normalised record.
        config: Form constants. Defaults are used when omitted.

    Returns:
        DocumentTree for the FAAS
    """
    if isinstance(payload_or_record, AssessmentRecord):
        record = payload_or_record
    else:
        record = normalize_payload(payload_or_record)

    config = config or Config()
    formatter = Formatter(currency=config.currency, date_format=config.date_format)
    aggregates = compute_aggregates(record)
    return compose(record, aggregates, FAAS_TEMPLATE, config, formatter)
