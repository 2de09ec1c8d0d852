"""
Tax Declaration of Real Property (TD)

Fixed single-flow template; the Tax Declaration has no forced page break.

The UI may supply a flat TaxDeclarationForm (declarant, title and
effectivity fields, approver). Non-empty form values override what the
record holds. Market and assessed values always come from the record's
aggregates.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Final, Mapping, Optional, Union

from assessment.aggregation import compute_aggregates
from assessment.models import AssessmentRecord, PropertyKind
from assessment.normalizer import normalize_payload, parse_number, parse_text
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
from .tree import Cell, ColumnAlign, DocumentTree, Row, RowKind

CENTER = ColumnAlign.CENTER

TD_TITLE: Final[str] = "TAX DECLARATION OF REAL PROPERTY"

ASSESSMENT_MIN_ROWS: Final[int] = 4
MEMORANDA_MIN_ROWS: Final[int] = 5

TAXABILITY_GROUP: Final[str] = "taxability"
KIND_GROUP: Final[str] = "property_kind"
OTHERS_LABEL: Final[str] = "Others"

NOTES_TEMPLATE: Final[str] = (
    "This declaration is for real property taxation purposes only and the "
    "valuation indicated herein are based on the schedule of unit market values "
    "prepared for the purpose and duly enacted into an Ordinance by the "
    "Sangguniang Panlalawigan under Ordinance No. {ordinance}. It does not and "
    "cannot by itself alone confer any ownership or legal title to the property."
)


# =============================================================================
# Form Input
# =============================================================================

@dataclass(frozen=True)
class TaxDeclarationForm:
    """Flat Tax Declaration input as entered in the UI. All fields optional."""
    td_no: str = ""
    property_identification_no: str = ""

    owner_name: str = ""
    owner_tin: str = ""
    owner_address: str = ""
    owner_tel: str = ""
    admin_name: str = ""
    admin_tin: str = ""
    admin_address: str = ""
    admin_tel: str = ""

    street: str = ""
    barangay: str = ""
    municipality: str = ""
    province: str = ""

    oct_no: str = ""
    title_date: str = ""
    survey_no: str = ""
    lot_no: str = ""
    cct_no: str = ""
    block_no: str = ""

    boundary_north: str = ""
    boundary_east: str = ""
    boundary_south: str = ""
    boundary_west: str = ""

    building_storeys: str = ""
    building_description: str = ""
    machinery_description: str = ""

    effectivity_qtr: str = ""
    effectivity_year: str = ""
    approved_by: str = ""
    approved_date: str = ""

    previous_td_no: str = ""
    previous_owner: str = ""
    previous_av: float = 0.0

    memoranda: str = ""
    ordinance_no: str = ""

    # Field names used by the TD record API
    ALIASES = {
        "admin_contact_no": "admin_tel",
        "owner_contact_no": "owner_tel",
        "assessment_effectivity_qtr": "effectivity_qtr",
        "assessment_effectivity_year": "effectivity_year",
        "approval_date": "approved_date",
        "previous_td_id": "previous_td_no",
        "title_no": "oct_no",
    }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "TaxDeclarationForm":
        """Build a form from a flat dict, ignoring unknown keys."""
        data = dict(data or {})
        for alias, name in cls.ALIASES.items():
            if alias in data and not data.get(name):
                data[name] = data[alias]

        values = {}
        for f in fields(cls):
            if f.name not in data:
                continue
            if f.name == "previous_av":
                values[f.name] = parse_number(data[f.name])
            else:
                values[f.name] = parse_text(data[f.name])
        return cls(**values)


def _pick(form_value: str, record_value: str) -> str:
    return form_value or record_value


def _form(ctx: CompositionContext) -> TaxDeclarationForm:
    return ctx.form or TaxDeclarationForm()


# =============================================================================
# Sections
# =============================================================================

def _header(ctx: CompositionContext):
    return (
        text_block("Republic of the Philippines", style="subtitle"),
        text_block(f"Province of {ctx.config.province}", style="subtitle"),
        text_block("OFFICE OF THE PROVINCIAL ASSESSOR", style="subtitle"),
        text_block(TD_TITLE, style="title"),
    )


def _declarant(ctx: CompositionContext):
    base = ctx.record.base
    form = _form(ctx)
    return (
        field_table("declarant", ctx.width, [
            [("TD No.", _pick(form.td_no, base.arp_no), 2),
             ("Property Identification No.", _pick(form.property_identification_no, base.pin), 2)],
            [("Owner", _pick(form.owner_name, base.owner_name), 3),
             ("TIN", _pick(form.owner_tin, base.owner_tin), 1)],
            [("Address", _pick(form.owner_address, base.owner_address), 3),
             ("Telephone No.", _pick(form.owner_tel, base.owner_tel), 1)],
            [("Administrator/Beneficial User", _pick(form.admin_name, base.admin_name), 3),
             ("TIN", _pick(form.admin_tin, base.admin_tin), 1)],
            [("Address", _pick(form.admin_address, base.admin_address), 3),
             ("Telephone No.", _pick(form.admin_tel, base.admin_tel), 1)],
        ]),
    )


def _location(ctx: CompositionContext):
    location = ctx.record.base.location
    form = _form(ctx)
    return (
        field_table("location", ctx.width, [
            [("Number and Street", _pick(form.street, location.street), 2),
             ("Barangay/District", _pick(form.barangay, location.barangay), 2)],
            [("Municipality", _pick(form.municipality, location.municipality), 2),
             ("Province/City", _pick(form.province, location.province or ctx.config.province), 2)],
        ]),
    )


def _title(ctx: CompositionContext):
    base = ctx.record.base
    form = _form(ctx)
    return (
        field_table("title", ctx.width, [
            [("OCT/TCT/CLOA No.", _pick(form.oct_no, base.title_no), 2),
             ("Dated", ctx.fmt.date(_pick(form.title_date, base.title_date)), 2)],
            [("Survey No.", _pick(form.survey_no, base.survey_no), 2),
             ("Lot No.", _pick(form.lot_no, base.lot_no), 2)],
            [("CCT", _pick(form.cct_no, base.cct_no), 2),
             ("Blk No.", _pick(form.block_no, base.block_no), 2)],
        ]),
    )


def _boundaries(ctx: CompositionContext):
    boundaries = ctx.record.base.boundaries
    form = _form(ctx)
    return (
        field_table("boundaries", ctx.width, [
            [("North", _pick(form.boundary_north, boundaries.north), 2),
             ("East", _pick(form.boundary_east, boundaries.east), 2)],
            [("South", _pick(form.boundary_south, boundaries.south), 2),
             ("West", _pick(form.boundary_west, boundaries.west), 2)],
        ]),
    )


def _kind_of_property(ctx: CompositionContext):
    form = _form(ctx)
    appraisal = ctx.appraisal
    blocks = list(exclusive_checkboxes(
        KIND_GROUP,
        [
            ("Land", ctx.kind is PropertyKind.LAND),
            ("Building", ctx.kind is PropertyKind.BUILDING),
            ("Machinery", ctx.kind is PropertyKind.MACHINERY),
            (OTHERS_LABEL, False),
        ],
        fallback=OTHERS_LABEL,
    ))

    if ctx.kind is PropertyKind.BUILDING:
        description = " ".join(
            part for part in (appraisal.structural_type, appraisal.building_kind) if part
        )
        blocks.append(field_table("building_details", ctx.width, [
            [("No. of Storeys", _pick(form.building_storeys, ctx.fmt.quantity(appraisal.storeys)), 1),
             ("Brief Description", _pick(form.building_description, description), 3)],
        ]))
    elif ctx.kind is PropertyKind.MACHINERY:
        description = " ".join(
            part for part in (appraisal.machinery_type, appraisal.brand_model) if part
        )
        blocks.append(field_table("machinery_details", ctx.width, [
            [("Brief Description", _pick(form.machinery_description, description), 4)],
        ]))
    return tuple(blocks)


def _assessed_area(ctx: CompositionContext) -> str:
    if ctx.kind is PropertyKind.LAND:
        return ctx.fmt.quantity(ctx.appraisal.area)
    if ctx.kind is PropertyKind.BUILDING:
        return ctx.fmt.quantity(ctx.aggregates.total_floor_area)
    return ""


def _assessment(ctx: CompositionContext):
    fmt = ctx.fmt
    summary = ctx.record.assessment
    aggregates = ctx.aggregates
    columns = make_columns(ctx.width, [
        ("classification", "Classification", 3, CENTER),
        ("area", "Area", 2, CENTER),
        ("market_value", "Market Value Php", 3, CENTER),
        ("actual_use", "Actual Use", 3, CENTER),
        ("assessment_level", "Assessment Level", 2, CENTER),
        ("assessed_value", "Assessed Value Php", 3, CENTER),
    ])
    row = data_row([
        ctx.record.classification_label,
        _assessed_area(ctx),
        fmt.amount(aggregates.market_value),
        summary.actual_use,
        fmt.percent(summary.assessment_level),
        fmt.amount(aggregates.assessed_value),
    ])
    footer = total_row([
        "Total", "", fmt.amount(aggregates.market_value), "", "", fmt.amount(aggregates.assessed_value),
    ])
    return (
        build_table("assessment", columns, [row], ASSESSMENT_MIN_ROWS, footer=[footer], bordered=False),
    )


def _amount_in_words(ctx: CompositionContext):
    return (
        text_block(ctx.fmt.words(ctx.aggregates.assessed_value), style="value",
                   label="Total Assessed Value"),
        text_block("(Amount in Words)", style="caption"),
    )


def _taxability(ctx: CompositionContext):
    form = _form(ctx)
    taxable = ctx.record.assessment.taxable
    effectivity = ctx.record.base.effectivity_date
    return exclusive_checkboxes(
        TAXABILITY_GROUP, [("Taxable", taxable), ("Exempt", not taxable)],
    ) + (
        field_table("effectivity", ctx.width, [
            [("Effectivity of Assessment/Reassessment (Qtr.)",
              _pick(form.effectivity_qtr, ctx.fmt.quarter(effectivity)), 2),
             ("Yr.", _pick(form.effectivity_year, ctx.fmt.year(effectivity)), 2)],
        ]),
    )


def _signatories(ctx: CompositionContext):
    form = _form(ctx)
    columns = make_columns(ctx.width, [
        ("role", "", 2),
        ("name", "", 4, CENTER),
        ("date", "", 2, CENTER),
    ])
    rows = [
        Row(cells=(
            Cell(text="APPROVED BY:", style="label", border=False),
            Cell(text=_pick(form.approved_by, ctx.config.provincial_assessor), style="signature",
                 border=False, underline=True),
            Cell(text=ctx.fmt.date(form.approved_date), style="center", border=False, underline=True),
        ), kind=RowKind.DATA),
        Row(cells=(
            Cell(border=False),
            Cell(text="Provincial/City/Municipal Assessor", style="caption", border=False),
            Cell(text="Date", style="caption", border=False),
        ), kind=RowKind.DATA),
    ]
    return (build_table("signatories", columns, rows, show_header=False, bordered=False),)


def _cancellation(ctx: CompositionContext):
    form = _form(ctx)
    superseded = ctx.record.superseded
    previous_av = form.previous_av or superseded.assessed_value
    return (
        field_table("cancellation", ctx.width, [
            [("This declaration cancels TD No.", _pick(form.previous_td_no, superseded.td_no), 1),
             ("Owner", _pick(form.previous_owner, superseded.previous_owner), 2),
             ("Previous A.V. Php", ctx.fmt.amount(previous_av), 1)],
        ]),
    )


def _memoranda(ctx: CompositionContext):
    form = _form(ctx)
    columns = make_columns(ctx.width, [("memoranda", "MEMORANDA:", 1)])
    rows = [data_row([line]) for line in form.memoranda.splitlines() if line.strip()]
    return (build_table("memoranda", columns, rows, MEMORANDA_MIN_ROWS, bordered=False),)


def _notes(ctx: CompositionContext):
    ordinance = _pick(_form(ctx).ordinance_no, ctx.config.ordinance_no) or "____"
    return (text_block(NOTES_TEMPLATE.format(ordinance=ordinance), style="note", label="Notes"),)


# =============================================================================
# Template
# =============================================================================

TAX_DECLARATION_TEMPLATE = VariantTemplate(
    variant="tax_declaration",
    title=lambda ctx: TD_TITLE,
    slots=(
        SectionSlot("header", "Header", _header),
        SectionSlot("declarant", "Declarant", _declarant),
        SectionSlot("location", "Location of Property", _location),
        SectionSlot("title", "Title", _title),
        SectionSlot("boundaries", "Boundaries", _boundaries),
        SectionSlot("kind_of_property", "Kind of Property Assessed", _kind_of_property),
        SectionSlot("assessment", "Assessment", _assessment),
        SectionSlot("amount_in_words", "Total Assessed Value", _amount_in_words),
        SectionSlot("taxability", "Taxability and Effectivity", _taxability),
        SectionSlot("signatories", "Approval", _signatories),
        SectionSlot("cancellation", "Cancellation", _cancellation),
        SectionSlot("memoranda", "Memoranda", _memoranda),
        SectionSlot("notes", "Notes", _notes),
    ),
)


def compose_tax_declaration_document(
    payload_or_record: Union[AssessmentRecord, dict, None],
    form: Union[TaxDeclarationForm, Mapping[str, Any], None] = None,
    config: Optional[Config] = None,
) -> DocumentTree:
    """
    Compose the Tax Declaration for one property.

    Args:
        payload_or_record: A raw FAAS payload or an already normalised record.
        form: Tax Declaration form values from the UI, as a form or a flat dict.
        config: Form constants. Defaults are used when omitted.

    Returns:
        DocumentTree for the Tax Declaration
    """
    if isinstance(payload_or_record, AssessmentRecord):
        record = payload_or_record
    else:
        record = normalize_payload(payload_or_record)

    if not isinstance(form, TaxDeclarationForm):
        form = TaxDeclarationForm.from_dict(form)

    config = config or Config()
    formatter = Formatter(currency=config.currency, date_format=config.date_format)
    aggregates = compute_aggregates(record)
    return compose(record, aggregates, TAX_DECLARATION_TEMPLATE, config, formatter, context=form)
