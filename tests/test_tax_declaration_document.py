"""
Tests for Tax Declaration composition.
"""

import pytest

from documents.tax_declaration import (
    TaxDeclarationForm,
    compose_tax_declaration_document,
)
from utils.config import Config


def field_values(table) -> dict:
    """Label -> text for a field grid. Later duplicates win."""
    return {cell.label: cell.text for row in table.rows for cell in row.cells}


def block_text(tree, section_name, label):
    section = tree.section(section_name)
    return next(block.text for block in section.blocks if getattr(block, "label", None) == label)


# =============================================================================
# Form Input
# =============================================================================

class TestTaxDeclarationForm:
    def test_from_dict_ignores_unknown_keys(self):
        form = TaxDeclarationForm.from_dict({"td_no": "TD-2024-77", "total_market_value": 5})

        assert form.td_no == "TD-2024-77"
        assert not hasattr(form, "total_market_value")

    def test_from_dict_accepts_record_api_names(self):
        form = TaxDeclarationForm.from_dict({
            "assessment_effectivity_qtr": 3,
            "assessment_effectivity_year": 2025,
            "approval_date": "2024-07-01",
            "previous_td_id": 881,
            "admin_contact_no": "0918",
        })

        assert form.effectivity_qtr == "3"
        assert form.effectivity_year == "2025"
        assert form.approved_date == "2024-07-01"
        assert form.previous_td_no == "881"
        assert form.admin_tel == "0918"

    def test_from_dict_none(self):
        assert TaxDeclarationForm.from_dict(None) == TaxDeclarationForm()

    def test_previous_av_parsed(self):
        assert TaxDeclarationForm.from_dict({"previous_av": "12,500.50"}).previous_av == 12500.5


# =============================================================================
# Structure
# =============================================================================

class TestStructure:
    def test_section_order(self, land_payload):
        tree = compose_tax_declaration_document(land_payload)

        assert tree.section_names == [
            "header",
            "declarant",
            "location",
            "title",
            "boundaries",
            "kind_of_property",
            "assessment",
            "amount_in_words",
            "taxability",
            "signatories",
            "cancellation",
            "memoranda",
            "notes",
        ]
        assert tree.variant == "tax_declaration"
        assert tree.title == "TAX DECLARATION OF REAL PROPERTY"

    @pytest.mark.parametrize("fixture", ["land_payload", "building_payload", "machinery_payload"])
    def test_no_forced_page_break(self, request, fixture):
        tree = compose_tax_declaration_document(request.getfixturevalue(fixture))

        assert not any(section.page_break_after for section in tree.sections)
        assert not any(table.page_break_after for table in tree.iter_tables())

    @pytest.mark.parametrize("fixture", ["land_payload", "building_payload", "machinery_payload"])
    def test_valid(self, request, fixture):
        tree = compose_tax_declaration_document(request.getfixturevalue(fixture))

        assert tree.validate() == (True, [])


class TestKindOfProperty:
    @pytest.mark.parametrize("fixture,checked", [
        ("land_payload", "Land"),
        ("building_payload", "Building"),
        ("machinery_payload", "Machinery"),
    ])
    def test_exclusive_kind_checkbox(self, request, fixture, checked):
        boxes = compose_tax_declaration_document(request.getfixturevalue(fixture)).checkboxes("property_kind")

        assert [box.label for box in boxes] == ["Land", "Building", "Machinery", "Others"]
        assert [box.label for box in boxes if box.checked] == [checked]

    def test_building_details_only_for_building(self, building_payload, land_payload):
        building = compose_tax_declaration_document(building_payload)
        land = compose_tax_declaration_document(land_payload)

        details = field_values(building.find_table("building_details"))
        assert details["No. of Storeys"] == "2"
        assert details["Brief Description"] == "II-B Residential"
        assert building.find_table("machinery_details") is None
        assert land.find_table("building_details") is None

    def test_machinery_details_only_for_machinery(self, machinery_payload):
        tree = compose_tax_declaration_document(machinery_payload)

        details = field_values(tree.find_table("machinery_details"))
        assert details["Brief Description"] == "Diesel Generator CAT 3406"
        assert tree.find_table("building_details") is None

    def test_form_description_overrides(self, building_payload):
        tree = compose_tax_declaration_document(
            building_payload, {"building_storeys": "3", "building_description": "Two-storey house"},
        )

        details = field_values(tree.find_table("building_details"))
        assert details["No. of Storeys"] == "3"
        assert details["Brief Description"] == "Two-storey house"


# =============================================================================
# Assessment
# =============================================================================

class TestAssessment:
    def test_land_row(self, land_payload):
        table = compose_tax_declaration_document(land_payload).find_table("assessment")

        row = [cell.text for cell in table.rows[0].cells]
        assert row == ["Agricultural", "1,000", "142,850.00", "Agricultural", "40%", "57,140.00"]

    def test_minimum_four_rows(self, land_payload):
        table = compose_tax_declaration_document(land_payload).find_table("assessment")

        assert len(table.rows) == 4
        assert len(table.filler_rows) == 3

    def test_total_row(self, building_payload):
        table = compose_tax_declaration_document(building_payload).find_table("assessment")

        totals = [cell.text for cell in table.footer[0].cells]
        assert totals == ["Total", "", "1,359,000.00", "", "", "271,800.00"]

    def test_building_classification_and_area(self, building_payload):
        table = compose_tax_declaration_document(building_payload).find_table("assessment")

        assert table.column_values("classification")[0] == "Building"
        assert table.column_values("area")[0] == "150"

    def test_money_always_from_aggregates(self, land_payload):
        form = {"total_market_value": 1, "total_assessed_value": 1}

        table = compose_tax_declaration_document(land_payload, form).find_table("assessment")

        assert table.column_values("assessed_value")[0] == "57,140.00"

    def test_amount_in_words(self, land_payload):
        tree = compose_tax_declaration_document(land_payload)

        assert block_text(tree, "amount_in_words", "Total Assessed Value") == (
            "Fifty-Seven Thousand One Hundred Forty Pesos"
        )


# =============================================================================
# Form Overrides
# =============================================================================

class TestFormOverrides:
    def test_record_values_used_without_form(self, land_payload):
        values = field_values(compose_tax_declaration_document(land_payload).find_table("declarant"))

        assert values["TD No."] == "ARP-01-0001"
        assert values["Property Identification No."] == "123-45-678-90-001"
        assert values["Owner"] == "Juan S. Dela Cruz Jr."

    def test_non_empty_form_values_override(self, land_payload):
        form = TaxDeclarationForm(td_no="TD-2024-77", owner_name="HEIRS OF JUAN DELA CRUZ")

        values = field_values(compose_tax_declaration_document(land_payload, form).find_table("declarant"))

        assert values["TD No."] == "TD-2024-77"
        assert values["Owner"] == "HEIRS OF JUAN DELA CRUZ"
        assert values["Property Identification No."] == "123-45-678-90-001"

    def test_empty_form_values_do_not_override(self, land_payload):
        form = {"owner_name": "", "barangay": None}

        tree = compose_tax_declaration_document(land_payload, form)

        assert field_values(tree.find_table("declarant"))["Owner"] == "Juan S. Dela Cruz Jr."
        assert field_values(tree.find_table("location"))["Barangay/District"] == "Poblacion"

    def test_effectivity_from_record(self, land_payload):
        values = field_values(compose_tax_declaration_document(land_payload).find_table("effectivity"))

        assert values["Effectivity of Assessment/Reassessment (Qtr.)"] == "1"
        assert values["Yr."] == "2024"

    def test_effectivity_from_form(self, land_payload):
        tree = compose_tax_declaration_document(
            land_payload, {"assessment_effectivity_qtr": "2", "assessment_effectivity_year": "2025"},
        )

        values = field_values(tree.find_table("effectivity"))
        assert values["Effectivity of Assessment/Reassessment (Qtr.)"] == "2"
        assert values["Yr."] == "2025"

    def test_approver(self, land_payload, config):
        tree = compose_tax_declaration_document(
            land_payload, {"approval_date": "2024-07-01"}, config,
        )

        table = tree.find_table("signatories")
        assert table.column_values("name")[0] == "PEDRO L. GARCIA"
        assert table.column_values("date")[0] == "7/1/2024"

    def test_approver_from_form(self, land_payload, config):
        tree = compose_tax_declaration_document(land_payload, {"approved_by": "OIC ASSESSOR"}, config)

        assert tree.find_table("signatories").column_values("name")[0] == "OIC ASSESSOR"


# =============================================================================
# Cancellation, Memoranda and Notes
# =============================================================================

class TestFooterSections:
    def test_cancellation_from_superseded(self, land_payload):
        values = field_values(compose_tax_declaration_document(land_payload).find_table("cancellation"))

        assert values["This declaration cancels TD No."] == "TD-OLD-9"
        assert values["Owner"] == "Maria Santos"
        assert values["Previous A.V. Php"] == "50,000.00"

    def test_cancellation_from_form(self, land_payload):
        tree = compose_tax_declaration_document(
            land_payload, {"previous_td_id": "TD-OLD-10", "previous_av": "48,000"},
        )

        values = field_values(tree.find_table("cancellation"))
        assert values["This declaration cancels TD No."] == "TD-OLD-10"
        assert values["Previous A.V. Php"] == "48,000.00"

    def test_memoranda_five_lines(self, land_payload):
        tree = compose_tax_declaration_document(land_payload, {"memoranda": "Transfer by sale\nDOS 2024-11"})

        table = tree.find_table("memoranda")
        assert len(table.rows) == 5
        assert table.column_values("memoranda")[:2] == ["Transfer by sale", "DOS 2024-11"]

    def test_notes_ordinance_from_config(self, land_payload, config):
        tree = compose_tax_declaration_document(land_payload, config=config)

        assert "Ordinance No. 2023-15." in block_text(tree, "notes", "Notes")

    def test_notes_ordinance_from_form(self, land_payload, config):
        tree = compose_tax_declaration_document(land_payload, {"ordinance_no": "2024-01"}, config)

        assert "Ordinance No. 2024-01." in block_text(tree, "notes", "Notes")

    def test_notes_ordinance_placeholder(self, land_payload):
        tree = compose_tax_declaration_document(land_payload, config=Config())

        assert "Ordinance No. ____." in block_text(tree, "notes", "Notes")


def test_idempotent(machinery_payload, config):
    first = compose_tax_declaration_document(machinery_payload, {"td_no": "TD-1"}, config)
    second = compose_tax_declaration_document(machinery_payload, {"td_no": "TD-1"}, config)

    assert first == second
    assert first.to_dict() == second.to_dict()
