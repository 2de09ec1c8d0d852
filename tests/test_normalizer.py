"""
Tests for the canonical record normalizer.
"""

import logging

import pytest

from assessment.models import (
    AssessmentRecord,
    BaseFields,
    BuildingAppraisal,
    LandAppraisal,
    MachineryAppraisal,
    PropertyKind,
)
from assessment.normalizer import normalize_payload, parse_flag, parse_number, parse_text


# =============================================================================
# Field Parsers
# =============================================================================

class TestParseNumber:
    @pytest.mark.parametrize("raw,expected", [
        (7, 7.0),
        (2.5, 2.5),
        ("1,234.50", 1234.5),
        ("20%", 20.0),
        (" 15 ", 15.0),
        ("-10", -10.0),
        (None, 0.0),
        ("", 0.0),
        ("abc", 0.0),
        ("nan", 0.0),
        (float("inf"), 0.0),
        (True, 0.0),
    ])
    def test_parse(self, raw, expected):
        assert parse_number(raw) == expected


class TestParseFlag:
    @pytest.mark.parametrize("raw,expected", [
        (1, True),
        ("1", True),
        (True, True),
        ("yes", True),
        (0, False),
        ("0", False),
        (False, False),
        ("exempt", False),
        (None, None),
        ("maybe", None),
    ])
    def test_parse(self, raw, expected):
        assert parse_flag(raw) is expected

    def test_default_used_for_unknown(self):
        assert parse_flag(None, default=True) is True


def test_parse_text_never_returns_none():
    assert parse_text(None) == ""
    assert parse_text("  Lot 4 ") == "Lot 4"
    assert parse_text(12) == "12"


# =============================================================================
# Land
# =============================================================================

class TestNormalizeLand:
    def test_kind_and_appraisal(self, land_payload):
        record = normalize_payload(land_payload)

        assert record.kind is PropertyKind.LAND
        assert isinstance(record.appraisal, LandAppraisal)
        assert record.appraisal.classification == "Agricultural"
        assert record.appraisal.area == 1000.0
        assert record.appraisal.base_market_value == 150000.0
        assert record.warnings == ()

    def test_adjustments_keep_order(self, land_payload):
        record = normalize_payload(land_payload)

        labels = [adj.factor_label for adj in record.appraisal.adjustments]
        values = [adj.adjustment_value for adj in record.appraisal.adjustments]
        assert labels == ["Type of road", "Distance to market"]
        assert values == [-10.0, 5.0]

    def test_improvements(self, land_payload):
        record = normalize_payload(land_payload)

        mango = record.appraisal.improvements[1]
        assert mango.name == "Mango"
        assert mango.quantity == 3.0
        assert mango.line_total == 150.0

    def test_owner_name_falls_back_to_owners(self, land_payload):
        record = normalize_payload(land_payload)

        assert record.base.owner_name == "Juan S. Dela Cruz Jr."
        assert record.base.owner_tin == "111-222-333"
        assert record.base.owner_tel == "0917-555-0101"
        assert record.base.owner_address == "45 Rizal St., Poblacion"

    def test_owner_name_from_faas_wins(self, land_payload):
        land_payload["faas"]["owner_name"] = "HEIRS OF JUAN DELA CRUZ"

        record = normalize_payload(land_payload)

        assert record.base.owner_name == "HEIRS OF JUAN DELA CRUZ"

    def test_multiple_owners_are_joined(self, land_payload):
        land_payload["owners"].append({"first_name": "Rosa", "last_name": "Dela Cruz", "tin_no": "444"})

        record = normalize_payload(land_payload)

        assert record.base.owner_name == "Juan S. Dela Cruz Jr., Rosa Dela Cruz"
        assert record.base.owner_tin == "111-222-333, 444"

    def test_base_fields(self, land_payload):
        base = normalize_payload(land_payload).base

        assert base.faas_id == "101"
        assert base.transaction_code == "GR"
        assert base.location.barangay == "Poblacion"
        assert base.location.municipality == "San Isidro"
        assert base.boundaries.west == "Creek"
        assert base.admin_name == ""

    def test_record_id(self, land_payload):
        assert normalize_payload(land_payload).id == "101"

    def test_taxable_from_faas(self, land_payload):
        land_payload["faas"]["taxable"] = 0
        land_payload["land"]["assessment"]["taxable"] = 1

        assert normalize_payload(land_payload).assessment.taxable is False

    def test_taxable_falls_back_to_assessment(self, land_payload):
        del land_payload["faas"]["taxable"]
        land_payload["land"]["assessment"]["taxable"] = "0"

        assert normalize_payload(land_payload).assessment.taxable is False

    def test_taxable_defaults_to_true(self, land_payload):
        del land_payload["faas"]["taxable"]

        assert normalize_payload(land_payload).assessment.taxable is True

    def test_superseded(self, land_payload):
        superseded = normalize_payload(land_payload).superseded

        assert superseded.td_no == "TD-OLD-9"
        assert superseded.assessed_value == 50000.0
        assert superseded.previous_owner == "Maria Santos"
        assert superseded.recording_person == "mclerk"


# =============================================================================
# Building and Machinery
# =============================================================================

class TestNormalizeBuilding:
    def test_camel_case_general_fields(self, building_payload):
        building = normalize_payload(building_payload).appraisal

        assert isinstance(building, BuildingAppraisal)
        assert building.building_kind == "Residential"
        assert building.structural_type == "II-B"
        assert building.storeys == 2.0
        assert building.building_age == 5.0

    def test_snake_case_general_fields(self, building_payload):
        building_payload["building"]["general"] = {
            "building_kind": "Commercial",
            "structural_type": "III-A",
        }

        building = normalize_payload(building_payload).appraisal

        assert building.building_kind == "Commercial"
        assert building.structural_type == "III-A"

    def test_misspelled_depreciation_rate_accepted(self, building_payload):
        assert normalize_payload(building_payload).appraisal.depreciation_rate == 10.0

    def test_additional_unit_value_derived_from_total(self, building_payload):
        tiles = normalize_payload(building_payload).appraisal.additional_items[0]

        assert tiles.unit_value == 500.0
        assert tiles.line_total == 5000.0

    def test_floors_and_materials(self, building_payload):
        building = normalize_payload(building_payload).appraisal

        assert [floor.floor_no for floor in building.floors] == ["1", "2"]
        assert building.materials[0].material == "GI Sheet"

    def test_taxable_from_own_assessment(self, building_payload):
        assert normalize_payload(building_payload).assessment.taxable is False


class TestNormalizeMachinery:
    def test_fields(self, machinery_payload):
        record = normalize_payload(machinery_payload)

        assert record.kind is PropertyKind.MACHINERY
        assert isinstance(record.appraisal, MachineryAppraisal)
        assert record.appraisal.capacity == "500"
        assert record.appraisal.condition == "Good"
        assert record.appraisal.rcn == 1200000.0
        assert record.assessment.assessed_value == 768000.0


# =============================================================================
# Discriminator
# =============================================================================

class TestDiscriminator:
    def test_discriminator_wins_on_mismatch(self, land_payload, caplog):
        land_payload["faas"]["property_kind"] = "Building"

        with caplog.at_level(logging.WARNING, logger="assessment.normalizer"):
            record = normalize_payload(land_payload)

        assert record.kind is PropertyKind.BUILDING
        assert record.appraisal == BuildingAppraisal()
        assert len(record.warnings) == 1
        assert "building" in record.warnings[0]
        assert any("building" in message for message in caplog.messages)

    def test_missing_discriminator_inferred_from_sub_object(self, machinery_payload):
        del machinery_payload["faas"]["property_kind"]

        record = normalize_payload(machinery_payload)

        assert record.kind is PropertyKind.MACHINERY
        assert record.appraisal.machinery_type == "Diesel Generator"
        assert len(record.warnings) == 1

    def test_unknown_discriminator_inferred(self, building_payload):
        building_payload["faas"]["property_kind"] = "Boat"

        record = normalize_payload(building_payload)

        assert record.kind is PropertyKind.BUILDING
        assert "Boat" in record.warnings[0]

    def test_empty_payload_defaults_to_land(self):
        record = normalize_payload({})

        assert record.kind is PropertyKind.LAND
        assert record.appraisal == LandAppraisal()
        assert record.base == BaseFields()
        assert len(record.warnings) == 2

    def test_none_payload_does_not_raise(self):
        assert normalize_payload(None).kind is PropertyKind.LAND

    def test_kind_is_case_insensitive(self):
        assert PropertyKind.from_string("LAND") is PropertyKind.LAND
        assert PropertyKind.from_string("machinery") is PropertyKind.MACHINERY
        assert PropertyKind.from_string("") is None


def test_record_rejects_mismatched_appraisal():
    with pytest.raises(ValueError):
        AssessmentRecord(
            id="1",
            kind=PropertyKind.LAND,
            base=BaseFields(),
            appraisal=MachineryAppraisal(),
        )
