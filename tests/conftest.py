"""
Shared FAAS payload fixtures.

Each fixture returns a fresh dict shaped like the FAAS record API response,
so tests can mutate it freely.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from utils.config import Config


def _faas(**overrides):
    faas = {
        "faas_id": 101,
        "faas_no": "F-2024-001",
        "arp_no": "ARP-01-0001",
        "pin": "123-45-678-90-001",
        "owner_name": None,
        "owner_address": None,
        "barangay": "Poblacion",
        "lg_code": "San Isidro",
        "lot_no": "12",
        "block_no": "3",
        "property_kind": "LAND",
        "taxable": 1,
        "effectivity_date": "2024-01-01",
        "created_by": "jdelacruz",
        "created_date": "2024-03-15",
        "faas_type": "GR",
        "boundary_north": "Lot 11",
        "boundary_east": "Barangay Road",
        "boundary_south": "Lot 13",
        "boundary_west": "Creek",
    }
    faas.update(overrides)
    return faas


@pytest.fixture
def owners():
    return [
        {
            "first_name": "Juan",
            "middle_name": "Santos",
            "last_name": "Dela Cruz",
            "suffix": "Jr.",
            "tin_no": "111-222-333",
            "contact_no": "0917-555-0101",
            "address_house_no": "45 Rizal St., Poblacion",
        },
    ]


@pytest.fixture
def superseded():
    return {
        "pin": "123-45-678-90-000",
        "arp_no": "ARP-OLD-0001",
        "td_no": "TD-OLD-9",
        "assessed_value": "50,000",
        "owner_name": "Maria Santos",
        "effectivity": "2019",
        "ar_page_no": "14",
        "recorded_by": "mclerk",
        "recorded_date": "2019-05-02",
    }


@pytest.fixture
def land_payload(owners, superseded):
    """Land FAAS: base 150,000, two adjustments (-10%, +5%), improvements worth 350."""
    return {
        "faas": _faas(),
        "owners": owners,
        "superseded": superseded,
        "land": {
            "appraisal": {
                "classification": "Agricultural",
                "subclassification": "1st Class",
                "area": "1,000",
                "unit_value": "150.00",
                "base_market_value": "150000",
            },
            "assessment": {
                "actual_use": "Agricultural",
                "market_value": "",
                "assessment_level": "40",
                "assessed_value": None,
            },
            "adjustments": [
                {"factor": "Type of road", "adjustment": "-10"},
                {"factor": "Distance to market", "adjustment": "5"},
            ],
            "improvements": [
                {"improvement_name": "Coconut", "qty": 2, "unit_value": 100},
                {"improvement_name": "Mango", "qty": "3", "unit_value": "50"},
            ],
        },
    }


@pytest.fixture
def building_payload(owners):
    """Building FAAS: 150 sq.m. at 10,000, additionals worth 10,000, 10% depreciation."""
    return {
        "faas": _faas(faas_id=202, property_kind="Building", taxable=None),
        "owners": owners,
        "building": {
            "general": {
                "buildingKind": "Residential",
                "structuralType": "II-B",
                "storeys": "2",
                "buildingAge": 5,
            },
            "floors": [
                {"floor_no": 1, "floor_area": "80"},
                {"floor_no": 2, "floor_area": 70},
            ],
            "materials": [
                {"part": "Roof", "material": "GI Sheet", "floor_no": 2},
                {"part": "Flooring", "material": "Concrete", "floor_no": 1},
            ],
            "appraisal": {
                "unit_cost": "10,000",
                "base_market_value": None,
                "additional_total": "",
                "deprication_rate": "10",
                "depreciation_cost": None,
                "final_market_value": None,
            },
            "additionals": [
                {"item_name": "Floor tiles", "quantity": 10, "unit_cost": None, "total_cost": 5000},
                {"item_name": "Window grills", "quantity": 2, "unit_cost": 2500},
            ],
            "assessment": {
                "actual_use": "Residential",
                "market_value": None,
                "assessment_level": 20,
                "assessed_value": None,
                "taxable": 0,
            },
        },
    }


@pytest.fixture
def machinery_payload(owners):
    """Machinery FAAS with stored market and assessed values."""
    return {
        "faas": _faas(faas_id=303, property_kind="machinery"),
        "owners": owners,
        "machinery": {
            "appraisal": {
                "machinery_type": "Diesel Generator",
                "brand_model": "CAT 3406",
                "capacity_hp": "500",
                "machinery_condition": "Good",
                "date_acquired": "2020-06-01",
                "year_installed": "2020",
                "estimated_life": 20,
                "remaining_life": 16,
                "original_cost": 1000000,
                "conversion_factor": 1.2,
                "rcn": 1200000,
                "years_used": 4,
                "depreciation_rate": 20,
                "depreciation_value": None,
            },
            "assessment": {
                "actual_use": "Industrial",
                "market_value": 960000,
                "assessment_level": 80,
                "assessed_value": 768000,
                "taxable": 1,
            },
        },
    }


@pytest.fixture
def config():
    return Config(
        municipal_assessor="ANA M. REYES",
        recommending_assessor="ANA M. REYES",
        provincial_assessor="PEDRO L. GARCIA",
        province="Bulacan",
        ordinance_no="2023-15",
    )
