"""
Aggregation Engine

Pure functions deriving the computed values printed on the FAAS and the
Tax Declaration:
- Improvement and additional-item subtotals
- Land adjustment chain (value adjustments, adjusted market value)
- Building and machinery depreciation
- Final market value and assessed value

Stored assessment values always win; derived values are fallbacks.
Full precision is kept here. Rounding happens only when formatting.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Mapping

from .models import (
    AdditionalLine,
    Adjustment,
    AssessmentRecord,
    BuildingAppraisal,
    ImprovementLine,
    LandAppraisal,
    MachineryAppraisal,
    PropertyKind,
)


@dataclass(frozen=True)
class Aggregates:
    """Computed values for one record. Never persisted."""
    improvements_total: float = 0.0
    additionals_total: float = 0.0
    adjustment_total: float = 0.0
    adjusted_market_value: float = 0.0
    total_floor_area: float = 0.0
    base_market_value: float = 0.0
    depreciation_amount: float = 0.0
    final_market_value: float = 0.0
    market_value: float = 0.0
    assessed_value: float = 0.0

    def to_dict(self) -> dict:
        return {
            "improvements_total": self.improvements_total,
            "additionals_total": self.additionals_total,
            "adjustment_total": self.adjustment_total,
            "adjusted_market_value": self.adjusted_market_value,
            "total_floor_area": self.total_floor_area,
            "base_market_value": self.base_market_value,
            "depreciation_amount": self.depreciation_amount,
            "final_market_value": self.final_market_value,
            "market_value": self.market_value,
            "assessed_value": self.assessed_value,
        }


# =============================================================================
# Line Items
# =============================================================================

def improvements_total(lines: Iterable[ImprovementLine]) -> float:
    """Sum of quantity * unit value over land improvements."""
    return sum((line.line_total for line in lines or ()), 0.0)


def additionals_total(lines: Iterable[AdditionalLine]) -> float:
    """Sum of quantity * unit value over building additional items."""
    return sum((line.line_total for line in lines or ()), 0.0)


def value_adjustment(base: float, percent: float) -> float:
    """Peso adjustment for one factor: base * percent / 100."""
    return base * percent / 100


def adjustment_total(base: float, adjustments: Iterable[Adjustment]) -> float:
    return sum((value_adjustment(base, adj.adjustment_value) for adj in adjustments or ()), 0.0)


def assessed_value(market_value: float, assessment_level: float) -> float:
    """Assessed value from market value and assessment level (percent)."""
    return market_value * assessment_level / 100


# =============================================================================
# Kind Aggregations
# =============================================================================

def _land_aggregates(appraisal: LandAppraisal) -> dict:
    base = appraisal.base_market_value
    adjustments = adjustment_total(base, appraisal.adjustments)
    improvements = improvements_total(appraisal.improvements)
    adjusted = base + adjustments
    return {
        "improvements_total": improvements,
        "adjustment_total": adjustments,
        "adjusted_market_value": adjusted,
        "base_market_value": base,
        "final_market_value": adjusted + improvements,
    }


def _building_aggregates(appraisal: BuildingAppraisal) -> dict:
    floor_area = sum((floor.area for floor in appraisal.floors), 0.0)
    base = appraisal.base_market_value or appraisal.unit_cost * floor_area

    if appraisal.additional_items:
        additionals = additionals_total(appraisal.additional_items)
    else:
        additionals = appraisal.additional_total

    depreciation = appraisal.depreciation_cost or (
        appraisal.depreciation_rate / 100 * (base + additionals)
    )
    final = appraisal.final_market_value or (base + additionals - depreciation)
    return {
        "additionals_total": additionals,
        "total_floor_area": floor_area,
        "base_market_value": base,
        "depreciation_amount": depreciation,
        "final_market_value": final,
    }


def _machinery_aggregates(appraisal: MachineryAppraisal) -> dict:
    """Depreciation rate is a percent per year of use, capped at RCN."""
    rcn = appraisal.rcn
    depreciation = appraisal.depreciation_value or min(
        rcn, rcn * appraisal.depreciation_rate / 100 * appraisal.years_used
    )
    return {
        "base_market_value": rcn,
        "depreciation_amount": depreciation,
        "final_market_value": max(0.0, rcn - depreciation),
    }


KIND_AGGREGATORS: Mapping[PropertyKind, Callable[..., dict]] = {
    PropertyKind.LAND: _land_aggregates,
    PropertyKind.BUILDING: _building_aggregates,
    PropertyKind.MACHINERY: _machinery_aggregates,
}


def compute_aggregates(record: AssessmentRecord) -> Aggregates:
    """
    Compute all aggregates for a record.

    Market value is the stored assessment value, falling back to the kind's
    final market value. Assessed value is the stored value, falling back to
    market value * assessment level.
    """
    values = KIND_AGGREGATORS[record.kind](record.appraisal)
    summary = record.assessment

    market_value = summary.market_value or values["final_market_value"]
    assessed = summary.assessed_value or assessed_value(market_value, summary.assessment_level)

    return Aggregates(market_value=market_value, assessed_value=assessed, **values)
