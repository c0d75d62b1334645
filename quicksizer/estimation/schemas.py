"""
schemas.py — Estimation Pydantic v2 data contracts.

Defines:
  - BREAKDOWN_LABELS  (display order of the labelled cost breakdown)
  - CostComputation   (pricing engine output — everything except id/created_at)
  - Estimate          (persisted estimate for one questionnaire)
  - CostResult        (questionnaire + its estimate — the resolve() response)

All money is Decimal at 2 decimal places and serialises as a JSON number.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, computed_field, field_validator

from quicksizer.questionnaire.schemas import CENT, Amount, Questionnaire

# Display order. JSONB does not keep key order, so readers re-sort by this
BREAKDOWN_LABELS: tuple[str, ...] = (
    "Base Platform",
    "Data Storage",
    "Compute Resources",
    "Functionalities",
    "Compliance",
    "Support",
)


class CostComputation(BaseModel):
    """
    Output of calculate_estimate().

    Invariants (enforced by the pricing engine, not re-checked here):
      total_monthly_cost == sum of the six components
      total_annual_cost  == total_monthly_cost * 12 * 0.9, rounded to cents
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    base_cost: Amount
    data_storage_cost: Amount
    compute_cost: Amount
    functionality_cost: Amount
    compliance_cost: Amount
    support_cost: Amount
    total_monthly_cost: Amount
    total_annual_cost: Amount
    cost_breakdown: Dict[str, Amount]
    recommendations: List[str] = []

    @field_validator(
        "base_cost", "data_storage_cost", "compute_cost", "functionality_cost",
        "compliance_cost", "support_cost", "total_monthly_cost", "total_annual_cost",
    )
    @classmethod
    def to_cents(cls, value: Decimal) -> Decimal:
        return value.quantize(CENT)

    @field_validator("cost_breakdown")
    @classmethod
    def breakdown_in_display_order(cls, value: Dict[str, Decimal]) -> Dict[str, Decimal]:
        ordered = {label: value[label].quantize(CENT) for label in BREAKDOWN_LABELS if label in value}
        # Unknown labels (none today) keep their relative order after the known ones
        ordered.update((k, v.quantize(CENT)) for k, v in value.items() if k not in ordered)
        return ordered

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cost_shares(self) -> Dict[str, float]:
        """Percentage of total_monthly_cost per breakdown label, full precision."""
        total = self.total_monthly_cost
        if total == 0:
            return {label: 0.0 for label in self.cost_breakdown}
        return {
            label: float(amount / total * 100)
            for label, amount in self.cost_breakdown.items()
        }


class Estimate(CostComputation):
    """A persisted estimate. Created once per questionnaire, never updated."""
    model_config = ConfigDict(extra="ignore", frozen=True, from_attributes=True)

    id: int
    questionnaire_id: int
    created_at: datetime


class CostResult(BaseModel):
    """resolve_cost_result() output: the questionnaire and its (possibly just computed) estimate."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    questionnaire: Questionnaire
    estimate: Estimate


__all__ = [
    "BREAKDOWN_LABELS",
    "CostComputation",
    "Estimate",
    "CostResult",
]
