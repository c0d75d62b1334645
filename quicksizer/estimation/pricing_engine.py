"""
Quicksizer Pricing Engine
Pure Python, deterministic. Same questionnaire → same estimate.

Maps the priced questionnaire attributes (data tier, data volume, team size,
concurrency, functionalities, compliance, availability, deployment) to six
monthly cost components, the monthly/annual totals, a labelled breakdown
and a list of advisory recommendations.

Money is Decimal throughout. Each component is rounded half-up to cents,
the monthly total is the exact sum of the rounded components, and the
annual total is rounded once at the end.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Iterable, Union

from quicksizer.estimation.recommendations import generate_recommendations
from quicksizer.estimation.schemas import BREAKDOWN_LABELS, CostComputation
from quicksizer.questionnaire.schemas import CENT, QuestionnaireInput

# ===========================================================================
# BASE PLATFORM FEE — per data tier (monthly)
# ===========================================================================

BASE_COST_BY_TIER: dict[str, Decimal] = {
    "small":      Decimal("500"),
    "medium":     Decimal("1000"),
    "large":      Decimal("2000"),
    "enterprise": Decimal("5000"),
}

# ===========================================================================
# STORAGE RATE — per GB of monthly volume, non-increasing as the tier grows
# ===========================================================================

STORAGE_RATE_BY_TIER: dict[str, Decimal] = {
    "small":      Decimal("0.10"),
    "medium":     Decimal("0.10"),
    "large":      Decimal("0.05"),
    "enterprise": Decimal("0.03"),
}

# Unknown tiers cannot pass validation; if one ever reaches the engine it is priced as small
FALLBACK_TIER = "small"

# ===========================================================================
# COMPUTE — linear in team size and concurrency, no caps
# ===========================================================================

COMPUTE_COST_PER_DEVELOPER = Decimal("150")
COMPUTE_COST_PER_CONCURRENT_USER = Decimal("10")

# ===========================================================================
# FUNCTIONALITY SURCHARGES (monthly, flat per capability)
# ===========================================================================

FUNCTIONALITY_COST: dict[str, Decimal] = {
    "etl":              Decimal("300"),
    "data_warehousing": Decimal("500"),
    "ml":               Decimal("800"),
    "analytics":        Decimal("400"),
    "real_time":        Decimal("600"),
}

# ===========================================================================
# COMPLIANCE & SUPPORT
# ===========================================================================

COMPLIANCE_COST = Decimal("1000")

SUPPORT_BASE_STANDARD = Decimal("500")
SUPPORT_BASE_HIGH_AVAILABILITY = Decimal("1500")

# Applied once, multiplicatively, on top of the availability-dependent base
SUPPORT_MULTIPLIER_BY_DEPLOYMENT: dict[str, Decimal] = {
    "cloud":      Decimal("1.0"),
    "on_premise": Decimal("1.5"),
    "hybrid":     Decimal("1.3"),
}

# ===========================================================================
# ANNUAL BILLING
# ===========================================================================

MONTHS_PER_YEAR = 12
ANNUAL_DISCOUNT_FACTOR = Decimal("0.9")   # flat 10% off for annual billing


# ===========================================================================
# INTERNAL HELPERS (pure functions — no side effects, no I/O)
# ===========================================================================

def _key(value: Union[Enum, str]) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def _to_decimal(value: Union[Decimal, float, int]) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() first so 0.1 becomes Decimal("0.1"), not its binary expansion
    return Decimal(str(value))


def _cents(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def _unique_functionalities(functionalities: Iterable[Union[Enum, str]]) -> list[str]:
    return list(dict.fromkeys(_key(f) for f in functionalities))


# ===========================================================================
# COMPONENT CALCULATORS
# ===========================================================================

def calculate_base_cost(data_size: Union[Enum, str]) -> Decimal:
    tier = _key(data_size)
    return _cents(BASE_COST_BY_TIER.get(tier, BASE_COST_BY_TIER[FALLBACK_TIER]))


def calculate_data_storage_cost(
    data_size: Union[Enum, str],
    monthly_data_volume_gb: Union[Decimal, float, int],
) -> Decimal:
    """monthly_data_volume_gb × per-GB rate of the tier."""
    tier = _key(data_size)
    rate = STORAGE_RATE_BY_TIER.get(tier, STORAGE_RATE_BY_TIER[FALLBACK_TIER])
    return _cents(_to_decimal(monthly_data_volume_gb) * rate)


def calculate_compute_cost(developer_count: int, concurrent_users: int) -> Decimal:
    return _cents(
        developer_count * COMPUTE_COST_PER_DEVELOPER
        + concurrent_users * COMPUTE_COST_PER_CONCURRENT_USER
    )


def calculate_functionality_cost(functionalities: Iterable[Union[Enum, str]]) -> Decimal:
    """
    Sum of per-capability surcharges. Each capability is charged once even if
    listed twice; unknown tags contribute nothing. An empty list costs 0.
    """
    return _cents(sum(
        (FUNCTIONALITY_COST.get(tag, Decimal("0")) for tag in _unique_functionalities(functionalities)),
        Decimal("0"),
    ))


def calculate_compliance_cost(compliance_requirements: bool) -> Decimal:
    return _cents(COMPLIANCE_COST if compliance_requirements else Decimal("0"))


def calculate_support_cost(
    high_availability_needed: bool,
    deployment_preference: Union[Enum, str],
) -> Decimal:
    """
    Availability sets the base (1500 HA / 500 standard); deployment then
    scales it once: on_premise ×1.5, hybrid ×1.3, cloud ×1.0.
    """
    base = SUPPORT_BASE_HIGH_AVAILABILITY if high_availability_needed else SUPPORT_BASE_STANDARD
    multiplier = SUPPORT_MULTIPLIER_BY_DEPLOYMENT.get(_key(deployment_preference), Decimal("1.0"))
    return _cents(base * multiplier)


def calculate_annual_cost(total_monthly_cost: Decimal) -> Decimal:
    return _cents(total_monthly_cost * MONTHS_PER_YEAR * ANNUAL_DISCOUNT_FACTOR)


# ===========================================================================
# PUBLIC API
# ===========================================================================

def calculate_estimate(questionnaire: QuestionnaireInput) -> CostComputation:
    """
    Price a questionnaire.

    Trusts the closed-enum fields and positive counts established by
    validation; never raises for any questionnaire that passed it.
    """
    base_cost = calculate_base_cost(questionnaire.data_size)
    data_storage_cost = calculate_data_storage_cost(
        questionnaire.data_size, questionnaire.monthly_data_volume_gb,
    )
    compute_cost = calculate_compute_cost(
        questionnaire.developer_count, questionnaire.concurrent_users,
    )
    functionality_cost = calculate_functionality_cost(questionnaire.required_functionalities)
    compliance_cost = calculate_compliance_cost(questionnaire.compliance_requirements)
    support_cost = calculate_support_cost(
        questionnaire.high_availability_needed, questionnaire.deployment_preference,
    )

    components = (
        base_cost, data_storage_cost, compute_cost,
        functionality_cost, compliance_cost, support_cost,
    )
    total_monthly_cost = sum(components, Decimal("0"))
    total_annual_cost = calculate_annual_cost(total_monthly_cost)

    recommendations = generate_recommendations(
        questionnaire,
        total_monthly_cost=total_monthly_cost,
        data_storage_cost=data_storage_cost,
    )

    return CostComputation(
        base_cost=base_cost,
        data_storage_cost=data_storage_cost,
        compute_cost=compute_cost,
        functionality_cost=functionality_cost,
        compliance_cost=compliance_cost,
        support_cost=support_cost,
        total_monthly_cost=total_monthly_cost,
        total_annual_cost=total_annual_cost,
        cost_breakdown=dict(zip(BREAKDOWN_LABELS, components)),
        recommendations=recommendations,
    )
