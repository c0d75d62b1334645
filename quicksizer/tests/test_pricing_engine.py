"""
Pricing engine test suite.
All expected values hand-computed (see sample_questionnaires.py).
Money is Decimal, so every assertion is exact.

Groups:
  1. Named constant verification
  2. Component calculators
  3. Parametrised end-to-end scenarios
  4. Invariants (totals, monotonicity, determinism)
  5. Breakdown ordering and cost shares
  6. Largest accepted questionnaire fits the estimate columns
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

import pytest

from quicksizer.estimation.pricing_engine import (
    ANNUAL_DISCOUNT_FACTOR,
    BASE_COST_BY_TIER,
    COMPLIANCE_COST,
    COMPUTE_COST_PER_CONCURRENT_USER,
    COMPUTE_COST_PER_DEVELOPER,
    FUNCTIONALITY_COST,
    MONTHS_PER_YEAR,
    STORAGE_RATE_BY_TIER,
    SUPPORT_BASE_HIGH_AVAILABILITY,
    SUPPORT_BASE_STANDARD,
    SUPPORT_MULTIPLIER_BY_DEPLOYMENT,
    calculate_annual_cost,
    calculate_base_cost,
    calculate_compliance_cost,
    calculate_compute_cost,
    calculate_data_storage_cost,
    calculate_estimate,
    calculate_functionality_cost,
    calculate_support_cost,
)
from quicksizer.estimation.schemas import BREAKDOWN_LABELS
from quicksizer.models.estimate import EstimateORM
from quicksizer.questionnaire.schemas import DataSize, QuestionnaireInput
from quicksizer.questionnaire.validator import validate_questionnaire
from sample_questionnaires import BASELINE, SCENARIOS, questionnaire


def _priced(**overrides):
    return calculate_estimate(QuestionnaireInput.model_validate(questionnaire(**overrides)))


# ===========================================================================
# TEST GROUP 1: Named constant verification — exact equality
# ===========================================================================

def test_base_cost_constants() -> None:
    assert BASE_COST_BY_TIER == {
        "small": Decimal("500"),
        "medium": Decimal("1000"),
        "large": Decimal("2000"),
        "enterprise": Decimal("5000"),
    }


def test_storage_rate_constants() -> None:
    assert STORAGE_RATE_BY_TIER == {
        "small": Decimal("0.10"),
        "medium": Decimal("0.10"),
        "large": Decimal("0.05"),
        "enterprise": Decimal("0.03"),
    }


def test_storage_rate_never_increases_with_tier() -> None:
    rates = [STORAGE_RATE_BY_TIER[tier.value] for tier in DataSize]
    assert rates == sorted(rates, reverse=True), f"Rates must be non-increasing: {rates}"


def test_compute_constants() -> None:
    assert COMPUTE_COST_PER_DEVELOPER == Decimal("150")
    assert COMPUTE_COST_PER_CONCURRENT_USER == Decimal("10")


def test_functionality_constants() -> None:
    assert FUNCTIONALITY_COST == {
        "etl": Decimal("300"),
        "data_warehousing": Decimal("500"),
        "ml": Decimal("800"),
        "analytics": Decimal("400"),
        "real_time": Decimal("600"),
    }


def test_compliance_and_support_constants() -> None:
    assert COMPLIANCE_COST == Decimal("1000")
    assert SUPPORT_BASE_STANDARD == Decimal("500")
    assert SUPPORT_BASE_HIGH_AVAILABILITY == Decimal("1500")
    assert SUPPORT_MULTIPLIER_BY_DEPLOYMENT == {
        "cloud": Decimal("1.0"),
        "on_premise": Decimal("1.5"),
        "hybrid": Decimal("1.3"),
    }


def test_annual_constants() -> None:
    assert MONTHS_PER_YEAR == 12
    assert ANNUAL_DISCOUNT_FACTOR == Decimal("0.9")


# ===========================================================================
# TEST GROUP 2: Component calculators
# ===========================================================================

@pytest.mark.parametrize("tier, expected", [
    ("small", Decimal("500")),
    ("medium", Decimal("1000")),
    ("large", Decimal("2000")),
    ("enterprise", Decimal("5000")),
    (DataSize.large, Decimal("2000")),
])
def test_base_cost_by_tier(tier, expected) -> None:
    assert calculate_base_cost(tier) == expected


def test_unknown_tier_is_priced_as_small() -> None:
    assert calculate_base_cost("galactic") == Decimal("500")
    assert calculate_data_storage_cost("galactic", 100) == Decimal("10.00")


@pytest.mark.parametrize("tier, volume, expected", [
    ("medium", Decimal("100"), Decimal("10.00")),
    ("large", Decimal("1000"), Decimal("50.00")),
    ("enterprise", Decimal("100"), Decimal("3.00")),
    # 10.55 * 0.03 = 0.3165 → half-up to cents
    ("enterprise", Decimal("10.55"), Decimal("0.32")),
    # 10.25 * 0.05 = 0.5125
    ("large", Decimal("10.25"), Decimal("0.51")),
    # 0.05 * 0.10 = 0.005 → exactly half a cent rounds up
    ("small", Decimal("0.05"), Decimal("0.01")),
    # float input goes through str(), not its binary expansion
    ("small", 0.1, Decimal("0.01")),
])
def test_data_storage_cost(tier, volume, expected) -> None:
    assert calculate_data_storage_cost(tier, volume) == expected


def test_compute_cost_is_linear_in_team_and_users() -> None:
    assert calculate_compute_cost(5, 50) == Decimal("1250")
    assert calculate_compute_cost(1, 1) == Decimal("160")
    # no caps
    assert calculate_compute_cost(10_000, 100_000) == Decimal("2500000")


def test_functionality_cost_sums_surcharges() -> None:
    assert calculate_functionality_cost(["etl", "analytics"]) == Decimal("700")
    assert calculate_functionality_cost(list(FUNCTIONALITY_COST)) == Decimal("2600")


def test_functionality_cost_charges_each_capability_once() -> None:
    assert calculate_functionality_cost(["ml", "ml", "etl"]) == Decimal("1100")


def test_functionality_cost_ignores_unknown_tags() -> None:
    assert calculate_functionality_cost(["etl", "quantum"]) == Decimal("300")


def test_functionality_cost_empty_is_zero() -> None:
    assert calculate_functionality_cost([]) == Decimal("0")


def test_compliance_cost() -> None:
    assert calculate_compliance_cost(True) == Decimal("1000")
    assert calculate_compliance_cost(False) == Decimal("0")


@pytest.mark.parametrize("high_availability, deployment, expected", [
    (False, "cloud", Decimal("500")),
    (False, "on_premise", Decimal("750")),
    (False, "hybrid", Decimal("650")),
    (True, "cloud", Decimal("1500")),
    (True, "on_premise", Decimal("2250")),
    (True, "hybrid", Decimal("1950")),
])
def test_support_cost_matrix(high_availability, deployment, expected) -> None:
    assert calculate_support_cost(high_availability, deployment) == expected


def test_annual_cost_applies_ten_percent_discount() -> None:
    assert calculate_annual_cost(Decimal("3460")) == Decimal("37368.00")
    # 0.01 * 10.8 = 0.108 → 0.11
    assert calculate_annual_cost(Decimal("0.01")) == Decimal("0.11")


# ===========================================================================
# TEST GROUP 3: Parametrised end-to-end scenarios
# ===========================================================================

@dataclass
class PricingCase:
    name: str
    answers: dict
    expected: dict


CASES = [PricingCase(name, answers, expected) for name, (answers, expected) in SCENARIOS.items()]


@pytest.mark.parametrize("case", CASES, ids=[c.name for c in CASES])
def test_scenario_estimates(case: PricingCase) -> None:
    result = calculate_estimate(QuestionnaireInput.model_validate(case.answers))
    for field, expected in case.expected.items():
        actual = getattr(result, field)
        assert actual == expected, f"{case.name}: {field} = {actual}, expected {expected}"


def test_enterprise_on_premise_support_and_compliance() -> None:
    result = _priced(
        data_size="enterprise",
        deployment_preference="on_premise",
        high_availability_needed=True,
        compliance_requirements=True,
    )
    assert result.support_cost == Decimal("2250")
    assert result.compliance_cost == Decimal("1000")
    assert result.base_cost == Decimal("5000")


# ===========================================================================
# TEST GROUP 4: Invariants
# ===========================================================================

@pytest.mark.parametrize("case", CASES, ids=[c.name for c in CASES])
def test_monthly_total_is_sum_of_components(case: PricingCase) -> None:
    result = calculate_estimate(QuestionnaireInput.model_validate(case.answers))
    components = (
        result.base_cost + result.data_storage_cost + result.compute_cost
        + result.functionality_cost + result.compliance_cost + result.support_cost
    )
    assert result.total_monthly_cost == components
    assert sum(result.cost_breakdown.values(), Decimal("0")) == result.total_monthly_cost


@pytest.mark.parametrize("case", CASES, ids=[c.name for c in CASES])
def test_annual_total_is_discounted_twelve_months(case: PricingCase) -> None:
    result = calculate_estimate(QuestionnaireInput.model_validate(case.answers))
    assert result.total_annual_cost == calculate_annual_cost(result.total_monthly_cost)
    assert result.total_annual_cost < result.total_monthly_cost * 12


def test_every_component_is_non_negative() -> None:
    for answers, _ in SCENARIOS.values():
        result = calculate_estimate(QuestionnaireInput.model_validate(answers))
        for label, amount in result.cost_breakdown.items():
            assert amount >= 0, f"{answers['session_id']}: {label} is negative"


@pytest.mark.parametrize("field, smaller, larger", [
    ("developer_count", 5, 6),
    ("concurrent_users", 50, 51),
    ("monthly_data_volume_gb", 100, 5000),
    ("compliance_requirements", False, True),
    ("high_availability_needed", False, True),
    ("required_functionalities", ["etl"], ["etl", "ml"]),
])
def test_more_demand_never_costs_less(field, smaller, larger) -> None:
    low = _priced(**{field: smaller})
    high = _priced(**{field: larger})
    assert high.total_monthly_cost >= low.total_monthly_cost, (
        f"Raising {field} from {smaller!r} to {larger!r} lowered the monthly total"
    )


def test_estimate_is_deterministic() -> None:
    data = QuestionnaireInput.model_validate(BASELINE)
    assert calculate_estimate(data) == calculate_estimate(data)


def test_duplicate_functionalities_are_charged_once() -> None:
    once = _priced(required_functionalities=["etl", "analytics"])
    twice = _priced(required_functionalities=["etl", "analytics", "etl"])
    assert once.functionality_cost == twice.functionality_cost == Decimal("700")


# ===========================================================================
# TEST GROUP 5: Breakdown ordering and cost shares
# ===========================================================================

def test_breakdown_labels_and_order() -> None:
    result = _priced()
    assert tuple(result.cost_breakdown) == BREAKDOWN_LABELS
    assert result.cost_breakdown == {
        "Base Platform": Decimal("1000"),
        "Data Storage": Decimal("10"),
        "Compute Resources": Decimal("1250"),
        "Functionalities": Decimal("700"),
        "Compliance": Decimal("0"),
        "Support": Decimal("500"),
    }


def test_cost_shares_sum_to_one_hundred() -> None:
    result = _priced()
    shares = result.cost_shares
    assert tuple(shares) == BREAKDOWN_LABELS
    assert sum(shares.values()) == pytest.approx(100.0)
    assert shares["Base Platform"] == pytest.approx(1000 / 3460 * 100)
    assert shares["Compliance"] == 0.0


def test_money_serialises_as_json_numbers() -> None:
    dumped = _priced().model_dump(mode="json")
    assert dumped["total_monthly_cost"] == 3460.0
    assert dumped["cost_breakdown"]["Compute Resources"] == 1250.0
    assert isinstance(dumped["total_annual_cost"], float)
    assert "cost_shares" in dumped


# ===========================================================================
# TEST GROUP 6: Largest accepted questionnaire fits the estimate columns
# ===========================================================================

MONEY_COLUMNS = (
    "base_cost", "data_storage_cost", "compute_cost", "functionality_cost",
    "compliance_cost", "support_cost", "total_monthly_cost", "total_annual_cost",
)


@pytest.mark.parametrize("tier", [t.value for t in DataSize])
def test_largest_accepted_questionnaire_fits_money_columns(tier: str) -> None:
    data = validate_questionnaire(questionnaire(
        data_size=tier,
        developer_count=2_147_483_647,
        concurrent_users=2_147_483_647,
        monthly_data_volume_gb="9999999999.99",
        required_functionalities=list(FUNCTIONALITY_COST),
        deployment_preference="on_premise",
        compliance_requirements=True,
        high_availability_needed=True,
    ))
    result = calculate_estimate(data)

    columns = EstimateORM.__table__.c
    for field in MONEY_COLUMNS:
        precision = columns[field].type.precision
        scale = columns[field].type.scale
        amount = getattr(result, field)
        assert abs(amount) < Decimal(10) ** (precision - scale), (
            f"{tier}: {field} = {amount} overflows NUMERIC({precision}, {scale})"
        )
        assert -amount.as_tuple().exponent <= scale, f"{tier}: {field} = {amount} has sub-cent digits"


def test_two_billion_developers_fit_annual_column() -> None:
    result = calculate_estimate(validate_questionnaire(questionnaire(developer_count=2_000_000_000)))
    column_type = EstimateORM.__table__.c.total_annual_cost.type
    assert result.total_annual_cost == Decimal("3240000029268.00")
    assert result.total_annual_cost < Decimal(10) ** (column_type.precision - column_type.scale)
