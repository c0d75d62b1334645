"""
Quicksizer Recommendations
Plain-English advisory notes attached to every estimate.
Pure functions. No I/O.

Each rule is an independent predicate; the ones that hold are emitted in
the fixed order of RULES, always preceded by the baseline note.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Callable, Union

from quicksizer.questionnaire.schemas import QuestionnaireInput

BASELINE_RECOMMENDATION = "Review usage patterns monthly to optimize costs"

ANNUAL_BILLING_THRESHOLD = Decimal("5000")       # total monthly cost
STORAGE_DOMINANT_SHARE = Decimal("0.3")          # storage share of monthly cost
PHASED_IMPLEMENTATION_MIN_FUNCTIONALITIES = 3    # i.e. more than two
HIGH_CONCURRENCY_THRESHOLD = 1000                # concurrent users

ANNUAL_BILLING = "Consider annual billing for 10% discount on total costs"
STORAGE_DOMINANT = (
    "Data storage represents a large portion of costs - consider data retention policies"
)
PHASED_IMPLEMENTATION = (
    "Multiple functionalities selected - consider phased implementation to spread costs"
)
ON_PREMISE_SUPPORT = (
    "On-premise deployment increases support costs - evaluate cloud options for savings"
)
FINANCE_AUDITS = (
    "Financial compliance requires additional security measures - budget for quarterly audits"
)
HIGH_CONCURRENCY = "High user concurrency - consider load balancing and caching strategies"
DEDICATED_INFRASTRUCTURE = "Consider dedicated infrastructure for enterprise-scale deployments"
MULTI_REGION = "Set up multi-region deployment for high availability"


@dataclass(frozen=True)
class PricingFacts:
    """The inputs every recommendation rule may look at."""
    questionnaire: QuestionnaireInput
    total_monthly_cost: Decimal
    data_storage_cost: Decimal

    @property
    def functionality_count(self) -> int:
        return len({_key(f) for f in self.questionnaire.required_functionalities})


def _key(value: Union[Enum, str]) -> str:
    return value.value if isinstance(value, Enum) else str(value)


RULES: tuple[tuple[Callable[[PricingFacts], bool], str], ...] = (
    (lambda f: f.total_monthly_cost > ANNUAL_BILLING_THRESHOLD, ANNUAL_BILLING),
    (lambda f: f.data_storage_cost > STORAGE_DOMINANT_SHARE * f.total_monthly_cost, STORAGE_DOMINANT),
    (lambda f: f.functionality_count >= PHASED_IMPLEMENTATION_MIN_FUNCTIONALITIES, PHASED_IMPLEMENTATION),
    (lambda f: _key(f.questionnaire.deployment_preference) == "on_premise", ON_PREMISE_SUPPORT),
    (
        lambda f: f.questionnaire.compliance_requirements
        and _key(f.questionnaire.industry) == "finance",
        FINANCE_AUDITS,
    ),
    (lambda f: f.questionnaire.concurrent_users > HIGH_CONCURRENCY_THRESHOLD, HIGH_CONCURRENCY),
    (lambda f: _key(f.questionnaire.data_size) == "enterprise", DEDICATED_INFRASTRUCTURE),
    (lambda f: f.questionnaire.high_availability_needed, MULTI_REGION),
)


def generate_recommendations(
    questionnaire: QuestionnaireInput,
    *,
    total_monthly_cost: Decimal,
    data_storage_cost: Decimal,
) -> list[str]:
    """
    Return the baseline note followed by every triggered advisory, in rule order.
    """
    facts = PricingFacts(
        questionnaire=questionnaire,
        total_monthly_cost=total_monthly_cost,
        data_storage_cost=data_storage_cost,
    )
    recommendations = [BASELINE_RECOMMENDATION]
    recommendations.extend(text for predicate, text in RULES if predicate(facts))
    return recommendations
