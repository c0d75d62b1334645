"""
service.py — the core-facing contract consumed by the HTTP layer.

    create_questionnaire(input)               -> Questionnaire   (ValidationError | DuplicateSession)
    get_questionnaire_by_session(session_id)  -> Questionnaire | None
    get_estimate_by_questionnaire_id(id)      -> Estimate | None
    resolve_cost_result(session_id)           -> CostResult | None
    list_questionnaires()                     -> [Questionnaire], newest first
    summarize_questionnaires()                -> QuestionnaireSummary

Built once per application in the lifespan hook from a session factory;
every collaborator is passed in, nothing is looked up globally.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from fastapi import Request

from quicksizer.estimation.orchestrator import EstimationOrchestrator, PricingFunction
from quicksizer.estimation.pricing_engine import calculate_estimate
from quicksizer.estimation.schemas import CostResult, Estimate
from quicksizer.questionnaire.schemas import (
    Questionnaire,
    QuestionnaireInput,
    QuestionnaireSummary,
)
from quicksizer.store import EstimateStore, QuestionnaireStore, SessionFactory


class CostEstimationService:
    def __init__(
        self,
        questionnaires: QuestionnaireStore,
        estimates: EstimateStore,
        pricing: PricingFunction = calculate_estimate,
    ) -> None:
        self.questionnaires = questionnaires
        self.estimates = estimates
        self.orchestrator = EstimationOrchestrator(questionnaires, estimates, pricing)

    @classmethod
    def from_session_factory(cls, session_factory: SessionFactory) -> "CostEstimationService":
        return cls(QuestionnaireStore(session_factory), EstimateStore(session_factory))

    async def create_questionnaire(
        self,
        payload: Union[QuestionnaireInput, Mapping[str, Any]],
    ) -> Questionnaire:
        return await self.questionnaires.create(payload)

    async def get_questionnaire_by_session(self, session_id: str) -> Optional[Questionnaire]:
        return await self.questionnaires.get_by_session(session_id)

    async def get_estimate_by_questionnaire_id(self, questionnaire_id: int) -> Optional[Estimate]:
        return await self.estimates.get_by_questionnaire_id(questionnaire_id)

    async def resolve_cost_result(self, session_id: str) -> Optional[CostResult]:
        return await self.orchestrator.resolve(session_id)

    async def list_questionnaires(self) -> list[Questionnaire]:
        return await self.questionnaires.list_all()

    async def summarize_questionnaires(self) -> QuestionnaireSummary:
        return await self.questionnaires.summary()


def get_service(request: Request) -> CostEstimationService:
    """FastAPI dependency — the service built in the lifespan hook."""
    return request.app.state.service
