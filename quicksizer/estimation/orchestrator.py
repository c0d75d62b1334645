"""
Estimation orchestrator — compute-or-fetch the estimate for a session.

resolve(session_id):
  1. questionnaire = questionnaires.get_by_session(session_id) → None if absent
  2. estimate = estimates.get_by_questionnaire_id(questionnaire.id) → return if present
  3. otherwise price it, store it, return it

Write-once-on-miss, keyed by questionnaire id. When two first requests race,
the estimates.questionnaire_id unique constraint lets exactly one INSERT
through; the loser drops its own computation and returns the winner's row.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from quicksizer.estimation.pricing_engine import calculate_estimate
from quicksizer.estimation.schemas import CostComputation, CostResult, Estimate
from quicksizer.exceptions import EstimateAlreadyExists, StorageFailure
from quicksizer.questionnaire.schemas import QuestionnaireInput
from quicksizer.store import EstimateStore, QuestionnaireStore

logger = logging.getLogger(__name__)

PricingFunction = Callable[[QuestionnaireInput], CostComputation]


class EstimationOrchestrator:
    """Read-through, write-once cache of estimates in front of the pricing engine."""

    def __init__(
        self,
        questionnaires: QuestionnaireStore,
        estimates: EstimateStore,
        pricing: PricingFunction = calculate_estimate,
    ) -> None:
        self._questionnaires = questionnaires
        self._estimates = estimates
        self._pricing = pricing

    async def resolve(self, session_id: str) -> Optional[CostResult]:
        """
        Return the questionnaire for session_id together with its estimate,
        computing and persisting the estimate on first request.

        Returns None (never raises) when the session has no questionnaire.
        StorageFailure propagates unchanged.
        """
        questionnaire = await self._questionnaires.get_by_session(session_id)
        if questionnaire is None:
            logger.info("No questionnaire for session_id=%s", session_id)
            return None

        estimate = await self._estimates.get_by_questionnaire_id(questionnaire.id)
        if estimate is None:
            estimate = await self._compute_and_store(questionnaire.id, questionnaire)
        else:
            logger.info("Estimate cache hit questionnaire_id=%s", questionnaire.id)

        return CostResult(questionnaire=questionnaire, estimate=estimate)

    async def _compute_and_store(
        self,
        questionnaire_id: int,
        questionnaire: QuestionnaireInput,
    ) -> Estimate:
        computation = self._pricing(questionnaire)
        try:
            return await self._estimates.create(questionnaire_id, computation)
        except EstimateAlreadyExists:
            # Someone else stored theirs between our read and our insert
            logger.info(
                "Estimate race lost questionnaire_id=%s, re-reading stored estimate",
                questionnaire_id,
            )
            existing = await self._estimates.get_by_questionnaire_id(questionnaire_id)
            if existing is None:
                # Uniqueness fired but the row is gone: the store is not behaving
                raise StorageFailure("estimate re-read after conflict")
            return existing
