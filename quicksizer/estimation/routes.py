"""
Estimation HTTP routes — GET /api/results/{session_id},
                         GET /api/estimates/{questionnaire_id}

GET /api/results/{session_id} is the compute-or-fetch entry point: the first
request for a session prices the questionnaire and stores the estimate,
every later request returns the stored one. Resolved results are also kept
in the Redis result cache when it is enabled.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from quicksizer.cache import get_cached_result, set_cached_result
from quicksizer.service import CostEstimationService, get_service

router = APIRouter(prefix="/api", tags=["estimation"])
logger = logging.getLogger(__name__)


@router.get("/results/{session_id}")
async def get_cost_result(
    session_id: str,
    request: Request,
    service: CostEstimationService = Depends(get_service),
) -> JSONResponse:
    """
    Returns:
        200: {questionnaire, estimate}
        404: Standard error envelope if the session has no questionnaire
    """
    redis_client = getattr(request.app.state, "redis", None)

    result = await get_cached_result(redis_client, session_id)
    if result is None:
        result = await service.resolve_cost_result(session_id)
        if result is None:
            raise HTTPException(
                status_code=404,
                detail=f"No questionnaire found for session '{session_id}'",
            )
        await set_cached_result(
            redis_client,
            session_id,
            result,
            ttl=request.app.state.settings.result_cache_ttl,
        )

    logger.info(
        "Cost result returned session_id=%s questionnaire_id=%s total_monthly_cost=%s",
        session_id,
        result.questionnaire.id,
        result.estimate.total_monthly_cost,
    )
    return JSONResponse(status_code=200, content=result.model_dump(mode="json"))


@router.get("/estimates/{questionnaire_id}")
async def get_estimate(
    questionnaire_id: int,
    service: CostEstimationService = Depends(get_service),
) -> JSONResponse:
    """
    Returns the stored estimate only — this endpoint never computes one.

    Returns:
        200: The stored estimate
        404: Standard error envelope if none has been computed yet
    """
    estimate = await service.get_estimate_by_questionnaire_id(questionnaire_id)
    if estimate is None:
        raise HTTPException(
            status_code=404,
            detail=(
                f"No estimate found for questionnaire {questionnaire_id}. "
                "Request GET /api/results/{session_id} first."
            ),
        )
    return JSONResponse(status_code=200, content=estimate.model_dump(mode="json"))
