"""
Questionnaire HTTP routes — POST /api/questionnaires,
                            GET  /api/questionnaires,
                            GET  /api/questionnaires/summary,
                            GET  /api/questionnaires/{session_id}

No authentication in v1. The client generates session_id and submits it
with the questionnaire; one questionnaire per session.
"""
from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse

from quicksizer.service import CostEstimationService, get_service

router = APIRouter(prefix="/api", tags=["questionnaires"])
logger = logging.getLogger(__name__)


@router.post("/questionnaires")
async def create_questionnaire(
    payload: dict[str, Any] = Body(...),
    service: CostEstimationService = Depends(get_service),
) -> JSONResponse:
    """
    Validate and store a questionnaire.

    Returns:
        201: The stored questionnaire (with id and created_at)
        409: CONFLICT if the session already submitted one
        422: Standard error envelope listing every violated constraint
    """
    questionnaire = await service.create_questionnaire(payload)
    logger.info(
        "Questionnaire created questionnaire_id=%s session_id=%s",
        questionnaire.id,
        questionnaire.session_id,
    )
    return JSONResponse(status_code=201, content=questionnaire.model_dump(mode="json"))


@router.get("/questionnaires")
async def list_questionnaires(
    service: CostEstimationService = Depends(get_service),
) -> JSONResponse:
    """All questionnaires, newest first (sales dashboard)."""
    questionnaires = await service.list_questionnaires()
    return JSONResponse(
        status_code=200,
        content=[q.model_dump(mode="json") for q in questionnaires],
    )


@router.get("/questionnaires/summary")
async def summarize_questionnaires(
    service: CostEstimationService = Depends(get_service),
) -> JSONResponse:
    summary = await service.summarize_questionnaires()
    return JSONResponse(status_code=200, content=summary.model_dump(mode="json"))


@router.get("/questionnaires/{session_id}")
async def get_questionnaire_by_session(
    session_id: str,
    service: CostEstimationService = Depends(get_service),
) -> JSONResponse:
    """
    Returns:
        200: The stored questionnaire
        404: Standard error envelope if the session has none
    """
    questionnaire = await service.get_questionnaire_by_session(session_id)
    if questionnaire is None:
        raise HTTPException(
            status_code=404,
            detail=f"No questionnaire found for session '{session_id}'",
        )
    return JSONResponse(status_code=200, content=questionnaire.model_dump(mode="json"))
