"""Diet recommendation endpoints."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from app.api.deps import get_diet_facade
from app.api.errors import http_error_for
from app.api.schemas.recommendations import (
    DietRecommendationResult,
    InbodyDataRequest,
    RecommendationPage,
    RecommendationResponse,
)
from app.core.errors import AIProviderError, SurveyRequiredError
from app.observability.metrics import timed
from app.observability.tracing import trace
from app.services.facades import DietRecommendationFacade

router = APIRouter()

DietResponse = RecommendationResponse[DietRecommendationResult]
DietPage = RecommendationPage[DietRecommendationResult]


@router.post("/diet-recommendations", response_model=DietResponse, tags=["diet"])
def create_diet_recommendation(
    request: Request,
    payload: InbodyDataRequest,
    facade: DietRecommendationFacade = Depends(get_diet_facade),
) -> DietResponse:
    request_id = getattr(request.state, "request_id", None)
    with timed("diet.recommend", metadata={"user_id": str(payload.user_id)}):
        with trace("diet.recommend", user_id=payload.user_id, request_id=request_id):
            try:
                saved = facade.recommend_and_save(payload)
            except (AIProviderError, SurveyRequiredError) as exc:
                raise http_error_for(exc) from exc
    return DietResponse(record=saved.record, request_id=request_id or "")


@router.get("/diet-recommendations/latest", response_model=DietResponse, tags=["diet"])
def latest_diet_recommendation(
    request: Request,
    user_id: UUID = Query(..., description="User ID"),
    facade: DietRecommendationFacade = Depends(get_diet_facade),
) -> DietResponse:
    request_id = getattr(request.state, "request_id", None)
    with trace("diet.latest", user_id=user_id, request_id=request_id):
        record = facade.get_latest(user_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No diet recommendation found")
    return DietResponse(record=record, request_id=request_id or "")


@router.get("/diet-recommendations/history", response_model=DietPage, tags=["diet"])
def diet_recommendation_history(
    request: Request,
    user_id: UUID = Query(..., description="User ID"),
    page: int = Query(0, ge=0),
    size: int = Query(10, ge=1, le=100),
    facade: DietRecommendationFacade = Depends(get_diet_facade),
) -> DietPage:
    request_id = getattr(request.state, "request_id", None)
    with timed("diet.history", metadata={"user_id": str(user_id), "page": page}):
        history = facade.get_history(user_id, page, size)
    return DietPage(
        user_id=user_id,
        items=history.items,
        page=history.page,
        size=history.size,
        total=history.total,
        request_id=request_id or "",
    )
