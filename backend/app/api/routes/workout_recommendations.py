"""Workout recommendation endpoints."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from app.api.deps import get_workout_facade
from app.api.errors import http_error_for
from app.api.schemas.recommendations import (
    InbodyDataRequest,
    RecommendationPage,
    RecommendationResponse,
    WorkoutRecommendationResult,
)
from app.core.errors import AIProviderError, SurveyRequiredError
from app.observability.metrics import log_metric, timed
from app.observability.tracing import trace
from app.services.facades import WorkoutRecommendationFacade

router = APIRouter()

WorkoutResponse = RecommendationResponse[WorkoutRecommendationResult]
WorkoutPage = RecommendationPage[WorkoutRecommendationResult]


@router.post("/workout-recommendations", response_model=WorkoutResponse, tags=["workout"])
def create_workout_recommendation(
    request: Request,
    payload: InbodyDataRequest,
    facade: WorkoutRecommendationFacade = Depends(get_workout_facade),
) -> WorkoutResponse:
    request_id = getattr(request.state, "request_id", None)
    user_id = str(payload.user_id)
    days = payload.survey.workout_days() if payload.survey else []
    with timed("workout.recommend", metadata={"user_id": user_id}) as metric_metadata:
        with trace("workout.recommend", metadata={"days": ",".join(days)}, user_id=user_id, request_id=request_id):
            try:
                saved = facade.recommend_and_save(payload)
            except (AIProviderError, SurveyRequiredError) as exc:
                raise http_error_for(exc) from exc
        metric_metadata["videos_enriched"] = saved.videos_enriched

    log_metric("workout.recommend.videos_enriched", 1 if saved.videos_enriched else 0, metadata={"user_id": user_id})
    return WorkoutResponse(record=saved.record, videos_enriched=saved.videos_enriched, request_id=request_id or "")


@router.get("/workout-recommendations/latest", response_model=WorkoutResponse, tags=["workout"])
def latest_workout_recommendation(
    request: Request,
    user_id: UUID = Query(..., description="User ID"),
    facade: WorkoutRecommendationFacade = Depends(get_workout_facade),
) -> WorkoutResponse:
    request_id = getattr(request.state, "request_id", None)
    with timed("workout.latest", metadata={"user_id": str(user_id)}):
        with trace("workout.latest", user_id=user_id, request_id=request_id):
            record = facade.get_latest(user_id)
            if record is None:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No workout recommendation found")
    return WorkoutResponse(record=record, request_id=request_id or "")


@router.get("/workout-recommendations/history", response_model=WorkoutPage, tags=["workout"])
def workout_recommendation_history(
    request: Request,
    user_id: UUID = Query(..., description="User ID"),
    page: int = Query(0, ge=0),
    size: int = Query(10, ge=1, le=100),
    facade: WorkoutRecommendationFacade = Depends(get_workout_facade),
) -> WorkoutPage:
    request_id = getattr(request.state, "request_id", None)
    with timed("workout.history", metadata={"user_id": str(user_id)}) as metric_metadata:
        with trace("workout.history", metadata={"page": page, "size": size}, user_id=user_id, request_id=request_id):
            history = facade.get_history(user_id, page, size)
        metric_metadata["count"] = len(history.items)

    return WorkoutPage(
        user_id=user_id,
        items=history.items,
        page=history.page,
        size=history.size,
        total=history.total,
        request_id=request_id or "",
    )
