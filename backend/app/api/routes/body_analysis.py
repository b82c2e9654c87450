"""Body-composition analysis endpoints."""
from __future__ import annotations

from time import perf_counter
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from app.api.deps import get_body_analysis_facade
from app.api.errors import http_error_for
from app.api.schemas.recommendations import (
    BodyAnalysisResult,
    InbodyDataRequest,
    RecommendationPage,
    RecommendationResponse,
)
from app.core.errors import AIProviderError
from app.observability.metrics import log_metric
from app.observability.tracing import annotate, trace
from app.services.facades import BodyAnalysisFacade

router = APIRouter()

BodyAnalysisResponse = RecommendationResponse[BodyAnalysisResult]
BodyAnalysisPage = RecommendationPage[BodyAnalysisResult]


@router.post("/body-analysis", response_model=BodyAnalysisResponse, tags=["body-analysis"])
def create_body_analysis(
    request: Request,
    payload: InbodyDataRequest,
    facade: BodyAnalysisFacade = Depends(get_body_analysis_facade),
) -> BodyAnalysisResponse:
    request_id = getattr(request.state, "request_id", None)
    metadata = {"inbody_score": payload.inbody_score, "gender": payload.gender}
    start = perf_counter()
    with trace("body_analysis.run", metadata=metadata, user_id=payload.user_id, request_id=request_id) as span:
        try:
            saved = facade.analyze_and_save(payload)
        except AIProviderError as exc:
            log_metric("body_analysis.run.success", 0, metadata={"status": exc.status})
            raise http_error_for(exc) from exc
        annotate(span, label=saved.result.label, analysis_method=saved.result.analysis_method)

    latency_ms = (perf_counter() - start) * 1000
    log_metric("body_analysis.run.success", 1, metadata={"user_id": str(payload.user_id)})
    log_metric(
        "body_analysis.run.text_fallback",
        1 if saved.result.analysis_method != "AI" else 0,
        metadata={"user_id": str(payload.user_id)},
    )
    log_metric("body_analysis.run.latency_ms", latency_ms, metadata={"user_id": str(payload.user_id)})
    return BodyAnalysisResponse(record=saved.record, request_id=request_id or "")


@router.get("/body-analysis/latest", response_model=BodyAnalysisResponse, tags=["body-analysis"])
def latest_body_analysis(
    request: Request,
    user_id: UUID = Query(..., description="User ID"),
    facade: BodyAnalysisFacade = Depends(get_body_analysis_facade),
) -> BodyAnalysisResponse:
    request_id = getattr(request.state, "request_id", None)
    record = facade.get_latest(user_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No body analysis found")
    return BodyAnalysisResponse(record=record, request_id=request_id or "")


@router.get("/body-analysis/history", response_model=BodyAnalysisPage, tags=["body-analysis"])
def body_analysis_history(
    request: Request,
    user_id: UUID = Query(..., description="User ID"),
    page: int = Query(0, ge=0),
    size: int = Query(10, ge=1, le=100),
    facade: BodyAnalysisFacade = Depends(get_body_analysis_facade),
) -> BodyAnalysisPage:
    request_id = getattr(request.state, "request_id", None)
    start = perf_counter()
    with trace("body_analysis.history", metadata={"page": page, "size": size}, user_id=user_id, request_id=request_id):
        history = facade.get_history(user_id, page, size)

    log_metric("body_analysis.history.count", len(history.items), metadata={"user_id": str(user_id)})
    log_metric("body_analysis.history.latency_ms", (perf_counter() - start) * 1000, metadata={"user_id": str(user_id)})
    return BodyAnalysisPage(
        user_id=user_id,
        items=history.items,
        page=history.page,
        size=history.size,
        total=history.total,
        request_id=request_id or "",
    )
