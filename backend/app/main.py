"""Main FastAPI application for the smart healthcare backend."""
from fastapi import FastAPI, Request

from app.api.routes.body_analysis import router as body_analysis_router
from app.api.routes.diet_recommendations import router as diet_recommendations_router
from app.api.routes.workout_recommendations import router as workout_recommendations_router
from app.core.config import settings
from app.core.logging import configure_logging
from app.core.middleware import RequestIDMiddleware
from app.observability.client import init_opik
from app.observability.tracing import trace

configure_logging(log_level=settings.log_level)

app = FastAPI(title=settings.app_name, version="0.1.0")
app.add_middleware(RequestIDMiddleware)
app.include_router(body_analysis_router)
app.include_router(diet_recommendations_router)
app.include_router(workout_recommendations_router)


@app.on_event("startup")
async def startup_observability() -> None:
    """Initialize observability backends after the event loop starts."""
    init_opik()


@app.get("/health", tags=["health"], summary="Readiness probe")
async def health_check(request: Request) -> dict[str, str]:
    """Return a simple status payload so probes can check the API."""
    with trace("http.health_check", metadata={"route": "/health"}, request_id=request.state.request_id):
        return {"status": "ok"}
