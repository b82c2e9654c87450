"""Dependency providers for the recommendation routes."""
from __future__ import annotations

from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import sessionmaker

from app.clients.openai_client import OpenAIClient, get_openai_client
from app.db.deps import get_session_factory
from app.services.ai.body_analysis import BodyAnalysisGenerator
from app.services.ai.diet import DietGenerator
from app.services.ai.workout import WorkoutGenerator
from app.services.facades import BodyAnalysisFacade, DietRecommendationFacade, WorkoutRecommendationFacade
from app.services.recommendation_store import body_analysis_store, diet_store, workout_store
from app.services.video_lookup.base import VideoLookupService
from app.services.video_lookup.factory import get_video_lookup_service


def get_ai_client() -> OpenAIClient:
    return get_openai_client()


def get_video_lookup() -> Optional[VideoLookupService]:
    return get_video_lookup_service()


def get_body_analysis_facade(
    client: OpenAIClient = Depends(get_ai_client),
    session_factory: sessionmaker = Depends(get_session_factory),
) -> BodyAnalysisFacade:
    return BodyAnalysisFacade(BodyAnalysisGenerator(client), body_analysis_store(session_factory))


def get_diet_facade(
    client: OpenAIClient = Depends(get_ai_client),
    session_factory: sessionmaker = Depends(get_session_factory),
) -> DietRecommendationFacade:
    return DietRecommendationFacade(DietGenerator(client), diet_store(session_factory))


def get_workout_facade(
    client: OpenAIClient = Depends(get_ai_client),
    video_lookup: Optional[VideoLookupService] = Depends(get_video_lookup),
    session_factory: sessionmaker = Depends(get_session_factory),
) -> WorkoutRecommendationFacade:
    return WorkoutRecommendationFacade(WorkoutGenerator(client), workout_store(session_factory), video_lookup)
