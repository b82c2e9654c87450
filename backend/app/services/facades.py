"""Generate-then-persist orchestration for each recommendation kind.

The model call (and video enrichment for workouts) runs before any database
session exists; only a finished result is handed to the store, which commits
in its own short transaction. A failed generation never reaches the store.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Generic, Optional, Tuple, TypeVar
from uuid import UUID

from pydantic import BaseModel

from app.api.schemas.recommendations import (
    BodyAnalysisResult,
    DietRecommendationResult,
    InbodyDataRequest,
    StoredRecommendation,
    WorkoutRecommendationResult,
)
from app.core.context import bind_user_id, get_request_id
from app.services.ai.base import RecommendationGenerator
from app.services.ai.diet import DEFAULT_PREFERENCE
from app.services.ai.workout import DEFAULT_GOAL
from app.services.recommendation_store import HistoryPage, RecommendationStore
from app.services.video_enrichment import enhance_with_videos
from app.services.video_lookup.base import VideoLookupService

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT", bound=BaseModel)


@dataclass
class SavedRecommendation(Generic[ResultT]):
    record: StoredRecommendation[ResultT]
    videos_enriched: Optional[bool] = None
    stored: bool = True

    @property
    def result(self) -> ResultT:
        return self.record.result


class RecommendationFacade(Generic[ResultT]):
    kind = "recommendation"
    default_context_label: Optional[str] = None

    def __init__(self, generator: RecommendationGenerator[ResultT], store: RecommendationStore[ResultT]) -> None:
        self.generator = generator
        self.store = store

    def recommend_and_save(self, request: InbodyDataRequest) -> SavedRecommendation[ResultT]:
        user_id = request.user_id
        with bind_user_id(user_id):
            try:
                result = self.generator.recommend(request, user_id)
            except Exception as exc:
                logger.error("%s generation failed for user %s: %s", self.kind, user_id, type(exc).__name__)
                raise

            result, enriched = self._after_generation(result)
            outcome = self.store.save(
                result,
                user_id,
                self.context_label(request),
                request_id=get_request_id(),
            )
        record = outcome.record
        if not outcome.created:
            # Row kept from the recent duplicate; the caller still gets this run's plan.
            record = record.model_copy(update={"result": result})
        return SavedRecommendation(record=record, videos_enriched=enriched, stored=outcome.created)

    def context_label(self, request: InbodyDataRequest) -> Optional[str]:
        survey_text = request.survey.goal_text() if request.survey else None
        return survey_text or self.default_context_label

    def get_history(self, user_id: UUID, page: int = 0, size: int = 10) -> HistoryPage[ResultT]:
        try:
            return self.store.find_history(user_id, page, size)
        except Exception as exc:
            logger.error("%s history lookup failed for user %s: %s", self.kind, user_id, type(exc).__name__)
            raise

    def get_latest(self, user_id: UUID) -> Optional[StoredRecommendation[ResultT]]:
        try:
            return self.store.find_latest(user_id)
        except Exception as exc:
            logger.error("%s latest lookup failed for user %s: %s", self.kind, user_id, type(exc).__name__)
            raise

    def _after_generation(self, result: ResultT) -> Tuple[ResultT, Optional[bool]]:
        return result, None


class BodyAnalysisFacade(RecommendationFacade[BodyAnalysisResult]):
    kind = "body_analysis"

    def analyze_and_save(self, request: InbodyDataRequest) -> SavedRecommendation[BodyAnalysisResult]:
        return self.recommend_and_save(request)

    def context_label(self, request: InbodyDataRequest) -> Optional[str]:
        return None


class DietRecommendationFacade(RecommendationFacade[DietRecommendationResult]):
    kind = "diet"
    default_context_label = DEFAULT_PREFERENCE


class WorkoutRecommendationFacade(RecommendationFacade[WorkoutRecommendationResult]):
    kind = "workout"
    default_context_label = DEFAULT_GOAL

    def __init__(
        self,
        generator: RecommendationGenerator[WorkoutRecommendationResult],
        store: RecommendationStore[WorkoutRecommendationResult],
        video_lookup: Optional[VideoLookupService] = None,
    ) -> None:
        super().__init__(generator, store)
        self.video_lookup = video_lookup

    def _after_generation(
        self, result: WorkoutRecommendationResult
    ) -> Tuple[WorkoutRecommendationResult, Optional[bool]]:
        outcome = enhance_with_videos(result, self.video_lookup)
        logger.info("Video enrichment applied=%s replaced=%d", outcome.applied, outcome.replaced)
        return outcome.result, outcome.applied
