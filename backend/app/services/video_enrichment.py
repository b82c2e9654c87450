"""Replace placeholder video links in workout plans with real videos."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from app.api.schemas.recommendations import WorkoutExercise, WorkoutRecommendationResult
from app.services.video_lookup.base import VideoLookupService

logger = logging.getLogger(__name__)

WATCH_MARKER = "watch?v="

# Checked in order; each rule is (any of these, all of these too, english name).
EXERCISE_NAME_RULES = (
    (("푸시업", "푸쉬업"), (), "push up"),
    (("풀업", "턱걸이"), (), "pull up"),
    (("랫풀다운", "랫풀"), (), "lat pulldown"),
    (("스쿼트",), (), "squat"),
    (("런지",), (), "lunge"),
    (("플랭크",), (), "plank"),
    (("크런치",), (), "crunch"),
    (("데드리프트",), (), "deadlift"),
    (("덤벨",), ("로우",), "dumbbell row"),
    (("바벨",), ("로우",), "barbell row"),
    (("벤치",), ("프레스",), "bench press"),
    (("숄더", "어깨"), ("프레스",), "shoulder press"),
    (("덤벨",), ("프레스",), "dumbbell press"),
    (("레터럴",), ("레이즈",), "lateral raise"),
    (("이두", "바이셉"), ("컬",), "bicep curl"),
    (("해머",), ("컬",), "hammer curl"),
    (("마운틴",), ("클라이머",), "mountain climber"),
    (("버피",), (), "burpee"),
    (("레그",), ("레이즈",), "leg raise"),
    (("러닝", "달리기"), (), "running"),
    (("걷기",), (), "walking"),
)


@dataclass(frozen=True)
class EnrichmentOutcome:
    result: WorkoutRecommendationResult
    applied: bool
    replaced: int = 0


def english_exercise_name(name: Optional[str]) -> Optional[str]:
    """English name for a known Korean exercise name, else None."""
    if not name or not name.strip():
        return None
    lowered = name.strip().lower()
    for any_of, all_of, english in EXERCISE_NAME_RULES:
        if any(token in lowered for token in any_of) and all(token in lowered for token in all_of):
            return english
    return None


def search_query_for(exercise: WorkoutExercise) -> Optional[str]:
    """Model-provided query first, then the English name, then the raw name."""
    ai_query = (exercise.youtube_query or "").strip()
    if ai_query and not ai_query.startswith("http") and "search_query" not in ai_query:
        return ai_query

    name = (exercise.name or "").strip()
    if not name:
        return None
    english = english_exercise_name(name)
    if english:
        return f"{english} tutorial proper form"
    return f"{name} 운동 자세 tutorial"


def enhance_with_videos(
    result: WorkoutRecommendationResult, lookup: Optional[VideoLookupService]
) -> EnrichmentOutcome:
    """Return a copy of ``result`` with resolvable video links replaced.

    Never raises: on any error the original result comes back with
    ``applied=False``.
    """
    if lookup is None:
        logger.debug("No video lookup configured; skipping enrichment")
        return EnrichmentOutcome(result=result, applied=False)

    try:
        replaced = 0
        workouts: Dict[str, List[WorkoutExercise]] = {}
        for day, exercises in result.workouts.items():
            enriched_day: List[WorkoutExercise] = []
            for exercise in exercises:
                query = search_query_for(exercise)
                if not query:
                    logger.warning("No search query for exercise on %s; skipping", day)
                    enriched_day.append(exercise)
                    continue

                url = lookup.find_video_url(query, "exercise", exercise.name)
                if url and WATCH_MARKER in url:
                    enriched_day.append(exercise.model_copy(update={"video_url": url}))
                    replaced += 1
                    logger.info("Video for %s: %s", exercise.name, url)
                else:
                    enriched_day.append(exercise)
                    logger.info("No specific video for %s; keeping original link", exercise.name)
            workouts[day] = enriched_day
        return EnrichmentOutcome(
            result=result.model_copy(update={"workouts": workouts}),
            applied=True,
            replaced=replaced,
        )
    except Exception as exc:
        logger.warning("Video enrichment failed, keeping original plan: %s", exc, exc_info=True)
        return EnrichmentOutcome(result=result, applied=False)
