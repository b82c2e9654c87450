"""Tests for replacing workout video links."""
from __future__ import annotations

import pytest

from app.api.schemas.recommendations import WorkoutRecommendationResult
from app.services.video_enrichment import (
    enhance_with_videos,
    english_exercise_name,
    search_query_for,
)
from app.services.video_lookup.base import VideoLookupService, search_results_url

ORIGINAL_URL = "https://www.youtube.com/results?search_query=original"


class _FakeLookup(VideoLookupService):
    def __init__(self, url: str | None = "https://www.youtube.com/watch?v=abc123"):
        self.url = url
        self.calls: list[tuple] = []

    def find_video_url(self, query, category="exercise", label=None):
        self.calls.append((query, category, label))
        return self.url


class _BrokenLookup(VideoLookupService):
    def find_video_url(self, query, category="exercise", label=None):
        raise RuntimeError("quota exceeded")


def _plan(*exercises: dict) -> WorkoutRecommendationResult:
    return WorkoutRecommendationResult.model_validate({"programName": "p", "workouts": {"Monday": list(exercises)}})


def test_ai_query_is_used_verbatim() -> None:
    lookup = _FakeLookup()

    enhance_with_videos(_plan({"name": "풀업", "youtubeQuery": "pull up tutorial"}), lookup)

    assert lookup.calls == [("pull up tutorial", "exercise", "풀업")]


def test_known_korean_name_maps_to_english_query() -> None:
    lookup = _FakeLookup()

    enhance_with_videos(_plan({"name": "스쿼트"}), lookup)

    assert lookup.calls[0][0] == "squat tutorial proper form"


def test_unknown_name_uses_korean_query() -> None:
    lookup = _FakeLookup()

    enhance_with_videos(_plan({"name": "알수없는동작"}), lookup)

    assert lookup.calls[0][0] == "알수없는동작 운동 자세 tutorial"


@pytest.mark.parametrize(
    "ai_query",
    ["https://www.youtube.com/watch?v=zzz", "https://www.youtube.com/results?search_query=squat", "search_query=squat"],
)
def test_link_shaped_ai_query_is_ignored(ai_query) -> None:
    lookup = _FakeLookup()

    enhance_with_videos(_plan({"name": "스쿼트", "youtubeQuery": ai_query}), lookup)

    assert lookup.calls[0][0] == "squat tutorial proper form"


def test_watch_url_replaces_video_link_without_mutating_input() -> None:
    plan = _plan({"name": "플랭크", "videoUrl": ORIGINAL_URL})
    lookup = _FakeLookup("https://www.youtube.com/watch?v=plank1")

    outcome = enhance_with_videos(plan, lookup)

    assert outcome.applied is True
    assert outcome.replaced == 1
    assert outcome.result.workouts["Monday"][0].video_url == "https://www.youtube.com/watch?v=plank1"
    assert plan.workouts["Monday"][0].video_url == ORIGINAL_URL


def test_search_link_keeps_original_video_url() -> None:
    plan = _plan({"name": "플랭크", "videoUrl": ORIGINAL_URL})
    lookup = _FakeLookup(search_results_url("plank tutorial proper form"))

    outcome = enhance_with_videos(plan, lookup)

    assert outcome.result.workouts["Monday"][0].video_url == ORIGINAL_URL
    assert outcome.replaced == 0


def test_entry_without_name_or_query_is_skipped() -> None:
    lookup = _FakeLookup()

    outcome = enhance_with_videos(_plan({"sets": 3}), lookup)

    assert lookup.calls == []
    assert outcome.result.workouts["Monday"][0].video_url is None


def test_lookup_failure_returns_original_result() -> None:
    plan = _plan({"name": "런지", "videoUrl": ORIGINAL_URL})

    outcome = enhance_with_videos(plan, _BrokenLookup())

    assert outcome.applied is False
    assert outcome.result is plan


def test_missing_lookup_leaves_plan_unchanged() -> None:
    plan = _plan({"name": "런지"})

    outcome = enhance_with_videos(plan, None)

    assert outcome.applied is False
    assert outcome.result is plan


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("푸쉬업", "push up"),
        ("턱걸이", "pull up"),
        ("랫풀다운", "lat pulldown"),
        ("덤벨 로우", "dumbbell row"),
        ("바벨 로우", "barbell row"),
        ("벤치 프레스", "bench press"),
        ("덤벨 숄더 프레스", "shoulder press"),
        ("덤벨 프레스", "dumbbell press"),
        ("사이드 레터럴 레이즈", "lateral raise"),
        ("바이셉 컬", "bicep curl"),
        ("해머 컬", "hammer curl"),
        ("마운틴 클라이머", "mountain climber"),
        ("레그 레이즈", "leg raise"),
        ("가벼운 달리기", "running"),
        ("빠르게 걷기", "walking"),
        ("케이블 로우", None),
        ("", None),
    ],
)
def test_english_exercise_names(name, expected) -> None:
    assert english_exercise_name(name) == expected


def test_search_query_priority() -> None:
    plan = _plan({"name": "데드리프트", "youtubeQuery": "  romanian deadlift form  "})

    assert search_query_for(plan.workouts["Monday"][0]) == "romanian deadlift form"
