"""Tests for the generate-then-persist facades."""
from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.schemas.recommendations import (
    BodyAnalysisResult,
    DietRecommendationResult,
    InbodyDataRequest,
    StoredRecommendation,
    SurveyData,
    WorkoutRecommendationResult,
)
from app.core.errors import AIProviderError
from app.db.models.recommendation import (
    BodyAnalysisRecord,
    DietRecommendationRecord,
    WorkoutRecommendationRecord,
)
from app.db.models.user import User
from app.services.ai.base import RecommendationGenerator
from app.services.ai.diet import DEFAULT_PREFERENCE
from app.services.facades import (
    BodyAnalysisFacade,
    DietRecommendationFacade,
    WorkoutRecommendationFacade,
)
from app.services.recommendation_store import (
    HistoryPage,
    RecommendationStore,
    SaveOutcome,
    SqlRecommendationStore,
    body_analysis_store,
    workout_store,
)
from app.services.video_lookup.base import VideoLookupService


class _FakeGenerator(RecommendationGenerator):
    def __init__(self, events: list[str], result=None, error: Exception | None = None):
        self.events = events
        self.result = result
        self.error = error
        self.calls: list = []

    def recommend(self, request, user_id):
        self.events.append("generate")
        self.calls.append((request, user_id))
        if self.error:
            raise self.error
        return self.result


class _RecordingStore(RecommendationStore):
    def __init__(self, events: list[str], error: Exception | None = None):
        self.events = events
        self.error = error
        self.saved: list[tuple] = []

    def save(self, result, user_id, context_label, *, request_id=None):
        self.events.append("save")
        self.saved.append((result, user_id, context_label))
        record = StoredRecommendation[type(result)](
            id=uuid4(),
            user_id=user_id,
            context_label=context_label,
            created_at=datetime.now(timezone.utc),
            result=result,
        )
        return SaveOutcome(record=record)

    def find_history(self, user_id, page=0, size=10):
        if self.error:
            raise self.error
        return HistoryPage(items=[], page=page, size=size, total=0)

    def find_latest(self, user_id):
        if self.error:
            raise self.error
        return None


class _TrackingSessionFactory:
    """Wraps a sessionmaker and records when a session is opened."""

    def __init__(self, inner: sessionmaker, events: list[str]):
        self.inner = inner
        self.events = events

    def __call__(self):
        self.events.append("session")
        return self.inner()


class _FakeLookup(VideoLookupService):
    def __init__(self, events: list[str]):
        self.events = events

    def find_video_url(self, query, category="exercise", label=None):
        self.events.append("lookup")
        return "https://www.youtube.com/watch?v=vid42"


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    for model in (User, BodyAnalysisRecord, DietRecommendationRecord, WorkoutRecommendationRecord):
        model.__table__.create(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def _request(survey: SurveyData | None = None) -> InbodyDataRequest:
    return InbodyDataRequest(user_id=uuid4(), gender="MALE", birth_year=1990, weight=80.0, survey=survey)


def _workout_plan() -> WorkoutRecommendationResult:
    return WorkoutRecommendationResult.model_validate(
        {"programName": "3분할", "workouts": {"Monday": [{"name": "스쿼트", "videoUrl": "https://example.com/old"}]}}
    )


def test_no_session_is_opened_until_generation_finishes(session_factory) -> None:
    events: list[str] = []
    generator = _FakeGenerator(events, result=BodyAnalysisResult(label="표준", summary="ok"))
    store = body_analysis_store(_TrackingSessionFactory(session_factory, events))
    facade = BodyAnalysisFacade(generator, store)

    saved = facade.analyze_and_save(_request())

    assert events == ["generate", "session"]
    assert saved.result.label == "표준"
    assert facade.get_latest(saved.record.user_id).id == saved.record.id


def test_generator_failure_never_reaches_the_store(session_factory) -> None:
    events: list[str] = []
    error = AIProviderError("upstream down", status="degraded")
    generator = _FakeGenerator(events, error=error)
    facade = BodyAnalysisFacade(generator, body_analysis_store(_TrackingSessionFactory(session_factory, events)))

    with pytest.raises(AIProviderError) as excinfo:
        facade.analyze_and_save(_request())

    assert excinfo.value is error
    assert events == ["generate"]


def test_workout_enrichment_runs_between_generation_and_save(session_factory) -> None:
    events: list[str] = []
    generator = _FakeGenerator(events, result=_workout_plan())
    facade = WorkoutRecommendationFacade(
        generator,
        workout_store(_TrackingSessionFactory(session_factory, events)),
        _FakeLookup(events),
    )

    saved = facade.recommend_and_save(_request(SurveyData(text="근력 향상")))

    assert events == ["generate", "lookup", "session"]
    assert saved.videos_enriched is True
    assert saved.result.workouts["Monday"][0].video_url == "https://www.youtube.com/watch?v=vid42"
    assert saved.record.context_label == "근력 향상"


def test_repeat_workout_within_dedup_window_returns_fresh_plan(session_factory) -> None:
    events: list[str] = []
    first_plan = WorkoutRecommendationResult.model_validate({"programName": "FIRST", "workouts": {}})
    second_plan = WorkoutRecommendationResult.model_validate({"programName": "SECOND", "workouts": {}})
    generator = _FakeGenerator(events, result=first_plan)
    store = SqlRecommendationStore(
        WorkoutRecommendationRecord,
        WorkoutRecommendationResult,
        session_factory,
        dedup_minutes=10,
    )
    facade = WorkoutRecommendationFacade(generator, store, None)
    request = _request(SurveyData(text="근력 향상"))

    first = facade.recommend_and_save(request)
    generator.result = second_plan
    second = facade.recommend_and_save(request)

    assert first.stored is True
    assert second.stored is False
    assert second.result.program_name == "SECOND"
    assert second.record.id == first.record.id
    assert store.find_latest(request.user_id).result.program_name == "FIRST"


def test_workout_without_lookup_saves_plan_unchanged() -> None:
    events: list[str] = []
    plan = _workout_plan()
    store = _RecordingStore(events)
    facade = WorkoutRecommendationFacade(_FakeGenerator(events, result=plan), store, None)

    saved = facade.recommend_and_save(_request(SurveyData()))

    assert saved.videos_enriched is False
    assert store.saved[0][0] is plan
    assert store.saved[0][2] == "체지방 감량 및 근력 향상"


def test_context_labels_per_kind() -> None:
    events: list[str] = []
    diet_store = _RecordingStore(events)
    body_store = _RecordingStore(events)
    diet = DietRecommendationFacade(_FakeGenerator(events, result=DietRecommendationResult()), diet_store)
    body = BodyAnalysisFacade(_FakeGenerator(events, result=BodyAnalysisResult()), body_store)

    diet.recommend_and_save(_request(SurveyData(text="  ")))
    diet.recommend_and_save(_request(SurveyData(text="저염식")))
    body.analyze_and_save(_request(SurveyData(text="무시됨")))

    assert [entry[2] for entry in diet_store.saved] == [DEFAULT_PREFERENCE, "저염식"]
    assert body_store.saved[0][2] is None


def test_generator_receives_request_user_id() -> None:
    events: list[str] = []
    generator = _FakeGenerator(events, result=DietRecommendationResult())
    facade = DietRecommendationFacade(generator, _RecordingStore(events))
    request = _request(SurveyData(text="고단백"))

    facade.recommend_and_save(request)

    assert generator.calls[0] == (request, request.user_id)


def test_read_side_errors_propagate() -> None:
    events: list[str] = []
    store = _RecordingStore(events, error=RuntimeError("db down"))
    facade = DietRecommendationFacade(_FakeGenerator(events), store)

    with pytest.raises(RuntimeError):
        facade.get_history(uuid4())
    with pytest.raises(RuntimeError):
        facade.get_latest(uuid4())
    assert events == []
