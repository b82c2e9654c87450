"""Tests for the SQL-backed recommendation stores."""
from __future__ import annotations

from uuid import uuid4

import pytest
from sqlalchemy import create_engine, event, func, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.schemas.recommendations import (
    BodyAnalysisResult,
    DietRecommendationResult,
    WorkoutRecommendationResult,
)
from app.db.models.recommendation import (
    BodyAnalysisRecord,
    DietRecommendationRecord,
    WorkoutRecommendationRecord,
)
from app.db.models.user import User
from app.services.recommendation_store import SqlRecommendationStore, body_analysis_store, diet_store


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def set_fk(conn, record):  # pragma: no cover
        cursor = conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    User.__table__.create(bind=engine)
    BodyAnalysisRecord.__table__.create(bind=engine)
    DietRecommendationRecord.__table__.create(bind=engine)
    WorkoutRecommendationRecord.__table__.create(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def _workout(name: str) -> WorkoutRecommendationResult:
    return WorkoutRecommendationResult.model_validate(
        {"programName": name, "workouts": {"Monday": [{"name": "스쿼트", "sets": 3}]}}
    )


def test_save_creates_user_and_round_trips_result(session_factory) -> None:
    store = body_analysis_store(session_factory)
    user_id = uuid4()
    result = BodyAnalysisResult(label="근육형 표준", summary="균형이 좋습니다.", inbody_score=81)

    stored = store.save(result, user_id, None, request_id="req-1").record
    latest = store.find_latest(user_id)

    assert latest is not None
    assert latest.id == stored.id
    assert latest.result.label == "근육형 표준"
    assert latest.result.inbody_score == 81
    with session_factory() as db:
        assert db.get(User, user_id) is not None
        record = db.get(BodyAnalysisRecord, stored.id)
        assert record.request_id == "req-1"
        assert record.payload["inbodyScore"] == 81


def test_history_is_newest_first_and_paginated(session_factory) -> None:
    store = SqlRecommendationStore(WorkoutRecommendationRecord, WorkoutRecommendationResult, session_factory)
    user_id = uuid4()
    for index in range(3):
        store.save(_workout(f"plan-{index}"), user_id, "체지방 감량")
    store.save(_workout("other-user"), uuid4(), None)

    first_page = store.find_history(user_id, page=0, size=2)
    second_page = store.find_history(user_id, page=1, size=2)

    assert first_page.total == 3
    assert [item.result.program_name for item in first_page.items] == ["plan-2", "plan-1"]
    assert [item.result.program_name for item in second_page.items] == ["plan-0"]
    assert first_page.items[0].context_label == "체지방 감량"
    assert first_page.items[0].result.workouts["Monday"][0].model_dump(by_alias=True)["sets"] == 3


def test_latest_is_none_without_records(session_factory) -> None:
    assert diet_store(session_factory).find_latest(uuid4()) is None


def test_recent_duplicate_is_not_saved_twice(session_factory) -> None:
    store = SqlRecommendationStore(
        WorkoutRecommendationRecord,
        WorkoutRecommendationResult,
        session_factory,
        dedup_minutes=10,
    )
    user_id = uuid4()

    first = store.save(_workout("first"), user_id, None)
    second = store.save(_workout("second"), user_id, None)

    assert first.created is True
    assert second.created is False
    assert second.record.id == first.record.id
    assert second.record.result.program_name == "first"
    with session_factory() as db:
        count = db.scalar(select(func.count()).select_from(WorkoutRecommendationRecord))
    assert count == 1


def test_loose_diet_fields_survive_storage(session_factory) -> None:
    store = diet_store(session_factory)
    user_id = uuid4()
    result = DietRecommendationResult.model_validate(
        {"dailyCalories": "약 1800kcal", "macroSplit": {"carbs": 50}, "shoppingList": "현미, 두부"}
    )

    store.save(result, user_id, "한식 위주")
    latest = store.find_latest(user_id)

    assert latest.result.daily_calories == "약 1800kcal"
    assert latest.result.macro_split == {"carbs": 50}
    assert latest.result.shopping_list == "현미, 두부"
    assert latest.context_label == "한식 위주"
