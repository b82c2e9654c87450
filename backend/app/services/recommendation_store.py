"""Persistence for generated recommendations.

Each store owns its transactions: ``save`` opens a session only when called,
writes one row (plus the owning user row on first use) and commits before
returning.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Generic, List, Optional, Type, TypeVar
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy import desc, func, select
from sqlalchemy.orm import Session, sessionmaker

from app.api.schemas.recommendations import (
    BodyAnalysisResult,
    DietRecommendationResult,
    StoredRecommendation,
    WorkoutRecommendationResult,
)
from app.core.config import settings
from app.db.models.recommendation import (
    BodyAnalysisRecord,
    DietRecommendationRecord,
    RecommendationColumns,
    WorkoutRecommendationRecord,
)
from app.services.user_service import get_or_create_user

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT", bound=BaseModel)

MAX_PAGE_SIZE = 100


@dataclass
class SaveOutcome(Generic[ResultT]):
    """Stored record plus whether this call wrote it (False when a recent duplicate was kept)."""

    record: StoredRecommendation[ResultT]
    created: bool = True


@dataclass
class HistoryPage(Generic[ResultT]):
    items: List[StoredRecommendation[ResultT]] = field(default_factory=list)
    page: int = 0
    size: int = 10
    total: int = 0


class RecommendationStore(Generic[ResultT]):
    """Interface the facades persist through."""

    def save(
        self,
        result: ResultT,
        user_id: UUID,
        context_label: Optional[str],
        *,
        request_id: Optional[str] = None,
    ) -> SaveOutcome[ResultT]:
        raise NotImplementedError

    def find_history(self, user_id: UUID, page: int = 0, size: int = 10) -> HistoryPage[ResultT]:
        raise NotImplementedError

    def find_latest(self, user_id: UUID) -> Optional[StoredRecommendation[ResultT]]:
        raise NotImplementedError


class SqlRecommendationStore(RecommendationStore[ResultT]):
    def __init__(
        self,
        record_model: Type[RecommendationColumns],
        result_model: Type[ResultT],
        session_factory: sessionmaker,
        *,
        dedup_minutes: int = 0,
        model_name: Optional[str] = None,
    ) -> None:
        self.record_model = record_model
        self.result_model = result_model
        self.session_factory = session_factory
        self.dedup_minutes = dedup_minutes
        self.model_name = model_name or settings.openai_model

    def save(
        self,
        result: ResultT,
        user_id: UUID,
        context_label: Optional[str],
        *,
        request_id: Optional[str] = None,
    ) -> SaveOutcome[ResultT]:
        with self.session_factory() as db, db.begin():
            get_or_create_user(db, user_id)
            duplicate = self._recent_record(db, user_id)
            if duplicate is not None:
                logger.info(
                    "%s saved %s ago for user %s; keeping existing record %s",
                    self.record_model.__tablename__,
                    self._age(duplicate),
                    user_id,
                    duplicate.id,
                )
                return SaveOutcome(record=self._to_stored(duplicate), created=False)

            record = self.record_model(
                user_id=user_id,
                context_label=context_label,
                payload=result,
                model=self.model_name,
                request_id=request_id,
            )
            db.add(record)
            db.flush()
            stored = self._to_stored(record)
        logger.info("Stored %s %s for user %s", self.record_model.__tablename__, stored.id, user_id)
        return SaveOutcome(record=stored)

    def find_history(self, user_id: UUID, page: int = 0, size: int = 10) -> HistoryPage[ResultT]:
        page = max(page, 0)
        size = min(max(size, 1), MAX_PAGE_SIZE)
        model = self.record_model
        with self.session_factory() as db:
            total = db.scalar(select(func.count()).select_from(model).where(model.user_id == user_id)) or 0
            records = db.scalars(
                select(model)
                .where(model.user_id == user_id)
                .order_by(desc(model.created_at), desc(model.id))
                .offset(page * size)
                .limit(size)
            ).all()
            items = [self._to_stored(record) for record in records]
        return HistoryPage(items=items, page=page, size=size, total=total)

    def find_latest(self, user_id: UUID) -> Optional[StoredRecommendation[ResultT]]:
        with self.session_factory() as db:
            record = self._latest(db, user_id)
            return self._to_stored(record) if record is not None else None

    def _latest(self, db: Session, user_id: UUID) -> Optional[RecommendationColumns]:
        model = self.record_model
        return db.scalars(
            select(model)
            .where(model.user_id == user_id)
            .order_by(desc(model.created_at), desc(model.id))
            .limit(1)
        ).first()

    def _recent_record(self, db: Session, user_id: UUID) -> Optional[RecommendationColumns]:
        if self.dedup_minutes <= 0:
            return None
        cutoff = datetime.now(timezone.utc) - timedelta(minutes=self.dedup_minutes)
        model = self.record_model
        return db.scalars(
            select(model)
            .where(model.user_id == user_id, model.created_at >= cutoff)
            .order_by(desc(model.created_at))
            .limit(1)
        ).first()

    @staticmethod
    def _age(record: RecommendationColumns) -> timedelta:
        created = record.created_at
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc) - created

    def _to_stored(self, record: RecommendationColumns) -> StoredRecommendation[ResultT]:
        return StoredRecommendation[self.result_model](  # type: ignore[name-defined]
            id=record.id,
            user_id=record.user_id,
            context_label=record.context_label,
            created_at=record.created_at,
            result=self.result_model.model_validate(record.payload),
        )


def body_analysis_store(session_factory: sessionmaker) -> SqlRecommendationStore[BodyAnalysisResult]:
    return SqlRecommendationStore(BodyAnalysisRecord, BodyAnalysisResult, session_factory)


def diet_store(session_factory: sessionmaker) -> SqlRecommendationStore[DietRecommendationResult]:
    return SqlRecommendationStore(DietRecommendationRecord, DietRecommendationResult, session_factory)


def workout_store(session_factory: sessionmaker) -> SqlRecommendationStore[WorkoutRecommendationResult]:
    return SqlRecommendationStore(
        WorkoutRecommendationRecord,
        WorkoutRecommendationResult,
        session_factory,
        dedup_minutes=settings.recommendation_dedup_minutes,
    )
