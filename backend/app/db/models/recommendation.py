"""ORM models for stored AI recommendation results."""
from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declared_attr, relationship

from app.db.base import Base
from app.db.types import JSONBCompat


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecommendationColumns:
    """Columns shared by every recommendation table."""

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    # Goal text for workouts, food preference for diets, empty for body analysis.
    context_label = Column(Text, nullable=True)
    payload = Column(JSONBCompat, nullable=False)
    model = Column(String(length=64), nullable=True)
    request_id = Column(String(length=64), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())

    @declared_attr
    def user_id(cls):
        return Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)


class BodyAnalysisRecord(RecommendationColumns, Base):
    __tablename__ = "ai_body_analysis_results"
    __table_args__ = (Index("ix_ai_body_analysis_results_user_created", "user_id", "created_at"),)

    user = relationship("User", back_populates="body_analyses")


class DietRecommendationRecord(RecommendationColumns, Base):
    __tablename__ = "ai_diet_recommendations"
    __table_args__ = (Index("ix_ai_diet_recommendations_user_created", "user_id", "created_at"),)

    user = relationship("User", back_populates="diet_recommendations")


class WorkoutRecommendationRecord(RecommendationColumns, Base):
    __tablename__ = "ai_workout_recommendations"
    __table_args__ = (Index("ix_ai_workout_recommendations_user_created", "user_id", "created_at"),)

    user = relationship("User", back_populates="workout_recommendations")
