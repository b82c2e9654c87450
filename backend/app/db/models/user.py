"""User ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, DateTime, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.base import Base


class User(Base):
    """Owner of stored recommendations; rows are created on first save."""

    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    body_analyses = relationship("BodyAnalysisRecord", back_populates="user", passive_deletes=True)
    diet_recommendations = relationship("DietRecommendationRecord", back_populates="user", passive_deletes=True)
    workout_recommendations = relationship(
        "WorkoutRecommendationRecord", back_populates="user", passive_deletes=True
    )
