"""ORM models exposed for metadata discovery."""
from app.db.models.recommendation import (
    BodyAnalysisRecord,
    DietRecommendationRecord,
    WorkoutRecommendationRecord,
)
from app.db.models.user import User

__all__ = [
    "BodyAnalysisRecord",
    "DietRecommendationRecord",
    "User",
    "WorkoutRecommendationRecord",
]
