"""Schemas for body analysis, diet and workout recommendations."""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

KOREAN_DAYS = {
    "월": "Monday",
    "화": "Tuesday",
    "수": "Wednesday",
    "목": "Thursday",
    "금": "Friday",
    "토": "Saturday",
    "일": "Sunday",
}
KOREAN_MEALS = {"아침": "breakfast", "점심": "lunch", "저녁": "dinner", "간식": "snack"}
DEFAULT_WORKOUT_DAYS = ["Monday", "Wednesday", "Friday"]
DEFAULT_MEALS = ["breakfast", "lunch", "dinner"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SurveyData(_CamelModel):
    text: Optional[str] = None
    workout_frequency: Optional[str] = None
    selected_days: Optional[List[str]] = None
    selected_days_en: Optional[List[str]] = None
    preferred_days: Optional[str] = None
    meals_per_day: Optional[str] = None
    meal_labeling: Optional[str] = None
    selected_meals: Optional[List[str]] = None
    selected_meals_label: Optional[str] = None
    meals_to_generate: Optional[List[str]] = None

    def workout_days(self) -> List[str]:
        """English weekday names, preferring the explicit English list."""
        if self.selected_days_en:
            return list(self.selected_days_en)
        if not self.selected_days:
            return list(DEFAULT_WORKOUT_DAYS)
        return [KOREAN_DAYS.get(day.strip()[:1], "Monday") for day in self.selected_days]

    def meals(self) -> List[str]:
        if self.meals_to_generate:
            return list(self.meals_to_generate)
        if self.selected_meals:
            return [KOREAN_MEALS.get(meal.strip(), "breakfast") for meal in self.selected_meals]
        return list(DEFAULT_MEALS)

    def goal_text(self) -> Optional[str]:
        if self.text and self.text.strip():
            return self.text.strip()
        return None


class InbodyDataRequest(_CamelModel):
    """Body-composition measurements plus optional survey answers."""

    user_id: UUID
    gender: str = "MALE"
    birth_year: Optional[int] = None
    weight: Optional[float] = None

    total_body_water: Optional[float] = None
    protein: Optional[float] = None
    mineral: Optional[float] = None

    body_fat_mass: Optional[float] = None
    muscle_mass: Optional[float] = None
    fat_free_mass: Optional[float] = None
    skeletal_muscle_mass: Optional[float] = None
    bmi: Optional[float] = None
    body_fat_percentage: Optional[float] = None

    right_arm_muscle_mass: Optional[float] = None
    left_arm_muscle_mass: Optional[float] = None
    trunk_muscle_mass: Optional[float] = None
    right_leg_muscle_mass: Optional[float] = None
    left_leg_muscle_mass: Optional[float] = None

    right_arm_fat_mass: Optional[float] = None
    left_arm_fat_mass: Optional[float] = None
    trunk_fat_mass: Optional[float] = None
    right_leg_fat_mass: Optional[float] = None
    left_leg_fat_mass: Optional[float] = None

    inbody_score: Optional[int] = None
    ideal_weight: Optional[float] = None
    weight_control: Optional[float] = None
    fat_control: Optional[float] = None
    muscle_control: Optional[float] = None
    basal_metabolism: Optional[int] = None
    abdominal_fat_percentage: Optional[float] = None
    visceral_fat_level: Optional[float] = None
    obesity_degree: Optional[float] = None
    bone_mineral_content: Optional[float] = None
    waist_circumference: Optional[float] = None

    survey: Optional[SurveyData] = None

    def age(self, today: Optional[date] = None) -> Optional[int]:
        if self.birth_year is None:
            return None
        return (today or date.today()).year - self.birth_year

    def gender_label(self) -> str:
        return "남성" if (self.gender or "").upper() == "MALE" else "여성"


class _ResultModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True, extra="ignore")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BodyAnalysisResult(_ResultModel):
    label: str = ""
    summary: str = ""
    reasoning: Optional[str] = None
    tips: Union[List[str], str, None] = None
    health_risk: Optional[str] = None
    muscle_balance: Optional[str] = None
    metabolic_health: Optional[str] = None
    body_composition: Optional[str] = None
    bmi_category: Optional[str] = None
    body_fat_category: Optional[str] = None
    visceral_fat_category: Optional[str] = None
    inbody_score: Optional[int] = None
    analysis_method: str = "AI"
    analyzed_at: datetime = Field(default_factory=_utcnow)


class DietRecommendationResult(_ResultModel):
    meal_style: Optional[str] = None
    # The model answers with either shape for these fields.
    daily_calories: Union[int, float, str, None] = None
    macro_split: Union[Dict[str, Any], str, None] = None
    sample_menu: Any = None
    shopping_list: Union[List[Any], str, None] = None
    precautions: Union[List[Any], str, None] = None
    meal_timing: Any = None
    hydration: Any = None
    supplements: Any = None
    diets: Dict[str, Any] = Field(default_factory=dict)


class WorkoutExercise(_ResultModel):
    """One exercise; fields beyond the three below are kept as the model sent them."""

    model_config = ConfigDict(extra="allow")

    name: str = ""
    youtube_query: Optional[str] = None
    video_url: Optional[str] = None


class WorkoutRecommendationResult(_ResultModel):
    program_name: Optional[str] = None
    weekly_schedule: Any = None
    caution: Any = None
    warmup: Any = None
    main_sets: Any = None
    cooldown: Any = None
    equipment: Any = None
    target_muscles: Any = None
    expected_results: Any = None
    workouts: Dict[str, List[WorkoutExercise]] = Field(default_factory=dict)

    @field_validator("workouts", mode="before")
    @classmethod
    def _keep_exercise_lists(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return {}
        return {
            str(day): [entry for entry in entries if isinstance(entry, dict)]
            for day, entries in value.items()
            if isinstance(entries, list)
        }

    def exercise_count(self, day: str) -> int:
        return len(self.workouts.get(day, []))


ResultT = TypeVar("ResultT", bound=BaseModel)


class StoredRecommendation(BaseModel, Generic[ResultT]):
    id: UUID
    user_id: UUID
    context_label: Optional[str] = None
    created_at: datetime
    result: ResultT


class RecommendationPage(BaseModel, Generic[ResultT]):
    user_id: UUID
    items: List[StoredRecommendation[ResultT]]
    page: int
    size: int
    total: int
    request_id: str = ""


class RecommendationResponse(BaseModel, Generic[ResultT]):
    """Envelope returned by the create and latest endpoints."""

    record: StoredRecommendation[ResultT]
    videos_enriched: Optional[bool] = None
    request_id: str = ""
