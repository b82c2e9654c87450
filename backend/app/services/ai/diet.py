"""Weekly diet plan generator."""
from __future__ import annotations

import logging
from uuid import UUID

from app.api.schemas.recommendations import DietRecommendationResult, InbodyDataRequest
from app.core.context import bind_user_id
from app.core.errors import SurveyRequiredError
from app.services.ai import prompts
from app.services.ai.base import RecommendationGenerator
from app.services.ai.parsing import parse_result

logger = logging.getLogger(__name__)

DEFAULT_PREFERENCE = "고단백 선호, 한식 위주, 특별한 제약 없음"
PLAN_DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]

SYSTEM_PROMPT = (
    "당신은 임상 영양사입니다. 사용자의 체성분과 식습관 선호를 바탕으로 "
    "현실적으로 따라 할 수 있는 한국식 주간 식단을 설계합니다. "
    "응답은 JSON 객체 하나여야 합니다."
)


class DietGenerator(RecommendationGenerator[DietRecommendationResult]):
    kind = "diet"

    def recommend(self, request: InbodyDataRequest, user_id: UUID) -> DietRecommendationResult:
        if request.survey is None:
            raise SurveyRequiredError("A survey is required before a diet plan can be generated")
        with bind_user_id(user_id):
            content = self._complete(SYSTEM_PROMPT, build_user_prompt(request), user_id=user_id)
            result = parse_result(content, DietRecommendationResult)
        missing = [day for day in PLAN_DAYS if day not in result.diets]
        if missing:
            logger.warning("Diet plan is missing days: %s", ", ".join(missing))
        return result


def preference_text(request: InbodyDataRequest) -> str:
    survey = request.survey
    return (survey.goal_text() if survey else None) or DEFAULT_PREFERENCE


def build_user_prompt(request: InbodyDataRequest) -> str:
    meals = request.survey.meals() if request.survey else ["breakfast", "lunch", "dinner"]
    lines = [f"식습관 선호: {preference_text(request)}", ""]
    lines.extend(prompts.basic_info_block(request))
    lines.extend(
        [
            f"- 체지방률: {prompts.fmt(request.body_fat_percentage, '%')}",
            f"- 골격근량: {prompts.fmt(request.skeletal_muscle_mass, 'kg')}",
            f"- 기초대사량: {prompts.fmt(request.basal_metabolism, 'kcal')}",
            f"- 내장지방레벨: {prompts.fmt(request.visceral_fat_level)}",
            "",
        ]
    )
    lines.extend(prompts.control_block(request))
    lines.append("")
    lines.append(f"생성할 요일: {', '.join(PLAN_DAYS)}")
    lines.append(f"생성할 끼니: {', '.join(meals)}")
    lines.append("")
    lines.append("다음 키를 가진 JSON 객체로 답하세요:")
    lines.append(
        "mealStyle(문자열), dailyCalories(숫자), macroSplit(객체: carbs/protein/fat 비율), "
        "sampleMenu(하루 예시), shoppingList(배열), precautions(배열), mealTiming, hydration, supplements, "
        "diets(요일 -> 끼니 -> {menu, calories, protein, carbs, fat, recipe})."
    )
    lines.append("기초대사량과 조절 지표를 반영해 칼로리를 정하고, 각 끼니의 영양 수치를 숫자로 주세요.")
    return "\n".join(lines)
