"""Weekly workout plan generator."""
from __future__ import annotations

import logging
from typing import List
from uuid import UUID

from app.api.schemas.recommendations import InbodyDataRequest, WorkoutRecommendationResult
from app.core.context import bind_user_id
from app.core.errors import AIProviderError, SurveyRequiredError
from app.observability.metrics import log_metric
from app.services.ai import prompts
from app.services.ai.base import RecommendationGenerator
from app.services.ai.parsing import parse_result

logger = logging.getLogger(__name__)

DEFAULT_GOAL = "체지방 감량 및 근력 향상"
MIN_EXERCISES_PER_DAY = 3
MAX_REPROMPTS = 2

SYSTEM_PROMPT = (
    "당신은 공인 퍼스널 트레이너입니다. 사용자의 체성분과 목표에 맞춰 "
    "선택된 요일별 운동 계획을 설계합니다. 각 운동에는 유튜브 검색에 쓸 "
    "영어 검색어(youtubeQuery)를 포함하세요. 응답은 JSON 객체 하나여야 합니다."
)

EXERCISE_SHAPE = (
    '{"name": "운동명", "description": "설명", "sets": 3, "reps": 12, "restTime": "60초", '
    '"part": "상체|하체|전신", "type": "strength|cardio", "steps": ["1단계", "2단계", "3단계"], '
    '"youtubeQuery": "english exercise name tutorial proper form"}'
)


def workout_type_for_day(index: int, total_days: int) -> str:
    """Suggested focus for the ``index``-th selected day of a ``total_days`` plan."""
    if total_days <= 2:
        return "전신 근력운동" if index == 0 else "유산소운동"
    if total_days == 3:
        return ["상체 근력운동", "하체 근력운동", "유산소운동"][index] if index < 3 else "전신 근력운동"
    rotation = ["상체 근력운동", "유산소운동", "하체 근력운동", "유산소운동"]
    if total_days > 4:
        rotation += ["전신 근력운동", "유산소운동", "휴식 또는 가벼운 스트레칭"]
    return rotation[index] if index < len(rotation) else "전신 근력운동"


class WorkoutGenerator(RecommendationGenerator[WorkoutRecommendationResult]):
    kind = "workout"

    def recommend(self, request: InbodyDataRequest, user_id: UUID) -> WorkoutRecommendationResult:
        if request.survey is None:
            raise SurveyRequiredError("A survey is required before a workout plan can be generated")

        days = request.survey.workout_days()
        base_prompt = build_user_prompt(request, days)
        with bind_user_id(user_id):
            content = self._complete(SYSTEM_PROMPT, base_prompt, user_id=user_id)
            result = parse_result(content, WorkoutRecommendationResult)

            for reprompt in range(1, MAX_REPROMPTS + 1):
                short_days = days_below_minimum(result, days)
                if not short_days:
                    break
                logger.warning(
                    "Workout plan has fewer than %d exercises on %s; re-prompting (%d/%d)",
                    MIN_EXERCISES_PER_DAY,
                    ", ".join(short_days),
                    reprompt,
                    MAX_REPROMPTS,
                )
                log_metric("ai.workout.reprompt", 1, metadata={"attempt": reprompt, "short_days": len(short_days)})
                try:
                    content = self._complete(SYSTEM_PROMPT, reinforce_prompt(base_prompt, short_days), user_id=user_id)
                    result = parse_result(content, WorkoutRecommendationResult)
                except AIProviderError as exc:
                    logger.warning("Re-prompt %d failed (%s); keeping the previous plan", reprompt, exc)
                    break
            else:
                short_days = days_below_minimum(result, days)
                if short_days:
                    logger.warning("Workout plan still short on %s after re-prompts", ", ".join(short_days))
        return result


def days_below_minimum(result: WorkoutRecommendationResult, days: List[str]) -> List[str]:
    return [day for day in days if result.exercise_count(day) < MIN_EXERCISES_PER_DAY]


def goal_text(request: InbodyDataRequest) -> str:
    survey = request.survey
    return (survey.goal_text() if survey else None) or DEFAULT_GOAL


def build_user_prompt(request: InbodyDataRequest, days: List[str]) -> str:
    lines = [f"운동 목표: {goal_text(request)}", ""]
    lines.extend(prompts.basic_info_block(request))
    lines.extend(prompts.composition_block(request)[1:])
    lines.append("")
    lines.extend(prompts.control_block(request))
    balance = prompts.muscle_balance_hint(request)
    if balance:
        lines.append(f"- 근육 균형: {balance}")
    lines.append("")

    lines.append("요일별 권장 운동 유형:")
    for index, day in enumerate(days):
        lines.append(f"- {day}: {workout_type_for_day(index, len(days))}")
    lines.append("")
    lines.append(
        f"각 요일마다 최소 {MIN_EXERCISES_PER_DAY}개, 최대 5개의 운동을 제공하세요. "
        "설문에 요일별 종목 구성이나 최소 개수가 적혀 있으면 그것을 우선합니다."
    )
    lines.append("다음 키를 가진 JSON 객체로 답하세요:")
    lines.append(
        "programName, weeklySchedule, caution, warmup, mainSets, cooldown, equipment, targetMuscles, "
        f"expectedResults, workouts(요일 영어 이름 -> 운동 배열). 운동 항목 형식: {EXERCISE_SHAPE}"
    )
    return "\n".join(lines)


def reinforce_prompt(base_prompt: str, short_days: List[str]) -> str:
    return (
        f"{base_prompt}\n\n"
        f"이전 응답에서 {', '.join(short_days)} 요일의 운동이 부족했습니다. "
        f"선택된 모든 요일에 반드시 {MIN_EXERCISES_PER_DAY}개 이상의 운동을 넣어 전체 JSON을 다시 작성하세요."
    )
