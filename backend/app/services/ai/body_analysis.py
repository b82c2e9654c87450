"""Body-composition analysis generator."""
from __future__ import annotations

import logging
from uuid import UUID

from app.api.schemas.recommendations import BodyAnalysisResult, InbodyDataRequest
from app.core.context import bind_user_id
from app.services.ai import prompts
from app.services.ai.base import RecommendationGenerator
from app.services.ai.parsing import extract_json_object, validate_result

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "당신은 인바디(체성분) 결과를 해석하는 스포츠 의학 전문가입니다. "
    "주어진 수치만 근거로 분석하고, 없는 수치는 추측하지 마세요. "
    "반드시 JSON 객체 하나로만 답하세요."
)

RESPONSE_SHAPE = """{
  "label": "체형 분류 (예: 근육형 표준, 마른 비만, 과체중)",
  "summary": "2-3문장 요약",
  "reasoning": "분류 근거",
  "tips": ["구체적인 개선 팁"],
  "healthRisk": "건강 위험 요소",
  "muscleBalance": "좌우/상하체 근육 균형 평가",
  "metabolicHealth": "기초대사량과 내장지방 기반 대사 건강 평가",
  "bodyComposition": "체성분 종합 평가",
  "bmiCategory": "저체중|정상|과체중|비만",
  "bodyFatCategory": "낮음|표준|높음",
  "visceralFatCategory": "정상|주의|위험"
}"""

TEXT_FALLBACK_METHOD = "AI_TEXT"


class BodyAnalysisGenerator(RecommendationGenerator[BodyAnalysisResult]):
    kind = "body_analysis"
    temperature = 0.3
    json_mode = False

    def recommend(self, request: InbodyDataRequest, user_id: UUID) -> BodyAnalysisResult:
        with bind_user_id(user_id):
            content = self._complete(SYSTEM_PROMPT, build_user_prompt(request), user_id=user_id)
            return self._parse(content, request)

    def _parse(self, content: str, request: InbodyDataRequest) -> BodyAnalysisResult:
        data = extract_json_object(content)
        if data is None:
            # Prose answer: keep it, but mark it so callers can tell.
            logger.warning("Body analysis answer had no JSON object; storing it as text")
            first_line = content.strip().splitlines()[0][:100]
            return BodyAnalysisResult(
                label=first_line,
                summary=content.strip(),
                inbody_score=request.inbody_score,
                analysis_method=TEXT_FALLBACK_METHOD,
            )

        result = validate_result(data, BodyAnalysisResult)
        if result.inbody_score is None and request.inbody_score is not None:
            result = result.model_copy(update={"inbody_score": request.inbody_score})
        return result


def build_user_prompt(request: InbodyDataRequest) -> str:
    lines = ["다음 인바디 측정 결과를 분석해 주세요.", ""]
    for block in (
        prompts.basic_info_block(request),
        prompts.composition_block(request),
        prompts.water_nutrient_block(request),
        prompts.segmental_block(request),
        prompts.health_block(request),
        prompts.control_block(request),
    ):
        lines.extend(block)
        lines.append("")

    balance = prompts.muscle_balance_hint(request)
    if balance:
        lines.append(f"참고: {balance}")
        lines.append("")

    lines.append("아래 형식의 JSON 객체로 답하세요:")
    lines.append(RESPONSE_SHAPE)
    return "\n".join(lines)
