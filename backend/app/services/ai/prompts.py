"""Prompt fragments shared by the generators."""
from __future__ import annotations

from typing import List, Optional

from app.api.schemas.recommendations import InbodyDataRequest

MISSING = "정보 없음"


def fmt(value: Optional[float], unit: str = "", digits: int = 1) -> str:
    if value is None:
        return MISSING
    if isinstance(value, int):
        return f"{value}{unit}"
    return f"{value:.{digits}f}{unit}"


def inbody_score_band(score: Optional[int]) -> str:
    if score is None:
        return MISSING
    if score >= 80:
        return f"{score}점 (우수)"
    if score >= 70:
        return f"{score}점 (보통)"
    return f"{score}점 (개선 필요)"


def control_direction(value: Optional[float], label: str) -> str:
    """Describe a +/- control value such as fat or muscle control."""
    if value is None:
        return f"{label}: {MISSING}"
    if value > 0:
        return f"{label}: {value:.1f}kg 증가 필요"
    if value < 0:
        return f"{label}: {abs(value):.1f}kg 감소 필요"
    return f"{label}: 유지"


def basic_info_block(request: InbodyDataRequest) -> List[str]:
    age = request.age()
    return [
        "[기본 정보]",
        f"- 성별: {request.gender_label()}",
        f"- 나이: {age}세" if age is not None else f"- 나이: {MISSING}",
        f"- 체중: {fmt(request.weight, 'kg')}",
    ]


def composition_block(request: InbodyDataRequest) -> List[str]:
    return [
        "[핵심 체성분]",
        f"- 골격근량: {fmt(request.skeletal_muscle_mass, 'kg')}",
        f"- 근육량: {fmt(request.muscle_mass, 'kg')}",
        f"- 체지방량: {fmt(request.body_fat_mass, 'kg')}",
        f"- 제지방량: {fmt(request.fat_free_mass, 'kg')}",
        f"- 체지방률: {fmt(request.body_fat_percentage, '%')}",
        f"- BMI: {fmt(request.bmi)}",
    ]


def water_nutrient_block(request: InbodyDataRequest) -> List[str]:
    return [
        "[체수분 및 영양소]",
        f"- 총체수분: {fmt(request.total_body_water, 'L')}",
        f"- 단백질: {fmt(request.protein, 'kg')}",
        f"- 무기질: {fmt(request.mineral, 'kg')}",
        f"- 골무기질량: {fmt(request.bone_mineral_content, 'kg')}",
    ]


def segmental_block(request: InbodyDataRequest) -> List[str]:
    return [
        "[부위별 근육량 (좌/우)]",
        f"- 팔: {fmt(request.left_arm_muscle_mass, 'kg')} / {fmt(request.right_arm_muscle_mass, 'kg')}",
        f"- 다리: {fmt(request.left_leg_muscle_mass, 'kg')} / {fmt(request.right_leg_muscle_mass, 'kg')}",
        f"- 몸통: {fmt(request.trunk_muscle_mass, 'kg')}",
        "[부위별 체지방량 (좌/우)]",
        f"- 팔: {fmt(request.left_arm_fat_mass, 'kg')} / {fmt(request.right_arm_fat_mass, 'kg')}",
        f"- 다리: {fmt(request.left_leg_fat_mass, 'kg')} / {fmt(request.right_leg_fat_mass, 'kg')}",
        f"- 몸통: {fmt(request.trunk_fat_mass, 'kg')}",
    ]


def health_block(request: InbodyDataRequest) -> List[str]:
    return [
        "[건강 지표]",
        f"- 인바디 점수: {inbody_score_band(request.inbody_score)}",
        f"- 기초대사량: {fmt(request.basal_metabolism, 'kcal')}",
        f"- 복부지방률: {fmt(request.abdominal_fat_percentage, '%')}",
        f"- 내장지방레벨: {fmt(request.visceral_fat_level)}",
        f"- 비만도: {fmt(request.obesity_degree, '%')}",
        f"- 허리둘레: {fmt(request.waist_circumference, 'cm')}",
    ]


def control_block(request: InbodyDataRequest) -> List[str]:
    return [
        "[체중 조절 지표]",
        f"- 적정체중: {fmt(request.ideal_weight, 'kg')}",
        f"- {control_direction(request.weight_control, '체중조절')}",
        f"- {control_direction(request.fat_control, '지방조절')}",
        f"- {control_direction(request.muscle_control, '근육조절')}",
    ]


def muscle_balance_hint(request: InbodyDataRequest) -> Optional[str]:
    """Flag a left/right difference above 5% in arms or legs."""
    pairs = [
        ("팔", request.left_arm_muscle_mass, request.right_arm_muscle_mass),
        ("다리", request.left_leg_muscle_mass, request.right_leg_muscle_mass),
    ]
    notes = []
    for label, left, right in pairs:
        if not left or not right:
            continue
        diff = abs(left - right) / max(left, right) * 100
        if diff > 5:
            weaker = "왼쪽" if left < right else "오른쪽"
            notes.append(f"{label} 좌우 차이 {diff:.1f}% ({weaker} 보강 필요)")
    return ", ".join(notes) if notes else None
