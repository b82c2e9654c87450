"""Helpers for turning model output into validated result models."""
from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from app.core.errors import AIResponseParseError

ModelT = TypeVar("ModelT", bound=BaseModel)

_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*(.*?)```", re.DOTALL)
_decoder = json.JSONDecoder()


def strip_code_fences(content: str) -> str:
    """Return the body of the first fenced block, or the trimmed text."""
    text = content.strip()
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    return text


def extract_json_object(content: str) -> Optional[Dict[str, Any]]:
    """Find the first JSON object in ``content``; None if there is none."""
    text = strip_code_fences(content)
    try:
        value = json.loads(text)
    except ValueError:
        value = None
    if isinstance(value, dict):
        return value

    for index, char in enumerate(text):
        if char != "{":
            continue
        try:
            value, _ = _decoder.raw_decode(text, index)
        except ValueError:
            continue
        if isinstance(value, dict):
            return value
    return None


def parse_result(content: str, model: Type[ModelT]) -> ModelT:
    data = extract_json_object(content)
    if data is None:
        raise AIResponseParseError(f"No JSON object in {model.__name__} response")
    return validate_result(data, model)


def validate_result(data: Dict[str, Any], model: Type[ModelT]) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise AIResponseParseError(f"{model.__name__} response did not validate: {exc.error_count()} error(s)") from exc
