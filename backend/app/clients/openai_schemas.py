"""Wire models for the chat-completions endpoint."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: str
    content: str


class ChatCompletionRequest(BaseModel):
    """Request body; immutable once built."""

    model_config = ConfigDict(frozen=True)

    model: str
    messages: List[ChatMessage]
    temperature: float = 0.5
    max_tokens: int = 8192
    response_format: Optional[Dict[str, str]] = None


class AssistantMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    role: Optional[str] = None
    content: Optional[str] = None


class ChatChoice(BaseModel):
    model_config = ConfigDict(extra="allow")

    index: int = 0
    message: Optional[AssistantMessage] = None
    finish_reason: Optional[str] = None


class TokenUsage(BaseModel):
    model_config = ConfigDict(extra="allow")

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ChatCompletionResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    model: Optional[str] = None
    choices: List[ChatChoice] = Field(default_factory=list)
    usage: Optional[TokenUsage] = None
    error: Optional[Dict[str, Any]] = None

    def first_content(self) -> Optional[str]:
        """Text of the first choice, or None when the model returned nothing."""
        if not self.choices:
            return None
        message = self.choices[0].message
        if message is None or not message.content or not message.content.strip():
            return None
        return message.content
