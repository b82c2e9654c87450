"""Shared plumbing for the recommendation generators."""
from __future__ import annotations

import logging
from typing import Generic, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel

from app.api.schemas.recommendations import InbodyDataRequest
from app.clients.openai_client import AICallResult, CallStatus, OpenAIClient, get_openai_client
from app.clients.openai_schemas import ChatCompletionResponse
from app.core.context import get_request_id
from app.core.errors import AIProviderDisabledError, AIProviderError
from app.observability.tracing import annotate, trace

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT", bound=BaseModel)


class RecommendationGenerator(Generic[ResultT]):
    """Prompt, call and parse for one recommendation kind.

    Subclasses implement ``recommend``; ``_complete`` raises instead of
    returning placeholder content when the model gives nothing usable.
    """

    kind = "recommendation"
    temperature: Optional[float] = None
    json_mode = True

    def __init__(self, client: Optional[OpenAIClient] = None) -> None:
        self.client = client or get_openai_client()

    def recommend(self, request: InbodyDataRequest, user_id: UUID) -> ResultT:
        raise NotImplementedError

    def _complete(self, system_prompt: str, user_prompt: str, *, user_id: UUID) -> str:
        metadata = {
            "kind": self.kind,
            "model": self.client.default_model,
            "llm_input_text": user_prompt[:500],
        }
        with trace(f"ai.{self.kind}.generate", metadata=metadata, user_id=user_id, request_id=get_request_id()) as span:
            chat_request = self.client.build_chat_request(
                [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=self.temperature,
                json_mode=self.json_mode,
            )
            result = self.client.complete(chat_request, user_id=user_id)
            content = self._content_or_raise(result)
            annotate(span, llm_output_text=content, attempts=result.attempts, status=result.status.value)
        logger.info("%s content received (%d chars)", self.kind, len(content))
        return content

    def _content_or_raise(self, result: AICallResult[ChatCompletionResponse]) -> str:
        if result.status is CallStatus.DISABLED:
            raise AIProviderDisabledError(f"{self.kind}: OpenAI API key is not configured")

        response = result.payload
        if response is None:
            failure_kind = result.failure.kind.value if result.failure else None
            raise AIProviderError(
                f"{self.kind}: OpenAI call {result.status.value} after {result.attempts} attempt(s)",
                status=result.status.value,
                failure_kind=failure_kind,
            )
        if response.error:
            raise AIProviderError(
                f"{self.kind}: provider returned an error: {response.error.get('message', response.error)}",
                failure_kind="provider_error",
            )

        content = response.first_content()
        if content is None:
            raise AIProviderError(f"{self.kind}: response had no content", failure_kind="empty_content")
        return content
