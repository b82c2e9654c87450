"""Outbound client for the chat-completions API with bounded retries.

The SDK is used as a plain transport (``max_retries=0``); retry, backoff and
the overall deadline are handled here so every attempt is logged and
classified the same way. The client never raises for upstream problems: a
missing credential or an exhausted call yields an absent payload together
with a status describing why.
"""
from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, Dict, Generic, List, Optional, Type, TypeVar
from uuid import UUID

import httpx
import openai
from pydantic import BaseModel, ValidationError

from app.clients.openai_schemas import ChatCompletionRequest, ChatCompletionResponse, ChatMessage
from app.core.config import Settings, settings as app_settings
from app.observability.metrics import log_metric

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS_PATH = "/chat/completions"
PLACEHOLDER_API_KEYS = frozenset(
    {
        "your-api-key-here",
        "your_api_key_here",
        "YOUR_OPENAI_API_KEY",
        "sk-your-api-key",
        "sk-xxxx",
    }
)
TRUNCATION_RATIO = 0.95
_PREVIEW_CHARS = 500

ModelT = TypeVar("ModelT", bound=BaseModel)


class FailureKind(str, Enum):
    TIMEOUT = "timeout"
    TRANSPORT = "transport"
    HTTP_STATUS = "http_status"
    DECODE = "decode"
    SERIALIZATION = "serialization"


@dataclass(frozen=True)
class CallFailure:
    """One failed attempt, as seen by the retry classifier."""

    kind: FailureKind
    message: str = ""
    status_code: Optional[int] = None
    body: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)

    def describe(self) -> str:
        if self.kind is FailureKind.HTTP_STATUS:
            return f"http {self.status_code}"
        return self.kind.value


def is_retryable(failure: CallFailure) -> bool:
    """Timeouts, transport errors and 5xx responses are worth another attempt."""
    if failure.kind in (FailureKind.TIMEOUT, FailureKind.TRANSPORT):
        return True
    if failure.kind is FailureKind.HTTP_STATUS and failure.status_code is not None:
        return 500 <= failure.status_code <= 599
    return False


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 2
    backoff_seconds: float = 3.0
    max_backoff_seconds: float = 30.0
    timeout_seconds: float = 180.0
    attempt_timeout_seconds: float = 55.0

    @classmethod
    def from_settings(cls, config: Settings) -> "RetryPolicy":
        return cls(
            max_retries=config.openai_max_retries,
            backoff_seconds=config.openai_backoff_seconds,
            max_backoff_seconds=config.openai_backoff_max_seconds,
            timeout_seconds=config.openai_timeout_seconds,
            attempt_timeout_seconds=config.openai_attempt_timeout_seconds,
        )

    def delay_for(self, retry_number: int) -> float:
        """Sleep before retry ``retry_number`` (1-based): base, 2x base, 4x base... capped."""
        return min(self.backoff_seconds * (2 ** (retry_number - 1)), self.max_backoff_seconds)

    def attempt_timeout(self, remaining_seconds: float) -> float:
        """Timeout for the next attempt: the per-attempt limit, clamped to what is left of the call budget."""
        return max(min(self.attempt_timeout_seconds, remaining_seconds), 0.0)


@dataclass(frozen=True)
class RetryAttempt:
    attempt: int
    delay_seconds: float
    reason: FailureKind


class CallStatus(str, Enum):
    SUCCEEDED = "succeeded"
    DISABLED = "disabled"
    DEGRADED = "degraded"
    FAILED = "failed"


@dataclass
class AICallResult(Generic[ModelT]):
    """Outcome of one logical call; ``payload`` is None unless it succeeded."""

    status: CallStatus
    payload: Optional[ModelT] = None
    attempts: int = 0
    retries: List[RetryAttempt] = field(default_factory=list)
    failure: Optional[CallFailure] = None

    @property
    def ok(self) -> bool:
        return self.payload is not None


class OpenAIClient:
    """Chat-completions caller with a fixed retry policy and a single deadline."""

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        policy: Optional[RetryPolicy] = None,
        http_client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        config: Optional[Settings] = None,
    ) -> None:
        config = config or app_settings
        self.api_key = (api_key if api_key is not None else config.openai_api_key) or ""
        self.base_url = base_url or config.openai_base_url
        self.default_model = model or config.openai_model
        self.default_temperature = temperature if temperature is not None else config.openai_temperature
        self.default_max_tokens = max_tokens or config.openai_max_tokens
        self.policy = policy or RetryPolicy.from_settings(config)
        self._sleep = sleep
        self._clock = clock
        self._sdk: Optional[openai.OpenAI] = None
        if self.is_api_key_valid():
            self._sdk = openai.OpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.policy.attempt_timeout_seconds,
                max_retries=0,
                http_client=http_client,
            )

    def is_api_key_valid(self) -> bool:
        key = self.api_key.strip()
        return bool(key) and key not in PLACEHOLDER_API_KEYS

    def build_chat_request(
        self,
        messages: List[Dict[str, str]],
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
    ) -> ChatCompletionRequest:
        return ChatCompletionRequest(
            model=self.default_model,
            messages=[ChatMessage(**message) for message in messages],
            temperature=self.default_temperature if temperature is None else temperature,
            max_tokens=max_tokens or self.default_max_tokens,
            response_format={"type": "json_object"} if json_mode else None,
        )

    def send(
        self,
        path: str,
        body: BaseModel,
        response_model: Type[ModelT],
        *,
        user_id: UUID | str | None = None,
    ) -> Optional[ModelT]:
        """POST ``body`` to ``path``; the decoded payload, or None if the call did not succeed."""
        return self.call(path, body, response_model, user_id=user_id).payload

    def chat_completions(
        self, request: ChatCompletionRequest, *, user_id: UUID | str | None = None
    ) -> Optional[ChatCompletionResponse]:
        return self.complete(request, user_id=user_id).payload

    def complete(
        self, request: ChatCompletionRequest, *, user_id: UUID | str | None = None
    ) -> AICallResult[ChatCompletionResponse]:
        """Chat-completions call returning the full outcome, with usage logged."""
        result = self.call(CHAT_COMPLETIONS_PATH, request, ChatCompletionResponse, user_id=user_id)
        response = result.payload
        if response is not None:
            logger.info(
                "Chat completion received: keys=%s choices=%d",
                sorted(response.model_dump(exclude_none=True).keys()),
                len(response.choices),
            )
            if response.usage:
                logger.info(
                    "Token usage: prompt=%d completion=%d total=%d (max_tokens=%d)",
                    response.usage.prompt_tokens,
                    response.usage.completion_tokens,
                    response.usage.total_tokens,
                    request.max_tokens,
                )
                if response.usage.completion_tokens >= request.max_tokens * TRUNCATION_RATIO:
                    logger.warning(
                        "Completion used %d of %d tokens; the answer is probably truncated",
                        response.usage.completion_tokens,
                        request.max_tokens,
                    )
        return result

    def call(
        self,
        path: str,
        body: BaseModel,
        response_model: Type[ModelT],
        *,
        user_id: UUID | str | None = None,
    ) -> AICallResult[ModelT]:
        if self._sdk is None:
            logger.warning("OpenAI API key is missing or a placeholder; skipping call to %s", path)
            log_metric("openai.call.disabled", 1, metadata={"path": path})
            return AICallResult(status=CallStatus.DISABLED)

        try:
            payload = body.model_dump(mode="json", exclude_none=True)
            encoded = json.dumps(payload, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            failure = CallFailure(FailureKind.SERIALIZATION, message=str(exc))
            logger.error("Could not serialize request body for %s: %s", path, exc)
            return AICallResult(status=CallStatus.FAILED, failure=failure)

        logger.info(
            "OpenAI request: url=%s%s user=%s body_size=%d",
            self.base_url.rstrip("/"),
            path,
            user_id,
            len(encoded),
        )
        logger.debug("OpenAI request preview: %s", encoded[:_PREVIEW_CHARS])

        started = self._clock()
        deadline = started + self.policy.timeout_seconds
        retries: List[RetryAttempt] = []
        attempt = 0
        while True:
            outcome = self._attempt(path, payload, self.policy.attempt_timeout(deadline - self._clock()))
            if isinstance(outcome, httpx.Response):
                decoded = self._decode(outcome, response_model)
                if isinstance(decoded, CallFailure):
                    return self._give_up(path, CallStatus.FAILED, decoded, attempt + 1, retries, started)
                self._record(path, CallStatus.SUCCEEDED, attempt + 1, started)
                return AICallResult(
                    status=CallStatus.SUCCEEDED,
                    payload=decoded,
                    attempts=attempt + 1,
                    retries=retries,
                )

            failure = outcome
            if not is_retryable(failure):
                return self._give_up(path, CallStatus.FAILED, failure, attempt + 1, retries, started)
            if attempt >= self.policy.max_retries:
                return self._give_up(path, CallStatus.DEGRADED, failure, attempt + 1, retries, started)

            delay = self.policy.delay_for(attempt + 1)
            if deadline - self._clock() <= delay:
                logger.warning("OpenAI call deadline reached; not retrying after %s", failure.describe())
                return self._give_up(path, CallStatus.DEGRADED, failure, attempt + 1, retries, started)

            attempt += 1
            retries.append(RetryAttempt(attempt=attempt, delay_seconds=delay, reason=failure.kind))
            logger.warning(
                "OpenAI call failed (%s); retry %d/%d in %.1fs",
                failure.describe(),
                attempt,
                self.policy.max_retries,
                delay,
            )
            self._sleep(delay)

    def _attempt(self, path: str, payload: Dict[str, Any], timeout: float) -> httpx.Response | CallFailure:
        assert self._sdk is not None
        try:
            return self._sdk.post(path, body=payload, cast_to=httpx.Response, options={"timeout": timeout})
        except openai.APITimeoutError as exc:
            return CallFailure(FailureKind.TIMEOUT, message=str(exc))
        except openai.APIConnectionError as exc:
            return CallFailure(FailureKind.TRANSPORT, message=str(exc))
        except openai.APIStatusError as exc:
            return CallFailure(
                FailureKind.HTTP_STATUS,
                message=str(exc),
                status_code=exc.status_code,
                body=exc.response.text,
                headers=dict(exc.response.headers),
            )

    @staticmethod
    def _decode(response: httpx.Response, response_model: Type[ModelT]) -> ModelT | CallFailure:
        try:
            return response_model.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            return CallFailure(
                FailureKind.DECODE,
                message=str(exc),
                status_code=response.status_code,
                body=response.text[:_PREVIEW_CHARS],
                headers=dict(response.headers),
            )

    def _give_up(
        self,
        path: str,
        status: CallStatus,
        failure: CallFailure,
        attempts: int,
        retries: List[RetryAttempt],
        started: float,
    ) -> AICallResult[Any]:
        logger.error(
            "OpenAI call to %s failed after %d attempt(s): %s status=%s message=%s body=%s headers=%s",
            path,
            attempts,
            failure.kind.value,
            failure.status_code,
            failure.message,
            failure.body,
            failure.headers,
        )
        self._record(path, status, attempts, started)
        return AICallResult(status=status, attempts=attempts, retries=retries, failure=failure)

    def _record(self, path: str, status: CallStatus, attempts: int, started: float) -> None:
        metadata = {"path": path, "status": status.value}
        log_metric("openai.call.attempts", attempts, metadata=metadata)
        log_metric("openai.call.latency_ms", (self._clock() - started) * 1000, metadata=metadata)


@lru_cache
def get_openai_client() -> OpenAIClient:
    """Process-wide client built from settings."""
    return OpenAIClient()
