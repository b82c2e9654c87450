"""Domain exceptions raised by the recommendation pipeline."""
from __future__ import annotations


class AIProviderError(RuntimeError):
    """The language model produced no usable answer.

    ``status`` mirrors the outbound call status (``disabled``, ``degraded``,
    ``failed`` or ``succeeded`` when the call worked but the answer did not),
    ``failure_kind`` names the last transport-level failure when there was one.
    """

    def __init__(self, message: str, *, status: str = "failed", failure_kind: str | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.failure_kind = failure_kind

    @property
    def is_transient(self) -> bool:
        return self.status == "degraded"


class AIProviderDisabledError(AIProviderError):
    """No usable API credential is configured."""

    def __init__(self, message: str = "AI provider is not configured") -> None:
        super().__init__(message, status="disabled")


class AIResponseParseError(AIProviderError):
    """The model answered but the content could not be turned into a result."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status="succeeded", failure_kind="parse")


class SurveyRequiredError(ValueError):
    """Diet and workout plans cannot be generated without survey answers."""
