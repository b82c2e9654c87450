"""Translate domain errors into HTTP responses."""
from __future__ import annotations

from fastapi import HTTPException, status

from app.core.errors import AIProviderDisabledError, AIProviderError, SurveyRequiredError


def http_error_for(exc: Exception) -> HTTPException:
    if isinstance(exc, SurveyRequiredError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    if isinstance(exc, AIProviderDisabledError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="AI recommendations are not configured")
    if isinstance(exc, AIProviderError) and exc.is_transient:
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="AI provider is temporarily unavailable, please retry later",
        )
    if isinstance(exc, AIProviderError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="AI provider returned an unusable answer")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unexpected error")
