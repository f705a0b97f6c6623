from typing import Optional
from datetime import datetime


class LLMError(Exception):
    """Base exception for all provider errors

    Subclasses set ``default_type``; it is used when no ``error_type`` is given.
    """

    default_type = "api_error"

    def __init__(
        self,
        message: str,
        provider: str = "",
        error_type: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.error_type = error_type or self.default_type
        self.original_error = original_error
        self.timestamp = datetime.now()

    def __str__(self):
        return f"[{self.provider}] {self.error_type}: {self.message}"


class LLMAuthenticationError(LLMError):
    """Missing or rejected API key"""
    default_type = "authentication"


class LLMRateLimitError(LLMError):
    """Quota or rate limit exhausted"""
    default_type = "rate_limit"


class LLMValidationError(LLMError):
    """Request rejected before it was sent"""
    default_type = "validation"


def classify_status(
    status_code: Optional[int],
    message: str,
    provider: str = "",
    original_error: Optional[Exception] = None
) -> LLMError:
    """Map an HTTP status from a provider into the matching LLMError subclass"""
    if status_code in (401, 403):
        error_class = LLMAuthenticationError
    elif status_code == 429:
        error_class = LLMRateLimitError
    elif status_code == 400:
        error_class = LLMValidationError
    else:
        error_class = LLMError
    return error_class(message, provider=provider, original_error=original_error)
