"""Error taxonomy for recipe generation and parsing.

The transport classifies every API failure into an ErrorKind; the retry loop
switches on `kind.is_retryable` instead of inspecting message text.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Structured classification of a failed generation attempt."""

    RATE_LIMITED = "rate_limited"
    EMPTY_RESPONSE = "empty_response"
    TIMEOUT = "timeout"
    INVALID_CREDENTIAL = "invalid_credential"
    MODEL_NOT_FOUND = "model_not_found"
    SERVER_ERROR = "server_error"
    UNKNOWN = "unknown"

    @property
    def is_retryable(self) -> bool:
        return self in (ErrorKind.RATE_LIMITED, ErrorKind.EMPTY_RESPONSE, ErrorKind.TIMEOUT)


class RecipeServiceError(Exception):
    """Base class for recipe pipeline errors."""


class ConfigurationError(RecipeServiceError, ValueError):
    """Missing or invalid configuration. Fatal, never retried."""


class GenerationError(RecipeServiceError):
    """A generation attempt failed.

    Attributes:
        kind: Structured classification of the failure.
        attempts: Number of attempts made when the error was raised (0 until
            the retry loop fills it in).
    """

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.UNKNOWN, attempts: int = 0) -> None:
        super().__init__(message)
        self.kind = kind
        self.attempts = attempts


class TransientApiError(GenerationError):
    """Rate limit, quota or timeout. Retried until the budget runs out."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.RATE_LIMITED, attempts: int = 0) -> None:
        super().__init__(message, kind=kind, attempts=attempts)


class EmptyResponseError(TransientApiError):
    """The API answered but the envelope held no text."""

    def __init__(self, message: str = "No content generated", attempts: int = 0) -> None:
        super().__init__(message, kind=ErrorKind.EMPTY_RESPONSE, attempts=attempts)


class NonRetryableApiError(GenerationError):
    """Invalid credential, unknown model or any other permanent failure."""


class RecipeParseError(RecipeServiceError, ValueError):
    """The model output held no parseable JSON of the expected shape.

    Attributes:
        raw_text: The unmodified model output, kept for diagnostics.
    """

    def __init__(self, message: str, raw_text: Optional[str]) -> None:
        super().__init__(message)
        self.raw_text = raw_text

    def __str__(self) -> str:
        preview = (self.raw_text or "")[:200]
        return f"{self.args[0]} (raw response: {preview!r})"


def generation_error_for(kind: ErrorKind, message: str) -> GenerationError:
    """Build the GenerationError subclass that matches `kind`."""
    if kind is ErrorKind.EMPTY_RESPONSE:
        return EmptyResponseError(message)
    if kind.is_retryable:
        return TransientApiError(message, kind=kind)
    return NonRetryableApiError(message, kind=kind)
