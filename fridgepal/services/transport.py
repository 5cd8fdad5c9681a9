"""Gemini text transport.

One call to the generative API per `generate_text` invocation, no retries.
Every failure leaves this module as a classified GenerationError; the retry
policy in GenerativeRecipeClient reads `error.kind` and never the message.

Classification prefers the structured fields google-genai exposes on
`errors.APIError` (`code`, `status`). Exceptions without them (raised by
other transports or by the HTTP layer) fall back to message inspection.
"""

import asyncio
import re
from typing import Optional, Protocol

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from fridgepal.services.errors import (
    EmptyResponseError,
    ErrorKind,
    GenerationError,
    generation_error_for,
)
from fridgepal.utils.config import Config
from fridgepal.utils.logger import logger


# Message fallbacks for exceptions without structured status
_RATE_LIMIT_PATTERN = re.compile(r"\b429\b|quota|\brate\b|rate[-_ ]?limit|resource[_ ]exhausted", re.IGNORECASE)
_CREDENTIAL_PATTERN = re.compile(r"api_key_invalid|api key not valid|api key expired|permission[_ ]denied", re.IGNORECASE)
_MODEL_PATTERN = re.compile(r"model.*not found|not_found", re.IGNORECASE)


class TextTransport(Protocol):
    """Anything that turns a prompt into generated text with one request."""

    async def generate_text(self, prompt: str) -> str:  # pragma: no cover - interface
        ...


def _classify_api_error(exc: genai_errors.APIError) -> ErrorKind:
    code = getattr(exc, "code", None)
    status = (getattr(exc, "status", None) or "").upper()
    message = f"{getattr(exc, 'message', '') or ''} {exc}"

    if code == 429 or status == "RESOURCE_EXHAUSTED":
        return ErrorKind.RATE_LIMITED
    # Gemini reports a bad key as 400 INVALID_ARGUMENT with reason API_KEY_INVALID
    if code in (401, 403) or status in ("UNAUTHENTICATED", "PERMISSION_DENIED") or _CREDENTIAL_PATTERN.search(message):
        return ErrorKind.INVALID_CREDENTIAL
    if code == 404 or status == "NOT_FOUND":
        return ErrorKind.MODEL_NOT_FOUND
    if code == 504 or status == "DEADLINE_EXCEEDED":
        return ErrorKind.TIMEOUT
    if isinstance(code, int) and code >= 500:
        return ErrorKind.SERVER_ERROR
    return ErrorKind.UNKNOWN


def classify_error(exc: BaseException) -> ErrorKind:
    """Map an exception raised during a generation attempt to an ErrorKind.

    Args:
        exc: Exception raised by the SDK, the HTTP layer or a custom transport.

    Returns:
        The structured kind. Already classified GenerationErrors keep their kind.
    """
    if isinstance(exc, GenerationError):
        return exc.kind
    if isinstance(exc, genai_errors.APIError):
        return _classify_api_error(exc)
    if isinstance(exc, (httpx.TimeoutException, asyncio.TimeoutError, TimeoutError)):
        return ErrorKind.TIMEOUT

    message = str(exc)
    if _CREDENTIAL_PATTERN.search(message):
        return ErrorKind.INVALID_CREDENTIAL
    if _RATE_LIMIT_PATTERN.search(message):
        return ErrorKind.RATE_LIMITED
    if _MODEL_PATTERN.search(message):
        return ErrorKind.MODEL_NOT_FOUND
    return ErrorKind.UNKNOWN


def as_generation_error(exc: BaseException) -> GenerationError:
    """Return `exc` itself if already classified, else a classified wrapper.

    The wrapper's `__cause__` is set to `exc` so the original traceback stays
    reachable.
    """
    if isinstance(exc, GenerationError):
        return exc
    kind = classify_error(exc)
    if kind is ErrorKind.INVALID_CREDENTIAL:
        message = f"Invalid Gemini API key: {exc}"
    else:
        message = f"Gemini request failed ({kind.value}): {exc}"
    error = generation_error_for(kind, message)
    error.__cause__ = exc
    return error


def extract_text(response) -> Optional[str]:
    """Join the text parts of the first candidate of a generate_content response.

    Returns None when the envelope has no candidates, no content or only
    non-text parts.
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    texts = [part.text for part in parts if isinstance(getattr(part, "text", None), str)]
    text = "".join(texts)
    return text if text.strip() else None


class GeminiTransport:
    """google-genai backed TextTransport.

    The SDK client is created per transport instance from an explicit Config.
    The blocking SDK call runs in a worker thread; cancelling the awaiting
    task does not abort a request already in flight.
    """

    def __init__(self, config: Config) -> None:
        self.model = config.GEMINI_MODEL
        self.generation_config = types.GenerateContentConfig(
            temperature=config.TEMPERATURE,
            top_k=config.TOP_K,
            top_p=config.TOP_P,
            max_output_tokens=config.MAX_OUTPUT_TOKENS,
            thinking_config=types.ThinkingConfig(thinking_budget=config.THINKING_BUDGET),
        )
        self.client = genai.Client(
            api_key=config.GEMINI_API_KEY,
            # HttpOptions.timeout is in milliseconds
            http_options=types.HttpOptions(timeout=int(config.REQUEST_TIMEOUT_SECONDS * 1000)),
        )

    async def generate_text(self, prompt: str) -> str:
        """Send one generation request.

        Args:
            prompt: Complete user prompt.

        Returns:
            Generated text (non-empty).

        Raises:
            EmptyResponseError: The response held no text.
            TransientApiError: Rate limit, quota or timeout.
            NonRetryableApiError: Any other failure.
        """
        try:
            response = await asyncio.to_thread(
                self.client.models.generate_content,
                model=self.model,
                contents=[types.Content(role="user", parts=[types.Part(text=prompt)])],
                config=self.generation_config,
            )
        except Exception as e:
            error = as_generation_error(e)
            logger.debug(f"Gemini call failed: {e}", extra={"kind": error.kind.value})
            if error is e:
                raise
            raise error from e

        text = extract_text(response)
        if text is None:
            raise EmptyResponseError()
        return text
