"""Closed error taxonomy and the classifier that maps raw failures onto it."""
import asyncio
import json
from enum import Enum
from typing import Optional

import httpx
import openai

from audioscribe.constants import DEFAULT_MESSAGE_LANGUAGE, ERROR_MESSAGES


class ErrorCategory(str, Enum):
    INVALID_AUDIO = "invalid_audio"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    AUTHENTICATION = "authentication"
    SERVICE_NOT_FOUND = "service_not_found"
    METHOD_NOT_ALLOWED = "method_not_allowed"
    SERVICE_UNAVAILABLE = "service_unavailable"
    RATE_LIMITED = "rate_limited"
    TIMEOUT = "timeout"
    NETWORK_UNREACHABLE = "network_unreachable"
    QUOTA_EXCEEDED = "quota_exceeded"
    UNKNOWN = "unknown"


RETRYABLE_CATEGORIES = frozenset({
    ErrorCategory.SERVICE_UNAVAILABLE,
    ErrorCategory.TIMEOUT,
    ErrorCategory.NETWORK_UNREACHABLE,
})


def user_message(category: ErrorCategory, language: str = DEFAULT_MESSAGE_LANGUAGE) -> str:
    """Localized message for a category; unknown languages fall back to the default."""
    table = ERROR_MESSAGES.get(language, ERROR_MESSAGES[DEFAULT_MESSAGE_LANGUAGE])
    return table[category.value]


class TranscriptionError(Exception):
    """A classified failure. Carries only the category and a safe message."""

    def __init__(
        self,
        category: ErrorCategory,
        message: Optional[str] = None,
        status: Optional[int] = None,
    ) -> None:
        self.category = category
        self.message = message or user_message(category)
        self.status = status
        super().__init__(self.message)

    @property
    def retryable(self) -> bool:
        return self.category in RETRYABLE_CATEGORIES

    def localized(self, language: str) -> "TranscriptionError":
        return TranscriptionError(self.category, user_message(self.category, language), self.status)

    def __repr__(self) -> str:
        return f"TranscriptionError({self.category.value!r}, status={self.status!r})"


# ── classifiers ───────────────────────────────────────────────────────────────


_MESSAGE_KEYWORDS: tuple[tuple[tuple[str, ...], ErrorCategory], ...] = (
    (("insufficient_quota",), ErrorCategory.QUOTA_EXCEEDED),
    (("unauthorized", "invalid api key", "incorrect api key"), ErrorCategory.AUTHENTICATION),
    (("too many requests", "rate limit"), ErrorCategory.RATE_LIMITED),
    (("payload too large", "too large"), ErrorCategory.PAYLOAD_TOO_LARGE),
    (("method not allowed",), ErrorCategory.METHOD_NOT_ALLOWED),
    (("not found",), ErrorCategory.SERVICE_NOT_FOUND),
    (("timeout", "timed out"), ErrorCategory.TIMEOUT),
    (("network", "econnrefused", "failed to fetch"), ErrorCategory.NETWORK_UNREACHABLE),
)


def extract_error_message(body: str) -> str:
    """Pull `error.message` out of a JSON error body, else return the body as-is."""
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, TypeError):
        return body or ""
    match data:
        case {"error": {"message": str() as message}}:
            return message
        case {"error": str() as message}:
            return message
        case {"detail": str() as message}:
            return message
        case _:
            return body


def classify_message(text: str) -> ErrorCategory:
    lowered = (text or "").lower()
    for keywords, category in _MESSAGE_KEYWORDS:
        if any(k in lowered for k in keywords):
            return category
    return ErrorCategory.UNKNOWN


def classify_status(status: int, body: str = "") -> ErrorCategory:
    match status:
        case 401 | 403:
            return ErrorCategory.AUTHENTICATION
        case 404:
            return ErrorCategory.SERVICE_NOT_FOUND
        case 405:
            return ErrorCategory.METHOD_NOT_ALLOWED
        case 413:
            return ErrorCategory.PAYLOAD_TOO_LARGE
        case 429 if "insufficient_quota" in (body or ""):
            return ErrorCategory.QUOTA_EXCEEDED
        case 429:
            return ErrorCategory.RATE_LIMITED
        case 0:
            return ErrorCategory.SERVICE_UNAVAILABLE
        case s if s >= 500:
            return ErrorCategory.SERVICE_UNAVAILABLE
        case _:
            return classify_message(extract_error_message(body))


def error_from_response(status: int, body: str = "") -> TranscriptionError:
    return TranscriptionError(classify_status(status, body), status=status)


def classify_exception(exc: BaseException) -> ErrorCategory:
    match exc:
        case TranscriptionError():
            return exc.category
        case asyncio.TimeoutError() | httpx.TimeoutException() | openai.APITimeoutError():
            return ErrorCategory.TIMEOUT
        case openai.APIConnectionError() | httpx.TransportError() | ConnectionError():
            return ErrorCategory.NETWORK_UNREACHABLE
        case openai.APIStatusError():
            return classify_status(exc.status_code, _openai_body(exc))
        case OSError():
            return ErrorCategory.NETWORK_UNREACHABLE
        case _:
            return classify_message(str(exc))


def to_transcription_error(exc: BaseException) -> TranscriptionError:
    """Turn any raised exception into a TranscriptionError (already-classified ones pass through)."""
    match exc:
        case TranscriptionError():
            return exc
        case openai.APIStatusError():
            return TranscriptionError(classify_exception(exc), status=exc.status_code)
        case _:
            return TranscriptionError(classify_exception(exc))


def _openai_body(exc: "openai.APIStatusError") -> str:
    match exc.body:
        case dict() as body:
            return json.dumps({"error": body.get("error", body)})
        case str() as body:
            return body
        case _:
            return str(exc)
