"""Bounded-attempt retry loop as an explicit state machine.

Each attempt runs under its own timeout and resolves to one tagged outcome:

    Attempting(n) ──▶ Success(value)
                  ├─▶ Retryable(error)  → backoff, then Attempting(n + 1) while n < max
                  └─▶ Terminal(error)   → surfaced immediately

Only ServiceUnavailable, Timeout and NetworkUnreachable are retryable. A
caller can abort mid-loop with an asyncio.Event; it is checked between
attempts and before each backoff sleep.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar, Union

from audioscribe.constants import (
    BACKOFF_BASE,
    BACKOFF_CAP,
    MSG_ATTEMPT,
    MSG_ATTEMPT_FAILED,
    MSG_GIVING_UP,
    MSG_RETRYING,
    RELAY_MAX_ATTEMPTS,
    RELAY_TIMEOUT,
)
from audioscribe.errors import TranscriptionError, to_transcription_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = RELAY_MAX_ATTEMPTS
    attempt_timeout: float = RELAY_TIMEOUT
    backoff_base: float = BACKOFF_BASE
    backoff_cap: float = BACKOFF_CAP

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.attempt_timeout <= 0:
            raise ValueError("attempt_timeout must be > 0")

    def backoff(self, attempt: int) -> float:
        """Delay after a failed attempt n (1-based): min(base * 2**n, cap)."""
        return min(self.backoff_base * (2 ** attempt), self.backoff_cap)


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class Retryable:
    error: TranscriptionError


@dataclass(frozen=True)
class Terminal:
    error: TranscriptionError


AttemptOutcome = Union[Success, Retryable, Terminal]


async def run_attempt(
    operation: Callable[[], Awaitable[T]],
    timeout: float,
) -> AttemptOutcome:
    """Run one attempt; expiry cancels the in-flight call."""
    try:
        return Success(await asyncio.wait_for(operation(), timeout=timeout))
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        error = to_transcription_error(exc)
        if error is not exc:
            error.__cause__ = exc
        match error.retryable:
            case True:
                return Retryable(error)
            case False:
                return Terminal(error)


def _check_cancelled(cancel_event: Optional[asyncio.Event]) -> None:
    match cancel_event:
        case asyncio.Event() if cancel_event.is_set():
            raise asyncio.CancelledError("transcription cancelled by caller")
        case _:
            pass


async def run_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    label: str = "backend",
    cancel_event: Optional[asyncio.Event] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Drive Attempting(1..max) until Success, Terminal, or exhaustion.

    Raises the classified TranscriptionError of the terminal or last attempt.
    """
    attempt = 1
    while True:
        _check_cancelled(cancel_event)
        logger.info(MSG_ATTEMPT, attempt, policy.max_attempts, label)
        outcome = await run_attempt(operation, policy.attempt_timeout)
        match outcome:
            case Success(value=value):
                return value
            case Terminal(error=error):
                logger.error(MSG_ATTEMPT_FAILED, attempt, policy.max_attempts, error.category.value, "terminal")
                raise error
            case Retryable(error=error) if attempt >= policy.max_attempts:
                logger.warning(MSG_ATTEMPT_FAILED, attempt, policy.max_attempts, error.category.value, "retryable")
                logger.error(MSG_GIVING_UP, attempt, error.category.value)
                raise error
            case Retryable(error=error):
                logger.warning(MSG_ATTEMPT_FAILED, attempt, policy.max_attempts, error.category.value, "retryable")
                delay = policy.backoff(attempt)
                _check_cancelled(cancel_event)
                logger.info(MSG_RETRYING, delay)
                await sleep(delay)
                attempt += 1
