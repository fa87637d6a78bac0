"""Retry policy applied around outbound network calls."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, TypeVar

import httpx
from pydantic import BaseModel, Field
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)
from tenacity.wait import wait_base

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Client errors that will fail the same way on every attempt.
NON_RETRYABLE_STATUS_CODES = frozenset({400, 401, 403, 404, 405, 406, 407, 409, 422})


class RetryPolicy(BaseModel):
    """Bounded exponential-backoff retry settings.

    Attributes
    ----------
    max_attempts:
        Total number of attempts, including the first call.
    initial_delay:
        Delay in seconds before the first retry.
    max_delay:
        Upper bound for a single backoff delay.
    multiplier:
        Growth factor between consecutive delays.
    jitter:
        Maximum random seconds added to each delay.
    """

    max_attempts: int = Field(default=6, ge=1)
    initial_delay: float = Field(default=1.0, ge=0.0)
    max_delay: float = Field(default=60.0, ge=0.0)
    multiplier: float = Field(default=2.0, ge=1.0)
    jitter: float = Field(default=1.0, ge=0.0)

    model_config = {"frozen": True}

    @classmethod
    def no_wait(cls, max_attempts: int = 3) -> RetryPolicy:
        """Policy that retries immediately; handy for tests."""
        return cls(max_attempts=max_attempts, initial_delay=0.0, max_delay=0.0, jitter=0.0)


def is_retryable(exc: BaseException) -> bool:
    """Return ``True`` for transport failures and retryable HTTP statuses."""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code not in NON_RETRYABLE_STATUS_CODES
    return isinstance(exc, httpx.TransportError)


def _log_retry(state: RetryCallState) -> None:
    exc = state.outcome.exception() if state.outcome else None
    logger.warning(
        "Attempt %d failed: %s. Retrying in %.2fs...",
        state.attempt_number,
        exc,
        state.next_action.sleep if state.next_action else 0.0,
    )


def backoff(policy: RetryPolicy) -> wait_base:
    """Exponential delay capped at ``max_delay``, plus up to ``jitter`` random seconds."""
    exponential = wait_exponential(
        multiplier=policy.initial_delay,
        max=policy.max_delay,
        exp_base=policy.multiplier,
    )
    return exponential + wait_random(0, policy.jitter)

async def call_with_retry(
    func: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    retry_on: Callable[[BaseException], bool] = is_retryable,
) -> T:
    """Await ``func()`` under *policy*, re-raising the last error unchanged.

    Parameters
    ----------
    func:
        Zero-argument coroutine factory; called once per attempt.
    policy:
        Attempt limit and backoff shape.
    retry_on:
        Predicate deciding whether an exception is worth another attempt.
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=backoff(policy),
        retry=retry_if_exception(retry_on),
        before_sleep=_log_retry,
        reraise=True,
    )
    async for attempt in retrying:
        with attempt:
            return await func()
    raise AssertionError("unreachable")  # pragma: no cover
