"""Retry wrapper for document service calls.

Rate limits and transient server failures are retried with exponential
backoff and jitter; every other error propagates immediately. Waiting
uses ``asyncio.sleep``, so cancelling the task aborts the backoff.

A batchUpdate that failed with a 5xx may still have been applied
server-side; the retry resends the same batch and does not try to
detect that.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception,
    stop_after_attempt,
)

from extrased.transport import APIError, TransientServiceError, TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_retryable(exc: BaseException) -> bool:
    """True for rate limiting and transient server errors.

    The transport already classifies 429, 5xx and the 403 quota
    errors as :class:`TransientServiceError`.
    """
    return isinstance(exc, TransientServiceError)


@dataclass
class RetryPolicy:
    """Exponential backoff settings.

    The delay before retry ``n`` (1-based) is
    ``min(base_delay * 2 ** (n - 1), max_delay)``, of which a random
    half is kept as jitter.
    """

    max_retries: int = 5
    base_delay: float = 1.0
    max_delay: float = 30.0
    sleep: Callable[[float], Awaitable[Any]] = field(default=asyncio.sleep)

    def delay(self, retry_number: int) -> float:
        """Backoff ceiling before the ``retry_number``-th retry."""
        return min(self.base_delay * 2 ** (retry_number - 1), self.max_delay)

    def wait(self, retry_state: RetryCallState) -> float:
        delay = self.delay(retry_state.attempt_number)
        return delay / 2 + random.uniform(0, delay / 2)


def _log_retry(retry_state: RetryCallState) -> None:
    outcome = retry_state.outcome
    error = outcome.exception() if outcome is not None else None
    sleep = retry_state.next_action.sleep if retry_state.next_action else 0.0
    logger.warning(
        "Retryable error (attempt %d), retrying in %.1fs: %s",
        retry_state.attempt_number,
        sleep,
        error,
    )


async def with_retry(
    func: Callable[[], Awaitable[T]], policy: RetryPolicy | None = None
) -> T:
    """Await ``func()``, retrying transient failures per ``policy``.

    Raises:
        TransientServiceError: When the retries are exhausted; the
            message reads "after N retries: <last error>"
        TransportError: Any non-retryable error, unchanged
    """
    policy = policy or RetryPolicy()
    try:
        async for attempt in AsyncRetrying(
            retry=retry_if_exception(is_retryable),
            stop=stop_after_attempt(policy.max_retries + 1),
            wait=policy.wait,
            sleep=policy.sleep,
            before_sleep=_log_retry,
        ):
            with attempt:
                return await func()
    except RetryError as e:
        last = e.last_attempt.exception()
        message = f"after {policy.max_retries} retries: {last}"
        if isinstance(last, APIError):
            raise TransientServiceError(message, last.status_code) from last
        raise TransportError(message) from last
    raise AssertionError("unreachable")
