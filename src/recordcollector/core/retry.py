# recordcollector/core/retry.py
"""
Page-level retry with linear jittered backoff.

The n-th retry waits ``n * uniform(0, 1) * interval_ms`` milliseconds.
Every exception from the remote client is treated as transient; engine
errors and cancellation are never retried.
"""
from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
)

from recordcollector.core.config import settings
from recordcollector.core.context import CollectContext
from recordcollector.core.errors import (
    CollectorError,
    DeadlineExceededError,
    RetryExhaustedError,
    TransientCallError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    times: int = 10
    interval_ms: float = 1000.0
    jitter: Callable[[], float] = field(default=random.random, repr=False)

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        return cls(times=settings.retry_times, interval_ms=settings.retry_interval_ms)

    def interval(self, attempt: int) -> float:
        """Backoff in seconds after the ``attempt``-th failure."""
        return attempt * self.jitter() * self.interval_ms / 1000.0

    def wait(self, retry_state: RetryCallState) -> float:
        return self.interval(retry_state.attempt_number)


async def call_with_retry(
    call: Callable[[], Awaitable[Any]],
    *,
    policy: RetryPolicy,
    context: CollectContext,
    schema: str,
    method: str,
    params: Mapping[str, Any],
) -> Any:
    """Await ``call()`` until it succeeds or ``policy.times`` attempts failed.

    Raises:
        RetryExhaustedError: every attempt failed; ``last_error`` holds the
            final :class:`TransientCallError`.
        DeadlineExceededError: the context deadline passed during a call or
            would pass during the next backoff.
    """

    async def attempt() -> Any:
        try:
            async with asyncio.timeout_at(context.deadline):
                return await call()
        except CollectorError:
            raise
        except TimeoutError as exc:
            if context.expired():
                raise DeadlineExceededError(schema, params) from exc
            raise TransientCallError(schema, method, params, exc) from exc
        except Exception as exc:
            raise TransientCallError(schema, method, params, exc) from exc

    log_retry = before_sleep_log(logger, logging.WARNING)

    def before_sleep(retry_state: RetryCallState) -> None:
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        remaining = context.remaining()
        if remaining is not None and remaining <= delay:
            raise DeadlineExceededError(schema, params) from retry_state.outcome.exception()
        log_retry(retry_state)

    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.times),
        wait=policy.wait,
        retry=retry_if_exception_type(TransientCallError),
        before_sleep=before_sleep,
    )

    try:
        return await retrying(attempt)
    except RetryError as exc:
        last_error = exc.last_attempt.exception()
        logger.error(
            "Giving up on %s for schema %s after %d attempt(s): %s",
            method,
            schema,
            exc.last_attempt.attempt_number,
            getattr(last_error, "cause", last_error),
        )
        raise RetryExhaustedError(
            schema, method, params, exc.last_attempt.attempt_number, last_error
        ) from last_error
