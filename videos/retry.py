"""Bounded polling with a swappable delay policy."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from django.conf import settings

from .exceptions import PollTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """How many attempts to make and how long to wait between them."""

    max_attempts: int = 20
    delay: float = 1.0
    backoff: float = 1.0
    max_delay: Optional[float] = None

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts_invalid")
        if self.delay < 0:
            raise ValueError("delay_invalid")
        if self.backoff < 1.0:
            raise ValueError("backoff_invalid")

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        return cls(
            max_attempts=settings.UPLOAD_POLL_MAX_ATTEMPTS,
            delay=settings.UPLOAD_POLL_DELAY_SECONDS,
            backoff=settings.UPLOAD_POLL_BACKOFF,
        )

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after ``attempt`` (1-based) before the next one."""

        if attempt <= 0 or self.delay == 0:
            return 0.0
        wait = self.delay * (self.backoff ** (attempt - 1))
        if self.max_delay is not None:
            wait = min(wait, self.max_delay)
        return wait


def retry_until(
    attempt_fn: Callable[[int], Optional[T]],
    policy: RetryPolicy,
    *,
    done: Callable[[Optional[T]], bool] = lambda result: result is not None,
    sleeper: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call ``attempt_fn(attempt)`` until ``done(result)`` holds.

    Waits ``policy.delay_for(attempt)`` between attempts, never after the
    last one. Raises PollTimeoutError once ``policy.max_attempts`` calls
    have all come back not done.
    """
    for attempt in range(1, policy.max_attempts + 1):
        result = attempt_fn(attempt)
        if done(result):
            return result
        if attempt < policy.max_attempts:
            wait = policy.delay_for(attempt)
            if wait > 0:
                sleeper(wait)

    logger.info("Gave up after %d attempt(s)", policy.max_attempts)
    raise PollTimeoutError(policy.max_attempts)
