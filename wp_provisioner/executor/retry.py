# wp_provisioner/executor/retry.py
"""Bounded retries with exponential backoff for transient failures."""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Tuple, Type, TypeVar

from wp_provisioner.core.errors import TransientError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry policy for network calls.

    Delays grow by a factor of 3 (2s, 6s, 18s with the defaults).
    """
    attempts: int = 3
    backoff_seconds: float = 2.0
    factor: float = 3.0

    def delay(self, attempt: int) -> float:
        """Seconds to wait after the given failed attempt (1-based)."""
        return self.backoff_seconds * (self.factor ** (attempt - 1))


def call_with_retries(
    fn: Callable[[], T],
    policy: RetryPolicy,
    *,
    what: str,
    retry_on: Tuple[Type[BaseException], ...] = (TransientError,),
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call fn until it succeeds or the policy runs out of attempts.

    Args:
        fn: Zero-argument callable
        policy: Attempts and backoff
        what: Label for log lines
        retry_on: Exception types considered transient
        sleep: Injected for tests

    Returns:
        Whatever fn returns

    Raises:
        The last transient error once attempts are exhausted; anything
        else immediately.
    """
    attempts = max(1, policy.attempts)

    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except retry_on as e:
            if attempt >= attempts:
                logger.error(f"[retry] {what} failed after {attempt} attempt(s): {e}")
                raise

            delay = policy.delay(attempt)
            logger.warning(
                f"[retry] {what} failed (attempt {attempt}/{attempts}): {e}; "
                f"retrying in {delay:.0f}s"
            )
            sleep(delay)

    raise AssertionError("unreachable")
