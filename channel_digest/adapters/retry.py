"""Bounded retry with exponential backoff for transient adapter failures."""

import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from channel_digest.logging import get_logger

from .exceptions import AdapterError

T = TypeVar("T")

logger = get_logger(__name__, component="adapter")


@dataclass(frozen=True)
class RetryPolicy:
    """How often and how patiently a failed call is repeated.

    Attributes:
        max_retries: Retries after the first attempt (0 = no retries)
        initial_delay: Delay before the first retry in seconds
        backoff_multiplier: Factor applied to the delay after each retry
        max_delay: Upper bound for a single delay in seconds
    """

    max_retries: int = 2
    initial_delay: float = 1.0
    backoff_multiplier: float = 2.0
    max_delay: float = 30.0

    def delays(self):
        """Yield the delay before each retry."""
        delay = self.initial_delay
        for _ in range(self.max_retries):
            yield min(delay, self.max_delay)
            delay *= self.backoff_multiplier


NO_RETRY = RetryPolicy(max_retries=0)


def call_with_retry(
    func: Callable[[], T],
    policy: RetryPolicy,
    description: str = "request",
    sleep: Optional[Callable[[float], None]] = None,
) -> T:
    """Call func, retrying transient AdapterErrors according to policy.

    Non-transient errors propagate immediately. When retries are exhausted
    the last error propagates unchanged so callers see the real cause.

    Args:
        func: Zero-argument callable performing one attempt
        policy: Retry policy
        description: Label used in log messages
        sleep: Sleep function (injected by tests)

    Returns:
        The value returned by the first successful attempt

    Raises:
        AdapterError: From the last attempt
    """
    sleep = sleep or time.sleep
    delays = policy.delays()
    attempt = 1

    while True:
        try:
            return func()
        except AdapterError as e:
            if not e.is_transient:
                raise

            delay = next(delays, None)
            if delay is None:
                if policy.max_retries:
                    logger.warning(
                        f"Giving up on {description} after {attempt} attempts: {e}",
                        extra={"event": "adapter.retry.exhausted", "attempts": attempt},
                    )
                raise

            logger.warning(
                f"Transient failure on {description} (attempt {attempt}/{policy.max_retries + 1}), "
                f"retrying in {delay:.1f}s: {e}",
                extra={
                    "event": "adapter.retry.scheduled",
                    "attempt": attempt,
                    "delay_seconds": delay,
                    "error_type": type(e).__name__,
                },
            )
            sleep(delay)
            attempt += 1
