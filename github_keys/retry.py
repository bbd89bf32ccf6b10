"""Retrying remote calls: exponential backoff, with 404 treated as an answer.

Every GitHub lookup goes through :func:`retry_call`. A ``NotFoundError`` is a
definite negative and stops immediately; anything else is considered
transient and retried according to a :class:`RetryPolicy`. The default
policy never gives up, so the outer bound is the operator (or the daemon
supervisor) killing the process.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, TypeVar

from github_keys.errors import NotFoundError, RetryExhaustedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_RAISE: Any = object()


@dataclass(frozen=True)
class RetryPolicy:
    """Backoff schedule and stopping rule for :func:`retry_call`.

    ``max_attempts`` and ``max_elapsed`` (seconds) are both optional; when
    neither is set the call is retried forever.
    """

    initial_interval: float = 0.5
    multiplier: float = 1.5
    max_interval: float = 60.0
    randomization_factor: float = 0.5
    max_attempts: Optional[int] = None
    max_elapsed: Optional[float] = None

    @classmethod
    def fast(cls, max_attempts: Optional[int] = None) -> "RetryPolicy":
        """Zero-delay policy, for tests."""
        return cls(initial_interval=0.0, randomization_factor=0.0, max_attempts=max_attempts)

    def delays(self, rng: Optional[random.Random] = None) -> Iterator[float]:
        """Yield the (jittered) wait before each retry, growing geometrically."""
        rng = rng or random.Random()
        interval = self.initial_interval
        while True:
            if self.randomization_factor:
                delta = self.randomization_factor * interval
                yield rng.uniform(interval - delta, interval + delta)
            else:
                yield interval
            interval = min(interval * self.multiplier, self.max_interval)

    def exhausted(self, attempts: int, elapsed: float) -> bool:
        if self.max_attempts is not None and attempts >= self.max_attempts:
            return True
        if self.max_elapsed is not None and elapsed >= self.max_elapsed:
            return True
        return False


def retry_call(
    fn: Callable[[], T],
    *,
    policy: Optional[RetryPolicy] = None,
    operation: str = "remote call",
    not_found: Any = _RAISE,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> T:
    """Call ``fn()`` until it succeeds.

    Args:
        fn: Zero-argument callable performing a single remote lookup.
        policy: Backoff schedule; defaults to retrying forever.
        operation: Name used in retry log lines.
        not_found: Value returned when ``fn`` raises ``NotFoundError``.
            When omitted the ``NotFoundError`` propagates. Either way it is
            never retried.
        sleep: Blocking wait, injectable for tests.
        clock: Monotonic clock used for ``max_elapsed``.

    Raises:
        RetryExhaustedError: a bounded policy ran out of attempts or time.
    """
    policy = policy or RetryPolicy()
    delays = policy.delays()
    started = clock()
    attempt = 0
    while True:
        attempt += 1
        try:
            return fn()
        except NotFoundError:
            if not_found is _RAISE:
                raise
            logger.debug("%s: not found", operation)
            return not_found
        except Exception as exc:
            if policy.exhausted(attempt, clock() - started):
                raise RetryExhaustedError(operation, attempt, exc) from exc
            delay = next(delays)
            logger.warning(
                "failed to %s, retrying in %.2fs (attempt %d, error: %s)",
                operation, delay, attempt, exc,
            )
            sleep(delay)
