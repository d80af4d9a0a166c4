"""Retry and throttling for provider API calls: backoff policy and per-provider throttle."""

import logging
import random
import threading
import time
from typing import Any, Callable, Dict, Optional

from location_analyzer.core.exceptions import (
    AnalysisCancelledError,
    LocationAnalysisError,
    RateLimitedError,
)

logger = logging.getLogger(__name__)


def check_cancelled(
    cancel: Optional[threading.Event] = None,
    deadline: Optional[float] = None,
) -> None:
    """Raise AnalysisCancelledError if cancelled or past the deadline.

    deadline is an absolute time.monotonic() value.
    """
    if cancel is not None and cancel.is_set():
        raise AnalysisCancelledError("cancelled")
    if deadline is not None and time.monotonic() >= deadline:
        raise AnalysisCancelledError("deadline exceeded")


def interruptible_sleep(
    seconds: float,
    cancel: Optional[threading.Event] = None,
    deadline: Optional[float] = None,
) -> None:
    """Sleep for seconds, waking early on cancellation or at the deadline."""
    check_cancelled(cancel, deadline)
    if seconds <= 0:
        return
    if deadline is not None:
        seconds = min(seconds, max(0.0, deadline - time.monotonic()))
    if cancel is not None:
        cancel.wait(seconds)
    else:
        time.sleep(seconds)
    check_cancelled(cancel, deadline)


def fits_before(seconds: float, deadline: Optional[float] = None) -> bool:
    """Whether a wait of seconds ends before the deadline."""
    return deadline is None or time.monotonic() + seconds <= deadline


class ProviderThrottle:
    """Shared backoff state for one provider endpoint.

    A rate-limit response observed by any request blocks further
    requests to the same endpoint until the advertised reset.

    Thread-safe via threading.Lock.
    """

    def __init__(self, key: str):
        self.key = key
        self._lock = threading.Lock()
        self._blocked_until: float = 0.0

    @property
    def blocked_for(self) -> float:
        """Seconds remaining before requests may be sent again."""
        with self._lock:
            return max(0.0, self._blocked_until - time.monotonic())

    def penalize(self, seconds: float) -> None:
        """Block the endpoint for at least the given number of seconds."""
        if seconds <= 0:
            return
        with self._lock:
            until = time.monotonic() + seconds
            if until > self._blocked_until:
                self._blocked_until = until
        logger.info(f"Throttling {self.key} for {seconds:.1f}s")

    def wait(
        self,
        cancel: Optional[threading.Event] = None,
        deadline: Optional[float] = None,
    ) -> float:
        """
        Block until the endpoint is open. Returns seconds waited.

        Raises RateLimitedError without waiting when the block outlasts
        the deadline.
        """
        check_cancelled(cancel, deadline)
        delay = self.blocked_for
        if delay > 0 and not fits_before(delay, deadline):
            raise RateLimitedError(
                f"{self.key} is rate limited for another {delay:.1f}s",
                retry_after=delay,
                details={"endpoint": self.key},
            )
        if delay > 0:
            logger.info(f"Waiting {delay:.1f}s for {self.key} rate limit to reset")
        interruptible_sleep(delay, cancel, deadline)
        return delay


class ThrottleBook:
    """Per-endpoint ProviderThrottle instances, created on first use."""

    def __init__(self):
        self._lock = threading.Lock()
        self._throttles: Dict[str, ProviderThrottle] = {}

    def get(self, key: str) -> ProviderThrottle:
        with self._lock:
            throttle = self._throttles.get(key)
            if throttle is None:
                throttle = ProviderThrottle(key)
                self._throttles[key] = throttle
            return throttle

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._throttles


class RetryPolicy:
    """Bounded retries with exponential backoff for retryable errors.

    Backoff schedule: initial_backoff * 2^attempt with +/-25% jitter,
    capped at max_backoff. A rate limit carrying retry_after waits that
    long instead (also capped). Non-retryable errors propagate at once.
    """

    def __init__(self, max_attempts: int = 3, initial_backoff: float = 1.0, max_backoff: float = 30.0):
        self.max_attempts = max(1, max_attempts)
        self.initial_backoff = initial_backoff
        self.max_backoff = max_backoff

    def backoff(self, attempt: int, error: LocationAnalysisError) -> float:
        """Seconds to wait before the attempt following `attempt`."""
        if isinstance(error, RateLimitedError) and error.retry_after is not None:
            return min(self.max_backoff, max(0.0, error.retry_after))
        wait = self.initial_backoff * (2 ** attempt)
        jitter = wait * 0.25 * (2 * random.random() - 1)
        return min(self.max_backoff, max(0.0, wait + jitter))

    def execute(
        self,
        fn: Callable[[], Any],
        cancel: Optional[threading.Event] = None,
        deadline: Optional[float] = None,
    ) -> Any:
        """Call fn, retrying rate-limit and network failures."""
        for attempt in range(self.max_attempts):
            check_cancelled(cancel, deadline)
            try:
                return fn()
            except LocationAnalysisError as e:
                if not e.retryable or attempt + 1 >= self.max_attempts:
                    raise
                wait = self.backoff(attempt, e)
                if not fits_before(wait, deadline):
                    logger.debug(f"Retry in {wait:.1f}s would pass the deadline, giving up")
                    raise
                logger.warning(
                    f"{e.kind.value} error, retry {attempt + 1}/{self.max_attempts - 1} "
                    f"in {wait:.1f}s: {e}"
                )
                interruptible_sleep(wait, cancel, deadline)
