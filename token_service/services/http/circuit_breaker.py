"""
Per-provider circuit breaker.

State machine:
    CLOSED --(failure_count >= threshold)--> OPEN
    OPEN --(reset_timeout elapsed since last failure)--> HALF_OPEN
    HALF_OPEN --(trial success)--> CLOSED
    HALF_OPEN --(trial failure)--> OPEN
    HALF_OPEN --(reset_timeout elapsed since the trial began)--> new trial

Only the owning RequestExecutor records outcomes. Access is assumed to
come from a single event loop, so there is no locking.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

DEFAULT_FAILURE_THRESHOLD = 5
DEFAULT_RESET_TIMEOUT = 30.0


class BreakerStatus(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass(frozen=True)
class CircuitState:
    """Snapshot of a breaker's counters."""

    failure_count: int
    last_failure_at: float
    status: BreakerStatus

    @property
    def is_open(self) -> bool:
        return self.status is BreakerStatus.OPEN


class CircuitBreaker:
    """
    Consecutive-failure circuit breaker with automatic half-open recovery.

    Args:
        threshold: Failures that open the circuit
        reset_timeout: Seconds after the last failure before a trial call
        clock: Monotonic time source in seconds (injectable for tests)
    """

    def __init__(
        self,
        threshold: int = DEFAULT_FAILURE_THRESHOLD,
        reset_timeout: float = DEFAULT_RESET_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if threshold <= 0:
            raise ValueError("threshold must be positive")
        if reset_timeout < 0:
            raise ValueError("reset_timeout must be >= 0")
        self._threshold = threshold
        self._reset_timeout = reset_timeout
        self._clock = clock
        self._failures = 0
        self._last_failure_at = 0.0
        self._trial_started_at = 0.0
        self._status = BreakerStatus.CLOSED

    @property
    def threshold(self) -> int:
        return self._threshold

    @property
    def reset_timeout(self) -> float:
        return self._reset_timeout

    @property
    def status(self) -> BreakerStatus:
        return self._status

    @property
    def state(self) -> CircuitState:
        return CircuitState(
            failure_count=self._failures,
            last_failure_at=self._last_failure_at,
            status=self._status,
        )

    def retry_in(self) -> float:
        """Seconds until an open circuit allows a trial call (0 if not open)."""
        if self._status is not BreakerStatus.OPEN:
            return 0.0
        elapsed = self._clock() - self._last_failure_at
        return max(self._reset_timeout - elapsed, 0.0)

    def can_request(self) -> bool:
        """
        Check whether a call may go out now.

        An open circuit whose reset timeout has elapsed moves to
        HALF_OPEN and grants exactly one trial call; further calls are
        refused until that trial is recorded. A trial that never reports
        back is replaced by a new one once reset_timeout has passed.
        """
        if self._status is BreakerStatus.CLOSED:
            return True

        now = self._clock()
        if self._status is BreakerStatus.HALF_OPEN:
            if now - self._trial_started_at > self._reset_timeout:
                self._trial_started_at = now
                return True
            return False

        if now - self._last_failure_at > self._reset_timeout:
            self._status = BreakerStatus.HALF_OPEN
            self._trial_started_at = now
            return True

        return False

    def record_success(self) -> None:
        self._failures = 0
        self._status = BreakerStatus.CLOSED

    def record_failure(self) -> bool:
        """
        Count a failed attempt.

        Returns:
            True if the circuit is open after this failure
        """
        self._failures += 1
        self._last_failure_at = self._clock()

        if self._status is BreakerStatus.HALF_OPEN or self._failures >= self._threshold:
            self._status = BreakerStatus.OPEN

        return self._status is BreakerStatus.OPEN

    def reset(self) -> None:
        """Force the breaker back to CLOSED with zero failures."""
        self._failures = 0
        self._last_failure_at = 0.0
        self._trial_started_at = 0.0
        self._status = BreakerStatus.CLOSED
