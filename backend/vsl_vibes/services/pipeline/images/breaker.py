"""
Per-provider circuit breaker.

States:
    closed     requests flow; failures are counted
    open       requests are refused until the reset timeout elapses
    half-open  one probe request is allowed; its outcome closes or reopens

The response-code policy is a table so it can be tested on its own:

    2xx             -> close (reset the failure count)
    429             -> open immediately
    401 / 403       -> open immediately (credential will not fix itself mid-run)
    5xx / transport -> count a failure, open at the threshold
"""

import time
from enum import Enum
from typing import Callable, Optional

from ....config.pipeline import BREAKER_FAILURE_THRESHOLD, BREAKER_RESET_TIMEOUT
from ....core.logging import get_logger

logger = get_logger(__name__, component="circuit_breaker")


class BreakerState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half-open"


class BreakerAction(str, Enum):
    CLOSE = "close"
    OPEN = "open"
    COUNT = "count"
    IGNORE = "ignore"


TRANSPORT_FAILURE = None


def policy_for(status_code: Optional[int]) -> BreakerAction:
    """Map a response status (``None`` for a transport failure) to a breaker action."""
    if status_code is TRANSPORT_FAILURE:
        return BreakerAction.COUNT
    if 200 <= status_code < 300:
        return BreakerAction.CLOSE
    if status_code in (401, 403, 429):
        return BreakerAction.OPEN
    if status_code >= 500:
        return BreakerAction.COUNT
    return BreakerAction.IGNORE


class CircuitBreaker:
    """
    Circuit breaker for one provider.

    ``clock`` is injectable so tests can move time without sleeping.
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = BREAKER_FAILURE_THRESHOLD,
        reset_timeout: float = BREAKER_RESET_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        self.clock = clock
        self._state = BreakerState.CLOSED
        self._failures = 0
        self._opened_at: Optional[float] = None

    @property
    def state(self) -> BreakerState:
        if self._state is BreakerState.OPEN and self._opened_at is not None:
            if self.clock() - self._opened_at >= self.reset_timeout:
                self._state = BreakerState.HALF_OPEN
        return self._state

    @property
    def failures(self) -> int:
        return self._failures

    def allow_request(self) -> bool:
        return self.state is not BreakerState.OPEN

    def record(self, status_code: Optional[int]) -> BreakerState:
        """Apply the policy for one outcome and return the resulting state."""
        action = policy_for(status_code)
        state = self.state

        if action is BreakerAction.CLOSE:
            self._close()
        elif action is BreakerAction.OPEN:
            self._open(status_code)
        elif action is BreakerAction.COUNT:
            self._failures += 1
            if state is BreakerState.HALF_OPEN or self._failures >= self.failure_threshold:
                self._open(status_code)
        return self._state

    def record_success(self) -> BreakerState:
        return self.record(200)

    def _open(self, status_code: Optional[int]) -> None:
        if self._state is not BreakerState.OPEN:
            logger.warning("Circuit opened", extra={
                "provider": self.name,
                "status_code": status_code,
                "failures": self._failures,
            })
        self._state = BreakerState.OPEN
        self._opened_at = self.clock()

    def _close(self) -> None:
        if self._state is not BreakerState.CLOSED:
            logger.info("Circuit closed", extra={"provider": self.name})
        self._state = BreakerState.CLOSED
        self._failures = 0
        self._opened_at = None
