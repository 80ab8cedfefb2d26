"""In-memory token bucket limiter (per-process, best-effort).

Important:
    State lives in process memory. Every Lambda execution environment enforces
    its own independent limits.
"""

import time
import threading
from collections.abc import Callable


class TokenBucketLimiter:
    """Token bucket holding up to `burst` tokens, refilled at `rate` tokens per second.

    The bucket starts full. Each admitted call consumes one token.

    Example:
        >>> limiter = TokenBucketLimiter(rate=1.0, burst=1)
        >>> limiter.allow()
        True
        >>> limiter.allow()
        False
    """

    def __init__(self, rate: float, burst: int, clock: Callable[[], float] = time.monotonic):
        """Initialize a full token bucket

        Args:
            rate: Tokens refilled per second.
            burst: Bucket capacity (maximum number of tokens).
            clock: Monotonic time source returning seconds.

        Raises:
            ValueError: If rate or burst are invalid.
        """
        if rate < 0:
            raise ValueError('rate must be >= 0')
        if burst < 1:
            raise ValueError('burst must be >= 1')

        self.rate = rate
        self.burst = burst
        self._clock = clock
        self._lock = threading.Lock()
        self._tokens = float(burst)
        self._last_refill = clock()

    def _refill(self, now: float) -> None:
        elapsed = max(0.0, now - self._last_refill)
        self._tokens = min(float(self.burst), self._tokens + elapsed * self.rate)
        self._last_refill = now

    def allow(self) -> bool:
        """Consume one token if available; never blocks

        Returns:
            bool: True if the call is admitted, False otherwise (no token consumed).
        """
        with self._lock:
            self._refill(self._clock())
            if self._tokens >= 1:
                self._tokens -= 1
                return True
            return False

    @property
    def tokens(self) -> float:
        """Tokens currently available (after refill)"""
        with self._lock:
            self._refill(self._clock())
            return self._tokens
