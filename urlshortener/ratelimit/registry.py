"""Per-client registry of token bucket limiters

Classes:
    RateLimiterRegistry:
        Lazily creates one TokenBucketLimiter per client key and shares it
        between all concurrent callers using that key.

Example:
    >>> limiters = RateLimiterRegistry()
    >>> limiter = limiters.get_or_create('203.0.113.7', rate=5.0, burst=10)
    >>> limiter is limiters.get_or_create('203.0.113.7', rate=1.0, burst=1)
    True

NOTE:
    Entries are never evicted and live as long as the process. The number of
    entries grows with the number of distinct keys seen.
"""

import threading
from collections.abc import Callable

from urlshortener.ratelimit.token_bucket import TokenBucketLimiter


class RateLimiterRegistry:
    def __init__(self, factory: Callable[[float, int], TokenBucketLimiter] = TokenBucketLimiter):
        """Create an empty registry

        Args:
            factory (Callable[[float, int], TokenBucketLimiter]):
                Builds a new limiter from (rate, burst). Defaults to TokenBucketLimiter.
        """
        self._factory = factory
        self._limiters: dict[str, TokenBucketLimiter] = {}
        self._lock = threading.Lock()

    def get_or_create(self, key: str, rate: float, burst: int) -> TokenBucketLimiter:
        """Return the limiter for `key`, creating it on first use

        The lookup and the insert run in one critical section, so concurrent
        first-time callers for the same key all receive the same instance.
        `rate` and `burst` only apply when the limiter is created; later calls
        get the existing limiter unchanged.

        Args:
            key (str): client identifier, e.g. the source IP address.
            rate (float): tokens refilled per second.
            burst (int): bucket capacity.

        Returns:
            TokenBucketLimiter: limiter shared by every caller with this key.
        """
        with self._lock:
            limiter = self._limiters.get(key)
            if limiter is None:
                limiter = self._factory(rate, burst)
                self._limiters[key] = limiter
            return limiter

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._limiters

    def __len__(self) -> int:
        with self._lock:
            return len(self._limiters)
