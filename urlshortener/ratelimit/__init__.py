from urlshortener.ratelimit.token_bucket import TokenBucketLimiter
from urlshortener.ratelimit.registry import RateLimiterRegistry


__all__ = [
    'TokenBucketLimiter',
    'RateLimiterRegistry',
]
