import functools
from typing import TypeVar, Any
from collections.abc import Callable

import redis

from urlshortener.dao.exceptions import DataStoreError


__all__ = []

F = TypeVar('F', bound=Callable[..., Any])


def _connection_error(client: redis.Redis, hint: str = '') -> DataStoreError:
    info = client.connection_pool.connection_kwargs
    redis_host = info.get('host')
    redis_port = info.get('port')
    redis_db = info.get('db')
    return DataStoreError(f"Can't connect to Redis at {redis_host}:{redis_port}/{redis_db}.{hint}")


def handle_redis_connection_error(method: F) -> F:
    """Wrap Redis-interacting DAO methods to handle connection errors

    Args:
        method (Callable[..., Any]):
            DAO method performing Redis operations which may raise redis.exceptions.ConnectionError.

    Returns:
        Callable[..., Any]:
            Wrapped method which raises DataStoreError on connectivity issues with Redis.

    Example:
        >>> @handle_redis_connection_error
        ... def exists(self, shortcode):
        ...     return bool(self.redis.exists(shortcode))
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            raise _connection_error(self.redis) from e

    return wrapper
