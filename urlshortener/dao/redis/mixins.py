"""Redis connection shared by the short URL DAO

`ShortURLRedisDAO` inherits its client and key schema from `RedisClientMixin`.
The client is either built from the `redis_*` parameters, which come from the
AppConfig `redis` section of each Lambda, or passed in ready-made. A PING on
construction makes an unreachable Redis surface as DataStoreError before any
link is read or written.

Example:
    >>> dao = ShortURLRedisDAO(redis_host='cache.internal', prefix='urlshortener:prod')
    >>> dao.keys.link_url_key('q0_Zk')
    'urlshortener:prod:links:q0_Zk:url'
"""

import redis

from urlshortener.dao.redis.redis_key_schema import RedisKeySchema
from urlshortener.dao.redis.helpers import _connection_error


class RedisClientMixin:
    """Redis client and link key schema for `ShortURLRedisDAO`

    Attributes:
        redis (redis.Redis):
            Client every link command goes through.
        keys (RedisKeySchema):
            Builds the `[<prefix>:]links:<shortcode>:url` keys.
    """

    def __init__(
        self,
        redis_host: str = 'localhost',
        redis_port: int = 6379,
        redis_db: int = 0,
        redis_decode_responses: bool = True,
        redis_username: str | None = None,
        redis_password: str | None = None,
        redis_client: redis.Redis | None = None,
        prefix: str | None = None,
    ):
        """Connect to Redis and check it answers PING

        `redis_client` wins over the connection parameters when both are given.

        Args:
            redis_host (str):
                Hostname of the Redis server. Defaults to 'localhost'.

            redis_port (int):
                Redis server port. Defaults to 6379.

            redis_db (int):
                Redis database index. Defaults to 0.

            redis_decode_responses (bool):
                If True, decodes Redis responses. Defaults to True.

            redis_username (str | None):
                Username for Redis authentication (if required).

            redis_password (str | None):
                Password for Redis authentication (if required).

            redis_client (redis.Redis | None):
                Pre-initialized Redis client. If None, a new client is created.

            prefix (str | None):
                Deployment namespace for link keys, e.g. 'urlshortener:prod'.

        Raises:
            DataStoreError:
                If Redis healthcheck fails (connectivity issues).
        """
        if redis_client is None:
            redis_client = redis.Redis(
                host=redis_host,
                port=int(redis_port),
                db=int(redis_db),
                decode_responses=redis_decode_responses,
                username=redis_username,
                password=redis_password,
            )

        self.redis = redis_client
        self.keys = RedisKeySchema(prefix=prefix)

        self._healthcheck()

    def _healthcheck(self, raise_error: bool = True) -> bool:
        """PING Redis to healthcheck connectivity

        Args:
            raise_error (bool):
                If True, raises DataStoreError on failure. Defaults to True.

        Returns:
            bool:
                True if Redis is reachable, False otherwise (only if raise_error=False).

        Raises:
            DataStoreError:
                If Redis connection cannot be established and raise_error=True.
        """
        try:
            self.redis.ping()
        except redis.exceptions.ConnectionError as e:
            if raise_error:
                raise _connection_error(self.redis, ' Check the provided configuration parameters.') from e
            return False
        else:
            return True
