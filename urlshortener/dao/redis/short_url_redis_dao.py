"""Data Access Object (DAO) implementation for managing shortened URLs in Redis

This module provides a Redis-based implementation of ShortURLBaseDAO for CRUD
operations with ShortURLModel instances.

Responsibilities:
    - Insert, retrieve, update and delete short URLs in Redis;
    - Answer existence lookups for the short ID generator;
    - Raise appropriate DAO exceptions on missing or conflicting records.

Classes:
    ShortURLRedisDAO:
        DAO for storing and retrieving ShortURLModel in a Redis datastore.

Example:
    >>> from urlshortener.models import ShortURLModel
    >>> from urlshortener.dao.redis import ShortURLRedisDAO

    >>> dao = ShortURLRedisDAO(prefix="app:dev")
    >>> dao.insert(ShortURLModel(target="https://example.com/page", shortcode="abc12"))
    <ShortURLRedisDAO>
    >>> dao.exists("abc12")
    True
    >>> dao.get("abc12").target
    'https://example.com/page'
"""

from datetime import datetime, timedelta, UTC

from beartype import beartype

from urlshortener.models import ShortURLModel
from urlshortener.dao.base import ShortURLBaseDAO
from urlshortener.dao.redis.mixins import RedisClientMixin
from urlshortener.dao.redis.helpers import handle_redis_connection_error
from urlshortener.dao.exceptions import ShortURLAlreadyExistsError, ShortURLNotFoundError
from urlshortener.constants import TTL


class ShortURLRedisDAO(RedisClientMixin, ShortURLBaseDAO):
    """Redis-based Data Access Object (DAO) for managing short URL mappings

    This class implements the ShortURLBaseDAO interface using Redis as a data store.
    Each mapping is stored as a single string key `<prefix>:links:<shortcode>:url`
    holding the target URL, with a one year TTL.

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.
    """

    @handle_redis_connection_error
    @beartype
    def insert(self, short_url: ShortURLModel, **kwargs) -> 'ShortURLRedisDAO':
        """Insert a short URL mapping into Redis

        Uses SET NX, so the existence check and the write are a single atomic
        command. A concurrent writer that drew the same shortcode loses.

        Args:
            short_url (ShortURLModel):
                ShortURLModel instance representing the shortened URL mapping.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            ShortURLRedisDAO: self (for method chaining)

        Raises:
            ShortURLAlreadyExistsError:
                If a short URL with the same shortcode already exists.
            DataStoreError:
                If a Redis connection issue occurs.
        """
        link_url_key = self.keys.link_url_key(short_url.shortcode)
        created = self.redis.set(link_url_key, short_url.target, nx=True, ex=TTL.ONE_YEAR)
        if not created:
            raise ShortURLAlreadyExistsError(f"Short URL with code '{short_url.shortcode}' already exists.")
        return self

    @handle_redis_connection_error
    @beartype
    def get(self, shortcode: str, **kwargs) -> ShortURLModel:
        """Retrieve a stored short URL mapping by shortcode

        Fetches the target URL and its remaining TTL in a single Redis
        transaction and converts the TTL into an expiry datetime.

        Args:
            shortcode (str):
                The shortcode identifier for the shortened URL.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            ShortURLModel:
                The retrieved ShortURLModel instance.

        Raises:
            ShortURLNotFoundError:
                If the short URL does not exist in Redis.
            DataStoreError:
                If Redis connectivity issues occur.

        Example:
            >>> dao.get('abc12')
            ShortURLModel(target='https://example.com', shortcode='abc12', expires_at=...)
        """
        link_url_key = self.keys.link_url_key(shortcode)

        with self.redis.pipeline(transaction=True) as pipe:
            pipe.get(link_url_key)
            pipe.ttl(link_url_key)
            target_url, ttl = pipe.execute()

        if target_url is None:
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")

        # TTL is -1 for keys without expiry
        expires_at = datetime.now(UTC) + timedelta(seconds=ttl) if ttl is not None and ttl >= 0 else None
        return ShortURLModel(target=target_url, shortcode=shortcode, expires_at=expires_at)

    @handle_redis_connection_error
    @beartype
    def exists(self, shortcode: str, **kwargs) -> bool:
        """Check whether a shortcode is already taken

        Args:
            shortcode (str):
                Shortcode to look up.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            bool: True if the shortcode exists, False otherwise.

        Raises:
            DataStoreError:
                If Redis connectivity issues occur.
        """
        return bool(self.redis.exists(self.keys.link_url_key(shortcode)))

    @handle_redis_connection_error
    @beartype
    def update(self, shortcode: str, target: str, **kwargs) -> 'ShortURLRedisDAO':
        """Point an existing shortcode at a new target URL

        Uses SET XX KEEPTTL: only existing keys are overwritten and their
        original expiry is preserved.

        Raises:
            ShortURLNotFoundError:
                If the short URL does not exist in Redis.
            DataStoreError:
                If Redis connectivity issues occur.
        """
        link_url_key = self.keys.link_url_key(shortcode)
        updated = self.redis.set(link_url_key, target, xx=True, keepttl=True)
        if not updated:
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")
        return self

    @handle_redis_connection_error
    @beartype
    def delete(self, shortcode: str, **kwargs) -> 'ShortURLRedisDAO':
        """Delete a shortcode mapping

        Raises:
            ShortURLNotFoundError:
                If the short URL does not exist in Redis.
            DataStoreError:
                If Redis connectivity issues occur.
        """
        if not self.redis.delete(self.keys.link_url_key(shortcode)):
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")
        return self
