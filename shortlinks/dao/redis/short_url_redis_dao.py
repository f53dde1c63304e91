"""Data Access Object (DAO) implementation for managing shortened URLs in Redis

This module provides a Redis-based implementation of ShortURLBaseDAO.

Responsibilities:
    - Check, conditionally insert and retrieve short URLs from Redis;
    - Delegate expiry of mappings to Redis key TTLs;
    - Raise appropriate DAO exceptions on misses and Redis failures.

Classes:
    ShortURLRedisDAO:
        DAO for storing and retrieving ShortURLModel in a Redis datastore.

Example:
    >>> from shortlinks.models import ShortURLModel
    >>> from shortlinks.dao.redis import ShortURLRedisDAO

    >>> dao = ShortURLRedisDAO(prefix="shortlinks:dev")

    >>> short_url = ShortURLModel(target="https://example.com/page", shortcode="aB3dE6gH")
    >>> dao.set_if_absent(short_url, ttl_seconds=3600)
    True

    >>> retrieved = dao.get("aB3dE6gH")
    >>> retrieved.target
    'https://example.com/page'
    >>> retrieved.expires_at
    <datetime>
"""

from datetime import datetime, timedelta, UTC

from beartype import beartype

from shortlinks.models import ShortURLModel
from shortlinks.dao.base import ShortURLBaseDAO
from shortlinks.dao.redis.mixins import RedisClientMixin
from shortlinks.dao.redis.helpers import handle_redis_connection_error
from shortlinks.dao.exceptions import ShortURLNotFoundError


class ShortURLRedisDAO(RedisClientMixin, ShortURLBaseDAO):
    """Redis-based Data Access Object (DAO) for managing short URL mappings

    This class implements the ShortURLBaseDAO interface using Redis as a data store.

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.

    Methods:
        exists(shortcode: str, **kwargs) -> bool:
            EXISTS on the link URL key.

        set_if_absent(short_url: ShortURLModel, ttl_seconds: int, **kwargs) -> bool:
            SET NX EX on the link URL key. Returns False when the key is taken.

        get(shortcode: str, **kwargs) -> ShortURLModel:
            GET + TTL of the link URL key in a single transaction.
            Raises ShortURLNotFoundError when the shortcode doesn't exist.

        ping(**kwargs) -> bool:
            PING Redis.

        All methods raise DataStoreError on Redis failures.
    """

    @handle_redis_connection_error
    @beartype
    def exists(self, shortcode: str, **kwargs) -> bool:
        """Check whether a short code currently maps to a URL

        Args:
            shortcode (str):
                The shortcode identifier to look up.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            bool: True if the link URL key exists.

        Example:
            >>> dao.exists('aB3dE6gH')
            False
        """
        return bool(self.redis.exists(self.keys.link_url_key(shortcode)))

    @handle_redis_connection_error
    @beartype
    def set_if_absent(self, short_url: ShortURLModel, ttl_seconds: int, **kwargs) -> bool:
        """Insert a short URL mapping into Redis only if the shortcode is free

        The check and the write are a single SET command with the NX flag, so
        Redis guarantees that at most one concurrent writer succeeds for a key:

            (lambda 1): SET <app>:links:<shortcode>:url <url 1> NX EX <ttl>  => OK
            (lambda 2): SET <app>:links:<shortcode>:url <url 2> NX EX <ttl>  => nil

        The key's TTL is set by the same command, so a mapping never exists
        without an expiry.

        Args:
            short_url (ShortURLModel):
                ShortURLModel instance representing the shortened URL mapping.
            ttl_seconds (int):
                Time-to-live of the mapping, in seconds.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            bool: True if the mapping was written, False if the shortcode is taken.

        Raises:
            ValueError:
                If ttl_seconds is lower than 1.
            DataStoreError:
                If a Redis issue occurs. The mapping may or may not have been
                written; it expires on its own either way.

        Example:
            >>> dao.set_if_absent(ShortURLModel(target='https://example.com', shortcode='aB3dE6gH'), 3600)
            True
        """
        if ttl_seconds < 1:
            raise ValueError(f'TTL must be at least 1 second (given value: {ttl_seconds}).')

        link_url_key = self.keys.link_url_key(short_url.shortcode)
        return bool(self.redis.set(link_url_key, short_url.target, nx=True, ex=ttl_seconds))

    @handle_redis_connection_error
    @beartype
    def get(self, shortcode: str, **kwargs) -> ShortURLModel:
        """Retrieve a stored short URL mapping by shortcode

        Fetches the original URL and its remaining TTL in a single Redis
        transaction, so both values describe the same key.

        Args:
            shortcode (str):
                The shortcode identifier for the shortened URL.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            ShortURLModel:
                The retrieved ShortURLModel instance if found.

        Raises:
            ShortURLNotFoundError:
                If the short URL does not exist (or already expired) in Redis.
            DataStoreError:
                If Redis issues occur.

        Example:
            >>> dao.get('aB3dE6gH')
            ShortURLModel(target='https://example.com', shortcode='aB3dE6gH', expires_at=...)
        """
        link_url_key = self.keys.link_url_key(shortcode)

        with self.redis.pipeline(transaction=True) as pipe:
            pipe.get(link_url_key)
            pipe.ttl(link_url_key)
            original_url, ttl = pipe.execute()

        if original_url is None:
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")

        # TTL is -1 for keys without an expiry (never written by this DAO)
        expires_at = datetime.now(UTC) + timedelta(seconds=ttl) if ttl is not None and ttl >= 0 else None
        return ShortURLModel(target=original_url, shortcode=shortcode, expires_at=expires_at)

    @handle_redis_connection_error
    def ping(self, **kwargs) -> bool:
        """PING Redis

        Returns:
            bool: True if Redis answered.

        Raises:
            DataStoreError:
                If Redis is unreachable.
        """
        return self._healthcheck(raise_error=True)
