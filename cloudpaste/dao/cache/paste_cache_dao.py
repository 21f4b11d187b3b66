"""DAO for caching pastes in Redis

Pastes are cached as compact JSON documents under '<cache prefix>:pastes:<url>'
with a per-entry TTL chosen by the caller.

Classes:
    PasteCacheDAO:
        Concrete cache DAO backed by Redis. Uses RedisClientMixin to initialize
        the Redis client and assigns CacheKeySchema for key generation.

Example:
    >>> dao = PasteCacheDAO(prefix="cloudpaste:dev")
    >>> dao.set(paste, ttl=600)
    >>> dao.get(paste.url) == paste
    True
    >>> dao.delete(paste.url)
    True
    >>> dao.get(paste.url)
    Traceback (most recent call last):
        ...
    cloudpaste.dao.exceptions.CacheMissError: Paste 'a1b2c3d4' not found in cache.
"""

import json

import redis
from beartype import beartype

from cloudpaste.models import Paste
from cloudpaste.dao.base import PasteCacheBaseDAO
from cloudpaste.dao.cache.cache_key_schema import CacheKeySchema
from cloudpaste.dao.exceptions import CacheMissError, CachePutError
from cloudpaste.dao.redis.mixins import RedisClientMixin
from cloudpaste.dao.redis.helpers import handle_redis_connection_error


class PasteCacheDAO(RedisClientMixin, PasteCacheBaseDAO):
    """Redis-backed paste cache

    Attributes (via mixins):
        redis (redis.Redis):
            Redis client used to communicate with the cache.
        keys (CacheKeySchema):
            Key schema helper for generating namespaced cache keys.
    """

    key_schema = CacheKeySchema

    @handle_redis_connection_error
    @beartype
    def get(self, url: str, **kwargs) -> Paste:
        """Retrieve a cached paste

        Raises:
            CacheMissError:
                If the paste is not cached (or the cached document is unreadable).
            DataStoreError:
                If a Redis connectivity issue occurs (handled by decorator).
        """
        blob = self.redis.get(self.keys.paste_key(url))

        # CACHE MISS
        if blob is None:
            raise CacheMissError(f"Paste '{url}' not found in cache.")

        # CACHE HIT: load paste from its JSON document
        try:
            return Paste.from_dict(json.loads(blob))
        except (ValueError, KeyError, TypeError) as e:
            raise CacheMissError(f"Cached paste '{url}' is malformed.") from e

    @beartype
    def set(self, paste: Paste, ttl: int, **kwargs) -> None:
        """Cache a paste for `ttl` seconds

        Raises:
            CachePutError:
                If the Redis write fails due to connectivity or other Redis errors.
        """
        document = json.dumps(paste.to_dict(), separators=(',', ':'), ensure_ascii=False)
        try:
            self.redis.set(self.keys.paste_key(paste.url), document, ex=ttl)
        except redis.exceptions.RedisError as e:
            raise CachePutError(f"Failed to write paste '{paste.url}' to cache.") from e

    @handle_redis_connection_error
    @beartype
    def delete(self, url: str, **kwargs) -> bool:
        return bool(self.redis.delete(self.keys.paste_key(url)))
