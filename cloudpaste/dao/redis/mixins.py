"""Shared Redis client setup for every Redis-backed store and the event channel

All five stores and the event stream may live on one Redis deployment or on
separate ones; each DAO receives its own connection parameters from its
configuration section (see `redis_kwargs()`), so the topology is purely a
deployment decision.

Classes:
    RedisClientMixin:
        Build (or adopt) a Redis client, attach a key schema and verify
        connectivity at construction time.

Example:
    >>> class AnalyticsRedisDAO(RedisClientMixin, AnalyticsBaseDAO):
    ...     pass
    ...
    >>> dao = AnalyticsRedisDAO(redis_host='redis.internal', redis_ssl=True, prefix='cloudpaste:prod')
    >>> dao.keys.analytics_views_key('a1b2c3d4')
    'cloudpaste:prod:analytics:a1b2c3d4:views'
"""

import redis

from cloudpaste.dao.redis.redis_key_schema import RedisKeySchema
from cloudpaste.dao.exceptions import DataStoreError


class RedisClientMixin:
    """Redis client and key schema for Redis-backed DAOs

    Attributes:
        key_schema (type):
            Key schema class instantiated with the DAO's prefix. Subclasses
            living in another keyspace (e.g. the cache) override it.
        redis (redis.Redis):
            Client used by the DAO's methods.
        keys:
            Key schema instance.

    Args:
        redis_host, redis_port, redis_db, redis_username, redis_password:
            Connection parameters. Port and db may be given as strings
            (YAML/JSON documents) and are coerced to integers.
        redis_ssl (bool):
            Use TLS (ElastiCache in-transit encryption).
        redis_socket_timeout (float | None):
            Per-command socket timeout in seconds. Must exceed the longest
            blocking read of an event consumer.
        redis_socket_connect_timeout (float | None):
            Connection timeout in seconds.
        redis_decode_responses (bool):
            Decode replies to str. Every DAO relies on this.
        redis_client (redis.Redis | None):
            Pre-built client; connection parameters are ignored when given.
        prefix (str | None):
            Key namespace, usually '<APP_NAME>:<APP_ENV>'.

    Raises:
        DataStoreError:
            If Redis doesn't answer PING.
    """

    key_schema: type = RedisKeySchema

    def __init__(
        self,
        redis_host: str = 'localhost',
        redis_port: int | str = 6379,
        redis_db: int | str = 0,
        redis_username: str | None = None,
        redis_password: str | None = None,
        redis_ssl: bool = False,
        redis_socket_timeout: float | None = None,
        redis_socket_connect_timeout: float | None = None,
        redis_decode_responses: bool = True,
        redis_client: redis.Redis | None = None,
        prefix: str | None = None,
    ):
        if redis_client is None:
            redis_client = redis.Redis(
                host=redis_host,
                port=int(redis_port),
                db=int(redis_db),
                username=redis_username,
                password=redis_password,
                ssl=bool(redis_ssl),
                socket_timeout=redis_socket_timeout,
                socket_connect_timeout=redis_socket_connect_timeout,
                decode_responses=redis_decode_responses,
            )

        self.redis = redis_client
        self.keys = self.key_schema(prefix=prefix)

        self._healthcheck()

    @property
    def redis_location(self) -> str:
        """'host:port/db' of the client, for error messages"""
        info = self.redis.connection_pool.connection_kwargs
        return f'{info.get("host")}:{info.get("port")}/{info.get("db")}'

    def _healthcheck(self, raise_error: bool = True) -> bool:
        """PING Redis

        Returns:
            bool: True if Redis answered, False if not and `raise_error` is False.

        Raises:
            DataStoreError:
                If Redis is unreachable or times out and `raise_error` is True.
        """
        try:
            self.redis.ping()
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            if not raise_error:
                return False
            raise DataStoreError(f"Can't connect to Redis at {self.redis_location}. Check the provided configuration parameters.") from e
        return True
