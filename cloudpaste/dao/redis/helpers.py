import functools
from typing import Any
from collections.abc import Callable

import redis

from cloudpaste.types import RedisConfig
from cloudpaste.dao.exceptions import DataStoreError


__all__ = []

# Store section keys passed through to RedisClientMixin (as 'redis_<key>')
CONNECTION_KEYS = frozenset(
    {
        'host',
        'port',
        'db',
        'username',
        'password',
        'ssl',
        'socket_timeout',
        'socket_connect_timeout',
        'decode_responses',
    }
)


def handle_redis_connection_error[F: Callable[..., Any]](method: F) -> F:
    """Turn Redis connectivity failures raised by a DAO method into DataStoreError

    Only connection errors and timeouts are translated. Any other Redis error
    (e.g. WRONGTYPE) is a bug and propagates unchanged.

    Example:
        >>> @handle_redis_connection_error
        ... def views(self, url):
        ...     return self.redis.get(self.keys.analytics_views_key(url))
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            raise DataStoreError(f"Can't connect to Redis at {self.redis_location}.") from e

    return wrapper


def redis_kwargs(config: RedisConfig | None) -> dict[str, Any]:
    """Translate a store section of the configuration into RedisClientMixin keyword arguments

    Store-specific tunables (e.g. a cache 'ttl' or an events 'group') are dropped.

    Example:
        >>> redis_kwargs({'host': 'redis.internal', 'port': 6379, 'db': 2, 'ttl': 3600})
        {'redis_host': 'redis.internal', 'redis_port': 6379, 'redis_db': 2}
    """
    return {f'redis_{key}': value for key, value in (config or {}).items() if key in CONNECTION_KEYS}
