"""Unit tests for RedisClientMixin.

Test coverage includes:
    1. Client construction
       - Builds a client from connection parameters (strings coerced, TLS, timeouts).
       - Adopts a pre-built client.
       - Attaches the class' key schema.
    2. Healthcheck behavior
       - Construction pings Redis.
       - Unreachable or timing-out Redis raises DataStoreError (or returns False on request).
"""

from unittest.mock import MagicMock, patch

import pytest
import redis

from cloudpaste.dao.exceptions import DataStoreError
from cloudpaste.dao.redis.mixins import RedisClientMixin
from cloudpaste.dao.redis.redis_key_schema import RedisKeySchema
from cloudpaste.dao.cache.cache_key_schema import CacheKeySchema


@pytest.fixture
def redis_client():
    client = MagicMock(
        spec=redis.Redis,
        connection_pool=MagicMock(spec=redis.ConnectionPool, connection_kwargs={'host': 'redis', 'port': 6379, 'db': 0}),
    )
    client.ping.return_value = True
    return client


# -------------------------------
# 1. Client construction
# -------------------------------


def test_initialize_without_redis_client():
    """Ensure the mixin builds a client from connection parameters."""
    redis_config = {
        'redis_host': 'redis',
        'redis_port': '6380',
        'redis_db': '2',
        'redis_username': 'default',
        'redis_password': 'password',
        'redis_ssl': True,
        'redis_socket_timeout': 5.0,
    }

    with patch('cloudpaste.dao.redis.mixins.redis.Redis', autospec=True) as redis_mock:
        mixin = RedisClientMixin(**redis_config, prefix='testapp:test')

    # Port and db coming from YAML/JSON strings are coerced to integers
    redis_mock.assert_called_once_with(
        host='redis',
        port=6380,
        db=2,
        username='default',
        password='password',
        ssl=True,
        socket_timeout=5.0,
        socket_connect_timeout=None,
        decode_responses=True,
    )
    assert mixin.redis is redis_mock.return_value


def test_initialize_with_redis_client(redis_client):
    """Ensure the mixin adopts a pre-built client and namespaces its keys."""
    mixin = RedisClientMixin(redis_client=redis_client, prefix='testapp:test')

    assert mixin.redis is redis_client
    assert isinstance(mixin.keys, RedisKeySchema)
    assert mixin.keys.paste_key('abc') == 'testapp:test:pastes:abc'


def test_key_schema_override(redis_client):
    class CacheDAO(RedisClientMixin):
        key_schema = CacheKeySchema

    dao = CacheDAO(redis_client=redis_client, prefix='testapp:test')

    assert dao.keys.paste_key('abc') == 'cache:testapp:test:pastes:abc'


def test_redis_location(redis_client):
    assert RedisClientMixin(redis_client=redis_client).redis_location == 'redis:6379/0'


# -------------------------------
# 2. Healthcheck behavior
# -------------------------------


def test_initialize_with_unreachable_redis():
    """Ensure unreachable Redis raises DataStoreError at construction time."""
    exception_message = "Can't connect to Redis at 203.0.113.1:18000/5. Check the provided configuration parameters."

    with patch('cloudpaste.dao.redis.mixins.redis.Redis', autospec=True) as redis_mock:
        redis_mock_instance = redis_mock.return_value
        redis_mock_instance.ping.side_effect = redis.exceptions.ConnectionError('Connection error')
        redis_mock_instance.connection_pool = MagicMock()
        redis_mock_instance.connection_pool.connection_kwargs = {'host': '203.0.113.1', 'port': 18000, 'db': 5}

        with pytest.raises(DataStoreError, match=exception_message):
            RedisClientMixin(redis_host='203.0.113.1', redis_port=18000, redis_db=5, prefix='testapp:test')


def test_healthcheck_passes(redis_client):
    """Ensure healthcheck passes when Redis responds."""
    mixin = RedisClientMixin(redis_client=redis_client, prefix='testapp:test')
    redis_client.ping.assert_called_once()  # construction performs a healthcheck

    assert mixin._healthcheck() is True
    assert redis_client.ping.call_count == 2


@pytest.mark.parametrize('error', [redis.exceptions.ConnectionError('refused'), redis.exceptions.TimeoutError('timed out')])
def test_healthcheck_fails(redis_client, error):
    """Ensure healthcheck raises DataStoreError when Redis is unreachable."""
    redis_client.ping.side_effect = error

    with pytest.raises(DataStoreError) as exc_info:
        RedisClientMixin(redis_client=redis_client, prefix='testapp:test')

    assert exc_info.value.__cause__ is error


def test_healthcheck_without_raising(redis_client):
    """Ensure healthcheck can report failure without raising."""
    mixin = RedisClientMixin(redis_client=redis_client, prefix='testapp:test')
    redis_client.ping.side_effect = redis.exceptions.ConnectionError('Connection error')

    assert mixin._healthcheck(raise_error=False) is False
