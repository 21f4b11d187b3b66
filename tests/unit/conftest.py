from unittest.mock import MagicMock

import pytest
import redis


@pytest.fixture
def app_prefix() -> str:
    """Key namespace shared by every Redis-backed DAO under test."""
    return 'testapp:test'


@pytest.fixture
def redis_client() -> redis.Redis:
    """Mock Redis client which doubles as its own MULTI/EXEC pipeline

    `client.pipeline()` returns the client itself, so commands queued in a
    transaction are asserted on the same mock as direct commands, and the test
    decides what `execute()` returns.
    """
    client = MagicMock(spec=redis.client.Pipeline)
    client.connection_pool = MagicMock(
        spec=redis.ConnectionPool,
        connection_kwargs={'host': 'redis.test', 'port': 6379, 'db': 0},
    )
    client.pipeline.return_value = client
    client.__enter__.return_value = client
    client.__exit__.return_value = None

    # Empty keyspace
    client.exists.return_value = False
    client.get.return_value = None
    client.hgetall.return_value = {}
    # Lua scripts report success unless a test says otherwise
    client.eval.return_value = 1
    return client
