"""Unit tests for PasteRedisDAO and PasteMirrorRedisDAO

Test coverage includes:

1. Insertion behavior
   - Stores a paste as a single hash.
   - A single Lua script checks for and writes the hash; taken urls raise PasteAlreadyExistsError.
   - Invalid types raise BeartypeCallHintParamViolation.

2. Retrieval behavior
   - Rebuilds Paste objects from hashes (burned pastes included).
   - Missing (or stub) hashes raise PasteNotFoundError.

3. Deletion behavior
   - Deleting a missing paste is a success (False), never an error.

4. Mark-read behavior
   - One script decides the single winner.
   - Missing (or concurrently deleted) pastes raise PasteNotFoundError without recreating the key.

5. Counter operations

6. Mirror keyspace and connectivity errors
"""

from datetime import datetime, UTC

import pytest
import redis
from beartype.roar import BeartypeCallHintParamViolation
from freezegun import freeze_time

from cloudpaste.models import Paste, ExpirationPolicy, PolicyType
from cloudpaste.dao.exceptions import DataStoreError, PasteAlreadyExistsError, PasteNotFoundError
from cloudpaste.dao.redis import PasteRedisDAO, PasteMirrorRedisDAO
from cloudpaste.dao.redis.paste_redis_dao import INSERT_IF_ABSENT, MARK_READ_IF_UNREAD


CREATED_AT = datetime(2025, 10, 15, 12, 0, tzinfo=UTC)


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def dao(redis_client, app_prefix):
    return PasteRedisDAO(redis_client=redis_client, prefix=app_prefix)


@pytest.fixture
def mirror_dao(redis_client, app_prefix):
    return PasteMirrorRedisDAO(redis_client=redis_client, prefix=app_prefix)


@pytest.fixture
def paste():
    return Paste(
        url='a1b2c3d4',
        content='hello world',
        created_at=CREATED_AT,
        expiration_policy=ExpirationPolicy.timed('10minutes'),
    )


# -------------------------------
# 1. Insertion behavior
# -------------------------------


def test_insert_paste(dao, redis_client, paste):
    assert dao.insert(paste) is dao

    redis_client.eval.assert_called_once_with(
        INSERT_IF_ABSENT,
        1,
        'testapp:test:pastes:a1b2c3d4',
        'url', 'a1b2c3d4',
        'content', 'hello world',
        'created_at', '2025-10-15T12:00:00+00:00',
        'policy_type', 'TIMED',
        'policy_duration', '10minutes',
        'view_count', 0,
    )
    redis_client.hset.assert_not_called()


def test_insert_existing_paste(dao, redis_client, paste):
    redis_client.eval.return_value = 0

    with pytest.raises(PasteAlreadyExistsError):
        dao.insert(paste)


@pytest.mark.parametrize('invalid', [None, 'a1b2c3d4', {'url': 'a1b2c3d4'}])
def test_insert_invalid_type(dao, invalid):
    with pytest.raises(BeartypeCallHintParamViolation):
        dao.insert(invalid)


# -------------------------------
# 2. Retrieval behavior
# -------------------------------


def test_get_paste(dao, redis_client, paste):
    redis_client.hgetall.return_value = {
        'url': 'a1b2c3d4',
        'content': 'hello world',
        'created_at': '2025-10-15T12:00:00+00:00',
        'policy_type': 'TIMED',
        'policy_duration': '10minutes',
        'view_count': '0',
    }

    assert dao.get('a1b2c3d4') == paste
    redis_client.hgetall.assert_called_once_with('testapp:test:pastes:a1b2c3d4')


def test_get_burned_paste(dao, redis_client):
    redis_client.hgetall.return_value = {
        'url': 'a1b2c3d4',
        'content': 'top secret',
        'created_at': '2025-10-15T12:00:00+00:00',
        'policy_type': 'BURN_AFTER_READ',
        'policy_duration': '',
        'view_count': '1',
        'read_at': '2025-10-15T12:05:00+00:00',
    }

    paste = dao.get('a1b2c3d4')

    assert paste.expiration_policy == ExpirationPolicy(type=PolicyType.BURN_AFTER_READ, is_read=True)
    assert paste.view_count == 1


@pytest.mark.parametrize('mapping', [{}, {'read_at': '2025-10-15T12:05:00+00:00'}])
def test_get_missing_paste(dao, redis_client, mapping):
    redis_client.hgetall.return_value = mapping

    with pytest.raises(PasteNotFoundError):
        dao.get('a1b2c3d4')


def test_get_invalid_type(dao):
    with pytest.raises(BeartypeCallHintParamViolation):
        dao.get(12345)


# -------------------------------
# 3. Deletion behavior
# -------------------------------


@pytest.mark.parametrize('deleted, expected', [(1, True), (0, False)])
def test_delete_paste(dao, redis_client, deleted, expected):
    redis_client.delete.return_value = deleted

    assert dao.delete('a1b2c3d4') is expected
    redis_client.delete.assert_called_once_with('testapp:test:pastes:a1b2c3d4')


# -------------------------------
# 4. Mark-read behavior
# -------------------------------


@freeze_time('2025-10-15 12:05:00')
@pytest.mark.parametrize('marked, expected', [(1, True), (0, False)])
def test_mark_read(dao, redis_client, marked, expected):
    redis_client.eval.return_value = marked

    assert dao.mark_read('a1b2c3d4') is expected
    redis_client.eval.assert_called_once_with(MARK_READ_IF_UNREAD, 1, 'testapp:test:pastes:a1b2c3d4', '2025-10-15T12:05:00+00:00')


def test_mark_read_missing_paste(dao, redis_client):
    redis_client.eval.return_value = -1

    with pytest.raises(PasteNotFoundError):
        dao.mark_read('a1b2c3d4')

    # Existence check and HSETNX happen inside the script, never as separate commands
    redis_client.exists.assert_not_called()
    redis_client.hsetnx.assert_not_called()


# -------------------------------
# 5. Counter operations
# -------------------------------


def test_count_increment(dao, redis_client):
    redis_client.incr.return_value = 5

    assert dao.count(increment=True) == 5
    redis_client.incr.assert_called_once_with('testapp:test:pastes:counter')


@pytest.mark.parametrize('stored, expected', [('7', 7), (None, 0)])
def test_count_without_increment(dao, redis_client, stored, expected):
    redis_client.get.return_value = stored

    assert dao.count() == expected
    redis_client.incr.assert_not_called()


# -------------------------------
# 6. Mirror keyspace and connectivity errors
# -------------------------------


def test_mirror_uses_its_own_keyspace(mirror_dao, redis_client, paste):
    mirror_dao.insert(paste)
    mirror_dao.delete(paste.url)

    redis_client.eval.assert_called_once()
    assert redis_client.eval.call_args.args[2] == 'testapp:test:mirror:pastes:a1b2c3d4'
    redis_client.delete.assert_called_once_with('testapp:test:mirror:pastes:a1b2c3d4')


@pytest.mark.parametrize(
    'method, args',
    [('get', ('a1b2c3d4',)), ('delete', ('a1b2c3d4',)), ('count', ()), ('mark_read', ('a1b2c3d4',))],
)
def test_connection_error(dao, redis_client, method, args):
    for command in (redis_client.hgetall, redis_client.delete, redis_client.get, redis_client.eval):
        command.side_effect = redis.exceptions.ConnectionError('Connection refused')

    with pytest.raises(DataStoreError):
        getattr(dao, method)(*args)
