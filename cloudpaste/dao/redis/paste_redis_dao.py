"""Data Access Object (DAO) implementations for storing pastes in Redis

This module provides Redis-based implementations of PasteBaseDAO for the
Primary Store (authoritative paste records) and the Mirror Store (read path
copy with the same schema).

Each paste is stored as a Redis hash:

    <prefix>:pastes:<url>                  (Primary)
    <prefix>:mirror:pastes:<url>           (Mirror)
        url             -> short URL
        content         -> paste content
        created_at      -> ISO-8601 UTC timestamp
        policy_type     -> NEVER | TIMED | BURN_AFTER_READ
        policy_duration -> symbolic duration ('' unless TIMED)
        view_count      -> views counted against this record
        read_at         -> ISO-8601 UTC timestamp (only once a BURN_AFTER_READ paste is read)

Classes:
    PasteRedisDAO:
        DAO for the Primary Store.
    PasteMirrorRedisDAO:
        DAO for the Mirror Store.

Example:
    >>> dao = PasteRedisDAO(prefix="cloudpaste:dev")
    >>> dao.insert(paste)
    <PasteRedisDAO>
    >>> dao.get(paste.url).content
    'hello world'
    >>> dao.delete(paste.url)
    True
"""

from datetime import datetime, UTC

from beartype import beartype

from cloudpaste.models import Paste, ExpirationPolicy, PolicyType
from cloudpaste.dao.base import PasteBaseDAO
from cloudpaste.dao.redis.mixins import RedisClientMixin
from cloudpaste.dao.redis.helpers import handle_redis_connection_error
from cloudpaste.dao.exceptions import PasteAlreadyExistsError, PasteNotFoundError


# KEYS[1] = paste hash, ARGV = field/value pairs. Returns 1 if written, 0 if the url is taken.
INSERT_IF_ABSENT = """
if redis.call('EXISTS', KEYS[1]) == 1 then
    return 0
end
redis.call('HSET', KEYS[1], unpack(ARGV))
return 1
"""

# KEYS[1] = paste hash, ARGV[1] = read timestamp. Returns 1 (marked), 0 (already read) or -1 (no paste).
MARK_READ_IF_UNREAD = """
if redis.call('EXISTS', KEYS[1]) == 0 then
    return -1
end
return redis.call('HSETNX', KEYS[1], 'read_at', ARGV[1])
"""


class PasteRedisDAO(RedisClientMixin, PasteBaseDAO):
    """Redis-based Data Access Object (DAO) for the Primary paste store

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.

    Methods:
        insert(paste: Paste, **kwargs) -> PasteRedisDAO:
            Raises PasteAlreadyExistsError when a paste with the same url exists.
        get(url: str, **kwargs) -> Paste:
            Raises PasteNotFoundError when the url doesn't exist.
        delete(url: str, **kwargs) -> bool:
            False when the paste was already gone.
        mark_read(url: str, **kwargs) -> bool:
            True only for the call which marked the paste read.
        count(increment: bool = False, **kwargs) -> int:
            Global paste counter (feeds shortcode generation).

    All methods raise DataStoreError on connectivity issues with Redis.
    """

    def _paste_key(self, url: str) -> str:
        return self.keys.paste_key(url)

    @handle_redis_connection_error
    @beartype
    def insert(self, paste: Paste, **kwargs) -> 'PasteRedisDAO':
        """Insert a paste hash into Redis

        Raises:
            PasteAlreadyExistsError:
                If a paste with the same url already exists.
            DataStoreError:
                If a Redis connection issue occurs.
        """
        paste_key = self._paste_key(paste.url)
        fields = [item for pair in self._to_mapping(paste).items() for item in pair]

        # Existence check and write in one script, so a colliding url never overwrites a paste
        if not self.redis.eval(INSERT_IF_ABSENT, 1, paste_key, *fields):
            raise PasteAlreadyExistsError(f"Paste with url '{paste.url}' already exists.")

        return self

    @handle_redis_connection_error
    @beartype
    def get(self, url: str, **kwargs) -> Paste:
        """Retrieve a paste by url

        Raises:
            PasteNotFoundError:
                If the paste does not exist in Redis.
            DataStoreError:
                If Redis connectivity issues occur.
        """
        mapping = self.redis.hgetall(self._paste_key(url))
        if not mapping or 'content' not in mapping:
            raise PasteNotFoundError(f"Paste with url '{url}' not found.")

        return self._from_mapping(mapping)

    @handle_redis_connection_error
    @beartype
    def delete(self, url: str, **kwargs) -> bool:
        return bool(self.redis.delete(self._paste_key(url)))

    @handle_redis_connection_error
    @beartype
    def mark_read(self, url: str, **kwargs) -> bool:
        """Mark a BURN_AFTER_READ paste as read if it is still unread

        The existence check and HSETNX on the `read_at` field run as one Lua
        script, so exactly one of many concurrent callers wins and a paste
        deleted in the meantime is never recreated as a bare `read_at` hash.

        (reader 1): MARK_READ_IF_UNREAD <prefix>:mirror:pastes:<url> <ts>  => 1 (winner)
        (reader 2): MARK_READ_IF_UNREAD <prefix>:mirror:pastes:<url> <ts>  => 0 (already burned)
        (reader 3): MARK_READ_IF_UNREAD <prefix>:mirror:pastes:<url> <ts>  => -1 (deleted)

        Raises:
            PasteNotFoundError:
                If the paste does not exist in Redis.
            DataStoreError:
                If Redis connectivity issues occur.
        """
        marked = self.redis.eval(MARK_READ_IF_UNREAD, 1, self._paste_key(url), datetime.now(UTC).isoformat())
        if marked == -1:
            raise PasteNotFoundError(f"Paste with url '{url}' not found.")

        return bool(marked)

    @handle_redis_connection_error
    def count(self, increment: bool = False, **kwargs) -> int:
        if increment:
            return int(self.redis.incr(self.keys.paste_counter_key()))
        else:
            return int(self.redis.get(self.keys.paste_counter_key()) or 0)

    @staticmethod
    def _to_mapping(paste: Paste) -> dict[str, str | int]:
        policy = paste.expiration_policy
        mapping = {
            'url': paste.url,
            'content': paste.content,
            'created_at': paste.created_at.isoformat(),
            'policy_type': str(policy.type),
            'policy_duration': policy.duration or '',
            'view_count': paste.view_count,
        }
        if policy.is_read:
            mapping['read_at'] = datetime.now(UTC).isoformat()
        return mapping

    @staticmethod
    def _from_mapping(mapping: dict[str, str]) -> Paste:
        policy = ExpirationPolicy(
            type=PolicyType(mapping['policy_type']),
            duration=mapping.get('policy_duration') or None,
            is_read=bool(mapping.get('read_at')),
        )
        return Paste(
            url=mapping['url'],
            content=mapping['content'],
            created_at=datetime.fromisoformat(mapping['created_at']),
            expiration_policy=policy,
            view_count=int(mapping.get('view_count') or 0),
        )


class PasteMirrorRedisDAO(PasteRedisDAO):
    """Redis-based DAO for the Mirror Store (read path)

    Same schema and semantics as PasteRedisDAO, stored under the
    '<prefix>:mirror:pastes:<url>' keyspace (usually on a separate Redis).
    """

    def _paste_key(self, url: str) -> str:
        return self.keys.mirror_paste_key(url)
