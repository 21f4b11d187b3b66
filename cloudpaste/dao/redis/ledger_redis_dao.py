"""Data Access Object (DAO) implementation of the cleanup ledger in Redis

Key layout:

    <prefix>:cleanup:tasks:<url>    (hash)  url, expire_at, burn_after_read, read_at
    <prefix>:cleanup:due            (zset)  TIMED urls scored by expiry UNIX timestamp
    <prefix>:cleanup:burned         (set)   burn-after-read urls which have been read

Every mutation relies on conditional Redis commands (HSETNX, ZADD NX) executed
in MULTI/EXEC transactions or Lua scripts, so the event consumer and
concurrent sweeps (even in other processes) never need an in-memory lock.
"""

from datetime import datetime, UTC

from beartype import beartype

from cloudpaste.models import LedgerEntry
from cloudpaste.dao.base import CleanupLedgerBaseDAO
from cloudpaste.dao.redis.mixins import RedisClientMixin
from cloudpaste.dao.redis.helpers import handle_redis_connection_error
from cloudpaste.dao.exceptions import LedgerEntryNotFoundError


# KEYS[1] = entry hash, KEYS[2] = burned set, ARGV[1] = url, ARGV[2] = read timestamp.
# Returns 1 (marked), 0 (already read) or -1 (no entry).
MARK_READ_IF_LEDGERED = """
if redis.call('EXISTS', KEYS[1]) == 0 then
    return -1
end
local marked = redis.call('HSETNX', KEYS[1], 'read_at', ARGV[2])
redis.call('SADD', KEYS[2], ARGV[1])
return marked
"""


class CleanupLedgerRedisDAO(RedisClientMixin, CleanupLedgerBaseDAO):
    """Redis-based cleanup ledger

    Methods:
        add_entry(url, expire_at=None, burn_after_read=False) -> bool
        get(url) -> LedgerEntry
        mark_read(url) -> bool
        find_expired(now) -> list[str]
        delete_entry(url) -> bool

    All methods raise DataStoreError on connectivity issues with Redis.
    """

    @handle_redis_connection_error
    @beartype
    def add_entry(self, url: str, expire_at: datetime | None = None, burn_after_read: bool = False, **kwargs) -> bool:
        """Create a ledger entry unless one already exists (upsert-by-url)

        NOTE: every field is written with HSETNX and the due index with ZADD NX,
              so a redelivered PasteCreated event can neither duplicate the
              entry nor move its expiry.

        Returns:
            bool: True if the entry was created by this call.
        """
        entry_key = self.keys.ledger_entry_key(url)

        with self.redis.pipeline(transaction=True) as pipe:
            pipe.hsetnx(entry_key, 'url', url)
            pipe.hsetnx(entry_key, 'expire_at', expire_at.isoformat() if expire_at is not None else '')
            pipe.hsetnx(entry_key, 'burn_after_read', int(burn_after_read))
            if expire_at is not None:
                pipe.zadd(self.keys.ledger_due_key(), {url: expire_at.timestamp()}, nx=True)
            created, *_ = pipe.execute()

        return bool(created)

    @handle_redis_connection_error
    @beartype
    def get(self, url: str, **kwargs) -> LedgerEntry:
        mapping = self.redis.hgetall(self.keys.ledger_entry_key(url))
        if not mapping:
            raise LedgerEntryNotFoundError(f"Ledger entry for url '{url}' not found.")

        expire_at = mapping.get('expire_at')
        return LedgerEntry(
            url=url,
            expire_at=datetime.fromisoformat(expire_at) if expire_at else None,
            burn_after_read=mapping.get('burn_after_read') == '1' or bool(mapping.get('read_at')),
            is_read=bool(mapping.get('read_at')),
        )

    @handle_redis_connection_error
    @beartype
    def mark_read(self, url: str, **kwargs) -> bool:
        """Mark an entry as read and make it eligible for the next sweep

        Only an existing entry is marked, in one Lua script. A burn event that
        overtakes its PasteCreated is refused, so the consumer requeues it
        until the paste is ledgered instead of leaving an entry that a late
        PasteCreated would recreate after the purge.

        Idempotent: re-marking an already-read entry keeps the original
        `read_at` and returns False.

        Raises:
            LedgerEntryNotFoundError:
                If the url has not been ledgered (yet).
        """
        marked = self.redis.eval(
            MARK_READ_IF_LEDGERED,
            2,
            self.keys.ledger_entry_key(url),
            self.keys.ledger_burned_key(),
            url,
            datetime.now(UTC).isoformat(),
        )
        if marked == -1:
            raise LedgerEntryNotFoundError(f"Ledger entry for url '{url}' not found.")

        return bool(marked)

    @handle_redis_connection_error
    @beartype
    def find_expired(self, now: datetime, **kwargs) -> list[str]:
        with self.redis.pipeline(transaction=True) as pipe:
            pipe.zrangebyscore(self.keys.ledger_due_key(), '-inf', now.timestamp())
            pipe.smembers(self.keys.ledger_burned_key())
            due, burned = pipe.execute()

        return sorted(set(due) | set(burned))

    @handle_redis_connection_error
    @beartype
    def delete_entry(self, url: str, **kwargs) -> bool:
        """Remove an entry together with its due/burned index memberships

        Returns:
            bool: True if this call removed anything, False if the entry was already gone.
        """
        with self.redis.pipeline(transaction=True) as pipe:
            pipe.delete(self.keys.ledger_entry_key(url))
            pipe.zrem(self.keys.ledger_due_key(), url)
            pipe.srem(self.keys.ledger_burned_key(), url)
            results = pipe.execute()

        return any(results)
