"""Abstract base class for cleanup ledger data access objects (DAOs).

The cleanup ledger holds one entry per paste known to the cleanup pipeline and
is the only durable record of when (or whether) a paste must be purged. It is
deliberately decoupled from the paste record so sweeps keep working while the
Primary Store is unreachable.

All mutating operations must be atomic at the store level (conditional writes),
because the event consumer and the sweep may run in different processes.

Example:
    >>> dao = CleanupLedgerRedisDAO(...)
    >>> dao.add_entry('a1b2c3d4', expire_at=datetime(2025, 10, 15, 0, 10, tzinfo=UTC))
    True
    >>> dao.add_entry('a1b2c3d4', expire_at=datetime(2026, 1, 1, tzinfo=UTC))  # redelivery
    False
    >>> dao.find_expired(datetime(2025, 10, 15, 0, 11, tzinfo=UTC))
    ['a1b2c3d4']
"""

from abc import ABC, abstractmethod
from datetime import datetime

from cloudpaste.models import LedgerEntry


class CleanupLedgerBaseDAO(ABC):
    """Interface for cleanup ledger data access objects (DAOs)

    Methods:
        add_entry(url, expire_at, burn_after_read) -> bool:
            Upsert-by-url. Never overwrites an existing entry.
        get(url) -> LedgerEntry:
            Raises LedgerEntryNotFoundError if missing.
        mark_read(url) -> bool:
            Idempotent. Returns True only for the call which flipped the flag.
            Raises LedgerEntryNotFoundError if the url was never ledgered.
        find_expired(now) -> list[str]:
            Urls eligible for a sweep as of `now`.
        delete_entry(url) -> bool:
            Returns True only if this call removed an existing entry.

    All methods raise DataStoreError on connection or I/O failure.
    """

    @abstractmethod
    def add_entry(self, url: str, expire_at: datetime | None = None, burn_after_read: bool = False, **kwargs) -> bool:
        """Create a ledger entry for a paste unless one already exists.

        Args:
            url (str):
                Short URL of the paste.
            expire_at (datetime | None):
                Absolute expiry instant (TIMED pastes only).
            burn_after_read (bool):
                True for BURN_AFTER_READ pastes.

        Returns:
            bool: True if the entry was created, False if it already existed
                  (the existing expiry is left untouched).

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get(self, url: str, **kwargs) -> LedgerEntry:
        pass

    @abstractmethod
    def mark_read(self, url: str, **kwargs) -> bool:
        """Mark a ledger entry as read. Re-marking a read entry is a no-op.

        Returns:
            bool: True if this call flipped the flag, False if it was already read.

        Raises:
            LedgerEntryNotFoundError:
                If no entry exists for `url`. The entry is never created here.
        """
        pass

    @abstractmethod
    def find_expired(self, now: datetime, **kwargs) -> list[str]:
        """Return urls of all entries eligible for a sweep as of `now`

        TIMED entries are eligible once `now >= expire_at`; burn-after-read
        entries once they are read. Entries without expiry are never returned.
        """
        pass

    @abstractmethod
    def delete_entry(self, url: str, **kwargs) -> bool:
        pass
