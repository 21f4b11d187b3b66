"""In-memory fakes of the store and event channel interfaces

Every fake can be told to fail a method with `fail(method, error)` and to
recover with `recover(method)`.
"""

import threading
from dataclasses import replace
from datetime import datetime

import pytest

from cloudpaste.models import LedgerEntry, Paste
from cloudpaste.dao.base import AnalyticsBaseDAO, CleanupLedgerBaseDAO, PasteBaseDAO, PasteCacheBaseDAO
from cloudpaste.dao.exceptions import CacheMissError, LedgerEntryNotFoundError, PasteAlreadyExistsError, PasteNotFoundError
from cloudpaste.events import EventPublisherBase, PasteEvent


class FailureMixin:
    def __init__(self):
        self.failures: dict[str, Exception] = {}
        self.lock = threading.Lock()

    def fail(self, method: str, error: Exception) -> None:
        self.failures[method] = error

    def recover(self, method: str) -> None:
        self.failures.pop(method, None)

    def _check(self, method: str) -> None:
        if method in self.failures:
            raise self.failures[method]


class FakePasteStore(FailureMixin, PasteBaseDAO):
    def __init__(self):
        super().__init__()
        self.pastes: dict[str, Paste] = {}
        self.counter = 0

    def insert(self, paste, **kwargs):
        self._check('insert')
        with self.lock:
            if paste.url in self.pastes:
                raise PasteAlreadyExistsError(paste.url)
            self.pastes[paste.url] = paste
        return self

    def get(self, url, **kwargs):
        self._check('get')
        try:
            return self.pastes[url]
        except KeyError:
            raise PasteNotFoundError(url) from None

    def delete(self, url, **kwargs):
        self._check('delete')
        with self.lock:
            return self.pastes.pop(url, None) is not None

    def mark_read(self, url, **kwargs):
        self._check('mark_read')
        with self.lock:
            paste = self.pastes.get(url)
            if paste is None:
                raise PasteNotFoundError(url)
            if paste.expiration_policy.is_read:
                return False
            self.pastes[url] = replace(paste, expiration_policy=paste.expiration_policy.mark_read())
            return True

    def count(self, increment=False, **kwargs):
        self._check('count')
        with self.lock:
            if increment:
                self.counter += 1
            return self.counter


class FakeLedger(FailureMixin, CleanupLedgerBaseDAO):
    def __init__(self):
        super().__init__()
        self.entries: dict[str, LedgerEntry] = {}

    def add_entry(self, url, expire_at=None, burn_after_read=False, **kwargs):
        self._check('add_entry')
        with self.lock:
            if url in self.entries:
                return False
            self.entries[url] = LedgerEntry(url=url, expire_at=expire_at, burn_after_read=burn_after_read)
            return True

    def get(self, url, **kwargs):
        try:
            return self.entries[url]
        except KeyError:
            raise LedgerEntryNotFoundError(url) from None

    def mark_read(self, url, **kwargs):
        self._check('mark_read')
        with self.lock:
            entry = self.entries.get(url)
            if entry is None:
                raise LedgerEntryNotFoundError(url)
            if entry.is_read:
                return False
            self.entries[url] = replace(entry, is_read=True)
            return True

    def find_expired(self, now: datetime, **kwargs):
        self._check('find_expired')
        return sorted(url for url, entry in self.entries.items() if entry.is_eligible(now))

    def delete_entry(self, url, **kwargs):
        self._check('delete_entry')
        with self.lock:
            return self.entries.pop(url, None) is not None


class FakeAnalytics(FailureMixin, AnalyticsBaseDAO):
    def __init__(self):
        super().__init__()
        self.counts: dict[str, int] = {}

    def record_view(self, url, viewed_at, **kwargs):
        self._check('record_view')
        with self.lock:
            self.counts[url] = self.counts.get(url, 0) + 1
            return self.counts[url]

    def views(self, url, **kwargs):
        return self.counts.get(url, 0)

    def delete(self, url, **kwargs):
        self._check('delete')
        with self.lock:
            return self.counts.pop(url, None) is not None


class FakeCache(FailureMixin, PasteCacheBaseDAO):
    def __init__(self):
        super().__init__()
        self.entries: dict[str, tuple[Paste, int]] = {}

    def get(self, url, **kwargs):
        self._check('get')
        try:
            return self.entries[url][0]
        except KeyError:
            raise CacheMissError(url) from None

    def set(self, paste, ttl, **kwargs):
        self._check('set')
        self.entries[paste.url] = (paste, ttl)

    def delete(self, url, **kwargs):
        self._check('delete')
        return self.entries.pop(url, None) is not None


class FakePublisher(FailureMixin, EventPublisherBase):
    def __init__(self):
        super().__init__()
        self.events: list[PasteEvent] = []

    def publish(self, event, **kwargs):
        self._check('publish')
        with self.lock:
            self.events.append(event)
            return f'{len(self.events)}-0'

    def of_type(self, event_type) -> list[PasteEvent]:
        return [event for event in self.events if isinstance(event, event_type)]


@pytest.fixture
def primary() -> FakePasteStore:
    return FakePasteStore()


@pytest.fixture
def mirror() -> FakePasteStore:
    return FakePasteStore()


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def analytics() -> FakeAnalytics:
    return FakeAnalytics()


@pytest.fixture
def cache() -> FakeCache:
    return FakeCache()


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()
