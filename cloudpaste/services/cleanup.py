"""Cleanup orchestration: ledgering from events and sweeping expired pastes

A paste lives in four stores (Primary, Mirror, Analytics and the cleanup
ledger) plus the cache. There is no distributed transaction across them;
instead every paste that must eventually disappear is recorded in the cleanup
ledger, and the ledger entry is removed only after all other stores have
forgotten the paste. A failure anywhere in the deletion pipeline therefore
leaves the entry in place and the url is retried by the next sweep.

Deletion pipeline (fixed order, stops at the first failure):

    Primary -> Mirror -> (cache eviction, best effort) -> Analytics -> ledger entry -> PasteDeleted

Classes:
    CleanupService:
        Event handler for the 'cleanup.events' queue and owner of the sweep.
"""

import logging
import threading
from datetime import datetime, UTC

from cloudpaste import policy
from cloudpaste.models import CleanupStatus, PolicyType
from cloudpaste.dao.base import AnalyticsBaseDAO, CleanupLedgerBaseDAO, PasteBaseDAO, PasteCacheBaseDAO
from cloudpaste.dao.exceptions import DAOError
from cloudpaste.events import (
    BurnAfterReadViewed,
    EventPublisherBase,
    PasteCreated,
    PasteDeleted,
    PasteEvent,
    PasteViewed,
)
from cloudpaste.constants import Defaults, RoutingKey
from cloudpaste.utils.workers import BoundedExecutor


logger = logging.getLogger(__name__)


class CleanupService:
    """Cleanup orchestrator

    Event side (`handle_event`) and sweep side (`run_sweep`) share only the
    stores. All ledger writes are conditional store-level operations, so both
    sides may run in different threads or processes. Within one instance a
    lock serializes sweeps and guards the status counters.

    Args:
        ledger (CleanupLedgerBaseDAO):
            Cleanup ledger.
        primary (PasteBaseDAO):
            Primary paste store.
        mirror (PasteBaseDAO):
            Mirror (read-side) paste store.
        analytics (AnalyticsBaseDAO):
            View analytics store.
        publisher (EventPublisherBase):
            Event channel producer for PasteDeleted.
        cache (PasteCacheBaseDAO | None):
            Optional paste cache, evicted on a best-effort basis.
        burn_executor (BoundedExecutor | None):
            Worker pool running burn-after-read deletions. Shut down by close().

    Example:
        >>> service = CleanupService(ledger, primary, mirror, analytics, publisher)
        >>> service.handle_event(PasteCreated(url='a1b2c3d4', created_at=t0, expiration_policy=ExpirationPolicy.timed('10minutes')))
        >>> service.run_sweep(now=t0 + timedelta(minutes=11))
        1
        >>> service.status()
        CleanupStatus(last_run=..., pastes_deleted=1)
    """

    bindings = (RoutingKey.PASTE_CREATED, RoutingKey.PASTE_VIEWED, RoutingKey.PASTE_BURNED)

    def __init__(
        self,
        ledger: CleanupLedgerBaseDAO,
        primary: PasteBaseDAO,
        mirror: PasteBaseDAO,
        analytics: AnalyticsBaseDAO,
        publisher: EventPublisherBase,
        cache: PasteCacheBaseDAO | None = None,
        burn_executor: BoundedExecutor | None = None,
    ):
        self.ledger = ledger
        self.primary = primary
        self.mirror = mirror
        self.analytics = analytics
        self.publisher = publisher
        self.cache = cache

        self.burn_executor = burn_executor or BoundedExecutor(
            max_workers=Defaults.BURN_WORKERS,
            queue_size=Defaults.BURN_QUEUE_SIZE,
            name='burn',
        )

        self._lock = threading.Lock()
        self._last_run: datetime | None = None
        self._pastes_deleted = 0

    # -------------------------------
    # Event side
    # -------------------------------

    def handle_event(self, event: PasteEvent) -> None:
        """Apply one event to the cleanup ledger

        Returning normally acknowledges the message; raising requeues it.
        Every branch is idempotent under redelivery.

        Raises:
            InvalidPolicyConfigurationError:
                If a PasteCreated event carries an unknown TIMED duration.
            LedgerEntryNotFoundError:
                If a BurnAfterReadViewed event overtook its PasteCreated. The
                requeued event succeeds once the paste is ledgered.
            DataStoreError:
                If the ledger is unreachable.
        """
        match event:
            case PasteCreated():
                self._ledger_created(event)
            case PasteViewed():
                logger.debug('Paste viewed.', extra={'url': event.url, 'viewedAt': event.viewed_at.isoformat()})
            case BurnAfterReadViewed():
                self._ledger_burned(event)
            case PasteDeleted():
                logger.debug('Ignoring PasteDeleted event.', extra={'url': event.url})

    def _ledger_created(self, event: PasteCreated) -> None:
        expiration_policy = event.expiration_policy
        expire_at = policy.expires_at(expiration_policy, event.created_at)
        burn_after_read = expiration_policy.type == PolicyType.BURN_AFTER_READ

        created = self.ledger.add_entry(event.url, expire_at=expire_at, burn_after_read=burn_after_read)
        if created:
            logger.info(
                'Ledgered paste.',
                extra={'url': event.url, 'policy': str(expiration_policy.type), 'expireAt': expire_at.isoformat() if expire_at else None},
            )
        else:
            logger.debug('Paste already ledgered. Skipping.', extra={'url': event.url})

    def _ledger_burned(self, event: BurnAfterReadViewed) -> None:
        self.ledger.mark_read(event.url)
        logger.info('Burn-after-read paste read. Scheduling deletion.', extra={'url': event.url})

        # Off the consumer's critical path; a failed deletion is retried by the next sweep
        self.burn_executor.submit(self.delete_paste, event.url)

    # -------------------------------
    # Sweep side
    # -------------------------------

    def run_sweep(self, now: datetime | None = None, deadline: datetime | None = None) -> int:
        """Delete every paste the ledger reports as eligible as of `now`

        Sweeps are serialized per instance. Urls are processed one after
        another; a failing url is logged and left for the next sweep.

        Args:
            now (datetime | None):
                Eligibility instant. Defaults to the current UTC time.
            deadline (datetime | None):
                No new url pipeline starts once the wall clock reaches it.
                A pipeline in progress always finishes.

        Returns:
            int: number of pastes deleted by this sweep.

        Raises:
            DataStoreError:
                If the ledger cannot be queried for eligible urls.
        """
        with self._lock:
            now = now or datetime.now(UTC)
            urls = self.ledger.find_expired(now)
            logger.info('Sweep started.', extra={'eligible': len(urls), 'now': now.isoformat()})

            deleted = 0
            for index, url in enumerate(urls):
                if deadline is not None and datetime.now(UTC) >= deadline:
                    logger.warning('Sweep deadline reached.', extra={'skipped': len(urls) - index})
                    break

                try:
                    removed = self.delete_paste(url)
                except DAOError as e:
                    logger.error('Failed to delete paste. Will retry on next sweep.', extra={'url': url, 'error': repr(e)})
                    continue

                if removed:
                    deleted += 1

            self._last_run = datetime.now(UTC)
            self._pastes_deleted += deleted
            logger.info('Sweep finished.', extra={'deleted': deleted, 'total': self._pastes_deleted})
            return deleted

    def delete_paste(self, url: str) -> bool:
        """Run the deletion pipeline for one paste

        Deleting rows which are already gone is a success, so the pipeline may
        be replayed any number of times.

        Returns:
            bool: True if this call removed the ledger entry (and published
                  PasteDeleted), False if another run got there first.

        Raises:
            DAOError:
                From the first store that failed. The ledger entry is kept.
        """
        self.primary.delete(url)
        self.mirror.delete(url)
        self._evict(url)
        self.analytics.delete(url)

        if not self.ledger.delete_entry(url):
            logger.debug('Ledger entry already removed. Not publishing PasteDeleted.', extra={'url': url})
            return False

        try:
            self.publisher.publish(PasteDeleted(url=url, deleted_at=datetime.now(UTC)))
        except Exception as e:
            # The paste is gone from every store; only the notification is lost
            logger.error('Failed to publish PasteDeleted event.', extra={'url': url, 'error': repr(e)})

        logger.info('Deleted paste from all stores.', extra={'url': url})
        return True

    def _evict(self, url: str) -> None:
        if self.cache is None:
            return
        try:
            self.cache.delete(url)
        except DAOError as e:
            logger.warning('Failed to evict paste from cache.', extra={'url': url, 'error': repr(e)})

    def status(self) -> CleanupStatus:
        with self._lock:
            return CleanupStatus(last_run=self._last_run, pastes_deleted=self._pastes_deleted)

    def close(self) -> None:
        """Wait for scheduled burn deletions to finish"""
        self.burn_executor.shutdown(wait=True)
