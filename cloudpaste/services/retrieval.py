"""Read path of pastes (cache-aside)

Classes:
    PasteRetrievalService:
        Fetch pastes through the cache and the Mirror Store, enforce their
        expiration policies and emit view events.

Example:
    >>> service = PasteRetrievalService(mirror=mirror_dao, cache=cache_dao, publisher=publisher)
    >>> service.fetch('a1b2c3d4')
    PasteView(url='a1b2c3d4', content='hello world', remaining_time='9 minutes')
"""

import math
import logging
from datetime import datetime, UTC

from cloudpaste import policy
from cloudpaste.models import Paste, PasteView, PolicyType
from cloudpaste.exceptions import PasteExpiredError
from cloudpaste.dao.base import PasteBaseDAO, PasteCacheBaseDAO
from cloudpaste.dao.cache.constants import HOT_TTL
from cloudpaste.dao.exceptions import DAOError, CacheMissError
from cloudpaste.events import BurnAfterReadViewed, EventPublisherBase, PasteViewed, PasteEvent


logger = logging.getLogger(__name__)


class PasteRetrievalService:
    """Cache-aside paste reads with view side effects

    Lookup order is cache, then Mirror Store. Only TIMED pastes are put in the
    cache, and never for longer than they have left to live. Expired pastes are
    evicted from the cache but never deleted from a store here; physical
    deletion belongs to the cleanup pipeline.

    Args:
        mirror (PasteBaseDAO):
            Read-side paste store. Its `mark_read()` decides burn-after-read races.
        publisher (EventPublisherBase):
            Event channel producer for view events.
        cache (PasteCacheBaseDAO | None):
            Optional paste cache. Any cache error degrades to a Mirror Store read.
        cache_ttl (int):
            Upper bound (seconds) of a cache entry's lifetime.
    """

    def __init__(
        self,
        mirror: PasteBaseDAO,
        publisher: EventPublisherBase,
        cache: PasteCacheBaseDAO | None = None,
        cache_ttl: int = HOT_TTL,
    ):
        self.mirror = mirror
        self.publisher = publisher
        self.cache = cache
        self.cache_ttl = int(cache_ttl)

    def fetch(self, url: str, now: datetime | None = None) -> PasteView:
        """Fetch a paste's content and record the view

        Args:
            url (str):
                Paste url (shortcode).
            now (datetime | None):
                Evaluation instant. Defaults to the current UTC time.

        Returns:
            PasteView: content plus a human-readable remaining lifetime.

        Raises:
            PasteNotFoundError:
                If no store knows the url.
            PasteExpiredError:
                If the paste is past its expiry, already burned, or another
                reader won the race to burn it.
            DataStoreError:
                If the Mirror Store is unreachable.
        """
        now = now or datetime.now(UTC)
        paste = self._lookup(url, now)
        self._ensure_alive(paste, now)

        expiration_policy = paste.expiration_policy
        if expiration_policy.type == PolicyType.BURN_AFTER_READ:
            if not self.mirror.mark_read(url):
                logger.info('Lost burn-after-read race. Paste already burned.', extra={'url': url})
                self._evict(url)
                raise PasteExpiredError(f"Paste '{url}' has already been read.")

            # This read burned the paste
            expiration_policy = expiration_policy.mark_read()
            self._publish(BurnAfterReadViewed(url=url))
        else:
            self._publish(PasteViewed(url=url, viewed_at=now))

        return PasteView(
            url=paste.url,
            content=paste.content,
            remaining_time=policy.remaining_description(expiration_policy, paste.created_at, now),
        )

    def remaining(self, url: str, now: datetime | None = None) -> str:
        """Describe a paste's remaining lifetime without counting it as a view

        Raises:
            PasteNotFoundError, PasteExpiredError, DataStoreError: same as fetch().
        """
        now = now or datetime.now(UTC)
        paste = self._lookup(url, now)
        self._ensure_alive(paste, now)
        return policy.remaining_description(paste.expiration_policy, paste.created_at, now)

    def _lookup(self, url: str, now: datetime) -> Paste:
        if self.cache is not None:
            try:
                return self.cache.get(url)
            except CacheMissError:
                logger.debug('Cache miss.', extra={'url': url})
            except DAOError as e:
                logger.warning('Cache lookup failed. Falling back to mirror store.', extra={'url': url, 'error': repr(e)})

        # Raises PasteNotFoundError
        paste = self.mirror.get(url)

        if paste.expiration_policy.type == PolicyType.TIMED:
            self._fill(paste, now)
        return paste

    def _fill(self, paste: Paste, now: datetime) -> None:
        if self.cache is None:
            return

        seconds_left = (policy.expires_at(paste.expiration_policy, paste.created_at) - now).total_seconds()
        ttl = min(self.cache_ttl, math.ceil(seconds_left))
        if ttl <= 0:
            return

        try:
            self.cache.set(paste, ttl=ttl)
        except DAOError as e:
            logger.warning('Failed to cache paste.', extra={'url': paste.url, 'error': repr(e)})

    def _ensure_alive(self, paste: Paste, now: datetime) -> None:
        if policy.is_expired(paste.expiration_policy, paste.created_at, now):
            self._evict(paste.url)
            raise PasteExpiredError(f"Paste '{paste.url}' has expired.")

    def _evict(self, url: str) -> None:
        if self.cache is None:
            return
        try:
            self.cache.delete(url)
        except DAOError as e:
            logger.warning('Failed to evict paste from cache.', extra={'url': url, 'error': repr(e)})

    def _publish(self, event: PasteEvent) -> None:
        try:
            self.publisher.publish(event)
        except Exception as e:
            # Read availability wins over analytics/cleanup signaling
            logger.error(
                'Failed to publish view event.',
                extra={'url': event.url, 'routingKey': str(event.routing_key), 'error': repr(e)},
            )
