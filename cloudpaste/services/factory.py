"""Build services from a service's configuration section

Every store section of the configuration is a set of Redis connection
parameters (see `cloudpaste.dao.redis.helpers.redis_kwargs`), optionally
extended with store-specific tunables:

    cache.ttl                 -> upper bound of cached paste lifetime (seconds)
    events.stream             -> event stream name
    events.group              -> consumer group of the worker
    events.max_attempts       -> deliveries before dead-lettering
    events.block_ms           -> longest blocking read
    sweep.burn_workers        -> burn deletion threads
    sweep.burn_queue_size     -> queued burn deletions before back pressure

All keys are namespaced with `app_prefix()`.
"""

from collections.abc import Iterable

from cloudpaste.constants import Defaults
from cloudpaste.types import ServiceConfig
from cloudpaste.dao.cache import PasteCacheDAO
from cloudpaste.dao.cache.constants import HOT_TTL
from cloudpaste.dao.redis import AnalyticsRedisDAO, CleanupLedgerRedisDAO, PasteMirrorRedisDAO, PasteRedisDAO
from cloudpaste.dao.redis.helpers import redis_kwargs
from cloudpaste.events import RedisStreamConsumer, RedisStreamPublisher
from cloudpaste.services.analytics import ViewRecorder
from cloudpaste.services.cleanup import CleanupService
from cloudpaste.services.creation import PasteCreationService
from cloudpaste.services.retrieval import PasteRetrievalService
from cloudpaste.utils.config import app_prefix
from cloudpaste.utils.workers import BoundedExecutor


def build_publisher(config: ServiceConfig) -> RedisStreamPublisher:
    events = config['events']
    return RedisStreamPublisher(
        stream=events.get('stream', Defaults.EVENT_STREAM),
        **redis_kwargs(events),
        prefix=app_prefix(),
    )


def build_consumer(config: ServiceConfig, group: str, bindings: Iterable[str]) -> RedisStreamConsumer:
    events = config['events']
    return RedisStreamConsumer(
        group=events.get('group', group),
        bindings=bindings,
        stream=events.get('stream', Defaults.EVENT_STREAM),
        consumer_name=events.get('consumer_name'),
        block_ms=events.get('block_ms', Defaults.CONSUMER_BLOCK_MS),
        batch_size=events.get('batch_size', Defaults.CONSUMER_BATCH_SIZE),
        max_attempts=events.get('max_attempts', Defaults.MAX_DELIVERY_ATTEMPTS),
        **redis_kwargs(events),
        prefix=app_prefix(),
    )


def build_retrieval_service(config: ServiceConfig) -> PasteRetrievalService:
    cache_config = config.get('cache')
    return PasteRetrievalService(
        mirror=PasteMirrorRedisDAO(**redis_kwargs(config['mirror']), prefix=app_prefix()),
        publisher=build_publisher(config),
        cache=PasteCacheDAO(**redis_kwargs(cache_config), prefix=app_prefix()) if cache_config else None,
        cache_ttl=(cache_config or {}).get('ttl', HOT_TTL),
    )


def build_creation_service(config: ServiceConfig, salt: str = Defaults.SHORTCODE_SALT) -> PasteCreationService:
    return PasteCreationService(
        primary=PasteRedisDAO(**redis_kwargs(config['primary']), prefix=app_prefix()),
        mirror=PasteMirrorRedisDAO(**redis_kwargs(config['mirror']), prefix=app_prefix()),
        publisher=build_publisher(config),
        salt=salt,
    )


def build_cleanup_service(config: ServiceConfig) -> CleanupService:
    sweep = config.get('sweep', {})
    cache_config = config.get('cache')
    return CleanupService(
        ledger=CleanupLedgerRedisDAO(**redis_kwargs(config['ledger']), prefix=app_prefix()),
        primary=PasteRedisDAO(**redis_kwargs(config['primary']), prefix=app_prefix()),
        mirror=PasteMirrorRedisDAO(**redis_kwargs(config['mirror']), prefix=app_prefix()),
        analytics=AnalyticsRedisDAO(**redis_kwargs(config['analytics']), prefix=app_prefix()),
        publisher=build_publisher(config),
        cache=PasteCacheDAO(**redis_kwargs(cache_config), prefix=app_prefix()) if cache_config else None,
        burn_executor=BoundedExecutor(
            max_workers=int(sweep.get('burn_workers', Defaults.BURN_WORKERS)),
            queue_size=int(sweep.get('burn_queue_size', Defaults.BURN_QUEUE_SIZE)),
            name='burn',
        ),
    )


def build_view_recorder(config: ServiceConfig) -> ViewRecorder:
    return ViewRecorder(analytics=AnalyticsRedisDAO(**redis_kwargs(config['analytics']), prefix=app_prefix()))
