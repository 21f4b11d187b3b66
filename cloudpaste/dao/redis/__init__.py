from cloudpaste.dao.redis.redis_key_schema import RedisKeySchema
from cloudpaste.dao.redis.mixins import RedisClientMixin
from cloudpaste.dao.redis.paste_redis_dao import PasteRedisDAO, PasteMirrorRedisDAO
from cloudpaste.dao.redis.ledger_redis_dao import CleanupLedgerRedisDAO
from cloudpaste.dao.redis.analytics_redis_dao import AnalyticsRedisDAO


__all__ = [
    'RedisKeySchema',
    'RedisClientMixin',
    'PasteRedisDAO',
    'PasteMirrorRedisDAO',
    'CleanupLedgerRedisDAO',
    'AnalyticsRedisDAO',
]
