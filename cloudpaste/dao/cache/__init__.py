from cloudpaste.dao.cache.cache_key_schema import CacheKeySchema
from cloudpaste.dao.cache.paste_cache_dao import PasteCacheDAO

__all__ = [
    'CacheKeySchema',
    'PasteCacheDAO',
]
