from datetime import datetime

from beartype import beartype

from cloudpaste.dao.base import AnalyticsBaseDAO
from cloudpaste.dao.redis.mixins import RedisClientMixin
from cloudpaste.dao.redis.helpers import handle_redis_connection_error


class AnalyticsRedisDAO(RedisClientMixin, AnalyticsBaseDAO):
    """Redis-based view analytics

    Keys:
        <prefix>:analytics:<url>:views   -> total view counter
        <prefix>:analytics:<url>:hourly  -> hash of 'YYYY-MM-DDTHH' buckets to view counts
    """

    @handle_redis_connection_error
    @beartype
    def record_view(self, url: str, viewed_at: datetime, **kwargs) -> int:
        with self.redis.pipeline(transaction=True) as pipe:
            pipe.incr(self.keys.analytics_views_key(url))
            pipe.hincrby(self.keys.analytics_hourly_key(url), self.keys.hourly_bucket(viewed_at), 1)
            total, _ = pipe.execute()

        return int(total)

    @handle_redis_connection_error
    @beartype
    def views(self, url: str, **kwargs) -> int:
        return int(self.redis.get(self.keys.analytics_views_key(url)) or 0)

    @handle_redis_connection_error
    @beartype
    def delete(self, url: str, **kwargs) -> bool:
        return bool(self.redis.delete(self.keys.analytics_views_key(url), self.keys.analytics_hourly_key(url)))
