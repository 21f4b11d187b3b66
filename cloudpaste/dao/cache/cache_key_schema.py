from cloudpaste.dao.redis.redis_key_schema import prefix_key


__all__ = ['CacheKeySchema']


class CacheKeySchema:
    """Keys of the paste cache

    Cache keys live in their own 'cache' namespace, so the cache may share a
    Redis deployment with the stores and still be flushed on its own
    (e.g. `redis-cli --scan --pattern 'cache:*'`).

    Example:
        >>> CacheKeySchema(prefix='cloudpaste:dev').paste_key('a1b2c3d4')
        'cache:cloudpaste:dev:pastes:a1b2c3d4'
    """

    def __init__(self, prefix: str | None = None):
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError(f'Prefix must be of type string (given type: {type(prefix)}).')

        self.prefix = 'cache' if prefix is None else f'cache:{prefix}'

    @prefix_key
    def paste_key(self, url: str) -> str:
        return f'pastes:{url}'
