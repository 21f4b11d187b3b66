import functools
from collections.abc import Callable
from datetime import datetime


__all__ = ['RedisKeySchema']  # hide internal decorator prefix_key from imports


def prefix_key(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs) -> str:
        key = func(self, *args, **kwargs)
        return f'{self.prefix}:{key}' if self.prefix is not None else key

    return wrapper


class RedisKeySchema:
    """Provide standardized Redis keys for storing pastes, ledger entries and analytics.

    An optional prefix can be provided to namespace all generated keys.
    It is highly encouraged to set a custom prefix for each app and environment,
    e.g. "cloudpaste:prod" or "cloudpaste:dev".
    """

    def __init__(self, prefix: str | None = None):
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError(f'Prefix must be of type string (given type: {type(prefix)}).')

        self.prefix = prefix

    @prefix_key
    def paste_key(self, url: str) -> str:
        return f'pastes:{url}'

    @prefix_key
    def mirror_paste_key(self, url: str) -> str:
        return f'mirror:pastes:{url}'

    @prefix_key
    def paste_counter_key(self) -> str:
        return 'pastes:counter'

    @prefix_key
    def ledger_entry_key(self, url: str) -> str:
        return f'cleanup:tasks:{url}'

    @prefix_key
    def ledger_due_key(self) -> str:
        return 'cleanup:due'

    @prefix_key
    def ledger_burned_key(self) -> str:
        return 'cleanup:burned'

    @prefix_key
    def analytics_views_key(self, url: str) -> str:
        return f'analytics:{url}:views'

    @prefix_key
    def analytics_hourly_key(self, url: str) -> str:
        return f'analytics:{url}:hourly'

    @staticmethod
    def hourly_bucket(viewed_at: datetime) -> str:
        return viewed_at.strftime('%Y-%m-%dT%H')

    @prefix_key
    def event_stream_key(self, stream: str) -> str:
        return f'events:{stream}'

    @prefix_key
    def dead_letter_stream_key(self, stream: str) -> str:
        return f'events:{stream}.dead'
