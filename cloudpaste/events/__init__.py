from cloudpaste.events.models import (
    PasteCreated,
    PasteViewed,
    BurnAfterReadViewed,
    PasteDeleted,
    PasteEvent,
    encode_event,
    decode_event,
)
from cloudpaste.events.base import EventHandler, EventPublisherBase, EventConsumerBase
from cloudpaste.events.redis_streams import RedisStreamPublisher, RedisStreamConsumer


__all__ = [
    'PasteCreated',
    'PasteViewed',
    'BurnAfterReadViewed',
    'PasteDeleted',
    'PasteEvent',
    'encode_event',
    'decode_event',
    'EventHandler',
    'EventPublisherBase',
    'EventConsumerBase',
    'RedisStreamPublisher',
    'RedisStreamConsumer',
]
