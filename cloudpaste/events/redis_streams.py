"""Event channel over Redis Streams

One Redis stream plays the role of a durable topic exchange; every entry
carries its routing key. A consumer group plays the role of a durable queue:
it is bound to a subset of routing keys and silently acknowledges everything
else.

Stream entry fields:
    routing_key  -> event name, e.g. 'paste.created'
    body         -> JSON-encoded event
    attempt      -> delivery attempt (starts at 1)
    requeue_for  -> consumer group a requeued entry is meant for ('' for fresh entries)

Delivery semantics:
    - ack:  XACK the entry.
    - nack: re-append a copy with `attempt + 1` addressed to the same group and
            XACK the original, in one MULTI/EXEC transaction (requeue).
            Entries exceeding `max_attempts` are moved to '<stream>.dead' instead.
    - On start, a consumer first re-reads its own pending entries (messages
      fetched but never acked before a crash or shutdown), then new ones.

Classes:
    RedisStreamPublisher:
        Producer (EventPublisherBase).
    RedisStreamConsumer:
        Consumer (EventConsumerBase).

Example:
    >>> publisher = RedisStreamPublisher(stream='paste.events', prefix='cloudpaste:dev')
    >>> publisher.publish(PasteDeleted(url='a1b2c3d4', deleted_at=now))
    '1760486400000-0'

    >>> consumer = RedisStreamConsumer(
    ...     group='cleanup.events',
    ...     bindings=['paste.created', 'paste.burned'],
    ...     stream='paste.events',
    ...     prefix='cloudpaste:dev',
    ... )
    >>> consumer.consume(service.handle_event, stop_event)
"""

import logging
import socket
import threading
from collections.abc import Iterable
from typing import Any

import redis
from beartype import beartype

from cloudpaste.constants import Defaults
from cloudpaste.dao.redis.mixins import RedisClientMixin
from cloudpaste.dao.redis.helpers import handle_redis_connection_error
from cloudpaste.events.base import EventConsumerBase, EventHandler, EventPublisherBase
from cloudpaste.events.models import PasteEvent, encode_event, decode_event


logger = logging.getLogger(__name__)


class RedisStreamPublisher(RedisClientMixin, EventPublisherBase):
    def __init__(self, stream: str = Defaults.EVENT_STREAM, **kwargs):
        super().__init__(**kwargs)
        self.stream = stream

    @handle_redis_connection_error
    @beartype
    def publish(self, event: PasteEvent) -> str:
        routing_key, body = encode_event(event)
        message_id = self.redis.xadd(
            self.keys.event_stream_key(self.stream),
            {'routing_key': routing_key, 'body': body, 'attempt': 1, 'requeue_for': ''},
        )
        logger.debug('Published event.', extra={'routingKey': routing_key, 'messageId': message_id})
        return message_id


class RedisStreamConsumer(RedisClientMixin, EventConsumerBase):
    """Consumer group reader with ack/nack semantics

    Args:
        group (str):
            Consumer group (durable queue) name, e.g. 'cleanup.events'.
        bindings (Iterable[str]):
            Routing keys delivered to the handler.
        stream (str):
            Stream (exchange) name. Defaults to 'paste.events'.
        consumer_name (str | None):
            Name of this consumer inside the group. Defaults to the hostname,
            so a restarted worker picks up its own pending entries.
        block_ms (int):
            Longest time a single read blocks; bounds shutdown latency.
        batch_size (int):
            Entries fetched per read.
        max_attempts (int):
            Deliveries before an entry is dead-lettered.
        **kwargs:
            Redis connection arguments (see RedisClientMixin).
    """

    def __init__(
        self,
        group: str,
        bindings: Iterable[str],
        stream: str = Defaults.EVENT_STREAM,
        consumer_name: str | None = None,
        block_ms: int = Defaults.CONSUMER_BLOCK_MS,
        batch_size: int = Defaults.CONSUMER_BATCH_SIZE,
        max_attempts: int = Defaults.MAX_DELIVERY_ATTEMPTS,
        **kwargs,
    ):
        RedisClientMixin.__init__(self, **kwargs)
        EventConsumerBase.__init__(self, bindings)
        self.group = group
        self.stream = stream
        self.consumer_name = consumer_name or socket.gethostname()
        self.block_ms = int(block_ms)
        self.batch_size = int(batch_size)
        self.max_attempts = int(max_attempts)

    @property
    def stream_key(self) -> str:
        return self.keys.event_stream_key(self.stream)

    @handle_redis_connection_error
    def consume(self, handler: EventHandler, stop_event: threading.Event) -> None:
        """Deliver events to `handler` until `stop_event` is set

        `stop_event` is checked before every message and after every read, so
        shutdown never waits longer than one handler call plus `block_ms`.
        Entries fetched but not processed because of a shutdown stay pending
        and are redelivered when this consumer restarts.

        Raises:
            DataStoreError:
                If Redis becomes unreachable.
        """
        self._ensure_group()
        logger.info(
            'Started consuming events.',
            extra={'stream': self.stream, 'group': self.group, 'consumer': self.consumer_name, 'bindings': sorted(self.bindings)},
        )

        # Drain our own pending entries first (crash/shutdown recovery), then read new ones
        cursor = '0'
        while not stop_event.is_set():
            response = self.redis.xreadgroup(
                self.group,
                self.consumer_name,
                {self.stream_key: cursor},
                count=self.batch_size,
                block=None if cursor == '0' else self.block_ms,
            )
            entries = [entry for _, stream_entries in response or [] for entry in stream_entries]
            if cursor == '0' and not entries:
                cursor = '>'
                continue

            for message_id, fields in entries:
                if stop_event.is_set():
                    break
                # Trimmed entries come back from the pending list without fields
                self._dispatch(message_id, fields or {}, handler)

        logger.info('Stopped consuming events.', extra={'stream': self.stream, 'group': self.group})

    def _dispatch(self, message_id: str, fields: dict[str, Any], handler: EventHandler) -> None:
        routing_key = fields.get('routing_key', '')
        requeue_for = fields.get('requeue_for') or ''

        # Not for us: acknowledge and move on
        if routing_key not in self.bindings or requeue_for not in ('', self.group):
            self.ack(message_id)
            return

        try:
            event = decode_event(routing_key, fields.get('body', ''))
            handler(event)
        except Exception as error:
            logger.exception(
                'Failed to handle event. Requeueing.',
                extra={'routingKey': routing_key, 'messageId': message_id, 'attempt': fields.get('attempt'), 'error': error.__class__.__name__},
            )
            self.nack(message_id, fields, error)
        else:
            self.ack(message_id)

    def ack(self, message_id: str) -> None:
        self.redis.xack(self.stream_key, self.group, message_id)

    def nack(self, message_id: str, fields: dict[str, Any], error: Exception | None = None) -> None:
        """Negatively acknowledge an entry and requeue it (or dead-letter it)"""
        attempt = int(fields.get('attempt') or 1)

        with self.redis.pipeline(transaction=True) as pipe:
            if attempt >= self.max_attempts:
                logger.error(
                    'Event exceeded max delivery attempts. Moving to dead letter stream.',
                    extra={'routingKey': fields.get('routing_key'), 'messageId': message_id, 'attempt': attempt},
                )
                pipe.xadd(
                    self.keys.dead_letter_stream_key(self.stream),
                    {**fields, 'group': self.group, 'error': repr(error) if error else ''},
                )
            else:
                pipe.xadd(self.stream_key, {**fields, 'attempt': attempt + 1, 'requeue_for': self.group})
            pipe.xack(self.stream_key, self.group, message_id)
            pipe.execute()

    def _ensure_group(self) -> None:
        try:
            self.redis.xgroup_create(self.stream_key, self.group, id='0', mkstream=True)
        except redis.exceptions.ResponseError as e:
            if 'BUSYGROUP' not in str(e):
                raise
