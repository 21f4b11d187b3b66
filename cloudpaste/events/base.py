"""Abstract event channel contracts

The event channel is topic-routed, durable and delivers at least once.
Producers publish events with a routing key equal to the event name; consumers
bind a durable queue to the subset of routing keys they need and acknowledge a
message only after it was handled successfully.
"""

import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable

from cloudpaste.events.models import PasteEvent


type EventHandler = Callable[[PasteEvent], None]


class EventPublisherBase(ABC):
    """Producer side of the event channel

    Methods:
        publish(event: PasteEvent) -> str:
            Publish an event under its routing key and return the message id.
            Raises DataStoreError if the channel is unreachable.
    """

    @abstractmethod
    def publish(self, event: PasteEvent) -> str:
        pass


class EventConsumerBase(ABC):
    """Consumer side of the event channel

    Attributes:
        bindings (frozenset[str]):
            Routing keys this consumer's queue is bound to.

    Methods:
        consume(handler: EventHandler, stop_event: threading.Event) -> None:
            Deliver decoded events to `handler` one at a time until `stop_event`
            is set. A message is acknowledged when `handler` returns and negatively
            acknowledged (requeued) when it raises.
    """

    def __init__(self, bindings: Iterable[str]):
        self.bindings = frozenset(str(key) for key in bindings)

    @abstractmethod
    def consume(self, handler: EventHandler, stop_event: threading.Event) -> None:
        pass
