"""Paste lifecycle events and their JSON wire format

Every event travels on the topic-routed event channel with a routing key equal
to the event name. The set of events is closed: `decode_event()` only ever
returns one of the dataclasses below, and anything else is rejected with
EventDecodeError before it reaches a handler.

    paste.created  -> PasteCreated{url, created_at, expiration_policy}
    paste.viewed   -> PasteViewed{url, viewed_at}
    paste.burned   -> BurnAfterReadViewed{url}
    paste.deleted  -> PasteDeleted{url, deleted_at}

Example:
    >>> routing_key, body = encode_event(PasteViewed(url='a1b2c3d4', viewed_at=now))
    >>> routing_key
    'paste.viewed'
    >>> decode_event(routing_key, body) == PasteViewed(url='a1b2c3d4', viewed_at=now)
    True
"""

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar

from cloudpaste.constants import RoutingKey
from cloudpaste.exceptions import EventDecodeError
from cloudpaste.models import ExpirationPolicy


@dataclass(frozen=True)
class PasteCreated:
    routing_key: ClassVar[RoutingKey] = RoutingKey.PASTE_CREATED

    url: str
    created_at: datetime
    expiration_policy: ExpirationPolicy

    def to_dict(self) -> dict[str, Any]:
        return {
            'url': self.url,
            'created_at': self.created_at.isoformat(),
            'expiration_policy': self.expiration_policy.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'PasteCreated':
        return cls(
            url=data['url'],
            created_at=datetime.fromisoformat(data['created_at']),
            expiration_policy=ExpirationPolicy.from_dict(data['expiration_policy']),
        )


@dataclass(frozen=True)
class PasteViewed:
    routing_key: ClassVar[RoutingKey] = RoutingKey.PASTE_VIEWED

    url: str
    viewed_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {'url': self.url, 'viewed_at': self.viewed_at.isoformat()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'PasteViewed':
        return cls(url=data['url'], viewed_at=datetime.fromisoformat(data['viewed_at']))


@dataclass(frozen=True)
class BurnAfterReadViewed:
    routing_key: ClassVar[RoutingKey] = RoutingKey.PASTE_BURNED

    url: str

    def to_dict(self) -> dict[str, Any]:
        return {'url': self.url}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'BurnAfterReadViewed':
        return cls(url=data['url'])


@dataclass(frozen=True)
class PasteDeleted:
    routing_key: ClassVar[RoutingKey] = RoutingKey.PASTE_DELETED

    url: str
    deleted_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {'url': self.url, 'deleted_at': self.deleted_at.isoformat()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'PasteDeleted':
        return cls(url=data['url'], deleted_at=datetime.fromisoformat(data['deleted_at']))


type PasteEvent = PasteCreated | PasteViewed | BurnAfterReadViewed | PasteDeleted

EVENT_TYPES: dict[str, type[PasteEvent]] = {
    RoutingKey.PASTE_CREATED: PasteCreated,
    RoutingKey.PASTE_VIEWED: PasteViewed,
    RoutingKey.PASTE_BURNED: BurnAfterReadViewed,
    RoutingKey.PASTE_DELETED: PasteDeleted,
}


def encode_event(event: PasteEvent) -> tuple[str, str]:
    """Serialize an event into its (routing key, JSON body) pair"""
    return str(event.routing_key), json.dumps(event.to_dict(), separators=(',', ':'), ensure_ascii=False)


def decode_event(routing_key: str, body: str | bytes) -> PasteEvent:
    """Decode a (routing key, JSON body) pair into one of the known event types

    Raises:
        EventDecodeError:
            If the routing key is unknown or the body is not a valid payload
            for the event type selected by the routing key.
    """
    event_type = EVENT_TYPES.get(routing_key)
    if event_type is None:
        raise EventDecodeError(f'Unknown routing key: {routing_key!r}.')

    try:
        data = json.loads(body)
        return event_type.from_dict(data)
    except (ValueError, KeyError, TypeError) as e:
        raise EventDecodeError(f'Malformed {routing_key!r} event payload.') from e
