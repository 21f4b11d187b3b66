from dataclasses import dataclass, replace
from datetime import datetime
from enum import StrEnum
from typing import Any


class PolicyType(StrEnum):
    NEVER = 'NEVER'
    TIMED = 'TIMED'
    BURN_AFTER_READ = 'BURN_AFTER_READ'


@dataclass(frozen=True)
class ExpirationPolicy:
    """Rule deciding when (and if) a paste becomes inaccessible.

    Exactly one variant is attached to a paste for its whole lifetime. The variant
    and its duration never change; only `is_read` flips for BURN_AFTER_READ.

    Attributes:
        type (PolicyType):
            Policy variant.
        duration (str | None):
            Symbolic duration (e.g. '10minutes'), set for TIMED policies only.
        is_read (bool):
            True once a BURN_AFTER_READ paste has been read.

    Example:
        >>> policy = ExpirationPolicy.timed('1hour')
        >>> policy.to_dict()
        {'type': 'TIMED', 'duration': '1hour', 'is_read': False}
        >>> ExpirationPolicy.burn_after_read().mark_read().is_read
        True
    """

    type: PolicyType
    duration: str | None = None
    is_read: bool = False

    @classmethod
    def never(cls) -> 'ExpirationPolicy':
        return cls(type=PolicyType.NEVER)

    @classmethod
    def timed(cls, duration: str) -> 'ExpirationPolicy':
        return cls(type=PolicyType.TIMED, duration=duration)

    @classmethod
    def burn_after_read(cls) -> 'ExpirationPolicy':
        return cls(type=PolicyType.BURN_AFTER_READ)

    def mark_read(self) -> 'ExpirationPolicy':
        return replace(self, is_read=True)

    def to_dict(self) -> dict[str, Any]:
        return {'type': str(self.type), 'duration': self.duration, 'is_read': self.is_read}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'ExpirationPolicy':
        """Build a policy from its serialized form

        Raises:
            ValueError:
                If the policy type is missing or unknown.
        """
        return cls(
            type=PolicyType(data['type']),
            duration=data.get('duration') or None,
            is_read=bool(data.get('is_read', False)),
        )


# fmt: off
@dataclass(frozen=True)
class Paste:
    url: str                              # Unique short URL identifier (sole primary key)
    content: str                          # Opaque text payload
    created_at: datetime                  # Creation timestamp (timezone-aware, UTC)
    expiration_policy: ExpirationPolicy   # Attached expiration policy
    view_count: int = 0                   # Views recorded against the owning store
# fmt: on

    def to_dict(self) -> dict[str, Any]:
        return {
            'url': self.url,
            'content': self.content,
            'created_at': self.created_at.isoformat(),
            'expiration_policy': self.expiration_policy.to_dict(),
            'view_count': self.view_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'Paste':
        return cls(
            url=data['url'],
            content=data['content'],
            created_at=datetime.fromisoformat(data['created_at']),
            expiration_policy=ExpirationPolicy.from_dict(data['expiration_policy']),
            view_count=int(data.get('view_count', 0)),
        )


# fmt: off
@dataclass(frozen=True)
class PasteView:
    url: str                              # Short URL the paste was fetched by
    content: str                          # Paste content
    remaining_time: str                   # Human-readable remaining lifetime bucket


@dataclass(frozen=True)
class CleanupStatus:
    last_run: datetime | None             # Completion time of the latest sweep (None before the first one)
    pastes_deleted: int                   # Cumulative number of pastes deleted by sweeps
# fmt: on


@dataclass(frozen=True)
class LedgerEntry:
    """Cleanup pipeline's own record of when (or whether) a paste must be purged.

    Attributes:
        url (str):
            Short URL of the paste (foreign key to Paste).
        expire_at (datetime | None):
            Absolute expiry instant for TIMED pastes. None for NEVER and
            BURN_AFTER_READ pastes (the latter are event-triggered).
        burn_after_read (bool):
            True for BURN_AFTER_READ pastes.
        is_read (bool):
            True once a BURN_AFTER_READ paste has been read.
    """

    url: str
    expire_at: datetime | None = None
    burn_after_read: bool = False
    is_read: bool = False

    def is_eligible(self, now: datetime) -> bool:
        """Return True if the entry is due for a sweep as of `now`"""
        if self.burn_after_read:
            return self.is_read
        if self.expire_at is not None:
            return now >= self.expire_at
        return False
