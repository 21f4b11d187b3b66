"""Expiration policy evaluation

Pure decision logic over an expiration policy and timestamps. Nothing in this
module performs I/O or reads the clock; callers always pass `now` explicitly.

Functions:
    timed_duration(policy) -> timedelta
        Map a TIMED policy's symbolic duration to a concrete duration.
    validate_policy(policy) -> ExpirationPolicy
        Reject malformed policies before they reach any store.
    expires_at(policy, created_at) -> datetime | None
        Absolute expiry instant of a TIMED policy, None otherwise.
    is_expired(policy, created_at, now) -> bool
        Decide whether a paste is gone as of `now`.
    remaining_description(policy, created_at, now) -> str
        Human-readable remaining lifetime bucket.

Example:
    >>> from datetime import datetime, timedelta, UTC
    >>> from cloudpaste.models import ExpirationPolicy
    >>> created_at = datetime(2025, 10, 15, tzinfo=UTC)
    >>> policy = ExpirationPolicy.timed('10minutes')
    >>> is_expired(policy, created_at, created_at)
    False
    >>> is_expired(policy, created_at, created_at + timedelta(minutes=11))
    True
    >>> remaining_description(policy, created_at, created_at + timedelta(minutes=1))
    '9 minutes'

NOTE:
    An unrecognized symbolic duration is a configuration error on every path.
    Pastes are validated at creation time, so the error should never reach the
    read path or the cleanup ledger; if it does, it surfaces loudly instead of
    leaving the paste to live forever.
"""

from datetime import datetime, timedelta

from cloudpaste.constants import DURATIONS
from cloudpaste.exceptions import InvalidPolicyConfigurationError
from cloudpaste.models import ExpirationPolicy, PolicyType


def timed_duration(policy: ExpirationPolicy) -> timedelta:
    """Map a TIMED policy's symbolic duration to a fixed duration

    Raises:
        InvalidPolicyConfigurationError:
            If the symbolic duration is not one of DURATIONS.
    """
    try:
        return DURATIONS[policy.duration]
    except KeyError:
        raise InvalidPolicyConfigurationError(f'Unrecognized expiration duration: {policy.duration!r}.') from None


def validate_policy(policy: ExpirationPolicy) -> ExpirationPolicy:
    """Validate a policy before a paste is created with it

    Args:
        policy (ExpirationPolicy):
            Policy requested by the client.

    Returns:
        ExpirationPolicy: the same policy (for chaining).

    Raises:
        InvalidPolicyConfigurationError:
            If the policy type is unknown, a TIMED policy has no recognized
            duration, or a non-TIMED policy carries a duration.
    """
    if not isinstance(policy.type, PolicyType):
        raise InvalidPolicyConfigurationError(f'Unknown expiration policy type: {policy.type!r}.')
    if policy.type == PolicyType.TIMED:
        timed_duration(policy)
    elif policy.duration is not None:
        raise InvalidPolicyConfigurationError(f'Duration is only allowed for TIMED policies (given policy: {policy.type}).')
    return policy


def expires_at(policy: ExpirationPolicy, created_at: datetime) -> datetime | None:
    if policy.type == PolicyType.TIMED:
        return created_at + timed_duration(policy)
    return None


def is_expired(policy: ExpirationPolicy, created_at: datetime, now: datetime) -> bool:
    """Decide whether a paste with `policy` created at `created_at` is gone as of `now`

    TIMED pastes expire once `now` reaches `created_at + duration`.
    BURN_AFTER_READ pastes expire once read. NEVER pastes never expire.
    """
    match policy.type:
        case PolicyType.TIMED:
            return now >= expires_at(policy, created_at)
        case PolicyType.BURN_AFTER_READ:
            return policy.is_read
        case PolicyType.NEVER:
            return False
    raise InvalidPolicyConfigurationError(f'Unknown expiration policy type: {policy.type!r}.')


def remaining_description(policy: ExpirationPolicy, created_at: datetime, now: datetime) -> str:
    """Describe the remaining lifetime of a paste

    Returns:
        str: one of
             - 'N days, H hours' / 'H hours, M minutes' / 'M minutes' (TIMED)
             - 'expired' (TIMED past its deadline, or a read BURN_AFTER_READ)
             - 'after reading' (unread BURN_AFTER_READ)
             - 'never' (NEVER)
    """
    match policy.type:
        case PolicyType.NEVER:
            return 'never'
        case PolicyType.BURN_AFTER_READ:
            return 'expired' if policy.is_read else 'after reading'
        case PolicyType.TIMED:
            remaining = expires_at(policy, created_at) - now
            if remaining <= timedelta(0):
                return 'expired'
            return _describe_timedelta(remaining)
    raise InvalidPolicyConfigurationError(f'Unknown expiration policy type: {policy.type!r}.')


def _describe_timedelta(remaining: timedelta) -> str:
    hours, seconds = divmod(remaining.seconds, 3600)
    minutes = seconds // 60

    if remaining.days > 0:
        return f'{remaining.days} days, {hours} hours'
    if hours > 0:
        return f'{hours} hours, {minutes} minutes'
    return f'{minutes} minutes'
