from datetime import timedelta
from enum import StrEnum


# Fixed set of symbolic durations accepted by TIMED expiration policies
DURATIONS: dict[str, timedelta] = {
    '10minutes': timedelta(minutes=10),
    '1hour': timedelta(hours=1),
    '1day': timedelta(days=1),
    '1week': timedelta(weeks=1),
    '2weeks': timedelta(weeks=2),
    '1month': timedelta(days=30),
    '6months': timedelta(days=182),
    '1year': timedelta(days=365),
}


class RoutingKey(StrEnum):
    """Routing keys of paste lifecycle events."""

    PASTE_CREATED = 'paste.created'
    PASTE_VIEWED = 'paste.viewed'
    PASTE_BURNED = 'paste.burned'
    PASTE_DELETED = 'paste.deleted'


class Defaults:
    """Default values for tunables which may be overridden by AppConfig."""

    EVENT_STREAM = 'paste.events'
    CLEANUP_GROUP = 'cleanup.events'
    ANALYTICS_GROUP = 'analytics.events'
    MAX_DELIVERY_ATTEMPTS = 10
    CONSUMER_BLOCK_MS = 1_000
    CONSUMER_BATCH_SIZE = 10
    SWEEP_INTERVAL_SECONDS = 60
    BURN_WORKERS = 4
    BURN_QUEUE_SIZE = 64
    SHORTCODE_LENGTH = 8
    SHORTCODE_SALT = 'cloudpaste'


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        LOG_LEVEL = 'LOG_LEVEL'
        AWS_SAM_LOCAL = 'AWS_SAM_LOCAL'
        LOCAL_CONFIG_FILE = 'LOCAL_CONFIG_FILE'
        SHORTCODE_SALT = 'SHORTCODE_SALT'

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'


# Error codes
UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'
