"""Utility functions for application configuration management.

Every entry point (Lambda handler or worker) reads its configuration from one
JSON document stored in **AWS AppConfig**. Each environment (`APP_ENV`) has a
dedicated AppConfig *Environment* within the AppConfig *Application* named by
`APP_NAME`.

The configuration document follows this structure:

    {
        "build": 12,
        "configs": {
            "get_paste": {
                "mirror": {"host": "...", "port": 6379, "db": 0},
                "cache": {"host": "...", "port": 6379, "db": 1, "ttl": 3600},
                "events": {"host": "...", "port": 6379, "db": 2, "stream": "paste.events"}
            },
            "cleanup_worker": {
                "primary": { ... },
                "mirror": { ... },
                "ledger": { ... },
                "analytics": { ... },
                "events": { ..., "group": "cleanup.events" },
                "sweep": {"interval_seconds": 60, "burn_workers": 4, "burn_queue_size": 64}
            }
        }
    }

Each service loads its own section (e.g. `"get_paste"`) from that document.

When running locally (`APP_ENV=local` or under SAM) and `LOCAL_CONFIG_FILE`
points at a YAML file holding the same document, the file is used instead of
AppConfig.

Typical usage:
    >>> from cloudpaste.utils.config import load_config
    >>> config = load_config('get_paste')
    >>> print(config['mirror']['host'])
    redis-mirror.host.docker.internal
"""

import os
import json
import functools
import logging
from pathlib import Path
from collections.abc import Callable

import boto3
import yaml

from cloudpaste.types import AppConfig, AppConfigDataClient, ServiceConfig
from cloudpaste.constants import ENV
from cloudpaste.exceptions import BadConfigurationError
from cloudpaste.utils.helpers import require_environment
from cloudpaste.utils.runtime import running_locally


logger = logging.getLogger(__name__)


def app_env() -> str:
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    return os.environ.get(ENV.App.APP_NAME)


def app_prefix() -> str | None:
    return None if app_name() is None else f'{app_name()}:{app_env()}'


def service_section(document: AppConfig, service_name: str) -> ServiceConfig:
    """Pick one service's section out of a full configuration document

    Raises:
        BadConfigurationError:
            If the document has no `configs` mapping or no section for `service_name`.
    """
    configs = document.get('configs') if isinstance(document, dict) else None
    if not isinstance(configs, dict):
        raise BadConfigurationError("Configuration document is missing the 'configs' mapping.")
    if not isinstance(configs.get(service_name), dict):
        raise BadConfigurationError(f"Configuration document has no section for '{service_name}'.")
    return configs[service_name]


def _load_local_config_file(func: Callable) -> Callable:
    """Decorator: load the configuration document from a local YAML file.

    Behavior:
        - If the application runs locally and `LOCAL_CONFIG_FILE` is set, read
          the document from that file.
        - Else, call the wrapped function (which pulls from AWS AppConfig via boto3).
    """

    @functools.wraps(func)
    def wrapper(service_name: str) -> ServiceConfig:
        path = os.getenv(ENV.App.LOCAL_CONFIG_FILE)
        if not running_locally() or not path:
            return func(service_name)

        logger.debug('Trying to load configuration from local file.', extra={'path': path, 'serviceName': service_name})
        with Path(path).open(encoding='utf-8') as f:
            document = yaml.safe_load(f) or {}

        config = service_section(document, service_name)
        logger.debug('Loaded configuration from local file.', extra={'serviceName': service_name, 'build': document.get('build')})
        return config

    return wrapper


@_load_local_config_file
@require_environment(ENV.AppConfig.APP_ID, ENV.AppConfig.ENV_ID, ENV.AppConfig.PROFILE_ID)
def load_config(service_name: str) -> ServiceConfig:
    """Load the configuration section of a service from AWS AppConfig.

    Raises:
        MissingEnvironmentVariableError:
            If any APPCONFIG_* identifier is missing.
        BadConfigurationError:
            If the document has no section for `service_name`.
    """
    logger.debug('Trying to load AppConfig from AWS AppConfig.', extra={'serviceName': service_name})

    appconfig: AppConfigDataClient = boto3.client('appconfigdata')

    # Start an AppConfig data session
    session_token = appconfig.start_configuration_session(
        ApplicationIdentifier=os.environ[ENV.AppConfig.APP_ID],
        EnvironmentIdentifier=os.environ[ENV.AppConfig.ENV_ID],
        ConfigurationProfileIdentifier=os.environ[ENV.AppConfig.PROFILE_ID],
    )['InitialConfigurationToken']

    response = appconfig.get_latest_configuration(ConfigurationToken=session_token)
    content = response['Configuration'].read()
    document = json.loads(content.decode('utf-8'))

    config = service_section(document, service_name)
    logger.debug('Loaded AppConfig from AWS AppConfig.', extra={'serviceName': service_name, 'build': document.get('build')})
    return config
