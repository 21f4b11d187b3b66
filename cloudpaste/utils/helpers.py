"""Helpers shared by the Lambda entry points

Functions:
    base_url(event) -> str
        Public base URL the request came in through.
    get_short_url(url, event) -> str
        Public link of a paste.
    require_environment(*names) -> Callable
        Decorator: fail fast when required environment variables are unset.
    guarantee_500_response(func) -> Callable
        Decorator: turn any unhandled exception into a 500 response.

Example:
    >>> event = {'requestContext': {'domainName': 'abc123.execute-api.us-east-1.amazonaws.com', 'stage': 'Prod'}}
    >>> get_short_url('a1b2c3d4', event)
    'https://abc123.execute-api.us-east-1.amazonaws.com/Prod/a1b2c3d4'
    >>> get_short_url('a1b2c3d4', {'requestContext': {'domainName': 'paste.example.com', 'stage': 'Prod'}})
    'https://paste.example.com/a1b2c3d4'
"""

import os
import json
import logging
import functools
from typing import Any
from collections.abc import Callable

from cloudpaste.constants import UNKNOWN_INTERNAL_SERVER_ERROR
from cloudpaste.exceptions import MissingEnvironmentVariableError


logger = logging.getLogger(__name__)

# Base URL of `sam local start-api`
LOCAL_BASE_URL = 'http://localhost:3000'


def base_url(event: dict[str, Any]) -> str:
    """Public base URL of an API Gateway request

    Requests through the default execute-api domain must keep the stage in the
    path; a custom domain maps the stage through its base path mapping.
    """
    request_context = event.get('requestContext') or {}
    domain = request_context.get('domainName')
    if not domain:
        return LOCAL_BASE_URL
    if 'execute-api' in domain:
        return f'https://{domain}/{request_context.get("stage", "")}'
    return f'https://{domain}'


def get_short_url(url: str, event: dict[str, Any]) -> str:
    return f'{base_url(event).rstrip("/")}/{url}'


def require_environment(*names: str) -> Callable:
    """Decorator: raise MissingEnvironmentVariableError unless every variable in `names` is set and non-empty

    Example:
        >>> @require_environment('APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID')
        ... def load():
        ...     ...
        >>> load()
        Traceback (most recent call last):
            ...
        cloudpaste.exceptions.MissingEnvironmentVariableError: Missing required environment variables: 'APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID'
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            missing = ', '.join(f"'{name}'" for name in names if not os.environ.get(name))
            if missing:
                raise MissingEnvironmentVariableError(f'Missing required environment variables: {missing}')
            return func(*args, **kwargs)

        return wrapper

    return decorator


def guarantee_500_response(func: Callable) -> Callable:
    """Decorator: respond with 500 if a Lambda handler raises anything

    The exception is logged with its traceback and never reaches the Lambda
    runtime, so API Gateway always receives a well-formed proxy response.
    """

    @functools.wraps(func)
    def wrapper(event: dict[str, Any], context: Any) -> dict[str, Any]:
        try:
            return func(event, context)
        except Exception as e:
            error_code = getattr(e, 'error_code', UNKNOWN_INTERNAL_SERVER_ERROR)
            logger.exception(
                'Unhandled exception in Lambda handler. Responding with 500.',
                extra={'event': UNKNOWN_INTERNAL_SERVER_ERROR, 'errorCode': error_code},
            )
            return {
                'statusCode': 500,
                'body': json.dumps({'message': 'Internal Server Error', 'errorCode': error_code}),
            }

    return wrapper
