import os
import json
import logging

from cloudpaste import policy
from cloudpaste.types import LambdaEvent, LambdaContext, LambdaResponse
from cloudpaste.models import ExpirationPolicy
from cloudpaste.constants import ENV, Defaults
from cloudpaste.exceptions import InvalidPolicyConfigurationError
from cloudpaste.services.factory import build_creation_service
from cloudpaste.utils import load_config, get_short_url
from cloudpaste.utils.helpers import guarantee_500_response
from cloudpaste.lambdas.create_paste.constants import (
    INVALID_JSON_BODY,
    MISSING_CONTENT,
    INVALID_EXPIRATION_POLICY,
    CREATE_PASTE_SUCCESS,
)


logger = logging.getLogger(__name__)


def response_201(*, url: str, short_url: str, remaining_time: str) -> LambdaResponse:
    return {
        'statusCode': 201,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps({'url': url, 'short_url': short_url, 'remaining_time': remaining_time}),
    }


def response_400(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    base = 'Bad Request'
    body = {'message': base if not message else f'{base} ({message})'}
    if error_code:
        body['errorCode'] = error_code
    return {
        'statusCode': 400,
        'body': json.dumps(body),
    }


def parse_expiration_policy(data: object) -> ExpirationPolicy:
    """Build an expiration policy from a request body field

    Raises:
        InvalidPolicyConfigurationError:
            If the field is not an object with a known 'type' (and, for TIMED, a known 'duration').
    """
    if not isinstance(data, dict):
        raise InvalidPolicyConfigurationError("'expiration_policy' must be an object.")
    try:
        # Clients can't create pastes which are already read
        expiration_policy = ExpirationPolicy.from_dict({**data, 'is_read': False})
    except (KeyError, ValueError) as e:
        raise InvalidPolicyConfigurationError(f"Unknown expiration policy type: {data.get('type')!r}.") from e
    return policy.validate_policy(expiration_policy)


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to create a paste

    This Lambda handler follows this procedure:
    - Step 1: Extract content and expiration policy from request body
    - Step 2: Store the paste and announce it (via PasteCreationService)
    - Step 3: Respond with the new paste's url

    Request body:
        {
            "content": "hello world",
            "expiration_policy": {"type": "TIMED", "duration": "10minutes"}
        }

    HTTP responses:
        201: Paste created
            url, short_url, remaining_time
        400: Bad client request
            message: invalid JSON, missing content or invalid expiration policy
        500: Internal server error
            message: server experienced an internal error
    """
    # 0- Get service's config
    app_config = load_config('create_paste')

    # 1- Extract content and expiration policy from request body
    try:
        request_body = json.loads(event.get('body') or '{}')
    except json.JSONDecodeError:
        logger.info('Invalid JSON body. Responding with 400.', extra={'event': INVALID_JSON_BODY})
        return response_400(message='invalid JSON body', error_code=INVALID_JSON_BODY)
    if not isinstance(request_body, dict):
        logger.info('JSON body is not an object. Responding with 400.', extra={'event': INVALID_JSON_BODY})
        return response_400(message='invalid JSON body', error_code=INVALID_JSON_BODY)

    content = request_body.get('content')
    if not content or not isinstance(content, str):
        logger.info('Missing "content" in body. Responding with 400.', extra={'event': MISSING_CONTENT})
        return response_400(message="missing 'content' in JSON body", error_code=MISSING_CONTENT)

    try:
        expiration_policy = parse_expiration_policy(request_body.get('expiration_policy', {'type': 'NEVER'}))
    except InvalidPolicyConfigurationError as e:
        logger.info('Invalid expiration policy. Responding with 400.', extra={'event': INVALID_EXPIRATION_POLICY, 'reason': str(e)})
        return response_400(message=str(e), error_code=INVALID_EXPIRATION_POLICY)

    # 2- Store the paste and announce it
    service = build_creation_service(app_config, salt=os.getenv(ENV.App.SHORTCODE_SALT) or Defaults.SHORTCODE_SALT)
    paste = service.create(content, expiration_policy)

    # 3- Respond with the new paste's url
    logger.info(
        'Created paste. Responding with 201.',
        extra={'url': paste.url, 'event': CREATE_PASTE_SUCCESS},
    )
    return response_201(
        url=paste.url,
        short_url=get_short_url(paste.url, event),
        remaining_time=policy.remaining_description(paste.expiration_policy, paste.created_at, paste.created_at),
    )
