import json
import logging

from cloudpaste.types import LambdaEvent, LambdaContext, LambdaResponse
from cloudpaste.exceptions import PasteExpiredError
from cloudpaste.dao.exceptions import PasteNotFoundError
from cloudpaste.services.factory import build_retrieval_service
from cloudpaste.utils import load_config, get_short_url
from cloudpaste.utils.helpers import guarantee_500_response
from cloudpaste.lambdas.get_paste.constants import (
    MISSING_URL,
    PASTE_NOT_FOUND,
    PASTE_EXPIRED,
    GET_PASTE_SUCCESS,
)


logger = logging.getLogger(__name__)


def response_200(*, url: str, content: str, remaining_time: str) -> LambdaResponse:
    return {
        'statusCode': 200,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps({'url': url, 'content': content, 'remaining_time': remaining_time}),
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


def response_404(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    base = 'Not Found'
    body = {'message': base if not message else f'{base} ({message})'}
    if error_code:
        body['errorCode'] = error_code
    return {
        'statusCode': 404,
        'body': json.dumps(body),
    }


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to read a paste

    This Lambda handler follows this procedure:
    - Step 1: Extract paste url from request path
    - Step 2: Fetch the paste through cache and mirror store
    - Step 3: Respond with content and remaining lifetime

    HTTP responses:
        200: Paste found
            url, content, remaining_time
        400: Bad client request
            message: missing 'url' in path parameters
        404: Not found
            message: paste doesn't exist or has expired (burned pastes included)
        500: Internal server error
            message: server experienced an internal error

    Example:
        >>> event = {'pathParameters': {'url': 'a1b2c3d4'}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        200
        >>> json.loads(response['body'])['remaining_time']
        '9 minutes'
    """
    # 0- Get service's config
    app_config = load_config('get_paste')

    # 1- Extract paste url from request's path
    url = (event.get('pathParameters') or {}).get('url')
    if not url:
        logger.info(
            'Missing "url" in path. Responding with 400.',
            extra={'event': MISSING_URL},
        )
        return response_400(message="missing 'url' in path", error_code=MISSING_URL)

    # 2- Fetch the paste
    service = build_retrieval_service(app_config)
    try:
        view = service.fetch(url)
    except PasteNotFoundError:
        logger.info(
            'Paste not found. Responding with 404.',
            extra={'url': url, 'event': PASTE_NOT_FOUND},
        )
        return response_404(message=f"paste {get_short_url(url, event)} doesn't exist", error_code=PASTE_NOT_FOUND)
    except PasteExpiredError:
        logger.info(
            'Paste expired. Responding with 404.',
            extra={'url': url, 'event': PASTE_EXPIRED},
        )
        return response_404(message=f'paste {get_short_url(url, event)} has expired', error_code=PASTE_EXPIRED)

    # 3- Respond with paste content
    logger.info(
        'Serving paste. Responding with 200.',
        extra={'url': url, 'event': GET_PASTE_SUCCESS},
    )
    return response_200(url=view.url, content=view.content, remaining_time=view.remaining_time)
