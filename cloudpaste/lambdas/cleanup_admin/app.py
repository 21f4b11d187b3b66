import json
import logging
from datetime import datetime, timedelta, UTC

from cloudpaste.types import LambdaEvent, LambdaContext, LambdaResponse
from cloudpaste.services import CleanupService
from cloudpaste.services.factory import build_cleanup_service
from cloudpaste.utils import load_config
from cloudpaste.utils.helpers import guarantee_500_response
from cloudpaste.lambdas.cleanup_admin.constants import (
    SWEEP_SUCCESS,
    STATUS_SUCCESS,
    UNSUPPORTED_ROUTE,
    SWEEP_DEADLINE_MARGIN_SECONDS,
)


logger = logging.getLogger(__name__)

# Reused across warm invocations, so status() reports this container's sweeps
_service: CleanupService | None = None


def cleanup_service() -> CleanupService:
    global _service
    if _service is None:
        _service = build_cleanup_service(load_config('cleanup_admin'))
    return _service


def response_200(body: dict) -> LambdaResponse:
    return {
        'statusCode': 200,
        'headers': {'Content-Type': 'application/json'},
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


def sweep_deadline(context: LambdaContext) -> datetime | None:
    """Latest instant a new deletion pipeline may start within this invocation"""
    get_remaining_time = getattr(context, 'get_remaining_time_in_millis', None)
    if get_remaining_time is None:
        return None
    remaining = timedelta(milliseconds=get_remaining_time()) - timedelta(seconds=SWEEP_DEADLINE_MARGIN_SECONDS)
    return datetime.now(UTC) + max(remaining, timedelta(0))


def is_scheduled_event(event: LambdaEvent) -> bool:
    return event.get('source') == 'aws.events' or event.get('detail-type') == 'Scheduled Event'


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Administrative cleanup trigger

    Routes:
        POST /cleanup/run      -> run one sweep now
        GET  /cleanup/status   -> last sweep time and cumulative deleted count
        EventBridge schedule   -> run one sweep (same as POST /cleanup/run)

    HTTP responses:
        200: {"pastes_deleted": n} or {"last_run": "...", "pastes_deleted": n}
        404: unsupported route
        500: internal server error (e.g. ledger unreachable)
    """
    method = event.get('httpMethod', '')
    path = (event.get('path') or '').rstrip('/')

    if is_scheduled_event(event) or (method == 'POST' and path.endswith('/cleanup/run')):
        deleted = cleanup_service().run_sweep(deadline=sweep_deadline(context))
        logger.info('Sweep triggered. Responding with 200.', extra={'event': SWEEP_SUCCESS, 'deleted': deleted})
        return response_200({'pastes_deleted': deleted})

    if method == 'GET' and path.endswith('/cleanup/status'):
        status = cleanup_service().status()
        logger.info('Status requested. Responding with 200.', extra={'event': STATUS_SUCCESS})
        return response_200(
            {
                'last_run': status.last_run.isoformat() if status.last_run else None,
                'pastes_deleted': status.pastes_deleted,
            }
        )

    logger.info('Unsupported route. Responding with 404.', extra={'event': UNSUPPORTED_ROUTE, 'method': method, 'path': path})
    return response_404(message=f'{method} {path} is not supported', error_code=UNSUPPORTED_ROUTE)
