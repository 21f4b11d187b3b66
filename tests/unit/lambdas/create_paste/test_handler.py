import json
from datetime import datetime, UTC
from typing import cast
from unittest.mock import MagicMock

import pytest
from pytest import MonkeyPatch

from cloudpaste.types import LambdaEvent, LambdaContext, ServiceConfig
from cloudpaste.lambdas.create_paste import app
from cloudpaste.models import ExpirationPolicy, Paste
from cloudpaste.services import PasteCreationService
from cloudpaste.exceptions import InvalidPolicyConfigurationError
from cloudpaste.dao.exceptions import DataStoreError


def apigw_event(body: object) -> LambdaEvent:
    return cast(LambdaEvent, {
        'resource': '/',
        'httpMethod': 'POST',
        'path': '/',
        'body': body if isinstance(body, str) or body is None else json.dumps(body),
        'requestContext': {'domainName': 'testhost:1000', 'stage': 'test', 'resourcePath': '/'},
    })


class TestCreatePasteHandler:

    @pytest.fixture
    def context(self) -> LambdaContext:
        return cast(LambdaContext, {'function_name': 'create_paste'})

    @pytest.fixture
    def config(self) -> ServiceConfig:
        return cast(ServiceConfig, {
            'primary': {'host': 'redis.test', 'port': 6379, 'db': 0},
            'mirror': {'host': 'redis.test', 'port': 6379, 'db': 0},
            'events': {'host': 'redis.test', 'port': 6379, 'db': 0},
        })

    @pytest.fixture
    def service(self) -> PasteCreationService:
        def create(content: str, expiration_policy: ExpirationPolicy) -> Paste:
            return Paste(
                url='a1b2c3d4',
                content=content,
                created_at=datetime(2025, 10, 15, tzinfo=UTC),
                expiration_policy=expiration_policy,
            )

        service = MagicMock(spec=PasteCreationService)
        service.create.side_effect = create
        return service

    @pytest.fixture(autouse=True)
    def setup(
        self,
        monkeypatch: MonkeyPatch,
        context: LambdaContext,
        config: ServiceConfig,
        service: PasteCreationService,
    ) -> None:
        # Patch Lambda dependencies
        self.build_creation_service = MagicMock(return_value=service)
        monkeypatch.setattr(app, 'load_config', lambda *a, **kw: config)
        monkeypatch.setattr(app, 'build_creation_service', self.build_creation_service)
        monkeypatch.delenv('SHORTCODE_SALT', raising=False)

        self.context = context
        self.config = config
        self.service = service

    def test_lambda_handler(self) -> None:
        event = apigw_event({'content': 'hello world', 'expiration_policy': {'type': 'TIMED', 'duration': '10minutes'}})

        response = app.lambda_handler(event, self.context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 201
        assert response['headers']['Content-Type'] == 'application/json'
        assert body == {
            'url': 'a1b2c3d4',
            'short_url': 'https://testhost:1000/a1b2c3d4',
            'remaining_time': '10 minutes',
        }
        self.service.create.assert_called_once_with('hello world', ExpirationPolicy.timed('10minutes'))
        self.build_creation_service.assert_called_once_with(self.config, salt='cloudpaste')

    def test_lambda_handler_uses_salt_from_environment(self, monkeypatch: MonkeyPatch) -> None:
        monkeypatch.setenv('SHORTCODE_SALT', 'pepper')

        app.lambda_handler(apigw_event({'content': 'hello world'}), self.context)

        self.build_creation_service.assert_called_once_with(self.config, salt='pepper')

    def test_lambda_handler_defaults_to_never(self) -> None:
        response = app.lambda_handler(apigw_event({'content': 'hello world'}), self.context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 201
        assert body['remaining_time'] == 'never'
        self.service.create.assert_called_once_with('hello world', ExpirationPolicy.never())

    def test_lambda_handler_burn_after_read(self) -> None:
        event = apigw_event({'content': 'top secret', 'expiration_policy': {'type': 'BURN_AFTER_READ', 'is_read': True}})

        response = app.lambda_handler(event, self.context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 201
        assert body['remaining_time'] == 'after reading'
        self.service.create.assert_called_once_with('top secret', ExpirationPolicy.burn_after_read())

    @pytest.mark.parametrize('raw_body', ['{not json', '[1, 2, 3]', '"hello"'])
    def test_lambda_handler_with_invalid_json(self, raw_body: str) -> None:
        response = app.lambda_handler(apigw_event(raw_body), self.context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 400
        assert body['message'] == 'Bad Request (invalid JSON body)'
        assert body['errorCode'] == 'INVALID_JSON_BODY'
        self.service.create.assert_not_called()

    @pytest.mark.parametrize('payload', [None, {}, {'content': ''}, {'content': 42}])
    def test_lambda_handler_with_missing_content(self, payload) -> None:
        response = app.lambda_handler(apigw_event(payload), self.context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 400
        assert body['message'] == "Bad Request (missing 'content' in JSON body)"
        assert body['errorCode'] == 'MISSING_CONTENT'

    @pytest.mark.parametrize(
        'expiration_policy',
        [
            'NEVER',
            {},
            {'type': 'SOMETIMES'},
            {'type': 'TIMED'},
            {'type': 'TIMED', 'duration': 'forever'},
            {'type': 'NEVER', 'duration': '1hour'},
        ],
    )
    def test_lambda_handler_with_invalid_expiration_policy(self, expiration_policy) -> None:
        event = apigw_event({'content': 'hello world', 'expiration_policy': expiration_policy})

        response = app.lambda_handler(event, self.context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 400
        assert body['errorCode'] == 'INVALID_EXPIRATION_POLICY'
        self.service.create.assert_not_called()

    def test_lambda_handler_with_unreachable_store(self) -> None:
        self.service.create.side_effect = DataStoreError('primary down')

        response = app.lambda_handler(apigw_event({'content': 'hello world'}), self.context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 500
        assert body['message'] == 'Internal Server Error'

    def test_lambda_handler_with_invalid_configuration_file(self, monkeypatch: MonkeyPatch) -> None:
        monkeypatch.setattr(app, 'load_config', MagicMock(side_effect=FileNotFoundError('Something goes wrong')))

        response = app.lambda_handler(apigw_event({'content': 'hello world'}), self.context)

        assert response['statusCode'] == 500


class TestParseExpirationPolicy:

    def test_parse_timed(self) -> None:
        assert app.parse_expiration_policy({'type': 'TIMED', 'duration': '1week'}) == ExpirationPolicy.timed('1week')

    def test_parse_unknown_type(self) -> None:
        with pytest.raises(InvalidPolicyConfigurationError, match='SOMETIMES'):
            app.parse_expiration_policy({'type': 'SOMETIMES'})
