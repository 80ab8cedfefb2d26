import json
from typing import cast
from unittest.mock import MagicMock

import pytest
import redis
from pytest import MonkeyPatch

from urlshortener.types import LambdaEvent, LambdaContext, LambdaConfiguration
from urlshortener.lambdas.shorten_url import app
from urlshortener.models import ShortURLModel
from urlshortener.dao.base import ShortURLBaseDAO
from urlshortener.dao.exceptions import DataStoreError, ShortURLAlreadyExistsError
from urlshortener.exceptions import (
    CancellationError,
    MissingEnvironmentVariableError,
    RandomSourceError,
    StoreLookupError,
    UniquenessExhaustedError,
)


SECRET = 'test-internal-secret'


def make_event(body: str | None, secret: str | None = SECRET) -> LambdaEvent:
    headers = {'Content-Type': 'application/json'}
    if secret is not None:
        headers['X-Internal-Secret'] = secret
    return cast(LambdaEvent, {
        'resource': '/v1/shorten',
        'httpMethod': 'POST',
        'path': '/v1/shorten',
        'headers': headers,
        'body': body,
        'requestContext': {'domainName': 'sho.rt', 'stage': 'test'},
    })


@pytest.fixture
def successful_event_200() -> LambdaEvent:
    return make_event(json.dumps({'url': 'https://example.com/blog/chuck-norris-is-awesome'}))


class TestShortenUrlHandler:

    @pytest.fixture
    def context(self) -> LambdaContext:
        return None

    @pytest.fixture
    def config(self) -> LambdaConfiguration:
        return cast(LambdaConfiguration, {'redis': {'host': 'redis.test', 'port': 6379, 'db': 0}})

    @pytest.fixture
    def short_url_dao(self) -> ShortURLBaseDAO:
        dao = MagicMock(spec=ShortURLBaseDAO)
        dao.exists.return_value = False
        return dao

    @pytest.fixture(autouse=True)
    def setup(
        self,
        monkeypatch: MonkeyPatch,
        context: LambdaContext,
        config: LambdaConfiguration,
        short_url_dao: ShortURLBaseDAO,
    ) -> None:
        # Patch Lambda dependencies
        monkeypatch.setenv('INTERNAL_SECRET_VALUE', SECRET)
        monkeypatch.setenv('APP_ENV', 'test')
        monkeypatch.delenv('AWS_SAM_LOCAL', raising=False)
        monkeypatch.setattr(app, 'load_config', lambda *a, **kw: config)
        monkeypatch.setattr(app, 'ShortURLRedisDAO', lambda *a, **kw: short_url_dao)

        self.monkeypatch = monkeypatch
        self.context = context
        self.short_url_dao = short_url_dao

    def fail_generation_with(self, error: Exception) -> None:
        def _generate_unique(*args, **kwargs):
            raise error

        self.monkeypatch.setattr(app, 'generate_unique', _generate_unique)

    def test_lambda_handler(self, successful_event_200: LambdaEvent) -> None:
        response = app.lambda_handler(successful_event_200, self.context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 200
        assert response['headers']['Content-Type'] == 'application/json'
        shortcode = body['id']
        assert len(shortcode) == 5
        assert body['shortened_url'] == f'https://sho.rt/{shortcode}'

        self.short_url_dao.exists.assert_called_once_with(shortcode)
        self.short_url_dao.insert.assert_called_once_with(
            ShortURLModel(target='https://example.com/blog/chuck-norris-is-awesome', shortcode=shortcode)
        )

    def test_lambda_handler_retries_taken_shortcodes(self, successful_event_200: LambdaEvent) -> None:
        self.short_url_dao.exists.side_effect = [True, True, False]

        response = app.lambda_handler(successful_event_200, self.context)

        assert response['statusCode'] == 200
        assert self.short_url_dao.exists.call_count == 3
        assert json.loads(response['body'])['id'] == self.short_url_dao.exists.call_args.args[0]

    @pytest.mark.parametrize('secret', [None, 'wrong-secret'])
    def test_lambda_handler_without_internal_secret(self, secret: str | None) -> None:
        event = make_event(json.dumps({'url': 'https://example.com'}), secret=secret)

        response = app.lambda_handler(event, self.context)

        assert response['statusCode'] == 403
        assert json.loads(response['body'])['errorCode'] == 'FORBIDDEN'
        self.short_url_dao.exists.assert_not_called()
        self.short_url_dao.insert.assert_not_called()

    def test_lambda_handler_with_unset_internal_secret(self, successful_event_200: LambdaEvent) -> None:
        self.monkeypatch.delenv('INTERNAL_SECRET_VALUE')

        response = app.lambda_handler(successful_event_200, self.context)

        assert response['statusCode'] == 500
        assert json.loads(response['body'])['errorCode'] == 'UNKNOWN_INTERNAL_SERVER_ERROR'

    def test_lambda_handler_reraises_locally(self, successful_event_200: LambdaEvent) -> None:
        self.monkeypatch.setenv('APP_ENV', 'local')
        self.monkeypatch.delenv('INTERNAL_SECRET_VALUE')

        with pytest.raises(MissingEnvironmentVariableError):
            app.lambda_handler(successful_event_200, self.context)

    @pytest.mark.parametrize(
        'body, error_code',
        [
            ('not json', 'INVALID_JSON_BODY'),
            ('["https://example.com"]', 'INVALID_JSON_BODY'),
            (None, 'INVALID_TARGET_URL'),
            ('{}', 'INVALID_TARGET_URL'),
            ('{"url": "example.com/no-scheme"}', 'INVALID_TARGET_URL'),
            ('{"url": 42}', 'INVALID_TARGET_URL'),
        ],
    )
    def test_lambda_handler_with_bad_request(self, body: str | None, error_code: str) -> None:
        response = app.lambda_handler(make_event(body), self.context)

        assert response['statusCode'] == 400
        assert json.loads(response['body'])['errorCode'] == error_code
        self.short_url_dao.insert.assert_not_called()

    def test_lambda_handler_with_broken_config(self, successful_event_200: LambdaEvent) -> None:
        def _load_config(*args, **kwargs):
            raise MissingEnvironmentVariableError("Missing required environment variables: 'APPCONFIG_APP_ID'")

        self.monkeypatch.setattr(app, 'load_config', _load_config)

        response = app.lambda_handler(successful_event_200, self.context)

        assert response['statusCode'] == 500
        self.short_url_dao.insert.assert_not_called()

    def test_lambda_handler_with_unavailable_store(self, successful_event_200: LambdaEvent) -> None:
        self.short_url_dao.exists.side_effect = DataStoreError("Can't connect to Redis at redis.test:6379/0.")

        response = app.lambda_handler(successful_event_200, self.context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 503
        assert body == {'message': 'Failed to generate ID', 'errorCode': 'STORE_LOOKUP'}
        assert self.short_url_dao.exists.call_count == 1
        self.short_url_dao.insert.assert_not_called()

    def test_lambda_handler_with_store_rejecting_lookup(self, successful_event_200: LambdaEvent) -> None:
        self.short_url_dao.exists.side_effect = redis.exceptions.ResponseError("READONLY You can't write against a read only replica.")

        response = app.lambda_handler(successful_event_200, self.context)

        assert response['statusCode'] == 503
        assert json.loads(response['body']) == {'message': 'Failed to generate ID', 'errorCode': 'STORE_LOOKUP'}
        self.short_url_dao.insert.assert_not_called()

    @pytest.mark.parametrize(
        'error, status_code, error_code',
        [
            (UniquenessExhaustedError(attempts=1337, length=5), 503, 'UNIQUENESS_EXHAUSTED'),
            (StoreLookupError(shortcode='abc12', attempt=3), 503, 'STORE_LOOKUP'),
            (CancellationError('Operation deadline exceeded.'), 504, 'CANCELLED'),
            (RandomSourceError('Random source unavailable.'), 500, 'RANDOM_SOURCE'),
        ],
    )
    def test_lambda_handler_with_generation_failure(
        self,
        successful_event_200: LambdaEvent,
        error: Exception,
        status_code: int,
        error_code: str,
    ) -> None:
        self.fail_generation_with(error)

        response = app.lambda_handler(successful_event_200, self.context)

        assert response['statusCode'] == status_code
        assert json.loads(response['body']) == {'message': 'Failed to generate ID', 'errorCode': error_code}
        self.short_url_dao.insert.assert_not_called()

    def test_lambda_handler_with_concurrent_insert(self, successful_event_200: LambdaEvent) -> None:
        self.short_url_dao.insert.side_effect = ShortURLAlreadyExistsError("Short URL with code 'abc12' already exists.")

        response = app.lambda_handler(successful_event_200, self.context)

        assert response['statusCode'] == 409
        assert json.loads(response['body'])['errorCode'] == 'SHORTCODE_COLLISION'
