import json
from datetime import datetime, timedelta, UTC
from typing import cast
from unittest.mock import MagicMock

import pytest
from pytest import MonkeyPatch

from urlshortener.types import LambdaEvent, LambdaContext, LambdaConfiguration
from urlshortener.lambdas.redirect_url import app
from urlshortener.models import ShortURLModel
from urlshortener.ratelimit import RateLimiterRegistry
from urlshortener.dao.base import ShortURLBaseDAO
from urlshortener.dao.exceptions import ShortURLNotFoundError


def make_event(path_parameters: dict | None, source_ip: str = '203.0.113.7') -> LambdaEvent:
    return cast(LambdaEvent, {
        'resource': '/{id}',
        'pathParameters': path_parameters,
        'httpMethod': 'GET',
        'path': '/abc12',
        'requestContext': {
            'domainName': 'testhost:1000',
            'stage': 'test',
            'identity': {'sourceIp': source_ip},
        },
    })


@pytest.fixture
def successful_event_302() -> LambdaEvent:
    return make_event({'id': 'abc12'})


@pytest.fixture
def bad_request_400() -> LambdaEvent:
    return make_event({'invalid': 'path'})


class TestRedirect:

    @pytest.fixture
    def config(self) -> LambdaConfiguration:
        return cast(LambdaConfiguration, {
            'redis': {'host': 'redis.test', 'port': 6379, 'db': 0},
            'rate_limit': {'rate': 0, 'burst': 3},
        })

    @pytest.fixture
    def limiters(self) -> RateLimiterRegistry:
        return RateLimiterRegistry()

    @pytest.fixture
    def short_url_dao(self) -> ShortURLBaseDAO:
        dao = MagicMock(spec=ShortURLBaseDAO)
        dao.get.return_value = ShortURLModel(
            target='https://example.com/blog/chuck-norris-is-awesome',
            shortcode='abc12',
            expires_at=datetime.now(UTC) + timedelta(days=10),
        )
        return dao

    @pytest.fixture(autouse=True)
    def setup(
        self,
        monkeypatch: MonkeyPatch,
        config: LambdaConfiguration,
        limiters: RateLimiterRegistry,
        short_url_dao: ShortURLBaseDAO,
    ) -> None:
        # Patch Lambda dependencies
        monkeypatch.setattr(app, 'load_config', lambda *a, **kw: config)
        monkeypatch.setattr(app, 'ShortURLRedisDAO', lambda *a, **kw: short_url_dao)

        self.config = config
        self.limiters = limiters
        self.short_url_dao = short_url_dao

    def test_redirect(self, successful_event_302: LambdaEvent) -> None:
        response = app.redirect(successful_event_302, self.limiters)
        headers = response['headers']
        body = json.loads(response['body'])

        # Assert client is redirected to target URL
        assert response['statusCode'] == 302
        assert body == {}
        assert headers['Location'] == 'https://example.com/blog/chuck-norris-is-awesome'
        self.short_url_dao.get.assert_called_once_with('abc12')

    @pytest.mark.parametrize('path_parameters', [{'invalid': 'path'}, {'id': ''}, None])
    def test_redirect_with_invalid_path_parameters(self, path_parameters: dict | None) -> None:
        response = app.redirect(make_event(path_parameters), self.limiters)
        body = json.loads(response['body'])

        assert response['statusCode'] == 400
        assert body['message'] == "Bad Request (missing 'id' in path)"
        assert body['errorCode'] == 'MISSING_SHORTCODE'
        self.short_url_dao.get.assert_not_called()

    def test_redirect_with_unknown_shortcode(self, successful_event_302: LambdaEvent) -> None:
        self.short_url_dao.get.side_effect = ShortURLNotFoundError("Short URL with code 'abc12' not found.")

        response = app.redirect(successful_event_302, self.limiters)
        body = json.loads(response['body'])

        assert response['statusCode'] == 404
        assert body == {'message': 'URL not found', 'errorCode': 'SHORT_URL_NOT_FOUND'}

    def test_redirect_rate_limits_client(self, successful_event_302: LambdaEvent) -> None:
        """Requests beyond the client's burst look exactly like a missing link."""
        self.short_url_dao.get.side_effect = [
            self.short_url_dao.get.return_value,
            self.short_url_dao.get.return_value,
            ShortURLNotFoundError("Short URL with code 'abc12' not found."),
            ShortURLNotFoundError("Short URL with code 'abc12' not found."),
        ]

        statuses = [app.redirect(successful_event_302, self.limiters)['statusCode'] for _ in range(3)]
        limited = app.redirect(successful_event_302, self.limiters)
        missing_body = json.loads(app.redirect(make_event({'id': 'abc12'}, '192.0.2.1'), self.limiters)['body'])

        assert statuses == [302, 302, 404]
        assert limited['statusCode'] == 404
        assert json.loads(limited['body']) == {'message': 'URL not found', 'errorCode': 'SHORT_URL_NOT_FOUND'}
        assert json.loads(limited['body']) == missing_body
        # the limited request never reached the database
        assert self.short_url_dao.get.call_count == 4

    def test_redirect_limits_clients_independently(self) -> None:
        for _ in range(3):
            app.redirect(make_event({'id': 'abc12'}, '203.0.113.7'), self.limiters)

        assert app.redirect(make_event({'id': 'abc12'}, '203.0.113.7'), self.limiters)['statusCode'] == 404
        assert app.redirect(make_event({'id': 'abc12'}, '198.51.100.2'), self.limiters)['statusCode'] == 302

    def test_redirect_registries_do_not_share_limiters(self, successful_event_302: LambdaEvent) -> None:
        for _ in range(3):
            app.redirect(successful_event_302, self.limiters)

        assert app.redirect(successful_event_302, self.limiters)['statusCode'] == 404
        assert app.redirect(successful_event_302, RateLimiterRegistry())['statusCode'] == 302

    def test_redirect_uses_default_rate_limit(self, monkeypatch: MonkeyPatch, successful_event_302: LambdaEvent) -> None:
        monkeypatch.setattr(app, 'load_config', lambda *a, **kw: {'redis': self.config['redis']})

        app.redirect(successful_event_302, self.limiters)

        limiter = self.limiters.get_or_create('203.0.113.7', rate=1, burst=1)
        assert limiter.rate == app.DefaultRateLimit.RATE
        assert limiter.burst == app.DefaultRateLimit.BURST

    def test_redirect_with_broken_config(self, monkeypatch: MonkeyPatch, successful_event_302: LambdaEvent) -> None:
        def _load_config(*args, **kwargs):
            raise KeyError('configs')

        monkeypatch.setattr(app, 'load_config', _load_config)

        response = app.redirect(successful_event_302, self.limiters)

        assert response['statusCode'] == 500
        self.short_url_dao.get.assert_not_called()


class TestRedirectUrlHandler:

    @pytest.fixture
    def context(self) -> LambdaContext:
        return cast(LambdaContext, {'function_name': 'redirect_url'})

    @pytest.fixture(autouse=True)
    def setup(self, monkeypatch: MonkeyPatch, context: LambdaContext) -> None:
        monkeypatch.setenv('APP_ENV', 'test')
        monkeypatch.delenv('AWS_SAM_LOCAL', raising=False)

        self.monkeypatch = monkeypatch
        self.context = context

    def test_lambda_handler_uses_module_registry(self, successful_event_302: LambdaEvent) -> None:
        redirect = MagicMock(return_value={'statusCode': 302})
        self.monkeypatch.setattr(app, 'redirect', redirect)

        response = app.lambda_handler(successful_event_302, self.context)

        assert response == {'statusCode': 302}
        redirect.assert_called_once_with(successful_event_302, app.limiters)
        assert isinstance(app.limiters, RateLimiterRegistry)

    def test_lambda_handler_with_unexpected_error(self, successful_event_302: LambdaEvent) -> None:
        self.monkeypatch.setattr(app, 'redirect', MagicMock(side_effect=RuntimeError('boom')))

        response = app.lambda_handler(successful_event_302, self.context)

        assert response['statusCode'] == 500
        assert json.loads(response['body'])['errorCode'] == 'UNKNOWN_INTERNAL_SERVER_ERROR'
