"""Helper utilities for AWS lambda functions.

Functions:
    base_url(event) -> str
        Extract correct public base URL from API Gateway event
    get_short_url(shortcode, event) -> str
        Get string representation of short URL for a given shortcode
    client_ip(event) -> str
        Extract the caller's source IP address from API Gateway event
    is_valid_url(url) -> bool
        Check that a string is an absolute URL with scheme and host
    require_environment(*names: str) -> Callable
        Decorator: Ensure required environment variables are present
    require_internal_secret(handler) -> Callable
        Decorator: Reject requests without the internal secret header
    guarantee_500_response(handler) -> Callable
        Decorator: Turn unexpected exceptions into a 500 response

Example:
    Typical usage inside a Lambda handler:

        >>> from urlshortener.utils.helpers import base_url
        >>> event = {
        ...     "requestContext": {
        ...         "domainName": "abc123.execute-api.us-east-1.amazonaws.com",
        ...         "stage": "Prod"
        ...     }
        ... }
        >>> base_url(event)
        'https://abc123.execute-api.us-east-1.amazonaws.com/Prod'

        >>> base_url({})
        'http://localhost:3000'
"""

import os
import hmac
import json
import logging
import functools
from typing import Any
from urllib.parse import urlparse
from collections.abc import Callable

from urlshortener.constants import ENV, INTERNAL_SECRET_HEADER, UNKNOWN_INTERNAL_SERVER_ERROR
from urlshortener.exceptions import MissingEnvironmentVariableError
from urlshortener.utils.runtime import running_locally


logger = logging.getLogger(__name__)


def base_url(event: dict[str, Any]) -> str:
    """Extract public base URL from API Gateway event

    Works with both custom and default AWS API Gateway domains.
    If a custom domain is configured, the stage name is omitted.
    If using the default AWS execute-api domain, the stage name is included.

    Args:
        event (dict): API Gateway event object passed to Lambda handler

    Returns:
        str: Base URL, e.g.:
             - "https://sho.rt"
             - "https://abc123.execute-api.us-east-1.amazonaws.com/Prod"
    """
    request_context = event.get('requestContext') or {}
    domain = request_context.get('domainName', '')
    stage = request_context.get('stage', '')

    if domain and 'execute-api' not in domain:
        # If the domain is a custom domain (no execute-api), skip stage
        return f'https://{domain}'
    elif domain:
        # Otherwise include the stage (for AWS default domains)
        return f'https://{domain}/{stage}'
    else:
        # Fallback: local invocation (SAM CLI, tests, etc.)
        return 'http://localhost:3000'


def get_short_url(shortcode: str, event: dict[str, Any]) -> str:
    """Get string representation of shortened URL

    Args:
        shortcode (str): shortcode
        event (dict): API Gateway event object passed to Lambda handler

    Returns:
        str: short url string representation
    """
    return f'{base_url(event).rstrip("/")}/{shortcode}'


def client_ip(event: dict[str, Any]) -> str:
    """Extract the caller's source IP from API Gateway event

    REST APIs (payload v1) expose it under `requestContext.identity.sourceIp`,
    HTTP APIs (payload v2) under `requestContext.http.sourceIp`.

    Returns:
        str: source IP address, or 'unknown' when absent.
    """
    request_context = event.get('requestContext') or {}
    for section in ('identity', 'http'):
        source_ip = (request_context.get(section) or {}).get('sourceIp')
        if source_ip:
            return source_ip
    return 'unknown'


def is_valid_url(url: Any) -> bool:
    """Check that `url` is an absolute http(s) URL with a host

    Example:
        >>> is_valid_url('https://example.com/page')
        True
        >>> is_valid_url('example.com/page')
        False
    """
    if not isinstance(url, str) or not url:
        return False
    components = urlparse(url)
    return components.scheme in {'http', 'https'} and bool(components.netloc)


def json_body(event: dict[str, Any]) -> dict[str, Any] | None:
    """Parse the request body as a JSON object

    Returns:
        dict | None: parsed body ({} for an empty body), None if the body is
        not valid JSON or not a JSON object.
    """
    try:
        body = json.loads(event.get('body') or '{}')
    except json.JSONDecodeError:
        return None
    return body if isinstance(body, dict) else None


def path_parameter(event: dict[str, Any], name: str) -> str | None:
    return (event.get('pathParameters') or {}).get(name)


def header(event: dict[str, Any], name: str) -> str | None:
    """Case-insensitive header lookup in an API Gateway event"""
    headers = event.get('headers') or {}
    name = name.lower()
    return next((value for key, value in headers.items() if key.lower() == name), None)


def require_environment(*names: str) -> Callable:
    """Decorator ensuring required environment variables are present.

    Args:
        *names (str):
            Names of required environment variables.

    Raises:
        MissingEnvironmentVariableError:
            If any required environment variable is missing or empty.

    Example:
        >>> @require_environment('APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID')
        ... def my_function():
        ...     pass
        >>> my_function()
        MissingEnvironmentVariableError: Missing required environment variables: 'APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID'
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            missing = [name for name in names if not os.environ.get(name)]
            if missing:
                missing_list = ', '.join(f"'{name}'" for name in missing)
                raise MissingEnvironmentVariableError(f'Missing required environment variables: {missing_list}')
            return func(*args, **kwargs)

        return wrapper

    return decorator


def response(status_code: int, body: dict[str, Any], headers: dict[str, str] | None = None) -> dict[str, Any]:
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json', **(headers or {})},
        'body': json.dumps(body),
    }


def error_response(status_code: int, message: str, error_code: str | None = None) -> dict[str, Any]:
    body = {'message': message}
    if error_code:
        body['errorCode'] = error_code
    return response(status_code, body)


def response_302(*, location: str) -> dict[str, Any]:
    return {
        'statusCode': 302,
        'headers': {'Location': location},
        'body': json.dumps({}),  # no body needed for redirects
    }


def require_internal_secret(handler: Callable) -> Callable:
    """Decorator: only let requests carrying the internal secret through

    The `X-Internal-Secret` header must equal the `INTERNAL_SECRET_VALUE`
    environment variable (compared in constant time). Otherwise the handler
    is not called and a 403 response is returned.

    Raises:
        MissingEnvironmentVariableError:
            If `INTERNAL_SECRET_VALUE` is not set. An unset secret must never
            open internal routes.
    """

    @functools.wraps(handler)
    def wrapper(event: dict[str, Any], context: Any) -> dict[str, Any]:
        expected = os.environ.get(ENV.App.INTERNAL_SECRET)
        if not expected:
            raise MissingEnvironmentVariableError(f"Missing required environment variables: '{ENV.App.INTERNAL_SECRET}'")

        provided = header(event, INTERNAL_SECRET_HEADER) or ''
        if not hmac.compare_digest(provided.encode(), expected.encode()):
            logger.info('Internal secret mismatch. Responding with 403.', extra={'event': 'FORBIDDEN'})
            return error_response(403, 'Forbidden', 'FORBIDDEN')
        return handler(event, context)

    return wrapper


def guarantee_500_response(handler: Callable) -> Callable:
    """Decorator: respond with 500 whenever the handler raises unexpectedly

    When running locally the exception is re-raised instead, so stack traces
    reach the developer.
    """

    @functools.wraps(handler)
    def wrapper(event: dict[str, Any], context: Any) -> dict[str, Any]:
        try:
            return handler(event, context)
        except Exception:
            if running_locally():
                raise
            logger.exception('Unhandled exception in lambda handler. Responding with 500.')
            return error_response(500, 'Internal Server Error', UNKNOWN_INTERNAL_SERVER_ERROR)

    return wrapper
