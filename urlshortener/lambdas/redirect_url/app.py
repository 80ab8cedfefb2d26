import logging
from typing import Any

from urlshortener.constants import DefaultRateLimit
from urlshortener.exceptions import ConfigurationError
from urlshortener.ratelimit import RateLimiterRegistry
from urlshortener.dao.redis import ShortURLRedisDAO
from urlshortener.dao.exceptions import ShortURLNotFoundError
from urlshortener.utils import load_config, get_short_url, app_prefix, client_ip
from urlshortener.utils.helpers import path_parameter, error_response, response_302, guarantee_500_response
from urlshortener.lambdas.redirect_url.constants import (
    MISSING_SHORTCODE,
    SHORT_URL_NOT_FOUND,
    RATE_LIMITED,
    REDIRECT_SUCCESS,
)


logger = logging.getLogger(__name__)

# One limiter per client IP, shared by every invocation served by this execution environment
limiters = RateLimiterRegistry()


@guarantee_500_response
def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle incoming API Gateway requests to redirect URLs

    Delegates to `redirect()` with this execution environment's limiter registry.

    Example:
        >>> event = {'pathParameters': {'id': 'q0_Zk'}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        302
        >>> response['headers']['Location']
        'https://example.com/my-page'
    """
    return redirect(event, limiters)


def redirect(event: dict[str, Any], limiters: RateLimiterRegistry) -> dict[str, Any]:
    """Redirect a client to the target URL behind a short ID

    This function follows this procedure to redirect URLs:
    - Step 1: Load application config
    - Step 2: Extract short ID from request path
    - Step 3: Admit the request through the client's rate limiter
    - Step 4: Get short URL record from database
    - Step 5: Redirect client to target URL

    A rate-limited client receives the same 404 as a client asking for a
    missing link, so clients cannot tell that they are throttled.

    HTTP responses:
        302: Successful redirect
            headers:
                Location: target URL destination
        400: Missing short ID in path parameters
        404: Unknown short ID, or client is rate limited
        500: Internal server error

    Args:
        event (dict):
            API Gateway event payload containing the `id` path parameter.
        limiters (RateLimiterRegistry):
            Per-client limiters. Limiters created here use the configured rate and burst.

    Returns:
        dict:
            API Gateway-compatible response including statusCode, headers, and body.
    """
    # 1- Get application's config
    try:
        app_config = load_config('redirect_url')
    except (ConfigurationError, KeyError):
        logger.exception('Failed to load AppConfig for redirect URL function. Responding with 500.')
        return error_response(500, 'Internal Server Error')
    else:
        logger.debug('Assuming Redis as the backend database for short URLs')
        redis_config = {f'redis_{k}': v for k, v in app_config['redis'].items()}
        rate_limit = app_config.get('rate_limit', {})
        rate = float(rate_limit.get('rate', DefaultRateLimit.RATE))
        burst = int(rate_limit.get('burst', DefaultRateLimit.BURST))

    # 2- Extract short ID from request's path
    shortcode = path_parameter(event, 'id')
    if not shortcode:
        logger.info('Missing "id" in path. Responding with 400.', extra={'event': MISSING_SHORTCODE})
        return error_response(400, "Bad Request (missing 'id' in path)", MISSING_SHORTCODE)
    logger.debug('Client requested short URL %s.', get_short_url(shortcode, event))

    # 3- Rate limit per client IP
    source_ip = client_ip(event)
    if not limiters.get_or_create(source_ip, rate, burst).allow():
        logger.info(
            'Client exceeded redirect rate limit. Responding with 404.',
            extra={'event': RATE_LIMITED, 'shortcode': shortcode, 'sourceIp': source_ip},
        )
        return error_response(404, 'URL not found', SHORT_URL_NOT_FOUND)

    # 4- Get short_url record from database
    short_url_dao = ShortURLRedisDAO(**redis_config, prefix=app_prefix())
    try:
        short_url = short_url_dao.get(shortcode)
    except ShortURLNotFoundError:
        logger.info(
            'Short URL record not found in database. Responding with 404.',
            extra={'event': SHORT_URL_NOT_FOUND, 'shortcode': shortcode},
        )
        return error_response(404, 'URL not found', SHORT_URL_NOT_FOUND)

    # 5- Redirect client to target URL
    logger.info(
        'Redirecting client to target URL. Responding with 302.',
        extra={'event': REDIRECT_SUCCESS, 'shortcode': shortcode},
    )
    return response_302(location=short_url.target)
