import logging
from typing import Any

from urlshortener.constants import SHORTCODE_LENGTH
from urlshortener.context import OperationContext
from urlshortener.exceptions import ConfigurationError, ErrorKind, ShortIDError
from urlshortener.models import ShortURLModel
from urlshortener.shortid import generate_unique
from urlshortener.dao.redis import ShortURLRedisDAO
from urlshortener.dao.exceptions import ShortURLAlreadyExistsError
from urlshortener.utils import load_config, get_short_url, app_prefix, is_valid_url
from urlshortener.utils.helpers import (
    json_body,
    response,
    error_response,
    guarantee_500_response,
    require_internal_secret,
)
from urlshortener.lambdas.shorten_url.constants import (
    INVALID_JSON_BODY,
    INVALID_TARGET_URL,
    SHORTCODE_GENERATION_FAILED,
    SHORTCODE_COLLISION,
    SHORTEN_SUCCESS,
)


logger = logging.getLogger(__name__)

# HTTP status per short ID failure kind; unlisted kinds map to 500
SHORTID_ERROR_STATUS = {
    ErrorKind.STORE_LOOKUP: 503,
    ErrorKind.UNIQUENESS_EXHAUSTED: 503,
    ErrorKind.CANCELLED: 504,
}


@guarantee_500_response
@require_internal_secret
def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle incoming API Gateway requests to shorten URLs

    This Lambda handler follows this procedure to shorten URLs:
    - Step 1: Load application config
    - Step 2: Extract and validate the original URL from request body
    - Step 3: Generate a short ID which is not taken yet
    - Step 4: Store short ID and target URL mapping in database (via DAO)
    - Step 5: Respond with the short ID and the full short URL

    The internal secret header is verified before any of these steps
    (see require_internal_secret()).

    HTTP responses:
        200: Successful URL shortening
            id: newly generated short ID
            shortened_url: newly generated short URL
        400: Bad client request (invalid JSON body, missing or invalid url)
        403: Missing or wrong internal secret
        409: Generated short ID was taken concurrently
        500: Internal server error
        503: Short ID store unavailable or keyspace exhausted
        504: Ran out of time while generating a short ID

    Args:
        event (dict[str, Any]):
            API Gateway event payload in Lambda Proxy format.
        context (Any):
            AWS Lambda context object containing runtime information.

    Returns:
        dict[str, Any]:
            API Gateway Lambda Proxy response.

    Example:
        >>> event = {'headers': {'X-Internal-Secret': '...'}, 'body': '{"url": "https://example.com"}'}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        200
        >>> json.loads(response['body'])
        {'id': 'q0_Zk', 'shortened_url': 'http://localhost:3000/q0_Zk'}
    """
    # 1- Get application's config
    try:
        app_config = load_config('shorten_url')
    except (ConfigurationError, KeyError):
        logger.exception('Failed to load AppConfig for shorten URL function. Responding with 500.')
        return error_response(500, 'Internal Server Error')
    else:
        redis_config = {f'redis_{k}': v for k, v in app_config['redis'].items()}

    # 2- Extract original URL from request body
    body = json_body(event)
    if body is None:
        logger.info('Invalid JSON body. Responding with 400.', extra={'event': INVALID_JSON_BODY})
        return error_response(400, 'Bad Request (invalid JSON body)', INVALID_JSON_BODY)

    target_url = body.get('url')
    if not is_valid_url(target_url):
        logger.info('Missing or invalid url in body. Responding with 400.', extra={'event': INVALID_TARGET_URL})
        return error_response(400, "Bad Request (missing or invalid 'url' in JSON body)", INVALID_TARGET_URL)

    short_url_dao = ShortURLRedisDAO(**redis_config, prefix=app_prefix())

    # 3- Generate a free short ID
    try:
        shortcode = generate_unique(OperationContext.from_lambda_context(context), short_url_dao, SHORTCODE_LENGTH)
    except ShortIDError as e:
        status_code = SHORTID_ERROR_STATUS.get(e.kind, 500)
        logger.error(
            'Failed to generate short ID. Responding with %s.',
            status_code,
            exc_info=True,
            extra={'event': SHORTCODE_GENERATION_FAILED, 'kind': e.kind, 'errorCode': e.error_code},
        )
        return error_response(status_code, 'Failed to generate ID', e.kind)

    # 4- Store mapping. SET NX rejects a shortcode minted concurrently by another request.
    try:
        short_url_dao.insert(ShortURLModel(target=target_url, shortcode=shortcode))
    except ShortURLAlreadyExistsError:
        logger.warning(
            'Short ID taken between uniqueness check and insert. Responding with 409.',
            extra={'event': SHORTCODE_COLLISION, 'shortcode': shortcode},
        )
        return error_response(409, 'Conflict (short ID was taken concurrently, retry the request)', SHORTCODE_COLLISION)

    # 5- Respond with the new short URL
    shortened_url = get_short_url(shortcode, event)
    logger.info('Shortened URL. Responding with 200.', extra={'event': SHORTEN_SUCCESS, 'shortcode': shortcode})
    return response(200, {'id': shortcode, 'shortened_url': shortened_url})
