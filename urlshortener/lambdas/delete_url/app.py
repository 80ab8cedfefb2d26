import logging
from typing import Any

from urlshortener.exceptions import ConfigurationError
from urlshortener.dao.redis import ShortURLRedisDAO
from urlshortener.dao.exceptions import ShortURLNotFoundError
from urlshortener.utils import load_config, app_prefix, is_valid_url
from urlshortener.utils.helpers import (
    json_body,
    path_parameter,
    response,
    error_response,
    guarantee_500_response,
    require_internal_secret,
)
from urlshortener.lambdas.delete_url.constants import (
    INVALID_REQUEST_PAYLOAD,
    SHORT_URL_NOT_FOUND,
    URL_MISMATCH,
    DELETE_SUCCESS,
)


logger = logging.getLogger(__name__)


@guarantee_500_response
@require_internal_secret
def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle incoming API Gateway requests to delete a short URL

    Request body:
        {"id": <short ID>, "url": <current target>}

    The caller must name the current target; a link is only deleted when it
    still points there.

    HTTP responses:
        200: Short URL deleted
        400: Invalid payload, or `url` doesn't match the stored target
        403: Missing or wrong internal secret
        404: Unknown short ID
        500: Internal server error
    """
    try:
        app_config = load_config('delete_url')
    except (ConfigurationError, KeyError):
        logger.exception('Failed to load AppConfig for delete URL function. Responding with 500.')
        return error_response(500, 'Internal Server Error')
    else:
        redis_config = {f'redis_{k}': v for k, v in app_config['redis'].items()}

    shortcode = path_parameter(event, 'id')
    body = json_body(event)
    if not shortcode or body is None or body.get('id') != shortcode or not is_valid_url(body.get('url')):
        logger.info('Invalid delete request payload. Responding with 400.', extra={'event': INVALID_REQUEST_PAYLOAD})
        return error_response(400, 'Invalid request payload', INVALID_REQUEST_PAYLOAD)

    short_url_dao = ShortURLRedisDAO(**redis_config, prefix=app_prefix())
    try:
        current = short_url_dao.get(shortcode)
        if current.target != body['url']:
            logger.info('Stored URL does not match url. Responding with 400.', extra={'event': URL_MISMATCH, 'shortcode': shortcode})
            return error_response(400, 'URL mismatch', URL_MISMATCH)
        short_url_dao.delete(shortcode)
    except ShortURLNotFoundError:
        logger.info('Short URL record not found in database. Responding with 404.', extra={'event': SHORT_URL_NOT_FOUND, 'shortcode': shortcode})
        return error_response(404, 'URL not found', SHORT_URL_NOT_FOUND)

    logger.info('Deleted short URL. Responding with 200.', extra={'event': DELETE_SUCCESS, 'shortcode': shortcode})
    return response(200, {'message': 'URL deleted'})
