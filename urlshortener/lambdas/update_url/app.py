import logging
from typing import Any

from urlshortener.exceptions import ConfigurationError
from urlshortener.dao.redis import ShortURLRedisDAO
from urlshortener.dao.exceptions import ShortURLNotFoundError
from urlshortener.utils import load_config, get_short_url, app_prefix, is_valid_url
from urlshortener.utils.helpers import (
    json_body,
    path_parameter,
    response,
    error_response,
    guarantee_500_response,
    require_internal_secret,
)
from urlshortener.lambdas.update_url.constants import (
    INVALID_REQUEST_PAYLOAD,
    SHORT_URL_NOT_FOUND,
    URL_MISMATCH,
    UPDATE_SUCCESS,
)


logger = logging.getLogger(__name__)


def validate_update_request(event: dict[str, Any]) -> tuple[str, dict[str, Any]] | None:
    """Return (path id, body) if the update request is well-formed, None otherwise

    The body must repeat the path's short ID and carry valid `old_url` and
    `new_url` values. Requiring the ID in both places stops a request body
    crafted for one link from being replayed against another.
    """
    path_id = path_parameter(event, 'id')
    body = json_body(event)
    if not path_id or body is None:
        return None
    if body.get('id') != path_id:
        return None
    if not is_valid_url(body.get('old_url')) or not is_valid_url(body.get('new_url')):
        return None
    return path_id, body


@guarantee_500_response
@require_internal_secret
def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle incoming API Gateway requests to change the target of a short URL

    Request body:
        {"id": <short ID>, "old_url": <current target>, "new_url": <new target>}

    HTTP responses:
        200: Target updated
            id, shortened_url, status
        400: Invalid payload, or `old_url` doesn't match the stored target
        403: Missing or wrong internal secret
        404: Unknown short ID
        500: Internal server error
    """
    try:
        app_config = load_config('update_url')
    except (ConfigurationError, KeyError):
        logger.exception('Failed to load AppConfig for update URL function. Responding with 500.')
        return error_response(500, 'Internal Server Error')
    else:
        redis_config = {f'redis_{k}': v for k, v in app_config['redis'].items()}

    request = validate_update_request(event)
    if request is None:
        logger.info('Invalid update request payload. Responding with 400.', extra={'event': INVALID_REQUEST_PAYLOAD})
        return error_response(400, 'Invalid request payload', INVALID_REQUEST_PAYLOAD)
    shortcode, body = request

    short_url_dao = ShortURLRedisDAO(**redis_config, prefix=app_prefix())
    try:
        current = short_url_dao.get(shortcode)
        if current.target != body['old_url']:
            logger.info('Stored URL does not match old_url. Responding with 400.', extra={'event': URL_MISMATCH, 'shortcode': shortcode})
            return error_response(400, 'URL mismatch', URL_MISMATCH)
        short_url_dao.update(shortcode, body['new_url'])
    except ShortURLNotFoundError:
        logger.info('Short URL record not found in database. Responding with 404.', extra={'event': SHORT_URL_NOT_FOUND, 'shortcode': shortcode})
        return error_response(404, 'URL not found', SHORT_URL_NOT_FOUND)

    logger.info('Updated short URL target. Responding with 200.', extra={'event': UPDATE_SUCCESS, 'shortcode': shortcode})
    return response(
        200,
        {
            'id': shortcode,
            'shortened_url': get_short_url(shortcode, event),
            'status': 'URL updated',
        },
    )
