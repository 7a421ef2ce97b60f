import logging

from shortlinks.lifecycle import ShortURLLifecycle
from shortlinks.dao import dao_from_config
from shortlinks.dao.exceptions import DataStoreError
from shortlinks.exceptions import LinkNotFoundError, LinkExpiredError
from shortlinks.types import LambdaEvent, LambdaContext, LambdaResponse
from shortlinks.utils import load_config, get_short_url, ShortenerSettings
from shortlinks.utils.helpers import guarantee_500_response
from shortlinks.lambdas.responses import response_302, response_400, error_response
from shortlinks.lambdas.redirect_url.constants import (
    MISSING_SHORTCODE,
    SHORT_URL_NOT_FOUND,
    SHORT_URL_EXPIRED,
    REDIRECT_SUCCESS,
    STORAGE_UNAVAILABLE,
)


logger = logging.getLogger(__name__)


def _request_source(event: LambdaEvent) -> dict[str, str | None]:
    headers = {k.lower(): v for k, v in (event.get('headers') or {}).items()}
    identity = (event.get('requestContext') or {}).get('identity') or {}
    return {
        'userAgent': headers.get('user-agent') or identity.get('userAgent'),
        'sourceIp': identity.get('sourceIp'),
        'referer': headers.get('referer'),
    }


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to redirect URLs

    This Lambda handler follows this procedure to redirect URLs:
    - Step 1: Extract shortcode from request path
    - Step 2: Resolve the shortcode, counting the click (expired links are refused)
    - Step 3: Redirect client to target URL

    HTTP responses:
        302: Successful redirect
            headers:
                Location: target URL destination
        400: Bad client request
            message: missing shortcode in path parameters
        404: No link for the shortcode
            error_code: link:not_found
        410: Link expired
            error_code: link:expired
        503: Data store unavailable
            error_code: storage:unavailable
        500: Internal server error

    Args:
        event (dict):
            API Gateway event payload containing the shortcode path parameter.
        context (LambdaContext):
            AWS Lambda runtime context object (not used directly).

    Returns:
        dict:
            API Gateway-compatible response including statusCode, headers, and body.

    Example:
        >>> event = {'pathParameters': {'shortcode': 'Gh71TC'}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        302
        >>> response['headers']['Location']
        'https://example.com/my-page'
    """
    # 0- Get application's config
    app_config = load_config('redirect_url')
    settings = ShortenerSettings.from_config(app_config)

    # 1- Extract shortcode from request's path
    shortcode = (event.get('pathParameters') or {}).get('shortcode')
    if shortcode is None:
        logger.info('Missing "shortcode" in path. Responding with 400.', extra={'event': MISSING_SHORTCODE})
        return response_400("missing 'shortcode' in path")
    logger.debug('Client requested short URL %s.', get_short_url(shortcode, event, settings.base_url))

    # 2- Resolve shortcode and count the click
    try:
        dao = dao_from_config(app_config)
        lifecycle = ShortURLLifecycle.from_settings(dao, settings)
        short_url = lifecycle.click(shortcode)
    except LinkNotFoundError as error:
        logger.info(
            'Short URL record not found in database. Responding with 404.',
            extra={'shortcode': shortcode, 'event': SHORT_URL_NOT_FOUND},
        )
        return error_response(error)
    except LinkExpiredError as error:
        logger.info(
            'Short URL expired. Responding with 410.',
            extra={'shortcode': shortcode, 'event': SHORT_URL_EXPIRED},
        )
        return error_response(error)
    except DataStoreError as error:
        logger.exception('Data store unavailable. Responding with 503.', extra={'shortcode': shortcode, 'event': STORAGE_UNAVAILABLE})
        return error_response(error)

    # 3- Redirect client to target URL
    logger.info(
        'Redirecting client to target URL. Responding with 302.',
        extra={'shortcode': shortcode, 'hits': short_url.hits, 'event': REDIRECT_SUCCESS, **_request_source(event)},
    )
    return response_302(location=short_url.target)
