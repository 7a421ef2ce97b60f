import json
import logging

from shortlinks.lifecycle import ShortURLLifecycle
from shortlinks.dao import dao_from_config
from shortlinks.dao.exceptions import DataStoreError
from shortlinks.exceptions import ValidationError, LinkError
from shortlinks.types import LambdaEvent, LambdaContext, LambdaResponse
from shortlinks.utils import load_config, get_short_url, ShortenerSettings
from shortlinks.utils.helpers import guarantee_500_response
from shortlinks.lambdas.responses import json_response, response_400, error_response, short_url_payload
from shortlinks.lambdas.shorten_url.constants import (
    INVALID_JSON_BODY,
    SHORTEN_REJECTED,
    SHORTEN_SUCCESS,
    STORAGE_UNAVAILABLE,
)


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to shorten URLs

    This Lambda handler follows this procedure to shorten URLs:
    - Step 1: Load app config and shortener settings
    - Step 2: Extract target URL, custom shortcode and validity from request body
    - Step 3: Create the short URL (validation, quota and shortcode allocation)
    - Step 4: Respond to user with 201 success

    Request body:
        target_url (str): destination URL
        shortcode (str, optional): custom shortcode, 3-10 alphanumeric characters
        validity_minutes (int, optional): lifetime in minutes (1-10080)

    HTTP responses:
        201: Short URL created
            body: the new record (id, target_url, shortcode, short_url, expires_at, ...)
        400: Bad client request
            error_code: request:bad_request | validation:invalid_url |
                        validation:invalid_shortcode | validation:invalid_validity_period
        409: Custom shortcode already in use
            error_code: link:code_in_use
        429: Active link quota reached
            error_code: link:quota_exceeded
        503: No free shortcode or data store unavailable
            error_code: link:code_space_exhausted | storage:unavailable
        500: Internal server error

    Args:
        event (dict):
            API Gateway event payload in Lambda Proxy format.
        context (LambdaContext):
            AWS Lambda context object containing runtime information.

    Returns:
        dict:
            API Gateway-compatible response including statusCode, headers, and body.

    Example:
        >>> event = {'body': '{"target_url": "https://example.com", "validity_minutes": 60}'}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        201
        >>> json.loads(response['body'])['short_url']
        'http://localhost:3000/aB3xY9'
    """
    # 0- Get application's config
    app_config = load_config('shorten_url')
    settings = ShortenerSettings.from_config(app_config)

    # 1- Extract request parameters from body
    try:
        request_body = json.loads(event.get('body') or '{}')
    except json.JSONDecodeError:
        logger.info('Invalid JSON body. Responding with 400.', extra={'event': INVALID_JSON_BODY})
        return response_400('invalid JSON body')
    if not isinstance(request_body, dict):
        logger.info('JSON body is not an object. Responding with 400.', extra={'event': INVALID_JSON_BODY})
        return response_400('JSON body must be an object')

    target_url = request_body.get('target_url', '')
    shortcode = request_body.get('shortcode', '')
    validity_minutes = request_body.get('validity_minutes', settings.default_validity_minutes)

    # 2- Create the short URL
    try:
        dao = dao_from_config(app_config)
        lifecycle = ShortURLLifecycle.from_settings(dao, settings)
        short_url = lifecycle.shorten(target_url, shortcode=shortcode, validity_minutes=validity_minutes)
    except (ValidationError, LinkError) as error:
        logger.info(
            'Shorten request rejected. Responding with error.',
            extra={'event': SHORTEN_REJECTED, 'error_code': error.error_code, 'reason': str(error)},
        )
        return error_response(error)
    except DataStoreError as error:
        logger.exception('Data store unavailable. Responding with 503.', extra={'event': STORAGE_UNAVAILABLE})
        return error_response(error)

    # 3- Respond with the new record
    short_url_string = get_short_url(short_url.shortcode, event, settings.base_url)
    logger.info(
        'Shortened URL. Responding with 201.',
        extra={'shortcode': short_url.shortcode, 'short_url': short_url_string, 'event': SHORTEN_SUCCESS},
    )
    return json_response(
        201,
        {
            'message': f'Successfully shortened {short_url.target} to {short_url_string}',
            **short_url_payload(short_url, short_url_string, lifecycle.clock()),
        },
    )
