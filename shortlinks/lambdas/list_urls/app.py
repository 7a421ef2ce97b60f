import logging

from shortlinks.lifecycle import ShortURLLifecycle
from shortlinks.dao import dao_from_config
from shortlinks.dao.exceptions import DataStoreError
from shortlinks.types import LambdaEvent, LambdaContext, LambdaResponse
from shortlinks.utils import load_config, get_short_url, ShortenerSettings
from shortlinks.utils.helpers import guarantee_500_response
from shortlinks.lambdas.responses import json_response, error_response, short_url_payload
from shortlinks.lambdas.list_urls.constants import LIST_SUCCESS, STORAGE_UNAVAILABLE


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle GET /urls

    Lists every stored short URL, expired ones included, in creation order.
    Each entry carries its live status, click rate and remaining time.

    HTTP responses:
        200: {"count": <n>, "urls": [<record>, ...]}
        503: Data store unavailable
        500: Internal server error
    """
    app_config = load_config('list_urls')
    settings = ShortenerSettings.from_config(app_config)

    try:
        lifecycle = ShortURLLifecycle.from_settings(dao_from_config(app_config), settings)
        records = lifecycle.records()
    except DataStoreError as error:
        logger.exception('Data store unavailable. Responding with 503.', extra={'event': STORAGE_UNAVAILABLE})
        return error_response(error)

    now = lifecycle.clock()
    urls = [short_url_payload(record, get_short_url(record.shortcode, event, settings.base_url), now) for record in records]

    logger.info('Listed short URLs. Responding with 200.', extra={'count': len(urls), 'event': LIST_SUCCESS})
    return json_response(200, {'count': len(urls), 'urls': urls})
