import logging

from shortlinks.lifecycle import ShortURLLifecycle
from shortlinks.dao import dao_from_config
from shortlinks.dao.exceptions import DataStoreError
from shortlinks.stats import summarize, record_metrics
from shortlinks.types import LambdaEvent, LambdaContext, LambdaResponse
from shortlinks.utils import load_config, ShortenerSettings
from shortlinks.utils.helpers import guarantee_500_response
from shortlinks.lambdas.responses import json_response, error_response
from shortlinks.lambdas.url_stats.constants import STATS_SUCCESS, STORAGE_UNAVAILABLE


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle GET /stats

    HTTP responses:
        200:
            stats: total_urls, active_urls, expired_urls, total_clicks, average_clicks
            urls: per link shortcode, hits, status, click_rate and time_remaining
        503: Data store unavailable
        500: Internal server error

    Example:
        >>> json.loads(lambda_handler({}, None)['body'])['stats']
        {'total_urls': 3, 'active_urls': 2, 'expired_urls': 1, 'total_clicks': 10, 'average_clicks': 3.33}
    """
    app_config = load_config('url_stats')
    settings = ShortenerSettings.from_config(app_config)

    try:
        lifecycle = ShortURLLifecycle.from_settings(dao_from_config(app_config), settings)
        records = lifecycle.records()
    except DataStoreError as error:
        logger.exception('Data store unavailable. Responding with 503.', extra={'event': STORAGE_UNAVAILABLE})
        return error_response(error)

    # Single snapshot: totals and per-link metrics agree on the same instant
    now = lifecycle.clock()
    stats = summarize(records, now)
    urls = [{'shortcode': record.shortcode, 'hits': record.hits, **record_metrics(record, now).to_dict()} for record in records]

    logger.info('Computed short URL stats. Responding with 200.', extra={'event': STATS_SUCCESS, **stats.to_dict()})
    return json_response(200, {'stats': stats.to_dict(), 'urls': urls})
