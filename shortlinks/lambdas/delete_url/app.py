import logging

from shortlinks.lifecycle import ShortURLLifecycle
from shortlinks.dao import dao_from_config
from shortlinks.dao.exceptions import DataStoreError
from shortlinks.types import LambdaEvent, LambdaContext, LambdaResponse
from shortlinks.utils import load_config, ShortenerSettings
from shortlinks.utils.helpers import guarantee_500_response
from shortlinks.lambdas.responses import response_400, error_response
from shortlinks.lambdas.delete_url.constants import MISSING_LINK_ID, DELETE_SUCCESS, STORAGE_UNAVAILABLE


logger = logging.getLogger(__name__)


def response_204() -> LambdaResponse:
    return {'statusCode': 204, 'headers': {}, 'body': ''}


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle DELETE /urls/{id}

    Removal is idempotent: deleting an unknown id also responds with 204.

    HTTP responses:
        204: Link removed (or never existed)
        400: Missing id in path parameters
        503: Data store unavailable
        500: Internal server error
    """
    app_config = load_config('delete_url')
    settings = ShortenerSettings.from_config(app_config)

    link_id = (event.get('pathParameters') or {}).get('id')
    if not link_id:
        logger.info('Missing "id" in path. Responding with 400.', extra={'event': MISSING_LINK_ID})
        return response_400("missing 'id' in path")

    try:
        lifecycle = ShortURLLifecycle.from_settings(dao_from_config(app_config), settings)
        lifecycle.remove(link_id)
    except DataStoreError as error:
        logger.exception('Data store unavailable. Responding with 503.', extra={'linkId': link_id, 'event': STORAGE_UNAVAILABLE})
        return error_response(error)

    logger.info('Short URL removed. Responding with 204.', extra={'linkId': link_id, 'event': DELETE_SUCCESS})
    return response_204()
