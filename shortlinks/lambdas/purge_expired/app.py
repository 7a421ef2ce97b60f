import json
import logging

from shortlinks.lifecycle import ShortURLLifecycle
from shortlinks.dao import dao_from_config
from shortlinks.dao.exceptions import DataStoreError
from shortlinks.types import LambdaEvent, LambdaContext
from shortlinks.utils import load_config, ShortenerSettings
from shortlinks.lambdas.purge_expired.constants import SUCCESS, ERROR


logger = logging.getLogger(__name__)


def response_success(*, purged: list[str], retention_minutes: int) -> str:
    return json.dumps(
        {
            'status': SUCCESS,
            'purged': len(purged),
            'shortcodes': purged,
            'retention_minutes': retention_minutes,
            'message': f'Purged {len(purged)} short URLs expired more than {retention_minutes} minutes ago',
        }
    )


def response_error(*, error: Exception) -> str:
    return json.dumps(
        {
            'status': ERROR,
            'message': 'Failed to purge expired short URLs',
            'reason': str(error),
            'error': error.__class__.__name__,
        }
    )


def lambda_handler(event: LambdaEvent, context: LambdaContext) -> str:
    """Delete short URLs which expired longer ago than the configured retention

    Triggered by an EventBridge schedule. Links inside the retention window
    are kept, so they keep answering 410 instead of 404.

    Diagnostic responses:
        success:
            status: success
            purged: <number of deleted links>
            shortcodes: [<deleted shortcodes>]
            retention_minutes: <retention>
            message: Purged <n> short URLs expired more than <retention> minutes ago
        error:
            status: error
            message: Failed to purge expired short URLs
            reason: <reason>
            error: <error class name> (e.g. DataStoreError)

    Args:
        event (dict):
            EventBridge event payload.
        context (LambdaContext):
            AWS Lambda context object containing runtime information.

    Returns:
        str: JSON diagnostic document.

    Example:
        >>> json.loads(lambda_handler({}, None))['status']
        'success'
    """
    app_config = load_config('purge_expired')
    settings = ShortenerSettings.from_config(app_config)
    retention_minutes = settings.expired_retention_minutes

    try:
        lifecycle = ShortURLLifecycle.from_settings(dao_from_config(app_config), settings)
        purged = lifecycle.purge_expired(retention_minutes)
    except DataStoreError as error:
        logger.exception(
            'Failed to purge expired short URLs.',
            extra={'event': ERROR, 'reason': str(error), 'error': error.__class__.__name__},
        )
        return response_error(error=error)

    shortcodes = [record.shortcode for record in purged]
    logger.info(
        'Purged %s expired short URLs.',
        len(shortcodes),
        extra={'event': SUCCESS, 'shortcodes': shortcodes, 'retentionMinutes': retention_minutes},
    )
    return response_success(purged=shortcodes, retention_minutes=retention_minutes)
