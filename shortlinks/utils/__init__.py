from shortlinks.utils.config import app_env, app_name, app_prefix, load_config, ShortenerSettings
from shortlinks.utils.helpers import base_url, get_short_url, require_environment, guarantee_500_response
from shortlinks.utils.shortener import generate_shortcode
from shortlinks.utils.validators import validate_url, validate_shortcode
from shortlinks.utils.runtime import running_locally, utc_now
from shortlinks.utils.logging import initialize_logging


__all__ = [
    'generate_shortcode',
    'validate_url',
    'validate_shortcode',
    'app_env',
    'app_name',
    'app_prefix',
    'load_config',
    'ShortenerSettings',
    'base_url',
    'get_short_url',
    'require_environment',
    'guarantee_500_response',
    'running_locally',
    'utc_now',
    'initialize_logging',
]
