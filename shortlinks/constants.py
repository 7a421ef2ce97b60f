from enum import StrEnum


class Limits:
    """Short URL lifecycle limits."""

    MIN_VALIDITY_MINUTES = 1
    MAX_VALIDITY_MINUTES = 10_080  # 60 * 24 * 7 (one week)
    MIN_SHORTCODE_LENGTH = 3
    MAX_SHORTCODE_LENGTH = 10


class Defaults:
    """Default values for configurable settings."""

    VALIDITY_MINUTES = 30
    ACTIVE_LINK_QUOTA = 5  # Simultaneously active links
    MAX_GENERATION_ATTEMPTS = 100  # Random shortcode draws before giving up
    SHORTCODE_LENGTH = 6
    EXPIRED_RETENTION_MINUTES = 10_080  # Keep expired links one week before purging
    BASE_URL = 'http://localhost:3000'


# Optimistic Redis transactions (WATCH/MULTI/EXEC) retried on WatchError
MAX_TRANSACTION_RETRIES = 10

# Sentinel shown instead of a remaining duration
EXPIRED_LABEL = 'Expired'


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        AWS_SAM_LOCAL = 'AWS_SAM_LOCAL'
        LOG_LEVEL = 'LOG_LEVEL'

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'
        AGENT_URL = 'APPCONFIG_AGENT_URL'
        PROFILE_NAME = 'APPCONFIG_PROFILE_NAME'


# Error codes
BAD_REQUEST = 'request:bad_request'
STORAGE_UNAVAILABLE = 'storage:unavailable'
UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'
