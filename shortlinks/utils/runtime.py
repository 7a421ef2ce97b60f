"""Runtime utilities

Functions:
    running_locally() -> bool:
        True if lambda is running in local SAM, False otherwise.
    utc_now() -> datetime:
        Current wall-clock time as a timezone-aware UTC datetime.

Example:
    >>> from shortlinks.utils.runtime import running_locally
    >>> os.environ['APP_ENV'] = 'local'
    >>> running_locally()
    True
    >>> os.environ['APP_ENV'] = 'dev'
    >>> running_locally()
    False
"""

import os
from datetime import datetime, UTC

from shortlinks.constants import ENV


def running_locally() -> bool:
    """Check if the lambda is running locally (APP_ENV=local or sam local invoke)"""
    env = os.getenv(ENV.App.APP_ENV, '').lower()
    return env == 'local' or os.getenv(ENV.App.AWS_SAM_LOCAL) == 'true'


def utc_now() -> datetime:
    """Return the current time in UTC.

    Used as the default clock of the lifecycle engine so expiry is always
    evaluated against wall-clock time at the moment of the call.
    """
    return datetime.now(UTC)
