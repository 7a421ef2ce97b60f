"""Input validation predicates

Functions:
    validate_url(candidate) -> bool
        True if candidate is an absolute URL with a scheme and a host.
    validate_shortcode(candidate) -> bool
        True if candidate is empty (auto-generate) or 3-10 alphanumeric characters.

Example:
    >>> validate_url('https://example.com/a/very/long/path?q=1')
    True
    >>> validate_url('/relative/path')
    False
    >>> validate_shortcode('')
    True
    >>> validate_shortcode('ab')
    False
"""

import re
from urllib.parse import urlsplit

from shortlinks.constants import Limits


SHORTCODE_PATTERN = re.compile(rf'[A-Za-z0-9]{{{Limits.MIN_SHORTCODE_LENGTH},{Limits.MAX_SHORTCODE_LENGTH}}}')
_FORBIDDEN_URL_CHARACTERS = re.compile(r'[\s\x00-\x1f\x7f]')


def validate_url(candidate: object) -> bool:
    """Check that candidate parses as a well-formed absolute URL

    Args:
        candidate (object):
            Value supplied as the link destination.

    Returns:
        bool: True for strings with a scheme and a host, False otherwise.
    """
    if not isinstance(candidate, str) or not candidate:
        return False
    if _FORBIDDEN_URL_CHARACTERS.search(candidate):
        return False

    try:
        components = urlsplit(candidate)
        # Accessing .port validates the port component (raises ValueError if out of range)
        components.port  # noqa: B018
    except ValueError:
        return False

    return bool(components.scheme) and bool(components.hostname)


def validate_shortcode(candidate: object) -> bool:
    """Check a custom shortcode; an empty string requests auto-generation"""
    if not isinstance(candidate, str):
        return False
    if candidate == '':
        return True
    return SHORTCODE_PATTERN.fullmatch(candidate) is not None
