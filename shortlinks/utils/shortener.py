"""Shortcode generation utility

This module provides a helper function for drawing random shortcodes from
the Base62 alphabet. Uniqueness is not checked here: callers must test
candidates against the data store and draw again on collision.

Functions:
    generate_shortcode(length=6, alphabet=ALPHABET):
        Generate a random alphanumeric shortcode.

Example:
    >>> from shortlinks.utils import generate_shortcode
    >>> code = generate_shortcode()
    >>> len(code)
    6
"""

import secrets
import string

from shortlinks.constants import Defaults


ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits
BASE = len(ALPHABET)  # 26 lowercase + 26 uppercase + 10 digits


def generate_shortcode(length: int = Defaults.SHORTCODE_LENGTH, alphabet: str = ALPHABET) -> str:
    """Generate a uniformly random shortcode.

    Each character is drawn independently with `secrets.choice`, so every
    string of the given length is equally likely (62^6 ~ 5.6e10 codes for the
    default length).

    Args:
        length (int, optional):
            Number of characters. Defaults to 6.

        alphabet (str, optional):
            Characters to draw from. Defaults to Base62 [a-zA-Z0-9].

    Returns:
        str: A random shortcode.

    Raises:
        TypeError: If length is not an integer or alphabet is not a string.
        ValueError: If length is not positive or alphabet is empty.
    """
    if not isinstance(length, int) or isinstance(length, bool):
        raise TypeError(f'Length must be of type integer (given type: {type(length)}).')
    if length < 1:
        raise ValueError(f'Length must be a positive integer (given value: {length}).')
    if not isinstance(alphabet, str):
        raise TypeError(f'Alphabet must be of type string (given type: {type(alphabet)}).')
    if not alphabet:
        raise ValueError('Alphabet must be a non-empty string.')

    return ''.join(secrets.choice(alphabet) for _ in range(length))
