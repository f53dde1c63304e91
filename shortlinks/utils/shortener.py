"""Shortcode generation utility

This module provides a helper function for generating random, fixed-length,
base62 short codes from a cryptographically secure random source.

Short codes act as bearer capabilities to their target URL, so they must not
be guessable or enumerable: they are drawn from `secrets`, never from
`random`.

Functions:
    generate_shortcode(length=8):
        Generate a random short code suitable for use as a URL slug.

Example:
    >>> from shortlinks.utils import generate_shortcode
    >>> generate_shortcode()
    'q7FemOj2'
"""

import secrets

from shortlinks.constants import ALPHABET, SHORTCODE_LENGTH
from shortlinks.exceptions import InvalidLengthError


BASE = len(ALPHABET)  # 26 lowercase + 26 uppercase + 10 digits


def generate_shortcode(length: int = SHORTCODE_LENGTH) -> str:
    """Generate a random Base62 short code.

    Each character is one CSPRNG byte reduced modulo 62. Since 256 % 62 == 8,
    the first 8 alphabet symbols are drawn with probability 5/256 instead of
    4/256. This bias is accepted: it barely dents a 62^8 (~2.18e14) code space.

    Args:
        length (int, optional):
            Number of characters in the code. Defaults to 8.

    Returns:
        str: A random alphanumeric code of exactly `length` characters.

    Raises:
        TypeError: if length is not an integer.
        InvalidLengthError: if length <= 0.

    Example:
        >>> len(generate_shortcode(12))
        12
    """
    if isinstance(length, bool) or not isinstance(length, int):
        raise TypeError(f'Length must be of type integer (given type: {type(length)}).')
    if length <= 0:
        raise InvalidLengthError(f'Length must be a positive integer (given value: {length}).')

    return ''.join(ALPHABET[byte % BASE] for byte in secrets.token_bytes(length))
