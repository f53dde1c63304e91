"""Resolution of short codes back to their target URLs

Classes:
    RedirectResolver:
        Look up a short code and tell "absent or expired" apart from
        "store unavailable".

Example:
    >>> resolver = RedirectResolver(ShortURLRedisDAO(prefix='shortlinks:dev'))
    >>> resolver.resolve('/q7FemOj2')
    'https://example.com'
    >>> resolver.resolve('doesnotexist')
    Traceback (most recent call last):
        ...
    shortlinks.exceptions.NotFoundError: Short link 'doesnotexist' not found.
"""

import logging
from typing import Optional

from shortlinks.dao.base import ShortURLBaseDAO
from shortlinks.dao.exceptions import DataStoreError, ShortURLNotFoundError
from shortlinks.exceptions import DeadlineExceededError, NotFoundError, StorageError, ValidationError
from shortlinks.utils.runtime import Deadline


logger = logging.getLogger(__name__)


def normalize_shortcode(raw: str | None) -> str:
    """Strip routing artifacts (surrounding whitespace, leading '/') from a path-captured code"""
    return (raw or '').strip().lstrip('/')


class RedirectResolver:
    """Read-only lookup of short codes.

    No mutation, no click counting and no caching beyond the store itself.
    """

    def __init__(self, dao: ShortURLBaseDAO):
        self.dao = dao

    def resolve(self, shortcode: str | None, deadline: Optional[Deadline] = None) -> str:
        """Return the target URL stored under `shortcode`

        Args:
            shortcode (str | None):
                Path-captured code, possibly with a leading '/'.
            deadline (Optional[Deadline]):
                Request deadline, checked before reading the store.

        Raises:
            ValidationError: the code is empty after normalization (no store call made).
            NotFoundError: the code never existed or has expired.
            StorageError: the store failed.
            DeadlineExceededError: the deadline expired before the read.
        """
        code = normalize_shortcode(shortcode)
        if not code:
            raise ValidationError('short code must not be empty')

        if deadline is not None and deadline.expired():
            raise DeadlineExceededError('Short link resolution cancelled: request deadline exceeded.')

        try:
            short_url = self.dao.get(code)
        except ShortURLNotFoundError as e:
            raise NotFoundError(f"Short link '{code}' not found.") from e
        except DataStoreError as e:
            logger.error('Failed to read short code from store.', exc_info=True, extra={'shortcode': code})
            raise StorageError('Failed to read short link.') from e

        return short_url.target
