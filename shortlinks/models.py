"""Data models for short links

Classes:
    ShortURLModel:
        Store-resident mapping between a short code and its target URL.
    ShortLinkRequest:
        Validated input for creating a short link.

Example:
    >>> request = ShortLinkRequest.from_body({'url': 'https://example.com'}, default_ttl=3600)
    >>> request.ttl_seconds
    3600
    >>> ShortURLModel(target=request.target_url, shortcode='aB3dE6gH')
    ShortURLModel(target='https://example.com', shortcode='aB3dE6gH', expires_at=None)
"""

import urllib.parse
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from shortlinks.exceptions import ValidationError


ALLOWED_SCHEMES = frozenset({'http', 'https'})


def validate_target_url(target_url: Any) -> str:
    """Ensure the target is an absolute http/https URL with a host

    Raises:
        ValidationError: if the value is not a string or not an absolute http(s) URL.
    """
    if not isinstance(target_url, str) or not target_url.strip():
        raise ValidationError('target URL must be a non-empty string')

    target_url = target_url.strip()
    components = urllib.parse.urlparse(target_url)
    if components.scheme.lower() not in ALLOWED_SCHEMES:
        raise ValidationError(f"target URL must use http or https (given: '{target_url}')")
    if not components.hostname:
        raise ValidationError(f"target URL must be absolute (given: '{target_url}')")
    return target_url


def validate_ttl_seconds(ttl_seconds: Any) -> int:
    """Ensure the TTL is an integer number of seconds >= 1

    Raises:
        ValidationError: for booleans, non-integers and values below 1.
    """
    if isinstance(ttl_seconds, bool) or not isinstance(ttl_seconds, int):
        raise ValidationError(f'TTL must be an integer number of seconds (given type: {type(ttl_seconds).__name__})')
    if ttl_seconds < 1:
        raise ValidationError(f'TTL must be at least 1 second (given value: {ttl_seconds})')
    return ttl_seconds


@dataclass(frozen=True)
class ShortURLModel:
    """Represent a shortened URL mapping.

    Attributes:
        target (str):
            The original long URL that the short code redirects to.
        shortcode (str):
            The unique short identifier representing the shortened URL.
        expires_at (Optional[datetime]):
            Moment after which the mapping is no longer retrievable.
            Derived from the store's remaining TTL; None before insertion.
    """

    target: str
    shortcode: str
    expires_at: Optional[datetime] = None


@dataclass(frozen=True)
class ShortLinkRequest:
    """Validated request to shorten a URL.

    The TTL is expected to be resolved already; the default is only applied
    by `from_body()`, which is what the shorten handler calls.
    """

    target_url: str
    ttl_seconds: int

    def __post_init__(self):
        object.__setattr__(self, 'target_url', validate_target_url(self.target_url))
        validate_ttl_seconds(self.ttl_seconds)

    @classmethod
    def from_body(cls, body: Any, default_ttl: int) -> 'ShortLinkRequest':
        """Build a request from a decoded JSON body

        Accepts `url` or `target_url` for the target, and `exp` or `ttl_seconds`
        for the TTL. A missing, null or zero TTL is replaced with `default_ttl`.

        Raises:
            ValidationError: if the body is not an object or any field is invalid.
        """
        if not isinstance(body, dict):
            raise ValidationError('request body must be a JSON object')

        target_url = body.get('target_url') or body.get('url')
        if target_url is None:
            raise ValidationError("missing 'url' in JSON body")

        ttl_seconds = body.get('ttl_seconds')
        if ttl_seconds is None:
            ttl_seconds = body.get('exp')
        if ttl_seconds is None or (ttl_seconds == 0 and not isinstance(ttl_seconds, bool)):
            ttl_seconds = default_ttl

        return cls(target_url=target_url, ttl_seconds=ttl_seconds)
