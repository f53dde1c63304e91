"""In-process implementation of ShortURLBaseDAO

Keeps mappings in a dict together with their expiry moment. Expired entries
are dropped when read and swept on every write, which makes them
indistinguishable from codes that were never issued, exactly like Redis key expiry.

Used to exercise the allocator and resolver against a working store
without a Redis server.
The expiry clock is `datetime.now(UTC)`, so it can be frozen and moved with
freezegun.
"""

import threading
from datetime import datetime, timedelta, UTC

from beartype import beartype

from shortlinks.models import ShortURLModel
from shortlinks.dao.base import ShortURLBaseDAO
from shortlinks.dao.exceptions import ShortURLNotFoundError


class ShortURLMemoryDAO(ShortURLBaseDAO):
    """Dict-backed short URL store with per-entry TTL.

    Attributes:
        links (dict[str, tuple[str, datetime]]):
            shortcode -> (target URL, expires at)
    """

    def __init__(self):
        self.links: dict[str, tuple[str, datetime]] = {}
        self._lock = threading.Lock()

    def _live_entry(self, shortcode: str) -> tuple[str, datetime] | None:
        # must be called with self._lock held
        entry = self.links.get(shortcode)
        if entry is not None and entry[1] <= datetime.now(UTC):
            del self.links[shortcode]
            return None
        return entry

    def _sweep_expired(self) -> None:
        # must be called with self._lock held
        now = datetime.now(UTC)
        for shortcode in [code for code, (_, expires_at) in self.links.items() if expires_at <= now]:
            del self.links[shortcode]

    @beartype
    def exists(self, shortcode: str, **kwargs) -> bool:
        with self._lock:
            return self._live_entry(shortcode) is not None

    @beartype
    def set_if_absent(self, short_url: ShortURLModel, ttl_seconds: int, **kwargs) -> bool:
        if ttl_seconds < 1:
            raise ValueError(f'TTL must be at least 1 second (given value: {ttl_seconds}).')

        with self._lock:
            self._sweep_expired()
            if short_url.shortcode in self.links:
                return False
            self.links[short_url.shortcode] = (short_url.target, datetime.now(UTC) + timedelta(seconds=ttl_seconds))
            return True

    @beartype
    def get(self, shortcode: str, **kwargs) -> ShortURLModel:
        with self._lock:
            entry = self._live_entry(shortcode)

        if entry is None:
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")

        target, expires_at = entry
        return ShortURLModel(target=target, shortcode=shortcode, expires_at=expires_at)

    def ping(self, **kwargs) -> bool:
        return True
