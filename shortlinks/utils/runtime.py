"""Runtime utilities

Functions:
    running_locally() -> bool:
        True if lambda is running in local SAM, False otherwise.

Classes:
    Deadline:
        Request-scoped time budget derived from the Lambda context.

Example:
    >>> from shortlinks.utils.runtime import running_locally, Deadline
    >>> os.environ['APP_ENV'] = 'local'
    >>> running_locally()
    True
    >>> deadline = Deadline.after(2.5)
    >>> deadline.expired()
    False
"""

import os
import time
from dataclasses import dataclass
from typing import Any, Optional

from shortlinks.constants import ENV, Timeout


def running_locally() -> bool:
    """Return True if running in SAM local invoke/api, False otherwise."""
    env = os.getenv(ENV.App.APP_ENV, '').lower()
    return env == 'local' or os.getenv(ENV.App.AWS_SAM_LOCAL) == 'true'


@dataclass(frozen=True)
class Deadline:
    """Absolute point on the monotonic clock after which work must stop.

    Attributes:
        expires_at (float):
            Value of `time.monotonic()` at which the deadline expires.
    """

    expires_at: float

    @classmethod
    def after(cls, seconds: float) -> 'Deadline':
        return cls(expires_at=time.monotonic() + seconds)

    @classmethod
    def from_context(cls, context: Any, margin: float = Timeout.DEADLINE_MARGIN) -> Optional['Deadline']:
        """Derive a deadline from the Lambda context

        Leaves `margin` seconds to build and return a response.
        Returns None when the context doesn't expose a remaining time
        (e.g. plain test doubles), meaning "no deadline".

        Example:
            >>> Deadline.from_context(context).remaining()
            2.48
        """
        remaining_ms = getattr(context, 'get_remaining_time_in_millis', None)
        if not callable(remaining_ms):
            return None
        return cls.after(remaining_ms() / 1000 - margin)

    def remaining(self) -> float:
        return max(0.0, self.expires_at - time.monotonic())

    def cap(self, seconds: Optional[float]) -> float:
        """Clamp a timeout to the time left before the deadline

        `None` (no timeout) is clamped as well. The result never drops below
        `Timeout.REDIS_MIN`.

        Example:
            >>> Deadline.after(0.2).cap(2.0)
            0.2
        """
        remaining = max(self.remaining(), Timeout.REDIS_MIN)
        return remaining if seconds is None else min(seconds, remaining)

    def expired(self) -> bool:
        return time.monotonic() >= self.expires_at
