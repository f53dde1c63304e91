"""Collision-avoiding allocation of short codes

Classes:
    ShortLinkAllocator:
        Generate -> check -> conditionally write, bounded by a retry budget.

Each attempt draws a fresh random candidate, asks the store whether it is
taken and, if it looks free, claims it with an atomic "set only if absent"
write. Losing that write to a concurrent allocator is a collision like any
other, so two requests can never end up owning the same code.

Outcomes:
    - code returned: exactly one mapping was written, by this call.
    - CollisionExhaustedError: no free code within the budget, nothing written.
    - StorageError: the conditional write failed, or every attempt failed on the
      store (an outage is not reported as exhaustion).
    - DeadlineExceededError: the request deadline passed between attempts.

Example:
    >>> allocator = ShortLinkAllocator(ShortURLRedisDAO(prefix='shortlinks:dev'))
    >>> allocator.shorten('https://example.com', ttl_seconds=3600)
    'q7FemOj2'
"""

import logging
from collections.abc import Callable
from typing import Optional

from shortlinks.constants import SHORTCODE_LENGTH, DEFAULT_RETRY_BUDGET
from shortlinks.dao.base import ShortURLBaseDAO
from shortlinks.dao.exceptions import DataStoreError
from shortlinks.exceptions import CollisionExhaustedError, DeadlineExceededError, StorageError
from shortlinks.models import ShortURLModel, validate_target_url, validate_ttl_seconds
from shortlinks.utils.runtime import Deadline
from shortlinks.utils.shortener import generate_shortcode


logger = logging.getLogger(__name__)

# Log event names
SHORTCODE_COLLISION = 'SHORTCODE_COLLISION'
SHORTCODE_GENERATION_FAILED = 'SHORTCODE_GENERATION_FAILED'
STORE_CHECK_FAILED = 'STORE_CHECK_FAILED'
STORE_WRITE_FAILED = 'STORE_WRITE_FAILED'
ALLOCATION_EXHAUSTED = 'ALLOCATION_EXHAUSTED'
ALLOCATION_DEADLINE_EXCEEDED = 'ALLOCATION_DEADLINE_EXCEEDED'


class ShortLinkAllocator:
    """Allocate collision-free short codes and store their target URLs.

    Attributes:
        dao (ShortURLBaseDAO):
            Store the mappings are written to.
        code_length (int):
            Characters per generated code.
        retry_budget (int):
            Default number of candidates tried per `shorten()` call.
        generator (Callable[[int], str]):
            Code generator; receives `code_length`.
    """

    def __init__(
        self,
        dao: ShortURLBaseDAO,
        *,
        code_length: int = SHORTCODE_LENGTH,
        retry_budget: int = DEFAULT_RETRY_BUDGET,
        generator: Callable[[int], str] = generate_shortcode,
    ):
        if retry_budget < 1:
            raise ValueError(f'Retry budget must be at least 1 (given value: {retry_budget}).')

        self.dao = dao
        self.code_length = code_length
        self.retry_budget = retry_budget
        self.generator = generator

    def shorten(
        self,
        target_url: str,
        ttl_seconds: int,
        retry_budget: Optional[int] = None,
        deadline: Optional[Deadline] = None,
    ) -> str:
        """Allocate a short code for `target_url` and store it for `ttl_seconds`

        `ttl_seconds` is taken as already resolved: no default is applied here.

        Args:
            target_url (str):
                Absolute http/https URL to shorten.
            ttl_seconds (int):
                Lifetime of the mapping in seconds (>= 1).
            retry_budget (Optional[int]):
                Overrides the allocator's default budget for this call.
            deadline (Optional[Deadline]):
                Request deadline, checked before every attempt.

        Returns:
            str: the allocated short code.

        Raises:
            ValidationError: invalid URL or TTL (before any store call).
            CollisionExhaustedError: no free code found within the budget.
            StorageError: the store failed (write failure or persistent outage).
            DeadlineExceededError: the deadline expired between attempts.
        """
        target_url = validate_target_url(target_url)
        validate_ttl_seconds(ttl_seconds)
        budget = self.retry_budget if retry_budget is None else retry_budget
        if budget < 1:
            raise ValueError(f'Retry budget must be at least 1 (given value: {budget}).')

        collisions = 0
        last_error: Exception | None = None

        for attempt in range(1, budget + 1):
            if deadline is not None and deadline.expired():
                logger.warning(
                    'Request deadline exceeded before allocation attempt %s.',
                    attempt,
                    extra={'event': ALLOCATION_DEADLINE_EXCEEDED, 'attempt': attempt},
                )
                raise DeadlineExceededError('Short link allocation cancelled: request deadline exceeded.')

            try:
                shortcode = self.generator(self.code_length)
            except (ValueError, OSError) as e:
                logger.warning(
                    'Failed to generate short code on attempt %s.',
                    attempt,
                    exc_info=True,
                    extra={'event': SHORTCODE_GENERATION_FAILED, 'attempt': attempt},
                )
                last_error = e
                continue

            try:
                taken = self.dao.exists(shortcode)
            except DataStoreError as e:
                logger.warning(
                    'Failed to check short code on attempt %s.',
                    attempt,
                    exc_info=True,
                    extra={'event': STORE_CHECK_FAILED, 'shortcode': shortcode, 'attempt': attempt},
                )
                last_error = e
                continue

            if not taken:
                short_url = ShortURLModel(target=target_url, shortcode=shortcode)
                try:
                    written = self.dao.set_if_absent(short_url, ttl_seconds)
                except DataStoreError as e:
                    logger.error(
                        'Failed to store short code.',
                        exc_info=True,
                        extra={'event': STORE_WRITE_FAILED, 'shortcode': shortcode, 'attempt': attempt},
                    )
                    raise StorageError('Failed to store short link.') from e

                if written:
                    logger.debug(
                        'Allocated short code on attempt %s.',
                        attempt,
                        extra={'shortcode': shortcode, 'attempt': attempt, 'ttl_seconds': ttl_seconds},
                    )
                    return shortcode

            # Either EXISTS said so, or a concurrent writer claimed the code first
            collisions += 1
            logger.warning(
                'Short code collision on attempt %s.',
                attempt,
                extra={'event': SHORTCODE_COLLISION, 'shortcode': shortcode, 'attempt': attempt},
            )

        logger.error(
            'Exhausted retry budget of %s without allocating a short code.',
            budget,
            extra={'event': ALLOCATION_EXHAUSTED, 'collisions': collisions, 'retry_budget': budget},
        )
        if collisions == 0:
            raise StorageError('Link store unavailable: every allocation attempt failed.') from last_error
        raise CollisionExhaustedError(f'No free short code found after {budget} attempts.') from last_error
