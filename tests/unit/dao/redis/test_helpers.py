"""Unit tests for handle_redis_connection_error decorator.

This test suite verifies that the decorator properly converts Redis
failures and preserves the original method's behavior.

Test coverage includes:
    1. Normal function execution
       - Ensures the wrapped method executes and returns its result.
    2. Redis error handling
       - Ensures connection errors, timeouts and other Redis errors become DataStoreError.
       - Ensures non-Redis exceptions propagate untouched.
    3. Function metadata preservation
       - Confirms functools.wraps preserves the original function's name and docstring.
"""

from unittest.mock import MagicMock

import pytest
import redis

from shortlinks.dao.redis.helpers import handle_redis_connection_error
from shortlinks.dao.exceptions import DataStoreError


class DummyDAO:
    def __init__(self, error: Exception | None = None):
        self.redis = MagicMock()
        self.redis.connection_pool.connection_kwargs = {
            'host': 'localhost',
            'port': 6379,
            'db': 0,
        }
        self.error = error

    @handle_redis_connection_error
    def call(self):
        if self.error is not None:
            raise self.error
        return 'OK'


# -------------------------------
# 1. Normal execution
# -------------------------------


def test_decorator_allows_normal_execution():
    """Ensure the wrapped function executes normally when no error occurs."""
    assert DummyDAO().call() == 'OK'


# -------------------------------
# 2. Redis error handling
# -------------------------------


@pytest.mark.parametrize(
    'error, message',
    [
        (redis.exceptions.ConnectionError('Cannot connect'), "Can't connect to Redis at localhost:6379/0."),
        (redis.exceptions.TimeoutError('Timeout reading from socket'), 'Timed out waiting for Redis at localhost:6379/0.'),
        (redis.exceptions.ResponseError('WRONGTYPE'), 'Redis at localhost:6379/0 failed with ResponseError.'),
    ],
)
def test_decorator_transforms_redis_errors(error, message):
    """Ensure Redis errors are caught and re-raised as DataStoreError."""
    dao = DummyDAO(error)

    with pytest.raises(DataStoreError) as exc_info:
        dao.call()

    assert str(exc_info.value) == message
    assert exc_info.value.__cause__ is error


def test_decorator_ignores_other_errors():
    """Ensure non-Redis exceptions are not converted."""
    dao = DummyDAO(ValueError('TTL must be at least 1 second'))

    with pytest.raises(ValueError, match='TTL must be at least 1 second'):
        dao.call()


# -------------------------------
# 3. Function metadata preservation
# -------------------------------


def test_decorator_preserves_function_metadata():
    """Ensure function name and docstring are preserved via functools.wraps."""

    @handle_redis_connection_error
    def sample_function():
        """This is a sample docstring."""
        return 'OK'

    assert sample_function.__name__ == 'sample_function'
    assert 'sample docstring' in sample_function.__doc__
