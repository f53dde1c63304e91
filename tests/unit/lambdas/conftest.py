from unittest.mock import MagicMock

import pytest


@pytest.fixture(autouse=True)
def _env(monkeypatch):
    """Run handlers as deployed (non-local) lambdas under a fixed app prefix."""
    monkeypatch.setenv('APP_ENV', 'test')
    monkeypatch.setenv('APP_NAME', 'testapp')
    monkeypatch.delenv('AWS_SAM_LOCAL', raising=False)


@pytest.fixture()
def context():
    """Mock AWS Lambda context with plenty of remaining time."""
    _context = MagicMock()
    _context.get_remaining_time_in_millis.return_value = 3000
    return _context


@pytest.fixture()
def config():
    """Application configuration as returned by load_config()."""
    # fmt: off
    return {
        'redis': {
            'host': 'redis',
            'port': 6379,
            'db': 0
        },
        'links': {}
    }
    # fmt: on
