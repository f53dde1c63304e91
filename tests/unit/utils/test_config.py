"""Unit tests for configuration utilities in config.py

Test coverage includes:

1. Environment variable resolution
   - Ensures app_env(), app_name(), app_prefix(), service_name() read environment variables.

2. AWS AppConfig loading
   - Ensures load_config() returns the lambda's section of the AppConfig document.
   - Ensures AppConfig client failures and malformed documents raise AppConfigError.
   - Ensures missing AppConfig identifiers raise MissingEnvironmentVariableError.

3. Local configuration loading
   - Ensures a local AppConfig agent is preferred when configured.
   - Ensures unsafe agent URLs are refused.
   - Ensures REDIS_* variables are used when no agent is configured.

4. Derived settings
   - Ensures redis_dao_kwargs() builds DAO keyword arguments, clamping timeouts to a deadline.
   - Ensures LinkSettings applies defaults and rejects invalid values.
"""

import os
import json
from io import BytesIO
from unittest.mock import MagicMock

import pytest
import botocore.exceptions

from shortlinks.utils import config
from shortlinks.utils.config import LinkSettings
from shortlinks.utils.runtime import Deadline
from shortlinks.exceptions import AppConfigError, BadConfigurationError, MissingEnvironmentVariableError


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture(autouse=True)
def _env(monkeypatch):
    """Set up a deployed (non-local) environment for testing."""
    monkeypatch.setenv('APP_ENV', 'test')
    monkeypatch.setenv('APP_NAME', 'testapp')
    monkeypatch.delenv('AWS_SAM_LOCAL', raising=False)
    monkeypatch.delenv('APPCONFIG_AGENT_URL', raising=False)
    monkeypatch.setenv('APPCONFIG_APP_ID', 'app123')
    monkeypatch.setenv('APPCONFIG_ENV_ID', 'env123')
    monkeypatch.setenv('APPCONFIG_PROFILE_ID', 'prof123')


@pytest.fixture
def appconfig_payload():
    """Provide a default AppConfig payload used by multiple tests."""
    # fmt: off
    return {
        'build': 42,
        'active_backend': 'redis',
        'configs': {
            'shorten_url': {
                'redis': {
                    'host': 'monkey',
                    'port': 6380,
                    'db': 3
                },
                'links': {
                    'code_length': 10,
                    'retry_budget': 7
                }
            },
            'redirect_url': {
                'redis': {
                    'host': 'monkey',
                    'port': 6380,
                    'db': 3
                }
            }
        },
    }
    # fmt: on


@pytest.fixture
def appconfig_client(monkeypatch, appconfig_payload):
    """Mock the boto3 AppConfig data client."""
    client = MagicMock()
    client.start_configuration_session.return_value = {'InitialConfigurationToken': 'token123'}
    client.get_latest_configuration.return_value = {'Configuration': BytesIO(json.dumps(appconfig_payload).encode('utf-8'))}
    monkeypatch.setattr(config.boto3, 'client', MagicMock(return_value=client))
    return client


# -------------------------------
# 1. Environment variable resolution
# -------------------------------


def test_app_env(monkeypatch):
    """Ensure app_env() returns the lowercased environment value from APP_ENV"""
    monkeypatch.setitem(os.environ, 'APP_ENV', 'Prod')
    assert config.app_env() == 'prod'


def test_app_env_defaults_to_local(monkeypatch):
    monkeypatch.delenv('APP_ENV')
    assert config.app_env() == 'local'


def test_app_name(monkeypatch):
    """Ensure app_name() returns the correct environment value from APP_NAME"""
    monkeypatch.setitem(os.environ, 'APP_NAME', 'test-app')
    assert config.app_name() == 'test-app'


def test_app_name_not_set(monkeypatch):
    """Ensure app_name() returns None when APP_NAME is not set"""
    monkeypatch.delitem(os.environ, 'APP_NAME', raising=False)
    assert config.app_name() is None
    assert config.app_prefix() is None


def test_app_prefix():
    """Ensure app_prefix() combines APP_NAME and APP_ENV"""
    assert config.app_prefix() == 'testapp:test'


@pytest.mark.parametrize('value, expected', [(None, 'shortlinks'), ('', 'shortlinks'), ('links-api', 'links-api')])
def test_service_name(monkeypatch, value, expected):
    if value is None:
        monkeypatch.delenv('SERVICE_NAME', raising=False)
    else:
        monkeypatch.setenv('SERVICE_NAME', value)
    assert config.service_name() == expected


# -------------------------------
# 2. AWS AppConfig loading
# -------------------------------


def test_load_config(appconfig_client):
    """Ensure load_config() returns the active backend and link settings for a lambda."""
    app_config = config.load_config('shorten_url')

    assert app_config == {
        'redis': {'host': 'monkey', 'port': 6380, 'db': 3},
        'links': {'code_length': 10, 'retry_budget': 7},
    }
    appconfig_client.start_configuration_session.assert_called_once_with(
        ApplicationIdentifier='app123',
        EnvironmentIdentifier='env123',
        ConfigurationProfileIdentifier='prof123',
    )
    appconfig_client.get_latest_configuration.assert_called_once_with(ConfigurationToken='token123')


def test_load_config_without_link_settings(appconfig_client):
    assert config.load_config('redirect_url')['links'] == {}


def test_load_config_unknown_lambda(appconfig_client):
    with pytest.raises(AppConfigError, match="no 'health_check' configuration"):
        config.load_config('health_check')


def test_load_config_client_error(appconfig_client):
    """Ensure AppConfig API failures raise AppConfigError."""
    appconfig_client.start_configuration_session.side_effect = botocore.exceptions.ClientError(
        {'Error': {'Code': 'ResourceNotFoundException', 'Message': 'Not found'}}, 'StartConfigurationSession'
    )

    with pytest.raises(AppConfigError, match='Failed to fetch configuration from AWS AppConfig.') as exc_info:
        config.load_config('shorten_url')

    assert isinstance(exc_info.value.__cause__, botocore.exceptions.ClientError)


def test_load_config_malformed_document(appconfig_client):
    appconfig_client.get_latest_configuration.return_value = {'Configuration': BytesIO(b'{not json')}

    with pytest.raises(AppConfigError, match='malformed configuration'):
        config.load_config('shorten_url')


def test_load_config_missing_environment(monkeypatch, appconfig_client):
    monkeypatch.delenv('APPCONFIG_APP_ID')
    monkeypatch.setenv('APPCONFIG_PROFILE_ID', '')

    with pytest.raises(MissingEnvironmentVariableError, match="'APPCONFIG_APP_ID', 'APPCONFIG_PROFILE_ID'"):
        config.load_config('shorten_url')

    appconfig_client.start_configuration_session.assert_not_called()


# -------------------------------
# 3. Local configuration loading
# -------------------------------


def test_load_config_from_local_agent(monkeypatch, appconfig_client, appconfig_payload):
    """Ensure a configured local AppConfig agent is queried instead of AWS."""
    monkeypatch.setenv('APP_ENV', 'local')
    monkeypatch.setenv('APPCONFIG_AGENT_URL', 'http://localhost:2772')
    urlopen = MagicMock(return_value=BytesIO(json.dumps(appconfig_payload).encode('utf-8')))
    monkeypatch.setattr(config.urllib.request, 'urlopen', urlopen)

    app_config = config.load_config('shorten_url')

    assert app_config['redis'] == {'host': 'monkey', 'port': 6380, 'db': 3}
    urlopen.assert_called_once_with(
        'http://localhost:2772/applications/testapp/environments/local/configurations/backend-config',
        timeout=5,
    )
    appconfig_client.start_configuration_session.assert_not_called()


@pytest.mark.parametrize(
    'agent_url, message',
    [
        ('file:///etc/passwd', 'Bad scheme'),
        ('http://169.254.169.254:2772', 'Bad host'),
        ('http://localhost:8080', 'Bad port'),
    ],
)
def test_load_config_rejects_unsafe_agent_url(monkeypatch, agent_url, message):
    monkeypatch.setenv('APP_ENV', 'local')
    monkeypatch.setenv('APPCONFIG_AGENT_URL', agent_url)

    with pytest.raises(BadConfigurationError, match=message):
        config.load_config('shorten_url')


def test_load_config_unreachable_agent(monkeypatch):
    monkeypatch.setenv('APP_ENV', 'local')
    monkeypatch.setenv('APPCONFIG_AGENT_URL', 'http://host.docker.internal:2772')
    monkeypatch.setattr(config.urllib.request, 'urlopen', MagicMock(side_effect=OSError('Connection refused')))

    with pytest.raises(AppConfigError, match='Failed to load AppConfig from local agent'):
        config.load_config('shorten_url')


def test_load_config_from_local_environment(monkeypatch, appconfig_client):
    """Ensure REDIS_* variables configure local runs without any AppConfig."""
    monkeypatch.setenv('APP_ENV', 'local')
    monkeypatch.delenv('APPCONFIG_APP_ID')
    monkeypatch.setenv('REDIS_HOST', 'redis')
    monkeypatch.setenv('REDIS_PORT', '6380')
    monkeypatch.delenv('REDIS_DB', raising=False)
    monkeypatch.delenv('REDIS_USERNAME', raising=False)
    monkeypatch.setenv('REDIS_PASSWORD', 'secret')

    app_config = config.load_config('redirect_url')

    assert app_config == {'redis': {'host': 'redis', 'port': 6380, 'db': 0, 'password': 'secret'}, 'links': {}}
    appconfig_client.start_configuration_session.assert_not_called()


# -------------------------------
# 4. Derived settings
# -------------------------------


def test_redis_dao_kwargs():
    kwargs = config.redis_dao_kwargs({'redis': {'host': 'redis', 'port': 6379, 'db': 0}, 'links': {}})
    assert kwargs == {'redis_host': 'redis', 'redis_port': 6379, 'redis_db': 0}


def test_redis_dao_kwargs_with_deadline():
    kwargs = config.redis_dao_kwargs({'redis': {'host': 'redis'}}, deadline=Deadline.after(0.2))

    assert kwargs['redis_host'] == 'redis'
    assert 0 < kwargs['redis_socket_timeout'] <= 0.2
    assert 0 < kwargs['redis_socket_connect_timeout'] <= 0.2


def test_redis_dao_kwargs_with_deadline_keeps_shorter_timeouts():
    redis_config = {'host': 'redis', 'socket_timeout': 0.1, 'socket_connect_timeout': 0.3}

    kwargs = config.redis_dao_kwargs({'redis': redis_config}, deadline=Deadline.after(60))

    assert kwargs['redis_socket_timeout'] == 0.1
    assert kwargs['redis_socket_connect_timeout'] == 0.3


@pytest.mark.parametrize('app_config', [{}, {'redis': None}, {'links': {}}])
def test_redis_dao_kwargs_without_redis_section(app_config):
    with pytest.raises(BadConfigurationError, match="no usable 'redis' section"):
        config.redis_dao_kwargs(app_config)


def test_link_settings_defaults():
    settings = LinkSettings.from_config({'redis': {}})
    assert settings == LinkSettings(code_length=8, retry_budget=5, default_ttl_seconds=3600)


def test_link_settings_from_config():
    settings = LinkSettings.from_config({'links': {'code_length': 10, 'default_ttl_seconds': 60, 'unknown': True}})

    assert settings.code_length == 10
    assert settings.retry_budget == 5
    assert settings.default_ttl_seconds == 60


@pytest.mark.parametrize(
    'links',
    [
        {'code_length': 0},
        {'retry_budget': -1},
        {'default_ttl_seconds': '3600'},
        {'retry_budget': True},
        ['code_length', 8],
    ],
)
def test_link_settings_rejects_invalid_values(links):
    with pytest.raises(BadConfigurationError):
        LinkSettings.from_config({'links': links})
