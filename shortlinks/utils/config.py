"""Utility functions for application configuration management.

This module provides a standardized interface for Lambda functions to
access configuration data stored in **AWS AppConfig**. Each environment
(`APP_ENV`) has a dedicated AppConfig *Environment* within the shared
AppConfig *Application* identified by `APP_NAME`. Configuration data is
stored as a JSON document under a configuration profile (typically
`backend-config`) and deployed to the corresponding environment.

The configuration JSON follows this structure:

    {
        "build": 7,
        "active_backend": "redis",
        "configs": {
            "shorten_url": {
                "redis": { "host": ..., "port": ..., "db": ... },
                "links": { "code_length": 8, "retry_budget": 5, "default_ttl_seconds": 3600 }
            },
            "redirect_url": {
                "redis": { ... }
            },
            "health_check": {
                "redis": { ... }
            }
        }
    }

Each Lambda loads its own section (e.g., `"shorten_url"`) from this
AppConfig document. The optional `links` section tunes short code
allocation; missing keys fall back to the defaults in `shortlinks.constants`.

Functions:
    app_env() -> str
        Return the current application environment (`APP_ENV`), `'local'` by default.

    app_name() -> str | None
        Return the application name (`APP_NAME`), or None if not set.

    app_prefix() -> str | None
        Return application prefix for DAOs, or None if `APP_NAME` is not set.

    service_name() -> str
        Return the service name reported by the health check.

    load_config(lambda_name: str) -> dict
        Load configuration for a given Lambda. In SAM, prefer a local AppConfig
        agent, then local environment variables; otherwise AWS AppConfig.

    redis_dao_kwargs(app_config: dict, deadline: Deadline | None = None) -> dict
        Translate the `redis` config section into DAO keyword arguments.

Classes:
    LinkSettings
        Validated short code allocation settings.

Example:
    Typical usage inside a Lambda handler:

        >>> from shortlinks.utils.config import load_config
        >>> config = load_config('shorten_url')
        >>> print(config['redis']['host'])
        redis-15501.host.docker.internal
"""

import os
import json
import functools
import urllib.parse
import urllib.request
import logging
from dataclasses import dataclass
from typing import Any, Optional
from collections.abc import Callable

import boto3
import botocore.exceptions

from shortlinks.constants import ENV, TTL, Timeout, SHORTCODE_LENGTH, DEFAULT_RETRY_BUDGET, DEFAULT_SERVICE_NAME
from shortlinks.exceptions import AppConfigError, BadConfigurationError
from shortlinks.types import AppConfig, LambdaConfiguration
from shortlinks.utils.helpers import require_environment
from shortlinks.utils.runtime import running_locally, Deadline


logger = logging.getLogger(__name__)


def app_env() -> str:
    """Return the current application environment by reading 'APP_ENV'

    Example:
        >>> os.environ['APP_ENV'] = 'dev'
        >>> app_env()
        'dev'
    """
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    """Return the current application name by reading 'APP_NAME'"""
    return os.environ.get(ENV.App.APP_NAME)


def app_prefix() -> str | None:
    """Return application prefix for DAOs

    Returns:
        str: app prefix as <app name>:<app env>.
             None if APP_NAME is not set.

    Example:
        >>> os.environ['APP_NAME'] = 'shortlinks'
        >>> os.environ['APP_ENV'] = 'local'
        >>> app_prefix()
        'shortlinks:local'
    """
    return None if app_name() is None else f'{app_name()}:{app_env()}'


def service_name() -> str:
    return os.environ.get(ENV.App.SERVICE_NAME) or DEFAULT_SERVICE_NAME


def _extract_lambda_config(document: AppConfig, lambda_name: str) -> LambdaConfiguration:
    """Pick the active backend section (plus `links` settings) for one lambda

    Raises:
        AppConfigError: if the document lacks the expected keys.
    """
    try:
        backend = document['active_backend']
        lambda_config = document['configs'][lambda_name]
        data = {backend: lambda_config[backend]}
    except (KeyError, TypeError) as e:
        raise AppConfigError(f"AppConfig document has no '{lambda_name}' configuration for the active backend.") from e

    data['links'] = lambda_config.get('links', {})
    return data


def _sam_load_local_appconfig(func: Callable[[str], dict]) -> Callable[[str], dict]:
    """Decorator: load AppConfig from a local AppConfig Agent when running under SAM

    Behavior:
        - If the application is running locally and `APPCONFIG_AGENT_URL` is set
          to a safe local URL, fetch the app configuration JSON from the local AppConfig agent.
        - Else, call the wrapped function.

    Environment variables used:
        APPCONFIG_AGENT_URL     – Base URL of the local AppConfig Agent (e.g., http://host.docker.internal:2772).
        APPCONFIG_PROFILE_NAME  – Optional profile name (default: "backend-config").
    """

    def __validate_appconfig_url(url: str | None) -> str:
        if not url:
            return ''
        components = urllib.parse.urlparse(url)
        if components.scheme not in {'http', 'https'}:
            raise BadConfigurationError(f'Bad scheme {url}')
        if components.hostname not in {'localhost', '127.0.0.1', 'host.docker.internal'}:
            raise BadConfigurationError(f'Bad host {url}')
        if components.port not in {2772, None}:
            raise BadConfigurationError(f'Bad port {url}')
        return url

    @functools.wraps(func)
    def wrapper(lambda_name: str, *args, **kwargs) -> dict:
        if not running_locally():
            return func(lambda_name, *args, **kwargs)
        agent_url = __validate_appconfig_url(os.getenv(ENV.AppConfig.AGENT_URL))
        if not agent_url:
            return func(lambda_name, *args, **kwargs)

        profile_name = os.getenv(ENV.AppConfig.PROFILE_NAME, 'backend-config')
        url = f'{agent_url}/applications/{app_name()}/environments/{app_env()}/configurations/{profile_name}'

        logger.debug('Trying to load AppConfig from local agent.', extra={'agentUrl': url, 'lambdaName': lambda_name})
        try:
            with urllib.request.urlopen(url, timeout=Timeout.APPCONFIG_AGENT) as r:  # noqa: S310
                document = json.load(r)
        except (OSError, json.JSONDecodeError) as e:
            raise AppConfigError(f'Failed to load AppConfig from local agent at {agent_url}.') from e

        data = _extract_lambda_config(document, lambda_name)
        logger.debug('Loaded AppConfig from local agent.', extra={'lambdaName': lambda_name, 'build': document.get('build')})
        return data

    return wrapper


def _load_local_environment(func: Callable[[str], dict]) -> Callable[[str], dict]:
    """Decorator: build the configuration from REDIS_* variables when running locally

    Lets `sam local` and plain `docker compose` setups run without any
    AppConfig at all. Outside of local runs, the wrapped function is called.

    Environment variables used:
        REDIS_HOST (default: localhost), REDIS_PORT (default: 6379), REDIS_DB (default: 0),
        REDIS_USERNAME, REDIS_PASSWORD
    """

    @functools.wraps(func)
    def wrapper(lambda_name: str, *args, **kwargs) -> dict:
        if not running_locally():
            return func(lambda_name, *args, **kwargs)

        redis_config = {
            'host': os.getenv(ENV.Redis.HOST, 'localhost'),
            'port': int(os.getenv(ENV.Redis.PORT, '6379')),
            'db': int(os.getenv(ENV.Redis.DB, '0')),
        }
        if os.getenv(ENV.Redis.USERNAME):
            redis_config['username'] = os.environ[ENV.Redis.USERNAME]
        if os.getenv(ENV.Redis.PASSWORD):
            redis_config['password'] = os.environ[ENV.Redis.PASSWORD]

        logger.debug('Loaded configuration from local environment.', extra={'lambdaName': lambda_name})
        return {'redis': redis_config, 'links': {}}

    return wrapper


@_sam_load_local_appconfig
@_load_local_environment
@require_environment(ENV.AppConfig.APP_ID, ENV.AppConfig.ENV_ID, ENV.AppConfig.PROFILE_ID)
def load_config(lambda_name: str) -> dict:
    """Load configuration for a given Lambda from AWS AppConfig

    Fetches the AppConfig JSON once and returns the section relevant
    to the requested Lambda function (e.g., 'shorten_url', 'redirect_url').

    Environment variables required:
        APPCONFIG_APP_ID       – AppConfig Application ID
        APPCONFIG_ENV_ID       – AppConfig Environment ID
        APPCONFIG_PROFILE_ID   – AppConfig Configuration Profile ID

    Args:
        lambda_name (str):
            Name of the Lambda (e.g., "shorten_url" or "redirect_url").

    Returns:
        dict: The lambda's config section, e.g. {'redis': {...}, 'links': {...}}.

    Raises:
        MissingEnvironmentVariableError: if an AppConfig identifier is not set.
        AppConfigError: if AppConfig can't be reached or returns an unusable document.

    Example:
        >>> app_config = load_config('shorten_url')
        >>> app_config['redis']['host']
        'redis-15501.host.docker.internal'
    """
    logger.debug('Trying to load AppConfig from AWS AppConfig.', extra={'lambdaName': lambda_name})

    try:
        appconfig = boto3.client('appconfigdata')

        # Start an AppConfig data session
        session_token = appconfig.start_configuration_session(
            ApplicationIdentifier=os.environ[ENV.AppConfig.APP_ID],
            EnvironmentIdentifier=os.environ[ENV.AppConfig.ENV_ID],
            ConfigurationProfileIdentifier=os.environ[ENV.AppConfig.PROFILE_ID],
        )['InitialConfigurationToken']

        # Fetch the configuration
        response = appconfig.get_latest_configuration(ConfigurationToken=session_token)
        content = response['Configuration'].read()
        document = json.loads(content.decode('utf-8'))
    except (botocore.exceptions.BotoCoreError, botocore.exceptions.ClientError) as e:
        raise AppConfigError('Failed to fetch configuration from AWS AppConfig.') from e
    except (KeyError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise AppConfigError('AWS AppConfig responded with a malformed configuration.') from e

    data = _extract_lambda_config(document, lambda_name)
    logger.debug('Loaded AppConfig from AWS AppConfig.', extra={'lambdaName': lambda_name, 'build': document.get('build')})
    return data


def redis_dao_kwargs(app_config: LambdaConfiguration, deadline: Optional[Deadline] = None) -> dict[str, Any]:
    """Translate the `redis` config section into Redis DAO keyword arguments

    With a `deadline`, the socket and connect timeouts (configured or default)
    are clamped to the time left, so no single store call outlives the request.

    Example:
        >>> redis_dao_kwargs({'redis': {'host': 'redis', 'port': 6379}})
        {'redis_host': 'redis', 'redis_port': 6379}
        >>> redis_dao_kwargs({'redis': {'host': 'redis'}}, deadline=Deadline.after(0.2))
        {'redis_host': 'redis', 'redis_socket_timeout': 0.2, 'redis_socket_connect_timeout': 0.2}

    Raises:
        BadConfigurationError: if there is no `redis` section.
    """
    try:
        kwargs = {f'redis_{k}': v for k, v in app_config['redis'].items()}
    except (KeyError, AttributeError) as e:
        raise BadConfigurationError("Configuration has no usable 'redis' section.") from e

    if deadline is not None:
        kwargs['redis_socket_timeout'] = deadline.cap(kwargs.get('redis_socket_timeout', Timeout.REDIS_SOCKET))
        kwargs['redis_socket_connect_timeout'] = deadline.cap(kwargs.get('redis_socket_connect_timeout', Timeout.REDIS_CONNECT))
    return kwargs


@dataclass(frozen=True)
class LinkSettings:
    """Short code allocation settings.

    Attributes:
        code_length (int): characters per short code
        retry_budget (int): candidate codes tried per allocation
        default_ttl_seconds (int): TTL applied when a client omits one
    """

    code_length: int = SHORTCODE_LENGTH
    retry_budget: int = DEFAULT_RETRY_BUDGET
    default_ttl_seconds: int = TTL.DEFAULT_LINK

    def __post_init__(self):
        for name in ('code_length', 'retry_budget', 'default_ttl_seconds'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise BadConfigurationError(f"Link setting '{name}' must be a positive integer (given value: {value!r}).")

    @classmethod
    def from_config(cls, app_config: LambdaConfiguration) -> 'LinkSettings':
        links = app_config.get('links') or {}
        if not isinstance(links, dict):
            raise BadConfigurationError("Link settings must be a JSON object.")
        known = {k: v for k, v in links.items() if k in cls.__dataclass_fields__}
        return cls(**known)
