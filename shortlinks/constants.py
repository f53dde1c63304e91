import string
from enum import StrEnum


# Short code alphabet: 26 lowercase + 26 uppercase + 10 digits
ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits
SHORTCODE_LENGTH = 8

# Default number of candidate codes tried per allocation
DEFAULT_RETRY_BUDGET = 5


class TTL:
    """TTL durations in seconds."""

    # Applied by the shorten handler when the client omits a TTL
    DEFAULT_LINK = 3_600  # 60 * 60


class Timeout:
    """Timeouts in seconds."""

    REDIS_SOCKET = 2.0
    REDIS_CONNECT = 2.0
    # Reserved at the end of each invocation to build a response
    DEADLINE_MARGIN = 0.5
    # Floor for socket timeouts clamped to a request deadline
    REDIS_MIN = 0.05
    APPCONFIG_AGENT = 5


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        AWS_SAM_LOCAL = 'AWS_SAM_LOCAL'
        LOG_LEVEL = 'LOG_LEVEL'
        SERVICE_NAME = 'SERVICE_NAME'
        INSTANCE_ID = 'INSTANCE_ID'

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'
        AGENT_URL = 'APPCONFIG_AGENT_URL'
        PROFILE_NAME = 'APPCONFIG_PROFILE_NAME'

    class Redis(StrEnum):
        # Only read when running locally without an AppConfig agent
        HOST = 'REDIS_HOST'
        PORT = 'REDIS_PORT'
        DB = 'REDIS_DB'
        USERNAME = 'REDIS_USERNAME'
        PASSWORD = 'REDIS_PASSWORD'  # noqa: S105


DEFAULT_SERVICE_NAME = 'shortlinks'

# Error codes
UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'
