class ShortLinksError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:shortlinks_error'


class ValidationError(ShortLinksError):
    """Raised when client input is malformed (bad target URL, TTL or empty code)."""

    error_code = 'link:validation_error'


class CollisionExhaustedError(ShortLinksError):
    """Raised when the retry budget is spent without securing a free short code."""

    error_code = 'link:collision_exhausted_error'


class NotFoundError(ShortLinksError):
    """Raised when a short code is absent or expired."""

    error_code = 'link:not_found_error'


class StorageError(ShortLinksError):
    """Raised when the link store is unreachable or fails for reasons unrelated to collisions."""

    error_code = 'link:storage_error'


class DeadlineExceededError(StorageError):
    """Raised when the request deadline expires before the store operation completes."""

    error_code = 'link:deadline_exceeded_error'


class InvalidLengthError(ShortLinksError, ValueError):
    """Raised when a short code of non-positive length is requested."""

    error_code = 'link:invalid_length_error'


class ConfigurationError(ShortLinksError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError, KeyError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'


class AppConfigError(ConfigurationError):
    """Raised when AppConfig can't be reached or responds with an unusable document."""

    error_code = 'config:appconfig_error'
