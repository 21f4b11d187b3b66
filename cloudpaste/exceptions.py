class CloudPasteError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:cloudpaste_error'


class PasteExpiredError(CloudPasteError):
    """Raised when a paste record exists but its expiration policy says it is gone."""

    error_code = 'paste:expired'


class InvalidPolicyConfigurationError(CloudPasteError):
    """Raised when an expiration policy carries an unknown type or symbolic duration."""

    error_code = 'paste:invalid_policy_configuration'


class EventDecodeError(CloudPasteError):
    """Raised when an event payload or routing key cannot be decoded."""

    error_code = 'events:decode_error'


class ConfigurationError(CloudPasteError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'
