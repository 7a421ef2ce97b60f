class ShortLinksError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:shortlinks_error'


class ValidationError(ShortLinksError):
    """Base exception for rejected client input."""

    error_code = 'validation:validation_error'


class InvalidUrlError(ValidationError):
    """Raised when the destination URL is not an absolute URL."""

    error_code = 'validation:invalid_url'


class InvalidShortcodeError(ValidationError):
    """Raised when a custom shortcode is not 3-10 alphanumeric characters."""

    error_code = 'validation:invalid_shortcode'


class InvalidValidityPeriodError(ValidationError):
    """Raised when the validity period is outside the allowed minute range."""

    error_code = 'validation:invalid_validity_period'


class LinkError(ShortLinksError):
    """Base exception for short link business rule failures."""

    error_code = 'link:link_error'


class QuotaExceededError(LinkError):
    """Raised when the maximum number of active links is already reached."""

    error_code = 'link:quota_exceeded'


class ShortcodeInUseError(LinkError):
    """Raised when a custom shortcode is already taken (expired links included)."""

    error_code = 'link:code_in_use'


class CodeSpaceExhaustedError(LinkError):
    """Raised when no free shortcode was drawn within the attempt limit."""

    error_code = 'link:code_space_exhausted'


class LinkNotFoundError(LinkError):
    """Raised when no link exists for a shortcode."""

    error_code = 'link:not_found'


class LinkExpiredError(LinkError):
    """Raised when a link exists but its validity period is over."""

    error_code = 'link:expired'


class ConfigurationError(ShortLinksError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'
