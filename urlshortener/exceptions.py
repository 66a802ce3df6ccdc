class ShortenerError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:shortener_error'


class ConfigurationError(ShortenerError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'


class ShortURLGoneError(ShortenerError):
    """Raised when a short URL exists but has been deleted by its owner."""

    error_code = 'app:short_url_gone_error'


class DuplicateURLUnresolvedError(ShortenerError):
    """Raised when an insert was rejected as duplicate but the existing row can't be found."""

    error_code = 'app:duplicate_url_unresolved_error'


class DeletionQueueError(ShortenerError):
    """Base exception for deletion pipeline errors."""

    error_code = 'deletion:deletion_queue_error'


class DeletionQueueFullError(DeletionQueueError):
    """Raised when the bounded deletion queue can't accept more ids."""

    error_code = 'deletion:deletion_queue_full_error'


class DeletionQueueClosedError(DeletionQueueError):
    """Raised when ids are enqueued after the deletion worker was stopped."""

    error_code = 'deletion:deletion_queue_closed_error'
