"""Application-wide exceptions.

Errors raised by the short ID generator form a tagged family: every
`ShortIDError` carries an `ErrorKind`, so callers can branch on `err.kind`
instead of chaining isinstance() checks.

Classes:
    ErrorKind:
        Enumeration of short ID failure kinds.

    URLShortenerError:
        Base exception for all application-specific errors.

    ShortIDError:
        Base exception for short ID generation failures.

    InvalidLengthError, RandomSourceError, StoreLookupError,
    UniquenessExhaustedError, CancellationError:
        The concrete short ID failure kinds.

    ConfigurationError, MissingEnvironmentVariableError:
        Raised on missing or invalid application configuration.

Example:
    >>> from urlshortener.exceptions import ErrorKind, ShortIDError
    >>> try:
    ...     generate_unique(ctx, dao, 5)
    ... except ShortIDError as e:
    ...     if e.kind is ErrorKind.UNIQUENESS_EXHAUSTED:
    ...         alert_keyspace_exhaustion()
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    INVALID_LENGTH = 'INVALID_LENGTH'
    RANDOM_SOURCE = 'RANDOM_SOURCE'
    STORE_LOOKUP = 'STORE_LOOKUP'
    UNIQUENESS_EXHAUSTED = 'UNIQUENESS_EXHAUSTED'
    CANCELLED = 'CANCELLED'


class URLShortenerError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:urlshortener_error'


class ShortIDError(URLShortenerError):
    """Base exception for short ID generation errors."""

    kind: ErrorKind
    error_code = 'shortid:shortid_error'


class InvalidLengthError(ShortIDError, ValueError):
    """Raised when a non-positive short ID length is requested."""

    kind = ErrorKind.INVALID_LENGTH
    error_code = 'shortid:invalid_length_error'

    def __init__(self, length: object):
        super().__init__(f'Short ID length must be a positive integer (given value: {length!r}).')
        self.length = length


class RandomSourceError(ShortIDError):
    """Raised when the secure random source fails to supply bytes."""

    kind = ErrorKind.RANDOM_SOURCE
    error_code = 'shortid:random_source_error'


class StoreLookupError(ShortIDError):
    """Raised when the uniqueness lookup fails for a reason other than a collision."""

    kind = ErrorKind.STORE_LOOKUP
    error_code = 'shortid:store_lookup_error'

    def __init__(self, shortcode: str, attempt: int):
        super().__init__(f"Store lookup for candidate '{shortcode}' failed on attempt {attempt}.")
        self.shortcode = shortcode
        self.attempt = attempt


class UniquenessExhaustedError(ShortIDError):
    """Raised when every attempt of the retry budget hit an existing short ID."""

    kind = ErrorKind.UNIQUENESS_EXHAUSTED
    error_code = 'shortid:uniqueness_exhausted_error'

    def __init__(self, attempts: int, length: int):
        super().__init__(f'No free short ID of length {length} found after {attempts} attempts.')
        self.attempts = attempts
        self.length = length


class CancellationError(ShortIDError):
    """Raised when the operation context is cancelled or its deadline passes."""

    kind = ErrorKind.CANCELLED
    error_code = 'shortid:cancellation_error'


class ConfigurationError(URLShortenerError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError, KeyError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'
