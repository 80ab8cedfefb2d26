"""Short ID generation utility

This module mints short, URL-safe identifiers from a cryptographically secure
random source, and optionally verifies them against a key-value store so the
returned ID is free at the time of the check.

Functions:
    generate(length) -> str
        Generate a random base64url string of exactly `length` characters.

    generate_unique(context, store, length, max_attempts=MAX_ATTEMPTS) -> str
        Generate IDs until one is not present in `store`.

Example:
    >>> from urlshortener.shortid import generate, generate_unique
    >>> generate(5)
    'q0_Zk'
    >>> generate_unique(OperationContext(), dao, 5)
    'Yb-3A'

NOTE:
    The uniqueness check is best-effort. Two concurrent callers may draw the
    same candidate and both see it as free; the insert that follows must
    therefore reject duplicates (see ShortURLRedisDAO.insert()).
"""

import base64
import secrets
from typing import Protocol

from urlshortener.context import OperationContext
from urlshortener.exceptions import (
    CancellationError,
    InvalidLengthError,
    RandomSourceError,
    StoreLookupError,
    UniquenessExhaustedError,
)


# Maximum number of candidates generate_unique() draws before giving up
MAX_ATTEMPTS = 1337

ALPHABET = 'ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_'


class ShortIDStore(Protocol):
    """Key-value lookup consumed by generate_unique()

    `exists()` returns True when the shortcode is taken and False when it is
    free. It usually raises DAOError (e.g. DataStoreError) on failure, but
    generate_unique() wraps any exception it raises into StoreLookupError,
    except CancellationError, which propagates unchanged.
    """

    def exists(self, shortcode: str, **kwargs) -> bool: ...


def _random_bytes(size: int) -> bytes:
    try:
        return secrets.token_bytes(size)
    except (OSError, NotImplementedError) as e:
        raise RandomSourceError(f'Secure random source failed to supply {size} bytes.') from e


def _encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b'=').decode('ascii')


def generate(length: int) -> str:
    """Generate a cryptographically secure, URL-safe short ID

    Random bytes are base64url encoded (4 characters per 3 bytes, padding
    stripped). If rounding leaves the encoded string short, more random bytes
    are drawn and their encoding appended until the string is long enough.
    The result is then truncated to exactly `length` characters.

    Args:
        length (int):
            Number of characters of the short ID. Must be positive.

    Returns:
        str: short ID drawn from [A-Za-z0-9-_].

    Raises:
        InvalidLengthError:
            If `length` is not a positive integer.
        RandomSourceError:
            If the operating system's random source fails.

    Example:
        >>> generate(8)
        'fJ3x_a9Q'
    """
    if isinstance(length, bool) or not isinstance(length, int) or length <= 0:
        raise InvalidLengthError(length)

    buffer_size = length * 3 // 4
    if length % 3 != 0:
        buffer_size += 1  # compensate for partial encoding groups

    encoded = _encode(_random_bytes(buffer_size))
    while len(encoded) < length:
        missing = length - len(encoded)
        encoded += _encode(_random_bytes((missing * 3 + 3) // 4))

    return encoded[:length]


def generate_unique(
    context: OperationContext,
    store: ShortIDStore,
    length: int,
    max_attempts: int = MAX_ATTEMPTS,
) -> str:
    """Generate a short ID which doesn't exist in `store`

    Draws up to `max_attempts` candidates. Each candidate costs one
    `store.exists()` lookup; only a confirmed collision is retried.
    The store is never written to: persisting the ID is the caller's job.

    Args:
        context (OperationContext):
            Checked before every attempt; stops the loop once cancelled or expired.

        store (ShortIDStore):
            Anything with an `exists(shortcode) -> bool` lookup, e.g. ShortURLRedisDAO.

        length (int):
            Number of characters of the short ID.

        max_attempts (int):
            Retry budget. Defaults to MAX_ATTEMPTS.

    Returns:
        str: short ID absent from `store` at the time of the check.

    Raises:
        InvalidLengthError:
            If `length` is not a positive integer.
        RandomSourceError:
            If the random source fails.
        StoreLookupError:
            If the lookup raises anything (DAO errors, driver errors such as
            redis ResponseError, ...). Chained to the original exception.
        UniquenessExhaustedError:
            If all `max_attempts` candidates collided.
        CancellationError:
            If `context` is cancelled or expires between attempts.
    """
    for attempt in range(1, max_attempts + 1):
        context.raise_if_done()
        candidate = generate(length)

        try:
            taken = store.exists(candidate)
        except CancellationError:
            raise
        except Exception as e:
            raise StoreLookupError(candidate, attempt) from e

        if not taken:
            return candidate

    raise UniquenessExhaustedError(attempts=max_attempts, length=length)
