"""Cancellable operation context

An `OperationContext` travels with a unit of work (e.g. one Lambda invocation)
and tells long-running loops when to stop: either someone called `cancel()`,
or the optional deadline passed.

Classes:
    OperationContext:
        Thread-safe cancellation flag with an optional monotonic deadline.

Example:
    >>> ctx = OperationContext(timeout=2.5)
    >>> ctx.done
    False
    >>> ctx.cancel()
    >>> ctx.raise_if_done()
    Traceback (most recent call last):
        ...
    urlshortener.exceptions.CancellationError: Operation was cancelled.

    Inside a Lambda handler, derive the deadline from the runtime context:

    >>> ctx = OperationContext.from_lambda_context(context)
"""

import time
import threading

from urlshortener.exceptions import CancellationError
from urlshortener.types import LambdaContext


class OperationContext:
    def __init__(self, timeout: float | None = None):
        """Create a context, optionally expiring `timeout` seconds from now

        Args:
            timeout (float | None):
                Seconds until the context expires. None means no deadline.
        """
        self._cancelled = threading.Event()
        self._deadline = None if timeout is None else time.monotonic() + timeout

    @classmethod
    def from_lambda_context(cls, context: LambdaContext, safety_margin_ms: int = 500) -> 'OperationContext':
        """Build a context expiring shortly before the Lambda invocation times out

        Args:
            context (LambdaContext):
                AWS Lambda context object. Objects without
                `get_remaining_time_in_millis()` (tests, scripts) yield a
                context without deadline.

            safety_margin_ms (int):
                Milliseconds reserved for the handler to build its response.

        Returns:
            OperationContext: new context.
        """
        remaining = getattr(context, 'get_remaining_time_in_millis', None)
        if not callable(remaining):
            return cls()
        return cls(timeout=max(0, remaining() - safety_margin_ms) / 1000)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def done(self) -> bool:
        return self.cancelled or self.expired

    def remaining(self) -> float | None:
        """Seconds left until the deadline (never negative), None without deadline"""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def raise_if_done(self) -> None:
        """Raise CancellationError if the context was cancelled or has expired"""
        if self.cancelled:
            raise CancellationError('Operation was cancelled.')
        if self.expired:
            raise CancellationError('Operation deadline exceeded.')
