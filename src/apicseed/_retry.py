"""
Retry utilities with a fixed pause between attempts.

Inspired by Tenacity's Retrying class, this module provides a context manager
for implementing retry logic inline, plus the `retry()` helper that wraps a
callable and returns a tagged RetryOutcome instead of raising.

Example:
    >>> from apicseed._retry import retry
    >>> outcome = retry(2, send_json, 3.0, request)
    >>> if outcome.succeeded:
    ...     response = outcome.result
    ... else:
    ...     print(f"{len(outcome.retry_errors)} attempts failed")
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from apicseed._utils import sleep

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MaxRetriesExceededError(Exception):
    """
    Raised by `RetryOutcome.unwrap()` when every attempt failed.

    Attributes:
        message: Human-readable error message.
        last_exception: The exception from the last attempt.
        retry_errors: Every exception, one per attempt, in attempt order.
    """

    def __init__(
        self,
        message: str,
        last_exception: Exception | None = None,
        retry_errors: tuple[Exception, ...] = (),
    ):
        super().__init__(message)
        self.last_exception = last_exception
        self.retry_errors = retry_errors


@dataclass(frozen=True)
class RetryAttempt:
    """
    Represents a single retry attempt.

    Attributes:
        attempt_number: One-based index of the current attempt.
        max_attempts: Total number of attempts (max_retries + 1).
    """

    attempt_number: int
    max_attempts: int

    @property
    def is_last_attempt(self) -> bool:
        """Return True if this is the last attempt."""
        return self.attempt_number >= self.max_attempts


@dataclass(frozen=True)
class RetryOutcome(Generic[T]):
    """
    Tagged result of a retried call.

    Either `succeeded` with the method's `result`, or failed with one entry in
    `retry_errors` per attempt. There is no partial success.

    Attributes:
        succeeded: True if one of the attempts returned normally.
        result: The value returned by the successful attempt (None on failure).
        retry_errors: Exceptions raised by each attempt (empty on success).
        attempts: Number of attempts made.
    """

    succeeded: bool
    result: T | None = None
    retry_errors: tuple[Exception, ...] = ()
    attempts: int = 1

    @classmethod
    def success(cls, result: T, attempts: int = 1) -> RetryOutcome[T]:
        return cls(succeeded=True, result=result, attempts=attempts)

    @classmethod
    def failure(cls, retry_errors: tuple[Exception, ...]) -> RetryOutcome[T]:
        assert retry_errors, "A failed outcome needs at least one error."
        return cls(succeeded=False, retry_errors=retry_errors, attempts=len(retry_errors))

    def unwrap(self) -> T:
        """
        Return the result, or raise MaxRetriesExceededError if every attempt failed.

        Raises:
            MaxRetriesExceededError: Wrapping the last attempt's exception.
        """
        if self.succeeded:
            return self.result  # type: ignore[return-value]
        last = self.retry_errors[-1]
        raise MaxRetriesExceededError(
            message=f"Max retries exceeded after {self.attempts} attempts. Last error: {last}",
            last_exception=last,
            retry_errors=self.retry_errors,
        ) from last


class Retrying:
    """
    Context manager for retry with a fixed pause.

    Every exception matching `retry_on_exceptions` is recorded and
    suppressed; the loop simply ends once all attempts are used. The caller
    decides what exhaustion means by inspecting `errors` after the loop.

    Usage:
        >>> retrying = Retrying(max_retries=2, pause=3.0)
        >>> for attempt in retrying:
        ...     with attempt:
        ...         return send_json(request)
        >>> print(retrying.errors)

    Args:
        max_retries: Number of retries after the first attempt (default: 1).
            Use 0 to disable retries (single attempt only).
        pause: Seconds to sleep between attempts (default: None, no pause).
            There is never a pause after the final attempt.
        retry_on_exceptions: Exception types that are recorded and retried.
            Anything else propagates immediately (default: Exception).
        silent: If True, failed attempts are not logged.
        logger_prefix: Prefix for log messages (e.g., "manager").
    """

    def __init__(
        self,
        max_retries: int = 1,
        pause: float | None = None,
        retry_on_exceptions: tuple[type[Exception], ...] = (Exception,),
        silent: bool = False,
        logger_prefix: str = "",
    ):
        assert max_retries is not None, "max_retries cannot be None"
        assert max_retries >= 0, f"max_retries must be >= 0, got {max_retries}"
        assert pause is None or pause >= 0, f"pause must be >= 0 or None, got {pause}"
        assert retry_on_exceptions is not None, "retry_on_exceptions cannot be None"

        self.max_retries = max_retries
        self.pause = pause
        self.retry_on_exceptions = retry_on_exceptions
        self.silent = silent
        self.logger_prefix = logger_prefix

        self._errors: list[Exception] = []

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    @property
    def errors(self) -> tuple[Exception, ...]:
        """Exceptions recorded so far, one per failed attempt."""
        return tuple(self._errors)

    def __iter__(self) -> Generator[_RetryContext, None, None]:
        """Yield retry contexts for each attempt."""
        for attempt_number in range(1, self.max_attempts + 1):
            yield _RetryContext(self, attempt_number)

    def _handle_failure(self, attempt_number: int, exception: Exception) -> None:
        """Record the failure, log it and pause if another attempt follows."""
        self._errors.append(exception)
        attempts_remaining = self.max_attempts - attempt_number

        if not self.silent:
            prefix = f"{self.logger_prefix} | " if self.logger_prefix else ""
            retrying_msg = " Retrying..." if attempts_remaining > 0 else ""
            logger.error(
                f"{prefix}Method failed (Attempt: {attempt_number}/{self.max_attempts}){retrying_msg}",
                exc_info=exception,
            )

        if self.pause and attempts_remaining > 0:
            sleep(self.pause)


class _RetryContext:
    """
    Context for a single retry attempt (internal).

    On success (no exception): exits normally, caller returns or breaks.
    On retryable exception: records it, suppresses it, loop continues.
    On other exceptions: re-raises.
    """

    def __init__(self, retrying: Retrying, attempt_number: int):
        self._retrying = retrying
        self.attempt_number = attempt_number

    def __enter__(self) -> RetryAttempt:
        return RetryAttempt(
            attempt_number=self.attempt_number,
            max_attempts=self._retrying.max_attempts,
        )

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> bool:
        if exc_val is None:
            return False

        # Only handle Exception, not BaseException (KeyboardInterrupt, etc.)
        if not isinstance(exc_val, Exception):
            return False

        if not isinstance(exc_val, self._retrying.retry_on_exceptions):
            return False

        self._retrying._handle_failure(self.attempt_number, exc_val)
        return True


def retry(
    max_retries: int,
    method: Callable[..., T],
    pause: float | None = None,
    *args: Any,
    silent: bool | None = None,
    **kwargs: Any,
) -> RetryOutcome[T]:
    """
    Call `method(*args, **kwargs)` up to `max_retries + 1` times.

    Returns on the first success. If every attempt raises, the exceptions are
    returned in a failed RetryOutcome; nothing is re-raised.

    Args:
        max_retries: Number of retries after the first attempt.
        method: The callable to retry.
        pause: Seconds to sleep between attempts (None for no pause).
        *args: Positional arguments for method.
        silent: Suppress per-attempt logs. Defaults to the `silent_retry` option.
        **kwargs: Keyword arguments for method.

    Returns:
        RetryOutcome with the result, or with the errors of every attempt.
    """
    assert callable(method), "method must be callable"

    if silent is None:
        from apicseed._config import SEED
        silent = SEED.config.options.silent_retry

    retrying = Retrying(max_retries=max_retries, pause=pause, silent=silent)
    for attempt in retrying:
        with attempt as current:
            result = method(*args, **kwargs)
            return RetryOutcome.success(result, attempts=current.attempt_number)

    return RetryOutcome.failure(retrying.errors)
