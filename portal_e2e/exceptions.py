"""Typed failures raised by waits, retries, locators and session fixtures."""

from __future__ import annotations

from typing import Any, Sequence


class WaitTimeoutError(TimeoutError):
    """A wait's condition never became true within its budget."""

    def __init__(
        self,
        message: str,
        *,
        timeout_ms: float,
        elapsed_ms: float,
        last_observed: Any = None,
    ) -> None:
        self.description = message
        self.timeout_ms = timeout_ms
        self.elapsed_ms = elapsed_ms
        self.last_observed = last_observed
        super().__init__(
            f"{message}: waited {elapsed_ms:.0f}ms (timeout {timeout_ms:.0f}ms), "
            f"last observed {last_observed!r}"
        )


class RetryExhaustedError(Exception):
    """A retried action failed on every attempt.

    Only the most recent underlying error is kept; earlier failures are
    logged as they happen but are not carried here.
    """

    def __init__(self, attempts: int, last_error: BaseException) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Action failed after {attempts} attempts. Last error: {last_error}")


class LocatorNotFoundError(TimeoutError):
    """No selector in a fallback chain resolved to a visible element."""

    def __init__(self, selectors: Sequence[str]) -> None:
        self.selectors = tuple(selectors)
        super().__init__(f"Self-healing exhausted all selectors: {list(self.selectors)}")


class SessionSetupError(Exception):
    """The authenticated session fixture could not reach the ready state."""

    def __init__(self, username: str, cause: BaseException) -> None:
        self.username = username
        self.cause = cause
        super().__init__(f"Login as '{username}' did not produce an authenticated session: {cause}")


class TeardownWarning(UserWarning):
    """Non-fatal cleanup failure. Logged, never raised into a test."""

    def __init__(self, step: str, cause: BaseException) -> None:
        self.step = step
        self.cause = cause
        super().__init__(f"Teardown step '{step}' failed: {cause}")
