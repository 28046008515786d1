"""Page-object end-to-end test toolkit for the portal web application."""

from .actions import LocatorMatch, PageActions
from .exceptions import (
    LocatorNotFoundError,
    RetryExhaustedError,
    SessionSetupError,
    TeardownWarning,
    WaitTimeoutError,
)
from .session import AuthenticatedSession, AuthSessionFixture, SessionState, authenticated_session

__version__ = "0.1.0"

__all__ = [
    "AuthSessionFixture",
    "AuthenticatedSession",
    "LocatorMatch",
    "LocatorNotFoundError",
    "PageActions",
    "RetryExhaustedError",
    "SessionSetupError",
    "SessionState",
    "TeardownWarning",
    "WaitTimeoutError",
    "authenticated_session",
]
