"""Utility helpers for configuration, logging, waits, retries, screenshots and test data."""

from .config import Settings, get_directory_from_env, get_logger, get_settings
from .logging_utils import configure_json_logging
from .retry_utils import retry, with_retry
from .test_data import Credentials, admin_credentials_from_env, credentials_from_env
from .wait_utils import poll_until, wait_for_console_message, wait_until

__all__ = [
    "Credentials",
    "Settings",
    "admin_credentials_from_env",
    "configure_json_logging",
    "credentials_from_env",
    "get_directory_from_env",
    "get_logger",
    "get_settings",
    "poll_until",
    "retry",
    "wait_for_console_message",
    "wait_until",
    "with_retry",
]
