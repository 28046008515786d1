"""Environment-driven configuration for the portal E2E suite."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

_TRUE_VALUES = {"1", "true", "yes", "on"}


def get_logger(name: str) -> logging.Logger:
    """Create a namespaced logger for a suite component."""
    return logging.getLogger(f"portal-e2e.{name}")


def get_directory_from_env(env_name: str, default_path: str) -> Path:
    """Return a directory path from env, ensuring it exists."""
    configured = os.environ.get(env_name, default_path)
    directory = Path(configured)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def _int_from_env(env_name: str, default: int) -> int:
    raw = os.environ.get(env_name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{env_name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{env_name} must be positive, got {value}")
    return value


def _bool_from_env(env_name: str, default: bool) -> bool:
    raw = os.environ.get(env_name, "").strip().lower()
    if not raw:
        return default
    return raw in _TRUE_VALUES


@dataclass(frozen=True)
class Settings:
    """Runtime settings resolved once per test session."""

    base_url: str = "http://localhost:3000"
    browser: str = "chromium"
    headless: bool = True
    default_timeout_ms: int = 30_000
    poll_interval_ms: int = 500
    login_timeout_ms: int = 10_000
    action_timeout_ms: int = 5_000
    screenshot_dir: str = "screenshots"
    failure_dir: str = "test-results/failures"
    visual_dir: str = "test-results/visual"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        browser = os.environ.get("BROWSER", cls.browser).strip().lower()
        if browser not in ("chromium", "firefox", "webkit"):
            raise ValueError(f"BROWSER must be chromium, firefox or webkit, got {browser!r}")

        return cls(
            base_url=os.environ.get("BASE_URL", cls.base_url).rstrip("/"),
            browser=browser,
            headless=_bool_from_env("HEADLESS", cls.headless),
            default_timeout_ms=_int_from_env("DEFAULT_TIMEOUT_MS", cls.default_timeout_ms),
            poll_interval_ms=_int_from_env("POLL_INTERVAL_MS", cls.poll_interval_ms),
            login_timeout_ms=_int_from_env("LOGIN_TIMEOUT_MS", cls.login_timeout_ms),
            action_timeout_ms=_int_from_env("ACTION_TIMEOUT_MS", cls.action_timeout_ms),
            screenshot_dir=os.environ.get("SCREENSHOT_DIR", cls.screenshot_dir),
            failure_dir=os.environ.get("FAILURE_DIR", cls.failure_dir),
            visual_dir=os.environ.get("VISUAL_DIR", cls.visual_dir),
            log_level=os.environ.get("LOG_LEVEL", cls.log_level).upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings. Call ``get_settings.cache_clear()`` after changing env."""
    return Settings.from_env()
