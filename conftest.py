"""Root conftest: shared fixtures available to all test layers."""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from portal_e2e.utils.config import get_settings

SETTINGS_ENV_VARS = (
    "BASE_URL",
    "BROWSER",
    "HEADLESS",
    "DEFAULT_TIMEOUT_MS",
    "POLL_INTERVAL_MS",
    "LOGIN_TIMEOUT_MS",
    "ACTION_TIMEOUT_MS",
    "SCREENSHOT_DIR",
    "FAILURE_DIR",
    "VISUAL_DIR",
    "LOG_LEVEL",
)

CREDENTIAL_ENV_VARS = ("TEST_USERNAME", "TEST_PASSWORD", "ADMIN_USERNAME", "ADMIN_PASSWORD", "TEST_DATA_DIR")


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop the cached Settings before and after every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def clean_env():
    """Remove every setting and credential env var for isolation."""
    names = SETTINGS_ENV_VARS + CREDENTIAL_ENV_VARS
    saved = {name: os.environ[name] for name in names if name in os.environ}
    with patch.dict(os.environ, {}, clear=False):
        for name in saved:
            del os.environ[name]
        get_settings.cache_clear()
        yield
    get_settings.cache_clear()


@pytest.fixture()
def tmp_data_dir(tmp_path: Path, monkeypatch) -> Path:
    """Point TEST_DATA_DIR at a temp directory holding a small users.json."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "users.json").write_text(
        json.dumps(
            {
                "validUsers": [
                    {"username": "alice@qa.com", "password": "Alice@123", "role": "user"},
                    {"username": "root@qa.com", "password": "Root@123", "role": "admin"},
                ],
                "invalidUsers": [
                    {"username": "nobody@qa.com", "password": "wrong", "reason": "unknown user"},
                ],
            }
        )
    )
    monkeypatch.setenv("TEST_DATA_DIR", str(data_dir))
    return data_dir


def make_locator(**overrides) -> MagicMock:
    """Fake Playwright ``Locator``: async methods are AsyncMocks, ``.first`` is itself."""
    locator = MagicMock(name="locator")
    for name in (
        "wait_for",
        "click",
        "dblclick",
        "fill",
        "press_sequentially",
        "clear",
        "select_option",
        "check",
        "uncheck",
        "set_checked",
        "hover",
        "focus",
        "press",
        "scroll_into_view_if_needed",
        "text_content",
        "get_attribute",
        "input_value",
        "is_visible",
        "is_hidden",
        "is_enabled",
        "is_checked",
        "count",
        "all_text_contents",
        "screenshot",
    ):
        setattr(locator, name, AsyncMock(name=name))
    locator.first = locator
    for name, value in overrides.items():
        setattr(locator, name, value)
    return locator


def make_page(locator: MagicMock | None = None) -> MagicMock:
    """Fake Playwright ``Page`` whose ``locator()`` returns *locator* (or a fresh fake)."""
    page = MagicMock(name="page")
    for name in (
        "goto",
        "reload",
        "go_back",
        "title",
        "wait_for_load_state",
        "wait_for_url",
        "wait_for_event",
        "wait_for_timeout",
        "evaluate",
        "screenshot",
        "set_viewport_size",
        "add_style_tag",
        "bring_to_front",
    ):
        setattr(page, name, AsyncMock(name=name))
    page.keyboard.press = AsyncMock(name="keyboard.press")
    page.mouse.click = AsyncMock(name="mouse.click")
    page.url = "http://localhost:3000/"
    page.locator.return_value = locator if locator is not None else make_locator()
    return page


@pytest.fixture()
def fake_locator() -> MagicMock:
    return make_locator()


@pytest.fixture()
def fake_page(fake_locator) -> MagicMock:
    return make_page(fake_locator)


@pytest.fixture()
def locator_factory():
    """Build additional fake locators, e.g. one per selector in a fallback chain."""
    return make_locator


@pytest.fixture()
def page_factory():
    return make_page
