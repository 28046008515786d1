"""Pytest configuration for E2E tests with Playwright."""

from __future__ import annotations

import re

import pytest
import pytest_asyncio
from playwright.async_api import async_playwright

from portal_e2e.components.header import HeaderComponent
from portal_e2e.pages.dashboard_page import DashboardPage
from portal_e2e.pages.login_page import LoginPage
from portal_e2e.session import AuthSessionFixture
from portal_e2e.utils.config import get_logger, get_settings
from portal_e2e.utils.logging_utils import configure_json_logging
from portal_e2e.utils.screenshot_utils import capture_on_failure
from portal_e2e.utils.test_data import Credentials, admin_credentials_from_env, credentials_from_env

logger = get_logger("e2e")

ADMIN_LANDING_URL = re.compile(r"dashboard|admin")


@pytest.fixture(scope="session", autouse=True)
def e2e_logging():
    configure_json_logging(get_settings().log_level)


@pytest.fixture()
def base_url() -> str:
    """Base URL for the application."""
    return get_settings().base_url


@pytest_asyncio.fixture()
async def browser():
    """Launch the configured browser engine."""
    settings = get_settings()
    async with async_playwright() as p:
        engine = getattr(p, settings.browser)
        browser = await engine.launch(headless=settings.headless)
        yield browser
        await browser.close()


@pytest_asyncio.fixture()
async def context(browser, base_url):
    context = await browser.new_context(base_url=base_url, viewport={"width": 1920, "height": 1080})
    context.set_default_timeout(get_settings().action_timeout_ms)
    yield context
    await context.close()


@pytest_asyncio.fixture()
async def page(context, request):
    """Create a new page for each test; screenshot it if the test body failed."""
    page = await context.new_page()
    yield page
    report = getattr(request.node, "rep_call", None)
    if report is not None and report.failed:
        path = await capture_on_failure(page, request.node.name)
        logger.info("Failure screenshot saved to %s", path)
    await page.close()


@pytest.fixture()
def login_page(page, base_url) -> LoginPage:
    return LoginPage(page, base_url)


@pytest.fixture()
def dashboard_page(page, base_url) -> DashboardPage:
    return DashboardPage(page, base_url)


@pytest.fixture()
def header(page, base_url) -> HeaderComponent:
    return HeaderComponent(page, base_url)


@pytest.fixture()
def user_credentials() -> Credentials:
    return credentials_from_env()


@pytest.fixture()
def admin_credentials() -> Credentials:
    return admin_credentials_from_env()


@pytest_asyncio.fixture()
async def authenticated_session(browser, base_url, user_credentials):
    """A logged-in regular user; logged out and closed after the test."""
    async with AuthSessionFixture(
        browser,
        user_credentials,
        base_url=base_url,
        logout_on_teardown=True,
    ) as session:
        yield session


@pytest_asyncio.fixture()
async def admin_session(browser, base_url, admin_credentials):
    async with AuthSessionFixture(
        browser,
        admin_credentials,
        base_url=base_url,
        post_login_url=ADMIN_LANDING_URL,
        logout_on_teardown=True,
    ) as session:
        yield session
