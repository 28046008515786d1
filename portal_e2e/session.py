"""Authenticated browser sessions with guaranteed teardown.

An :class:`AuthSessionFixture` owns exactly one browser context.  It logs
in on :meth:`~AuthSessionFixture.acquire` and closes the context on
:meth:`~AuthSessionFixture.release`, whatever happened in between::

    async with AuthSessionFixture(browser, credentials_from_env()) as session:
        await DashboardPage(session.page).expect_loaded()

Teardown never raises into the test: a failed logout or context close is
recorded as a :class:`~portal_e2e.exceptions.TeardownWarning` and logged.
"""

from __future__ import annotations

import enum
import json
import re
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, AsyncIterator, Awaitable, Callable, Union

from playwright.async_api import Browser, BrowserContext, Page

from .components.header import HeaderComponent
from .exceptions import SessionSetupError, TeardownWarning
from .pages.login_page import POST_LOGIN_URL, LoginPage
from .utils.config import get_logger, get_settings
from .utils.test_data import Credentials

logger = get_logger("session")

UrlPattern = Union[str, re.Pattern[str]]
LoginFlow = Callable[[Page, Credentials, str], Awaitable[None]]
LogoutFlow = Callable[[Page, str], Awaitable[None]]


class SessionState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    LOGGING_IN = "logging_in"
    READY = "ready"
    FAILED = "failed"
    TORN_DOWN = "torn_down"


@dataclass
class AuthenticatedSession:
    """A logged-in page and the context that owns it."""

    credentials: Credentials
    context: BrowserContext
    page: Page
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


async def login_with_form(page: Page, credentials: Credentials, base_url: str) -> None:
    login_page = LoginPage(page, base_url)
    await login_page.navigate()
    await login_page.login_as(credentials)


async def logout_with_header(page: Page, base_url: str) -> None:
    await HeaderComponent(page, base_url).logout()


class AuthSessionFixture:
    """Single-use owner of one authenticated browser context.

    States move ``UNINITIALIZED -> LOGGING_IN -> READY -> TORN_DOWN``, or
    ``LOGGING_IN -> FAILED -> TORN_DOWN`` when login does not land on
    *post_login_url* within *login_timeout_ms*.
    """

    def __init__(
        self,
        browser: Browser,
        credentials: Credentials,
        *,
        base_url: str | None = None,
        post_login_url: UrlPattern = POST_LOGIN_URL,
        login_timeout_ms: float | None = None,
        logout_on_teardown: bool = False,
        context_options: dict[str, Any] | None = None,
        storage_state_path: str | Path | None = None,
        login: LoginFlow = login_with_form,
        logout: LogoutFlow = logout_with_header,
    ) -> None:
        settings = get_settings()
        self.browser = browser
        self.credentials = credentials
        self.base_url = (base_url or settings.base_url).rstrip("/")
        self.post_login_url = post_login_url
        self.login_timeout_ms = settings.login_timeout_ms if login_timeout_ms is None else login_timeout_ms
        self.logout_on_teardown = logout_on_teardown
        self.context_options = dict(context_options or {})
        self.storage_state_path = Path(storage_state_path) if storage_state_path else None
        self._login = login
        self._logout = logout

        self.state = SessionState.UNINITIALIZED
        self.session: AuthenticatedSession | None = None
        self.teardown_warnings: list[TeardownWarning] = []
        self._context: BrowserContext | None = None
        self._context_closed = False

    async def acquire(self) -> AuthenticatedSession:
        """Open a fresh context, log in, and wait for the post-login URL."""
        if self.state is not SessionState.UNINITIALIZED:
            raise RuntimeError(f"Session fixture already used (state={self.state.name})")

        self.state = SessionState.LOGGING_IN
        logger.info("Logging in as %s", self.credentials.username)
        try:
            options = dict(self.context_options)
            stored = load_storage_state(self.storage_state_path) if self.storage_state_path else None
            if stored is not None:
                options["storage_state"] = stored
            self._context = await self.browser.new_context(**options)
            page = await self._context.new_page()
            await self._login(page, self.credentials, self.base_url)
            await page.wait_for_url(self.post_login_url, timeout=self.login_timeout_ms)
            if self.storage_state_path is not None:
                await save_storage_state(self._context, self.storage_state_path)
        except Exception as exc:
            self.state = SessionState.FAILED
            logger.error("Login as %s failed: %s", self.credentials.username, exc)
            await self._close_context()
            raise SessionSetupError(self.credentials.username, exc) from exc
        except BaseException:
            # Cancellation and interpreter exits propagate unwrapped.
            self.state = SessionState.FAILED
            logger.warning("Login as %s interrupted", self.credentials.username)
            await self._close_context()
            raise

        self.session = AuthenticatedSession(self.credentials, self._context, page)
        self.state = SessionState.READY
        logger.info("Session ready for %s", self.credentials.username)
        return self.session

    async def release(self) -> None:
        """Tear the session down. Safe to call more than once; never raises."""
        if self.state is SessionState.TORN_DOWN:
            return

        if self.logout_on_teardown and self.state is SessionState.READY and self.session is not None:
            try:
                await self._logout(self.session.page, self.base_url)
            except Exception as exc:
                self._record(TeardownWarning("logout", exc))

        await self._close_context()
        self.state = SessionState.TORN_DOWN

    async def _close_context(self) -> None:
        if self._context is None or self._context_closed:
            return
        self._context_closed = True
        try:
            await self._context.close()
        except Exception as exc:
            self._record(TeardownWarning("close context", exc))

    def _record(self, warning: TeardownWarning) -> None:
        self.teardown_warnings.append(warning)
        logger.warning("%s", warning)

    async def __aenter__(self) -> AuthenticatedSession:
        try:
            return await self.acquire()
        except BaseException:
            await self.release()
            raise

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.release()


@asynccontextmanager
async def authenticated_session(
    browser: Browser,
    credentials: Credentials,
    **options: Any,
) -> AsyncIterator[AuthenticatedSession]:
    """Functional form of :class:`AuthSessionFixture`."""
    fixture = AuthSessionFixture(browser, credentials, **options)
    async with fixture as session:
        yield session


async def save_storage_state(context: BrowserContext, path: str | Path) -> Path:
    """Persist cookies and local storage so later contexts can skip the login form."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    await context.storage_state(path=str(target))
    logger.debug("Saved storage state to %s", target)
    return target


def load_storage_state(path: str | Path) -> dict[str, Any] | None:
    target = Path(path)
    if not target.exists():
        return None
    with target.open(encoding="utf-8") as fh:
        return json.load(fh)
