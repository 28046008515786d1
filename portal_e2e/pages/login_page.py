"""Login page object."""

from __future__ import annotations

import re

from playwright.async_api import Page

from ..actions import PageActions, TextOrPattern
from ..utils.config import get_settings
from ..utils.test_data import Credentials, admin_credentials_from_env, credentials_from_env

POST_LOGIN_URL = re.compile(r"dashboard|home")


class LoginPage:
    """Page object for the login/authentication screen.

    Self-healing selectors: each action tries a primary data-testid selector
    then common fallbacks (name attribute, id, role).
    """

    path = "/login"

    # Selector constants – primary + fallbacks
    _USERNAME = '[data-testid="username-input"]'
    _USERNAME_FALLBACKS = ('input[name="username"]', "#username")

    _PASSWORD = '[data-testid="password-input"]'
    _PASSWORD_FALLBACKS = ('input[name="password"]', "#password")

    _SUBMIT = '[data-testid="login-button"]'
    _SUBMIT_FALLBACKS = ('button[type="submit"]', "role=button[name=/log ?in|sign in/i]")

    _REMEMBER_ME = '[data-testid="remember-checkbox"]'
    _REMEMBER_ME_FALLBACKS = ('input[type="checkbox"]',)

    _SHOW_PASSWORD = '[data-testid="show-password"]'
    _SHOW_PASSWORD_FALLBACKS = ('button[aria-label="Show password"]',)

    _FORGOT_PASSWORD = '[data-testid="forgot-password"]'
    _FORGOT_PASSWORD_FALLBACKS = ("text=/forgot password/i",)

    _SIGN_UP = '[data-testid="signup-link"]'
    _SIGN_UP_FALLBACKS = ("text=/sign up|register/i",)

    _ERROR_MSG = '[data-testid="error-message"]'
    _ERROR_FALLBACKS = (".error-message", ".alert-error", '[role="alert"]')

    _SUCCESS_MSG = '[data-testid="success-message"]'
    _SUCCESS_FALLBACKS = (".success-message", ".alert-success")

    _ALL_ERRORS = '.error, .error-message, [role="alert"]'

    def __init__(self, page: Page, base_url: str | None = None) -> None:
        self.page = page
        self.actions = PageActions(page, base_url)

    @property
    def url(self) -> str:
        return self.page.url

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    async def navigate(self) -> None:
        await self.actions.navigate(self.path)
        await self.actions.wait_for_load("domcontentloaded")

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def enter_username(self, username: str) -> None:
        locator = await self.actions.find(self._USERNAME, self._USERNAME_FALLBACKS)
        await self.actions.fill(locator.first, username)

    async def enter_password(self, password: str) -> None:
        locator = await self.actions.find(self._PASSWORD, self._PASSWORD_FALLBACKS)
        await self.actions.fill(locator.first, password)

    async def click_login(self) -> None:
        locator = await self.actions.find(self._SUBMIT, self._SUBMIT_FALLBACKS)
        await self.actions.click(locator.first)

    async def login(self, username: str, password: str, *, remember_me: bool = False) -> None:
        """Fill both fields, optionally tick "remember me", and submit."""
        await self.enter_username(username)
        await self.enter_password(password)
        if remember_me:
            await self.toggle_remember_me(True)
        await self.click_login()

    async def login_as(self, credentials: Credentials, *, remember_me: bool = False) -> None:
        await self.login(credentials.username, credentials.password, remember_me=remember_me)

    async def quick_login(self) -> None:
        """Log in as the regular test user from the environment."""
        await self.login_as(credentials_from_env())

    async def login_as_admin(self) -> None:
        await self.login_as(admin_credentials_from_env())

    async def submit_with_enter(self) -> None:
        locator = await self.actions.find(self._PASSWORD, self._PASSWORD_FALLBACKS)
        await self.actions.press_key("Enter", locator.first)

    async def clear_login_form(self) -> None:
        username = await self.actions.find(self._USERNAME, self._USERNAME_FALLBACKS)
        password = await self.actions.find(self._PASSWORD, self._PASSWORD_FALLBACKS)
        await self.actions.clear(username.first)
        await self.actions.clear(password.first)

    async def toggle_remember_me(self, checked: bool) -> None:
        locator = await self.actions.find(self._REMEMBER_ME, self._REMEMBER_ME_FALLBACKS)
        await self.actions.set_checked(locator.first, checked)

    async def toggle_password_visibility(self) -> None:
        locator = await self.actions.find(self._SHOW_PASSWORD, self._SHOW_PASSWORD_FALLBACKS)
        await self.actions.click(locator.first)

    async def click_forgot_password(self) -> None:
        locator = await self.actions.find(self._FORGOT_PASSWORD, self._FORGOT_PASSWORD_FALLBACKS)
        await self.actions.click(locator.first)

    async def click_sign_up(self) -> None:
        locator = await self.actions.find(self._SIGN_UP, self._SIGN_UP_FALLBACKS)
        await self.actions.click(locator.first)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def is_login_page_displayed(self) -> bool:
        return (
            await self.actions.is_present(self._USERNAME, self._USERNAME_FALLBACKS)
            and await self.actions.is_present(self._PASSWORD, self._PASSWORD_FALLBACKS)
            and await self.actions.is_present(self._SUBMIT, self._SUBMIT_FALLBACKS)
        )

    async def is_error_displayed(self, *, timeout: float = 5_000) -> bool:
        return await self.actions.is_present(self._ERROR_MSG, self._ERROR_FALLBACKS, timeout=timeout)

    async def get_error_message(self) -> str:
        locator = await self.actions.find(self._ERROR_MSG, self._ERROR_FALLBACKS)
        return await self.actions.get_text(locator.first)

    async def get_success_message(self) -> str:
        locator = await self.actions.find(self._SUCCESS_MSG, self._SUCCESS_FALLBACKS)
        return await self.actions.get_text(locator.first)

    async def get_all_errors(self) -> list[str]:
        return await self.actions.all_texts(self._ALL_ERRORS)

    async def is_login_button_enabled(self) -> bool:
        locator = await self.actions.find(self._SUBMIT, self._SUBMIT_FALLBACKS)
        return await self.actions.is_enabled(locator.first)

    async def get_username_value(self) -> str:
        locator = await self.actions.find(self._USERNAME, self._USERNAME_FALLBACKS)
        return await self.actions.get_value(locator.first)

    async def get_password_value(self) -> str:
        locator = await self.actions.find(self._PASSWORD, self._PASSWORD_FALLBACKS)
        return await self.actions.get_value(locator.first)

    async def is_remember_me_checked(self) -> bool:
        locator = await self.actions.find(self._REMEMBER_ME, self._REMEMBER_ME_FALLBACKS)
        return await self.actions.is_checked(locator.first)

    # ------------------------------------------------------------------
    # Assertions
    # ------------------------------------------------------------------

    async def expect_login_page_displayed(self) -> None:
        await self.actions.find(self._USERNAME, self._USERNAME_FALLBACKS)
        await self.actions.find(self._PASSWORD, self._PASSWORD_FALLBACKS)
        await self.actions.find(self._SUBMIT, self._SUBMIT_FALLBACKS)

    async def expect_error_message(self, text: TextOrPattern | None = None) -> None:
        locator = await self.actions.find(self._ERROR_MSG, self._ERROR_FALLBACKS)
        if text is not None:
            await self.actions.expect_text(locator.first, text)

    async def expect_login_button_disabled(self) -> None:
        locator = await self.actions.find(self._SUBMIT, self._SUBMIT_FALLBACKS)
        await self.actions.expect_disabled(locator.first)

    async def expect_redirected_to_dashboard(self, pattern: TextOrPattern = POST_LOGIN_URL) -> None:
        await self.actions.wait_for_url(pattern, timeout=get_settings().login_timeout_ms)
