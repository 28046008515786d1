"""Site header shared by every authenticated page."""

from __future__ import annotations

import re

from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..actions import PageActions
from ..exceptions import LocatorNotFoundError
from ..utils.config import get_logger

logger = get_logger("header")


class HeaderComponent:
    """Component object for the header bar: logo, navigation, user menu, notifications."""

    _HEADER = '[data-testid="header"]'
    _HEADER_FALLBACKS = ("header",)

    _LOGO = '[data-testid="logo"]'
    _LOGO_FALLBACKS = (".logo",)

    _NAV = '[data-testid="nav-menu"]'
    _NAV_FALLBACKS = ("nav", '[role="navigation"]')

    _USER_MENU = '[data-testid="user-menu"]'
    _USER_MENU_FALLBACKS = (".user-menu", '[aria-label="User menu"]')

    _USER_NAME = '[data-testid="user-name"]'
    _USER_NAME_FALLBACKS = (".user-name",)

    _NOTIFICATION_ICON = '[data-testid="notification-icon"]'
    _NOTIFICATION_ICON_FALLBACKS = ('[aria-label="Notifications"]',)

    _NOTIFICATION_BADGE = '[data-testid="notification-badge"]'
    _NOTIFICATION_BADGE_FALLBACKS = (".notification-badge",)

    _SEARCH_BUTTON = '[data-testid="search-button"]'
    _SEARCH_BUTTON_FALLBACKS = ("role=button[name=/search/i]",)

    _SEARCH_INPUT = '[data-testid="search-input"]'
    _SEARCH_INPUT_FALLBACKS = ('input[type="search"]',)

    _SETTINGS = '[data-testid="settings-icon"]'
    _SETTINGS_FALLBACKS = ('[aria-label="Settings"]',)

    _HELP = '[data-testid="help-icon"]'
    _HELP_FALLBACKS = ('[aria-label="Help"]',)

    _LOGOUT = '[data-testid="logout-button"]'
    _LOGOUT_FALLBACKS = ("role=button[name=/logout|sign out/i]",)

    _MENU_PROFILE = '[data-testid="menu-profile"]'
    _MENU_PROFILE_FALLBACKS = ("role=menuitem[name=/profile/i]",)

    _MENU_ACCOUNT = '[data-testid="menu-account"]'
    _MENU_ACCOUNT_FALLBACKS = ("role=menuitem[name=/account/i]",)

    _MENU_PREFERENCES = '[data-testid="menu-preferences"]'
    _MENU_PREFERENCES_FALLBACKS = ("role=menuitem[name=/preferences/i]",)

    def __init__(self, page: Page, base_url: str | None = None) -> None:
        self.page = page
        self.actions = PageActions(page, base_url)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    async def click_logo(self) -> None:
        locator = await self.actions.find(self._LOGO, self._LOGO_FALLBACKS)
        await self.actions.click(locator.first)

    async def navigate_to_section(self, section: str) -> None:
        """Click the nav entry for *section* (e.g. "Projects")."""
        locator = await self.actions.find(
            f'[data-testid="nav-{section.lower()}"]',
            (f"role=link[name=/{re.escape(section)}/i]",),
        )
        await self.actions.click(locator.first)

    async def get_navigation_items(self) -> list[str]:
        nav = await self.actions.find(self._NAV, self._NAV_FALLBACKS)
        return await self.actions.all_texts(nav.first.locator("a, button"))

    # ------------------------------------------------------------------
    # User menu
    # ------------------------------------------------------------------

    async def open_user_menu(self) -> None:
        locator = await self.actions.find(self._USER_MENU, self._USER_MENU_FALLBACKS)
        await self.actions.click(locator.first)
        await self.actions.find(self._MENU_PROFILE, self._MENU_PROFILE_FALLBACKS)

    async def close_user_menu(self) -> None:
        await self.page.mouse.click(0, 0)

    async def go_to_profile(self) -> None:
        await self.open_user_menu()
        locator = await self.actions.find(self._MENU_PROFILE, self._MENU_PROFILE_FALLBACKS)
        await self.actions.click(locator.first)

    async def go_to_account_settings(self) -> None:
        await self.open_user_menu()
        locator = await self.actions.find(self._MENU_ACCOUNT, self._MENU_ACCOUNT_FALLBACKS)
        await self.actions.click(locator.first)

    async def go_to_preferences(self) -> None:
        await self.open_user_menu()
        locator = await self.actions.find(self._MENU_PREFERENCES, self._MENU_PREFERENCES_FALLBACKS)
        await self.actions.click(locator.first)

    async def logout(self) -> None:
        """Log out through the user menu, falling back to a standalone logout button."""
        try:
            await self.open_user_menu()
            locator = await self.actions.find(self._LOGOUT, self._LOGOUT_FALLBACKS, timeout=2_000)
            await self.actions.click(locator.first)
        except (LocatorNotFoundError, PlaywrightTimeoutError) as exc:
            logger.debug("Logout not reachable through user menu (%s), trying direct button", exc)
            locator = await self.actions.find(self._LOGOUT, self._LOGOUT_FALLBACKS)
            await self.actions.click(locator.first)

    # ------------------------------------------------------------------
    # Notifications, search, settings, help
    # ------------------------------------------------------------------

    async def open_notifications(self) -> None:
        locator = await self.actions.find(self._NOTIFICATION_ICON, self._NOTIFICATION_ICON_FALLBACKS)
        await self.actions.click(locator.first)

    async def has_unread_notifications(self) -> bool:
        return await self.actions.is_present(self._NOTIFICATION_BADGE, self._NOTIFICATION_BADGE_FALLBACKS)

    async def get_notification_count(self) -> int:
        """Badge count, or 0 when no badge is shown."""
        match = await self.actions.resolve(
            [self._NOTIFICATION_BADGE, *self._NOTIFICATION_BADGE_FALLBACKS], timeout=1_000
        )
        if not match.found:
            return 0
        text = await self.actions.get_text(match.locator.first)
        digits = re.search(r"\d+", text)
        return int(digits.group()) if digits else 0

    async def open_search(self) -> None:
        locator = await self.actions.find(self._SEARCH_BUTTON, self._SEARCH_BUTTON_FALLBACKS)
        await self.actions.click(locator.first)

    async def search(self, term: str) -> None:
        await self.open_search()
        locator = await self.actions.find(self._SEARCH_INPUT, self._SEARCH_INPUT_FALLBACKS)
        await self.actions.fill(locator.first, term)
        await self.actions.press_key("Enter", locator.first)

    async def open_settings(self) -> None:
        locator = await self.actions.find(self._SETTINGS, self._SETTINGS_FALLBACKS)
        await self.actions.click(locator.first)

    async def open_help(self) -> None:
        locator = await self.actions.find(self._HELP, self._HELP_FALLBACKS)
        await self.actions.click(locator.first)

    # ------------------------------------------------------------------
    # Queries and assertions
    # ------------------------------------------------------------------

    async def get_user_name(self) -> str:
        locator = await self.actions.find(self._USER_NAME, self._USER_NAME_FALLBACKS)
        return await self.actions.get_text(locator.first)

    async def is_user_logged_in(self) -> bool:
        return await self.actions.is_present(self._USER_MENU, self._USER_MENU_FALLBACKS)

    async def is_header_visible(self) -> bool:
        return await self.actions.is_present(self._HEADER, self._HEADER_FALLBACKS)

    async def wait_for_header_load(self) -> None:
        await self.actions.find(self._HEADER, self._HEADER_FALLBACKS)
        await self.actions.find(self._LOGO, self._LOGO_FALLBACKS)

    async def expect_header_displayed(self) -> None:
        await self.actions.find(self._HEADER, self._HEADER_FALLBACKS)

    async def expect_user_logged_in(self) -> None:
        await self.actions.find(self._USER_MENU, self._USER_MENU_FALLBACKS)

    async def expect_notification_count(self, expected: int) -> None:
        actual = await self.get_notification_count()
        if actual != expected:
            raise AssertionError(f"Expected {expected} notifications, but found {actual}")

    async def expect_user_name(self, expected: str) -> None:
        actual = await self.get_user_name()
        if expected not in actual:
            raise AssertionError(f'Expected username to contain "{expected}", but found "{actual}"')

    async def take_screenshot(self, path: str = "screenshots/header.png") -> bytes:
        locator = await self.actions.find(self._HEADER, self._HEADER_FALLBACKS)
        return await locator.first.screenshot(path=path)
