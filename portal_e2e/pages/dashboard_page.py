"""Dashboard page object (landing screen after login)."""

from __future__ import annotations

import re

from playwright.async_api import Page

from ..actions import PageActions
from ..components.header import HeaderComponent
from ..utils.config import get_logger
from ..utils.wait_utils import wait_for_element_count, wait_for_text_to_change

logger = get_logger("dashboard")

LOGIN_URL = re.compile(r"/login")


class DashboardPage:
    """Page object for the main dashboard.

    Header interactions are delegated to :class:`HeaderComponent`; the
    dashboard keeps its own selectors only for widgets it owns.
    """

    path = "/dashboard"

    _HEADING = '[data-testid="dashboard-heading"]'
    _HEADING_FALLBACKS = ("h1", "role=heading[level=1]")

    _NAV = '[data-testid="nav-menu"]'
    _NAV_FALLBACKS = ("nav", '[role="navigation"]')

    _USER_MENU = '[data-testid="user-menu"]'
    _USER_MENU_FALLBACKS = (".user-menu",)

    _LOGOUT = '[data-testid="logout-button"]'
    _LOGOUT_FALLBACKS = ("role=button[name=/logout|sign out/i]",)

    _WELCOME = '[data-testid="welcome-message"]'
    _WELCOME_FALLBACKS = (".welcome-message", "text=/welcome/i")

    _USER_NAME = '[data-testid="user-name"]'
    _USER_NAME_FALLBACKS = (".user-name",)

    _SEARCH_INPUT = '[data-testid="search-input"]'
    _SEARCH_INPUT_FALLBACKS = ('input[type="search"]', 'input[placeholder*="Search" i]')

    _NOTIFICATION_BADGE = '[data-testid="notification-badge"]'
    _NOTIFICATION_BADGE_FALLBACKS = (".notification-badge",)

    _NOTIFICATION_ICON = '[data-testid="notification-icon"]'
    _NOTIFICATION_ICON_FALLBACKS = ('[aria-label="Notifications"]',)

    _SETTINGS = '[data-testid="settings-link"]'
    _SETTINGS_FALLBACKS = ("role=link[name=/settings/i]",)

    _HELP = '[data-testid="help-link"]'
    _HELP_FALLBACKS = ("role=link[name=/help/i]",)

    _STATS_CARD = '[data-testid="stats-card"]'
    _STATS_VALUE = '[data-testid="stats-value"]'
    _QUICK_ACTIONS = '[data-testid="quick-actions"]'
    _RECENT_ACTIVITY = '[data-testid="recent-activity"]'
    _CHART = '[data-testid="chart"]'
    _CONTENT = '[data-testid="dashboard-content"]'
    _CONTENT_FALLBACKS = ("main", '[role="main"]')

    WIDGETS = {
        "stats": _STATS_CARD,
        "quick-actions": _QUICK_ACTIONS,
        "recent-activity": _RECENT_ACTIVITY,
        "chart": _CHART,
    }

    def __init__(self, page: Page, base_url: str | None = None) -> None:
        self.page = page
        self.actions = PageActions(page, base_url)
        self.header = HeaderComponent(page, base_url)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    async def navigate(self) -> None:
        await self.actions.navigate(self.path)
        await self.wait_for_dashboard_load()

    async def wait_for_dashboard_load(self) -> None:
        await self.actions.wait_for_load("domcontentloaded")
        await self.actions.find(self._HEADING, self._HEADING_FALLBACKS)

    async def refresh(self) -> None:
        await self.actions.reload()
        await self.wait_for_dashboard_load()

    async def navigate_to_section(self, section: str) -> None:
        await self.header.navigate_to_section(section)
        await self.actions.wait_for_load("domcontentloaded")

    async def go_to(self, section: str) -> None:
        """Navigate directly to ``/<section>`` without using the menu."""
        await self.actions.navigate(f"/{section.strip('/')}")

    async def logout(self) -> None:
        locator = await self.actions.find(self._LOGOUT, self._LOGOUT_FALLBACKS)
        await self.actions.click(locator.first)
        await self.actions.wait_for_url(LOGIN_URL)
        logger.info("Logged out from dashboard")

    async def open_user_menu(self) -> None:
        locator = await self.actions.find(self._USER_MENU, self._USER_MENU_FALLBACKS)
        await self.actions.click(locator.first)

    async def search(self, term: str) -> None:
        locator = await self.actions.find(self._SEARCH_INPUT, self._SEARCH_INPUT_FALLBACKS)
        await self.actions.fill(locator.first, term)
        await self.actions.press_key("Enter", locator.first)

    async def open_notifications(self) -> None:
        locator = await self.actions.find(self._NOTIFICATION_ICON, self._NOTIFICATION_ICON_FALLBACKS)
        await self.actions.click(locator.first)

    async def open_settings(self) -> None:
        locator = await self.actions.find(self._SETTINGS, self._SETTINGS_FALLBACKS)
        await self.actions.click(locator.first)

    async def open_help(self) -> None:
        locator = await self.actions.find(self._HELP, self._HELP_FALLBACKS)
        await self.actions.click(locator.first)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def is_dashboard_displayed(self) -> bool:
        return await self.actions.is_present(self._HEADING, self._HEADING_FALLBACKS, timeout=5_000)

    async def is_user_logged_in(self) -> bool:
        return await self.actions.is_present(self._USER_MENU, self._USER_MENU_FALLBACKS)

    async def get_heading_text(self) -> str:
        locator = await self.actions.find(self._HEADING, self._HEADING_FALLBACKS)
        return await self.actions.get_text(locator.first)

    async def get_welcome_message(self) -> str:
        locator = await self.actions.find(self._WELCOME, self._WELCOME_FALLBACKS)
        return await self.actions.get_text(locator.first)

    async def get_user_name(self) -> str:
        locator = await self.actions.find(self._USER_NAME, self._USER_NAME_FALLBACKS)
        return await self.actions.get_text(locator.first)

    async def has_notifications(self) -> bool:
        return await self.actions.is_present(self._NOTIFICATION_BADGE, self._NOTIFICATION_BADGE_FALLBACKS)

    async def get_notification_count(self) -> int:
        if not await self.has_notifications():
            return 0
        locator = await self.actions.find(self._NOTIFICATION_BADGE, self._NOTIFICATION_BADGE_FALLBACKS)
        text = await self.actions.get_text(locator.first)
        digits = re.search(r"\d+", text)
        return int(digits.group()) if digits else 0

    async def get_stats_card_count(self) -> int:
        return await self.actions.get_count(self._STATS_CARD)

    async def get_stats_card_values(self) -> list[str]:
        return await self.actions.all_texts(self._STATS_VALUE)

    async def is_widget_displayed(self, name: str) -> bool:
        """Whether the widget registered under *name* in :attr:`WIDGETS` is visible."""
        selector = self.WIDGETS.get(name, f'[data-testid="{name}"]')
        return await self.actions.is_present(selector)

    # ------------------------------------------------------------------
    # Waits and assertions
    # ------------------------------------------------------------------

    async def wait_for_stats_to_refresh(self, *, timeout_ms: float | None = None) -> str:
        """Block until the first stats value differs from its current text."""
        locator = self.page.locator(self._STATS_VALUE).first
        baseline = await self.actions.get_text(locator)
        return await wait_for_text_to_change(locator, baseline, timeout_ms=timeout_ms)

    async def expect_loaded(self) -> None:
        await self.actions.find(self._HEADING, self._HEADING_FALLBACKS)
        await self.actions.find(self._CONTENT, self._CONTENT_FALLBACKS)

    async def expect_heading(self, text: str) -> None:
        locator = await self.actions.find(self._HEADING, self._HEADING_FALLBACKS)
        await self.actions.expect_text(locator.first, text)

    async def expect_user_logged_in(self) -> None:
        await self.actions.find(self._USER_MENU, self._USER_MENU_FALLBACKS)

    async def expect_nav_visible(self) -> None:
        await self.actions.find(self._NAV, self._NAV_FALLBACKS)

    async def expect_stats_cards(self, count: int, *, timeout_ms: float | None = None) -> None:
        await wait_for_element_count(self.page.locator(self._STATS_CARD), count, timeout_ms=timeout_ms)

    async def take_screenshot(self, path: str = "screenshots/dashboard.png") -> bytes:
        return await self.actions.screenshot(path)
