"""Shared page capabilities with self-healing locator support.

Page and component objects do not inherit from a common base.  Each one
composes a :class:`PageActions` bound to the Playwright ``Page`` it was
given, and exposes screen-specific actions built on these primitives:

* locate: :meth:`PageActions.find` and :meth:`PageActions.resolve`
* act: navigate, click, fill, check, press, scroll, dialogs, tabs
* read: text, attributes, values, visibility, counts
* assert: ``expect_*`` helpers over Playwright's ``expect``

Self-healing: ``find()`` tries a primary locator, then falls back through
a list of alternatives.  Successful fallbacks are logged so the team can
update the canonical locator in future maintenance passes.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Sequence, Union

from playwright.async_api import Locator, Page, expect
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .exceptions import LocatorNotFoundError
from .utils.config import get_logger, get_settings

logger = get_logger("pom")

Target = Union[str, Locator]
TextOrPattern = Union[str, re.Pattern[str]]


@dataclass(frozen=True)
class LocatorMatch:
    """Result of trying an ordered list of selectors."""

    found: bool
    selector: str | None = None
    locator: Locator | None = None
    tried: tuple[str, ...] = field(default_factory=tuple)


class PageActions:
    """Locate/act/assert capability over a single Playwright page."""

    def __init__(
        self,
        page: Page,
        base_url: str | None = None,
        *,
        timeout_ms: float | None = None,
    ) -> None:
        settings = get_settings()
        self.page = page
        self.base_url = (base_url or settings.base_url).rstrip("/")
        self.timeout_ms = settings.action_timeout_ms if timeout_ms is None else timeout_ms

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def build_url(self, path: str = "/") -> str:
        if path.startswith(("http://", "https://")):
            return path
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.base_url}{path}"

    async def navigate(self, path: str = "/") -> None:
        """Go to *path* under the base URL."""
        url = self.build_url(path)
        logger.info("Navigating to %s", url)
        await self.page.goto(url, wait_until="domcontentloaded")

    async def reload(self) -> None:
        await self.page.reload(wait_until="domcontentloaded")

    async def go_back(self) -> None:
        await self.page.go_back(wait_until="domcontentloaded")

    @property
    def url(self) -> str:
        return self.page.url

    async def title(self) -> str:
        return await self.page.title()

    # ------------------------------------------------------------------
    # Self-healing locator
    # ------------------------------------------------------------------

    async def resolve(
        self,
        candidates: Sequence[str],
        *,
        timeout: float | None = None,
    ) -> LocatorMatch:
        """Try *candidates* in order; return the first whose element becomes visible.

        Never raises for a missing element: a miss is ``LocatorMatch(found=False)``.
        """
        wait_ms = self.timeout_ms if timeout is None else timeout
        tried: list[str] = []

        for selector in candidates:
            tried.append(selector)
            locator = self.page.locator(selector)
            try:
                await locator.first.wait_for(state="visible", timeout=wait_ms)
            except (PlaywrightTimeoutError, TimeoutError):
                logger.debug("Selector '%s' not visible, trying next fallback", selector)
                continue
            return LocatorMatch(found=True, selector=selector, locator=locator, tried=tuple(tried))

        return LocatorMatch(found=False, tried=tuple(tried))

    async def find(
        self,
        primary: str,
        fallbacks: Sequence[str] = (),
        *,
        timeout: float | None = None,
    ) -> Locator:
        """Locate an element with self-healing fallback chain.

        Parameters
        ----------
        primary:
            The preferred Playwright selector (CSS, text=, role=, data-testid, etc.).
        fallbacks:
            Ordered sequence of alternative selectors to try when *primary*
            is not visible within *timeout* ms.
        timeout:
            Milliseconds to wait for each selector before trying the next.

        Raises
        ------
        LocatorNotFoundError
            When none of the selectors resolve to a visible element.
        """
        match = await self.resolve([primary, *fallbacks], timeout=timeout)
        if not match.found:
            raise LocatorNotFoundError(match.tried)
        if match.selector != primary:
            logger.warning(
                "Self-healed: primary '%s' failed, used fallback '%s'",
                primary,
                match.selector,
            )
        return match.locator

    async def is_present(self, primary: str, fallbacks: Sequence[str] = (), *, timeout: float = 1_000) -> bool:
        """Non-raising visibility check across a fallback chain."""
        match = await self.resolve([primary, *fallbacks], timeout=timeout)
        return match.found

    def _locator(self, target: Target) -> Locator:
        if isinstance(target, str):
            return self.page.locator(target).first
        return target

    # ------------------------------------------------------------------
    # Interactions
    # ------------------------------------------------------------------

    async def click(self, target: Target, **kwargs) -> None:
        await self._locator(target).click(**kwargs)

    async def double_click(self, target: Target) -> None:
        await self._locator(target).dblclick()

    async def right_click(self, target: Target) -> None:
        await self._locator(target).click(button="right")

    async def fill(self, target: Target, value: str) -> None:
        """Fill a form input, replacing its current value."""
        await self._locator(target).fill(value)

    async def type_text(self, target: Target, text: str, delay_ms: float = 100) -> None:
        """Type key by key, for inputs that react to individual keystrokes."""
        await self._locator(target).press_sequentially(text, delay=delay_ms)

    async def clear(self, target: Target) -> None:
        await self._locator(target).clear()

    async def select_by_value(self, target: Target, value: str) -> None:
        await self._locator(target).select_option(value=value)

    async def select_by_label(self, target: Target, label: str) -> None:
        await self._locator(target).select_option(label=label)

    async def check(self, target: Target) -> None:
        await self._locator(target).check()

    async def uncheck(self, target: Target) -> None:
        await self._locator(target).uncheck()

    async def set_checked(self, target: Target, checked: bool) -> None:
        await self._locator(target).set_checked(checked)

    async def hover(self, target: Target) -> None:
        await self._locator(target).hover()

    async def focus(self, target: Target) -> None:
        await self._locator(target).focus()

    async def press_key(self, key: str, target: Target | None = None) -> None:
        """Press *key* on *target*, or on whatever has focus."""
        if target is None:
            await self.page.keyboard.press(key)
        else:
            await self._locator(target).press(key)

    async def scroll_to(self, target: Target) -> None:
        await self._locator(target).scroll_into_view_if_needed()

    async def scroll_to_top(self) -> None:
        await self.page.evaluate("() => window.scrollTo(0, 0)")

    async def scroll_to_bottom(self) -> None:
        await self.page.evaluate("() => window.scrollTo(0, document.body.scrollHeight)")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_text(self, target: Target) -> str:
        """Return the trimmed text content of the element."""
        return ((await self._locator(target).text_content()) or "").strip()

    async def get_attribute(self, target: Target, name: str) -> str:
        return (await self._locator(target).get_attribute(name)) or ""

    async def get_value(self, target: Target) -> str:
        return await self._locator(target).input_value()

    async def is_visible(self, target: Target) -> bool:
        return await self._locator(target).is_visible()

    async def is_hidden(self, target: Target) -> bool:
        return await self._locator(target).is_hidden()

    async def is_enabled(self, target: Target) -> bool:
        return await self._locator(target).is_enabled()

    async def is_checked(self, target: Target) -> bool:
        return await self._locator(target).is_checked()

    async def get_count(self, target: Target) -> int:
        locator = self.page.locator(target) if isinstance(target, str) else target
        return await locator.count()

    async def all_texts(self, target: Target) -> list[str]:
        locator = self.page.locator(target) if isinstance(target, str) else target
        return [text.strip() for text in await locator.all_text_contents()]

    # ------------------------------------------------------------------
    # Waits
    # ------------------------------------------------------------------

    async def wait_for_visible(self, target: Target, *, timeout: float | None = None) -> None:
        await self._locator(target).wait_for(state="visible", timeout=timeout or self.timeout_ms)

    async def wait_for_hidden(self, target: Target, *, timeout: float | None = None) -> None:
        await self._locator(target).wait_for(state="hidden", timeout=timeout or self.timeout_ms)

    async def wait_for_load(self, state: str = "networkidle") -> None:
        """Wait until the page reaches the given load state."""
        await self.page.wait_for_load_state(state)

    async def wait_for_url(self, pattern: TextOrPattern, *, timeout: float | None = None) -> None:
        await self.page.wait_for_url(pattern, timeout=timeout or get_settings().default_timeout_ms)

    # ------------------------------------------------------------------
    # Assertions
    # ------------------------------------------------------------------

    async def expect_visible(self, target: Target, *, timeout: float | None = None) -> None:
        await expect(self._locator(target)).to_be_visible(timeout=timeout or self.timeout_ms)

    async def expect_hidden(self, target: Target, *, timeout: float | None = None) -> None:
        await expect(self._locator(target)).to_be_hidden(timeout=timeout or self.timeout_ms)

    async def expect_text(self, target: Target, text: TextOrPattern, *, timeout: float | None = None) -> None:
        """Assert that an element contains the given text."""
        await expect(self._locator(target)).to_contain_text(text, timeout=timeout or self.timeout_ms)

    async def expect_exact_text(self, target: Target, text: TextOrPattern, *, timeout: float | None = None) -> None:
        await expect(self._locator(target)).to_have_text(text, timeout=timeout or self.timeout_ms)

    async def expect_value(self, target: Target, value: TextOrPattern, *, timeout: float | None = None) -> None:
        await expect(self._locator(target)).to_have_value(value, timeout=timeout or self.timeout_ms)

    async def expect_enabled(self, target: Target, *, timeout: float | None = None) -> None:
        await expect(self._locator(target)).to_be_enabled(timeout=timeout or self.timeout_ms)

    async def expect_disabled(self, target: Target, *, timeout: float | None = None) -> None:
        await expect(self._locator(target)).to_be_disabled(timeout=timeout or self.timeout_ms)

    async def expect_url(self, pattern: TextOrPattern, *, timeout: float | None = None) -> None:
        await expect(self.page).to_have_url(pattern, timeout=timeout or self.timeout_ms)

    async def expect_title(self, title: TextOrPattern, *, timeout: float | None = None) -> None:
        await expect(self.page).to_have_title(title, timeout=timeout or self.timeout_ms)

    # ------------------------------------------------------------------
    # Dialogs, tabs, capture
    # ------------------------------------------------------------------

    def accept_next_dialog(self) -> None:
        """Accept the next alert/confirm/prompt the page raises."""
        self.page.once("dialog", lambda dialog: dialog.accept())

    def dismiss_next_dialog(self) -> None:
        self.page.once("dialog", lambda dialog: dialog.dismiss())

    def open_pages(self) -> list[Page]:
        return list(self.page.context.pages)

    async def switch_to_tab(self, index: int) -> Page:
        """Bring tab *index* of this page's context to the front and return it."""
        target = self.page.context.pages[index]
        await target.bring_to_front()
        return target

    async def screenshot(self, path: str = "screenshot.png", *, full_page: bool = True) -> bytes:
        """Capture a screenshot of the page."""
        return await self.page.screenshot(path=path, full_page=full_page)
