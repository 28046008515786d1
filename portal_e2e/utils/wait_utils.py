"""Custom wait conditions beyond Playwright's built-in auto-waiting.

The core primitive is :func:`poll_until`: evaluate a probe, test the observed
value, sleep, repeat until satisfied or the deadline passes.  Every sleep is
an ``asyncio.sleep`` so a waiting test yields the event loop instead of
blocking it.

Polling waiters re-read the page on every iteration and report the last
observed value when they time out::

    await wait_for_text_to_change(status_label, "Loading...")
    await wait_for_minimum_element_count(rows, 2, timeout_ms=5_000)

The console-message waiter is event-driven rather than polled: it races a
``console`` listener against a deadline and always unregisters the listener.
"""

from __future__ import annotations

import asyncio
import inspect
import re
from typing import Any, Awaitable, Callable, Sequence, TypeVar, Union

from playwright.async_api import ConsoleMessage, Download, Locator, Page, Response, expect
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..exceptions import WaitTimeoutError
from .config import get_logger, get_settings

logger = get_logger("wait")

T = TypeVar("T")

Condition = Callable[[], Union[bool, Awaitable[bool]]]
Probe = Callable[[], Union[T, Awaitable[T]]]
TextMatcher = Union[str, re.Pattern[str]]

LOADER_SELECTOR = '.loading, .spinner, .loader, [data-loading="true"]'
SPINNER_SELECTOR = '.loading, .spinner, [data-testid="loading"]'


def _resolve_timing(timeout_ms: float | None, poll_interval_ms: float | None) -> tuple[float, float]:
    settings = get_settings()
    timeout = settings.default_timeout_ms if timeout_ms is None else timeout_ms
    if poll_interval_ms is None:
        interval = min(settings.poll_interval_ms, timeout)
    else:
        interval = poll_interval_ms

    if timeout <= 0:
        raise ValueError(f"timeout_ms must be positive, got {timeout}")
    if interval <= 0:
        raise ValueError(f"poll_interval_ms must be positive, got {interval}")
    if interval > timeout:
        raise ValueError(f"poll_interval_ms ({interval}) must not exceed timeout_ms ({timeout})")
    return timeout, interval


def _timeout(timeout_ms: float | None) -> float:
    return get_settings().default_timeout_ms if timeout_ms is None else timeout_ms


def _matches(text: str | None, expected: TextMatcher) -> bool:
    if text is None:
        return False
    if isinstance(expected, str):
        return expected in text
    return expected.search(text) is not None


async def _call(func: Callable[[], Any]) -> Any:
    result = func()
    if inspect.isawaitable(result):
        result = await result
    return result


# ----------------------------------------------------------------------
# Condition poller
# ----------------------------------------------------------------------


async def poll_until(
    probe: Probe[T],
    predicate: Callable[[T], bool] = bool,
    *,
    timeout_ms: float | None = None,
    poll_interval_ms: float | None = None,
    message: str = "Condition not met",
    ignore: Sequence[type[BaseException]] = (),
) -> T:
    """Poll *probe* until *predicate* accepts the observed value.

    Returns the first accepted value.  Exceptions from *probe* propagate
    immediately unless their type is listed in *ignore*, in which case the
    poll counts as "not yet" and the previous observation is kept.

    Raises
    ------
    WaitTimeoutError
        When the deadline passes with the predicate still unsatisfied.
    """
    timeout, interval = _resolve_timing(timeout_ms, poll_interval_ms)
    ignored = tuple(ignore)
    loop = asyncio.get_running_loop()
    started = loop.time()
    deadline = started + timeout / 1000
    last_observed: Any = None

    while True:
        try:
            observed = await _call(probe)
        except ignored as exc:
            logger.debug("Ignored %s while polling: %s", type(exc).__name__, exc)
        else:
            last_observed = observed
            if predicate(observed):
                return observed

        remaining = deadline - loop.time()
        if remaining <= 0:
            elapsed_ms = (loop.time() - started) * 1000
            raise WaitTimeoutError(
                message,
                timeout_ms=timeout,
                elapsed_ms=elapsed_ms,
                last_observed=last_observed,
            )
        await asyncio.sleep(min(interval / 1000, remaining))


async def wait_until(
    condition: Condition,
    timeout_ms: float | None = None,
    poll_interval_ms: float | None = None,
    message: str = "Condition not met",
) -> None:
    """Wait for a custom boolean condition to become true."""
    await poll_until(
        condition,
        bool,
        timeout_ms=timeout_ms,
        poll_interval_ms=poll_interval_ms,
        message=message,
    )


# ----------------------------------------------------------------------
# Text content waits
# ----------------------------------------------------------------------


async def wait_for_text_to_change(
    locator: Locator,
    baseline: str | None,
    timeout_ms: float | None = None,
    poll_interval_ms: float | None = None,
) -> str | None:
    """Wait until the element's text differs from *baseline*; return the new text."""
    _, interval = _resolve_timing(timeout_ms, poll_interval_ms)
    return await poll_until(
        lambda: locator.text_content(timeout=interval),
        lambda text: text != baseline,
        timeout_ms=timeout_ms,
        poll_interval_ms=poll_interval_ms,
        message=f"Text did not change from {baseline!r}",
        ignore=(PlaywrightTimeoutError,),
    )


async def wait_for_text_to_appear(
    locator: Locator,
    timeout_ms: float | None = None,
    poll_interval_ms: float | None = None,
) -> str:
    """Wait until the element's stripped text is non-empty."""
    _, interval = _resolve_timing(timeout_ms, poll_interval_ms)
    text = await poll_until(
        lambda: locator.text_content(timeout=interval),
        lambda value: bool(value and value.strip()),
        timeout_ms=timeout_ms,
        poll_interval_ms=poll_interval_ms,
        message="Text did not appear",
        ignore=(PlaywrightTimeoutError,),
    )
    return text.strip()


async def wait_for_text_to_contain(
    locator: Locator,
    text: TextMatcher,
    timeout_ms: float | None = None,
) -> None:
    """Wait until the element's text contains (or matches) *text*."""
    await expect(locator).to_contain_text(text, timeout=_timeout(timeout_ms))


# ----------------------------------------------------------------------
# Count waits
# ----------------------------------------------------------------------


async def wait_for_element_count(
    locator: Locator,
    expected: int,
    timeout_ms: float | None = None,
    poll_interval_ms: float | None = None,
) -> int:
    """Wait until exactly *expected* elements match; the count is re-read every poll."""
    return await poll_until(
        locator.count,
        lambda count: count == expected,
        timeout_ms=timeout_ms,
        poll_interval_ms=poll_interval_ms,
        message=f"Expected {expected} elements",
    )


async def wait_for_minimum_element_count(
    locator: Locator,
    minimum: int,
    timeout_ms: float | None = None,
    poll_interval_ms: float | None = None,
) -> int:
    """Wait until at least *minimum* elements match."""
    return await poll_until(
        locator.count,
        lambda count: count >= minimum,
        timeout_ms=timeout_ms,
        poll_interval_ms=poll_interval_ms,
        message=f"Expected at least {minimum} elements",
    )


# ----------------------------------------------------------------------
# Attribute waits
# ----------------------------------------------------------------------


async def wait_for_attribute_value(
    locator: Locator,
    attribute: str,
    expected: TextMatcher,
    timeout_ms: float | None = None,
    poll_interval_ms: float | None = None,
) -> str | None:
    """Wait until *attribute* equals *expected* (or matches it, for a pattern)."""
    _, interval = _resolve_timing(timeout_ms, poll_interval_ms)

    def accepts(value: str | None) -> bool:
        if value is None:
            return False
        if isinstance(expected, str):
            return value == expected
        return expected.search(value) is not None

    return await poll_until(
        lambda: locator.get_attribute(attribute, timeout=interval),
        accepts,
        timeout_ms=timeout_ms,
        poll_interval_ms=poll_interval_ms,
        message=f"Attribute {attribute!r} never matched {expected!r}",
        ignore=(PlaywrightTimeoutError,),
    )


async def wait_for_class(
    locator: Locator,
    class_name: TextMatcher,
    timeout_ms: float | None = None,
    poll_interval_ms: float | None = None,
) -> str | None:
    """Wait until the element carries the class token (or a class matching the pattern)."""
    _, interval = _resolve_timing(timeout_ms, poll_interval_ms)

    def accepts(value: str | None) -> bool:
        if not value:
            return False
        if isinstance(class_name, str):
            return class_name in value.split()
        return class_name.search(value) is not None

    return await poll_until(
        lambda: locator.get_attribute("class", timeout=interval),
        accepts,
        timeout_ms=timeout_ms,
        poll_interval_ms=poll_interval_ms,
        message=f"Class {class_name!r} never appeared",
        ignore=(PlaywrightTimeoutError,),
    )


# ----------------------------------------------------------------------
# Console messages (event-driven)
# ----------------------------------------------------------------------


async def wait_for_console_message(
    page: Page,
    expected: TextMatcher,
    timeout_ms: float | None = None,
) -> ConsoleMessage:
    """Resolve on the first console message containing (or matching) *expected*.

    The listener is removed on match, timeout and cancellation alike.
    """
    timeout = get_settings().default_timeout_ms if timeout_ms is None else timeout_ms
    if timeout <= 0:
        raise ValueError(f"timeout_ms must be positive, got {timeout}")

    loop = asyncio.get_running_loop()
    found: asyncio.Future[ConsoleMessage] = loop.create_future()
    last_seen: list[str] = []

    def handler(message: ConsoleMessage) -> None:
        if found.done():
            return
        text = message.text
        last_seen[:] = [text]
        if _matches(text, expected):
            found.set_result(message)

    started = loop.time()
    page.on("console", handler)
    try:
        return await asyncio.wait_for(found, timeout / 1000)
    except asyncio.TimeoutError:
        raise WaitTimeoutError(
            f"Console message {expected!r} not found",
            timeout_ms=timeout,
            elapsed_ms=(loop.time() - started) * 1000,
            last_observed=last_seen[0] if last_seen else None,
        ) from None
    finally:
        page.remove_listener("console", handler)


# ----------------------------------------------------------------------
# Delegating waits over Playwright expectations
# ----------------------------------------------------------------------


async def wait_for_element_to_disappear(locator: Locator, timeout_ms: float | None = None) -> None:
    """Wait until the element is hidden or detached."""
    await expect(locator).to_be_hidden(timeout=_timeout(timeout_ms))


async def wait_for_element_to_be_clickable(locator: Locator, timeout_ms: float | None = None) -> None:
    """Wait until the element is both visible and enabled."""
    timeout = _timeout(timeout_ms)
    await expect(locator).to_be_visible(timeout=timeout)
    await expect(locator).to_be_enabled(timeout=timeout)


async def wait_for_url(page: Page, pattern: str | re.Pattern[str], timeout_ms: float | None = None) -> None:
    """Wait for navigation to a URL matching *pattern* (glob or regex)."""
    await page.wait_for_url(pattern, timeout=_timeout(timeout_ms))


async def wait_for_page_load(page: Page, timeout_ms: float | None = None) -> None:
    """Wait for DOMContentLoaded, then for the network to go idle."""
    timeout = _timeout(timeout_ms)
    await page.wait_for_load_state("domcontentloaded", timeout=timeout)
    await page.wait_for_load_state("networkidle", timeout=timeout)


async def wait_for_network_idle(page: Page, timeout_ms: float | None = None) -> None:
    """Wait until there are no network connections for at least 500 ms."""
    await page.wait_for_load_state("networkidle", timeout=_timeout(timeout_ms))


async def wait_for_spinner_to_disappear(
    page: Page,
    spinner_selector: str = SPINNER_SELECTOR,
    timeout_ms: float | None = None,
) -> None:
    """Wait for a loading spinner to hide; a spinner that never clears is only logged."""
    spinner = page.locator(spinner_selector).first
    try:
        await spinner.wait_for(state="hidden", timeout=_timeout(timeout_ms))
    except PlaywrightTimeoutError:
        logger.warning("Spinner '%s' still visible after %sms", spinner_selector, _timeout(timeout_ms))


async def wait_for_all_loaders_to_disappear(page: Page, timeout_ms: float | None = None) -> None:
    """Wait until no element matches the loader selector."""
    await expect(page.locator(LOADER_SELECTOR)).to_have_count(0, timeout=_timeout(timeout_ms))


async def wait_for_api_call(
    page: Page,
    url_pattern: TextMatcher,
    timeout_ms: float | None = None,
) -> Response:
    """Wait for a response whose URL contains (or matches) *url_pattern*."""
    return await page.wait_for_event(
        "response",
        predicate=lambda response: _matches(response.url, url_pattern),
        timeout=_timeout(timeout_ms),
    )


async def wait_for_multiple_api_calls(
    page: Page,
    url_patterns: Sequence[TextMatcher],
    timeout_ms: float | None = None,
) -> list[Response]:
    """Wait concurrently for one response per pattern, in pattern order."""
    return list(
        await asyncio.gather(*(wait_for_api_call(page, pattern, timeout_ms) for pattern in url_patterns))
    )


async def wait_for_download(page: Page, timeout_ms: float | None = None) -> Download:
    """Wait for the next download started by the page."""
    return await page.wait_for_event("download", timeout=_timeout(timeout_ms))


async def sleep_ms(ms: float) -> None:
    """Fixed pause; prefer a condition-based wait where one exists."""
    await asyncio.sleep(ms / 1000)
