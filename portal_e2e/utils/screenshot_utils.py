"""Screenshot capture and management for debugging and visual checks."""

from __future__ import annotations

import hashlib
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Sequence

from playwright.async_api import Locator, Page

from .config import get_logger, get_settings

logger = get_logger("screenshot")


@dataclass(frozen=True)
class Viewport:
    width: int
    height: int
    name: str


BREAKPOINTS = {
    "MOBILE_SMALL": Viewport(320, 568, "mobile-small"),
    "MOBILE": Viewport(375, 667, "mobile"),
    "MOBILE_LARGE": Viewport(414, 896, "mobile-large"),
    "TABLET": Viewport(768, 1024, "tablet"),
    "TABLET_LARGE": Viewport(1024, 1366, "tablet-large"),
    "DESKTOP": Viewport(1280, 800, "desktop"),
    "DESKTOP_LARGE": Viewport(1920, 1080, "desktop-large"),
    "DESKTOP_XL": Viewport(2560, 1440, "desktop-xl"),
}

DEFAULT_RESPONSIVE = (BREAKPOINTS["DESKTOP_LARGE"], BREAKPOINTS["TABLET"], BREAKPOINTS["MOBILE"])


def screenshot_path(name: str, directory: str | Path | None = None) -> Path:
    """Return a timestamped ``.png`` path inside *directory*, creating it if needed."""
    target = Path(directory or get_settings().screenshot_dir)
    target.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S-%f")
    return target / f"{name}_{timestamp}.png"


# ----------------------------------------------------------------------
# Page and element captures
# ----------------------------------------------------------------------


async def capture_full_page(page: Page, name: str, directory: str | Path | None = None) -> Path:
    path = screenshot_path(name, directory)
    await page.screenshot(path=str(path), full_page=True, type="png")
    logger.info("Full page screenshot saved: %s", path)
    return path


async def capture_viewport(page: Page, name: str, directory: str | Path | None = None) -> Path:
    path = screenshot_path(name, directory)
    await page.screenshot(path=str(path), full_page=False, type="png")
    logger.info("Viewport screenshot saved: %s", path)
    return path


async def capture_element(locator: Locator, name: str, directory: str | Path | None = None) -> Path:
    path = screenshot_path(name, directory)
    await locator.screenshot(path=str(path), type="png")
    logger.info("Element screenshot saved: %s", path)
    return path


async def capture_multiple_elements(locators: Sequence[Locator], base_name: str) -> list[Path]:
    return [await capture_element(locator, f"{base_name}_{index}") for index, locator in enumerate(locators, 1)]


async def capture_on_failure(page: Page, test_name: str) -> Path:
    safe_name = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in test_name)
    logger.info("Capturing failure screenshot for: %s", test_name)
    return await capture_full_page(page, f"FAILURE_{safe_name}", get_settings().failure_dir)


async def capture_debug(page: Page, label: str) -> Path:
    return await capture_full_page(page, f"DEBUG_{label}")


async def capture_responsive(
    page: Page,
    name: str,
    viewports: Sequence[Viewport] = DEFAULT_RESPONSIVE,
) -> list[Path]:
    """Capture *name* once per viewport, resizing the page in between."""
    paths = []
    for viewport in viewports:
        await page.set_viewport_size({"width": viewport.width, "height": viewport.height})
        # layout settles asynchronously after a resize
        await page.wait_for_timeout(500)
        paths.append(await capture_full_page(page, f"{name}_{viewport.name}"))
    return paths


# ----------------------------------------------------------------------
# Visual comparison
# ----------------------------------------------------------------------


def _digest(path: Path) -> str:
    return hashlib.sha256(path.read_bytes()).hexdigest()


def compare_screenshots(first: str | Path, second: str | Path) -> bool:
    """Byte-level equality of two screenshot files."""
    return _digest(Path(first)) == _digest(Path(second))


async def wait_for_animations(page: Page) -> None:
    await page.evaluate("() => Promise.all(document.getAnimations().map((a) => a.finished))")


async def match_baseline(page: Page, name: str, baseline_dir: str | Path | None = None) -> bool:
    """Compare the current page against ``<baseline_dir>/<name>.png``.

    The first run writes the baseline and reports a match.  Later runs
    capture into the same directory as ``<name>.actual.png`` for inspection.
    """
    directory = Path(baseline_dir or get_settings().visual_dir)
    directory.mkdir(parents=True, exist_ok=True)
    baseline = directory / f"{name}.png"

    await page.wait_for_load_state("networkidle")
    await wait_for_animations(page)

    if not baseline.exists():
        await page.screenshot(path=str(baseline), full_page=True, type="png")
        logger.info("Baseline created: %s", baseline)
        return True

    actual = directory / f"{name}.actual.png"
    await page.screenshot(path=str(actual), full_page=True, type="png")
    matched = compare_screenshots(baseline, actual)
    if not matched:
        logger.warning("Visual mismatch for %s: %s differs from %s", name, actual, baseline)
    return matched


async def hide_dynamic_content(page: Page, selectors: Sequence[str]) -> None:
    for selector in selectors:
        await page.evaluate(
            "(sel) => document.querySelectorAll(sel).forEach((el) => { el.style.visibility = 'hidden'; })",
            selector,
        )


async def mask_sensitive_info(page: Page, selectors: Sequence[str]) -> None:
    for selector in selectors:
        await page.evaluate(
            "(sel) => document.querySelectorAll(sel).forEach((el) => { el.textContent = '***MASKED***'; })",
            selector,
        )


# ----------------------------------------------------------------------
# Housekeeping
# ----------------------------------------------------------------------


def list_screenshots(directory: str | Path | None = None) -> list[Path]:
    target = Path(directory or get_settings().screenshot_dir)
    if not target.exists():
        return []
    return sorted(target.glob("*.png"))


def cleanup_old_screenshots(directory: str | Path | None = None, days_old: int = 7) -> list[Path]:
    """Delete screenshots older than *days_old* days; return what was removed."""
    cutoff = time.time() - days_old * 24 * 60 * 60
    removed = []
    for path in list_screenshots(directory):
        if path.stat().st_mtime < cutoff:
            path.unlink()
            logger.info("Deleted old screenshot: %s", path)
            removed.append(path)
    return removed


def delete_all_screenshots(directory: str | Path | None = None) -> int:
    paths = list_screenshots(directory)
    for path in paths:
        path.unlink()
    logger.info("Deleted %d screenshots from: %s", len(paths), directory or get_settings().screenshot_dir)
    return len(paths)
