"""Page-level setup utilities shared by every tuPoint suite.

All functions take a Playwright ``Page``. Waits that must succeed raise
``ToolError`` on timeout; ``is_on_screen`` is the one probe that converts a
timeout into ``False``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Pattern, Union

from playwright.async_api import Locator, Page, TimeoutError as PlaywrightTimeout

from tupoint_e2e.config import settings
from tupoint_e2e.fixtures import fit_username, unique_suffix
from tupoint_e2e.locators import APP_READY_SELECTOR, Timeouts

logger = logging.getLogger(__name__)

ScreenshotFolder = Literal["failures", "baseline", "diffs"]
ColorScheme = Literal["light", "dark"]
TextMatcher = Union[str, Pattern[str]]


@dataclass
class ToolError(Exception):
    """Raised when a browser operation does not complete within its budget."""

    name: str
    payload: Dict[str, Any]
    message: str

    def __str__(self) -> str:  # pragma: no cover - human readable helper
        return f"{self.name} failed ({self.message}) with payload={self.payload}"


# ---- readiness and navigation ------------------------------------------------

async def wait_for_app_ready(page: Page, timeout: int = Timeouts.APP_READY) -> None:
    """Block until the Flutter root element is attached, then let first paint settle."""
    try:
        await page.wait_for_selector(APP_READY_SELECTOR, timeout=timeout)
        await page.wait_for_function(
            "(sel) => document.querySelector(sel) !== null",
            arg=APP_READY_SELECTOR,
            timeout=timeout,
        )
    except PlaywrightTimeout as exc:
        raise ToolError(
            name="wait_for_app_ready",
            payload={"selector": APP_READY_SELECTOR, "timeout": timeout, "url": page.url},
            message=str(exc),
        ) from exc

    await page.wait_for_timeout(settings.settle_delay_ms)


async def navigate_to_app(page: Page, path: str = "/") -> None:
    """Standard entry point for every scenario."""
    await page.goto(path)
    await wait_for_app_ready(page)


async def clear_browser_storage(page: Page) -> None:
    """Drop cookies plus local and session storage.

    A page that has not navigated yet (about:blank) has no origin and so no
    storage to clear; only cookies are dropped then.
    """
    await page.context.clear_cookies()
    if not page.url.startswith(("http://", "https://")):
        return
    await page.evaluate("() => { localStorage.clear(); sessionStorage.clear(); }")


async def set_color_scheme(page: Page, scheme: ColorScheme) -> None:
    await page.emulate_media(color_scheme=scheme)
    await page.wait_for_timeout(500)


# ---- artifacts ---------------------------------------------------------------

async def take_screenshot(page: Page, name: str, folder: ScreenshotFolder = "failures") -> Path:
    """Save a full-page PNG under ``<screenshot_dir>/<folder>/<name>.png``."""
    path = settings.screenshot_dir / folder / f"{name}.png"
    path.parent.mkdir(parents=True, exist_ok=True)
    await page.screenshot(path=str(path), full_page=True)
    logger.info("Screenshot saved: %s", path)
    return path


# ---- transient UI states -----------------------------------------------------

async def _wait(locator: Locator, state: str, timeout: int, name: str, **payload) -> None:
    try:
        await locator.wait_for(state=state, timeout=timeout)
    except PlaywrightTimeout as exc:
        raise ToolError(name=name, payload={"state": state, "timeout": timeout, **payload}, message=str(exc)) from exc


async def wait_for_snackbar(page: Page, expected_text: Optional[str] = None) -> None:
    """Wait for the alert snackbar, optionally checking its message (partial match)."""
    await _wait(page.get_by_role("alert"), "visible", Timeouts.MEDIUM, "wait_for_snackbar")
    if expected_text:
        await _wait(
            page.get_by_text(expected_text, exact=False),
            "visible",
            Timeouts.SHORT,
            "wait_for_snackbar",
            expected_text=expected_text,
        )


async def wait_for_snackbar_to_disappear(page: Page) -> None:
    await _wait(page.get_by_role("alert"), "hidden", Timeouts.MEDIUM, "wait_for_snackbar_to_disappear")


async def wait_for_loading_to_complete(page: Page) -> None:
    """The progress indicator going away is the generic "loading finished" signal."""
    await _wait(page.get_by_role("progressbar"), "hidden", Timeouts.LONG, "wait_for_loading_to_complete")


async def is_on_screen(page: Page, screen_identifier: TextMatcher, timeout: int = Timeouts.SHORT) -> bool:
    """Whether text unique to one screen becomes visible within ``timeout``.

    ``screen_identifier`` is a substring or a compiled pattern, as for
    ``page.get_by_text``.

    ``False`` means "not observed within budget", not "proven absent". A slow
    render can produce a false negative; negative checks should also assert
    the expected alternative screen.
    """
    try:
        await page.get_by_text(screen_identifier).first.wait_for(state="visible", timeout=timeout)
    except PlaywrightTimeout:
        logger.debug("Screen marker %r not visible within %sms", screen_identifier, timeout)
        return False
    return True


async def element_in_lower_half(page: Page, locator: Locator) -> Optional[bool]:
    """Whether the element's top edge sits below the viewport midline.

    Returns None when the element has no bounding box: hidden, or gone
    before it could be measured.
    """
    try:
        box = await locator.bounding_box(timeout=Timeouts.SHORT)
    except PlaywrightTimeout:
        box = None
    viewport = page.viewport_size
    if box is None or viewport is None:
        return None
    return box["y"] > viewport["height"] / 2


# ---- unique identifiers ------------------------------------------------------

def generate_unique_email(prefix: str = "test") -> str:
    return f"{prefix}-{unique_suffix()}@test.tupoint.local"


def generate_unique_username(prefix: str = "testuser") -> str:
    """Username of ``prefix`` plus the unique suffix, at most 20 characters."""
    return fit_username(prefix, unique_suffix())


# ---- computed styles ---------------------------------------------------------

_ELEMENT_STYLES_JS = """
(element) => {
    const styles = window.getComputedStyle(element);
    return {
        backgroundColor: styles.backgroundColor,
        color: styles.color,
        borderColor: styles.borderColor,
        borderWidth: styles.borderWidth,
        boxShadow: styles.boxShadow,
    };
}
"""

_COMPUTED_STYLES_JS = f"""
(sel) => {{
    const element = document.querySelector(sel);
    if (!element) return {{}};
    return ({_ELEMENT_STYLES_JS.strip()})(element);
}}
"""

_HAS_GRADIENT_JS = """
(sel) => {
    const element = document.querySelector(sel);
    if (!element) return false;
    return window.getComputedStyle(element).backgroundImage.includes('gradient');
}
"""

_ANY_GRADIENT_JS = """
() => Array.from(document.querySelectorAll('*')).some((el) => {
    const bg = window.getComputedStyle(el).backgroundImage;
    return Boolean(bg) && bg.includes('gradient');
})
"""

_ANY_COLOR_JS = """
() => Array.from(document.querySelectorAll('*')).some((el) => {
    const style = window.getComputedStyle(el);
    return style.color !== 'rgba(0, 0, 0, 0)' || style.backgroundColor !== 'rgba(0, 0, 0, 0)';
})
"""


async def get_computed_styles(page: Page, selector: str) -> Dict[str, str]:
    """Resolved colours, border and shadow of the first match; empty if none."""
    return await page.evaluate(_COMPUTED_STYLES_JS, selector)


async def get_element_styles(locator: Locator) -> Dict[str, str]:
    """Same properties as ``get_computed_styles`` for an already located element."""
    return await locator.evaluate(_ELEMENT_STYLES_JS)


async def has_gradient_background(page: Page, selector: str) -> bool:
    return await page.evaluate(_HAS_GRADIENT_JS, selector)


async def any_element_has_gradient(page: Page) -> bool:
    return await page.evaluate(_ANY_GRADIENT_JS)


async def any_element_has_color(page: Page) -> bool:
    """Smoke check that any styling is applied at all."""
    return await page.evaluate(_ANY_COLOR_JS)
