"""
Direct Playwright client for the tuPoint suites.

Launches one browser in-process and hands out contexts preconfigured from
``settings`` (base URL, viewport, timeouts). Each scenario gets its own
context, so cookies and storage never leak between scenarios.

Usage:
    async with PlaywrightClient() as client:
        context = await client.new_context()
        page = await context.new_page()
        await page.goto("/")
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    async_playwright,
)

from tupoint_e2e.config import UiTestConfig, settings

logger = logging.getLogger(__name__)


class BrowserNotInstalled(RuntimeError):
    """The configured engine has no downloaded browser binary."""


class PlaywrightClient:
    """In-process Playwright browser with settings-driven contexts."""

    def __init__(
        self,
        browser_type: Optional[str] = None,
        headless: Optional[bool] = None,
        launch_args: Optional[List[str]] = None,
        config: Optional[UiTestConfig] = None,
    ):
        self.config = config or settings
        self.browser_type = browser_type or self.config.browser_type
        self.headless = self.config.playwright_headless if headless is None else headless
        self.launch_args = self.config.launch_args if launch_args is None else launch_args

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def __aenter__(self) -> "PlaywrightClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def connect(self) -> None:
        """Launch the configured browser engine."""
        self._playwright = await async_playwright().start()
        try:
            engine = getattr(self._playwright, self.browser_type)
            self._browser = await engine.launch(
                headless=self.headless,
                args=self.launch_args,
            )
        except BaseException as exc:
            await self._playwright.stop()
            self._playwright = None
            if isinstance(exc, PlaywrightError) and "Executable doesn't exist" in str(exc):
                raise BrowserNotInstalled(
                    f"{self.browser_type} is not installed - run: playwright install {self.browser_type}"
                ) from exc
            raise
        logger.debug("Launched %s (headless=%s)", self.browser_type, self.headless)

    async def new_context(self, base_url: Optional[str] = None, **kwargs) -> BrowserContext:
        """
        Create an isolated browser context.

        Args:
            base_url: Overrides ``settings.base_url`` (the mock app uses this)
            **kwargs: Extra context options (record_video_dir, color_scheme, ...)
        """
        if not self._browser:
            raise RuntimeError("Client not connected. Use 'async with' or call connect()")

        options = self.config.context_options(base_url)
        options.update(kwargs)
        context = await self._browser.new_context(**options)
        context.set_default_timeout(self.config.action_timeout)
        context.set_default_navigation_timeout(self.config.navigation_timeout)
        return context

    async def close(self) -> None:
        """Close the browser and stop Playwright."""
        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None


@asynccontextmanager
async def playwright_session(base_url: Optional[str] = None) -> AsyncIterator[Page]:
    """
    Yield a page in a throwaway context.

    Used for one-off setup work outside a scenario, such as creating the
    sign-in suite's shared user.
    """
    async with PlaywrightClient() as client:
        context = await client.new_context(base_url)
        try:
            yield await context.new_page()
        finally:
            await context.close()
