"""Playwright-backed controlled browser session."""

from __future__ import annotations

import logging
from typing import Any, Optional

from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeout

from cardsync.domain.banking.exceptions import (
    BrowserInteractionError,
    PortalNavigationError,
)
from cardsync.domain.banking.ports import BrowserSessionPort

logger = logging.getLogger(__name__)

# Required when Chromium runs as root inside a container
CHROMIUM_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
)


def _ms(seconds: float) -> float:
    return seconds * 1000


class PlaywrightBrowserSession(BrowserSessionPort):
    """One Chromium instance with a single page, used for one sync run."""

    def __init__(self, playwright: Playwright, browser: Browser, page: Page):
        self._playwright = playwright
        self._browser = browser
        self._page = page
        self._closed = False

    @classmethod
    async def launch(
        cls,
        executable_path: Optional[str] = None,
        headless: bool = True,
    ) -> PlaywrightBrowserSession:
        """Start Chromium and open a blank page."""
        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.launch(
                executable_path=executable_path,
                headless=headless,
                args=list(CHROMIUM_ARGS),
            )
            context = await browser.new_context()
            page = await context.new_page()
        except BaseException:
            await playwright.stop()
            raise
        logger.info(
            "Browser launched (%s, headless=%s)",
            executable_path or "bundled chromium",
            headless,
        )
        return cls(playwright, browser, page)

    async def goto(self, url: str, timeout_seconds: float) -> None:
        try:
            await self._page.goto(
                url,
                wait_until="networkidle",
                timeout=_ms(timeout_seconds),
            )
        except PlaywrightError as e:
            raise PortalNavigationError(url, reason=str(e).splitlines()[0]) from e

    async def click(self, selector: str, timeout_seconds: float = 2.0) -> bool:
        try:
            await self._page.click(selector, timeout=_ms(timeout_seconds))
        except PlaywrightTimeout:
            return False
        except PlaywrightError as e:
            raise self._interaction_error("click", e) from e
        return True

    async def wait_for_selector(self, selector: str, timeout_seconds: float) -> bool:
        try:
            await self._page.wait_for_selector(selector, timeout=_ms(timeout_seconds))
        except PlaywrightTimeout:
            return False
        except PlaywrightError as e:
            raise self._interaction_error("wait_for_selector", e) from e
        return True

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        try:
            return await self._page.evaluate(script, arg)
        except PlaywrightError as e:
            raise self._interaction_error("evaluate", e) from e

    async def wait_for_navigation(self, timeout_seconds: float) -> bool:
        try:
            await self._page.wait_for_event(
                "framenavigated",
                timeout=_ms(timeout_seconds),
            )
        except PlaywrightTimeout:
            return False
        except PlaywrightError as e:
            raise self._interaction_error("wait_for_navigation", e) from e
        return True

    async def current_url(self) -> str:
        return self._page.url

    async def cookies(self) -> dict[str, str]:
        try:
            jar = await self._page.context.cookies()
        except PlaywrightError as e:
            raise self._interaction_error("cookies", e) from e
        return {cookie["name"]: cookie["value"] for cookie in jar}

    def _interaction_error(
        self,
        action: str,
        error: PlaywrightError,
    ) -> BrowserInteractionError:
        reason = str(error).splitlines()[0] if str(error) else None
        logger.debug("Playwright %s failed on %s: %s", action, self._page.url, error)
        return BrowserInteractionError(action, self._page.url, reason=reason)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._browser.close()
        finally:
            await self._playwright.stop()
