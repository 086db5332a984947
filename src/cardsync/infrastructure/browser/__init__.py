"""Controlled browser adapters."""

from cardsync.infrastructure.browser.playwright_session import PlaywrightBrowserSession

__all__ = ["PlaywrightBrowserSession"]
