"""Controlled browser session port interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class BrowserSessionPort(ABC):
    """
    Interface for a single controlled browser page.

    The login flow of the card portal only works in a real browser (the
    push second factor is bound to the page's session), so the
    authenticator drives it through this narrow surface. One instance is
    owned by exactly one sync run and must be closed by it.
    """

    @abstractmethod
    async def goto(self, url: str, timeout_seconds: float) -> None:
        """
        Navigate to a URL and wait until the network is idle.

        Raises
        ------
        PortalNavigationError
            If the page does not load within the timeout
        """

    @abstractmethod
    async def click(self, selector: str, timeout_seconds: float = 2.0) -> bool:
        """
        Click the first element matching a CSS selector.

        Returns
        -------
        True if an element was clicked, False if none matched in time
        """

    @abstractmethod
    async def wait_for_selector(self, selector: str, timeout_seconds: float) -> bool:
        """Wait for an element to appear. Returns False on timeout."""

    @abstractmethod
    async def evaluate(self, script: str, arg: Any = None) -> Any:
        """
        Run a JavaScript function in the page and return its JSON result.

        Raises
        ------
        BrowserInteractionError
            If the page fails while running the script
        """

    @abstractmethod
    async def wait_for_navigation(self, timeout_seconds: float) -> bool:
        """Wait for the next navigation. Returns False on timeout."""

    @abstractmethod
    async def current_url(self) -> str:
        """Return the URL currently shown in the page."""

    @abstractmethod
    async def cookies(self) -> dict[str, str]:
        """Return the page's cookie jar as a name->value mapping."""

    @abstractmethod
    async def close(self) -> None:
        """Release the browser. Must be safe to call more than once."""
