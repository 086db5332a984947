"""Browser login to the card portal, including the push second factor."""

from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from typing import Awaitable, Callable, Optional

from cardsync.application.dtos.integration import ProgressEmitter, SyncStep
from cardsync.domain.banking.exceptions import (
    LoginFormNotFoundError,
    LoginSubmitError,
    SecondFactorTimeoutError,
    SessionCredentialMissingError,
)
from cardsync.domain.banking.ports import BrowserSessionPort
from cardsync.domain.banking.value_objects import SessionCredential
from cardsync.domain.shared.value_objects import SecureString

logger = logging.getLogger(__name__)

LOGIN_PATH = "/web/consumer/abnamro/sca-login?URL=abnamro%2Fdashboard"

COOKIE_CONSENT_SELECTORS = (
    '[data-cookiefirst-action="accept"]',
    'button[id*="accept"]',
    "#truste-consent-button",
)
TEXT_INPUT_SELECTOR = 'input[type="text"], input[type="email"], input:not([type])'

LOGIN_MARKER = "sca-login"
AUTHENTICATED_URL_MARKERS = ("dashboard", "account", "abnamro")

# Inspects the page structurally instead of relying on ids: the portal
# renames its form fields between releases.
FILL_LOGIN_FORM_SCRIPT = """
({ username, password }) => {
    const inputs = Array.from(document.querySelectorAll('input'));
    const visible = (el) => el.offsetParent !== null;
    const usernameInput = inputs.find((el) =>
        (el.type === 'text' || el.type === 'email' || !el.getAttribute('type'))
        && visible(el));
    const passwordInput = inputs.find((el) => el.type === 'password' && visible(el));
    const fill = (el, value) => {
        el.focus();
        el.value = value;
        el.dispatchEvent(new Event('input', { bubbles: true }));
        el.dispatchEvent(new Event('change', { bubbles: true }));
    };
    if (usernameInput) fill(usernameInput, username);
    if (passwordInput) fill(passwordInput, password);
    return { usernameFound: !!usernameInput, passwordFound: !!passwordInput };
}
"""

CLICK_SUBMIT_SCRIPT = """
() => {
    const buttons = Array.from(
        document.querySelectorAll('button, input[type="submit"]'));
    const submit = buttons.find((el) => {
        const text = (el.textContent || el.value || '').trim();
        return text.includes('Inloggen') || text.includes('Login')
            || el.type === 'submit';
    });
    if (!submit) return false;
    submit.click();
    return true;
}
"""


class AuthState(str, Enum):
    """States of the login flow. FAILED and AUTHENTICATED are terminal."""

    IDLE = "idle"
    PAGE_LOADING = "page_loading"
    FORM_FILLING = "form_filling"
    SUBMITTING = "submitting"
    AWAITING_SECOND_FACTOR = "awaiting_second_factor"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


def is_authenticated_url(url: str) -> bool:
    """True once the portal left the login page for a signed-in page."""
    if LOGIN_MARKER in url:
        return False
    return any(marker in url for marker in AUTHENTICATED_URL_MARKERS)


class SessionAuthenticator:
    """
    Drive the controlled browser through the portal login.

    The second factor is a push confirmation on the holder's phone; the
    authenticator only observes its effect (the page leaving the login
    URL). Sleep and clock are injectable so the bounded wait can be
    exercised without real time passing.
    """

    def __init__(  # noqa: PLR0913
        self,
        browser: BrowserSessionPort,
        base_url: str,
        page_load_timeout: float = 30.0,
        form_timeout: float = 10.0,
        navigation_timeout: float = 10.0,
        second_factor_timeout: float = 120.0,
        poll_interval: float = 0.5,
        settle_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self._browser = browser
        self._base_url = base_url.rstrip("/")
        self._page_load_timeout = page_load_timeout
        self._form_timeout = form_timeout
        self._navigation_timeout = navigation_timeout
        self._second_factor_timeout = second_factor_timeout
        self._poll_interval = poll_interval
        self._settle_delay = settle_delay
        self._sleep = sleep
        self._monotonic = monotonic
        self._state = AuthState.IDLE

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def login_url(self) -> str:
        return f"{self._base_url}{LOGIN_PATH}"

    async def authenticate(
        self,
        username: SecureString,
        password: SecureString,
        progress: Optional[ProgressEmitter] = None,
    ) -> SessionCredential:
        """
        Log in and wait for the second factor.

        Returns
        -------
        The session's cookie jar and anti-forgery token

        Raises
        ------
        PortalAuthenticationError
            If the page, the form or the submit control is unusable
        SecondFactorTimeoutError
            If the push confirmation is not approved in time
        """
        if self._state != AuthState.IDLE:
            msg = f"Authenticator already used (state: {self._state.value})"
            raise RuntimeError(msg)

        progress = progress or ProgressEmitter()
        try:
            await self._load_page(progress)
            await self._fill_form(username, password, progress)
            await self._submit(progress)
            await self._await_second_factor(progress)
            credential = await self._read_credential()
        except BaseException:
            self._state = AuthState.FAILED
            raise

        self._state = AuthState.AUTHENTICATED
        await progress.step(
            SyncStep.SECOND_FACTOR_VERIFIED,
            "2FA verified, logged in",
        )
        return credential

    async def _load_page(self, progress: ProgressEmitter) -> None:
        self._state = AuthState.PAGE_LOADING
        await progress.step(SyncStep.PAGE_LOAD, "Loading login page...")
        await self._browser.goto(self.login_url, self._page_load_timeout)
        await self._dismiss_cookie_banner()

    async def _dismiss_cookie_banner(self) -> None:
        for selector in COOKIE_CONSENT_SELECTORS:
            try:
                if await self._browser.click(selector):
                    logger.debug("Accepted cookie banner via %s", selector)
                    return
            except Exception as e:  # noqa: BLE001
                logger.debug("Cookie banner selector %s failed: %s", selector, e)

    async def _fill_form(
        self,
        username: SecureString,
        password: SecureString,
        progress: ProgressEmitter,
    ) -> None:
        self._state = AuthState.FORM_FILLING
        await progress.step(SyncStep.FILL_FORM, "Filling login form...")

        if not await self._browser.wait_for_selector(
            TEXT_INPUT_SELECTOR,
            self._form_timeout,
        ):
            msg = "Login form did not appear"
            raise LoginFormNotFoundError(msg)

        outcome = await self._browser.evaluate(
            FILL_LOGIN_FORM_SCRIPT,
            {"username": username.get_value(), "password": password.get_value()},
        ) or {}
        username_found = bool(outcome.get("usernameFound"))
        password_found = bool(outcome.get("passwordFound"))
        if not (username_found and password_found):
            raise LoginFormNotFoundError(
                username_found=username_found,
                password_found=password_found,
            )

    async def _submit(self, progress: ProgressEmitter) -> None:
        self._state = AuthState.SUBMITTING
        await progress.step(SyncStep.SUBMIT_FORM, "Submitting login...")

        if not await self._browser.evaluate(CLICK_SUBMIT_SCRIPT):
            raise LoginSubmitError

        if not await self._browser.wait_for_navigation(self._navigation_timeout):
            # The push challenge often renders in place without navigating
            logger.debug("No navigation after submit, continuing")

    async def _await_second_factor(self, progress: ProgressEmitter) -> None:
        self._state = AuthState.AWAITING_SECOND_FACTOR
        await progress.step(
            SyncStep.SECOND_FACTOR_WAIT,
            "Waiting for 2FA approval on your phone...",
            timeoutSeconds=self._second_factor_timeout,
        )

        deadline = self._monotonic() + self._second_factor_timeout
        url = await self._browser.current_url()
        while not is_authenticated_url(url):
            if self._monotonic() >= deadline:
                logger.warning(
                    "Second factor not confirmed within %.0fs",
                    self._second_factor_timeout,
                )
                raise SecondFactorTimeoutError(
                    timeout_seconds=self._second_factor_timeout,
                    last_url=url,
                )
            await self._sleep(self._poll_interval)
            url = await self._browser.current_url()

        logger.info("Second factor confirmed")
        await self._sleep(self._settle_delay)

    async def _read_credential(self) -> SessionCredential:
        jar = await self._browser.cookies()
        credential = SessionCredential.from_cookie_jar(jar)
        if not credential.has_xsrf_token:
            raise SessionCredentialMissingError
        logger.debug("Session credential obtained: %r", credential)
        return credential
