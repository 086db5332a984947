"""Banking domain exceptions.

This module defines exceptions specific to the card portal bounded context:
browser login failures, the push second factor, account resolution and
transaction fetch errors.
"""

from cardsync.domain.shared.exceptions import (
    DomainException,
    ErrorCode,
    ErrorKind,
)

# =============================================================================
# Base Banking Exception
# =============================================================================


class BankingDomainError(DomainException):
    """Base exception for card portal errors."""


# =============================================================================
# Authentication Exceptions
# =============================================================================


class PortalAuthenticationError(BankingDomainError):
    """Raised when the browser login flow cannot complete.

    This is a general login error. Use more specific subclasses when the
    cause is known (e.g., LoginFormNotFoundError).
    """

    kind = ErrorKind.AUTHENTICATION
    retryable = True

    def __init__(
        self,
        message: str = "Login to the card portal failed",
        code: ErrorCode = ErrorCode.PORTAL_NAVIGATION_FAILED,
        details: dict | None = None,
    ) -> None:
        super().__init__(message=message, code=code, details=details)


class PortalNavigationError(PortalAuthenticationError):
    """Raised when the login page cannot be loaded."""

    def __init__(self, url: str, reason: str | None = None) -> None:
        message = "Failed to load login page"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            message=message,
            code=ErrorCode.PORTAL_NAVIGATION_FAILED,
            details={"url": url, "reason": reason},
        )


class BrowserInteractionError(PortalAuthenticationError):
    """Raised when the browser fails while the login page is being driven.

    Typical cause: a script evaluation racing a navigation ("Execution
    context was destroyed").
    """

    def __init__(self, action: str, url: str, reason: str | None = None) -> None:
        message = f"Browser error during login ({action})"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            message=message,
            code=ErrorCode.BROWSER_INTERACTION_FAILED,
            details={"action": action, "url": url, "reason": reason},
        )


class LoginFormNotFoundError(PortalAuthenticationError):
    """Raised when the login inputs or the submit control are missing.

    Usually means the portal changed its markup; retrying will not help.
    """

    retryable = False

    def __init__(
        self,
        message: str = "Could not find login form fields",
        username_found: bool = False,
        password_found: bool = False,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.LOGIN_FORM_NOT_FOUND,
            details={
                "username_found": username_found,
                "password_found": password_found,
            },
        )
        self.username_found = username_found
        self.password_found = password_found


class LoginSubmitError(PortalAuthenticationError):
    """Raised when the login form cannot be submitted."""

    retryable = False

    def __init__(self, message: str = "Could not find login submit button") -> None:
        super().__init__(message=message, code=ErrorCode.LOGIN_SUBMIT_FAILED)


class SessionCredentialMissingError(PortalAuthenticationError):
    """Raised when the session has no anti-forgery token after login."""

    def __init__(
        self,
        message: str = "Session cookie XSRF-TOKEN missing after login",
    ) -> None:
        super().__init__(message=message, code=ErrorCode.SESSION_CREDENTIAL_MISSING)


class SecondFactorTimeoutError(BankingDomainError):
    """Raised when the push confirmation is not approved in time.

    Distinct from other login failures: the operator simply has to confirm
    on their phone faster next time.
    """

    kind = ErrorKind.SECOND_FACTOR_TIMEOUT
    retryable = True

    def __init__(
        self,
        message: str = (
            "2FA verification timeout - please confirm on your phone and try again"
        ),
        timeout_seconds: float | None = None,
        last_url: str | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.SECOND_FACTOR_TIMEOUT,
            details={"timeout_seconds": timeout_seconds, "last_url": last_url},
        )
        self.timeout_seconds = timeout_seconds
        self.last_url = last_url


# =============================================================================
# Account Exceptions
# =============================================================================


class NoAccountsFoundError(BankingDomainError):
    """Raised when the portal lists no card accounts at all."""

    kind = ErrorKind.UPSTREAM_FETCH

    def __init__(self, message: str = "No accounts found") -> None:
        super().__init__(message=message, code=ErrorCode.NO_ACCOUNTS)


class BankAccountNotFoundError(BankingDomainError):
    """Raised when the configured account number is not offered by the portal."""

    kind = ErrorKind.CONFIGURATION

    def __init__(
        self,
        account_number: str,
        available: list[str] | None = None,
    ) -> None:
        available = available or []
        super().__init__(
            message=(
                f"Account '{account_number}' not found. "
                f"Available accounts: {', '.join(available) or 'none'}"
            ),
            code=ErrorCode.ACCOUNT_NOT_FOUND,
            details={"account_number": account_number, "available": available},
        )
        self.account_number = account_number
        self.available = available


# =============================================================================
# Transaction Fetch Exceptions
# =============================================================================


class BankRequestError(BankingDomainError):
    """Raised when an authenticated portal API request fails."""

    kind = ErrorKind.UPSTREAM_FETCH
    retryable = True

    def __init__(
        self,
        path: str,
        status: int | None = None,
        reason: str | None = None,
    ) -> None:
        if status is not None:
            message = f"Portal request {path} failed with HTTP {status}"
        else:
            message = f"Portal request {path} failed: {reason or 'unknown error'}"
        super().__init__(
            message=message,
            code=ErrorCode.BANK_REQUEST_FAILED,
            details={"path": path, "status": status, "reason": reason},
        )
        self.path = path
        self.status = status


class BankTransactionFetchError(BankingDomainError):
    """Raised when fetching transactions for a date range fails."""

    kind = ErrorKind.UPSTREAM_FETCH
    retryable = True

    def __init__(
        self,
        message: str = "Failed to fetch transactions from the card portal",
        account_number: str | None = None,
        date_range: str | None = None,
        reason: str | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.BANK_TRANSACTION_FETCH_FAILED,
            details={
                "account_number": account_number,
                "date_range": date_range,
                "reason": reason,
            },
        )
        self.date_range = date_range
