"""Shared domain exceptions and error codes.

This module defines the base exception hierarchy and error codes for the
entire domain layer. All domain exceptions should inherit from DomainException
so the sync orchestrator can translate them into a terminal result without
string-parsing error messages.
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Coarse error classification reported in the terminal sync result.

    The kind tells the caller what to do next (fix config, retry, pick an
    account), independent of which exception class was raised.
    """

    CONFIGURATION = "configuration"
    AUTHENTICATION = "authentication"
    SECOND_FACTOR_TIMEOUT = "second_factor_timeout"
    ACCOUNT_AMBIGUOUS = "account_ambiguous"
    UPSTREAM_FETCH = "upstream_fetch"
    LEDGER_WRITE = "ledger_write"
    UNHANDLED = "unhandled"


class ErrorCode(str, Enum):
    """Stable error codes for programmatic handling.

    These codes are part of the result contract. Should not be changed.
    """

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Portal / authentication
    PORTAL_NAVIGATION_FAILED = "PORTAL_NAVIGATION_FAILED"
    BROWSER_INTERACTION_FAILED = "BROWSER_INTERACTION_FAILED"
    LOGIN_FORM_NOT_FOUND = "LOGIN_FORM_NOT_FOUND"
    LOGIN_SUBMIT_FAILED = "LOGIN_SUBMIT_FAILED"
    SECOND_FACTOR_TIMEOUT = "SECOND_FACTOR_TIMEOUT"
    SESSION_CREDENTIAL_MISSING = "SESSION_CREDENTIAL_MISSING"

    # Account resolution
    NO_ACCOUNTS = "NO_ACCOUNTS"
    ACCOUNT_NOT_FOUND = "ACCOUNT_NOT_FOUND"
    ACCOUNT_AMBIGUOUS = "ACCOUNT_AMBIGUOUS"

    # Upstream fetch
    BANK_REQUEST_FAILED = "BANK_REQUEST_FAILED"
    BANK_TRANSACTION_FETCH_FAILED = "BANK_TRANSACTION_FETCH_FAILED"

    # Ledger writes
    LEDGER_WRITE_FAILED = "LEDGER_WRITE_FAILED"
    LEDGER_TAG_FAILED = "LEDGER_TAG_FAILED"

    # Run control
    SYNC_ALREADY_RUNNING = "SYNC_ALREADY_RUNNING"

    # General Errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class DomainException(Exception):  # NOQA: N818
    """Base exception for all domain-related errors.

    Attributes
    ----------
    message
        Human-readable error message (safe for end users)
    code
        Stable error code for programmatic handling
    details
        Optional additional context (logged but not exposed to users)
    kind
        Error kind reported in the terminal result
    retryable
        Whether starting a fresh run may succeed without operator changes
    """

    kind: ErrorKind = ErrorKind.UNHANDLED
    retryable: bool = False

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code.value!r}, "
            f"details={self.details!r})"
        )


class ValidationError(DomainException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class ConfigurationError(DomainException):
    """Raised when a required setting is missing or still a placeholder.

    Detected before any browser or network activity; needs an operator to
    fix the environment before the next run.
    """

    kind = ErrorKind.CONFIGURATION

    def __init__(
        self,
        message: str,
        fields: list[str] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.CONFIGURATION_ERROR,
            details={"fields": fields} if fields else None,
        )
        self.fields = fields or []


class SyncAlreadyRunningError(DomainException):
    """Raised when a sync is triggered while another one holds the run lock."""

    retryable = True

    def __init__(
        self,
        message: str = "A sync is already in progress. Please wait.",
    ) -> None:
        super().__init__(message=message, code=ErrorCode.SYNC_ALREADY_RUNNING)
