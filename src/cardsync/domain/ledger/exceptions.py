"""Ledger domain exceptions.

Failures talking to the personal-finance ledger are classified by HTTP
status so the caller can tell a bad token from a temporary outage.
"""

from enum import Enum

from cardsync.domain.shared.exceptions import (
    DomainException,
    ErrorCode,
    ErrorKind,
)


class LedgerFailureKind(str, Enum):
    """Classification of a failed ledger request."""

    INVALID_CREDENTIAL = "invalid_credential"
    RATE_LIMITED = "rate_limited"
    SERVICE_UNAVAILABLE = "service_unavailable"
    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"
    CLIENT_ERROR = "client_error"
    MALFORMED_RESPONSE = "malformed_response"

    @property
    def retryable(self) -> bool:
        return self in _RETRYABLE_FAILURES


_RETRYABLE_FAILURES = frozenset(
    {LedgerFailureKind.RATE_LIMITED, LedgerFailureKind.SERVICE_UNAVAILABLE},
)

_FAILURE_MESSAGES = {
    LedgerFailureKind.INVALID_CREDENTIAL: (
        "Invalid Lunch Money API token. Check LUNCHMONEY_TOKEN."
    ),
    LedgerFailureKind.RATE_LIMITED: (
        "Lunch Money rate limit exceeded. Please wait and try again."
    ),
    LedgerFailureKind.SERVICE_UNAVAILABLE: (
        "Lunch Money API is temporarily unavailable. Please try again later."
    ),
    LedgerFailureKind.BAD_REQUEST: "Lunch Money rejected the request (bad request)",
    LedgerFailureKind.NOT_FOUND: (
        "Lunch Money resource not found. Check your manual_account_id "
        "(LUNCHMONEY_ASSET_ID)."
    ),
    LedgerFailureKind.CLIENT_ERROR: "Lunch Money request failed",
    LedgerFailureKind.MALFORMED_RESPONSE: "Lunch Money returned an unreadable response",
}


def classify_ledger_failure(status_code: int | None) -> LedgerFailureKind:
    """Map an HTTP status of a failed ledger request to a failure kind."""
    if status_code is None:
        return LedgerFailureKind.SERVICE_UNAVAILABLE
    if status_code == 401:  # noqa: PLR2004
        return LedgerFailureKind.INVALID_CREDENTIAL
    if status_code == 429:  # noqa: PLR2004
        return LedgerFailureKind.RATE_LIMITED
    if status_code == 400:  # noqa: PLR2004
        return LedgerFailureKind.BAD_REQUEST
    if status_code == 404:  # noqa: PLR2004
        return LedgerFailureKind.NOT_FOUND
    if status_code >= 500:  # noqa: PLR2004
        return LedgerFailureKind.SERVICE_UNAVAILABLE
    return LedgerFailureKind.CLIENT_ERROR


def describe_ledger_failure(
    failure: LedgerFailureKind,
    status_code: int | None = None,
    detail: str | None = None,
) -> str:
    """Build the operator-facing message for a ledger failure."""
    message = _FAILURE_MESSAGES[failure]
    if failure == LedgerFailureKind.CLIENT_ERROR and status_code is not None:
        message = f"{message} with HTTP {status_code}"
    if detail:
        message = f"{message}: {detail}"
    return message


class LedgerWriteError(DomainException):
    """Raised when the ledger rejects a tag or transaction write.

    ``inserted_before_failure`` counts transactions of earlier batches that
    the ledger accepted before this failure; they stay inserted and are
    skipped as duplicates on the next run.
    """

    kind = ErrorKind.LEDGER_WRITE

    def __init__(  # noqa: PLR0913
        self,
        failure: LedgerFailureKind,
        message: str | None = None,
        status_code: int | None = None,
        detail: str | None = None,
        inserted_before_failure: int = 0,
        code: ErrorCode = ErrorCode.LEDGER_WRITE_FAILED,
    ) -> None:
        super().__init__(
            message=message or describe_ledger_failure(failure, status_code, detail),
            code=code,
            details={
                "failure": failure.value,
                "status_code": status_code,
                "inserted_before_failure": inserted_before_failure,
            },
        )
        self.failure = failure
        self.status_code = status_code
        self.detail = detail
        self.inserted_before_failure = inserted_before_failure
        self.retryable = failure.retryable

    def with_inserted_before_failure(self, count: int) -> "LedgerWriteError":
        """Return a copy carrying the number of already inserted transactions."""
        return LedgerWriteError(
            failure=self.failure,
            message=self.message,
            status_code=self.status_code,
            detail=self.detail,
            inserted_before_failure=count,
            code=self.code,
        )


class LedgerTagError(LedgerWriteError):
    """Raised when the run's import tag can neither be created nor found."""

    def __init__(
        self,
        failure: LedgerFailureKind,
        tag_name: str,
        status_code: int | None = None,
        detail: str | None = None,
    ) -> None:
        super().__init__(
            failure=failure,
            message=(
                f"Failed to create tag '{tag_name}': "
                f"{describe_ledger_failure(failure, status_code, detail)}"
            ),
            status_code=status_code,
            detail=detail,
            code=ErrorCode.LEDGER_TAG_FAILED,
        )
        self.tag_name = tag_name
