"""Application layer services."""

from cardsync.application.services.account_resolver import (
    AccountResolution,
    AccountResolver,
    AmbiguousAccounts,
    ResolvedAccount,
)
from cardsync.application.services.batch_uploader import (
    LEDGER_MAX_BATCH_SIZE,
    BatchOutcome,
    BatchUploader,
    UploadSummary,
)
from cardsync.application.services.session_authenticator import (
    AuthState,
    SessionAuthenticator,
)
from cardsync.application.services.transaction_fetcher import TransactionFetcher
from cardsync.application.services.transaction_transformer import (
    TransactionTransformer,
    transform_transaction,
)

__all__ = [
    "LEDGER_MAX_BATCH_SIZE",
    "AccountResolution",
    "AccountResolver",
    "AmbiguousAccounts",
    "AuthState",
    "BatchOutcome",
    "BatchUploader",
    "ResolvedAccount",
    "SessionAuthenticator",
    "TransactionFetcher",
    "TransactionTransformer",
    "UploadSummary",
    "transform_transaction",
]
