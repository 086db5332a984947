"""Integration commands - sync orchestration between the card portal and the ledger."""

from cardsync.application.commands.integration.sync_run_lock import SyncRunLock
from cardsync.application.commands.integration.transaction_sync_command import (
    SyncOptions,
    TransactionSyncCommand,
)

__all__ = [
    "SyncOptions",
    "SyncRunLock",
    "TransactionSyncCommand",
]
