"""Port interfaces for the ledger."""

from cardsync.domain.ledger.ports.ledger_port import LedgerPort

__all__ = [
    "LedgerPort",
]
