"""Ledger adapters."""

from cardsync.infrastructure.ledger.lunchmoney_client import (
    LunchMoneyClient,
    parse_insert_response,
)

__all__ = [
    "LunchMoneyClient",
    "parse_insert_response",
]
