"""Value objects for banking domain."""

from cardsync.domain.banking.value_objects.account_descriptor import (
    AccountCandidate,
    AccountDescriptor,
)
from cardsync.domain.banking.value_objects.card_transaction import (
    CardTransaction,
    DebitCredit,
)
from cardsync.domain.banking.value_objects.date_range import DateRange
from cardsync.domain.banking.value_objects.session_credential import (
    SessionCredential,
)

__all__ = [
    "AccountCandidate",
    "AccountDescriptor",
    "CardTransaction",
    "DateRange",
    "DebitCredit",
    "SessionCredential",
]
