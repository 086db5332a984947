"""Value objects for the ledger domain."""

from cardsync.domain.ledger.value_objects.batch_insert_result import (
    BatchInsertResult,
)
from cardsync.domain.ledger.value_objects.import_marker import (
    IMPORT_TAG_PREFIX,
    ImportMarker,
)
from cardsync.domain.ledger.value_objects.ledger_transaction import (
    UNREVIEWED_STATUS,
    LedgerTransaction,
)

__all__ = [
    "IMPORT_TAG_PREFIX",
    "UNREVIEWED_STATUS",
    "BatchInsertResult",
    "ImportMarker",
    "LedgerTransaction",
]
