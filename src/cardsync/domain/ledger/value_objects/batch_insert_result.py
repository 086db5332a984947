"""Outcome of a single batch insert."""

from dataclasses import dataclass


@dataclass(frozen=True)
class BatchInsertResult:
    """What the ledger reported for one insert request.

    ``inserted`` and ``skipped`` are counts of the ids the ledger returned;
    they should add up to the number of submitted transactions.
    """

    inserted: int
    skipped: int
    status_code: int = 201
    recognized: bool = True
