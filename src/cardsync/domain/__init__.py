"""Domain layer of the card-to-ledger sync pipeline."""
