"""Ledger bounded context: where normalized transactions are written to."""
