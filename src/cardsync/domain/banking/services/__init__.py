"""Domain services for the card portal."""

from cardsync.domain.banking.services.date_chunker import MAX_CHUNK_DAYS, DateChunker

__all__ = [
    "MAX_CHUNK_DAYS",
    "DateChunker",
]
