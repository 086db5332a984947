"""cardsync - sync credit-card transactions from the ICS portal to Lunch Money."""

__version__ = "0.1.0"
