"""Banking bounded context: the card portal, its accounts and transactions."""
