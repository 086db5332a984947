"""Infrastructure layer: adapters for the browser, the portal and the ledger."""
