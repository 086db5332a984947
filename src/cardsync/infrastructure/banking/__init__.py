"""Card portal adapters."""

from cardsync.infrastructure.banking.portal_api_client import PortalApiClient

__all__ = ["PortalApiClient"]
