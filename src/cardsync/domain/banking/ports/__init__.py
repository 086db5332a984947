"""Port interfaces for the card portal.

These interfaces define what the domain needs from the browser and the
portal API. Implementations (adapters) are provided in the infrastructure
layer.
"""

from cardsync.domain.banking.ports.browser_session_port import BrowserSessionPort
from cardsync.domain.banking.ports.card_portal_port import CardPortalPort

__all__ = [
    "BrowserSessionPort",
    "CardPortalPort",
]
