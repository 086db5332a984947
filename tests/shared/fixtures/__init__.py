"""Shared pytest fixtures and fakes for all test modules."""

from tests.shared.fixtures.factories import (
    TODAY,
    LedgerFactory,
    PortalPayloadFactory,
)
from tests.shared.fixtures.fakes import (
    DASHBOARD_URL,
    LOGIN_URL,
    PORTAL_BASE_URL,
    FakeBrowser,
    FakeClock,
    FakeLedger,
    FakePortal,
)

__all__ = [
    "DASHBOARD_URL",
    "LOGIN_URL",
    "PORTAL_BASE_URL",
    "TODAY",
    "FakeBrowser",
    "FakeClock",
    "FakeLedger",
    "FakePortal",
    "LedgerFactory",
    "PortalPayloadFactory",
]
