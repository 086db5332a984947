"""Root pytest configuration.

Test Structure:
    tests/
    ├── cardsync/
    │   └── unit/              # Fast, isolated tests (no browser, no network)
    │       ├── domain/
    │       ├── application/
    │       ├── infrastructure/
    │       └── presentation/
    └── shared/                # Shared factories and fakes

Environment Variables:
    RUN_EXTERNAL=1       Run @pytest.mark.external tests (real portal login)

Pytest Options:
    --run-external       Run external tests
"""

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

from cardsync_config import clear_settings_cache

PROJECT_ROOT = Path(__file__).resolve().parents[1]

# External tests read real credentials from the local development file
CONFIG_DIR = PROJECT_ROOT / "config"
if (CONFIG_DIR / ".env.dev").exists():
    load_dotenv(CONFIG_DIR / ".env.dev")


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-external",
        action="store_true",
        default=False,
        help="Run tests marked with @pytest.mark.external",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "external: Tests driving the real card portal (auto-skipped)",
    )


def pytest_collection_modifyitems(config, items):
    """Auto-skip external tests unless explicitly enabled."""
    run_external = config.getoption("--run-external") or os.environ.get(
        "RUN_EXTERNAL",
        "",
    ).lower() in ("1", "true", "yes")
    if run_external:
        return

    skip_external = pytest.mark.skip(
        reason="External test - run with --run-external or RUN_EXTERNAL=1",
    )
    for item in items:
        if "external" in {mark.name for mark in item.iter_markers()}:
            item.add_marker(skip_external)


@pytest.fixture(autouse=True)
def fresh_settings():
    """Make every test load settings from its own environment."""
    clear_settings_cache()
    yield
    clear_settings_cache()
