"""Application settings loaded from environment variables.

Configuration file discovery (in priority order):
1. OS environment variables (always highest priority)
2. CARDSYNC_ENV_FILE environment variable (absolute path to .env file)
3. config/.env.dev - local development
4. config/.env - production/Docker

Uses pydantic-settings for automatic type coercion and validation.
"""

from __future__ import annotations

import os
import sys
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PLACEHOLDER_MARKER = "your_"

# Hard limit of the Lunch Money v2 bulk insert endpoint
MAX_UPLOAD_BATCH_SIZE = 500


def _find_project_root() -> Path:
    """Find the project root directory."""
    current = Path(__file__).resolve().parent

    for parent in [current, *current.parents]:
        if (parent / "config").is_dir():
            return parent
        if (parent / ".git").is_dir():
            return parent
        if parent == Path("/app"):
            return parent

    return Path(__file__).resolve().parents[2]


def get_config_dir() -> Path:
    """Get the config directory path."""
    return _find_project_root() / "config"


def _resolve_env_file_path() -> Path | None:
    """Resolve the .env file path.

    Priority:
    1. CARDSYNC_ENV_FILE env var (full path)
    2. config/.env.dev (local development)
    3. config/.env (production)
    """
    env_file_path = os.environ.get("CARDSYNC_ENV_FILE")
    if env_file_path:
        path = Path(env_file_path)
        if not path.is_absolute():
            path = _find_project_root() / path
        if path.exists():
            return path

    config_dir = get_config_dir()

    dev_env = config_dir / ".env.dev"
    if dev_env.exists():
        return dev_env

    prod_env = config_dir / ".env"
    if prod_env.exists():
        return prod_env

    return None


def _default_browser_executable() -> str:
    if sys.platform == "darwin":
        return "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome"
    return "/usr/bin/chromium"


class Settings(BaseSettings):
    """Sync configuration loaded from environment variables.

    Values are loaded from:
    1. OS environment variables (highest priority)
    2. .env file (config/.env.dev or config/.env)
    3. Default values
    """

    model_config = SettingsConfigDict(
        env_file=_resolve_env_file_path(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Card portal login (MUST be set)
    ics_email: SecretStr
    ics_password: SecretStr
    ics_account_number: str | None = None  # None = auto-detect

    # Ledger (MUST be set)
    lunchmoney_token: SecretStr
    lunchmoney_asset_id: int

    # Lookback window in days (MUST be set)
    sync_days: int = Field(..., gt=0)

    # Endpoints
    ics_base_url: str = "https://www.icscards.nl"
    lunchmoney_api_url: str = "https://api.lunchmoney.dev/v2"

    # Upload behaviour
    external_id_suffix: str | None = None  # e.g. "v2" forces a re-import
    skip_duplicates: bool = True
    upload_batch_size: int = Field(
        default=MAX_UPLOAD_BATCH_SIZE,
        ge=1,
        le=MAX_UPLOAD_BATCH_SIZE,
    )
    ledger_expense_sign: Literal["negative", "positive"] = "negative"

    # Browser
    browser_executable_path: str = Field(
        default_factory=_default_browser_executable,
        validation_alias=AliasChoices(
            "browser_executable_path",
            "puppeteer_executable_path",
        ),
    )
    browser_headless: bool = Field(
        default=True,
        validation_alias=AliasChoices("browser_headless", "puppeteer_headless"),
    )
    page_load_timeout_seconds: float = 30.0
    second_factor_timeout_seconds: float = 120.0

    # Logging
    log_level: str = "INFO"

    @field_validator("ics_email", "ics_password", "lunchmoney_token")
    @classmethod
    def _reject_placeholder_secret(cls, v: SecretStr) -> SecretStr:
        value = v.get_secret_value()
        if not value.strip():
            msg = "must not be empty"
            raise ValueError(msg)
        if PLACEHOLDER_MARKER in value:
            msg = "still contains a placeholder value"
            raise ValueError(msg)
        return v

    @field_validator("ics_account_number", "external_id_suffix", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("ics_account_number")
    @classmethod
    def _reject_placeholder_account(cls, v: str | None) -> str | None:
        if v is not None and PLACEHOLDER_MARKER in v:
            msg = "still contains a placeholder value"
            raise ValueError(msg)
        return v

    @field_validator("ics_base_url", "lunchmoney_api_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings.

    Required fields (ICS_EMAIL, ICS_PASSWORD, LUNCHMONEY_TOKEN,
    LUNCHMONEY_ASSET_ID, SYNC_DAYS) must be provided via environment
    variables or .env file.
    """
    return Settings()  # type: ignore[call-arg]  # pydantic-settings loads from env


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for tests)."""
    get_settings.cache_clear()
