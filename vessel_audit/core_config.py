"""
Vessel Audit - Unified Configuration

ENVIRONMENT VARIABLE CONTRACT
=============================

Data source selection:
  DATA_SOURCE                   - demo | live (default: demo)

Internal data store (Supabase):
  SUPABASE_URL                  - Supabase project REST URL (default: local stack)
  SUPABASE_KEY                  - Supabase access key (required for live)
  VESSELS_TABLE                 - Collection holding tracked vessels (default: vessels)
  POSITIONS_TABLE               - Optional collection of position reports

Third-party vessel API:
  VESSEL_API_KEY                - API user key (required for live)
  VESSEL_API_URL                - Vessel state endpoint
  VESSEL_API_BATCH              - true if the endpoint accepts comma-separated MMSIs
  VESSEL_API_TIMEOUT            - Per-request timeout in seconds

Dashboard defaults:
  DEFAULT_SAMPLE_PERCENT        - 1..100 (default: 10)
  DEFAULT_START_DATE            - YYYY-MM-DD (default: 2024-04-01)
  DEFAULT_END_DATE              - YYYY-MM-DD (default: 2024-12-31)

Environment control:
  ENVIRONMENT                   - dev | staging | prod (default: dev)
  LOG_LEVEL                     - DEBUG | INFO | WARNING | ERROR (default: INFO)

FAIL-FAST BEHAVIOR:
-------------------
With DATA_SOURCE=live, missing secrets abort construction with a message
listing every missing variable.

Usage:
------
    from vessel_audit.core_config import get_settings

    settings = get_settings()
    fetcher = RecordFetcher.from_settings(settings)
"""

from __future__ import annotations

import logging
import os
from datetime import date
from functools import lru_cache
from typing import Any, Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_SUPABASE_URL = "http://127.0.0.1:54321"
DEFAULT_VESSEL_API_URL = "https://api.vesselfinder.com/vessels"

_SECRET_FIELDS = {"SUPABASE_KEY", "VESSEL_API_KEY"}


class Settings(BaseSettings):
    """
    Application settings for the dashboard and the CLI.

    Loads from environment variables with fallback to an env file
    (ENV_FILE, default .env). Instances are frozen: build one at startup
    and hand it to the components that need it.
    """

    model_config = SettingsConfigDict(
        env_file=os.environ.get("ENV_FILE", ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # =========================================================================
    # DATA SOURCE
    # =========================================================================

    DATA_SOURCE: Literal["demo", "live"] = Field(
        default="demo",
        description="Use the bundled demo vessels or the live stores",
    )

    # =========================================================================
    # INTERNAL STORE (SUPABASE)
    # =========================================================================

    SUPABASE_URL: str = Field(
        default=DEFAULT_SUPABASE_URL,
        description="Supabase project REST URL",
    )
    SUPABASE_KEY: str | None = Field(
        default=None,
        description="Supabase access key for the internal vessel store",
    )
    VESSELS_TABLE: str = Field(default="vessels", description="Vessel collection")
    POSITIONS_TABLE: str | None = Field(
        default=None,
        description="Position report collection (enables position overlay)",
    )

    # =========================================================================
    # THIRD-PARTY VESSEL API
    # =========================================================================

    VESSEL_API_KEY: str | None = Field(default=None, description="Vessel API user key")
    VESSEL_API_URL: str = Field(
        default=DEFAULT_VESSEL_API_URL,
        description="Vessel state endpoint",
    )
    VESSEL_API_BATCH: bool = Field(
        default=True,
        description="Endpoint accepts a comma-separated MMSI list",
    )
    VESSEL_API_TIMEOUT: float = Field(default=10.0, gt=0, description="Timeout (s)")

    # =========================================================================
    # DASHBOARD DEFAULTS
    # =========================================================================

    DEFAULT_SAMPLE_PERCENT: int = Field(default=10, ge=1, le=100)
    DEFAULT_START_DATE: date = Field(default=date(2024, 4, 1))
    DEFAULT_END_DATE: date = Field(default=date(2024, 12, 31))

    # =========================================================================
    # ENVIRONMENT CONTROL
    # =========================================================================

    ENVIRONMENT: Literal["dev", "staging", "prod"] = Field(default="dev")
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    # =========================================================================
    # VALIDATION & NORMALIZATION
    # =========================================================================

    @model_validator(mode="before")
    @classmethod
    def _normalize_values(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Strip stray whitespace/quotes and normalize enum-like values."""
        for key, value in list(values.items()):
            if isinstance(value, str):
                values[key] = value.strip().strip('"').strip("'").strip()

        for key in list(values):
            upper = key.upper()
            if upper in ("DATA_SOURCE", "ENVIRONMENT") and isinstance(values[key], str):
                values[key] = values[key].lower()
            elif upper == "LOG_LEVEL" and isinstance(values[key], str):
                values[key] = values[key].upper()

        for key in list(values):
            if key.upper() != "ENVIRONMENT" or not isinstance(values[key], str):
                continue
            if values[key] == "production":
                logger.warning("ENVIRONMENT='production' is deprecated; use 'prod'. Normalizing.")
                values[key] = "prod"
            elif values[key] == "development":
                logger.warning("ENVIRONMENT='development' is deprecated; use 'dev'. Normalizing.")
                values[key] = "dev"

        return values

    @model_validator(mode="after")
    def _require_live_credentials(self) -> "Settings":
        if self.DEFAULT_START_DATE > self.DEFAULT_END_DATE:
            raise ValueError("DEFAULT_START_DATE must not be after DEFAULT_END_DATE")

        if self.DATA_SOURCE != "live":
            return self

        missing = [
            name
            for name, value in {
                "SUPABASE_URL": self.SUPABASE_URL,
                "SUPABASE_KEY": self.SUPABASE_KEY,
                "VESSEL_API_KEY": self.VESSEL_API_KEY,
            }.items()
            if not value
        ]
        if missing:
            raise ValueError(
                "Missing required environment variable(s) for DATA_SOURCE=live: "
                + ", ".join(missing)
            )
        return self

    # =========================================================================
    # PROPERTY ALIASES
    # =========================================================================

    @property
    def is_demo(self) -> bool:
        return self.DATA_SOURCE == "demo"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "prod"

    @property
    def log_level(self) -> str:
        return self.LOG_LEVEL


# =========================================================================
# SINGLETON & FACTORY
# =========================================================================


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once per process.
    """
    return Settings()


def reset_settings() -> None:
    """Clear the cached settings (for testing)."""
    get_settings.cache_clear()


# =========================================================================
# DIAGNOSTIC HELPERS
# =========================================================================


def effective_config(settings: Settings | None = None, redact_secrets: bool = True) -> dict[str, Any]:
    """
    Return the effective configuration (for diagnostics).

    Args:
        settings: Settings to describe; defaults to the cached instance
        redact_secrets: If True, redact sensitive values

    Returns:
        Dict of effective configuration values
    """
    if settings is None:
        settings = get_settings()

    config: dict[str, Any] = {}
    for field_name in type(settings).model_fields:
        value = getattr(settings, field_name, None)
        if redact_secrets and field_name in _SECRET_FIELDS:
            config[field_name] = f"***SET*** (len={len(str(value))})" if value else None
        elif isinstance(value, date):
            config[field_name] = value.isoformat()
        else:
            config[field_name] = value

    config["_computed"] = {
        "is_demo": settings.is_demo,
        "is_production": settings.is_production,
    }
    return config


def log_startup_diagnostics(settings: Settings, service_name: str) -> None:
    """Log a startup banner without exposing secrets."""
    logger.info("=" * 60)
    logger.info("SERVICE STARTUP: %s", service_name)
    logger.info("=" * 60)
    logger.info("  Environment     : %s", settings.ENVIRONMENT)
    logger.info("  Data Source     : %s", settings.DATA_SOURCE)
    if not settings.is_demo:
        logger.info("  Supabase URL    : %s", settings.SUPABASE_URL)
        logger.info("  Vessels Table   : %s", settings.VESSELS_TABLE)
        logger.info("  Positions Table : %s", settings.POSITIONS_TABLE or "-")
        logger.info("  Vessel API      : %s", settings.VESSEL_API_URL)
        logger.info("  Batch Lookups   : %s", "✓" if settings.VESSEL_API_BATCH else "✗")
    logger.info("=" * 60)
