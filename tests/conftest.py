"""
tests/conftest.py

Pytest configuration and shared fixtures for the vessel audit test suite.

All tests run against the bundled demo data by default (DATA_SOURCE=demo);
live collaborators (Supabase, the vessel API) are replaced with mocks or
httpx.MockTransport inside individual tests.
"""

from __future__ import annotations

import os
from typing import Any, Callable

import pytest

from tests.helpers import external_row, internal_row
from vessel_audit.core_config import Settings, reset_settings
from vessel_audit.models import ExternalRecord, InternalRecord

# =============================================================================
# GLOBAL TEST CONFIGURATION
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Force demo data so no test reaches a live store by accident."""
    os.environ["DATA_SOURCE"] = "demo"


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset the settings cache before and after each test."""
    reset_settings()
    yield
    reset_settings()


# =============================================================================
# SETTINGS
# =============================================================================


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    """Build Settings without reading an env file."""

    def _make(**overrides: Any) -> Settings:
        return Settings(_env_file=None, **overrides)  # type: ignore[call-arg]

    return _make


@pytest.fixture
def live_settings(make_settings) -> Settings:
    return make_settings(
        DATA_SOURCE="live",
        SUPABASE_URL="https://test.supabase.co",
        SUPABASE_KEY="test-supabase-key",
        VESSEL_API_KEY="test-vessel-key",
        VESSEL_API_URL="https://vessels.test/api/vessels",
    )


# =============================================================================
# RECORD FACTORIES
# =============================================================================


@pytest.fixture
def make_internal() -> Callable[..., InternalRecord]:
    def _make(**overrides: Any) -> InternalRecord:
        return InternalRecord.model_validate(internal_row(**overrides))

    return _make


@pytest.fixture
def make_external() -> Callable[..., ExternalRecord]:
    def _make(**overrides: Any) -> ExternalRecord:
        return ExternalRecord.model_validate(external_row(**overrides))

    return _make
