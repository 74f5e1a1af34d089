from __future__ import annotations

import logging

import httpx

from supabase import Client, ClientOptions, create_client

from .core_config import Settings

logger = logging.getLogger(__name__)


def _build_supabase_http_client(settings: Settings) -> httpx.Client:
    """Return an httpx client configured for Supabase REST calls."""

    timeout = httpx.Timeout(settings.VESSEL_API_TIMEOUT)
    return httpx.Client(timeout=timeout)


def _client_options(settings: Settings) -> ClientOptions:
    """Construct ClientOptions that avoid deprecated timeout/verify kwargs."""

    options = ClientOptions()
    options.httpx_client = _build_supabase_http_client(settings)
    return options


def get_supabase_credentials(settings: Settings) -> tuple[str, str]:
    url = (settings.SUPABASE_URL or "").strip()
    key = (settings.SUPABASE_KEY or "").strip()
    missing = [
        name
        for name, value in {"SUPABASE_URL": url, "SUPABASE_KEY": key}.items()
        if not value
    ]
    if missing:
        raise RuntimeError("Missing Supabase credential(s): " + ", ".join(missing))
    return url, key


def create_supabase_client(settings: Settings) -> Client:
    url, key = get_supabase_credentials(settings)
    client = create_client(url, key, options=_client_options(settings))
    logger.info(
        "Initialized Supabase client for env='%s' (table=%s)",
        settings.ENVIRONMENT,
        settings.VESSELS_TABLE,
    )
    return client
