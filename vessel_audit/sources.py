"""Record sources for the internal vessel store and the third-party vessel API.

Defines the InternalSource and ExternalSource protocols plus their live
(Supabase / httpx) and demo implementations. The fetcher only talks to
these protocols, so the dashboard can switch between demo and live data
without code changes.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import TYPE_CHECKING, Any, Protocol, Sequence, runtime_checkable

import httpx
from pydantic import ValidationError

from .core_config import Settings
from .demo_data import DEMO_EXTERNAL_ROWS, DEMO_INTERNAL_ROWS
from .models import (
    ExternalRecord,
    InternalRecord,
    PositionReport,
    parse_external_records,
    parse_internal_records,
)

if TYPE_CHECKING:
    from supabase import Client

logger = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """A fetch cycle could not produce a result."""


class InternalSourceError(FetchError):
    """The internal vessel store query failed."""


class ExternalSourceError(FetchError):
    """The vessel API call failed or returned an unusable payload."""


# =============================================================================
# PROTOCOLS
# =============================================================================


@runtime_checkable
class InternalSource(Protocol):
    """Protocol for the internal vessel store."""

    @property
    def supports_positions(self) -> bool:
        """True if latest_position can answer queries."""
        ...

    def count(self) -> int:
        """Number of vessels available for sampling."""
        ...

    def fetch(self, limit: int | None = None) -> list[InternalRecord]:
        """Bulk-select vessels, optionally limited to ``limit`` rows."""
        ...

    def latest_position(self, mmsi: str, start: date, end: date) -> PositionReport | None:
        """Latest position report for ``mmsi`` within [start, end]."""
        ...


@runtime_checkable
class ExternalSource(Protocol):
    """Protocol for the third-party vessel API."""

    @property
    def supports_batch(self) -> bool:
        """True if fetch_batch accepts many identifiers in one call."""
        ...

    async def __aenter__(self) -> Any:
        ...

    async def __aexit__(self, *args: Any) -> None:
        ...

    async def fetch_batch(self, mmsis: Sequence[str]) -> list[ExternalRecord]:
        """Look up many vessels with one call."""
        ...

    async def fetch_one(self, mmsi: str) -> ExternalRecord | None:
        """Look up one vessel; None when the API has no such vessel."""
        ...


# =============================================================================
# SUPABASE STORE
# =============================================================================


class SupabaseVesselStore:
    """Internal vessel store backed by a Supabase collection.

    Usage:
        store = SupabaseVesselStore(create_supabase_client(settings), settings)
        records = store.fetch(limit=25)
    """

    def __init__(self, client: "Client", settings: Settings):
        self._client = client
        self._table = settings.VESSELS_TABLE
        self._positions_table = settings.POSITIONS_TABLE

    @property
    def supports_positions(self) -> bool:
        return bool(self._positions_table)

    def count(self) -> int:
        try:
            response = (
                self._client.table(self._table)
                .select("mmsi", count="exact")
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("Failed to count %s: %s", self._table, e)
            raise InternalSourceError(f"Could not count vessels: {e}") from e
        if response.count is not None:
            return int(response.count)
        return len(response.data or [])

    def fetch(self, limit: int | None = None) -> list[InternalRecord]:
        try:
            query = self._client.table(self._table).select("*")
            if limit is not None:
                query = query.limit(limit)
            response = query.execute()
        except Exception as e:
            logger.error("Failed to load %s: %s", self._table, e)
            raise InternalSourceError(f"Could not load vessels: {e}") from e
        return parse_internal_records(response.data or [])

    def latest_position(self, mmsi: str, start: date, end: date) -> PositionReport | None:
        if not self._positions_table:
            return None
        try:
            response = (
                self._client.table(self._positions_table)
                .select("*")
                .eq("mmsi", mmsi)
                .gte("timestamp", f"{start.isoformat()}T00:00:00Z")
                .lte("timestamp", f"{end.isoformat()}T23:59:59.999999Z")
                .order("timestamp", desc=True)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("Failed to load position for %s: %s", mmsi, e)
            raise InternalSourceError(f"Could not load positions: {e}") from e
        if not response.data:
            return None
        try:
            return PositionReport.model_validate(response.data[0])
        except ValidationError as e:
            logger.error("Unusable position row for %s: %s", mmsi, e)
            raise InternalSourceError(f"Could not load positions: {e}") from e


# =============================================================================
# VESSEL API CLIENT
# =============================================================================


class VesselApiClient:
    """
    httpx client for the third-party vessel-state endpoint.

    Usage:
        async with VesselApiClient(settings) as api:
            records = await api.fetch_batch(["413795171", "413795172"])
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient | None = None):
        self.url = settings.VESSEL_API_URL
        self._api_key = settings.VESSEL_API_KEY or ""
        self._batch = settings.VESSEL_API_BATCH
        self._timeout = settings.VESSEL_API_TIMEOUT
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def supports_batch(self) -> bool:
        return self._batch

    async def __aenter__(self) -> "VesselApiClient":
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _get(self, mmsi_param: str) -> Any:
        if self._client is None:
            raise RuntimeError("VesselApiClient not initialized. Use async with.")
        response = await self._client.get(
            self.url,
            params={"userkey": self._api_key, "mmsi": mmsi_param},
        )
        response.raise_for_status()
        return response.json()

    async def fetch_batch(self, mmsis: Sequence[str]) -> list[ExternalRecord]:
        if not mmsis:
            return []
        try:
            payload = await self._get(",".join(mmsis))
            return parse_external_records(payload)
        except httpx.HTTPStatusError as e:
            logger.error("Vessel API HTTP error: %s", e)
            raise ExternalSourceError(
                f"HTTP {e.response.status_code} from vessel API"
            ) from e
        except httpx.HTTPError as e:
            logger.error("Vessel API request error: %s", e)
            raise ExternalSourceError(f"Vessel API request failed: {e}") from e
        except ValueError as e:
            logger.error("Vessel API returned an unusable payload: %s", e)
            raise ExternalSourceError(f"Vessel API returned an unusable payload: {e}") from e

    async def fetch_one(self, mmsi: str) -> ExternalRecord | None:
        payload = await self._get(mmsi)
        for record in parse_external_records(payload):
            if record.mmsi == mmsi:
                return record
        return None


# =============================================================================
# DEMO SOURCES
# =============================================================================


class DemoVesselStore:
    """Internal store over the bundled demo vessels. No network access.

    The sampling pool is the smaller of the internal and external demo sets.
    """

    def __init__(
        self,
        rows: Sequence[dict[str, Any]] = DEMO_INTERNAL_ROWS,
        external_rows: Sequence[dict[str, Any]] = DEMO_EXTERNAL_ROWS,
    ):
        self._records = parse_internal_records(rows)
        self._pool = min(len(self._records), len(external_rows))

    @property
    def supports_positions(self) -> bool:
        return False

    def count(self) -> int:
        return self._pool

    def fetch(self, limit: int | None = None) -> list[InternalRecord]:
        if limit is None:
            return list(self._records)
        return list(self._records[:limit])

    def latest_position(self, mmsi: str, start: date, end: date) -> PositionReport | None:
        return None


class DemoVesselApi:
    """Vessel API stand-in over the bundled demo states.

    ``delay`` simulates network latency per call, in seconds.
    """

    def __init__(
        self,
        rows: Sequence[dict[str, Any]] = DEMO_EXTERNAL_ROWS,
        delay: float = 0.0,
        batch: bool = True,
    ):
        self._records = parse_external_records(list(rows))
        self._delay = delay
        self._batch = batch

    @property
    def supports_batch(self) -> bool:
        return self._batch

    async def __aenter__(self) -> "DemoVesselApi":
        return self

    async def __aexit__(self, *args: Any) -> None:
        return None

    async def fetch_batch(self, mmsis: Sequence[str]) -> list[ExternalRecord]:
        if self._delay:
            await asyncio.sleep(self._delay)
        wanted = set(mmsis)
        return [record for record in self._records if record.mmsi in wanted]

    async def fetch_one(self, mmsi: str) -> ExternalRecord | None:
        if self._delay:
            await asyncio.sleep(self._delay)
        for record in self._records:
            if record.mmsi == mmsi:
                return record
        return None
