"""
Tests for vessel_audit.fetcher

Covers sample sizing, batch vs per-vessel external lookups, the failure
policy of a fetch cycle and the optional position overlay.
"""

from __future__ import annotations

from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from tests.helpers import external_row
from vessel_audit.comparator import DateWindow
from vessel_audit.fetcher import FetchResult, RecordFetcher, sample_size
from vessel_audit.models import ExternalRecord, PositionReport
from vessel_audit.sources import (
    DemoVesselApi,
    DemoVesselStore,
    ExternalSourceError,
    InternalSourceError,
    SupabaseVesselStore,
    VesselApiClient,
)


class _FlakyVesselApi(DemoVesselApi):
    """Per-vessel API stand-in where selected lookups raise."""

    def __init__(self, failing: set[str]):
        super().__init__(batch=False)
        self.failing = failing
        self.calls: list[str] = []

    async def fetch_one(self, mmsi: str) -> ExternalRecord | None:
        self.calls.append(mmsi)
        if mmsi in self.failing:
            raise TimeoutError(f"lookup for {mmsi} timed out")
        return await super().fetch_one(mmsi)


# =============================================================================
# sample_size TESTS
# =============================================================================


class TestSampleSize:
    def test_ten_percent_of_three_demo_records(self):
        assert sample_size(10, 3) == 1

    def test_floor_of_fraction(self):
        assert sample_size(50, 5) == 2

    def test_full_pool(self):
        assert sample_size(100, 3) == 3

    def test_never_below_one(self):
        assert sample_size(1, 0) == 1

    @pytest.mark.parametrize("percent", [0, 101, -5])
    def test_rejects_out_of_range_percent(self, percent):
        with pytest.raises(ValueError, match="between 1 and 100"):
            sample_size(percent, 10)


# =============================================================================
# FETCH CYCLE TESTS
# =============================================================================


class TestFetchSample:
    @pytest.mark.asyncio
    async def test_demo_ten_percent_yields_one_vessel(self):
        fetcher = RecordFetcher(DemoVesselStore(), DemoVesselApi())

        result = await fetcher.fetch_sample(percent=10, generation=4)

        assert isinstance(result, FetchResult)
        assert result.sample_size == 1
        assert [record.mmsi for record in result.internal] == ["413795171"]
        assert [record.mmsi for record in result.external] == ["413795171"]
        assert result.generation == 4
        assert result.missing_external == ()

    @pytest.mark.asyncio
    async def test_absolute_count(self):
        fetcher = RecordFetcher(DemoVesselStore(), DemoVesselApi())

        result = await fetcher.fetch_sample(count=2)

        assert result.sample_size == 2
        assert len(result.internal) == 2

    @pytest.mark.asyncio
    async def test_requires_percent_or_count(self):
        fetcher = RecordFetcher(DemoVesselStore(), DemoVesselApi())
        with pytest.raises(ValueError):
            await fetcher.fetch_sample()

    @pytest.mark.asyncio
    async def test_rejects_non_positive_count(self):
        fetcher = RecordFetcher(DemoVesselStore(), DemoVesselApi())
        with pytest.raises(ValueError, match="positive"):
            await fetcher.fetch_sample(count=0)

    @pytest.mark.asyncio
    async def test_per_vessel_failure_is_no_match(self, caplog):
        api = _FlakyVesselApi(failing={"413795172"})
        fetcher = RecordFetcher(DemoVesselStore(), api)

        result = await fetcher.fetch_sample(percent=100)

        assert sorted(api.calls) == ["413795171", "413795172", "413795173"]
        assert [record.mmsi for record in result.external] == ["413795171", "413795173"]
        assert result.missing_external == ("413795172",)
        assert "treating as no match" in caplog.text

    @pytest.mark.asyncio
    async def test_batch_failure_aborts_cycle(self):
        api = MagicMock(spec=DemoVesselApi)
        api.supports_batch = True
        api.__aenter__ = AsyncMock(return_value=api)
        api.__aexit__ = AsyncMock(return_value=None)
        api.fetch_batch = AsyncMock(side_effect=ExternalSourceError("HTTP 503 from vessel API"))
        fetcher = RecordFetcher(DemoVesselStore(), api)

        with pytest.raises(ExternalSourceError, match="HTTP 503"):
            await fetcher.fetch_sample(percent=100)
        api.__aexit__.assert_awaited()

    @pytest.mark.asyncio
    async def test_internal_failure_aborts_before_external(self):
        store = MagicMock(spec=DemoVesselStore)
        store.count.side_effect = InternalSourceError("Could not count vessels: down")
        api = _FlakyVesselApi(failing=set())
        fetcher = RecordFetcher(store, api)

        with pytest.raises(InternalSourceError):
            await fetcher.fetch_sample(percent=50)
        assert api.calls == []

    @pytest.mark.asyncio
    async def test_unmatched_vessels_reported(self):
        api = DemoVesselApi(rows=[external_row(MMSI="413795173")])
        fetcher = RecordFetcher(DemoVesselStore(), api)

        result = await fetcher.fetch_sample(percent=100)

        assert [record.mmsi for record in result.external] == ["413795173"]
        assert result.missing_external == ("413795171", "413795172")


# =============================================================================
# POSITION OVERLAY TESTS
# =============================================================================


class TestPositionOverlay:
    @pytest.mark.asyncio
    async def test_latest_position_overrides_stored_position(self):
        store = MagicMock(wraps=DemoVesselStore())
        store.supports_positions = True
        store.latest_position.side_effect = lambda mmsi, start, end: (
            PositionReport(mmsi=mmsi, timestamp="2024-06-01T00:00:00Z", lat=1.0, lon=2.0, speed=3.0)
            if mmsi == "413795171"
            else None
        )
        fetcher = RecordFetcher(store, DemoVesselApi())
        window = DateWindow(date(2024, 4, 1), date(2024, 12, 31))

        result = await fetcher.fetch_sample(count=2, window=window)

        first, second = result.internal
        assert (first.lat, first.lon, first.speed, first.heading) == (1.0, 2.0, 3.0, 310)
        assert second.lat == 23.960667
        store.latest_position.assert_any_call("413795171", window.start, window.end)

    @pytest.mark.asyncio
    async def test_no_overlay_without_window(self):
        store = MagicMock(wraps=DemoVesselStore())
        store.supports_positions = True
        fetcher = RecordFetcher(store, DemoVesselApi())

        await fetcher.fetch_sample(count=1)

        store.latest_position.assert_not_called()


# =============================================================================
# FACTORY TESTS
# =============================================================================


class TestFromSettings:
    def test_demo_settings_use_demo_sources(self, make_settings):
        fetcher = RecordFetcher.from_settings(make_settings(DATA_SOURCE="demo"))
        assert isinstance(fetcher._internal, DemoVesselStore)
        assert isinstance(fetcher._external, DemoVesselApi)

    def test_live_settings_use_supabase_and_http(self, live_settings):
        fetcher = RecordFetcher.from_settings(live_settings, supabase_client=MagicMock())
        assert isinstance(fetcher._internal, SupabaseVesselStore)
        assert isinstance(fetcher._external, VesselApiClient)

    def test_live_settings_create_supabase_client(self, live_settings):
        with patch("vessel_audit.supabase_client.create_supabase_client") as create:
            create.return_value = MagicMock()
            RecordFetcher.from_settings(live_settings)
        create.assert_called_once_with(live_settings)
