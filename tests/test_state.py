"""Tests for vessel_audit.state: dashboard state transitions and the fetch guard."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from vessel_audit.fetcher import FetchResult, RecordFetcher
from vessel_audit.sources import DemoVesselApi, DemoVesselStore, InternalSourceError
from vessel_audit.state import SAMPLE_LABEL, SAMPLING_LABEL, DashboardState, run_sample


@pytest.fixture
def demo_fetcher() -> RecordFetcher:
    return RecordFetcher(DemoVesselStore(), DemoVesselApi())


def _result(internal=(), external=(), generation=0) -> FetchResult:
    return FetchResult(
        internal=tuple(internal),
        external=tuple(external),
        sample_size=len(internal),
        generation=generation,
    )


class TestDefaults:
    def test_dataclass_defaults(self):
        state = DashboardState()
        assert state.sample_percent == 10
        assert state.start_date == date(2024, 4, 1)
        assert state.end_date == date(2024, 12, 31)
        assert state.loading is False
        assert state.error == ""
        assert state.has_data is False

    def test_from_settings(self, make_settings):
        settings = make_settings(
            DEFAULT_SAMPLE_PERCENT=25,
            DEFAULT_START_DATE="2024-01-01",
            DEFAULT_END_DATE="2024-02-01",
        )
        state = DashboardState.from_settings(settings)
        assert state.sample_percent == 25
        assert state.window.start == date(2024, 1, 1)
        assert state.window.end == date(2024, 2, 1)


class TestInputs:
    def test_sample_percent_bounds(self):
        state = DashboardState()
        state.set_sample_percent(100)
        assert state.sample_percent == 100
        with pytest.raises(ValueError):
            state.set_sample_percent(0)
        with pytest.raises(ValueError):
            state.set_sample_percent(101)

    def test_changing_inputs_does_not_fetch(self):
        state = DashboardState()
        state.set_sample_percent(50)
        state.set_date_range(date(2024, 5, 1), date(2024, 5, 31))
        assert state.generation == 0
        assert state.loading is False


class TestFetchLifecycle:
    def test_begin_sample_enters_loading(self):
        state = DashboardState(error="old failure")
        generation = state.begin_sample()
        assert generation == 1
        assert state.loading is True
        assert state.error == ""
        assert state.button_label == SAMPLING_LABEL

    def test_commit_replaces_records(self, make_internal, make_external):
        state = DashboardState(internal=(make_internal(mmsi="old"),))
        generation = state.begin_sample()

        assert state.commit(generation, _result([make_internal()], [make_external()])) is True

        assert [record.mmsi for record in state.internal] == ["413795171"]
        assert len(state.external) == 1
        assert state.loading is False
        assert state.button_label == SAMPLE_LABEL

    def test_fail_keeps_previous_records(self, make_internal):
        state = DashboardState(internal=(make_internal(),))
        generation = state.begin_sample()

        assert state.fail(generation, "Could not load vessels") is True

        assert state.error == "Could not load vessels"
        assert state.loading is False
        assert len(state.internal) == 1

    def test_superseded_commit_is_discarded(self, make_internal):
        state = DashboardState()
        first = state.begin_sample()
        second = state.begin_sample()

        assert state.commit(first, _result([make_internal(mmsi="stale")])) is False
        assert state.internal == ()
        assert state.loading is True

        assert state.commit(second, _result([make_internal(mmsi="fresh")])) is True
        assert [record.mmsi for record in state.internal] == ["fresh"]

    def test_superseded_failure_is_ignored(self):
        state = DashboardState()
        first = state.begin_sample()
        state.begin_sample()

        assert state.fail(first, "late error") is False
        assert state.error == ""


class TestReport:
    def test_date_range_filters_held_records(self, make_internal, make_external):
        state = DashboardState(
            internal=(make_internal(speed=1.0),),
            external=(make_external(),),
        )
        assert state.report().differing == 1

        state.set_date_range(date(2025, 1, 1), date(2025, 12, 31))
        report = state.report()

        assert report.in_range == 0
        assert report.differing == 0
        assert report.total_compared == 1


class TestRunSample:
    def test_demo_cycle_commits(self, demo_fetcher):
        state = DashboardState()

        assert run_sample(state, demo_fetcher) is True

        assert len(state.internal) == 1
        report = state.report()
        assert report.in_range == 1
        assert report.differing == 1
        assert report.error_rate == Decimal("100.00")

    def test_full_demo_sample(self, demo_fetcher):
        state = DashboardState()
        state.set_sample_percent(100)

        run_sample(state, demo_fetcher)
        report = state.report()

        assert report.total_compared == 3
        assert report.in_range == 3
        assert report.differing == 2
        assert report.error_rate == Decimal("66.67")
        assert report.accuracy == Decimal("33.33")

    def test_fetch_error_sets_message(self):
        fetcher = MagicMock(spec=RecordFetcher)
        fetcher.fetch_sample = AsyncMock(side_effect=InternalSourceError("Could not load vessels: down"))
        state = DashboardState()

        assert run_sample(state, fetcher) is False

        assert state.error == "Could not load vessels: down"
        assert state.loading is False

    def test_unexpected_error_is_recorded_and_raised(self):
        fetcher = MagicMock(spec=RecordFetcher)
        fetcher.fetch_sample = AsyncMock(side_effect=KeyError("mmsi"))
        state = DashboardState()

        with pytest.raises(KeyError):
            run_sample(state, fetcher)

        assert state.error.startswith("Unexpected error")
        assert state.loading is False
