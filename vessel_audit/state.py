"""Dashboard view state: user parameters, loading/error flags and held records.

Only the most recently started fetch generation may commit or fail; results
from superseded generations are dropped.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date

from .comparator import ComparisonReport, DateWindow, compare_records
from .core_config import Settings
from .fetcher import FetchResult, RecordFetcher
from .models import ExternalRecord, InternalRecord
from .sources import FetchError

logger = logging.getLogger(__name__)

SAMPLE_LABEL = "Sample Data"
SAMPLING_LABEL = "Sampling..."


@dataclass
class DashboardState:
    sample_percent: int = 10
    start_date: date = date(2024, 4, 1)
    end_date: date = date(2024, 12, 31)
    loading: bool = False
    error: str = ""
    internal: tuple[InternalRecord, ...] = field(default_factory=tuple)
    external: tuple[ExternalRecord, ...] = field(default_factory=tuple)
    generation: int = 0

    @classmethod
    def from_settings(cls, settings: Settings) -> "DashboardState":
        return cls(
            sample_percent=settings.DEFAULT_SAMPLE_PERCENT,
            start_date=settings.DEFAULT_START_DATE,
            end_date=settings.DEFAULT_END_DATE,
        )

    # =========================================================================
    # USER INPUTS (never trigger a fetch)
    # =========================================================================

    def set_sample_percent(self, percent: int) -> None:
        if isinstance(percent, bool) or not 1 <= int(percent) <= 100:
            raise ValueError(f"sample percent must be between 1 and 100, got {percent!r}")
        self.sample_percent = int(percent)

    def set_date_range(self, start: date, end: date) -> None:
        self.start_date = start
        self.end_date = end

    @property
    def window(self) -> DateWindow:
        return DateWindow(self.start_date, self.end_date)

    @property
    def button_label(self) -> str:
        return SAMPLING_LABEL if self.loading else SAMPLE_LABEL

    @property
    def has_data(self) -> bool:
        return bool(self.internal or self.external)

    # =========================================================================
    # FETCH LIFECYCLE
    # =========================================================================

    def begin_sample(self) -> int:
        """Enter the loading state and return the new fetch generation."""
        self.generation += 1
        self.loading = True
        self.error = ""
        return self.generation

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    def commit(self, generation: int, result: FetchResult) -> bool:
        """Replace held records with ``result`` if it belongs to the latest fetch."""
        if not self.is_current(generation):
            logger.info(
                "Discarding result of superseded fetch (latest=%d)",
                self.generation,
                extra={"fetch_id": generation},
            )
            return False
        self.internal = result.internal
        self.external = result.external
        self.loading = False
        return True

    def fail(self, generation: int, message: str) -> bool:
        """Record a failed fetch if it belongs to the latest fetch."""
        if not self.is_current(generation):
            logger.info(
                "Ignoring failure of superseded fetch (latest=%d)",
                self.generation,
                extra={"fetch_id": generation},
            )
            return False
        self.error = message
        self.loading = False
        return True

    # =========================================================================
    # DERIVED VIEW
    # =========================================================================

    def report(self) -> ComparisonReport:
        """Comparison of the held records for the current window, computed fresh."""
        return compare_records(self.internal, self.external, self.window)


def run_sample(state: DashboardState, fetcher: RecordFetcher) -> bool:
    """Run one sample cycle for ``state``; returns True if records were replaced.

    Fetch errors are flattened into ``state.error``. Anything else is
    recorded the same way and then re-raised.
    """
    generation = state.begin_sample()
    try:
        result = asyncio.run(
            fetcher.fetch_sample(
                percent=state.sample_percent,
                window=state.window,
                generation=generation,
            )
        )
    except FetchError as e:
        state.fail(generation, str(e))
        return False
    except Exception as e:
        state.fail(generation, f"Unexpected error: {e}")
        raise
    return state.commit(generation, result)
