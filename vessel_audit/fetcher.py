"""
Vessel Audit - Record Fetcher

Samples internal vessel records and looks up the matching third-party
vessel states. One call to ``fetch_sample`` is one fetch cycle; callers
replace the records they hold with its result in full.

Failure policy:
- internal store failure aborts the cycle (InternalSourceError)
- batch vessel API failure aborts the cycle (ExternalSourceError)
- a failed per-vessel lookup only means that vessel has no external match
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass, field
from typing import Sequence

from .comparator import DateWindow
from .core_config import Settings
from .models import ExternalRecord, InternalRecord
from .sources import (
    DemoVesselApi,
    DemoVesselStore,
    ExternalSource,
    InternalSource,
    SupabaseVesselStore,
    VesselApiClient,
)

logger = logging.getLogger(__name__)


def sample_size(percent: int, total: int) -> int:
    """Number of records to sample: max(1, floor(percent% of total))."""
    if isinstance(percent, bool) or not 1 <= percent <= 100:
        raise ValueError(f"sample percent must be between 1 and 100, got {percent!r}")
    if total < 0:
        raise ValueError(f"total must not be negative, got {total!r}")
    return max(1, math.floor(percent / 100 * total))


@dataclass(frozen=True)
class FetchResult:
    """Records produced by one fetch cycle."""

    internal: tuple[InternalRecord, ...]
    external: tuple[ExternalRecord, ...]
    sample_size: int
    generation: int = 0
    missing_external: tuple[str, ...] = field(default_factory=tuple)


class RecordFetcher:
    """
    Retrieves internal records and their external counterparts.

    Usage:
        fetcher = RecordFetcher.from_settings(settings)
        result = asyncio.run(fetcher.fetch_sample(percent=10))
    """

    def __init__(self, internal: InternalSource, external: ExternalSource):
        self._internal = internal
        self._external = external

    @classmethod
    def from_settings(cls, settings: Settings, supabase_client=None) -> "RecordFetcher":
        """Build the demo or live fetcher described by ``settings``."""
        if settings.is_demo:
            return cls(DemoVesselStore(), DemoVesselApi())

        if supabase_client is None:
            from .supabase_client import create_supabase_client

            supabase_client = create_supabase_client(settings)
        return cls(
            SupabaseVesselStore(supabase_client, settings),
            VesselApiClient(settings),
        )

    async def fetch_sample(
        self,
        percent: int | None = None,
        *,
        count: int | None = None,
        window: DateWindow | None = None,
        generation: int = 0,
    ) -> FetchResult:
        """
        Run one fetch cycle.

        Args:
            percent: Sample size as a percentage (1-100) of available vessels
            count: Absolute sample size; used instead of ``percent``
            window: Date window for the position overlay, when enabled
            generation: Fetch generation, echoed back for the caller's guard

        Returns:
            FetchResult with the sampled internal records and the external
            records that could be found for them

        Raises:
            InternalSourceError: The internal store query failed
            ExternalSourceError: A batch vessel API call failed
        """
        extra = {"fetch_id": generation}
        size = await self._resolve_size(percent, count)
        logger.info("Sampling %d vessel(s)", size, extra=extra)

        internal = await asyncio.to_thread(self._internal.fetch, size)
        if window is not None and self._internal.supports_positions:
            internal = await self._overlay_positions(internal, window)

        mmsis = [record.mmsi for record in internal]
        async with self._external:
            if self._external.supports_batch:
                external = await self._external.fetch_batch(mmsis)
            else:
                external = await self._lookup_each(mmsis, generation)

        found = {record.mmsi for record in external}
        missing = tuple(mmsi for mmsi in mmsis if mmsi not in found)
        logger.info(
            "Fetched %d internal / %d external record(s); %d without external match",
            len(internal),
            len(external),
            len(missing),
            extra=extra,
        )
        return FetchResult(
            internal=tuple(internal),
            external=tuple(external),
            sample_size=size,
            generation=generation,
            missing_external=missing,
        )

    async def _resolve_size(self, percent: int | None, count: int | None) -> int:
        if count is not None:
            if count < 1:
                raise ValueError(f"sample count must be positive, got {count!r}")
            return count
        if percent is None:
            raise ValueError("either percent or count is required")
        total = await asyncio.to_thread(self._internal.count)
        return sample_size(percent, total)

    async def _overlay_positions(
        self, records: Sequence[InternalRecord], window: DateWindow
    ) -> list[InternalRecord]:
        overlaid = []
        for record in records:
            report = await asyncio.to_thread(
                self._internal.latest_position, record.mmsi, window.start, window.end
            )
            if report is None:
                overlaid.append(record)
            else:
                overlaid.append(record.model_copy(update=report.overlay()))
        return overlaid

    async def _lookup_each(self, mmsis: Sequence[str], generation: int) -> list[ExternalRecord]:
        results = await asyncio.gather(
            *(self._external.fetch_one(mmsi) for mmsi in mmsis),
            return_exceptions=True,
        )
        records: list[ExternalRecord] = []
        for mmsi, result in zip(mmsis, results):
            if isinstance(result, BaseException):
                logger.warning(
                    "Vessel lookup failed for %s; treating as no match: %s",
                    mmsi,
                    result,
                    extra={"fetch_id": generation},
                )
            elif result is not None:
                records.append(result)
        return records
