"""
Vessel Audit - Comparison & Reconciliation

Joins internal vessel records with third-party vessel states by MMSI,
filters by departure date and flags every mapped field that disagrees.

Usage:
    from vessel_audit.comparator import DateWindow, compare_records

    report = compare_records(internal, external, DateWindow(start, end))
    print(report.error_rate, report.accuracy)

Every call recomputes the report from its inputs; nothing is cached.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Sequence

from .field_mapping import FIELD_MAPPINGS, FieldMapping, iter_fields
from .models import ExternalRecord, InternalRecord

MISSING_PLACEHOLDER = "-"

_HUNDRED = Decimal("100")
_CENTS = Decimal("0.01")


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass(frozen=True)
class DateWindow:
    """Inclusive calendar-date window applied to departure timestamps."""

    start: date
    end: date

    @property
    def start_instant(self) -> datetime:
        return datetime.combine(self.start, time.min, tzinfo=timezone.utc)

    @property
    def end_instant(self) -> datetime:
        return datetime.combine(self.end, time.max, tzinfo=timezone.utc)

    def contains(self, instant: datetime | None) -> bool:
        if instant is None:
            return False
        return self.start_instant <= instant <= self.end_instant


@dataclass(frozen=True)
class FieldDiff:
    """One compared field of a vessel pair."""

    label: str
    internal_value: Any
    external_value: Any
    differs: bool

    @property
    def internal_display(self) -> str:
        return display_value(self.internal_value)

    @property
    def external_display(self) -> str:
        return display_value(self.external_value)


@dataclass(frozen=True)
class ComparisonRow:
    """A matched vessel pair with at least one differing field."""

    internal: InternalRecord
    external: ExternalRecord
    fields: tuple[FieldDiff, ...]

    @property
    def mmsi(self) -> str:
        return self.internal.mmsi

    @property
    def title(self) -> str:
        return f"{display_value(self.internal.name)} (MMSI: {self.internal.mmsi})"

    @property
    def differing_labels(self) -> list[str]:
        return [diff.label for diff in self.fields if diff.differs]


@dataclass(frozen=True)
class ComparisonReport:
    """Comparison rows plus the summary statistics shown on the dashboard."""

    rows: tuple[ComparisonRow, ...]
    total_compared: int
    in_range: int
    differing: int
    error_rate: Decimal
    accuracy: Decimal
    unmatched: tuple[str, ...] = field(default_factory=tuple)

    @property
    def has_differences(self) -> bool:
        return bool(self.rows)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "total_compared": self.total_compared,
            "in_range": self.in_range,
            "differing": self.differing,
            "error_rate": f"{self.error_rate:.2f}",
            "accuracy": f"{self.accuracy:.2f}",
            "unmatched": list(self.unmatched),
            "rows": [
                {
                    "mmsi": row.mmsi,
                    "name": row.internal.name,
                    "fields": [
                        {
                            "label": diff.label,
                            "internal": diff.internal_display,
                            "external": diff.external_display,
                            "differs": diff.differs,
                        }
                        for diff in row.fields
                    ],
                }
                for row in self.rows
            ],
        }


# =============================================================================
# VALUE HELPERS
# =============================================================================


def display_value(value: Any) -> str:
    if value is None:
        return MISSING_PLACEHOLDER
    return str(value)


def values_differ(left: Any, right: Any) -> bool:
    """Strict inequality: no cross-type coercion, missing only equals missing."""
    if left is None or right is None:
        return (left is None) != (right is None)
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is not type(right) or left != right
    left_numeric = isinstance(left, (int, float))
    right_numeric = isinstance(right, (int, float))
    if left_numeric and right_numeric:
        return left != right
    if left_numeric != right_numeric or type(left) is not type(right):
        return True
    return left != right


def percentage(numerator: int, denominator: int) -> Decimal:
    """numerator/denominator as a percentage rounded half-up to 2 places."""
    if denominator <= 0:
        return Decimal("0.00")
    ratio = Decimal(numerator) / Decimal(denominator) * _HUNDRED
    return ratio.quantize(_CENTS, rounding=ROUND_HALF_UP)


# =============================================================================
# RECONCILIATION
# =============================================================================


def filter_in_window(records: Iterable[InternalRecord], window: DateWindow) -> list[InternalRecord]:
    """Internal records whose departure parses and falls inside the window."""
    return [record for record in records if window.contains(record.departure)]


def index_by_mmsi(records: Iterable[ExternalRecord]) -> dict[str, ExternalRecord]:
    """Map MMSI to record; the first record seen for an MMSI wins."""
    index: dict[str, ExternalRecord] = {}
    for record in records:
        index.setdefault(record.mmsi, record)
    return index


def diff_pair(
    internal: InternalRecord,
    external: ExternalRecord,
    mappings: Sequence[FieldMapping] = FIELD_MAPPINGS,
) -> tuple[FieldDiff, ...]:
    diffs = []
    for mapping in iter_fields(tuple(mappings)):
        internal_value = internal.value(mapping.internal_key)
        external_value = external.value(mapping.external_key)
        diffs.append(
            FieldDiff(
                label=mapping.label,
                internal_value=internal_value,
                external_value=external_value,
                differs=values_differ(internal_value, external_value),
            )
        )
    return tuple(diffs)


def compare_records(
    internal: Sequence[InternalRecord],
    external: Sequence[ExternalRecord],
    window: DateWindow,
    mappings: Sequence[FieldMapping] = FIELD_MAPPINGS,
) -> ComparisonReport:
    """
    Reconcile internal records against external records for a date window.

    Records outside the window (or without a parseable departure) are not
    counted. In-range records without an external match count towards
    ``in_range`` but never appear as rows. Matched pairs with no differing
    field count towards ``in_range`` only.

    Args:
        internal: Internal records held by the dashboard
        external: External records from the same fetch cycle
        window: Inclusive departure-date window
        mappings: Field table to compare (defaults to FIELD_MAPPINGS)

    Returns:
        ComparisonReport with rows and summary statistics
    """
    in_range = filter_in_window(internal, window)
    external_index = index_by_mmsi(external)

    rows: list[ComparisonRow] = []
    unmatched: list[str] = []
    for record in in_range:
        match = external_index.get(record.mmsi)
        if match is None:
            unmatched.append(record.mmsi)
            continue
        diffs = diff_pair(record, match, mappings)
        if any(diff.differs for diff in diffs):
            rows.append(ComparisonRow(internal=record, external=match, fields=diffs))

    error_rate = percentage(len(rows), len(in_range))
    return ComparisonReport(
        rows=tuple(rows),
        total_compared=len(internal),
        in_range=len(in_range),
        differing=len(rows),
        error_rate=error_rate,
        accuracy=_HUNDRED - error_rate,
        unmatched=tuple(unmatched),
    )
