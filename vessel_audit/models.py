"""Pydantic models for vessel records from the internal store and the vessel API."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Iterable, Iterator

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError

Number = int | float

# Compared fields hold the source value exactly as received.
Raw = Any


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    Naive values are taken to be UTC. Anything unparseable yields None.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _coerce_mmsi(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        value = str(value)
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValueError("MMSI must not be empty")
    return value


Mmsi = Annotated[str, BeforeValidator(_coerce_mmsi)]


class VesselRecord(BaseModel):
    """Base for vessel snapshots; fields are addressed by their source key."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    def value(self, key: str) -> Any:
        """Return the value stored under ``key`` in the source schema.

        Keys are the source aliases (``atd_UTC``, ``SPEED``); plain field
        names are accepted as well.
        """
        for name, info in type(self).model_fields.items():
            if info.alias == key or name == key:
                return getattr(self, name)
        raise KeyError(key)

    @property
    def departure(self) -> datetime | None:
        return parse_timestamp(self.atd_utc)  # type: ignore[attr-defined]


class InternalRecord(VesselRecord):
    """A vessel row from the internal store (snake_case keys)."""

    uuid: Raw = None
    mmsi: Mmsi
    name: Raw = None
    vessel_type: Raw = Field(default=None, alias="type")
    lat: Raw = None
    lon: Raw = None
    speed: Raw = None
    heading: Raw = None
    navigation_status: Raw = None
    dep_port: Raw = None
    dest_port: Raw = None
    atd_utc: Raw = Field(default=None, alias="atd_UTC")
    eta_utc: Raw = Field(default=None, alias="eta_UTC")


class ExternalRecord(VesselRecord):
    """A vessel state from the third-party API (uppercase keys)."""

    mmsi: Mmsi = Field(alias="MMSI")
    name: Raw = Field(default=None, alias="NAME")
    vessel_type: Raw = Field(default=None, alias="TYPE")
    lat: Raw = Field(default=None, alias="LAT")
    lon: Raw = Field(default=None, alias="LON")
    speed: Raw = Field(default=None, alias="SPEED")
    heading: Raw = Field(default=None, alias="HEADING")
    navigation_status: Raw = Field(default=None, alias="NAVIGATION_STATUS")
    dep_port: Raw = Field(default=None, alias="DEP_PORT")
    dest_port: Raw = Field(default=None, alias="DEST_PORT")
    atd_utc: Raw = Field(default=None, alias="ATD_UTC")
    eta_utc: Raw = Field(default=None, alias="ETA_UTC")


class PositionReport(BaseModel):
    """Latest-known position of a vessel from the position report collection."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    mmsi: Mmsi
    timestamp: datetime
    lat: Number | None = None
    lon: Number | None = None
    speed: Number | None = None
    heading: Number | None = None

    def overlay(self) -> dict[str, Any]:
        """Position fields to apply on top of an InternalRecord."""
        return {
            key: getattr(self, key)
            for key in ("lat", "lon", "speed", "heading")
            if getattr(self, key) is not None
        }


def _unwrap_vessel(item: Any) -> Any:
    if isinstance(item, dict) and isinstance(item.get("AIS"), dict):
        return item["AIS"]
    return item


def iter_vessel_states(payload: Any) -> Iterator[dict[str, Any]]:
    """Yield raw vessel-state mappings from a vessel API response body."""
    if isinstance(payload, dict):
        if "vessels" in payload:
            payload = payload["vessels"]
        else:
            payload = [payload]
    if not isinstance(payload, list):
        raise ValueError(f"Unexpected vessel payload type: {type(payload).__name__}")
    for item in payload:
        item = _unwrap_vessel(item)
        if isinstance(item, dict):
            yield item


def parse_external_records(payload: Any) -> list[ExternalRecord]:
    """Parse a vessel API response body, skipping entries without a usable MMSI."""
    records: list[ExternalRecord] = []
    for raw in iter_vessel_states(payload):
        try:
            records.append(ExternalRecord.model_validate(raw))
        except ValidationError:
            continue
    return records


def parse_internal_records(rows: Iterable[dict[str, Any]]) -> list[InternalRecord]:
    """Parse internal store rows; rows without a usable MMSI are dropped."""
    records: list[InternalRecord] = []
    for row in rows:
        try:
            records.append(InternalRecord.model_validate(row))
        except ValidationError:
            continue
    return records
