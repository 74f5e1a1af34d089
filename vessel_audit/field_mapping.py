"""Comparable vessel fields and where each source keeps them.

The internal store uses snake_case keys; the vessel API uses uppercase
keys. Adding or removing a compared field means editing FIELD_MAPPINGS only.
"""

from __future__ import annotations

from typing import Iterator, NamedTuple


class FieldMapping(NamedTuple):
    label: str
    internal_key: str
    external_key: str


FIELD_MAPPINGS: tuple[FieldMapping, ...] = (
    FieldMapping("Name", "name", "NAME"),
    FieldMapping("MMSI", "mmsi", "MMSI"),
    FieldMapping("Type", "type", "TYPE"),
    FieldMapping("Status", "navigation_status", "NAVIGATION_STATUS"),
    FieldMapping("Lat", "lat", "LAT"),
    FieldMapping("Lon", "lon", "LON"),
    FieldMapping("Speed", "speed", "SPEED"),
    FieldMapping("Heading", "heading", "HEADING"),
    FieldMapping("Departure", "dep_port", "DEP_PORT"),
    FieldMapping("Destination", "dest_port", "DEST_PORT"),
    FieldMapping("ATD", "atd_UTC", "ATD_UTC"),
    FieldMapping("ETA", "eta_UTC", "ETA_UTC"),
)


def iter_fields(mappings: tuple[FieldMapping, ...] = FIELD_MAPPINGS) -> Iterator[FieldMapping]:
    """Yield mappings in display order."""
    yield from mappings
