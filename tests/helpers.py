"""
tests/helpers.py

Raw row builders for the internal store and the vessel API, shaped like the
payloads each source returns. Keyword overrides replace single fields.
"""

from __future__ import annotations

from typing import Any


def internal_row(**overrides: Any) -> dict[str, Any]:
    row: dict[str, Any] = {
        "uuid": "2b5ddd6e-a78c-b6b9-11b3-9925d6efbe42",
        "name": "XIANG",
        "mmsi": "413795171",
        "type": "Cargo",
        "lat": 22.960667,
        "lon": 113.50388,
        "speed": 0.1,
        "heading": 310,
        "navigation_status": "Stopped",
        "dep_port": "DONG GUAN",
        "dest_port": "LIJIANG",
        "atd_UTC": "2024-04-11T06:23:00Z",
        "eta_UTC": "2024-12-01T02:49:00Z",
    }
    row.update(overrides)
    return row


def external_row(**overrides: Any) -> dict[str, Any]:
    row: dict[str, Any] = {
        "NAME": "XIANG",
        "MMSI": "413795171",
        "TYPE": "Cargo",
        "LAT": 22.960667,
        "LON": 113.50388,
        "SPEED": 0.1,
        "HEADING": 310,
        "NAVIGATION_STATUS": "Stopped",
        "DEP_PORT": "DONG GUAN",
        "DEST_PORT": "LIJIANG",
        "ATD_UTC": "2024-04-11T06:23:00Z",
        "ETA_UTC": "2024-12-01T02:49:00Z",
    }
    row.update(overrides)
    return row
