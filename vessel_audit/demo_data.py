"""Bundled demo vessels used when DATA_SOURCE=demo.

The external rows mirror the internal ones under the vessel API's uppercase
keys, with small deliberate speed disagreements on two vessels.
"""

from __future__ import annotations

from typing import Any

DEMO_INTERNAL_ROWS: tuple[dict[str, Any], ...] = (
    {
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
    },
    {
        "uuid": "2b5ddd6e-a78c-b6b9-11b3-9925d6efbe43",
        "name": "YANG",
        "mmsi": "413795172",
        "type": "Cargo",
        "lat": 23.960667,
        "lon": 114.50388,
        "speed": 1.2,
        "heading": 90,
        "navigation_status": "Underway",
        "dep_port": "NINGBO",
        "dest_port": "SHANGHAI",
        "atd_UTC": "2024-04-12T06:23:00Z",
        "eta_UTC": "2024-12-02T02:49:00Z",
    },
    {
        "uuid": "2b5ddd6e-a78c-b6b9-11b3-9925d6efbe44",
        "name": "OCEANIC",
        "mmsi": "413795173",
        "type": "Tanker",
        "lat": 24.960667,
        "lon": 115.50388,
        "speed": 2.5,
        "heading": 180,
        "navigation_status": "Moored",
        "dep_port": "SHENZHEN",
        "dest_port": "HONG KONG",
        "atd_UTC": "2024-05-01T08:00:00Z",
        "eta_UTC": "2024-05-01T12:00:00Z",
    },
)

DEMO_EXTERNAL_ROWS: tuple[dict[str, Any], ...] = (
    {
        "NAME": "XIANG",
        "MMSI": "413795171",
        "TYPE": "Cargo",
        "LAT": 22.960667,
        "LON": 113.50388,
        "SPEED": 0.2,
        "HEADING": 310,
        "NAVIGATION_STATUS": "Stopped",
        "DEP_PORT": "DONG GUAN",
        "DEST_PORT": "LIJIANG",
        "ATD_UTC": "2024-04-11T06:23:00Z",
        "ETA_UTC": "2024-12-01T02:49:00Z",
    },
    {
        "NAME": "YANG",
        "MMSI": "413795172",
        "TYPE": "Cargo",
        "LAT": 23.960667,
        "LON": 114.50388,
        "SPEED": 1.2,
        "HEADING": 90,
        "NAVIGATION_STATUS": "Underway",
        "DEP_PORT": "NINGBO",
        "DEST_PORT": "SHANGHAI",
        "ATD_UTC": "2024-04-12T06:23:00Z",
        "ETA_UTC": "2024-12-02T02:49:00Z",
    },
    {
        "NAME": "OCEANIC",
        "MMSI": "413795173",
        "TYPE": "Tanker",
        "LAT": 24.960667,
        "LON": 115.50388,
        "SPEED": 2.7,
        "HEADING": 180,
        "NAVIGATION_STATUS": "Moored",
        "DEP_PORT": "SHENZHEN",
        "DEST_PORT": "HONG KONG",
        "ATD_UTC": "2024-05-01T08:00:00Z",
        "ETA_UTC": "2024-05-01T12:00:00Z",
    },
)
