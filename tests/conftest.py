"""Shared fixtures: a small GBFS 3.0 system written to disk."""

import json
from pathlib import Path
from typing import Any

import pytest

FEED_NAMES = [
    "system_information",
    "station_information",
    "station_status",
    "vehicle_status",
    "vehicle_types",
    "system_pricing_plans",
    "geofencing_zones",
]


def _en(text: str) -> list[dict[str, str]]:
    return [{"text": text, "language": "en"}]


def discovery_document(feed_names: list[str] = FEED_NAMES) -> dict[str, Any]:
    return {
        "last_updated": "2024-06-01T12:00:00+00:00",
        "ttl": 60,
        "version": "3.0",
        "data": {
            "feeds": [
                {"name": name, "url": f"https://gbfs.example.com/v3/{name}.json"}
                for name in feed_names
            ]
        },
    }


def feed_payloads() -> dict[str, dict[str, Any]]:
    """Payload of every sample feed, keyed by feed name."""
    return {
        "system_information": {
            "data": {
                "system_id": "test_system",
                "name": _en("Test Bikes"),
                "operator": _en("Test Operator"),
                "timezone": "America/Montreal",
                "languages": ["en"],
            }
        },
        "station_information": {
            "data": {
                "stations": [
                    {
                        "station_id": "p1",
                        "name": _en("Dock Street"),
                        "lat": 1.0,
                        "lon": 1.0,
                        "capacity": 10,
                        "address": "1 Dock Street",
                    },
                    {
                        "station_id": "v1",
                        "name": _en("Park Area"),
                        "is_virtual_station": True,
                        "station_area": {
                            "type": "MultiPolygon",
                            # (lng, lat) square around (11, 11)
                            "coordinates": [[[[10, 10], [12, 10], [12, 12], [10, 12]]]],
                        },
                    },
                ]
            }
        },
        "station_status": {
            "data": {
                "stations": [
                    {"station_id": "p1", "num_vehicles_available": 3, "num_docks_available": 7},
                    {"station_id": "v1", "num_vehicles_available": 4},
                ]
            }
        },
        "vehicle_status": {
            "data": {
                "vehicles": [
                    {
                        "vehicle_id": "veh1",
                        "lat": 1.0,
                        "lon": 1.0,
                        "vehicle_type_id": "scooter",
                        "current_fuel_percent": 0.1,
                    },
                    {"vehicle_id": "veh2", "lat": 1.5, "lon": 1.5, "is_disabled": True},
                    {"vehicle_id": "veh3", "lat": 0.5, "lon": 0.5, "is_reserved": True},
                ]
            }
        },
        "vehicle_types": {
            "data": {
                "vehicle_types": [
                    {
                        "vehicle_type_id": "scooter",
                        "form_factor": "scooter_standing",
                        "propulsion_type": "electric",
                        "name": _en("E-Scooter"),
                        "max_range_meters": 25000,
                        "default_pricing_plan_id": "plan1",
                    },
                    {
                        "vehicle_type_id": "bike",
                        "form_factor": "bicycle",
                        "propulsion_type": "human",
                        "name": _en("Classic"),
                    },
                ]
            }
        },
        "system_pricing_plans": {
            "data": {
                "plans": [
                    {
                        "plan_id": "plan1",
                        "name": _en("Pay as you go"),
                        "currency": "CAD",
                        "price": 1.25,
                        "is_taxable": True,
                        "description": _en("Unlock fee plus per-minute rate"),
                    }
                ]
            }
        },
        "geofencing_zones": {
            "data": {
                "geofencing_zones": {
                    "type": "FeatureCollection",
                    "features": [
                        {
                            "type": "Feature",
                            "properties": {
                                "name": _en("Scooter Free Square"),
                                "rules": [
                                    {
                                        "vehicle_type_ids": ["scooter"],
                                        "ride_start_allowed": False,
                                        "ride_end_allowed": False,
                                        "ride_through_allowed": False,
                                    }
                                ],
                            },
                            "geometry": {
                                "type": "MultiPolygon",
                                "coordinates": [[[[0, 0], [2, 0], [2, 2], [0, 2], [0, 0]]]],
                            },
                        },
                        {
                            "type": "Feature",
                            "properties": {
                                "rules": [
                                    {
                                        "ride_start_allowed": True,
                                        "ride_end_allowed": True,
                                        "ride_through_allowed": True,
                                        "maximum_speed_kph": 15,
                                    }
                                ],
                            },
                            "geometry": {
                                "type": "MultiPolygon",
                                "coordinates": [[[[-1, -1], [3, -1], [3, 3], [-1, 3], [-1, -1]]]],
                            },
                        },
                    ],
                }
            }
        },
    }


def write_system(directory: Path, feed_names: list[str] = FEED_NAMES) -> Path:
    """Write gbfs.json plus the given feeds into `directory`."""
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "gbfs.json").write_text(json.dumps(discovery_document()))
    payloads = feed_payloads()
    for name in feed_names:
        (directory / f"{name}.json").write_text(json.dumps(payloads[name]))
    return directory


@pytest.fixture
def sample_gbfs_dir(tmp_path: Path) -> Path:
    """A complete local GBFS system."""
    return write_system(tmp_path / "gbfs")
