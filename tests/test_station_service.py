"""Tests for station ingestion and station styling."""

import pytest

from gbfs_map.models.gbfs import StationInformation, StationStatus
from gbfs_map.models.geometry import GeoPoint
from gbfs_map.services.station_service import (
    build_station_items,
    hover_style,
    station_icon,
    station_popup,
    virtual_station_style,
)

AREA = {"type": "MultiPolygon", "coordinates": [[[[0, 0], [2, 0], [2, 2], [0, 2]]]]}


def _info(*stations):
    return {"data": {"stations": list(stations)}}


def test_build_station_items_joins_status():
    """Status joins information by station_id."""
    items = build_station_items(
        _info(
            {"station_id": "p1", "name": "Dock", "lat": 1.0, "lon": 2.0},
            {"station_id": "v1", "is_virtual_station": True, "station_area": AREA},
        ),
        _info({"station_id": "p1", "num_vehicles_available": 2}),
    )

    assert [i.station_id for i in items] == ["p1", "v1"]
    assert items[0].status.num_vehicles_available == 2
    assert items[0].is_virtual is False
    assert items[1].status is None
    assert items[1].is_virtual is True
    assert items[1].area[0].outer[1] == GeoPoint(lat=0, lng=2)


def test_build_station_items_reads_v2_status():
    """GBFS 2.x reports num_bikes_available."""
    items = build_station_items(
        _info({"station_id": "p1", "lat": 1.0, "lon": 2.0}),
        _info({"station_id": "p1", "num_bikes_available": 6, "num_docks_available": 4}),
    )
    assert items[0].status.num_vehicles_available == 6


def test_build_station_items_skips_stations_without_location(caplog):
    """Stations with neither area nor point are skipped."""
    items = build_station_items(
        _info(
            {"station_id": "nowhere"},
            {"station_id": "p1", "lat": 1.0, "lon": 2.0},
            {"no_id": True},
        )
    )

    assert [i.station_id for i in items] == ["p1"]
    assert "has no location data" in caplog.text


def test_virtual_station_with_unusable_area_falls_back_to_point():
    """A bad station_area falls back to lat/lon when present."""
    items = build_station_items(
        _info(
            {
                "station_id": "v1",
                "is_virtual_station": True,
                "lat": 1.0,
                "lon": 2.0,
                "station_area": {"type": "Polygon", "coordinates": AREA["coordinates"][0]},
            },
            {
                "station_id": "v2",
                "is_virtual_station": True,
                "station_area": {"type": "MultiPolygon", "coordinates": [[[[0, 0], ["bad"]]]]},
            },
        )
    )

    assert [i.station_id for i in items] == ["v1"]
    assert items[0].area is None
    assert items[0].is_virtual is False


def test_build_station_items_without_payload():
    """No station_information, no stations."""
    assert build_station_items(None) == []


def test_build_station_items_ignores_malformed_payloads():
    """Unexpected feed shapes are treated as absent feeds."""
    assert build_station_items({"data": ["oops"]}) == []
    assert build_station_items([]) == []

    items = build_station_items(
        _info({"station_id": "p1", "lat": 1.0, "lon": 2.0}), {"data": "oops"}
    )
    assert [i.station_id for i in items] == ["p1"]
    assert items[0].status is None


def test_station_icon_colors():
    """Green with vehicles, orange when empty or unknown."""
    available = StationStatus(station_id="s", num_vehicles_available=1)
    empty = StationStatus(station_id="s", num_vehicles_available=0)

    assert station_icon(available).color == "#4CAF50"
    assert station_icon(empty).color == "#FF9800"
    assert station_icon(None).color == "#FF9800"
    assert station_icon(available).badge is None


@pytest.mark.parametrize(("available", "badge"), [(0, "0"), (99, "99"), (100, "99+")])
def test_centroid_badge(available, badge):
    """Badges are capped at 99+."""
    status = StationStatus(station_id="s", num_vehicles_available=available)
    icon = station_icon(status, virtual_centroid=True)

    assert icon.badge == badge
    assert icon.size == 20


def test_virtual_station_style_by_zoom():
    """Lower zooms draw areas heavier."""
    status = StationStatus(station_id="s", num_vehicles_available=3)

    low = virtual_station_style(status, zoom=14)
    high = virtual_station_style(status, zoom=16)

    assert (low.weight, low.fill_opacity, low.dash_array) == (4, 0.8, "10, 6")
    assert (high.weight, high.fill_opacity, high.dash_array) == (3, 0.6, "8, 4")
    assert virtual_station_style(None, zoom=16).color == "#FF9800"


def test_hover_style_emphasizes():
    """Hover thickens the outline and fill."""
    style = virtual_station_style(None, zoom=16)
    hover = hover_style(style)

    assert hover.weight == style.weight + 2
    assert hover.fill_opacity == pytest.approx(0.8)
    assert hover.dash_array == style.dash_array


def test_station_popup():
    """Popups escape names and list the station details."""
    station = StationInformation(
        station_id="s1",
        name=[{"text": "Parc <Lafontaine>", "language": "fr"}],
        capacity=12,
        address="Rue Sherbrooke",
    )
    status = StationStatus(
        station_id="s1", num_vehicles_available=3, num_docks_available=9, is_installed=False
    )

    popup = station_popup(station, status)

    assert "Parc &lt;Lafontaine&gt;" in popup
    assert "Physical Station" in popup
    assert "<strong>Capacity:</strong> 12" in popup
    assert "<strong>Vehicles Available:</strong> 3" in popup
    assert "<strong>Docks Available:</strong> 9" in popup
    assert "Not Installed" in popup
    assert "Rue Sherbrooke" in popup


def test_station_popup_omits_missing_fields():
    """Missing details are left out of the popup."""
    popup = station_popup(StationInformation(station_id="s1", is_virtual_station=True), None)

    assert "Virtual Station (Area)" in popup
    assert "<h4>s1</h4>" in popup
    assert "Capacity" not in popup
    assert "Address" not in popup
