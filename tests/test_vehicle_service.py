"""Tests for vehicle markers."""

from gbfs_map.models.gbfs import Vehicle
from gbfs_map.services.vehicle_service import (
    battery_percent,
    build_vehicles,
    should_show_vehicles,
    vehicle_directives,
    vehicle_popup,
    vehicle_status_key,
)


def test_build_vehicles_v3():
    """GBFS 3.x lists vehicles under data.vehicles."""
    vehicles = build_vehicles({"data": {"vehicles": [{"vehicle_id": "a", "lat": 1, "lon": 2}]}})
    assert vehicles[0].vehicle_id == "a"


def test_build_vehicles_v2_bikes():
    """GBFS 2.x free_bike_status lists bikes with bike_id."""
    vehicles = build_vehicles({"data": {"bikes": [{"bike_id": "b1", "lat": 1, "lon": 2}]}})
    assert [v.vehicle_id for v in vehicles] == ["b1"]


def test_build_vehicles_without_payload():
    """No feed, no vehicles."""
    assert build_vehicles(None) == []
    assert build_vehicles({"data": {"vehicles": []}}) == []


def test_build_vehicles_ignores_malformed_payloads():
    """A data block that is not an object, or vehicles that are not a list, yield nothing."""
    assert build_vehicles({"data": [{"vehicle_id": "a"}]}) == []
    assert build_vehicles([{"vehicle_id": "a"}]) == []
    assert build_vehicles({"data": {"vehicles": {"vehicle_id": "a"}}}) == []


def test_vehicle_status_priority():
    """Disabled beats reserved beats low battery."""
    assert vehicle_status_key(Vehicle(vehicle_id="a", is_disabled=True, is_reserved=True)) == "disabled"
    assert vehicle_status_key(Vehicle(vehicle_id="a", is_reserved=True, current_fuel_percent=0.05)) == "reserved"
    assert vehicle_status_key(Vehicle(vehicle_id="a", current_fuel_percent=0.19)) == "low_battery"
    assert vehicle_status_key(Vehicle(vehicle_id="a", current_fuel_percent=0.2)) == "available"
    assert vehicle_status_key(Vehicle(vehicle_id="a")) == "available"


def test_battery_percent():
    """Fuel fraction rounds to a whole percent."""
    assert battery_percent(Vehicle(vehicle_id="a")) is None
    assert battery_percent(Vehicle(vehicle_id="a", current_fuel_percent=0.456)) == 46


def test_should_show_vehicles():
    """Large fleets need a minimum zoom."""
    assert should_show_vehicles(100, zoom=3)
    assert not should_show_vehicles(101, zoom=11)
    assert should_show_vehicles(5000, zoom=12)
    assert should_show_vehicles(10, zoom=3, max_without_clustering=5, min_zoom=2)


def test_vehicle_directives_skip_vehicles_without_position():
    """Vehicles without coordinates are not drawn."""
    vehicles = [
        Vehicle(vehicle_id="a", lat=45.5, lon=-73.6, vehicle_type_id="scooter"),
        Vehicle(vehicle_id="b", is_reserved=True),
    ]

    directives = vehicle_directives(vehicles, {"scooter": "E-Scooter"})

    assert [d.element_id for d in directives] == ["a"]
    assert directives[0].position == (45.5, -73.6)
    assert directives[0].icon.color == "#4CAF50"
    assert "E-Scooter" in directives[0].popup


def test_vehicle_directives_keep_zero_coordinates():
    """A vehicle on the prime meridian or the equator is still drawn."""
    vehicles = [
        Vehicle(vehicle_id="greenwich", lat=51.48, lon=0.0),
        Vehicle(vehicle_id="equator", lat=0.0, lon=-78.5),
    ]

    directives = vehicle_directives(vehicles)

    assert [d.element_id for d in directives] == ["greenwich", "equator"]
    assert directives[0].position == (51.48, 0.0)


def test_vehicle_popup():
    """The popup escapes the id and lists battery and range."""
    popup = vehicle_popup(
        Vehicle(
            vehicle_id="v<1>",
            vehicle_type_id="bike",
            is_reserved=False,
            is_disabled=True,
            current_fuel_percent=0.5,
            current_range_meters=12500,
        )
    )

    assert "Vehicle v&lt;1&gt;" in popup
    assert "<strong>Type:</strong> bike" in popup
    assert "<strong>Reserved:</strong> No" in popup
    assert "<strong>Disabled:</strong> Yes" in popup
    assert "<strong>Battery:</strong> 50%" in popup
    assert "<strong>Range:</strong> 12.5 km" in popup
