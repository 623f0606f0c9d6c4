"""Free-floating vehicle markers."""

import html
import logging
from typing import Any

from gbfs_map.data.feed_loader import feed_data, parse_records
from gbfs_map.models.gbfs import Vehicle
from gbfs_map.models.rendering import MarkerDirective, MarkerIcon

logger = logging.getLogger(__name__)

LOW_BATTERY_PERCENT = 20

VEHICLE_COLORS = {
    "available": "#4CAF50",
    "disabled": "#757575",
    "reserved": "#FF9800",
    "low_battery": "#F44336",
}


def build_vehicles(payload: dict[str, Any] | None) -> list[Vehicle]:
    """Parse vehicle_status.json (or free_bike_status.json).

    GBFS 3.x lists vehicles under data.vehicles, 2.x under data.bikes.
    """
    data = feed_data(payload, "vehicle_status")
    raw = data.get("vehicles") or data.get("bikes") or []
    if not raw:
        logger.info("No vehicle data found")
    return parse_records(Vehicle, raw, "vehicle")


def battery_percent(vehicle: Vehicle) -> int | None:
    if vehicle.current_fuel_percent is None:
        return None
    return int(vehicle.current_fuel_percent * 100 + 0.5)


def vehicle_status_key(vehicle: Vehicle) -> str:
    """Which color bucket a vehicle falls into; the first matching wins."""
    if vehicle.is_disabled:
        return "disabled"
    if vehicle.is_reserved:
        return "reserved"
    battery = battery_percent(vehicle)
    if battery is not None and battery < LOW_BATTERY_PERCENT:
        return "low_battery"
    return "available"


def should_show_vehicles(
    vehicle_count: int,
    zoom: float,
    min_zoom: int = 12,
    max_without_clustering: int = 100,
) -> bool:
    """Large fleets are hidden when zoomed out."""
    return zoom >= min_zoom or vehicle_count <= max_without_clustering


def vehicle_popup(vehicle: Vehicle, vehicle_type_label: str | None = None) -> str:
    """Popup HTML for a vehicle."""
    parts = ['<div class="popup-content">', f"<h4>Vehicle {html.escape(vehicle.vehicle_id)}</h4>"]
    if vehicle.vehicle_type_id:
        label = vehicle_type_label or vehicle.vehicle_type_id
        parts.append(f"<div><strong>Type:</strong> {html.escape(label)}</div>")
    if vehicle.is_reserved is not None:
        parts.append(f"<div><strong>Reserved:</strong> {'Yes' if vehicle.is_reserved else 'No'}</div>")
    if vehicle.is_disabled is not None:
        parts.append(f"<div><strong>Disabled:</strong> {'Yes' if vehicle.is_disabled else 'No'}</div>")
    battery = battery_percent(vehicle)
    if battery is not None:
        parts.append(f"<div><strong>Battery:</strong> {battery}%</div>")
    if vehicle.current_range_meters is not None:
        parts.append(f"<div><strong>Range:</strong> {vehicle.current_range_meters / 1000:.1f} km</div>")
    parts.append("</div>")
    return "".join(parts)


def vehicle_directives(
    vehicles: list[Vehicle],
    labels: dict[str, str] | None = None,
) -> list[MarkerDirective]:
    """Point markers for every vehicle with coordinates.

    Args:
        vehicles: Parsed vehicles.
        labels: Optional vehicle_type_id -> display label mapping.
    """
    labels = labels or {}
    directives: list[MarkerDirective] = []
    for vehicle in vehicles:
        # a vehicle reserved or riding may omit its position
        if vehicle.lat is None or vehicle.lon is None:
            continue
        directives.append(
            MarkerDirective(
                element_id=vehicle.vehicle_id,
                position=(vehicle.lat, vehicle.lon),
                icon=MarkerIcon(
                    css_class="vehicle-marker",
                    color=VEHICLE_COLORS[vehicle_status_key(vehicle)],
                    size=8,
                ),
                popup=vehicle_popup(vehicle, labels.get(vehicle.vehicle_type_id or "")),
            )
        )
    return directives
