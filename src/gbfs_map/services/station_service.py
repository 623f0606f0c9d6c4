"""Station ingestion plus marker/polygon styling for stations."""

import html
import logging
from typing import Any

from gbfs_map.data.feed_loader import feed_data, parse_records
from gbfs_map.models.gbfs import StationInformation, StationStatus
from gbfs_map.models.rendering import MarkerIcon, PathStyle
from gbfs_map.models.stations import StationRenderItem
from gbfs_map.services.geometry import multipolygon_from_geojson

logger = logging.getLogger(__name__)

AVAILABLE_COLOR = "#4CAF50"
EMPTY_COLOR = "#FF9800"

# Centroid badges show at most this many vehicles
MAX_BADGE_COUNT = 99


def _available(status: StationStatus | None) -> int:
    if status is None:
        return 0
    return status.num_vehicles_available or 0


def station_icon(status: StationStatus | None, virtual_centroid: bool = False) -> MarkerIcon:
    """Marker icon: green with vehicles available, orange otherwise.

    Virtual station centroids are larger and carry the vehicle count.
    """
    available = _available(status)
    color = AVAILABLE_COLOR if available > 0 else EMPTY_COLOR

    if virtual_centroid:
        badge = f"{MAX_BADGE_COUNT}+" if available > MAX_BADGE_COUNT else str(available)
        return MarkerIcon(css_class="virtual-station-centroid", color=color, size=20, badge=badge)
    return MarkerIcon(css_class="station-marker", color=color, size=12)


def virtual_station_style(
    status: StationStatus | None,
    zoom: float,
    low_zoom_cutoff: int = 16,
) -> PathStyle:
    """Area style for a virtual station, bolder below `low_zoom_cutoff`."""
    available = _available(status)
    is_low_zoom = zoom < low_zoom_cutoff
    return PathStyle(
        color=AVAILABLE_COLOR if available > 0 else EMPTY_COLOR,
        fill_color="rgba(76, 175, 80, 0.4)" if available > 0 else "rgba(255, 152, 0, 0.4)",
        fill_opacity=0.8 if is_low_zoom else 0.6,
        weight=4 if is_low_zoom else 3,
        dash_array="10, 6" if is_low_zoom else "8, 4",
        css_class="virtual-station-area",
    )


def hover_style(style: PathStyle) -> PathStyle:
    """Emphasized variant of a style shown while the pointer is over the area."""
    return style.model_copy(
        update={"weight": style.weight + 2, "fill_opacity": round(style.fill_opacity + 0.2, 2)}
    )


def station_popup(station: StationInformation, status: StationStatus | None) -> str:
    """Popup HTML for a station. Optional fields are simply omitted."""
    kind = "Virtual Station (Area)" if station.is_virtual_station else "Physical Station"
    parts = [
        '<div class="popup-content">',
        f"<h4>{html.escape(station.display_name)}</h4>",
        f"<div><strong>ID:</strong> {html.escape(station.station_id)}</div>",
        f"<div><strong>Type:</strong> {kind}</div>",
    ]
    if station.capacity is not None:
        parts.append(f"<div><strong>Capacity:</strong> {station.capacity}</div>")

    if status is not None:
        if status.num_vehicles_available is not None:
            parts.append(
                f"<div><strong>Vehicles Available:</strong> {status.num_vehicles_available}</div>"
            )
        if status.num_docks_available is not None:
            parts.append(f"<div><strong>Docks Available:</strong> {status.num_docks_available}</div>")
        if status.is_installed is not None:
            installed = "Installed" if status.is_installed else "Not Installed"
            parts.append(f"<div><strong>Status:</strong> {installed}</div>")

    if station.address:
        parts.append(f"<div><strong>Address:</strong> {html.escape(station.address)}</div>")

    parts.append("</div>")
    return "".join(parts)


def build_station_items(
    station_information: dict[str, Any] | None,
    station_status: dict[str, Any] | None = None,
) -> list[StationRenderItem]:
    """Join station_information with station_status into render items.

    Virtual stations with a usable MultiPolygon area render as areas; any
    other station with coordinates renders as a point. Stations with
    neither are skipped.

    Args:
        station_information: Parsed station_information.json payload.
        station_status: Parsed station_status.json payload, if loaded.

    Returns:
        Render items in feed order.
    """
    info_data = feed_data(station_information, "station_information")
    raw_stations = info_data.get("stations") or []
    if not raw_stations:
        logger.info("No station information found")
        return []

    status_data = feed_data(station_status, "station_status")
    statuses = {
        s.station_id: s
        for s in parse_records(StationStatus, status_data.get("stations") or [], "station_status")
    }

    items: list[StationRenderItem] = []
    for station in parse_records(StationInformation, raw_stations, "station_information"):
        status = statuses.get(station.station_id)

        area = None
        if station.is_virtual_station and station.station_area is not None:
            if station.station_area.type != "MultiPolygon":
                logger.warning(
                    f"Station {station.station_id} area is {station.station_area.type}, expected MultiPolygon"
                )
            else:
                try:
                    area = multipolygon_from_geojson(station.station_area.coordinates)
                except (ValueError, TypeError) as e:
                    logger.warning(f"Station {station.station_id} has an invalid area: {e}")
            if area is not None and not (area and area[0].outer):
                logger.warning(f"Station {station.station_id} has an empty area")
                area = None

        if area is None and not station.has_point:
            logger.warning(
                f"Station {station.station_id} has no location data (neither lat/lon nor station_area)"
            )
            continue

        items.append(StationRenderItem(station=station, status=status, area=area))

    logger.info(f"Loaded {len(items)} of {len(raw_stations)} stations")
    return items
