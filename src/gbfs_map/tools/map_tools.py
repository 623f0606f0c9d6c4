"""MCP tools for loading a GBFS system and querying the map."""

from gbfs_map.app import mcp
from gbfs_map.models.geometry import GeoPoint
from gbfs_map.models.responses import (
    LoadSummary,
    SetZoomResponse,
    StationDirectivesResponse,
    VehicleMarkersResponse,
    VehicleTypesResponse,
    ZonesAtResponse,
    ZoneStatisticsResponse,
)
from gbfs_map.services.map_controller import MapController

MIN_ZOOM = 0
MAX_ZOOM = 22

# Module-level controller (lazy-initialized)
_controller: MapController | None = None


def get_controller() -> MapController:
    """Get or create the map controller singleton."""
    global _controller
    if _controller is None:
        _controller = MapController()
    return _controller


def reset_service() -> None:
    """Drop the loaded system and the controller. Useful for testing."""
    global _controller
    if _controller is not None:
        _controller.close()
    _controller = None


@mcp.tool()
async def load_gbfs(source: str) -> LoadSummary:
    """Load a GBFS bikeshare system, replacing the one currently loaded.

    Examples:
        load_gbfs("https://gbfs.example.com/gbfs.json")  # remote discovery file
        load_gbfs("/data/my-system")  # directory holding gbfs.json and feed files

    Args:
        source: URL of the gbfs.json discovery file, or a local directory
            (or a file inside it) containing the feed files.

    Returns:
        LoadSummary with station, vehicle and zone counts plus any feeds that
        failed to load. If the discovery file itself cannot be loaded, the
        previously loaded system stays in place and an error is returned.
    """
    return await get_controller().load_system(source)


@mcp.tool()
def zones_at(lat: float, lon: float) -> ZonesAtResponse:
    """Find the geofencing zones at a location and how their rules combine.

    Zones are listed in precedence order (earlier zones win). For every
    vehicle type that has its own rules, the effective rules are listed
    best first, with universal rules merged in by precedence.

    Args:
        lat: Latitude (-90 to 90).
        lon: Longitude (-180 to 180).

    Returns:
        ZonesAtResponse with containing zones and per-vehicle-type precedence.
    """
    if not -90 <= lat <= 90:
        raise ValueError(f"Latitude must be between -90 and 90, got {lat}")
    if not -180 <= lon <= 180:
        raise ValueError(f"Longitude must be between -180 and 180, got {lon}")
    return get_controller().on_click(GeoPoint(lat=lat, lng=lon))


@mcp.tool()
def set_zoom(zoom: float) -> SetZoomResponse:
    """Zoom the map. Virtual stations switch to full areas at zoom 14 and above.

    Args:
        zoom: Zoom level (clamped to 0-22).

    Returns:
        SetZoomResponse with the display mode and whether stations were re-rendered.
    """
    zoom = min(max(zoom, MIN_ZOOM), MAX_ZOOM)
    return get_controller().set_zoom(zoom)


@mcp.tool()
def station_directives() -> StationDirectivesResponse:
    """Get the drawing instructions for every station at the current zoom.

    Physical stations are point markers. Virtual stations are centroid
    markers with a vehicle count badge when zoomed out, or polygons of their
    area when zoomed in.
    """
    return get_controller().station_directives()


@mcp.tool()
def vehicle_markers() -> VehicleMarkersResponse:
    """Get markers for free-floating vehicles at the current zoom.

    Large fleets are hidden when zoomed out; `visible` is False in that case.
    """
    return get_controller().vehicle_markers()


@mcp.tool()
def vehicle_types() -> VehicleTypesResponse:
    """List the system's vehicle types with readable labels and pricing."""
    return get_controller().vehicle_type_summaries()


@mcp.tool()
def zone_statistics() -> ZoneStatisticsResponse:
    """Count geofencing zones by restriction, based on each zone's first rule."""
    return get_controller().zone_statistics()
