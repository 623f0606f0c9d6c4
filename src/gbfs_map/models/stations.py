"""Per-station render bookkeeping."""

from collections.abc import Hashable
from dataclasses import dataclass, field

from gbfs_map.models.gbfs import StationInformation, StationStatus
from gbfs_map.models.geometry import GeoPoint, MultiPolygon


@dataclass(frozen=True)
class StationCache:
    """Derived data computed once per station per load.

    Status updates do not refresh it, so the popup reflects the status at
    the time the cache was built.
    """

    popup_content: str
    centroid: GeoPoint
    lat_lngs: list[list[list[tuple[float, float]]]]


@dataclass(eq=False)
class StationRenderItem:
    """A loaded station together with whatever is currently drawn for it."""

    station: StationInformation
    status: StationStatus | None = None
    area: MultiPolygon | None = None  # (lat, lng) station area, virtual stations only
    element: Hashable | None = None  # handle returned by the map surface
    cache: StationCache | None = field(default=None, repr=False)

    @property
    def station_id(self) -> str:
        return self.station.station_id

    @property
    def is_virtual(self) -> bool:
        """True if the station is drawn from its area rather than a point."""
        return self.station.is_virtual_station and self.area is not None
