"""Zoom-adaptive rendering of virtual (area-based) stations.

Below the zoom threshold a virtual station is drawn as a centroid marker
carrying its vehicle count; at or above it, as its full area. Switching
modes re-renders only virtual stations, reusing derived data cached on the
first render after a load. Physical stations are drawn once as point markers.
"""

import logging
from collections.abc import Hashable, Sequence
from typing import Protocol

from gbfs_map.models.rendering import DisplayMode, MarkerDirective, PolygonDirective, RenderDirective
from gbfs_map.models.stations import StationCache, StationRenderItem
from gbfs_map.services.geometry import centroid, to_lat_lng_lists
from gbfs_map.services.station_service import (
    hover_style,
    station_icon,
    station_popup,
    virtual_station_style,
)

logger = logging.getLogger(__name__)

DEFAULT_ZOOM_THRESHOLD = 14


class MapSurface(Protocol):
    """The rendering layer's element container."""

    def add(self, directive: RenderDirective) -> Hashable:
        """Draw an element and return a handle for later removal."""
        ...

    def remove(self, handle: Hashable) -> None:
        """Remove a previously drawn element."""
        ...


class InMemoryMapSurface:
    """MapSurface that just keeps the drawn directives, keyed by handle."""

    def __init__(self):
        self._elements: dict[int, RenderDirective] = {}
        self._next_handle = 0

    def add(self, directive: RenderDirective) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._elements[handle] = directive
        return handle

    def remove(self, handle: Hashable) -> None:
        self._elements.pop(handle, None)

    @property
    def directives(self) -> list[RenderDirective]:
        """Currently drawn elements in drawing order."""
        return list(self._elements.values())

    def __len__(self) -> int:
        return len(self._elements)


def mode_for_zoom(zoom: float, threshold: int = DEFAULT_ZOOM_THRESHOLD) -> DisplayMode:
    """CENTROID below the threshold, POLYGON at or above it."""
    return DisplayMode.CENTROID if zoom < threshold else DisplayMode.POLYGON


class VirtualStationRenderState:
    """Tracks the display mode and drawn element of every loaded station.

    Usage:
        state = VirtualStationRenderState(surface)
        state.load(items, zoom=12)
        state.apply_zoom(15)  # re-renders virtual stations as areas
    """

    def __init__(
        self,
        surface: MapSurface,
        zoom_threshold: int = DEFAULT_ZOOM_THRESHOLD,
        low_zoom_style_cutoff: int = 16,
    ):
        """Initialize the render state.

        Args:
            surface: Rendering layer that elements are attached to.
            zoom_threshold: First zoom level at which areas are drawn.
            low_zoom_style_cutoff: Below this zoom, areas get a bolder style.
        """
        self._surface = surface
        self._zoom_threshold = zoom_threshold
        self._low_zoom_style_cutoff = low_zoom_style_cutoff
        self._items: list[StationRenderItem] = []
        self._directives: dict[int, RenderDirective] = {}
        self._mode: DisplayMode | None = None
        self._zoom: float | None = None

    @property
    def mode(self) -> DisplayMode | None:
        """Current virtual station display mode (None before the first render)."""
        return self._mode

    @property
    def zoom(self) -> float | None:
        return self._zoom

    @property
    def items(self) -> list[StationRenderItem]:
        return list(self._items)

    @property
    def virtual_items(self) -> list[StationRenderItem]:
        return [item for item in self._items if item.is_virtual]

    def directives(self) -> list[RenderDirective]:
        """Directives of everything currently drawn, in station order."""
        return [self._directives[id(item)] for item in self._items if id(item) in self._directives]

    def load(self, items: Sequence[StationRenderItem], zoom: float) -> int:
        """Replace all stations and draw them for the given zoom.

        Returns:
            Number of stations drawn.
        """
        self.clear()
        self._zoom = zoom
        self._mode = mode_for_zoom(zoom, self._zoom_threshold)

        for item in items:
            directive = self._build_directive(item, zoom)
            if directive is None:
                continue
            self._attach(item, directive)
            self._items.append(item)

        logger.debug(f"Rendered {len(self._items)} stations in {self._mode.value} mode")
        return len(self._items)

    def apply_zoom(self, zoom: float) -> bool:
        """React to a settled zoom level.

        Returns:
            True if the display mode changed and virtual stations were re-rendered.
        """
        self._zoom = zoom
        new_mode = mode_for_zoom(zoom, self._zoom_threshold)
        if new_mode == self._mode:
            return False
        self._mode = new_mode
        self.refresh(zoom)
        return True

    def refresh(self, zoom: float) -> int:
        """Re-draw every virtual station for the given zoom.

        Returns:
            Number of virtual stations re-drawn.
        """
        virtual_items = self.virtual_items
        if not virtual_items:
            return 0

        logger.debug(f"Refreshing {len(virtual_items)} virtual stations for zoom {zoom}")
        redrawn = 0
        for item in virtual_items:
            self._detach(item)
            directive = self._build_directive(item, zoom)
            if directive is None:
                continue
            self._attach(item, directive)
            redrawn += 1
        return redrawn

    def clear(self) -> None:
        """Detach every drawn element and forget all stations."""
        for item in self._items:
            self._detach(item)
        self._items = []
        self._directives = {}
        self._mode = None

    def ensure_cache(self, item: StationRenderItem) -> StationCache:
        """Compute the station's derived data once, then reuse it."""
        if item.cache is None:
            if item.area is None:
                raise ValueError(f"Station {item.station_id} has no area")
            item.cache = StationCache(
                popup_content=station_popup(item.station, item.status),
                centroid=centroid(item.area),
                lat_lngs=to_lat_lng_lists(item.area),
            )
        return item.cache

    def _build_directive(self, item: StationRenderItem, zoom: float) -> RenderDirective | None:
        station = item.station

        if not item.is_virtual:
            if not station.has_point:
                logger.warning(f"Station {item.station_id} has no point location, skipping")
                return None
            return MarkerDirective(
                element_id=item.station_id,
                position=(station.lat, station.lon),
                icon=station_icon(item.status),
                popup=station_popup(station, item.status),
            )

        try:
            cache = self.ensure_cache(item)
        except ValueError as e:
            logger.warning(f"Skipping virtual station {item.station_id}: {e}")
            return None

        if mode_for_zoom(zoom, self._zoom_threshold) == DisplayMode.CENTROID:
            return MarkerDirective(
                element_id=item.station_id,
                position=(cache.centroid.lat, cache.centroid.lng),
                icon=station_icon(item.status, virtual_centroid=True),
                popup=cache.popup_content,
            )

        style = virtual_station_style(item.status, zoom, self._low_zoom_style_cutoff)
        return PolygonDirective(
            element_id=item.station_id,
            lat_lngs=cache.lat_lngs,
            style=style,
            hover_style=hover_style(style),
            popup=cache.popup_content,
        )

    def _attach(self, item: StationRenderItem, directive: RenderDirective) -> None:
        item.element = self._surface.add(directive)
        self._directives[id(item)] = directive

    def _detach(self, item: StationRenderItem) -> None:
        if item.element is not None:
            self._surface.remove(item.element)
            item.element = None
        self._directives.pop(id(item), None)
