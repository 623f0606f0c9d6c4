"""Owns one loaded GBFS system and reacts to map events.

The controller ties the feed loader to the derived map state: zones for
click queries, stations for the zoom-adaptive render state, and the vehicle
layer. Map events arrive as explicit calls (`on_zoom_end`, `on_click`) rather
than framework callbacks.
"""

import logging
from collections.abc import Sequence
from pathlib import Path

from gbfs_map.data.config import MapConfig, get_map_config
from gbfs_map.data.feed_loader import FeedLoadResult, GBFSLoader, GBFSLoadError
from gbfs_map.data.rate_limiter import RateLimiter
from gbfs_map.models.gbfs import PricingPlan, SystemInformation, Vehicle, VehicleType
from gbfs_map.models.geometry import GeoPoint
from gbfs_map.models.responses import (
    FeedErrorInfo,
    LoadSummary,
    SetZoomResponse,
    StationDirectivesResponse,
    VehicleMarkersResponse,
    VehicleTypeInfo,
    VehicleTypePrecedence,
    VehicleTypesResponse,
    ZoneInfo,
    ZoneRuleInfo,
    ZonesAtResponse,
    ZoneStatisticsResponse,
)
from gbfs_map.models.zones import ALL_VEHICLE_TYPES, RankedRule, ZoneFeature
from gbfs_map.services.debounce import Debouncer
from gbfs_map.services.precedence import analyze, effective_rules, has_vehicle_specific_rules
from gbfs_map.services.station_service import build_station_items
from gbfs_map.services.vehicle_service import build_vehicles, should_show_vehicles, vehicle_directives
from gbfs_map.services.vehicle_type_service import (
    build_pricing_plans,
    build_vehicle_types,
    describe_vehicle_type,
    pricing_plan_for,
)
from gbfs_map.services.virtual_stations import (
    InMemoryMapSurface,
    MapSurface,
    VirtualStationRenderState,
)
from gbfs_map.services.zone_service import (
    build_zones,
    classify_zone,
    compute_zone_statistics,
    find_zones_containing,
    zone_colors,
)

logger = logging.getLogger(__name__)

GBFSSource = str | Path | Sequence[Path]


def _rule_info(ranked: RankedRule) -> ZoneRuleInfo:
    rule = ranked.rule
    return ZoneRuleInfo(
        zone_id=ranked.zone.id,
        zone_name=ranked.zone.display_name,
        rule_index=ranked.rule_index,
        precedence_score=ranked.precedence_score,
        vehicle_type_ids=sorted(rule.vehicle_type_ids) if rule.vehicle_type_ids else None,
        ride_start_allowed=rule.ride_start_allowed,
        ride_end_allowed=rule.ride_end_allowed,
        ride_through_allowed=rule.ride_through_allowed,
        station_parking=rule.station_parking,
        maximum_speed_kph=rule.maximum_speed_kph,
    )


def _zone_info(zone: ZoneFeature) -> ZoneInfo:
    stroke, fill = zone_colors(zone)
    return ZoneInfo(
        zone_id=zone.id,
        name=zone.display_name,
        category=classify_zone(zone.rules).value,
        stroke_color=stroke,
        fill_color=fill,
        rule_count=len(zone.rules),
        start=zone.start.isoformat() if zone.start else None,
        end=zone.end.isoformat() if zone.end else None,
    )


class MapController:
    """A loaded GBFS system plus its render state.

    Usage:
        controller = MapController()
        summary = await controller.load_system("https://example.com/gbfs.json")
        controller.on_zoom_end(15)
        zones = controller.on_click(GeoPoint(45.5, -73.6))
    """

    def __init__(self, config: MapConfig | None = None, surface: MapSurface | None = None):
        """Initialize the controller.

        Args:
            config: Map configuration; defaults to the environment config.
            surface: Rendering layer; an InMemoryMapSurface when omitted.
        """
        self._config = config or get_map_config()
        self.surface = surface if surface is not None else InMemoryMapSurface()
        self.render_state = VirtualStationRenderState(
            self.surface,
            zoom_threshold=self._config.virtual_station_zoom_threshold,
            low_zoom_style_cutoff=self._config.low_zoom_style_cutoff,
        )
        self._zoom_debouncer = Debouncer(self._config.zoom_debounce_seconds, self._apply_zoom)
        # one limiter for the controller's lifetime, so reloads stay spaced out too
        self._rate_limiter = RateLimiter(self._config.min_request_interval_seconds)

        self.zoom: float = self._config.initial_zoom
        self.refresh_count = 0
        self.loader: GBFSLoader | None = None
        self.source: str | None = None
        self.system_info: SystemInformation | None = None
        self.zones: list[ZoneFeature] = []
        self.vehicles: list[Vehicle] = []
        self.vehicle_types: list[VehicleType] = []
        self.pricing_plans: list[PricingPlan] = []

    @property
    def is_loaded(self) -> bool:
        return self.loader is not None

    async def _discover(self, source: GBFSSource) -> tuple[GBFSLoader, str]:
        """Validate the new source's discovery document on a fresh loader."""
        loader = GBFSLoader(self._config, self._rate_limiter)

        if isinstance(source, str) and source.startswith(("http://", "https://")):
            await loader.load_from_url(source)
            return loader, source

        if isinstance(source, (str, Path)):
            path = Path(source)
            if path.is_dir():
                loader.load_from_directory(path)
            elif path.is_file():
                # a single file stands for the directory holding the feed files
                loader.load_from_directory(path.parent)
            else:
                raise GBFSLoadError(f"No such file or directory: {source}")
            return loader, str(path)

        paths = [Path(p) for p in source]
        loader.load_from_files(paths)
        return loader, ", ".join(p.name for p in paths)

    async def load_system(self, source: GBFSSource) -> LoadSummary:
        """Load a GBFS system, replacing whatever was loaded before.

        Prior state is torn down only once the new discovery document has
        validated and every derived layer has been built, so a bad source
        leaves the current map untouched. Feeds with an unexpected shape
        are treated as absent.

        Args:
            source: Discovery URL, a directory of feed files (or a file in
                it), or an explicit list of feed files.

        Returns:
            LoadSummary of what was loaded, including per-feed errors.

        Raises:
            GBFSLoadError: If the discovery document cannot be loaded.
        """
        loader, label = await self._discover(source)
        result = await loader.load_feeds(loader.map_feeds())

        # derive everything from the new feeds before touching the current map
        system_info = loader.system_information()
        zones = build_zones(loader.get_feed("geofencing_zones"))
        vehicle_types = build_vehicle_types(loader.get_feed("vehicle_types"))
        pricing_plans = build_pricing_plans(loader.get_feed("system_pricing_plans"))
        vehicles = build_vehicles(
            loader.get_feed("vehicle_status") or loader.get_feed("free_bike_status")
        )
        items = build_station_items(
            loader.get_feed("station_information"), loader.get_feed("station_status")
        )

        self._reset()
        self.loader = loader
        self.source = label
        self.system_info = system_info
        self.zones = zones
        self.vehicle_types = vehicle_types
        self.pricing_plans = pricing_plans
        self.vehicles = vehicles
        self.render_state.load(items, self.zoom)

        summary = self._summary(label, result)
        logger.info(
            f"Loaded {summary.system_name or label}: {summary.stations} stations, "
            f"{summary.vehicles} vehicles, {summary.zone_statistics.zones} zones"
        )
        return summary

    def _reset(self) -> None:
        self._zoom_debouncer.cancel()
        self.render_state.clear()
        self.loader = None
        self.source = None
        self.system_info = None
        self.zones = []
        self.vehicles = []
        self.vehicle_types = []
        self.pricing_plans = []

    def _summary(self, label: str, result: FeedLoadResult) -> LoadSummary:
        discovery = self.loader.discovery if self.loader else None
        info = self.system_info
        return LoadSummary(
            source=label,
            system_name=info.display_name if info else None,
            operator=info.operator_name if info else None,
            gbfs_version=discovery.version if discovery else None,
            feeds_requested=result.requested,
            feeds_loaded=result.loaded,
            errors=[FeedErrorInfo(feed=e.feed, error=e.error) for e in result.errors],
            stations=len(self.render_state.items),
            virtual_stations=len(self.render_state.virtual_items),
            vehicles=len(self.vehicles),
            vehicle_types=len(self.vehicle_types),
            pricing_plans=len(self.pricing_plans),
            zone_statistics=self.zone_statistics(),
            display_mode=self.render_state.mode,
        )

    def on_zoom_end(self, zoom: float) -> None:
        """Record a zoom event; only the last one of a burst is acted upon."""
        self._zoom_debouncer.trigger(zoom)

    def settle_zoom(self) -> bool:
        """Act on a pending zoom event immediately.

        Returns:
            True if a zoom event was pending.
        """
        return self._zoom_debouncer.flush()

    def _apply_zoom(self, zoom: float) -> None:
        self.zoom = zoom
        if self.render_state.apply_zoom(zoom):
            self.refresh_count += 1
            logger.info(f"Zoom {zoom}: virtual stations now drawn as {self.render_state.mode.value}")

    def set_zoom(self, zoom: float) -> SetZoomResponse:
        """Zoom to a level and settle it right away."""
        before = self.refresh_count
        self.on_zoom_end(zoom)
        self.settle_zoom()
        return SetZoomResponse(
            zoom=self.zoom,
            mode=self.render_state.mode,
            rerendered=self.refresh_count != before,
        )

    def on_click(self, point: GeoPoint) -> ZonesAtResponse:
        """Zones containing a point and the rule precedence among them."""
        containing = find_zones_containing(point, self.zones)
        analysis = analyze(containing, self._config.precedence_zone_stride)

        precedence: list[VehicleTypePrecedence] = []
        if ALL_VEHICLE_TYPES in analysis:
            precedence.append(
                VehicleTypePrecedence(
                    scope=str(ALL_VEHICLE_TYPES),
                    label="All vehicle types",
                    rules=[_rule_info(r) for r in analysis[ALL_VEHICLE_TYPES]],
                )
            )
        specific = sorted(
            (scope.vehicle_type_id for scope in analysis if scope != ALL_VEHICLE_TYPES)
        )
        for vehicle_type_id in specific:
            precedence.append(
                VehicleTypePrecedence(
                    scope=vehicle_type_id,
                    label=describe_vehicle_type(vehicle_type_id, self.vehicle_types),
                    rules=[_rule_info(r) for r in effective_rules(analysis, vehicle_type_id)],
                )
            )

        return ZonesAtResponse(
            lat=point.lat,
            lon=point.lng,
            zones=[_zone_info(z) for z in containing],
            count=len(containing),
            has_vehicle_specific_rules=has_vehicle_specific_rules(analysis),
            precedence=precedence,
        )

    def zone_statistics(self) -> ZoneStatisticsResponse:
        stats = compute_zone_statistics(self.zones)
        return ZoneStatisticsResponse(
            zones=stats.zones,
            no_ride=stats.no_ride,
            speed_limited=stats.speed_limited,
            station_parking=stats.station_parking,
            by_category={category.value: count for category, count in stats.by_category.items()},
        )

    def station_directives(self) -> StationDirectivesResponse:
        directives = self.render_state.directives()
        return StationDirectivesResponse(
            mode=self.render_state.mode,
            zoom=self.zoom,
            directives=directives,
            count=len(directives),
        )

    def vehicle_markers(self) -> VehicleMarkersResponse:
        """Vehicle markers for the current zoom (none while the fleet is hidden)."""
        visible = should_show_vehicles(
            len(self.vehicles),
            self.zoom,
            self._config.min_zoom_for_vehicles,
            self._config.max_vehicles_without_clustering,
        )
        labels = {
            vt.vehicle_type_id: describe_vehicle_type(vt.vehicle_type_id, self.vehicle_types)
            for vt in self.vehicle_types
        }
        return VehicleMarkersResponse(
            visible=visible,
            total=len(self.vehicles),
            directives=vehicle_directives(self.vehicles, labels) if visible else [],
        )

    def vehicle_type_summaries(self) -> VehicleTypesResponse:
        """Vehicle types with their labels and applicable pricing plan."""
        infos: list[VehicleTypeInfo] = []
        for vehicle_type in self.vehicle_types:
            plan = pricing_plan_for(vehicle_type, self.pricing_plans)
            infos.append(
                VehicleTypeInfo(
                    vehicle_type_id=vehicle_type.vehicle_type_id,
                    label=describe_vehicle_type(vehicle_type.vehicle_type_id, self.vehicle_types),
                    form_factor=vehicle_type.form_factor,
                    propulsion_type=vehicle_type.propulsion_type,
                    max_range_meters=vehicle_type.max_range_meters,
                    pricing_plan=plan.display_name if plan else None,
                    price=plan.price if plan else None,
                    currency=plan.currency if plan else None,
                )
            )
        return VehicleTypesResponse(vehicle_types=infos, count=len(infos))

    def close(self) -> None:
        """Cancel pending work and remove everything from the map."""
        self._reset()

