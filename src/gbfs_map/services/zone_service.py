"""Geofencing zone ingestion, containment queries and zone statistics.

Zones are rebuilt wholesale from each geofencing_zones payload. Malformed
features are logged and skipped; they never block the remaining zones.
"""

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from gbfs_map.data.feed_loader import feed_data
from gbfs_map.models.gbfs import GeofencingFeature, GeofencingRule, localized
from gbfs_map.models.geometry import GeoPoint
from gbfs_map.models.zones import ZoneCategory, ZoneFeature, ZoneRule, ZoneStatistics
from gbfs_map.services.geometry import (
    MIN_RING_POINTS,
    bounding_box,
    multipolygon_from_geojson,
    point_in_polygon,
)

logger = logging.getLogger(__name__)

# Stroke / fill colors per zone category
ZONE_COLORS: dict[ZoneCategory, tuple[str, str]] = {
    ZoneCategory.NO_RIDE: ("#f44336", "rgba(244, 67, 54, 0.3)"),
    ZoneCategory.PARTIAL_RESTRICTION: ("#9C27B0", "rgba(156, 39, 176, 0.3)"),
    ZoneCategory.STATION_PARKING: ("#4CAF50", "rgba(76, 175, 80, 0.3)"),
    ZoneCategory.SPEED_LIMITED: ("#FFC107", "rgba(255, 193, 7, 0.3)"),
    ZoneCategory.DEFAULT: ("#2196F3", "rgba(33, 150, 243, 0.3)"),
}


def _parse_timestamp(value: int | str | None) -> datetime | None:
    """Parse a 2.x POSIX timestamp or a 3.x RFC3339 string."""
    if value is None:
        return None
    try:
        if isinstance(value, int):
            return datetime.fromtimestamp(value, UTC)
        parsed = datetime.fromisoformat(value)
    except (ValueError, OverflowError, OSError):
        logger.warning(f"Ignoring unparseable zone timestamp: {value!r}")
        return None
    # RFC3339 always carries an offset; treat a bare local time as UTC
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed


def rule_from_feed(rule: GeofencingRule) -> ZoneRule:
    """Convert a feed rule into a ZoneRule."""
    vehicle_type_ids = None
    if rule.vehicle_type_ids is not None:
        vehicle_type_ids = frozenset(rule.vehicle_type_ids)
    return ZoneRule(
        ride_start_allowed=rule.ride_start_allowed,
        ride_end_allowed=rule.ride_end_allowed,
        ride_through_allowed=rule.ride_through_allowed,
        vehicle_type_ids=vehicle_type_ids,
        station_parking=rule.station_parking,
        maximum_speed_kph=rule.maximum_speed_kph,
    )


def build_zones(payload: dict[str, Any] | None) -> list[ZoneFeature]:
    """Build the zone collection from a geofencing_zones feed payload.

    Only MultiPolygon features are kept. A zone's id is the position of its
    feature in the payload.

    Args:
        payload: Parsed geofencing_zones.json, or None when the feed is absent.

    Returns:
        Zones in feed order.
    """
    data = feed_data(payload, "geofencing_zones")
    collection = data.get("geofencing_zones") or {}
    raw_features = collection.get("features") if isinstance(collection, dict) else None
    if not raw_features:
        logger.info("No geofencing zones data found")
        return []

    zones: list[ZoneFeature] = []
    for index, raw in enumerate(raw_features):
        try:
            feature = GeofencingFeature.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Skipping geofencing feature {index}: {e.error_count()} validation errors")
            continue

        if feature.geometry is None or feature.geometry.type != "MultiPolygon":
            logger.debug(f"Skipping geofencing feature {index}: not a MultiPolygon")
            continue

        try:
            geometry = multipolygon_from_geojson(feature.geometry.coordinates)
        except (ValueError, TypeError) as e:
            logger.warning(f"Skipping geofencing feature {index}: {e}")
            continue

        props = feature.properties
        zones.append(
            ZoneFeature(
                id=index,
                geometry=geometry,
                rules=tuple(rule_from_feed(r) for r in props.rules),
                name=localized(props.name),
                start=_parse_timestamp(props.start),
                end=_parse_timestamp(props.end),
            )
        )

    logger.info(f"Loaded {len(zones)} geofencing zones")
    return zones


def zone_contains(zone: ZoneFeature, point: GeoPoint) -> bool:
    """True if any polygon's outer ring of the zone contains the point."""
    for polygon in zone.geometry:
        ring = polygon.outer
        if len(ring) < MIN_RING_POINTS:
            continue
        if not bounding_box(ring).contains(point):
            continue
        if point_in_polygon(point, ring):
            return True
    return False


def find_zones_containing(point: GeoPoint, zones: Sequence[ZoneFeature]) -> list[ZoneFeature]:
    """Find every zone whose geometry contains the point.

    Args:
        point: Query point in (lat, lng).
        zones: The full loaded zone collection, in load order.

    Returns:
        Containing zones in load order (which is precedence order), each once.
    """
    seen: set[ZoneFeature] = set()
    result: list[ZoneFeature] = []
    for zone in zones:
        if zone in seen:
            continue
        if zone_contains(zone, point):
            seen.add(zone)
            result.append(zone)
    return result


def classify_zone(rules: Sequence[ZoneRule]) -> ZoneCategory:
    """Display category from the zone's first rule."""
    if not rules:
        return ZoneCategory.DEFAULT

    rule = rules[0]
    if rule.is_no_ride:
        return ZoneCategory.NO_RIDE
    if (not rule.ride_start_allowed or not rule.ride_end_allowed) and rule.ride_through_allowed:
        return ZoneCategory.PARTIAL_RESTRICTION
    if rule.station_parking:
        return ZoneCategory.STATION_PARKING
    if rule.maximum_speed_kph is not None:
        return ZoneCategory.SPEED_LIMITED
    return ZoneCategory.DEFAULT


def zone_colors(zone: ZoneFeature) -> tuple[str, str]:
    """(stroke, fill) colors for a zone."""
    return ZONE_COLORS[classify_zone(zone.rules)]


def compute_zone_statistics(zones: Sequence[ZoneFeature]) -> ZoneStatistics:
    """Single pass summary over each zone's first rule.

    This is a coarse classification, independent of precedence analysis.
    """
    stats = ZoneStatistics(zones=len(zones))
    for zone in zones:
        category = classify_zone(zone.rules)
        stats.by_category[category] = stats.by_category.get(category, 0) + 1

        if not zone.rules:
            continue
        rule = zone.rules[0]
        if rule.station_parking:
            stats.station_parking += 1
        if rule.is_no_ride:
            stats.no_ride += 1
        if rule.maximum_speed_kph is not None:
            stats.speed_limited += 1
    return stats
