"""Geometry helpers: GeoJSON conversion, point-in-polygon, centroid."""

from collections.abc import Sequence
from typing import Any

from gbfs_map.models.geometry import BoundingBox, GeoPoint, MultiPolygon, Polygon, Ring

# Fewer vertices than this cannot enclose an area
MIN_RING_POINTS = 3


def _coord_to_point(coord: Any) -> GeoPoint:
    """Convert a GeoJSON [lng, lat(, alt)] position into a (lat, lng) GeoPoint."""
    if not isinstance(coord, (list, tuple)) or len(coord) < 2:
        raise ValueError(f"Invalid GeoJSON position: {coord!r}")
    lng, lat = coord[0], coord[1]
    return GeoPoint(lat=float(lat), lng=float(lng))


def ring_from_geojson(coords: Any) -> Ring:
    """Convert a GeoJSON linear ring, swapping axes to (lat, lng)."""
    if not isinstance(coords, (list, tuple)):
        raise ValueError(f"Invalid GeoJSON ring: {coords!r}")
    return tuple(_coord_to_point(c) for c in coords)


def multipolygon_from_geojson(coordinates: Any) -> MultiPolygon:
    """Convert GeoJSON MultiPolygon coordinates into a typed MultiPolygon.

    This is the single place where the GeoJSON (lng, lat) order is swapped.
    Short rings are kept as-is; containment tests treat them as non-matching.

    Raises:
        ValueError: If the nesting or a position is not valid GeoJSON.
    """
    if not isinstance(coordinates, (list, tuple)):
        raise ValueError("MultiPolygon coordinates must be a list")

    polygons: list[Polygon] = []
    for polygon_coords in coordinates:
        if not isinstance(polygon_coords, (list, tuple)) or not polygon_coords:
            raise ValueError("MultiPolygon contains an empty polygon")
        rings = [ring_from_geojson(ring) for ring in polygon_coords]
        polygons.append(Polygon(outer=rings[0], holes=tuple(rings[1:])))
    return tuple(polygons)


def bounding_box(ring: Sequence[GeoPoint]) -> BoundingBox:
    """Compute the bounding box of a non-empty ring."""
    if not ring:
        raise ValueError("Cannot compute bounds of an empty ring")
    lats = [p.lat for p in ring]
    lngs = [p.lng for p in ring]
    return BoundingBox(min_lat=min(lats), min_lng=min(lngs), max_lat=max(lats), max_lng=max(lngs))


def point_in_polygon(point: GeoPoint, ring: Sequence[GeoPoint]) -> bool:
    """Even-odd ray casting test against a single ring.

    Points exactly on an edge may go either way.

    Args:
        point: Point to test.
        ring: Polygon boundary; the closing edge is implicit.

    Returns:
        True if the point is inside the ring. Always False for rings with
        fewer than 3 points.
    """
    n = len(ring)
    if n < MIN_RING_POINTS:
        return False

    x, y = point.lat, point.lng
    inside = False
    j = n - 1
    for i in range(n):
        xi, yi = ring[i].lat, ring[i].lng
        xj, yj = ring[j].lat, ring[j].lng
        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside


def centroid(multi_polygon: MultiPolygon) -> GeoPoint:
    """Label point for an area: mean of the first polygon's outer ring vertices.

    Not an area-weighted centroid. Every listed vertex counts, including a
    closing vertex that repeats the first one.

    Raises:
        ValueError: If the multipolygon or its first ring is empty.
    """
    if not multi_polygon or not multi_polygon[0].outer:
        raise ValueError("Cannot compute centroid of empty geometry")

    ring = multi_polygon[0].outer
    lat = sum(p.lat for p in ring) / len(ring)
    lng = sum(p.lng for p in ring) / len(ring)
    return GeoPoint(lat=lat, lng=lng)


def to_lat_lng_lists(multi_polygon: MultiPolygon) -> list[list[list[tuple[float, float]]]]:
    """Nested [polygon][ring][vertex] (lat, lng) lists for the rendering layer."""
    return [[[(p.lat, p.lng) for p in ring] for ring in polygon.rings] for polygon in multi_polygon]
