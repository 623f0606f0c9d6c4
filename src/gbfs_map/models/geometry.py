"""Typed geometry used by the zone and station logic.

All coordinates are (latitude, longitude), i.e. already swapped from the
GeoJSON (longitude, latitude) order at ingestion.
"""

from dataclasses import dataclass
from typing import NamedTuple


class GeoPoint(NamedTuple):
    """WGS84 point in degrees."""

    lat: float
    lng: float


# A closed boundary; the last point connects back to the first.
Ring = tuple[GeoPoint, ...]


@dataclass(frozen=True)
class Polygon:
    """Outer boundary plus holes.

    Only `outer` takes part in containment tests; holes are kept for
    rendering but never subtracted.
    """

    outer: Ring
    holes: tuple[Ring, ...] = ()

    @property
    def rings(self) -> tuple[Ring, ...]:
        return (self.outer, *self.holes)


MultiPolygon = tuple[Polygon, ...]


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned bounds of a ring."""

    min_lat: float
    min_lng: float
    max_lat: float
    max_lng: float

    def contains(self, point: GeoPoint) -> bool:
        return (
            self.min_lat <= point.lat <= self.max_lat
            and self.min_lng <= point.lng <= self.max_lng
        )
