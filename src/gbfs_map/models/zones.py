"""Geofencing zone domain types."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from gbfs_map.models.geometry import MultiPolygon


@dataclass(frozen=True)
class AllVehicleTypes:
    """Scope of a rule that names no vehicle types: it applies to every type."""

    def __str__(self) -> str:
        return "*"


@dataclass(frozen=True)
class SpecificVehicleType:
    """Scope of a rule restricted to one vehicle type id."""

    vehicle_type_id: str

    def __str__(self) -> str:
        return self.vehicle_type_id


VehicleTypeScope = AllVehicleTypes | SpecificVehicleType

ALL_VEHICLE_TYPES = AllVehicleTypes()


@dataclass(frozen=True)
class ZoneRule:
    """A single rule of a geofencing zone.

    `vehicle_type_ids` is None when the feed omits the field; an empty
    frozenset when it lists none. Both mean the rule is universal.
    """

    ride_start_allowed: bool
    ride_end_allowed: bool
    ride_through_allowed: bool
    vehicle_type_ids: frozenset[str] | None = None
    station_parking: bool | None = None
    maximum_speed_kph: float | None = None

    @property
    def is_universal(self) -> bool:
        return not self.vehicle_type_ids

    @property
    def scopes(self) -> tuple[VehicleTypeScope, ...]:
        """Keys this rule is registered under for precedence analysis."""
        if self.is_universal:
            return (ALL_VEHICLE_TYPES,)
        return tuple(SpecificVehicleType(v) for v in sorted(self.vehicle_type_ids))

    @property
    def is_no_ride(self) -> bool:
        return not (self.ride_start_allowed or self.ride_end_allowed or self.ride_through_allowed)


@dataclass(frozen=True, eq=False)
class ZoneFeature:
    """A loaded geofencing zone.

    `id` is the feature's position in the loaded collection. Equality is
    identity, so two zones with identical content stay distinct.
    """

    id: int
    geometry: MultiPolygon
    rules: tuple[ZoneRule, ...] = ()
    name: str | None = None
    start: datetime | None = None
    end: datetime | None = None

    @property
    def display_name(self) -> str:
        return self.name or f"Zone {self.id + 1}"


@dataclass(frozen=True)
class RankedRule:
    """A rule placed in precedence order for an overlapping-zone set."""

    zone: ZoneFeature
    zone_index: int
    rule: ZoneRule
    rule_index: int
    precedence_score: int


class ZoneCategory(str, Enum):
    """Display category of a zone, derived from its first rule."""

    NO_RIDE = "no_ride"
    PARTIAL_RESTRICTION = "partial_restriction"
    STATION_PARKING = "station_parking"
    SPEED_LIMITED = "speed_limited"
    DEFAULT = "default"


@dataclass
class ZoneStatistics:
    """Counts of zones by first-rule category.

    A zone may count in several buckets (e.g. no-ride and speed-limited).
    """

    zones: int = 0
    no_ride: int = 0
    speed_limited: int = 0
    station_parking: int = 0
    by_category: dict[ZoneCategory, int] = field(default_factory=dict)
