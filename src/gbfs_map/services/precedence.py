"""Vehicle-type precedence analysis across overlapping geofencing zones.

A rule's precedence score is ``zone_index * zone_stride + rule_index``:
zones earlier in the overlap list win over later ones, and within a zone
earlier rules win. Lower score means higher precedence.

Universal rules (no vehicle types) are registered only under
ALL_VEHICLE_TYPES. Resolving a concrete vehicle type merges its own list with
the universal list, ordered by score alone.
"""

import heapq
from collections.abc import Sequence

from gbfs_map.models.zones import (
    ALL_VEHICLE_TYPES,
    RankedRule,
    SpecificVehicleType,
    VehicleTypeScope,
    ZoneFeature,
)

# Must exceed the maximum number of rules in a single zone
DEFAULT_ZONE_STRIDE = 1000

PrecedenceAnalysis = dict[VehicleTypeScope, list[RankedRule]]


def precedence_score(zone_index: int, rule_index: int, zone_stride: int = DEFAULT_ZONE_STRIDE) -> int:
    """Combine zone order and in-zone rule order into one comparable score."""
    return zone_index * zone_stride + rule_index


def analyze(
    overlapping_zones: Sequence[ZoneFeature],
    zone_stride: int = DEFAULT_ZONE_STRIDE,
) -> PrecedenceAnalysis:
    """Rank every rule of the overlapping zones per vehicle-type scope.

    Args:
        overlapping_zones: Zones containing a point, in precedence order
            (as returned by find_zones_containing).
        zone_stride: Multiplier for the zone index; must be larger than
            any zone's rule count.

    Returns:
        Mapping of scope to its rules sorted ascending by precedence score.
        The first element of each list is the winning rule for that scope.
    """
    if zone_stride < 1:
        raise ValueError(f"zone_stride must be positive, got {zone_stride}")

    analysis: PrecedenceAnalysis = {}
    for zone_index, zone in enumerate(overlapping_zones):
        for rule_index, rule in enumerate(zone.rules):
            ranked = RankedRule(
                zone=zone,
                zone_index=zone_index,
                rule=rule,
                rule_index=rule_index,
                precedence_score=precedence_score(zone_index, rule_index, zone_stride),
            )
            for scope in rule.scopes:
                analysis.setdefault(scope, []).append(ranked)

    for rules in analysis.values():
        rules.sort(key=lambda r: r.precedence_score)
    return analysis


def has_vehicle_specific_rules(analysis: PrecedenceAnalysis) -> bool:
    """True if any rule in the analysis is scoped to a concrete vehicle type."""
    return any(scope != ALL_VEHICLE_TYPES for scope in analysis)


def effective_rules(analysis: PrecedenceAnalysis, vehicle_type_id: str | None) -> list[RankedRule]:
    """All rules applying to a vehicle type, best first.

    Args:
        analysis: Result of analyze().
        vehicle_type_id: Concrete type to resolve, or None for universal
            rules only.

    Returns:
        The type's own rules merged with universal rules, ordered by
        precedence score. Being type-specific is not a tie-breaker.
    """
    universal = analysis.get(ALL_VEHICLE_TYPES, [])
    if vehicle_type_id is None:
        return list(universal)
    specific = analysis.get(SpecificVehicleType(vehicle_type_id), [])
    return list(heapq.merge(specific, universal, key=lambda r: r.precedence_score))


def winning_rule(analysis: PrecedenceAnalysis, vehicle_type_id: str | None) -> RankedRule | None:
    """The highest-precedence rule for a vehicle type, or None if no rule applies."""
    rules = effective_rules(analysis, vehicle_type_id)
    return rules[0] if rules else None
