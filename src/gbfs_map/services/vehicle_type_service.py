"""Vehicle type labels and pricing plan lookup."""

import logging
from collections.abc import Sequence
from typing import Any

from gbfs_map.data.feed_loader import feed_data, parse_records
from gbfs_map.models.gbfs import PricingPlan, VehicleType

logger = logging.getLogger(__name__)

FORM_FACTOR_LABELS = {
    "bicycle": "Bicycle",
    "cargo_bicycle": "Cargo Bicycle",
    "car": "Car",
    "moped": "Moped",
    "scooter_standing": "Standing Scooter",
    "scooter_seated": "Seated Scooter",
    "scooter": "Scooter",
    "other": "Other Vehicle",
}

PROPULSION_LABELS = {
    "human": "Pedal",
    "electric_assist": "E-Assist",
    "electric": "Electric",
    "combustion": "Combustion",
    "combustion_diesel": "Diesel",
    "hybrid": "Hybrid",
    "plug_in_hybrid": "Plug-in Hybrid",
    "hydrogen_fuel_cell": "Hydrogen",
}

# Propulsion types whose range is worth showing in a label
RANGED_PROPULSION = {"electric", "electric_assist", "hybrid", "plug_in_hybrid"}


def build_vehicle_types(payload: dict[str, Any] | None) -> list[VehicleType]:
    """Parse vehicle_types.json; an absent feed yields an empty list."""
    data = feed_data(payload, "vehicle_types")
    vehicle_types = parse_records(VehicleType, data.get("vehicle_types") or [], "vehicle_type")
    if vehicle_types:
        logger.info(f"Loaded {len(vehicle_types)} vehicle types")
    return vehicle_types


def build_pricing_plans(payload: dict[str, Any] | None) -> list[PricingPlan]:
    """Parse system_pricing_plans.json; an absent feed yields an empty list."""
    data = feed_data(payload, "system_pricing_plans")
    return parse_records(PricingPlan, data.get("plans") or [], "pricing_plan")


def type_description(vehicle_type: VehicleType) -> str:
    """Propulsion + form factor (+ range), e.g. "Electric Standing Scooter 30km range"."""
    parts: list[str] = []

    propulsion = PROPULSION_LABELS.get(vehicle_type.propulsion_type, vehicle_type.propulsion_type)
    # human-powered is the default, not worth mentioning
    if propulsion and propulsion != "Pedal":
        parts.append(propulsion)

    form_factor = FORM_FACTOR_LABELS.get(vehicle_type.form_factor, vehicle_type.form_factor)
    if form_factor:
        parts.append(form_factor)

    if vehicle_type.max_range_meters and vehicle_type.propulsion_type in RANGED_PROPULSION:
        range_km = int(vehicle_type.max_range_meters / 1000 + 0.5)
        parts.append(f"{range_km}km range")

    return " ".join(parts)


def describe_vehicle_type(vehicle_type_id: str, vehicle_types: Sequence[VehicleType]) -> str:
    """Human-readable label for a vehicle type id.

    Falls back to the raw id when the type is unknown. When several named
    types share the same description, the id suffix is appended so they can
    be told apart.
    """
    vehicle_type = next((vt for vt in vehicle_types if vt.vehicle_type_id == vehicle_type_id), None)
    if vehicle_type is None:
        return vehicle_type_id

    label = vehicle_type.display_name
    description = type_description(vehicle_type)

    duplicates = sum(
        1 for vt in vehicle_types if vt.display_name and type_description(vt) == description
    )
    suffix = ""
    if duplicates > 1:
        suffix = f" [{vehicle_type_id.split(':')[-1] or vehicle_type_id}]"

    if label and description != label:
        return f"{label} ({description}){suffix}" if description else f"{label}{suffix}"
    if label:
        return f"{label}{suffix}"
    return f"{description}{suffix}" if description else vehicle_type_id


def pricing_plan_for(
    vehicle_type: VehicleType, plans: Sequence[PricingPlan]
) -> PricingPlan | None:
    """The vehicle type's default plan, else its first listed plan; None if unknown."""
    by_id = {plan.plan_id: plan for plan in plans}
    candidates = [vehicle_type.default_pricing_plan_id, *vehicle_type.pricing_plan_ids]
    for plan_id in candidates:
        if plan_id and plan_id in by_id:
            return by_id[plan_id]
    return None
