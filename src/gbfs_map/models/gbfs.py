"""Pydantic models for GBFS feed payloads.

These models cover the subset of GBFS 2.x / 3.x fields the map uses.
Unknown fields are ignored and optional fields default to None, so partial
feeds never fail validation for a missing optional value.
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class LocalizedText(BaseModel):
    """A GBFS 3.x localized string."""

    model_config = ConfigDict(extra="ignore")

    text: str
    language: str | None = None


# GBFS 2.x uses plain strings where 3.x uses a list of LocalizedText
LocalizedValue = list[LocalizedText] | str | None


def localized(value: LocalizedValue) -> str | None:
    """Return the first translation of a localized value (or the plain string)."""
    if value is None:
        return None
    if isinstance(value, str):
        return value or None
    for entry in value:
        if entry.text:
            return entry.text
    return None


class DiscoveryFeed(BaseModel):
    """One entry of the discovery document's feed list."""

    model_config = ConfigDict(extra="ignore")

    name: str
    url: str


class SystemInformation(BaseModel):
    """system_information.json data block."""

    model_config = ConfigDict(extra="ignore")

    system_id: str | None = None
    name: LocalizedValue = None
    operator: LocalizedValue = None
    timezone: str | None = None
    language: str | None = None  # 2.x
    languages: list[str] = []  # 3.x
    email: str | None = None
    phone_number: str | None = None

    @property
    def display_name(self) -> str | None:
        return localized(self.name)

    @property
    def operator_name(self) -> str | None:
        return localized(self.operator)


class GeoJSONGeometry(BaseModel):
    """A raw GeoJSON geometry, coordinates kept untyped until conversion."""

    model_config = ConfigDict(extra="ignore")

    type: str
    coordinates: list[Any] = []


class StationInformation(BaseModel):
    """A station record from station_information.json."""

    model_config = ConfigDict(extra="ignore")

    station_id: str
    name: LocalizedValue = None
    lat: float | None = None
    lon: float | None = None
    address: str | None = None
    capacity: int | None = None
    is_virtual_station: bool = False
    station_area: GeoJSONGeometry | None = None

    @property
    def display_name(self) -> str:
        return localized(self.name) or self.station_id

    @property
    def has_point(self) -> bool:
        return self.lat is not None and self.lon is not None


class StationStatus(BaseModel):
    """A station record from station_status.json."""

    model_config = ConfigDict(extra="ignore")

    station_id: str
    num_vehicles_available: int | None = Field(
        default=None,
        validation_alias=AliasChoices("num_vehicles_available", "num_bikes_available"),
    )
    num_docks_available: int | None = None
    is_installed: bool | None = None
    is_renting: bool | None = None
    is_returning: bool | None = None


class Vehicle(BaseModel):
    """A vehicle from vehicle_status.json (free_bike_status.json in 2.x)."""

    model_config = ConfigDict(extra="ignore")

    vehicle_id: str = Field(validation_alias=AliasChoices("vehicle_id", "bike_id"))
    lat: float | None = None
    lon: float | None = None
    vehicle_type_id: str | None = None
    station_id: str | None = None
    is_reserved: bool | None = None
    is_disabled: bool | None = None
    current_fuel_percent: float | None = None  # 0.0 - 1.0
    current_range_meters: float | None = None
    pricing_plan_id: str | None = None


class VehicleType(BaseModel):
    """A vehicle type from vehicle_types.json."""

    model_config = ConfigDict(extra="ignore")

    vehicle_type_id: str
    form_factor: str | None = None
    propulsion_type: str | None = None
    name: LocalizedValue = None
    max_range_meters: float | None = None
    default_pricing_plan_id: str | None = None
    pricing_plan_ids: list[str] = []

    @property
    def display_name(self) -> str | None:
        return localized(self.name)


class PricingPlan(BaseModel):
    """A plan from system_pricing_plans.json."""

    model_config = ConfigDict(extra="ignore")

    plan_id: str
    name: LocalizedValue = None
    currency: str | None = None
    price: float | None = None
    is_taxable: bool | None = None
    description: LocalizedValue = None

    @property
    def display_name(self) -> str:
        return localized(self.name) or self.plan_id


class GeofencingRule(BaseModel):
    """A geofencing rule as published in geofencing_zones.json.

    Missing permission flags default to False. GBFS 2.x `ride_allowed`
    is mapped onto both ride_start_allowed and ride_end_allowed.
    """

    model_config = ConfigDict(extra="ignore")

    vehicle_type_ids: list[str] | None = None
    ride_start_allowed: bool = False
    ride_end_allowed: bool = False
    ride_through_allowed: bool = False
    station_parking: bool | None = None
    maximum_speed_kph: float | None = None

    @model_validator(mode="before")
    @classmethod
    def _map_ride_allowed(cls, data: Any) -> Any:
        if isinstance(data, dict) and "ride_allowed" in data:
            data = dict(data)
            data.setdefault("ride_start_allowed", data["ride_allowed"])
            data.setdefault("ride_end_allowed", data["ride_allowed"])
        return data


class GeofencingProperties(BaseModel):
    """Properties of a geofencing zone feature."""

    model_config = ConfigDict(extra="ignore")

    name: LocalizedValue = None
    start: int | str | None = None
    end: int | str | None = None
    rules: list[GeofencingRule] = []


class GeofencingFeature(BaseModel):
    """A GeoJSON feature from the geofencing_zones FeatureCollection."""

    model_config = ConfigDict(extra="ignore")

    type: str = "Feature"
    properties: GeofencingProperties = Field(default_factory=GeofencingProperties)
    geometry: GeoJSONGeometry | None = None
