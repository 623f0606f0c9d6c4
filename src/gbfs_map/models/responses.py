from pydantic import BaseModel, Field

from gbfs_map.models.rendering import DisplayMode, MarkerDirective, RenderDirective


class FeedErrorInfo(BaseModel):
    feed: str
    error: str


class ZoneStatisticsResponse(BaseModel):
    """Counts over each zone's first rule only."""

    zones: int = Field(description="Number of loaded zones")
    no_ride: int
    speed_limited: int
    station_parking: int
    by_category: dict[str, int] = Field(
        default_factory=dict, description="Zones per display category"
    )


class LoadSummary(BaseModel):
    source: str
    system_name: str | None = None
    operator: str | None = None
    gbfs_version: str | None = None
    feeds_requested: int
    feeds_loaded: int
    errors: list[FeedErrorInfo] = Field(default_factory=list)
    stations: int = Field(description="Stations drawn on the map")
    virtual_stations: int
    vehicles: int
    vehicle_types: int
    pricing_plans: int
    zone_statistics: ZoneStatisticsResponse
    display_mode: DisplayMode | None = Field(
        default=None, description="Virtual station display mode after the load"
    )

    @property
    def feeds_message(self) -> str:
        return f"Loaded {self.feeds_loaded} of {self.feeds_requested} feeds"


class ZoneRuleInfo(BaseModel):
    """A zone rule placed in precedence order."""

    zone_id: int
    zone_name: str
    rule_index: int
    precedence_score: int = Field(description="Lower wins")
    vehicle_type_ids: list[str] | None = Field(
        default=None, description="None when the rule applies to every vehicle type"
    )
    ride_start_allowed: bool
    ride_end_allowed: bool
    ride_through_allowed: bool
    station_parking: bool | None = None
    maximum_speed_kph: float | None = None


class ZoneInfo(BaseModel):
    zone_id: int
    name: str
    category: str
    stroke_color: str
    fill_color: str
    rule_count: int
    start: str | None = Field(default=None, description="ISO timestamp the zone becomes active")
    end: str | None = Field(default=None, description="ISO timestamp the zone stops being active")


class VehicleTypePrecedence(BaseModel):
    """Effective rules for one vehicle-type scope, winning rule first."""

    scope: str = Field(description='Vehicle type id, or "*" for all vehicle types')
    label: str
    rules: list[ZoneRuleInfo]

    @property
    def winning_rule(self) -> ZoneRuleInfo | None:
        return self.rules[0] if self.rules else None


class ZonesAtResponse(BaseModel):
    lat: float
    lon: float
    zones: list[ZoneInfo] = Field(description="Containing zones in precedence order")
    count: int
    has_vehicle_specific_rules: bool
    precedence: list[VehicleTypePrecedence] = Field(
        default_factory=list, description="Universal scope first, then vehicle types by id"
    )


class StationDirectivesResponse(BaseModel):
    mode: DisplayMode | None
    zoom: float
    directives: list[RenderDirective]
    count: int


class SetZoomResponse(BaseModel):
    zoom: float = Field(description="Settled zoom level")
    mode: DisplayMode | None
    rerendered: bool = Field(description="True if virtual stations were re-rendered")


class VehicleMarkersResponse(BaseModel):
    visible: bool = Field(description="False when the fleet is hidden at this zoom")
    total: int
    directives: list[MarkerDirective]


class VehicleTypeInfo(BaseModel):
    vehicle_type_id: str
    label: str
    form_factor: str | None = None
    propulsion_type: str | None = None
    max_range_meters: float | None = None
    pricing_plan: str | None = Field(default=None, description="Name of the applicable pricing plan")
    price: float | None = None
    currency: str | None = None


class VehicleTypesResponse(BaseModel):
    vehicle_types: list[VehicleTypeInfo]
    count: int
