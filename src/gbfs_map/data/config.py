from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MapConfig(BaseSettings):
    """Configuration for feed loading and map rendering.

    Automatically loads from environment variables and .env file.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    # virtual stations switch from centroid marker to full area at this zoom
    virtual_station_zoom_threshold: int = Field(default=14, alias="GBFS_VIRTUAL_STATION_ZOOM")
    zoom_debounce_seconds: float = Field(default=0.15, alias="GBFS_ZOOM_DEBOUNCE")

    # must exceed the number of rules in any single zone
    precedence_zone_stride: int = Field(default=1000, alias="GBFS_PRECEDENCE_ZONE_STRIDE")

    # feed fetching
    min_request_interval_seconds: float = Field(default=0.25, alias="GBFS_MIN_REQUEST_INTERVAL")
    request_timeout_seconds: float = Field(default=30.0, alias="GBFS_REQUEST_TIMEOUT")

    # vehicle layer
    min_zoom_for_vehicles: int = 12
    max_vehicles_without_clustering: int = 100

    # virtual station styling is more prominent below this zoom
    low_zoom_style_cutoff: int = 16
    initial_zoom: float = 3


@lru_cache
def get_map_config() -> MapConfig:
    """Get map configuration (cached singleton).

    Returns:
        MapConfig with values from .env file or environment variables.
    """
    return MapConfig()
