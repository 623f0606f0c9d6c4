"""Render directives handed to the map rendering layer."""

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, Field


class DisplayMode(str, Enum):
    """How virtual stations are drawn at the current zoom."""

    CENTROID = "centroid"  # aggregated point marker with availability badge
    POLYGON = "polygon"  # full station area


class MarkerIcon(BaseModel):
    """Icon of a point marker."""

    css_class: str
    color: str
    size: int = Field(description="Icon width/height in pixels")
    badge: str | None = Field(default=None, description="Text drawn inside the icon")


class PathStyle(BaseModel):
    """Stroke and fill of a polygon."""

    color: str
    fill_color: str
    fill_opacity: float
    weight: int
    dash_array: str | None = None
    css_class: str | None = None


class MarkerDirective(BaseModel):
    """Draw a point marker."""

    kind: Literal["marker"] = "marker"
    element_id: str
    position: tuple[float, float] = Field(description="(lat, lng)")
    icon: MarkerIcon
    popup: str | None = None


class PolygonDirective(BaseModel):
    """Draw a (multi)polygon with hover emphasis."""

    kind: Literal["polygon"] = "polygon"
    element_id: str
    lat_lngs: list[list[list[tuple[float, float]]]] = Field(
        description="[polygon][ring][vertex] (lat, lng) lists"
    )
    style: PathStyle
    hover_style: PathStyle
    popup: str | None = None


RenderDirective = Annotated[MarkerDirective | PolygonDirective, Field(discriminator="kind")]
