"""Typed styling options for choropleth rendering.

Defaults reproduce the truck driver wage map: thin light-grey borders,
a darker outline on hover and OpenStreetMap.DE tiles over Germany.
"""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_PALETTE = "YlOrRd"
DEFAULT_NA_COLOR = "#808080"
MISSING_LABEL = "no data"


@dataclass(frozen=True)
class PolygonStyle:
    weight: float = 1.0
    opacity: float = 1.0
    color: str = "#D3D3D3"
    dash_array: str = "1"
    fill_opacity: float = 1.0


@dataclass(frozen=True)
class HighlightStyle:
    """Border and fill applied while the pointer is over a region."""

    weight: float = 3.0
    color: str = "#666"
    dash_array: str = ""
    fill_opacity: float = 0.3


@dataclass(frozen=True)
class LabelStyle:
    font_weight: str = "normal"
    padding: str = "3px 8px"
    text_size: str = "15px"
    direction: str = "auto"

    def css(self) -> str:
        return f"font-weight: {self.font_weight}; padding: {self.padding}; font-size: {self.text_size};"


@dataclass(frozen=True)
class MapOptions:
    tiles: str = "OpenStreetMap.DE"
    zoom_snap: float = 0.25
    min_zoom: int = 5
    zoom_start: int = 6
    dragging: bool = True
    center: tuple[float, float] | None = None


@dataclass(frozen=True)
class LegendOptions:
    title: str = "Desired minimum wage <br> (in Euro)"
    position: str = "bottomright"
    opacity: float = 1.0


@dataclass(frozen=True)
class ChoroplethStyle:
    polygon: PolygonStyle = field(default_factory=PolygonStyle)
    highlight: HighlightStyle = field(default_factory=HighlightStyle)
    label: LabelStyle = field(default_factory=LabelStyle)
    map: MapOptions = field(default_factory=MapOptions)
    legend: LegendOptions = field(default_factory=LegendOptions)
