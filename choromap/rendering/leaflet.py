"""Leaflet rendering through folium.

Produces a pannable, zoomable map with a tile basemap, one polygon per
region filled by its bin color, a highlight on hover, the region label as
tooltip and a stepped legend.
"""

from __future__ import annotations

import logging

import folium
import numpy as np
import xyzservices as xyz
from markupsafe import Markup

from choromap.config import ChoroplethStyle, LegendOptions
from choromap.rendering.layer import FILL_COLUMN, LABEL_COLUMN, ChoroplethLayer, LegendEntry

logger = logging.getLogger(__name__)

LEGEND_POSITIONS = {
    "bottomright": "bottom: 30px; right: 10px;",
    "bottomleft": "bottom: 30px; left: 10px;",
    "topright": "top: 10px; right: 10px;",
    "topleft": "top: 80px; left: 10px;",
}


def resolve_tiles(name: str) -> folium.TileLayer:
    """Tile layer for an xyzservices provider name such as ``OpenStreetMap.DE``."""
    provider = xyz.providers.query_name(name)
    return folium.TileLayer(tiles=provider, name=name)


def _bounds(layer: ChoroplethLayer) -> list[list[float]] | None:
    if layer.regions.empty:
        return None
    minx, miny, maxx, maxy = layer.regions.total_bounds
    if not np.all(np.isfinite([minx, miny, maxx, maxy])):
        return None
    return [[float(miny), float(minx)], [float(maxy), float(maxx)]]


def legend_html(entries: list[LegendEntry], options: LegendOptions) -> str:
    """Fixed-position HTML legend, one swatch per entry."""
    if options.position not in LEGEND_POSITIONS:
        raise ValueError(f"Unknown legend position {options.position!r}. Use one of {sorted(LEGEND_POSITIONS)}")
    rows = "".join(
        Markup(
            '<div style="font-size:12px; line-height:18px;">'
            '<span style="display:inline-block; width:14px; height:14px; margin-right:6px; '
            'vertical-align:middle; background:{color}; opacity:{opacity}; border:1px solid #999;"></span>'
            "{text}</div>"
        ).format(color=entry.color, opacity=options.opacity, text=entry.text)
        for entry in entries
    )
    return (
        f'<div class="choromap-legend" style="position: fixed; {LEGEND_POSITIONS[options.position]} '
        'z-index: 9999; background: white; padding: 6px 10px; border: 1px solid #bbb; '
        'border-radius: 4px; box-shadow: 0 0 15px rgba(0,0,0,0.2);">'
        f'<div style="font-weight: bold; margin-bottom: 4px;">{options.title}</div>'
        f"{rows}</div>"
    )


def render_leaflet(layer: ChoroplethLayer, style: ChoroplethStyle | None = None) -> folium.Map:
    style = style or ChoroplethStyle()
    opts = style.map
    bounds = _bounds(layer)

    center = opts.center
    if center is None and bounds is not None:
        center = ((bounds[0][0] + bounds[1][0]) / 2, (bounds[0][1] + bounds[1][1]) / 2)

    m = folium.Map(
        location=list(center) if center else None,
        zoom_start=opts.zoom_start,
        min_zoom=opts.min_zoom,
        tiles=None,
        zoom_snap=opts.zoom_snap,
        dragging=opts.dragging,
    )
    resolve_tiles(opts.tiles).add_to(m)

    poly = style.polygon

    def style_fn(feature):
        return {
            "fillColor": feature["properties"][FILL_COLUMN],
            "weight": poly.weight,
            "opacity": poly.opacity,
            "color": poly.color,
            "dashArray": poly.dash_array,
            "fillOpacity": poly.fill_opacity,
        }

    hl = style.highlight

    def highlight_fn(feature):
        return {
            "weight": hl.weight,
            "color": hl.color,
            "dashArray": hl.dash_array,
            "fillOpacity": hl.fill_opacity,
        }

    regions = layer.regions[[layer.id_column, layer.value_column, FILL_COLUMN, LABEL_COLUMN, "geometry"]].copy()
    regions[LABEL_COLUMN] = [str(label) for label in regions[LABEL_COLUMN]]

    folium.GeoJson(
        regions.to_json(default=str),
        name="regions",
        style_function=style_fn,
        highlight_function=highlight_fn,
        tooltip=folium.GeoJsonTooltip(
            fields=[LABEL_COLUMN],
            labels=False,
            sticky=True,
            style=style.label.css(),
            direction=style.label.direction,
        ),
    ).add_to(m)

    if layer.legend:
        m.get_root().html.add_child(folium.Element(legend_html(layer.legend, style.legend)))

    if bounds is not None:
        m.fit_bounds(bounds)

    logger.info("Rendered Leaflet map with %d regions", len(layer))
    return m
