"""Plotly rendering of a choropleth layer (geo projection, no basemap)."""

from __future__ import annotations

import logging

import plotly.graph_objects as go

from choromap.config import ChoroplethStyle
from choromap.rendering.layer import BIN_COLUMN, ChoroplethLayer, LegendEntry

logger = logging.getLogger(__name__)

# Plotly hover text understands <b> and <br> but not <strong> or <br/>.
_PLOTLY_TAGS = {"<strong>": "<b>", "</strong>": "</b>", "<br/>": "<br>", "<br />": "<br>"}


def to_plotly_markup(label: str) -> str:
    text = str(label)
    for tag, replacement in _PLOTLY_TAGS.items():
        text = text.replace(tag, replacement)
    return text


def discrete_colorscale(colors: list[str]) -> list[list]:
    """Stepped colorscale: color ``i`` covers ``[i/n, (i+1)/n]``."""
    n = len(colors)
    scale = []
    for i, color in enumerate(colors):
        scale.append([i / n, color])
        scale.append([(i + 1) / n, color])
    return scale


def render_plotly(layer: ChoroplethLayer, style: ChoroplethStyle | None = None) -> go.Figure:
    style = style or ChoroplethStyle()
    bins = [entry for entry in layer.legend if entry.lower is not None]
    missing: list[LegendEntry] = [entry for entry in layer.legend if entry.lower is None]
    n = len(bins)

    regions = layer.regions
    geojson = regions[[layer.id_column, "geometry"]].__geo_interface__
    featureidkey = f"properties.{layer.id_column}"
    poly = style.polygon
    line = dict(color=poly.color, width=poly.weight)

    has_bin = regions[BIN_COLUMN].notna()
    present = regions[has_bin]

    fig = go.Figure()
    fig.add_trace(go.Choropleth(
        geojson=geojson,
        featureidkey=featureidkey,
        locations=present[layer.id_column].tolist(),
        z=[int(b) + 0.5 for b in present[BIN_COLUMN]],
        zmin=0,
        zmax=max(n, 1),
        colorscale=discrete_colorscale([entry.color for entry in bins]),
        marker_line=line,
        marker_opacity=min(poly.fill_opacity, 1.0),
        text=[to_plotly_markup(label) for label in present["label"]],
        hovertemplate="%{text}<extra></extra>",
        colorbar=dict(
            title=dict(text=style.legend.title),
            tickvals=list(range(n + 1)),
            ticktext=[f"{entry.lower:g}" for entry in bins] + ([f"{bins[-1].upper:g}"] if bins else []),
        ),
        name="regions",
    ))

    absent = regions[~has_bin]
    if not absent.empty and missing:
        na_color = missing[0].color
        fig.add_trace(go.Choropleth(
            geojson=geojson,
            featureidkey=featureidkey,
            locations=absent[layer.id_column].tolist(),
            z=[0] * len(absent),
            colorscale=[[0, na_color], [1, na_color]],
            showscale=False,
            marker_line=line,
            text=[to_plotly_markup(label) for label in absent["label"]],
            hovertemplate="%{text}<extra></extra>",
            name=missing[0].text,
        ))

    fig.update_geos(
        fitbounds="locations",
        visible=False,
        projection_type="mercator",
    )
    fig.update_layout(
        margin=dict(l=0, r=0, t=0, b=0),
        height=700,
        template="plotly_white",
        hoverlabel=dict(font_size=int(style.label.text_size.rstrip("px") or 15)),
    )
    logger.info("Rendered plotly map with %d regions", len(layer))
    return fig
