"""Full map pipeline: load → clean → join → bin/color/label → render.

Run with:  python -m choromap.pipeline [dataset_key]
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import replace
from pathlib import Path

import folium
import plotly.graph_objects as go

from choromap.config import ChoroplethStyle
from choromap.ingestion.datasets import DatasetConfig, get_dataset
from choromap.ingestion.loaders import load_boundaries, load_values
from choromap.processing.binner import step_bins, value_range
from choromap.processing.cleaner import clean_values, normalize_codes
from choromap.processing.joiner import join_values
from choromap.processing.labels import DEFAULT_TEMPLATE
from choromap.processing.palette import ColorMapper
from choromap.rendering.layer import ChoroplethLayer, build_layer
from choromap.rendering.leaflet import render_leaflet
from choromap.rendering.output import save_map
from choromap.rendering.plotly_map import render_plotly

logger = logging.getLogger(__name__)

RENDERERS = {
    "leaflet": render_leaflet,
    "plotly": render_plotly,
}


def resolve_bins(config: DatasetConfig, values) -> list[float]:
    """Configured boundaries, or evenly stepped ones around the value range."""
    if config.bins:
        return list(config.bins)
    if config.bin_step is None:
        raise ValueError(f"Dataset {config.name!r} defines neither bins nor bin_step")
    low, high = value_range(values)
    return step_bins(low, high, config.bin_step)


def build_dataset_layer(config: DatasetConfig) -> ChoroplethLayer:
    """Load, join and style the regions of one dataset."""
    raw_values = load_values(config.values_path, id_column=config.id_column)
    boundaries = load_boundaries(config.boundaries_path)

    values = clean_values(raw_values, config.id_column, config.value_column, config.code_width)

    geo_id = config.boundaries_id_column or config.id_column
    if geo_id not in boundaries.columns:
        raise KeyError(f"Boundaries have no id column {geo_id!r}. Available: {list(boundaries.columns)}")
    boundaries[geo_id] = normalize_codes(boundaries[geo_id], config.code_width)

    joined = join_values(
        boundaries,
        values,
        config.id_column,
        config.value_column,
        boundaries_id_column=config.boundaries_id_column,
        on_missing=config.on_missing,
    )

    if joined[config.value_column].notna().any():
        low, high = value_range(joined[config.value_column])
        logger.info("Value range of %s: %g – %g", config.value_column, low, high)
    else:
        logger.warning("No region of %s has a value; every region is shown as missing", config.name)

    bins = resolve_bins(config, joined[config.value_column])
    mapper = ColorMapper(config.palette, n_bins=len(bins) - 1)
    return build_layer(
        joined,
        config.id_column,
        config.value_column,
        bins,
        mapper,
        unit=config.unit,
        label_template=config.label_template or DEFAULT_TEMPLATE,
    )


def render_layer(
    layer: ChoroplethLayer,
    renderer: str = "leaflet",
    style: ChoroplethStyle | None = None,
) -> folium.Map | go.Figure:
    try:
        render = RENDERERS[renderer]
    except KeyError:
        raise ValueError(f"Unknown renderer {renderer!r}. Available: {sorted(RENDERERS)}") from None
    return render(layer, style)


def run_pipeline(
    dataset_key: str = "truck_driver_wages",
    output_path: str | Path | None = None,
    renderer: str = "leaflet",
) -> Path:
    """Build the map for a registered dataset and write it as HTML."""
    config = get_dataset(dataset_key)
    style = ChoroplethStyle()
    if config.legend_title:
        style = replace(style, legend=replace(style.legend, title=config.legend_title))

    logger.info("=== Building map: %s ===", config.name)
    try:
        layer = build_dataset_layer(config)
        rendered = render_layer(layer, renderer, style)
        path = save_map(rendered, output_path or config.output_path)
    except Exception:
        logger.exception("Map pipeline failed for %s", dataset_key)
        raise
    logger.info("=== Pipeline complete ===")
    return path


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    run_pipeline(
        sys.argv[1] if len(sys.argv) > 1 else "truck_driver_wages",
        output_path=os.getenv("CHOROMAP_OUTPUT"),
        renderer=os.getenv("CHOROMAP_RENDERER", "leaflet"),
    )
