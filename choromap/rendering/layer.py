"""Assemble the data a renderer needs: geometry, fill, label and legend."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

import geopandas as gpd

from choromap.config import MISSING_LABEL
from choromap.processing.binner import assign_bins, count_outside, validate_bins
from choromap.processing.labels import DEFAULT_TEMPLATE, format_labels, format_number
from choromap.processing.palette import ColorMapper

logger = logging.getLogger(__name__)

FILL_COLUMN = "fill_color"
LABEL_COLUMN = "label"
BIN_COLUMN = "bin"


@dataclass(frozen=True)
class LegendEntry:
    lower: float | None
    upper: float | None
    color: str
    text: str


@dataclass
class ChoroplethLayer:
    regions: gpd.GeoDataFrame
    id_column: str
    value_column: str
    legend: list[LegendEntry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.regions)

    @property
    def labels(self) -> list[str]:
        return [str(label) for label in self.regions[LABEL_COLUMN]]

    @property
    def fill_colors(self) -> list[str]:
        return list(self.regions[FILL_COLUMN])


def legend_entries(bins: Sequence[float], mapper: ColorMapper, include_missing: bool = False) -> list[LegendEntry]:
    arr = validate_bins(bins)
    entries = [
        LegendEntry(
            lower=float(lo),
            upper=float(hi),
            color=mapper.color(i),
            text=f"{format_number(lo)} – {format_number(hi)}",
        )
        for i, (lo, hi) in enumerate(zip(arr[:-1], arr[1:]))
    ]
    if include_missing:
        entries.append(LegendEntry(lower=None, upper=None, color=mapper.na_color, text=MISSING_LABEL))
    return entries


def build_layer(
    joined: gpd.GeoDataFrame,
    id_column: str,
    value_column: str,
    bins: Sequence[float],
    mapper: ColorMapper,
    *,
    unit: str = "",
    label_template: str = DEFAULT_TEMPLATE,
) -> ChoroplethLayer:
    """Bin, color and label every region of *joined*.

    *joined* is not modified. The mapper must have one color per bin.
    """
    n = len(validate_bins(bins)) - 1
    if len(mapper) != n:
        raise ValueError(f"Palette has {len(mapper)} colors for {n} bins")

    regions = joined.copy()
    regions[BIN_COLUMN] = assign_bins(bins, regions[value_column])
    regions[FILL_COLUMN] = mapper.colorize(regions[BIN_COLUMN])
    regions[LABEL_COLUMN] = format_labels(
        regions, id_column, value_column, unit=unit, template=label_template
    )

    clipped = count_outside(bins, regions[value_column])
    if clipped:
        logger.info("%d values fall outside [%s, %s] and were clipped to the edge bins",
                    clipped, format_number(bins[0]), format_number(bins[-1]))

    has_missing = bool(regions[value_column].isna().any())
    legend = legend_entries(bins, mapper, include_missing=has_missing)
    logger.info("Built layer: %d regions, %d bins", len(regions), n)
    return ChoroplethLayer(regions=regions, id_column=id_column, value_column=value_column, legend=legend)
