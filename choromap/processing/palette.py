"""Discrete bin → color lookup backed by ColorBrewer schemes."""

from __future__ import annotations

import pandas as pd
from branca.utilities import color_brewer

from choromap.config import DEFAULT_NA_COLOR, DEFAULT_PALETTE

# ColorBrewer publishes schemes from three classes upward.
MIN_SCHEME_SIZE = 3


def palette_colors(name: str, n: int) -> list[str]:
    """The *n*-step ColorBrewer scheme *name* as hex strings.

    A ``_r`` suffix reverses the scheme. For one or two bins the ends of the
    three-class scheme are used.
    """
    if n < 1:
        raise ValueError(f"Need at least one color, got {n}")
    if n >= MIN_SCHEME_SIZE:
        return [c.lower() for c in color_brewer(name, n=n)]
    base = [c.lower() for c in color_brewer(name, n=MIN_SCHEME_SIZE)]
    return [base[0]] if n == 1 else [base[0], base[-1]]


class ColorMapper:
    """Maps bin indices to colors; missing bins map to *na_color*."""

    def __init__(self, palette: str = DEFAULT_PALETTE, n_bins: int = 9, na_color: str = DEFAULT_NA_COLOR):
        self.palette = palette
        self.na_color = na_color
        self.colors = tuple(palette_colors(palette, n_bins))

    def __len__(self) -> int:
        return len(self.colors)

    def __repr__(self) -> str:
        return f"ColorMapper({self.palette!r}, n_bins={len(self)})"

    def color(self, index: int | None) -> str:
        if index is None or index is pd.NA:
            return self.na_color
        index = int(index)
        if not 0 <= index < len(self.colors):
            raise IndexError(f"Bin index {index} out of range for {len(self.colors)} colors")
        return self.colors[index]

    def colorize(self, bins: pd.Series) -> pd.Series:
        return bins.map(lambda b: self.na_color if pd.isna(b) else self.color(b)).astype("object")
