"""Attach region values to boundary geometries by region code."""

from __future__ import annotations

import logging

import geopandas as gpd
import pandas as pd

logger = logging.getLogger(__name__)

ON_MISSING_POLICIES = ("null", "raise")


def _as_codes(codes: pd.Series) -> pd.Series:
    """Codes as strings; missing codes stay ``None``."""
    return pd.Series([None if pd.isna(c) else str(c) for c in codes], index=codes.index, dtype="object")


def _duplicates(codes: pd.Series) -> list[str]:
    present = codes.dropna()
    return sorted(present[present.duplicated()].unique())


def join_values(
    boundaries: gpd.GeoDataFrame,
    values: pd.DataFrame,
    id_column: str,
    value_column: str,
    *,
    boundaries_id_column: str | None = None,
    on_missing: str = "null",
) -> gpd.GeoDataFrame:
    """Return a copy of *boundaries* with *value_column* attached.

    Rows are matched on region code, never on row order. The result has
    exactly one row per boundary, in boundary order.

    ``on_missing`` decides what happens to a region without a value:
    ``"null"`` keeps it with a missing value, ``"raise"`` raises
    ``ValueError``. Values whose code has no boundary are dropped with a
    warning.
    """
    if on_missing not in ON_MISSING_POLICIES:
        raise ValueError(f"on_missing must be one of {ON_MISSING_POLICIES}, got {on_missing!r}")

    geo_id = boundaries_id_column or id_column
    if geo_id not in boundaries.columns:
        raise KeyError(f"Boundaries have no id column {geo_id!r}. Available: {list(boundaries.columns)}")
    for col in (id_column, value_column):
        if col not in values.columns:
            raise KeyError(f"Values have no column {col!r}. Available: {list(values.columns)}")

    geo_codes = _as_codes(boundaries[geo_id])
    value_codes = _as_codes(values[id_column])

    dup = _duplicates(geo_codes)
    if dup:
        raise ValueError(f"Duplicate region codes in boundaries: {dup}")
    dup = _duplicates(value_codes)
    if dup:
        raise ValueError(f"Duplicate region codes in values: {dup}")

    has_code = value_codes.notna()
    if not has_code.all():
        logger.warning("Ignoring %d value rows with a missing %s", int((~has_code).sum()), id_column)
    lookup = pd.Series(
        values.loc[has_code.to_numpy(), value_column].to_numpy(),
        index=value_codes[has_code].to_numpy(),
    )

    if geo_codes.isna().any():
        logger.warning("%d regions have no code and will be shown as missing", int(geo_codes.isna().sum()))
    unmatched = sorted(set(geo_codes.dropna()) - set(lookup.index))
    if unmatched:
        if on_missing == "raise":
            raise ValueError(f"{len(unmatched)} regions have no value: {unmatched}")
        logger.warning("%d regions have no value and will be shown as missing: %s", len(unmatched), unmatched)

    orphans = sorted(set(lookup.index) - set(geo_codes.dropna()))
    if orphans:
        logger.warning("Dropping %d values with no matching region: %s", len(orphans), orphans)

    joined = boundaries.copy()
    if geo_id != id_column and id_column in joined.columns:
        joined = joined.drop(columns=[id_column])
    joined[id_column] = geo_codes.to_numpy()
    joined[value_column] = pd.to_numeric(geo_codes.map(lookup), errors="coerce").to_numpy()

    logger.info("Joined %d values onto %d regions", len(lookup) - len(orphans), len(joined))
    return joined
