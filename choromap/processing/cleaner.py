"""Data cleaning and normalization utilities."""

from __future__ import annotations

import logging
import re

import pandas as pd

logger = logging.getLogger(__name__)


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Lowercase, strip, and snake_case column names.

    ``mean.minIncome`` becomes ``mean_minincome``.
    """
    df = df.copy()
    df.columns = [re.sub(r"[^a-z0-9]+", "_", str(col).strip().lower()).strip("_") for col in df.columns]
    return df


def strip_strings(df: pd.DataFrame) -> pd.DataFrame:
    """Strip leading/trailing whitespace from string columns."""
    df = df.copy()
    str_cols = df.select_dtypes(include=["object", "string"]).columns
    for col in str_cols:
        df[col] = df[col].str.strip()
    return df


def coerce_numeric(df: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    """Force columns to numeric, coercing errors to NaN."""
    df = df.copy()
    for col in columns:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")
    return df


def normalize_codes(codes: pd.Series, width: int | None = None) -> pd.Series:
    """Render region codes as stripped strings, zero-padded to *width*.

    Numeric codes read from CSV (``1.0``) are converted back to ``"1"``
    before padding. Missing codes stay missing.
    """
    def _one(code):
        if pd.isna(code):
            return None
        if isinstance(code, float) and code.is_integer():
            code = int(code)
        text = str(code).strip()
        return text.zfill(width) if width else text

    return pd.Series([_one(c) for c in codes], index=codes.index, dtype="object")


def clean_values(
    df: pd.DataFrame,
    id_column: str,
    value_column: str,
    code_width: int | None = None,
) -> pd.DataFrame:
    """Run the cleaning steps on a value table.

    Column names are normalized first, so *id_column* and *value_column*
    refer to the normalized names.
    """
    df = normalize_columns(df)
    df = strip_strings(df)

    for col in (id_column, value_column):
        if col not in df.columns:
            raise KeyError(f"Missing required column: {col}. Available: {list(df.columns)}")

    df = coerce_numeric(df, [value_column])
    df[id_column] = normalize_codes(df[id_column], code_width)

    no_code = df[id_column].isna()
    if no_code.any():
        logger.warning("Dropping %d rows with a missing %s", int(no_code.sum()), id_column)
        df = df[~no_code]

    before = len(df)
    df = df.drop_duplicates()
    if len(df) < before:
        logger.info("Removed %d duplicate rows", before - len(df))

    missing = int(df[value_column].isna().sum())
    if missing:
        logger.warning("%d rows have a missing or non-numeric %s", missing, value_column)

    logger.info("Cleaning complete: %d rows x %d cols", len(df), len(df.columns))
    return df
