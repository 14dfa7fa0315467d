"""Hover label markup for map regions."""

from __future__ import annotations

import pandas as pd
from markupsafe import Markup

from choromap.config import MISSING_LABEL

DEFAULT_TEMPLATE = "Zip-Region: <strong>{code}</strong><br/>{value}"


def format_number(value: float) -> str:
    """Shortest general form, like C's ``%g``: 2417.5 -> ``2417.5``, 2383.0 -> ``2383``."""
    return f"{value:g}"


def format_label(
    code,
    value: float | None,
    *,
    unit: str = "",
    template: str = DEFAULT_TEMPLATE,
) -> Markup:
    """Build the label shown when hovering over a region.

    *template* is trusted markup; *code*, the value and *unit* are escaped.
    A missing value is rendered as ``"no data"`` without the unit.
    """
    if value is None or pd.isna(value):
        text = MISSING_LABEL
    else:
        text = format_number(float(value))
        if unit:
            text = f"{text} {unit}"
    return Markup(template).format(code=str(code), value=text)


def format_labels(
    frame: pd.DataFrame,
    id_column: str,
    value_column: str,
    *,
    unit: str = "",
    template: str = DEFAULT_TEMPLATE,
) -> pd.Series:
    labels = [
        format_label(code, value, unit=unit, template=template)
        for code, value in zip(frame[id_column], frame[value_column])
    ]
    return pd.Series(labels, index=frame.index, dtype="object")
