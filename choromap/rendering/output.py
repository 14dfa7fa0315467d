"""Writing rendered maps to self-contained HTML documents."""

from __future__ import annotations

import logging
from pathlib import Path

import folium
import plotly.graph_objects as go

logger = logging.getLogger(__name__)


def save_map(rendered: folium.Map | go.Figure, path: str | Path) -> Path:
    """Write *rendered* as HTML to *path*, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(rendered, folium.Map):
        rendered.save(str(path))
    elif isinstance(rendered, go.Figure):
        rendered.write_html(str(path), include_plotlyjs=True, full_html=True)
    else:
        raise TypeError(f"Cannot save object of type {type(rendered).__name__}")
    logger.info("Wrote map -> %s", path)
    return path
