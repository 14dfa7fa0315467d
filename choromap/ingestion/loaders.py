"""Loading of value tables and boundary files.

Both loaders accept a local path or an http(s) URL. Local files that do
not exist fail fast with ``FileNotFoundError``; parse errors from pandas
or geopandas propagate unchanged.
"""

from __future__ import annotations

import io
import json
import logging
from pathlib import Path

import geopandas as gpd
import httpx
import pandas as pd

from choromap.ingestion.cache import cached_download

logger = logging.getLogger(__name__)

# Timeouts (connect, read) in seconds
TIMEOUT = httpx.Timeout(15.0, read=120.0)

WGS84 = "EPSG:4326"


def is_url(source: str | Path) -> bool:
    return str(source).startswith(("http://", "https://"))


@cached_download()
def download(url: str) -> bytes:
    """Fetch a remote file and return its raw bytes."""
    logger.info("Downloading %s", url)
    resp = httpx.get(url, follow_redirects=True, timeout=TIMEOUT)
    resp.raise_for_status()
    return resp.content


def _read_local(source: str | Path) -> bytes:
    path = Path(source)
    if not path.is_file():
        raise FileNotFoundError(f"Input file not found: {path}")
    return path.read_bytes()


def _read_bytes(source: str | Path) -> bytes:
    return download(str(source)) if is_url(source) else _read_local(source)


def detect_separator(text: str) -> str:
    """Guess the CSV separator from the header line (``;`` or ``,``)."""
    first_line = text.split("\n", maxsplit=1)[0]
    return ";" if first_line.count(";") > first_line.count(",") else ","


def load_values(
    source: str | Path,
    id_column: str | None = None,
    sep: str | None = None,
) -> pd.DataFrame:
    """Load the region → value table.

    CSV is the default format; ``.json`` and ``.parquet`` suffixes are read
    with the matching pandas reader. When *id_column* is given it is read as
    a string so that codes like ``"01"`` keep their leading zeros.
    """
    raw = _read_bytes(source)
    suffix = Path(str(source).split("?", maxsplit=1)[0]).suffix.lower()

    if suffix == ".parquet":
        df = pd.read_parquet(io.BytesIO(raw))
    elif suffix == ".json":
        df = pd.read_json(io.BytesIO(raw), dtype={id_column: str} if id_column else None)
    else:
        text = raw.decode("utf-8-sig")
        if sep is None:
            sep = detect_separator(text)
        dtype = {id_column: str} if id_column else None
        df = pd.read_csv(io.StringIO(text), sep=sep, dtype=dtype)

    logger.info("Loaded values: %d rows x %d columns from %s", len(df), len(df.columns), source)
    return df


def load_boundaries(source: str | Path) -> gpd.GeoDataFrame:
    """Load a GeoJSON FeatureCollection as a GeoDataFrame in WGS84.

    Feature properties become columns. Geometry is not validated or repaired.
    """
    raw = _read_bytes(source)
    payload = json.loads(raw)
    features = payload.get("features") if isinstance(payload, dict) else None
    if features is None:
        raise ValueError(f"{source} is not a GeoJSON FeatureCollection")

    crs = WGS84
    named = (payload.get("crs") or {}).get("properties", {}).get("name")
    if named:
        crs = named

    gdf = gpd.GeoDataFrame.from_features(features, crs=crs)
    if gdf.crs is not None and not gdf.crs.equals(WGS84):
        gdf = gdf.to_crs(WGS84)
    logger.info("Loaded boundaries: %d features from %s", len(gdf), source)
    return gdf
