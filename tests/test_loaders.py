"""Tests for file/URL loading and the download cache."""

from __future__ import annotations

import json
import time

import httpx
import pandas as pd
import pytest
from shapely.geometry import box, mapping

from choromap.ingestion import loaders
from choromap.ingestion.cache import cached_download, cached_urls, clear_cache
from choromap.ingestion.loaders import detect_separator, is_url, load_boundaries, load_values

BOUNDARY_URL = "https://example.org/plz-2stellig.geojson"


def _feature_collection() -> dict:
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"plz": code, "note": f"region {code}"},
                "geometry": mapping(box(i, 50, i + 1, 51)),
            }
            for i, code in enumerate(["01", "02", "10"])
        ],
    }


@pytest.fixture
def geojson_file(tmp_path):
    path = tmp_path / "plz.geojson"
    path.write_text(json.dumps(_feature_collection()), encoding="utf-8")
    return path


@pytest.fixture
def fake_http(monkeypatch):
    """Serve canned responses instead of hitting the network."""
    calls: list[str] = []
    responses: dict[str, tuple[int, bytes]] = {}

    def fake_get(url, **kwargs):
        calls.append(url)
        status, content = responses.get(url, (404, b"not found"))
        return httpx.Response(status, content=content, request=httpx.Request("GET", url))

    monkeypatch.setattr(loaders.httpx, "get", fake_get)
    return calls, responses


class TestLoadValues:
    def setup_method(self):
        clear_cache()

    def test_csv_keeps_leading_zeros(self, tmp_path):
        path = tmp_path / "income.csv"
        path.write_text("plz,mean.minIncome\n01,2383\n10,2417.5\n", encoding="utf-8")
        df = load_values(path, id_column="plz")
        assert df["plz"].tolist() == ["01", "10"]
        assert df["mean.minIncome"].tolist() == [2383, 2417.5]

    def test_semicolon_separator_detected(self, tmp_path):
        path = tmp_path / "income.csv"
        path.write_text("plz;value\n01;2383,5\n", encoding="utf-8")
        df = load_values(path, id_column="plz")
        assert list(df.columns) == ["plz", "value"]

    def test_json(self, tmp_path):
        path = tmp_path / "income.json"
        path.write_text(json.dumps([{"plz": "01", "value": 1.5}]), encoding="utf-8")
        df = load_values(path, id_column="plz")
        assert df.loc[0, "plz"] == "01"
        assert df.loc[0, "value"] == 1.5

    def test_parquet(self, tmp_path):
        path = tmp_path / "income.parquet"
        pd.DataFrame({"plz": ["01", "10"], "value": [1.5, 2417.5]}).to_parquet(path)
        df = load_values(path, id_column="plz")
        assert df["plz"].tolist() == ["01", "10"]
        assert df["value"].tolist() == [1.5, 2417.5]

    def test_missing_file_fails_fast(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_values(tmp_path / "absent.csv")

    def test_from_url(self, fake_http):
        calls, responses = fake_http
        url = "https://example.org/income.csv"
        responses[url] = (200, b"plz,value\n01,2383\n")
        df = load_values(url, id_column="plz")
        assert df["plz"].tolist() == ["01"]
        assert calls == [url]

    def test_http_error_propagates(self, fake_http):
        with pytest.raises(httpx.HTTPStatusError):
            load_values("https://example.org/missing.csv")


class TestLoadBoundaries:
    def setup_method(self):
        clear_cache()

    def test_local_geojson(self, geojson_file):
        gdf = load_boundaries(geojson_file)
        assert gdf["plz"].tolist() == ["01", "02", "10"]
        assert gdf.crs.to_epsg() == 4326
        assert set(gdf.geom_type) == {"Polygon"}

    def test_url_is_downloaded_once(self, fake_http):
        calls, responses = fake_http
        responses[BOUNDARY_URL] = (200, json.dumps(_feature_collection()).encode())
        first = load_boundaries(BOUNDARY_URL)
        second = load_boundaries(BOUNDARY_URL)
        assert len(first) == len(second) == 3
        assert calls == [BOUNDARY_URL]
        assert cached_urls() == [BOUNDARY_URL]

    def test_not_a_feature_collection(self, tmp_path):
        path = tmp_path / "bad.geojson"
        path.write_text(json.dumps({"type": "Point", "coordinates": [0, 0]}), encoding="utf-8")
        with pytest.raises(ValueError):
            load_boundaries(path)

    def test_missing_file_fails_fast(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_boundaries(tmp_path / "absent.geojson")


class TestHelpers:
    def test_detect_separator(self):
        assert detect_separator("a;b;c\n1;2;3") == ";"
        assert detect_separator("a,b\n1,2") == ","

    def test_is_url(self):
        assert is_url("https://example.org/x.csv")
        assert not is_url("Data/income_data.csv")


class TestDownloadCache:
    def setup_method(self):
        clear_cache()

    def test_cached_per_url(self):
        calls = []

        @cached_download(ttl=60)
        def fetch(url):
            calls.append(url)
            return url.encode()

        assert fetch("a") == b"a"
        assert fetch("a") == b"a"
        assert fetch("b") == b"b"
        assert calls == ["a", "b"]

    def test_cache_expires(self):
        calls = []

        @cached_download(ttl=1)
        def fetch(url):
            calls.append(url)
            return b"x"

        fetch("a")
        time.sleep(1.1)
        fetch("a")
        assert calls == ["a", "a"]

    def test_expired_entries_are_evicted(self):
        @cached_download(ttl=1)
        def fetch(url):
            return b"x"

        fetch("a")
        time.sleep(1.1)
        fetch("b")
        assert cached_urls() == ["b"]

    def test_failures_not_cached(self):
        attempts = []

        @cached_download(ttl=60)
        def flaky(url):
            attempts.append(url)
            if len(attempts) == 1:
                raise httpx.ConnectError("down")
            return b"ok"

        with pytest.raises(httpx.ConnectError):
            flaky("a")
        assert flaky("a") == b"ok"

    def test_clear_cache(self):
        @cached_download(ttl=60)
        def fetch(url):
            return b"x"

        fetch("a")
        fetch("b")
        assert clear_cache() == 2
        assert cached_urls() == []
