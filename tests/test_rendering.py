"""Tests for layer assembly and the folium / plotly renderers."""

from __future__ import annotations

import folium
import geopandas as gpd
import plotly.graph_objects as go
import pytest
from shapely.geometry import box

from choromap.config import ChoroplethStyle, LegendOptions, MapOptions
from choromap.processing.palette import ColorMapper
from choromap.rendering.layer import (
    BIN_COLUMN,
    FILL_COLUMN,
    LABEL_COLUMN,
    build_layer,
    legend_entries,
)
from choromap.rendering.leaflet import legend_html, render_leaflet
from choromap.rendering.output import save_map
from choromap.rendering.plotly_map import discrete_colorscale, render_plotly, to_plotly_markup

WAGE_BINS = [2200, 2250, 2300, 2350, 2400, 2450, 2500, 2550, 2600, 2650]


@pytest.fixture
def joined() -> gpd.GeoDataFrame:
    return gpd.GeoDataFrame(
        {
            "plz": ["01", "02", "10", "99"],
            "mean_minincome": [2383.0, 2199.0, 2417.5, None],
        },
        geometry=[box(6 + i, 50, 7 + i, 51) for i in range(4)],
        crs="EPSG:4326",
    )


@pytest.fixture
def mapper() -> ColorMapper:
    return ColorMapper("YlOrRd", n_bins=9)


@pytest.fixture
def layer(joined, mapper):
    return build_layer(joined, "plz", "mean_minincome", WAGE_BINS, mapper, unit="€")


class TestBuildLayer:
    def test_columns_and_count(self, layer, joined):
        assert len(layer) == len(joined)
        for col in (BIN_COLUMN, FILL_COLUMN, LABEL_COLUMN):
            assert col in layer.regions.columns
        assert FILL_COLUMN not in joined.columns

    def test_bins_and_colors(self, layer, mapper):
        regions = layer.regions.set_index("plz")
        assert regions.loc["01", BIN_COLUMN] == 3
        assert regions.loc["02", BIN_COLUMN] == 0
        assert regions.loc["01", FILL_COLUMN] == mapper.colors[3]
        assert regions.loc["99", FILL_COLUMN] == mapper.na_color

    def test_labels(self, layer):
        labels = dict(zip(layer.regions["plz"], layer.labels))
        assert "10" in labels["10"] and "2417.5" in labels["10"]
        assert "no data" in labels["99"]

    def test_legend_has_missing_entry_only_when_needed(self, layer, joined, mapper):
        assert len(layer.legend) == 10
        assert layer.legend[-1].text == "no data"
        assert layer.legend[0].text == "2200 – 2250"
        complete = build_layer(joined.iloc[:3], "plz", "mean_minincome", WAGE_BINS, mapper)
        assert len(complete.legend) == 9

    def test_palette_size_must_match_bins(self, joined):
        with pytest.raises(ValueError):
            build_layer(joined, "plz", "mean_minincome", WAGE_BINS, ColorMapper("YlOrRd", n_bins=5))

    def test_legend_entries_cover_bins(self, mapper):
        entries = legend_entries(WAGE_BINS, mapper)
        assert [(e.lower, e.upper) for e in entries][0] == (2200.0, 2250.0)
        assert entries[-1].upper == 2650.0
        assert [e.color for e in entries] == list(mapper.colors)


class TestLeafletRenderer:
    def test_returns_map_with_regions_and_legend(self, layer):
        m = render_leaflet(layer)
        assert isinstance(m, folium.Map)
        html = m.get_root().render()
        assert "2417.5" in html
        assert "Desired minimum wage" in html
        assert "choromap-legend" in html
        assert "tile.openstreetmap.de" in html

    def test_style_options_are_applied(self, layer):
        style = ChoroplethStyle(map=MapOptions(tiles="CartoDB.Positron", min_zoom=3))
        html = render_leaflet(layer, style).get_root().render()
        assert "basemaps.cartocdn.com" in html
        assert "#D3D3D3" in html

    def test_unknown_tiles(self, layer):
        with pytest.raises(ValueError):
            render_leaflet(layer, ChoroplethStyle(map=MapOptions(tiles="No.Such.Provider")))

    def test_legend_html(self, layer):
        html = legend_html(layer.legend, LegendOptions(title="Wage", position="topleft"))
        assert "Wage" in html
        assert "top: 80px" in html
        assert html.count("display:inline-block") == len(layer.legend)
        with pytest.raises(ValueError):
            legend_html(layer.legend, LegendOptions(position="middle"))


class TestPlotlyRenderer:
    def test_traces(self, layer):
        fig = render_plotly(layer)
        assert isinstance(fig, go.Figure)
        main, missing = fig.data
        assert list(main.locations) == ["01", "02", "10"]
        assert list(main.z) == [3.5, 0.5, 4.5]
        assert list(missing.locations) == ["99"]
        assert "<b>10</b>" in main.text[2]

    def test_no_missing_trace_when_complete(self, joined, mapper):
        complete = build_layer(joined.iloc[:3], "plz", "mean_minincome", WAGE_BINS, mapper)
        assert len(render_plotly(complete).data) == 1

    def test_markup_conversion(self):
        assert to_plotly_markup("A: <strong>1</strong><br/>2") == "A: <b>1</b><br>2"

    def test_discrete_colorscale(self):
        scale = discrete_colorscale(["#a", "#b"])
        assert scale == [[0.0, "#a"], [0.5, "#a"], [0.5, "#b"], [1.0, "#b"]]


class TestSaveMap:
    def test_save_leaflet(self, layer, tmp_path):
        path = save_map(render_leaflet(layer), tmp_path / "out" / "map.html")
        assert path.is_file()
        assert "leaflet" in path.read_text(encoding="utf-8").lower()

    def test_save_plotly(self, layer, tmp_path):
        path = save_map(render_plotly(layer), tmp_path / "map.html")
        assert "plotly" in path.read_text(encoding="utf-8").lower()

    def test_unsupported_type(self, tmp_path):
        with pytest.raises(TypeError):
            save_map(object(), tmp_path / "x.html")
