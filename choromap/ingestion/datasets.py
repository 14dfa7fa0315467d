"""Registry of bundled map datasets and their configurations."""

from __future__ import annotations

from dataclasses import dataclass, field

from choromap.config import DEFAULT_PALETTE


@dataclass
class DatasetConfig:
    name: str
    values_path: str
    boundaries_path: str
    id_column: str
    value_column: str
    bins: list[float] = field(default_factory=list)
    bin_step: float | None = None
    palette: str = DEFAULT_PALETTE
    unit: str = ""
    code_width: int | None = None
    legend_title: str = ""
    label_template: str | None = None
    boundaries_id_column: str | None = None
    on_missing: str = "null"
    output_path: str = "map.html"


DATASET_REGISTRY: dict[str, DatasetConfig] = {
    "truck_driver_wages": DatasetConfig(
        name="Desired minimum wage of professional truck drivers",
        values_path="Data/income_data.csv",
        boundaries_path="Data/plz-2stellig.geojson",
        id_column="plz",
        value_column="mean_minincome",
        bins=[2200, 2250, 2300, 2350, 2400, 2450, 2500, 2550, 2600, 2650],
        palette="YlOrRd",
        unit="€",
        code_width=2,
        legend_title="Desired minimum wage <br> (in Euro)",
        output_path="output/truck_driver_wages.html",
    ),
}


def get_dataset(key: str) -> DatasetConfig:
    try:
        return DATASET_REGISTRY[key]
    except KeyError:
        raise ValueError(
            f"Unknown dataset {key!r}. Available: {sorted(DATASET_REGISTRY)}"
        ) from None
