"""
Data loading and preprocessing utilities for the global forest trends report.

Both datasets are Our World in Data exports with the layout
`Entity, Code, Year, <value>`. This module turns them into a tidy frame with
the columns `country`, `year`, `value`, and holds the per-country
train/test split used before fitting.

Reused by:
- the offline training script (`train_models.py`)
- the interactive Streamlit application (`app.py`)
- the exploratory report (`forest_cover_report.py`)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Tuple

import pandas as pd

from .utils import get_data_dir


logger = logging.getLogger(__name__)

KEY_COLUMNS = ["Entity", "Code", "Year"]
COLUMNS = ["country", "year", "value"]
WORLD_ENTITY = "World"


@dataclass(frozen=True)
class DatasetConfig:
    """Settings for one of the two analyses."""

    key: str
    filename: str
    value_column: str
    label: str
    unit: str
    holdout_count: int
    precision: int


DATASETS: Dict[str, DatasetConfig] = {
    "conversion": DatasetConfig(
        key="conversion",
        filename="net-forest-conversion.csv",
        value_column="Net forest conversion",
        label="Net forest conversion",
        unit="hectares",
        holdout_count=1,
        precision=2,
    ),
    "area": DatasetConfig(
        key="area",
        filename="forest-area-as-share-of-global-forest-area.csv",
        value_column="Share of global forest area",
        label="Share of global forest area",
        unit="% of global total",
        holdout_count=4,
        precision=5,
    ),
}


def get_dataset_config(key: str) -> DatasetConfig:
    """Look up a dataset by key, e.g. `"conversion"` or `"area"`."""
    try:
        return DATASETS[key]
    except KeyError:
        raise ValueError(
            f"Unknown dataset {key!r}; expected one of {sorted(DATASETS)}"
        ) from None


def get_default_data_path(config: DatasetConfig) -> Path:
    """Return the default path to a dataset's CSV export."""
    return get_data_dir() / config.filename


def load_raw_forest_data(path: Path | str) -> pd.DataFrame:
    """Load a raw Our World in Data CSV export."""
    path = Path(path)
    df = pd.read_csv(path)
    logger.info("Loaded %d rows from %s", len(df), path)
    return df


def resolve_value_column(df: pd.DataFrame, value_column: str) -> str:
    """
    Find the column holding the measurement.

    OWID occasionally renames the value column between releases, so when the
    configured name is missing and exactly one non-key column remains, that
    column is used instead.
    """
    if value_column in df.columns:
        return value_column

    candidates = [c for c in df.columns if c not in KEY_COLUMNS]
    if len(candidates) == 1:
        logger.warning(
            "Value column %r not found, using %r instead", value_column, candidates[0]
        )
        return candidates[0]

    raise ValueError(
        f"Value column {value_column!r} not found. "
        f"Found columns: {df.columns.tolist()}"
    )


def to_observations(df: pd.DataFrame, value_column: str) -> pd.DataFrame:
    """
    Rename, filter and clean a raw export into `country, year, value` rows.

    - The `Code` column is dropped.
    - The `World` aggregate is removed; only per-country rows are modelled.
    - Rows whose year or value cannot be parsed are dropped.
    """
    missing = [c for c in ("Entity", "Year") if c not in df.columns]
    if missing:
        raise ValueError(
            f"Missing expected columns: {missing}. "
            f"Found columns: {df.columns.tolist()}"
        )

    value_column = resolve_value_column(df, value_column)
    obs = df.rename(
        columns={"Entity": "country", "Year": "year", value_column: "value"}
    )[COLUMNS].copy()

    obs = obs[obs["country"] != WORLD_ENTITY]
    obs["year"] = pd.to_numeric(obs["year"], errors="coerce")
    obs["value"] = pd.to_numeric(obs["value"], errors="coerce")
    obs = obs.dropna(subset=COLUMNS)
    obs["year"] = obs["year"].astype(int)
    obs["value"] = obs["value"].astype(float)

    return obs.sort_values(["country", "year"]).reset_index(drop=True)


def load_and_prepare_dataset(
    config: DatasetConfig, path: Path | str | None = None
) -> pd.DataFrame:
    """
    End-to-end data loading for one analysis:

    1. Load the raw CSV export
    2. Rename to `country, year, value`, drop `Code` and the `World` rows
    3. Drop unparsable rows
    """
    if path is None:
        path = get_default_data_path(config)
    df_raw = load_raw_forest_data(path)
    obs = to_observations(df_raw, config.value_column)
    logger.info(
        "%s: %d observations for %d countries",
        config.label,
        len(obs),
        obs["country"].nunique(),
    )
    return obs


def split_holdout(
    df: pd.DataFrame, holdout_count: int
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Hold out the most recent observations of every country.

    For each country the `holdout_count` latest years go to the test frame and
    the rest to the train frame. Countries with no more than `holdout_count`
    observations end up entirely in the test frame.

    Returns
    -------
    train, test : pd.DataFrame
        Both sorted by country, then year ascending, with a fresh index.
    """
    if holdout_count < 1:
        raise ValueError(f"holdout_count must be >= 1, got {holdout_count}")

    dupes = df.duplicated(subset=["country", "year"], keep=False)
    if dupes.any():
        pairs = df.loc[dupes, ["country", "year"]].drop_duplicates()
        raise ValueError(
            "Duplicate country-year observations: "
            + ", ".join(f"{c} {y}" for c, y in pairs.itertuples(index=False))
        )

    ordered = df.sort_values(["country", "year"], ascending=[True, False])
    # 0 for the latest year of each country, 1 for the one before, ...
    recency = ordered.groupby("country").cumcount()
    is_test = recency < holdout_count

    def _tidy(frame: pd.DataFrame) -> pd.DataFrame:
        return frame.sort_values(["country", "year"]).reset_index(drop=True)

    return _tidy(ordered[~is_test]), _tidy(ordered[is_test])
