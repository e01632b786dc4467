"""
# Global Forest Trends Report

Statistical report on two Our World in Data series:
- **Net forest conversion** (hectares): net change in forest area per period
- **Share of global forest area** (% of the world's forest in each country)

It walks through:
- Data understanding & cleaning
- Exploratory Data Analysis (EDA)
- Per-country linear trends against year
- Model quality filtering with adjusted R²
- Accuracy on held-out recent years
- Projections for selected countries

This script is written in a notebook-friendly style with `# %%` cells and
markdown-style comments, so it can be run as a plain Python file or imported
into Jupyter / VS Code as a notebook.
"""

# %% [markdown]
"""
### 0. Imports and configuration

- **pandas, numpy** for data manipulation
- **matplotlib, seaborn** for visualization
- **forest_ml** for loading, splitting, fitting and predicting
"""

# %%
import warnings

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns

from forest_ml.data import (
    DATASETS,
    DatasetConfig,
    get_default_data_path,
    load_and_prepare_dataset,
    split_holdout,
)
from forest_ml.models import (
    QUALITY_THRESHOLD,
    MIN_OBSERVATIONS,
    ModelCollection,
    ModelNotFound,
    evaluate_holdout,
    fit_country_model,
    fit_models,
    holdout_metrics,
    models_to_frame,
    predict,
    trend_line,
)
from forest_ml.utils import configure_logging

warnings.filterwarnings("ignore")
sns.set(style="whitegrid", context="talk")

PROJECTION_YEARS = [2030, 2050, 2080]


# %% [markdown]
"""
### 1. Data loading and understanding

Both CSVs follow the OWID grapher layout:
- `Entity`: country or aggregate name
- `Code`: ISO 3166 alpha-3 code (empty for regional aggregates)
- `Year`
- one value column

We rename to `country, year, value`, drop `Code` and the `World` aggregate.
Countries have irregular coverage: the conversion series is reported per
period (a handful of points per country), the area series yearly.
"""

# %%
def describe_dataset(obs: pd.DataFrame, config: DatasetConfig) -> pd.DataFrame:
    """
    Print coverage statistics and return per-country observation counts.
    """
    print(f"{config.label}: {len(obs)} rows, {obs['country'].nunique()} countries")
    print("Years covered:", obs["year"].min(), "to", obs["year"].max())
    print(f"\nSummary statistics ({config.unit}):")
    print(obs["value"].describe().to_string())

    coverage = (
        obs.groupby("country")["year"]
        .agg(n_years="count", first="min", last="max")
        .sort_values("n_years")
    )
    print("\nObservations per country:")
    print(coverage["n_years"].value_counts().sort_index().to_string())
    return coverage


# %% [markdown]
"""
### 2. Exploratory Data Analysis (EDA)

- Distribution of values across countries
- Trajectories of the countries with the largest absolute values
"""

# %%
def perform_eda(obs: pd.DataFrame, config: DatasetConfig, top_n: int = 6) -> None:
    """Distribution plot and trend lines for the largest countries."""
    plt.figure(figsize=(12, 5))
    sns.histplot(obs["value"], bins=50, kde=False)
    plt.xlabel(f"{config.label} ({config.unit})")
    plt.title(f"Distribution of {config.label.lower()} across countries and years")
    plt.tight_layout()
    plt.show()

    latest = obs.sort_values("year").groupby("country").tail(1)
    top = latest.reindex(latest["value"].abs().sort_values(ascending=False).index)
    top_countries = top["country"].head(top_n).tolist()

    plt.figure(figsize=(14, 7))
    for country in top_countries:
        series = obs[obs["country"] == country]
        plt.plot(series["year"], series["value"], marker="o", label=country)
    plt.xlabel("Year")
    plt.ylabel(f"{config.label} ({config.unit})")
    plt.title(f"{config.label}: largest countries by latest value")
    plt.legend()
    plt.tight_layout()
    plt.show()


# %% [markdown]
"""
### 3. Per-country linear trends

For every country we fit `value = a + b * year` by ordinary least squares on
the training years and score the fit with the **adjusted R²**:

    R²_adj = 1 - (1 - R²) * (n - 1) / (n - p - 1),  p = 1

With two points the line is always a perfect fit and the denominator is zero,
so at least three training years are required. Only lines with
`R²_adj > 0.6` are kept for prediction.
"""

# %%
def score_all_countries(train: pd.DataFrame) -> pd.DataFrame:
    """
    Adjusted R² of every fittable country, before the quality filter.
    """
    rows = []
    for country, group in train.groupby("country"):
        model = fit_country_model(
            country, group["year"].to_numpy(), group["value"].to_numpy()
        )
        if model is not None:
            rows.append({"country": country, "r2_adj": model.r2_adj})
    return pd.DataFrame(rows, columns=["country", "r2_adj"])


def plot_quality_distribution(scores: pd.DataFrame, config: DatasetConfig) -> None:
    """Histogram of adjusted R² with the quality threshold marked."""
    plt.figure(figsize=(12, 5))
    sns.histplot(scores["r2_adj"].clip(lower=-1.0), bins=40)
    plt.axvline(QUALITY_THRESHOLD, color="red", linestyle="--", label="Threshold")
    plt.xlabel("Adjusted R² (clipped at -1)")
    plt.title(f"Fit quality of per-country trends: {config.label}")
    plt.legend()
    plt.tight_layout()
    plt.show()


# %% [markdown]
"""
### 4. Accuracy on held-out years

The most recent year(s) of every country were excluded from fitting
(1 for conversion, 4 for area). Predicting them measures how well a straight
line extrapolates a few years ahead.
"""

# %%
def plot_holdout_errors(evaluation: pd.DataFrame, config: DatasetConfig) -> None:
    """Actual vs. predicted on the held-out years."""
    if evaluation.empty:
        print("No held-out predictions to plot.")
        return

    fig, ax = plt.subplots(figsize=(8, 8))
    ax.scatter(evaluation["actual"], evaluation["predicted"], alpha=0.6)
    lo = min(evaluation["actual"].min(), evaluation["predicted"].min())
    hi = max(evaluation["actual"].max(), evaluation["predicted"].max())
    ax.plot([lo, hi], [lo, hi], color="grey", linestyle="--")
    ax.set_xlabel(f"Actual ({config.unit})")
    ax.set_ylabel(f"Predicted ({config.unit})")
    ax.set_title(f"Held-out years: {config.label}")
    plt.tight_layout()
    plt.show()


# %% [markdown]
"""
### 5. Projections

Using the kept models we project selected years. These are straight-line
extrapolations; decades ahead they say more about the direction of the recent
trend than about the eventual value.
"""

# %%
def project_countries(
    models: ModelCollection, config: DatasetConfig, countries: list[str]
) -> pd.DataFrame:
    """Predicted values for `PROJECTION_YEARS`, one row per country."""
    rows = []
    for country in countries:
        row = {"country": country}
        for year in PROJECTION_YEARS:
            try:
                row[year] = predict(models, country, year, config.precision)
            except ModelNotFound:
                row[year] = np.nan
        rows.append(row)
    return pd.DataFrame(rows).set_index("country")


def plot_projection(
    obs: pd.DataFrame, models: ModelCollection, config: DatasetConfig, country: str
) -> None:
    """History and extrapolated trend for one country."""
    model = models[country]
    history = obs[obs["country"] == country]
    line = trend_line(model, int(history["year"].min()), max(PROJECTION_YEARS))

    plt.figure(figsize=(12, 5))
    plt.scatter(history["year"], history["value"], label="Observed")
    plt.plot(line["year"], line["value"], color="tab:green", label="Linear trend")
    plt.xlabel("Year")
    plt.ylabel(f"{config.label} ({config.unit})")
    plt.title(f"{country}: {config.label.lower()} projection")
    plt.legend()
    plt.tight_layout()
    plt.show()


# %% [markdown]
"""
### 6. Running one analysis end to end
"""

# %%
def run_analysis(config: DatasetConfig) -> None:
    data_path = get_default_data_path(config)
    if not data_path.exists():
        raise FileNotFoundError(
            f"Dataset not found at {data_path}. "
            f"Please download '{config.filename}' from Our World in Data."
        )

    print(f"\n=== {config.label.upper()} ===")
    obs = load_and_prepare_dataset(config, data_path)

    print("\n--- 1. Data understanding ---")
    describe_dataset(obs, config)

    print("\n--- 2. EDA ---")
    perform_eda(obs, config)

    print("\n--- 3. Per-country trends ---")
    train, test = split_holdout(obs, config.holdout_count)
    scores = score_all_countries(train)
    models = fit_models(train, QUALITY_THRESHOLD)
    n_total = obs["country"].nunique()
    print(f"Countries with >= {MIN_OBSERVATIONS} training years: {len(scores)} / {n_total}")
    print(f"Countries kept (adjusted R² > {QUALITY_THRESHOLD}): {len(models)}")
    plot_quality_distribution(scores, config)

    table = models_to_frame(models)
    print("\nSteepest trends:")
    print(
        table.reindex(table["slope"].abs().sort_values(ascending=False).index)
        .head(10)
        .to_string(index=False)
    )

    print("\n--- 4. Held-out accuracy ---")
    evaluation = evaluate_holdout(models, test, config.precision)
    print(holdout_metrics(evaluation))
    plot_holdout_errors(evaluation, config)

    print("\n--- 5. Projections ---")
    if table.empty:
        print("No countries kept; nothing to project.")
        return
    best = table.sort_values("r2_adj", ascending=False)["country"].head(10).tolist()
    print(project_countries(models, config, best).to_string())
    plot_projection(obs, models, config, best[0])


# %% [markdown]
"""
### 7. Conclusions

- Compare the share of countries passing the quality gate in each series:
  volatile series fail it more often, and those countries cannot be
  projected.
- Compare held-out RMSE with the typical magnitude of each series (from the
  summary statistics) before trusting long-range projections.
- **Limitations**: few points per country, no uncertainty intervals, linear
  extrapolation ignores saturation (a share cannot go below zero).
"""

# %%
def main():
    configure_logging()
    for config in DATASETS.values():
        run_analysis(config)


if __name__ == "__main__":
    main()
