"""
Streamlit application for the global forest trends report.

Features:
- Choose between two Our World in Data series:
  * Net forest conversion (hectares)
  * Share of global forest area (% of global total)
- Pick a country (only countries with a well-fitting linear trend are
  offered) and a year between 1980 and 2080
- Read the predicted value from the country's trend line
- Visualize:
  * Historical observations, held-out years and the fitted/extrapolated line
  * Model quality table and hold-out accuracy

Run locally with:
    streamlit run app.py
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns
import streamlit as st

from forest_ml.data import (
    DATASETS,
    DatasetConfig,
    get_default_data_path,
    load_and_prepare_dataset,
    split_holdout,
)
from forest_ml.models import (
    QUALITY_THRESHOLD,
    FittedModel,
    ModelCollection,
    ModelNotFound,
    evaluate_holdout,
    fit_models,
    holdout_metrics,
    models_to_frame,
    predict,
    trend_line,
)
from forest_ml.utils import configure_logging


YEAR_MIN = 1980
YEAR_MAX = 2080
DEFAULT_YEAR = 2030

sns.set(style="whitegrid")


@st.cache_resource
def load_data_and_models(
    dataset_key: str, data_path: str
) -> Tuple[pd.DataFrame, pd.DataFrame, ModelCollection, Dict[str, Any]]:
    """Load one dataset, fit its per-country models and score them (cached)."""
    config = DATASETS[dataset_key]
    observations = load_and_prepare_dataset(config, data_path)
    train, test = split_holdout(observations, config.holdout_count)
    models = fit_models(train, QUALITY_THRESHOLD)
    metrics = holdout_metrics(evaluate_holdout(models, test, config.precision))
    return observations, test, models, metrics


def format_prediction(value: float, config: DatasetConfig) -> str:
    """Render a prediction with the dataset's precision and unit."""
    return f"{value:,.{config.precision}f} {config.unit}"


def plot_country_trend(
    observations: pd.DataFrame,
    test: pd.DataFrame,
    model: FittedModel,
    config: DatasetConfig,
    year: int,
    predicted: float,
) -> None:
    """Plot history, held-out years, the fitted line and the selected prediction."""
    history = observations[observations["country"] == model.country]
    held_out = test[test["country"] == model.country]
    trained_on = history[~history["year"].isin(held_out["year"])]
    start = min(year, int(history["year"].min()))
    end = max(year, int(history["year"].max()))
    line = trend_line(model, start, end)

    fig, ax = plt.subplots(figsize=(10, 5))
    ax.plot(line["year"], line["value"], label="Linear trend", color="tab:green")
    ax.scatter(trained_on["year"], trained_on["value"], label="Training years", s=40)
    if not held_out.empty:
        ax.scatter(
            held_out["year"],
            held_out["value"],
            label="Held-out years",
            s=60,
            marker="s",
            color="tab:orange",
        )
    ax.scatter([year], [predicted], c="red", s=120, marker="X", label=f"Prediction {year}")
    ax.set_xlabel("Year")
    ax.set_ylabel(f"{config.label} ({config.unit})")
    ax.set_title(f"{config.label}: {model.country}")
    ax.legend()
    st.pyplot(fig)


def main() -> None:
    configure_logging()
    st.set_page_config(
        page_title="Global Forest Trends",
        layout="wide",
    )

    st.title("Global Forest Trends: per-country linear projections")
    st.markdown(
        f"""
Each country's history is fitted with a straight line against year. Only
countries whose line explains the history well (adjusted R² above
{QUALITY_THRESHOLD}) can be selected; the most recent years are held out to
check how well the lines extrapolate.
"""
    )

    st.sidebar.header("Input configuration")
    dataset_key = st.sidebar.radio(
        "Dataset:",
        options=list(DATASETS),
        format_func=lambda key: DATASETS[key].label,
    )
    config = DATASETS[dataset_key]

    data_path = get_default_data_path(config)
    if not data_path.exists():
        st.error(
            f"Dataset not found at `{data_path}`. Download the Our World in Data "
            f"export `{config.filename}` into the data directory."
        )
        st.stop()

    observations, test, models, metrics = load_data_and_models(
        dataset_key, str(data_path)
    )
    if not models:
        st.warning("No country has a trend line that clears the quality threshold.")
        st.stop()

    country = st.sidebar.selectbox("Country", options=sorted(models))
    year = st.sidebar.slider(
        "Year", min_value=YEAR_MIN, max_value=YEAR_MAX, value=DEFAULT_YEAR
    )

    col_pred, col_perf = st.columns([2, 1])

    with col_pred:
        st.subheader("Prediction")
        try:
            predicted = predict(models, country, year, config.precision)
        except ModelNotFound as e:
            st.warning(str(e))
            st.stop()
        model = models[country]

        st.metric(
            label=f"{config.label} in {country}, {year}",
            value=format_prediction(predicted, config),
        )
        plot_country_trend(observations, test, model, config, year, predicted)

    with col_perf:
        st.subheader("Hold-out accuracy")
        st.caption(
            f"Last {config.holdout_count} year(s) of every country held out."
        )
        st.json(metrics)
        st.markdown(
            f"**{country}**: value = {model.intercept:,.4f} "
            f"+ {model.slope:,.6f} × year, adjusted R² = {model.r2_adj:.3f}"
        )

    st.markdown("---")
    st.subheader("Countries with a usable trend")
    st.dataframe(models_to_frame(models))


if __name__ == "__main__":
    main()
