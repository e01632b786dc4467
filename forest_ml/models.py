"""
Per-country linear trend models for the global forest trends report.

Every country gets its own ordinary least-squares line `value = a + b * year`
fitted with scikit-learn. Lines that do not explain the history well enough
(adjusted R² at or below the quality threshold) are discarded, so the
resulting model collection only contains countries with a usable trend.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np
import pandas as pd
from sklearn.linear_model import LinearRegression
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score


logger = logging.getLogger(__name__)

QUALITY_THRESHOLD = 0.6
# Adjusted R² needs n - p - 1 > 0 with a single predictor.
MIN_OBSERVATIONS = 3


class ModelNotFound(LookupError):
    """Raised when no fitted model exists for the requested country."""

    def __init__(self, country: str):
        super().__init__(f"No model available for {country!r}")
        self.country = country


@dataclass(frozen=True)
class FittedModel:
    """Linear trend of one country, `value = intercept + slope * year`."""

    country: str
    intercept: float
    slope: float
    r2: float
    r2_adj: float
    n_obs: int
    first_year: int
    last_year: int

    def predict(self, year: float) -> float:
        return self.intercept + self.slope * year


ModelCollection = Dict[str, FittedModel]


def adjusted_r2(r2: float, n_obs: int, n_predictors: int = 1) -> float:
    """
    Penalise R² for sample size and number of predictors:

        R²_adj = 1 - (1 - R²) * (n - 1) / (n - p - 1)
    """
    dof = n_obs - n_predictors - 1
    if dof <= 0:
        raise ValueError(
            f"Adjusted R² is undefined for n={n_obs} with p={n_predictors}"
        )
    return 1.0 - (1.0 - r2) * (n_obs - 1) / dof


def fit_country_model(
    country: str, years: np.ndarray, values: np.ndarray
) -> Optional[FittedModel]:
    """
    Fit one country's trend line.

    Returns None when there are too few observations to score the fit.
    """
    years = np.asarray(years, dtype=float)
    values = np.asarray(values, dtype=float)
    n_obs = len(years)
    if n_obs < MIN_OBSERVATIONS:
        return None

    X = years.reshape(-1, 1)
    reg = LinearRegression().fit(X, values)
    if np.ptp(values) == 0:
        # zero variance: the line reproduces the series exactly
        r2 = 1.0
    else:
        r2 = float(r2_score(values, reg.predict(X)))

    return FittedModel(
        country=country,
        intercept=float(reg.intercept_),
        slope=float(reg.coef_[0]),
        r2=r2,
        r2_adj=adjusted_r2(r2, n_obs),
        n_obs=n_obs,
        first_year=int(years.min()),
        last_year=int(years.max()),
    )


def fit_models(
    train: pd.DataFrame, quality_threshold: float = QUALITY_THRESHOLD
) -> ModelCollection:
    """
    Fit a trend line per country and keep the ones that clear the threshold.

    Countries with fewer than `MIN_OBSERVATIONS` training rows, and countries
    whose adjusted R² is not strictly greater than `quality_threshold`, are
    left out of the result.
    """
    models: ModelCollection = {}
    n_countries = 0
    for country, group in train.groupby("country", sort=True):
        n_countries += 1
        model = fit_country_model(
            country, group["year"].to_numpy(), group["value"].to_numpy()
        )
        if model is None:
            logger.debug("%s: %d observations, not enough to fit", country, len(group))
            continue
        if model.r2_adj <= quality_threshold:
            logger.debug("%s: adjusted R² %.3f too low", country, model.r2_adj)
            continue
        models[country] = model

    logger.info(
        "Kept %d of %d countries (adjusted R² > %s)",
        len(models),
        n_countries,
        quality_threshold,
    )
    return models


def predict(
    models: ModelCollection,
    country: str,
    year: float,
    precision: Optional[int] = None,
) -> float:
    """
    Predict a country's value for `year` from its trend line.

    Years outside the observed range are extrapolated. The result is rounded
    to `precision` decimals when given.
    """
    try:
        model = models[country]
    except KeyError:
        raise ModelNotFound(country) from None

    value = model.predict(year)
    if precision is not None:
        value = round(value, precision)
    return value


def trend_line(model: FittedModel, start: int, end: int) -> pd.DataFrame:
    """Points on the fitted line for every year in `[start, end]`."""
    years = np.arange(start, end + 1)
    return pd.DataFrame(
        {"year": years, "value": model.intercept + model.slope * years}
    )


def models_to_frame(models: ModelCollection) -> pd.DataFrame:
    """Tabular view of a model collection, one row per country."""
    columns = [
        "country",
        "intercept",
        "slope",
        "r2",
        "r2_adj",
        "n_obs",
        "first_year",
        "last_year",
    ]
    rows = [
        {col: getattr(models[country], col) for col in columns}
        for country in sorted(models)
    ]
    return pd.DataFrame(rows, columns=columns)


def evaluate_holdout(
    models: ModelCollection,
    test: pd.DataFrame,
    precision: Optional[int] = None,
) -> pd.DataFrame:
    """
    Compare predictions with the held-out observations.

    Rows for countries without a model are skipped.
    """
    rows = []
    for obs in test.itertuples(index=False):
        if obs.country not in models:
            continue
        predicted = predict(models, obs.country, obs.year, precision)
        rows.append(
            {
                "country": obs.country,
                "year": int(obs.year),
                "actual": float(obs.value),
                "predicted": predicted,
                "error": predicted - float(obs.value),
            }
        )
    return pd.DataFrame(
        rows, columns=["country", "year", "actual", "predicted", "error"]
    )


def holdout_metrics(evaluation: pd.DataFrame) -> Dict[str, Optional[float]]:
    """Summarise a hold-out evaluation with RMSE and MAE."""
    if evaluation.empty:
        return {"n_predictions": 0, "n_countries": 0, "RMSE": None, "MAE": None}

    y_true = evaluation["actual"].values
    y_pred = evaluation["predicted"].values
    return {
        "n_predictions": int(len(evaluation)),
        "n_countries": int(evaluation["country"].nunique()),
        "RMSE": float(np.sqrt(mean_squared_error(y_true, y_pred))),
        "MAE": float(mean_absolute_error(y_true, y_pred)),
    }
