"""
Offline training script for the global forest trends report.

For each dataset (net forest conversion, share of global forest area) this
script:
- Loads and cleans the Our World in Data export
- Holds out the most recent years of every country
- Fits one linear trend per country and keeps the well-fitting ones
- Scores the kept models on the held-out years
- Persists the models, hold-out predictions and metrics

Everything is written under the `models/` directory so the results can be
inspected or reloaded without refitting.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Dict

from forest_ml.data import (
    DATASETS,
    DatasetConfig,
    load_and_prepare_dataset,
    split_holdout,
)
from forest_ml.models import (
    QUALITY_THRESHOLD,
    evaluate_holdout,
    fit_models,
    holdout_metrics,
)
from forest_ml.utils import (
    configure_logging,
    get_models_dir,
    save_joblib,
    save_json,
)


def train_dataset(
    config: DatasetConfig,
    data_path: Path | str | None = None,
    quality_threshold: float = QUALITY_THRESHOLD,
) -> Dict[str, Any]:
    """Fit and evaluate the per-country models of one dataset."""
    observations = load_and_prepare_dataset(config, data_path)
    train, test = split_holdout(observations, config.holdout_count)

    models = fit_models(train, quality_threshold)
    evaluation = evaluate_holdout(models, test, config.precision)
    metrics = holdout_metrics(evaluation)
    metrics["n_models"] = len(models)
    metrics["n_countries_total"] = int(observations["country"].nunique())

    return {
        "models": models,
        "evaluation": evaluation,
        "metrics": metrics,
    }


def main(argv: list[str] | None = None) -> None:
    """Train all datasets and save the results with their metadata."""
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--data-dir", type=Path, default=None)
    parser.add_argument("--models-dir", type=Path, default=None)
    parser.add_argument(
        "--threshold", type=float, default=QUALITY_THRESHOLD, help="Adjusted R² cut-off"
    )
    args = parser.parse_args(argv)

    configure_logging()

    models_dir = args.models_dir or get_models_dir()
    models_dir.mkdir(parents=True, exist_ok=True)

    summary: Dict[str, Dict[str, Any]] = {}
    for key, config in DATASETS.items():
        print(f"Training {config.label} models...")
        data_path = args.data_dir / config.filename if args.data_dir else None
        info = train_dataset(config, data_path, args.threshold)

        save_joblib(info["models"], models_dir / f"{key}_models.pkl")
        save_json(info["metrics"], models_dir / f"{key}_metrics.json")
        info["evaluation"].to_csv(models_dir / f"{key}_holdout.csv", index=False)
        summary[key] = info["metrics"]

    training_metadata = {
        "quality_threshold": args.threshold,
        "datasets": {
            key: {
                "label": config.label,
                "unit": config.unit,
                "holdout_count": config.holdout_count,
                "precision": config.precision,
            }
            for key, config in DATASETS.items()
        },
    }
    save_json(training_metadata, models_dir / "training_metadata.json")

    print("\n=== Training complete ===")
    for key, metrics in summary.items():
        print(f"{DATASETS[key].label} metrics:", metrics)
    print(f"Models and metadata saved under: {models_dir.resolve()}")


if __name__ == "__main__":
    main()
