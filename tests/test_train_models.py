import pandas as pd

import train_models
from forest_ml.data import DATASETS
from forest_ml.utils import load_joblib, load_json


def _write_exports(data_dir):
    data_dir.mkdir()
    conversion = []
    for country, start, step in [("Brazil", -4000.0, 300.0), ("Chile", 50.0, 20.0)]:
        for year in [1990, 2000, 2010, 2015]:
            conversion.append((country, "XXX", year, start + step * (year - 1990) / 10))
    conversion.append(("World", "OWID_WRL", 1990, -7800.0))
    # two points leave a single training year after the hold-out
    conversion += [("Fiji", "FJI", 2000, 1.0), ("Fiji", "FJI", 2010, 2.0)]
    pd.DataFrame(
        conversion, columns=["Entity", "Code", "Year", "Net forest conversion"]
    ).to_csv(data_dir / DATASETS["conversion"].filename, index=False)

    area = [
        ("Peru", "PER", year, 1.8 - 0.002 * (year - 1990))
        for year in range(1990, 2021)
    ]
    pd.DataFrame(
        area, columns=["Entity", "Code", "Year", "Share of global forest area"]
    ).to_csv(data_dir / DATASETS["area"].filename, index=False)


def test_train_dataset(tmp_path):
    _write_exports(tmp_path / "data")
    config = DATASETS["conversion"]
    info = train_models.train_dataset(config, tmp_path / "data" / config.filename)

    assert sorted(info["models"]) == ["Brazil", "Chile"]
    assert info["metrics"]["n_models"] == 2
    assert info["metrics"]["n_countries_total"] == 3
    assert info["metrics"]["n_predictions"] == 2
    assert info["metrics"]["MAE"] < 1e-6


def test_main_writes_artifacts(tmp_path, capsys):
    _write_exports(tmp_path / "data")
    models_dir = tmp_path / "models"

    train_models.main(
        ["--data-dir", str(tmp_path / "data"), "--models-dir", str(models_dir)]
    )

    for key in DATASETS:
        assert (models_dir / f"{key}_models.pkl").exists()
        assert (models_dir / f"{key}_holdout.csv").exists()
        assert load_json(models_dir / f"{key}_metrics.json")["n_models"] >= 1

    area_models = load_joblib(models_dir / "area_models.pkl")
    assert area_models["Peru"].last_year == 2016

    metadata = load_json(models_dir / "training_metadata.json")
    assert metadata["quality_threshold"] == 0.6
    assert metadata["datasets"]["area"]["holdout_count"] == 4
    assert "Training complete" in capsys.readouterr().out


def test_train_dataset_rounds_holdout_predictions(tmp_path):
    rows = [
        ("Peru", "PER", 1990, 1.0),
        ("Peru", "PER", 2000, 2.1),
        ("Peru", "PER", 2010, 2.9),
        ("Peru", "PER", 2015, 4.3),
    ]
    path = tmp_path / "conversion.csv"
    pd.DataFrame(
        rows, columns=["Entity", "Code", "Year", "Net forest conversion"]
    ).to_csv(path, index=False)
    config = DATASETS["conversion"]

    info = train_models.train_dataset(config, path)

    model = info["models"]["Peru"]
    predicted = info["evaluation"]["predicted"].tolist()
    assert predicted == [round(model.predict(2015), config.precision)]
    assert predicted[0] != model.predict(2015)
