import forest_ml.utils
from forest_ml.models import FittedModel
from forest_ml.utils import get_data_dir, get_models_dir, load_joblib, load_json, save_joblib, save_json


def test_json_roundtrip_creates_parent(tmp_path):
    path = tmp_path / "nested" / "metrics.json"
    save_json({"RMSE": 1.5, "country": "Côte d'Ivoire"}, path)
    assert load_json(path) == {"RMSE": 1.5, "country": "Côte d'Ivoire"}
    assert "Côte" in path.read_text(encoding="utf-8")


def test_model_collection_persists(tmp_path):
    models = {
        "Peru": FittedModel("Peru", 10.0, -0.004, 0.91, 0.9, 12, 1990, 2001),
    }
    path = tmp_path / "area_models.pkl"
    save_joblib(models, path)
    assert load_joblib(path) == models


def test_directories_follow_module_settings(tmp_path, monkeypatch):
    monkeypatch.setattr(forest_ml.utils, "DATA_DIR", tmp_path / "data")
    monkeypatch.setattr(forest_ml.utils, "MODELS_DIR", tmp_path / "models")
    assert get_data_dir() == tmp_path / "data"
    assert get_models_dir() == tmp_path / "models"
