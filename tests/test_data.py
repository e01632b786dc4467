import pandas as pd
import pytest

from forest_ml.data import (
    DATASETS,
    get_dataset_config,
    load_and_prepare_dataset,
    split_holdout,
    to_observations,
)


def _obs(rows):
    return pd.DataFrame(rows, columns=["country", "year", "value"])


def test_dataset_configs():
    assert DATASETS["conversion"].holdout_count == 1
    assert DATASETS["conversion"].precision == 2
    assert DATASETS["area"].holdout_count == 4
    assert DATASETS["area"].precision == 5
    assert get_dataset_config("area") is DATASETS["area"]
    with pytest.raises(ValueError):
        get_dataset_config("rainfall")


def test_load_drops_world_and_code(owid_csv):
    path = owid_csv()
    obs = load_and_prepare_dataset(DATASETS["conversion"], path)

    assert list(obs.columns) == ["country", "year", "value"]
    assert "World" not in set(obs["country"])
    assert len(obs) == 6
    assert obs["year"].dtype.kind == "i"
    # sorted by country then year
    assert obs.iloc[0].tolist() == ["Brazil", 1990, -4000.0]
    assert obs.iloc[-1].tolist() == ["Chile", 2000, 150.0]


def test_load_drops_unparsable_rows(owid_csv):
    rows = [
        ("Peru", "PER", 1990, 0.5),
        ("Peru", "PER", 1991, "n/a"),
        ("Peru", "PER", None, 0.7),
    ]
    path = owid_csv(value_column="Share of global forest area", rows=rows)
    obs = load_and_prepare_dataset(DATASETS["area"], path)
    assert obs["year"].tolist() == [1990]


def test_value_column_fallback():
    raw = pd.DataFrame(
        {"Entity": ["Peru"], "Code": ["PER"], "Year": [2000], "Forest share": [1.2]}
    )
    obs = to_observations(raw, "Share of global forest area")
    assert obs["value"].tolist() == [1.2]


def test_missing_columns_raise():
    raw = pd.DataFrame({"Entity": ["Peru"], "Year": [2000], "a": [1.0], "b": [2.0]})
    with pytest.raises(ValueError, match="not found"):
        to_observations(raw, "Share of global forest area")

    with pytest.raises(ValueError, match="Missing expected columns"):
        to_observations(pd.DataFrame({"Entity": ["Peru"], "v": [1.0]}), "v")


def test_split_holds_out_latest_year():
    obs = _obs([("A", 2000, 10.0), ("A", 2001, 20.0), ("A", 2002, 30.0)])
    train, test = split_holdout(obs, 1)
    assert train.values.tolist() == [["A", 2000, 10.0], ["A", 2001, 20.0]]
    assert test.values.tolist() == [["A", 2002, 30.0]]


def test_split_is_independent_of_row_order(linear_obs):
    shuffled = linear_obs.sample(frac=1.0, random_state=3)
    train_a, test_a = split_holdout(linear_obs, 2)
    train_b, test_b = split_holdout(shuffled, 2)
    pd.testing.assert_frame_equal(train_a, train_b)
    pd.testing.assert_frame_equal(test_a, test_b)
    assert set(test_a["year"]) == {2004, 2005}
    assert len(train_a) == 3 * 4


def test_split_irregular_years_and_short_countries():
    obs = _obs(
        [
            ("A", 1990, 1.0),
            ("A", 2015, 4.0),
            ("A", 2000, 2.0),
            ("A", 2010, 3.0),
            ("B", 2000, 7.0),
        ]
    )
    train, test = split_holdout(obs, 1)
    assert train[train["country"] == "A"]["year"].tolist() == [1990, 2000, 2010]
    assert test[test["country"] == "A"]["year"].tolist() == [2015]
    # a single observation goes entirely to the test side
    assert "B" not in set(train["country"])
    assert test[test["country"] == "B"]["year"].tolist() == [2000]


def test_split_does_not_modify_input(linear_obs):
    before = linear_obs.copy()
    split_holdout(linear_obs, 4)
    pd.testing.assert_frame_equal(linear_obs, before)


def test_split_rejects_bad_input():
    obs = _obs([("A", 2000, 1.0), ("A", 2000, 2.0), ("A", 2001, 3.0)])
    with pytest.raises(ValueError, match="Duplicate"):
        split_holdout(obs, 1)
    with pytest.raises(ValueError, match="holdout_count"):
        split_holdout(obs.drop_duplicates(subset=["year"]), 0)
