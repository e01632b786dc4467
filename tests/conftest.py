import os
import sys

import pandas as pd
import pytest

# ensure workspace root is on sys.path so the scripts next to the package can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)


def _observations(rows):
    return pd.DataFrame(rows, columns=["country", "year", "value"])


@pytest.fixture
def linear_obs():
    """Two perfectly linear countries and one noisy one, six years each."""
    rows = []
    for i, year in enumerate(range(2000, 2006)):
        rows.append(("Alpha", year, 10.0 + 2.0 * i))
        rows.append(("Beta", year, 500.0 - 25.0 * i))
        rows.append(("Gamma", year, [5.0, -3.0, 8.0, -6.0, 4.0, -1.0][i]))
    return _observations(rows)


@pytest.fixture
def owid_csv(tmp_path):
    """Write a small OWID-style export and return its path."""

    def _write(value_column="Net forest conversion", rows=None, name="export.csv"):
        if rows is None:
            rows = [
                ("Brazil", "BRA", 1990, -4000.0),
                ("Brazil", "BRA", 2000, -3500.0),
                ("Brazil", "BRA", 2010, -3000.0),
                ("Brazil", "BRA", 2015, -2500.0),
                ("World", "OWID_WRL", 1990, -7800.0),
                ("World", "OWID_WRL", 2000, -5200.0),
                ("Chile", "CHL", 1990, 100.0),
                ("Chile", "CHL", 2000, 150.0),
            ]
        df = pd.DataFrame(rows, columns=["Entity", "Code", "Year", value_column])
        path = tmp_path / name
        df.to_csv(path, index=False)
        return path

    return _write
