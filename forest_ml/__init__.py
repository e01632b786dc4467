"""
Utility package for the global forest trends report.

This package exposes reusable components for:
- Data loading, cleaning and the per-country hold-out split (`forest_ml.data`)
- Per-country trend fitting, prediction and evaluation (`forest_ml.models`)
- Configuration, logging and persistence helpers (`forest_ml.utils`)
"""

from . import data, models, utils  # noqa: F401
