"""Run manifest table written next to the results."""

from __future__ import annotations

from typing import List, Dict, Any, Optional
from datetime import datetime

import pandas as pd

from histostats import __version__
from histostats.config import AnalysisConfig


def build_run_manifest(
    config: AnalysisConfig,
    analysis: str,
    n_rows: int,
    age_order: List[str],
    extra: Optional[Dict[str, Any]] = None,
) -> pd.DataFrame:
    """Build run manifest sheet.

    Returns:
        DataFrame with columns: parameter, value
    """
    rows = [
        {"parameter": "analysis", "value": analysis},
        {"parameter": "dataset", "value": config.input_path.name},
        {"parameter": "measure_column", "value": config.measure_col},
        {"parameter": "timestamp", "value": datetime.now().strftime("%Y-%m-%d %H:%M:%S")},
        {"parameter": "significance_threshold", "value": config.significance_threshold},
        {"parameter": "package_version", "value": __version__},
        {"parameter": "n_rows", "value": n_rows},
        {"parameter": "age_order", "value": ", ".join(age_order)},
    ]
    for key, value in (extra or {}).items():
        rows.append({"parameter": key, "value": value})

    return pd.DataFrame(rows, columns=["parameter", "value"])
