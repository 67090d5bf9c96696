"""Normality testing with Shapiro-Wilk and the mean/median policy."""

from __future__ import annotations

import logging
from typing import List, Tuple
import pandas as pd
import numpy as np
from scipy import stats

from histostats.config import CentralTendency

logger = logging.getLogger(__name__)


def shapiro_safe(x: np.ndarray) -> Tuple[float, float, int]:
    """Perform Shapiro-Wilk test with safe handling.

    Args:
        x: Array of values

    Returns:
        Tuple of (W_statistic, p_value, n_valid)

    Notes:
        - Returns (nan, nan, n) if n < 3 or constant values
        - Subsamples to 5000 if n > 5000 (SciPy accuracy recommendation)
    """
    x = np.asarray(x, dtype=float)
    x = x[np.isfinite(x)]
    n = len(x)

    # Need at least 3 observations
    if n < 3:
        return np.nan, np.nan, n

    if np.ptp(x) == 0:
        return np.nan, np.nan, n

    if n > 5000:
        rng = np.random.default_rng(0)
        x = rng.choice(x, size=5000, replace=False)
        n = 5000

    W, p = stats.shapiro(x)
    return float(W), float(p), int(n)


def check_normality_by_group(
    df: pd.DataFrame,
    value_col: str,
    group_cols: List[str],
    alpha: float = 0.05,
    min_n: int = 3,
) -> pd.DataFrame:
    """Test normality within each group.

    Args:
        df: Observation table
        value_col: Measurement column
        group_cols: Grouping columns, e.g. ["Age", "Region"]
        alpha: Significance level; a group is normal when p > alpha
        min_n: Minimum n required to perform the test

    Returns:
        DataFrame with the group columns followed by: n, test, W, p_value, normal

    Notes:
        Groups that cannot be tested (n < min_n, constant values) get NaN
        W/p_value and count as not normal.
    """
    rows = []
    for key, sub in df.groupby(group_cols, observed=True, sort=True):
        key = key if isinstance(key, tuple) else (key,)
        x = sub[value_col].dropna().values

        if len(x) < min_n:
            W, p, n = np.nan, np.nan, len(x)
        else:
            W, p, n = shapiro_safe(x)

        if np.isnan(p):
            logger.warning(f"Shapiro-Wilk not computable for group {key} (n={n})")

        row = dict(zip(group_cols, key))
        row.update(
            {"n": n, "test": "Shapiro–Wilk", "W": W, "p_value": p, "normal": bool(p > alpha)}
        )
        rows.append(row)

    columns = list(group_cols) + ["n", "test", "W", "p_value", "normal"]
    return pd.DataFrame(rows, columns=columns)


def choose_central_tendency(normality: pd.DataFrame) -> CentralTendency:
    """Pick one representative statistic for the whole dataset.

    The mean is used only if every group is normal; a single non-normal (or
    untestable) group switches every group to the median.
    """
    if len(normality) > 0 and normality["normal"].astype(bool).all():
        return CentralTendency.MEAN
    return CentralTendency.MEDIAN
