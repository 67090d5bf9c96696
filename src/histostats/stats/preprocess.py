"""Descriptive statistics per group."""

from __future__ import annotations

from typing import List, Dict, Any, Sequence
import pandas as pd
import numpy as np
from scipy import stats


def compute_mode(values: Sequence[float]) -> float:
    """Most frequent value; the first one seen wins ties. NaN if empty."""
    x = pd.Series(values).dropna()
    if x.empty:
        return np.nan
    counts = x.value_counts(sort=False)
    return float(counts.index[int(np.argmax(counts.values))])


def describe_values(values: Sequence[float], kurtosis_fisher: bool = True) -> Dict[str, Any]:
    """Compute descriptive statistics for one sample.

    Args:
        values: Sample values (NaN ignored)
        kurtosis_fisher: Excess kurtosis if True, Pearson kurtosis otherwise

    Returns:
        Dictionary with keys: n, n_missing, mean, median, sd, q25, q75, iqr,
        skewness, kurtosis, mode

    Notes:
        - Skewness and kurtosis are moment estimators (no bias correction),
          the convention of R's ``moments`` package
        - sd needs n >= 2; skewness/kurtosis need n >= 2 and non-constant values
        - Quantiles use linear interpolation (R's default type 7)
    """
    x = np.asarray(values, dtype=float)
    n_total = len(x)
    x = x[np.isfinite(x)]
    n = len(x)

    row = {
        "n": n,
        "n_missing": n_total - n,
        "mean": np.nan,
        "median": np.nan,
        "sd": np.nan,
        "q25": np.nan,
        "q75": np.nan,
        "iqr": np.nan,
        "skewness": np.nan,
        "kurtosis": np.nan,
        "mode": np.nan,
    }
    if n == 0:
        return row

    q25, q75 = np.percentile(x, [25, 75])
    row.update(
        mean=float(np.mean(x)),
        median=float(np.median(x)),
        q25=float(q25),
        q75=float(q75),
        iqr=float(q75 - q25),
        mode=compute_mode(x),
    )

    if n > 1:
        row["sd"] = float(np.std(x, ddof=1))
        if np.ptp(x) > 0:
            row["skewness"] = float(stats.skew(x, bias=True))
            row["kurtosis"] = float(stats.kurtosis(x, fisher=kurtosis_fisher, bias=True))

    return row


def compute_group_stats(
    df: pd.DataFrame,
    value_col: str,
    group_cols: List[str],
    kurtosis_fisher: bool = True,
) -> pd.DataFrame:
    """Compute descriptive statistics for every group.

    Args:
        df: Observation table
        value_col: Measurement column
        group_cols: Grouping columns, e.g. ["Age"] or ["Age", "Region"]
        kurtosis_fisher: Excess kurtosis if True, Pearson kurtosis otherwise

    Returns:
        DataFrame with the group columns followed by: n, n_missing, mean, median,
        sd, q25, q75, iqr, skewness, kurtosis, mode. Groups follow categorical
        order where the group column is categorical.
    """
    rows = []
    for key, sub in df.groupby(group_cols, observed=True, sort=True):
        key = key if isinstance(key, tuple) else (key,)
        row = dict(zip(group_cols, key))
        row.update(describe_values(sub[value_col].values, kurtosis_fisher=kurtosis_fisher))
        rows.append(row)

    columns = list(group_cols) + [
        "n", "n_missing", "mean", "median", "sd", "q25", "q75", "iqr", "skewness", "kurtosis", "mode"
    ]
    return pd.DataFrame(rows, columns=columns)
