"""Central-tendency tables and the wide radar-chart matrix."""

from __future__ import annotations

from typing import List, Sequence
import pandas as pd
import numpy as np

from histostats.config import CentralTendency


def central_measures(
    df: pd.DataFrame,
    value_col: str,
    policy: CentralTendency,
    age_col: str = "Age",
    region_col: str = "Region",
) -> pd.DataFrame:
    """Mean or median of ``value_col`` per (age, region) group.

    Args:
        df: Observation table
        value_col: Measurement column
        policy: Statistic applied uniformly to every group
        age_col: Age column name
        region_col: Region column name

    Returns:
        Long DataFrame with columns: age_col, region_col, value_col
    """
    grouped = df.groupby([age_col, region_col], observed=True, sort=True)[value_col]
    central = grouped.mean() if policy is CentralTendency.MEAN else grouped.median()
    return central.reset_index()


def build_radar_table(
    central: pd.DataFrame,
    value_col: str,
    age_order: Sequence[str],
    age_col: str = "Age",
    region_col: str = "Region",
) -> pd.DataFrame:
    """Pivot central measures to the wide matrix consumed by the radar chart.

    Rows are ``Max``, ``Min`` and then one row per age level in ``age_order``;
    columns are regions. ``Max`` is the largest value of the whole block and
    ``Min`` is 0. Both are scaling bounds, not observations.
    """
    wide = central.pivot_table(
        index=age_col, columns=region_col, values=value_col, aggfunc="first", observed=True
    )
    wide.index = wide.index.astype(str)
    order = [a for a in age_order if a in wide.index]
    wide = wide.reindex(order).apply(pd.to_numeric, errors="coerce")
    wide.columns = [str(c) for c in wide.columns]

    max_val = float(np.nanmax(wide.to_numpy(dtype=float))) if wide.size else np.nan
    bounds = pd.DataFrame([[max_val] * wide.shape[1], [0.0] * wide.shape[1]],
                          index=["Max", "Min"], columns=wide.columns)

    radar = pd.concat([bounds, wide])
    radar.index.name = age_col
    return radar.astype(float)


def radar_axis_ticks(radar: pd.DataFrame, n: int = 5) -> List[float]:
    """``n`` evenly spaced axis labels from the Min row to the Max row."""
    lo = float(radar.loc["Min"].iloc[0])
    hi = float(radar.loc["Max"].iloc[0])
    return np.linspace(lo, hi, n).tolist()
