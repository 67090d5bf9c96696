"""Nonparametric group comparisons (Kruskal-Wallis, Dunn, Mann-Whitney, KS)."""

from __future__ import annotations

import itertools
import logging
from typing import List, Dict, Any, Optional, Sequence, Tuple
import pandas as pd
import numpy as np
from scipy import stats
from statsmodels.stats.multitest import multipletests
import scikit_posthocs as sp

logger = logging.getLogger(__name__)

KRUSKAL_COLUMNS = ["Region", ".y.", "n", "statistic", "df", "p", "method"]
DUNN_COLUMNS = [
    "Region", ".y.", "group1", "group2", "n1", "n2", "statistic", "p", "p.adj", "p.adj.signif"
]


def p_signif(p: float) -> str:
    """Significance stars for a p-value (``ns`` above 0.05)."""
    if p is None or not np.isfinite(p):
        return ""
    for cut, label in ((1e-4, "****"), (1e-3, "***"), (1e-2, "**"), (5e-2, "*")):
        if p <= cut:
            return label
    return "ns"


def _values_by_level(
    df: pd.DataFrame, value_col: str, group_col: str, levels: Sequence[str]
) -> List[np.ndarray]:
    labels = df[group_col].astype(str)
    return [df.loc[labels == lvl, value_col].dropna().to_numpy(dtype=float) for lvl in levels]


def kruskal_wallis(groups: List[np.ndarray]) -> Dict[str, Any]:
    """Perform Kruskal-Wallis H test.

    Args:
        groups: List of group arrays

    Returns:
        Dictionary with keys: statistic, p_value, k_groups, df

    Notes:
        Returns NaN statistic/p_value for fewer than 2 groups, an empty group
        or all-identical values.
    """
    k = len(groups)
    if k < 2 or any(len(g) == 0 for g in groups):
        return {"statistic": np.nan, "p_value": np.nan, "k_groups": k, "df": k - 1}

    try:
        H_stat, p_val = stats.kruskal(*groups)
    except ValueError as e:
        logger.warning(f"Kruskal-Wallis failed: {e}")
        H_stat, p_val = np.nan, np.nan

    return {
        "statistic": float(H_stat) if np.isfinite(H_stat) else np.nan,
        "p_value": float(p_val) if np.isfinite(p_val) else np.nan,
        "k_groups": k,
        "df": k - 1,
    }


def kruskal_by_region(
    df: pd.DataFrame,
    value_col: str,
    age_order: Sequence[str],
    region_col: str = "Region",
    age_col: str = "Age",
) -> pd.DataFrame:
    """Run Kruskal-Wallis across age levels within each region.

    Args:
        df: Observation table
        value_col: Measurement column
        age_order: Age levels to compare, ascending
        region_col: Region column name
        age_col: Age column name

    Returns:
        DataFrame with columns: Region, .y., n, statistic, df, p, method.
        Regions where an age level is missing or empty get NaN statistic/p.
    """
    rows = []
    for region, sub in df.groupby(region_col, sort=True):
        groups = _values_by_level(sub, value_col, age_col, age_order)
        result = kruskal_wallis(groups)

        if np.isnan(result["p_value"]):
            sizes = {lvl: len(g) for lvl, g in zip(age_order, groups)}
            logger.warning(f"Kruskal-Wallis not computable for region '{region}' (n per age: {sizes})")

        rows.append(
            {
                "Region": region,
                ".y.": value_col,
                "n": int(sum(len(g) for g in groups)),
                "statistic": result["statistic"],
                "df": result["df"],
                "p": result["p_value"],
                "method": "Kruskal-Wallis",
            }
        )

    return pd.DataFrame(rows, columns=KRUSKAL_COLUMNS)


def significant_regions(kruskal_table: pd.DataFrame, alpha: float = 0.05) -> List[str]:
    """Regions whose Kruskal-Wallis p-value is below alpha (NaN never qualifies)."""
    mask = kruskal_table["p"].astype(float) < alpha
    return kruskal_table.loc[mask, "Region"].tolist()


def dunn_posthoc(
    df: pd.DataFrame,
    value_col: str,
    age_order: Sequence[str],
    age_col: str = "Age",
    p_adjust: str = "bonferroni",
) -> List[Dict[str, Any]]:
    """Perform Dunn's post-hoc test over all pairs of age levels.

    Args:
        df: Observation table restricted to one region
        value_col: Measurement column
        age_order: Age levels, ascending; pairs follow this order
        age_col: Age column name
        p_adjust: Adjustment method passed to statsmodels ``multipletests``

    Returns:
        List of dictionaries, one per pair
        Keys: group1, group2, n1, n2, statistic, p, p.adj, p.adj.signif

    Notes:
        ``statistic`` is the signed Dunn z score, positive when group2 has the
        higher mean rank. The adjustment covers the pairs of this call only.
    """
    sub = df[[age_col, value_col]].dropna().copy()
    sub[age_col] = sub[age_col].astype(str)
    sub = sub[sub[age_col].isin(age_order)]

    pairs = list(itertools.combinations(age_order, 2))
    sizes = sub[age_col].value_counts().to_dict()

    try:
        ph = sp.posthoc_dunn(sub, val_col=value_col, group_col=age_col, p_adjust=None)
        ranks = pd.Series(stats.rankdata(sub[value_col].to_numpy()), index=sub.index)
        mean_ranks = ranks.groupby(sub[age_col]).mean()

        raw_p = np.array([float(ph.loc[g1, g2]) for g1, g2 in pairs])
        _, p_adj, _, _ = multipletests(raw_p, method=p_adjust)

        rows = []
        for (g1, g2), p, pa in zip(pairs, raw_p, p_adj):
            z = stats.norm.isf(p / 2.0) if p > 0 else np.inf
            sign = np.sign(mean_ranks[g2] - mean_ranks[g1])
            rows.append(
                {
                    "group1": g1,
                    "group2": g2,
                    "n1": int(sizes.get(g1, 0)),
                    "n2": int(sizes.get(g2, 0)),
                    "statistic": float(sign * z),
                    "p": float(p),
                    "p.adj": float(pa),
                    "p.adj.signif": p_signif(pa),
                }
            )
        return rows
    except (KeyError, ValueError, ZeroDivisionError) as e:
        logger.warning(f"Dunn post-hoc failed: {e}")
        return [
            {
                "group1": g1,
                "group2": g2,
                "n1": int(sizes.get(g1, 0)),
                "n2": int(sizes.get(g2, 0)),
                "statistic": np.nan,
                "p": np.nan,
                "p.adj": np.nan,
                "p.adj.signif": "",
            }
            for g1, g2 in pairs
        ]


def dunn_by_region(
    df: pd.DataFrame,
    value_col: str,
    age_order: Sequence[str],
    regions: Sequence[str],
    region_col: str = "Region",
    age_col: str = "Age",
    p_adjust: str = "bonferroni",
) -> pd.DataFrame:
    """Run Dunn's test within each of ``regions``.

    Returns:
        DataFrame with columns: Region, .y., group1, group2, n1, n2, statistic,
        p, p.adj, p.adj.signif. Exactly C(k, 2) rows per region.
    """
    rows = []
    for region in regions:
        sub = df[df[region_col] == region]
        for row in dunn_posthoc(sub, value_col, age_order, age_col, p_adjust):
            rows.append({"Region": region, ".y.": value_col, **row})

    return pd.DataFrame(rows, columns=DUNN_COLUMNS)


def jitter_zeros(
    values: Sequence[float],
    low: float,
    high: float,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """Return a copy of ``values`` with U(low, high) added to every exact zero."""
    rng = rng if rng is not None else np.random.default_rng()
    out = np.array(values, dtype=float, copy=True)
    zeros = out == 0
    out[zeros] = out[zeros] + rng.uniform(low, high, size=int(zeros.sum()))
    return out


def _age_pairs(
    df: pd.DataFrame, value_col: str, age_order: Sequence[str], age_col: str
) -> List[Tuple[str, str, np.ndarray, np.ndarray]]:
    groups = dict(zip(age_order, _values_by_level(df, value_col, age_col, age_order)))
    return [(a, b, groups[a], groups[b]) for a, b in itertools.combinations(age_order, 2)]


def pairwise_mann_whitney(
    df: pd.DataFrame,
    value_col: str,
    age_order: Sequence[str],
    age_col: str = "Age",
) -> pd.DataFrame:
    """Two-sided Mann-Whitney U test for every pair of age levels.

    Returns:
        DataFrame with columns: Age1, Age2, Mann_Whitney_p
    """
    rows = []
    for a, b, x, y in _age_pairs(df, value_col, age_order, age_col):
        p = np.nan
        if len(x) > 0 and len(y) > 0:
            try:
                _, p = stats.mannwhitneyu(x, y, alternative="two-sided")
            except ValueError as e:
                logger.warning(f"Mann-Whitney failed for {a} vs {b}: {e}")
        rows.append({"Age1": a, "Age2": b, "Mann_Whitney_p": float(p)})

    return pd.DataFrame(rows, columns=["Age1", "Age2", "Mann_Whitney_p"])


def pairwise_ks(
    df: pd.DataFrame,
    value_col: str,
    age_order: Sequence[str],
    age_col: str = "Age",
    jitter_range: Tuple[float, float] = (1e-10, 1e-9),
    rng: Optional[np.random.Generator] = None,
) -> pd.DataFrame:
    """Two-sample Kolmogorov-Smirnov test for every pair of age levels.

    Exact zeros are jittered on private copies of each group before testing;
    ``df`` is left untouched.

    Returns:
        DataFrame with columns: Age1, Age2, KS_p
    """
    rng = rng if rng is not None else np.random.default_rng()
    low, high = jitter_range

    rows = []
    for a, b, x, y in _age_pairs(df, value_col, age_order, age_col):
        p = np.nan
        if len(x) > 0 and len(y) > 0:
            x_j = jitter_zeros(x, low, high, rng)
            y_j = jitter_zeros(y, low, high, rng)
            try:
                _, p = stats.ks_2samp(x_j, y_j, alternative="two-sided")
            except ValueError as e:
                logger.warning(f"Kolmogorov-Smirnov failed for {a} vs {b}: {e}")
        rows.append({"Age1": a, "Age2": b, "KS_p": float(p)})

    return pd.DataFrame(rows, columns=["Age1", "Age2", "KS_p"])
