"""Tests for descriptive statistics."""

import pytest
import pandas as pd
import numpy as np
from scipy import stats

from histostats.stats.preprocess import compute_mode, describe_values, compute_group_stats


def test_describe_values_known_sample():
    """Mean, median, SD and IQR of [1, 2, 3, 4, 5]."""
    row = describe_values([1, 2, 3, 4, 5])

    assert row["n"] == 5
    assert row["mean"] == pytest.approx(3.0)
    assert row["median"] == pytest.approx(3.0)
    assert row["sd"] == pytest.approx(1.5811, abs=1e-4)
    assert row["iqr"] == pytest.approx(2.0)
    assert row["skewness"] == pytest.approx(0.0, abs=1e-12)


def test_describe_values_kurtosis_conventions():
    """Moment kurtosis of [1..5] is 1.7 (Pearson) or -1.3 (excess)."""
    fisher = describe_values([1, 2, 3, 4, 5], kurtosis_fisher=True)
    pearson = describe_values([1, 2, 3, 4, 5], kurtosis_fisher=False)

    assert fisher["kurtosis"] == pytest.approx(-1.3)
    assert pearson["kurtosis"] == pytest.approx(1.7)


def test_describe_values_skewness_sign():
    """Right-skewed sample has positive skewness."""
    row = describe_values([1, 1, 1, 2, 10])

    assert row["skewness"] > 0


def test_describe_values_ignores_nan():
    """NaN values are counted as missing and excluded."""
    row = describe_values([1.0, np.nan, 3.0])

    assert row["n"] == 2
    assert row["n_missing"] == 1
    assert row["mean"] == pytest.approx(2.0)


def test_describe_values_single_observation():
    """SD is missing (not zero) for n=1."""
    row = describe_values([4.0])

    assert row["mean"] == 4.0
    assert row["median"] == 4.0
    assert np.isnan(row["sd"])
    assert np.isnan(row["skewness"])
    assert np.isnan(row["kurtosis"])


def test_describe_values_empty():
    """An empty group yields NaN everywhere without raising."""
    row = describe_values([])

    assert row["n"] == 0
    for key in ("mean", "median", "sd", "iqr", "skewness", "kurtosis", "mode"):
        assert np.isnan(row[key])


def test_describe_values_constant():
    """Constant values: SD zero, shape statistics missing."""
    row = describe_values([2.0, 2.0, 2.0])

    assert row["sd"] == 0.0
    assert np.isnan(row["skewness"])
    assert np.isnan(row["kurtosis"])


def test_compute_mode_first_seen_wins_ties():
    """Most frequent value, first one seen on ties."""
    assert compute_mode([3, 1, 1, 3, 2]) == 3
    assert compute_mode([5, 2, 2]) == 2
    assert np.isnan(compute_mode([]))


def test_compute_group_stats_follows_categorical_order():
    """Groups are listed in age order, one row each."""
    df = pd.DataFrame(
        {
            "Age": pd.Categorical(
                ["48 months", "4 months", "24 months", "4 months"],
                categories=["4 months", "24 months", "48 months"],
                ordered=True,
            ),
            "value": [10.0, 1.0, 5.0, 3.0],
        }
    )

    stats = compute_group_stats(df, "value", ["Age"])

    assert stats["Age"].astype(str).tolist() == ["4 months", "24 months", "48 months"]
    assert stats.loc[0, "n"] == 2
    assert stats.loc[0, "mean"] == pytest.approx(2.0)
    assert np.isnan(stats.loc[1, "sd"])
    assert list(stats.columns)[:3] == ["Age", "n", "n_missing"]


def test_compute_group_stats_two_keys():
    """Grouping by (Age, Region) yields one row per combination present."""
    df = pd.DataFrame(
        {
            "Age": ["4 months"] * 4 + ["24 months"] * 2,
            "Region": ["A", "A", "B", "B", "A", "A"],
            "value": [1.0, 2.0, 3.0, 4.0, 5.0, 6.0],
        }
    )

    stats = compute_group_stats(df, "value", ["Age", "Region"])

    assert len(stats) == 3
    assert set(zip(stats["Age"], stats["Region"])) == {
        ("4 months", "A"), ("4 months", "B"), ("24 months", "A")
    }


def test_describe_values_tiny_scale_is_not_constant():
    """Densities in small area units keep their shape statistics."""
    x = [1.2e-9, 2.0e-9, 2.9e-9, 3.1e-9, 4.4e-9, 9.0e-9]

    row = describe_values(x)

    assert row["sd"] > 0
    assert row["skewness"] == pytest.approx(stats.skew(x, bias=True))
    assert row["kurtosis"] == pytest.approx(stats.kurtosis(x, fisher=True, bias=True))
