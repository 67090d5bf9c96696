"""Tests for Kruskal-Wallis, Dunn, Mann-Whitney and KS comparisons."""

from math import comb

import numpy as np
import pandas as pd
import pytest

from histostats.stats.recode import recode_ages, age_order
from histostats.config import DEFAULT_AGE_CODES
from histostats.stats.tests import (
    kruskal_wallis,
    kruskal_by_region,
    significant_regions,
    dunn_posthoc,
    dunn_by_region,
    jitter_zeros,
    pairwise_mann_whitney,
    pairwise_ks,
    p_signif,
)

AGES = ["4 months", "24 months", "48 months"]


@pytest.fixture
def recoded_two_region_df(two_region_df):
    return recode_ages(two_region_df, DEFAULT_AGE_CODES)


def test_kruskal_wallis_basic():
    """Clearly separated groups give a small p-value."""
    groups = [np.arange(1, 9), np.arange(11, 19), np.arange(21, 29)]

    result = kruskal_wallis(groups)

    assert result["p_value"] < 0.001
    assert result["k_groups"] == 3
    assert result["df"] == 2


@pytest.mark.parametrize(
    "groups",
    [
        [np.array([1.0, 2.0])],
        [np.array([1.0, 2.0]), np.array([])],
        [np.array([3.0, 3.0]), np.array([3.0, 3.0])],
    ],
)
def test_kruskal_wallis_degenerate_returns_nan(groups):
    """Single group, empty group or identical values -> NaN, no exception."""
    result = kruskal_wallis(groups)

    assert np.isnan(result["statistic"])
    assert np.isnan(result["p_value"])


def test_kruskal_by_region_one_row_per_region(recoded_two_region_df):
    """Region A is significant, region B is not."""
    table = kruskal_by_region(recoded_two_region_df, "No_celulas", AGES)

    assert table["Region"].tolist() == ["A", "B"]
    assert list(table.columns) == ["Region", ".y.", "n", "statistic", "df", "p", "method"]
    assert table.loc[0, "p"] < 0.05
    assert table.loc[1, "p"] == pytest.approx(1.0)
    assert table["n"].tolist() == [24, 24]
    assert (table["df"] == 2).all()


def test_kruskal_by_region_isolates_degenerate_region(recoded_two_region_df):
    """A region missing an age level gets NaN without affecting the others."""
    extra = pd.DataFrame({"Age": ["4 months"] * 3, "Region": ["C"] * 3, "No_celulas": [1.0, 2.0, 3.0]})
    df = pd.concat([recoded_two_region_df, extra], ignore_index=True)

    table = kruskal_by_region(df, "No_celulas", AGES).set_index("Region")

    assert np.isnan(table.loc["C", "p"])
    assert table.loc["A", "p"] < 0.05
    assert significant_regions(table.reset_index()) == ["A"]


def test_significant_regions_threshold():
    """p < alpha qualifies, p >= alpha and NaN do not."""
    table = pd.DataFrame({"Region": ["A", "B", "C", "D"], "p": [0.01, 0.05, np.nan, 0.2]})

    assert significant_regions(table, 0.05) == ["A"]


def test_dunn_posthoc_pairs_and_bonferroni(recoded_two_region_df):
    """C(3, 2) pairs in age order, adjusted p = min(1, 3 * p)."""
    sub = recoded_two_region_df[recoded_two_region_df["Region"] == "A"]

    rows = dunn_posthoc(sub, "No_celulas", AGES)

    assert [(r["group1"], r["group2"]) for r in rows] == [
        ("4 months", "24 months"),
        ("4 months", "48 months"),
        ("24 months", "48 months"),
    ]
    for r in rows:
        assert r["p.adj"] == pytest.approx(min(1.0, 3 * r["p"]))
        assert r["statistic"] > 0  # group2 always ranks higher
        assert r["n1"] == 8 and r["n2"] == 8
    assert rows[1]["p"] < rows[0]["p"]


def test_dunn_by_region_only_covers_given_regions(recoded_two_region_df):
    """Non-significant regions never appear; significant ones get C(k, 2) rows."""
    kruskal = kruskal_by_region(recoded_two_region_df, "No_celulas", AGES)
    regions = significant_regions(kruskal)

    posthoc = dunn_by_region(recoded_two_region_df, "No_celulas", AGES, regions)

    assert set(posthoc["Region"]) == {"A"}
    assert len(posthoc) == comb(len(AGES), 2)
    assert "p.adj.signif" in posthoc.columns


def test_dunn_by_region_empty_when_nothing_significant(recoded_two_region_df):
    """No significant region -> header-only table."""
    posthoc = dunn_by_region(recoded_two_region_df, "No_celulas", AGES, [])

    assert posthoc.empty
    assert "group1" in posthoc.columns


def test_p_signif():
    assert p_signif(0.00001) == "****"
    assert p_signif(0.0005) == "***"
    assert p_signif(0.005) == "**"
    assert p_signif(0.03) == "*"
    assert p_signif(0.2) == "ns"
    assert p_signif(np.nan) == ""


def test_jitter_zeros_returns_copy():
    """Only zeros move, into (low, high); the input stays intact."""
    values = np.array([0.0, 1.5, 0.0, 2.0])

    out = jitter_zeros(values, 1e-10, 1e-9, np.random.default_rng(0))

    assert values.tolist() == [0.0, 1.5, 0.0, 2.0]
    assert out[1] == 1.5 and out[3] == 2.0
    assert np.all((out[[0, 2]] >= 1e-10) & (out[[0, 2]] <= 1e-9))


def test_pairwise_tests_pairs(density_df):
    """Every unordered pair of ages, in age order."""
    order = age_order(density_df["Age"])

    mw = pairwise_mann_whitney(density_df, "Leydig Cells/mm2", order)
    ks = pairwise_ks(density_df, "Leydig Cells/mm2", order, rng=np.random.default_rng(1))

    expected = [("4 months", "24 months"), ("4 months", "48 months"), ("24 months", "48 months")]
    assert list(zip(mw["Age1"], mw["Age2"])) == expected
    assert list(zip(ks["Age1"], ks["Age2"])) == expected
    assert mw["Mann_Whitney_p"].between(0, 1).all()
    assert ks["KS_p"].between(0, 1).all()


def test_ks_jitter_is_isolated(density_df):
    """Mann-Whitney is stable across runs and zeros stay zero in the data."""
    order = age_order(density_df["Age"])
    n_zeros = int((density_df["Leydig Cells/mm2"] == 0).sum())
    before = density_df.copy()

    mw1 = pairwise_mann_whitney(density_df, "Leydig Cells/mm2", order)
    ks1 = pairwise_ks(density_df, "Leydig Cells/mm2", order, rng=np.random.default_rng(3))
    mw2 = pairwise_mann_whitney(density_df, "Leydig Cells/mm2", order)
    ks2 = pairwise_ks(density_df, "Leydig Cells/mm2", order, rng=np.random.default_rng(3))
    pairwise_ks(density_df, "Leydig Cells/mm2", order)

    pd.testing.assert_frame_equal(mw1, mw2)
    pd.testing.assert_frame_equal(ks1, ks2)
    pd.testing.assert_frame_equal(density_df, before)
    assert int((density_df["Leydig Cells/mm2"] == 0).sum()) == n_zeros


def test_pairwise_tests_empty_group_is_nan(density_df):
    """A pair involving an age without observations gets NaN."""
    order = ["4 months", "24 months", "96 months"]

    mw = pairwise_mann_whitney(density_df, "Leydig Cells/mm2", order)
    ks = pairwise_ks(density_df, "Leydig Cells/mm2", order)

    assert mw["Mann_Whitney_p"].isna().tolist() == [False, True, True]
    assert ks["KS_p"].isna().tolist() == [False, True, True]


def test_dunn_by_region_failed_region_gets_nan_rows(recoded_two_region_df):
    """A region lacking an age level yields NaN rows; the other region is unaffected."""
    extra = pd.DataFrame(
        {"Age": ["4 months"] * 4 + ["24 months"] * 4, "Region": ["C"] * 8, "No_celulas": np.arange(8.0)}
    )
    df = pd.concat([recoded_two_region_df, extra], ignore_index=True)

    posthoc = dunn_by_region(df, "No_celulas", AGES, ["A", "C"])

    broken = posthoc[posthoc["Region"] == "C"]
    valid = posthoc[posthoc["Region"] == "A"]
    assert len(broken) == comb(len(AGES), 2)
    assert broken["p"].isna().all()
    assert broken["p.adj"].isna().all()
    assert (broken["p.adj.signif"] == "").all()
    assert len(valid) == comb(len(AGES), 2)
    assert np.isfinite(valid["p"]).all()
    assert np.isfinite(valid["p.adj"]).all()
