"""Pytest configuration and fixtures."""

import pytest
import numpy as np
import pandas as pd
from pathlib import Path
from scipy import stats


@pytest.fixture
def cell_counts_df():
    """Coded cell counts: 3 ages x 3 regions x 8 specimens."""
    rng = np.random.default_rng(42)
    rows = []
    for age, shift in [("4m", 0), ("24m", 6), ("48m", 12)]:
        for region in ["Dorsal", "Head", "Ventral"]:
            for value in rng.poisson(10 + shift, size=8):
                rows.append({"Age": age, "Region": region, "No_celulas": float(value)})
    return pd.DataFrame(rows)


@pytest.fixture
def two_region_df():
    """Region A differs strongly between ages, region B does not at all."""
    rows = []
    for age, offset in [("4m", 0), ("24m", 10), ("48m", 20)]:
        for v in range(1, 9):
            rows.append({"Age": age, "Region": "A", "No_celulas": float(v + offset)})
            rows.append({"Age": age, "Region": "B", "No_celulas": float(v)})
    return pd.DataFrame(rows)


@pytest.fixture
def density_df():
    """Leydig cell densities by age with exact zeros in every group."""
    rng = np.random.default_rng(7)
    rows = []
    for age, scale in [("4 months", 2.0), ("24 months", 3.0), ("48 months", 4.0)]:
        values = np.round(rng.gamma(2.0, scale, size=12), 3)
        values[:3] = 0.0
        for v in values:
            rows.append({"Age": age, "Leydig Cells/mm2": float(v)})
    return pd.DataFrame(rows)


@pytest.fixture
def cell_counts_csv(tmp_path, cell_counts_df):
    path = tmp_path / "cell_counts.csv"
    cell_counts_df.to_csv(path, index=False)
    return path


@pytest.fixture
def cell_counts_xlsx(tmp_path, cell_counts_df):
    path = tmp_path / "data_scrip_INGLES.xlsx"
    cell_counts_df.to_excel(path, index=False, engine="openpyxl")
    return path


@pytest.fixture
def temp_outdir(tmp_path):
    """Provide temporary output directory."""
    outdir = tmp_path / "results"
    outdir.mkdir()
    return outdir


@pytest.fixture
def normal_counts_df():
    """Coded counts where every (age, region) group is normal but mean != median."""
    shape = stats.norm.ppf(np.linspace(0.03, 0.93, 12))
    rows = []
    for age, loc in [("4m", 20.0), ("24m", 30.0), ("48m", 40.0)]:
        for offset, region in enumerate(["Dorsal", "Head", "Ventral"]):
            for value in loc + offset + 2.0 * shape:
                rows.append({"Age": age, "Region": region, "No_celulas": float(value)})
    return pd.DataFrame(rows)
