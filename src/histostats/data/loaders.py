"""Data loading functions for histostats.

Observation tables are small spreadsheets (one row per specimen), so every
loader reads the whole table into memory.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from histostats.config import AnalysisConfig
from histostats.data.spec import DataFormat
from histostats.data.validation import validate_columns

logger = logging.getLogger(__name__)

# Flag to track PyArrow availability
_PYARROW_AVAILABLE: Optional[bool] = None


def validate_parquet_available() -> None:
    """
    Check if PyArrow is available for Parquet operations.

    Raises
    ------
    ImportError
        If PyArrow is not installed with helpful installation message
    """
    global _PYARROW_AVAILABLE

    if _PYARROW_AVAILABLE is None:
        try:
            import pyarrow  # noqa: F401

            _PYARROW_AVAILABLE = True
        except ImportError:
            _PYARROW_AVAILABLE = False

    if not _PYARROW_AVAILABLE:
        raise ImportError(
            "PyArrow is required for Parquet support but is not installed.\n"
            "Install with: pip install histostats[parquet] or pip install pyarrow"
        )


def load_table(path: Path | str, sheet_name: Any = 0) -> pd.DataFrame:
    """
    Load a table from an Excel workbook, CSV or Parquet file.

    Parameters
    ----------
    path : Path
        Path to data file
    sheet_name : int or str
        Sheet to read from Excel workbooks (ignored otherwise)

    Returns
    -------
    pd.DataFrame
        Loaded data

    Raises
    ------
    FileNotFoundError
        If the file does not exist
    ValueError
        If the format cannot be inferred
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Data path not found: {path}")

    fmt = DataFormat.from_path(path)
    logger.info(f"Loading table from {path} (format: {fmt.value})")

    if fmt == DataFormat.XLSX:
        return pd.read_excel(path, sheet_name=sheet_name, engine="openpyxl")
    elif fmt == DataFormat.CSV:
        return pd.read_csv(path)
    elif fmt == DataFormat.PARQUET:
        validate_parquet_available()
        return pd.read_parquet(path)
    else:
        raise ValueError(f"Unsupported format: {fmt}")


def prepare_observations(
    df: pd.DataFrame, measure_col: str, age_col: str = "Age", region_col: Optional[str] = "Region"
) -> pd.DataFrame:
    """
    Validate and normalise a raw observation table.

    Label columns are cast to stripped strings and the measurement column is
    coerced to numeric. Cells that cannot be parsed become NaN and are reported.
    The input frame is not modified.

    Raises
    ------
    ValueError
        If a required column is missing
    """
    required = [age_col, measure_col]
    if region_col is not None:
        required.insert(1, region_col)
    validate_columns(df, required)

    df = df.copy()
    label_cols = [age_col] if region_col is None else [age_col, region_col]
    for col in label_cols:
        missing = df[col].isna()
        df[col] = df[col].astype(str).str.strip()
        df.loc[missing, col] = pd.NA

    raw = df[measure_col]
    df[measure_col] = pd.to_numeric(raw, errors="coerce")
    n_bad = int((df[measure_col].isna() & raw.notna()).sum())
    if n_bad > 0:
        logger.warning(f"{n_bad} non-numeric values in '{measure_col}' treated as missing")

    return df


def load_observations(config: AnalysisConfig, region_required: bool = True) -> pd.DataFrame:
    """Load the observation table described by an AnalysisConfig."""
    df = load_table(config.input_path, sheet_name=config.sheet_name)
    logger.info(f"Loaded {len(df)} rows, {len(df.columns)} columns")

    return prepare_observations(
        df,
        measure_col=config.measure_col,
        age_col=config.age_col,
        region_col=config.region_col if region_required else None,
    )
