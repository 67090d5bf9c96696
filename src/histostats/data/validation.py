"""Data validation utilities for histostats."""

from __future__ import annotations

import logging
from typing import List

import pandas as pd

logger = logging.getLogger(__name__)


def validate_columns(df: pd.DataFrame, required: List[str]) -> None:
    """
    Validate that required columns exist in DataFrame.

    Parameters
    ----------
    df : pd.DataFrame
        Input dataframe
    required : List[str]
        Column names that must be present

    Raises
    ------
    ValueError
        If any required column is missing
    """
    available = set(df.columns)
    missing = [c for c in required if c not in available]

    if missing:
        raise ValueError(
            f"Required columns not found: {missing}. Available: {sorted(map(str, available))[:10]}..."
        )

    if len(df) == 0:
        logger.warning("Observation table is empty")
