"""Input format detection for observation tables."""

from __future__ import annotations

from enum import Enum
from pathlib import Path


class DataFormat(str, Enum):
    """Supported data formats."""

    XLSX = "xlsx"
    CSV = "csv"
    PARQUET = "parquet"

    @classmethod
    def from_path(cls, path: Path) -> DataFormat:
        """
        Infer format from path.

        Parameters
        ----------
        path : Path
            Path to data file

        Returns
        -------
        DataFormat
            Inferred format

        Raises
        ------
        ValueError
            If format cannot be inferred
        """
        suffix = Path(path).suffix.lower()
        if suffix in (".xlsx", ".xls", ".xlsm"):
            return cls.XLSX
        elif suffix == ".csv":
            return cls.CSV
        elif suffix == ".parquet":
            return cls.PARQUET
        else:
            raise ValueError(
                f"Cannot infer data format from path: {path}. "
                f"Expected .xlsx, .csv or .parquet file."
            )
