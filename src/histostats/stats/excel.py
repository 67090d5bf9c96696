"""CSV export and the formatted Excel results workbook."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Any
import pandas as pd
import xlsxwriter  # noqa: F401  (ExcelWriter engine)

logger = logging.getLogger(__name__)

PVALUE_COLUMNS = {"p", "p.adj", "p_value", "Mann_Whitney_p", "KS_p"}
DECIMAL_COLUMNS = {
    "statistic", "W", "mean", "median", "sd", "q25", "q75", "iqr", "skewness", "kurtosis", "mode"
}


def write_csv(df: pd.DataFrame, path: Path) -> Path:
    """Write a result table as comma-separated text with a header and no index.

    Raises:
        OSError: If the destination cannot be written
    """
    path = Path(path)
    try:
        df.to_csv(path, index=False)
    except OSError as e:
        logger.error(f"Could not write {path}: {e}")
        raise
    logger.info(f"  • {path}")
    return path


def autosize_column(ws: Any, df: pd.DataFrame, col_idx: int, col_name: str, min_width: int = 10, max_width: int = 50):
    """Set column width based on content."""
    header_len = len(str(col_name))
    content_len = df[col_name].astype(str).map(len).max() if len(df) > 0 else 0
    width = max(min_width, min(max_width, max(header_len, content_len) + 2))
    ws.set_column(col_idx, col_idx, width)


def create_formats(workbook: Any) -> Dict[str, Any]:
    """Create xlsxwriter format objects."""
    return {
        "pvalue": workbook.add_format({"num_format": "0.00E+00"}),
        "decimal3": workbook.add_format({"num_format": "0.000"}),
    }


def write_sheet_with_formatting(
    writer: pd.ExcelWriter,
    df: pd.DataFrame,
    sheet_name: str,
    formats: Dict[str, Any],
):
    """Write a DataFrame to Excel with frozen header, autofilter and number formats.

    Args:
        writer: pandas ExcelWriter object (xlsxwriter engine)
        df: DataFrame to write
        sheet_name: Name of sheet (truncated to Excel's 31 characters)
        formats: Dictionary of xlsxwriter format objects
    """
    if df.empty:
        return

    sheet_name = sheet_name[:31]
    df.to_excel(writer, sheet_name=sheet_name, index=False)
    ws = writer.sheets[sheet_name]

    ws.freeze_panes(1, 0)
    ws.autofilter(0, 0, len(df), len(df.columns) - 1)

    for i, col in enumerate(df.columns):
        autosize_column(ws, df, i, col)
        if col in PVALUE_COLUMNS:
            ws.set_column(i, i, None, formats["pvalue"])
        elif col in DECIMAL_COLUMNS:
            ws.set_column(i, i, None, formats["decimal3"])


def write_results_workbook(out_path: Path, sheets: Dict[str, pd.DataFrame]) -> Path:
    """Write every result table of a run into one workbook, one sheet per table.

    Args:
        out_path: Workbook path
        sheets: Sheet name -> table, written in insertion order; empty tables are skipped

    Returns:
        Path to created workbook
    """
    out_path = Path(out_path)
    try:
        with pd.ExcelWriter(out_path, engine="xlsxwriter") as writer:
            formats = create_formats(writer.book)
            for name, table in sheets.items():
                write_sheet_with_formatting(writer, table, name, formats)
    except OSError as e:
        logger.error(f"Could not write {out_path}: {e}")
        raise
    logger.info(f"  • {out_path}")
    return out_path
