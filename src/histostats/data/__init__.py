"""
Observation table loading for histostats.

Supports:
- Excel workbooks (*.xlsx) - the format the cell counts are recorded in
- CSV files (*.csv)
- Parquet files (*.parquet), requires pyarrow

Example usage:
    from histostats.data import load_table, prepare_observations

    df = load_table(Path("Data Cells and Areas.xlsx"))
    df = prepare_observations(df, measure_col="Leydig Cells/mm2")
"""

from histostats.data.spec import DataFormat
from histostats.data.loaders import (
    load_table,
    load_observations,
    prepare_observations,
    validate_parquet_available,
)
from histostats.data.validation import validate_columns

__all__ = [
    "DataFormat",
    "load_table",
    "load_observations",
    "prepare_observations",
    "validate_parquet_available",
    "validate_columns",
]
