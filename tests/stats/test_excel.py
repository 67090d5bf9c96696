"""Tests for CSV export and the results workbook."""

import pandas as pd
import pytest

from histostats.stats.excel import write_csv, write_results_workbook


def test_write_csv_has_header_and_no_index(tmp_path):
    df = pd.DataFrame({"Age1": ["4 months"], "Age2": ["24 months"], "KS_p": [0.12]})

    path = write_csv(df, tmp_path / "ks.csv")

    lines = path.read_text().splitlines()
    assert lines[0] == "Age1,Age2,KS_p"
    assert lines[1] == "4 months,24 months,0.12"


def test_write_csv_unwritable_destination_is_fatal(tmp_path):
    df = pd.DataFrame({"a": [1]})

    with pytest.raises(OSError):
        write_csv(df, tmp_path / "missing" / "out.csv")


def test_write_results_workbook_sheets(tmp_path):
    sheets = {
        "Kruskal_Wallis": pd.DataFrame({"Region": ["A", "B"], "p": [0.01, 0.2]}),
        "PostHoc_Dunn": pd.DataFrame({"group1": ["4 months"], "p.adj": [0.03]}),
        "Empty": pd.DataFrame(columns=["x"]),
    }

    path = write_results_workbook(tmp_path / "results.xlsx", sheets)

    book = pd.read_excel(path, sheet_name=None, engine="openpyxl")
    assert list(book) == ["Kruskal_Wallis", "PostHoc_Dunn"]
    assert book["Kruskal_Wallis"]["Region"].tolist() == ["A", "B"]
