"""Age label recoding and numeric age ordering."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from functools import total_ordering
from typing import Dict, Iterable, List

import pandas as pd

_NON_DIGITS = re.compile(r"[^0-9]")


def recode_ages(df: pd.DataFrame, age_codes: Dict[str, str], age_col: str = "Age") -> pd.DataFrame:
    """Replace coded age values with display labels.

    Args:
        df: Observation table
        age_codes: Mapping raw code -> display label (e.g. "4m" -> "4 months")
        age_col: Age column name

    Returns:
        Copy of ``df`` where recognised codes in ``age_col`` are replaced.
        Unknown values, row order, row count and all other columns are unchanged.
    """
    out = df.copy()
    out[age_col] = out[age_col].map(lambda v: age_codes.get(v, v) if isinstance(v, str) else v)
    return out


def extract_age_key(label: object) -> float:
    """Number formed by the digits embedded in an age label ("24 months" -> 24).

    Returns NaN when the label holds no digits.
    """
    digits = _NON_DIGITS.sub("", str(label))
    return float(digits) if digits else math.nan


@total_ordering
@dataclass(frozen=True)
class AgeLevel:
    """An age group label with its numeric sort key.

    Attributes:
        label: Display label
        key: Number extracted from the label (NaN if none)
        position: First-appearance index, breaks ties between equal keys
    """

    label: str
    key: float
    position: int = 0

    def _sort_key(self):
        missing = math.isnan(self.key)
        return (missing, 0.0 if missing else self.key, self.position)

    def __lt__(self, other: AgeLevel) -> bool:
        if not isinstance(other, AgeLevel):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AgeLevel):
            return NotImplemented
        return self._sort_key() == other._sort_key() and self.label == other.label

    def __hash__(self) -> int:
        return hash((self.label, self.position))

    def __str__(self) -> str:
        return self.label


def age_levels(values: Iterable[object]) -> List[AgeLevel]:
    """Distinct age labels sorted by their embedded number.

    Labels are taken in first-appearance order, so ties (and labels without
    digits, which sort last) keep that order.
    """
    seen: Dict[str, AgeLevel] = {}
    for v in values:
        if v is None or (isinstance(v, float) and math.isnan(v)) or v is pd.NA:
            continue
        label = str(v)
        if label not in seen:
            seen[label] = AgeLevel(label=label, key=extract_age_key(label), position=len(seen))
    return sorted(seen.values())


def age_order(values: Iterable[object]) -> List[str]:
    """Labels of :func:`age_levels`, in ascending age order."""
    return [level.label for level in age_levels(values)]


def order_ages(df: pd.DataFrame, age_col: str = "Age") -> pd.DataFrame:
    """Return a copy with ``age_col`` as an ordered categorical in numeric age order."""
    out = df.copy()
    labels = out[age_col].astype(object).where(out[age_col].notna(), None)
    categories = age_order(labels)
    out[age_col] = pd.Categorical(labels, categories=categories, ordered=True)
    return out
