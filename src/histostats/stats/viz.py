"""Publication figures: boxplot, ECDF curves and radar charts."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple
import warnings

import numpy as np
import pandas as pd
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.colors as mcolors
import seaborn as sns

from histostats.config import RadarChartConfig
from histostats.stats.reshape import radar_axis_ticks

logger = logging.getLogger(__name__)

# Suppress seaborn/pandas FutureWarnings
warnings.filterwarnings("ignore", category=FutureWarning, module="seaborn")
warnings.filterwarnings("ignore", category=FutureWarning, module="pandas")


def choose_colors(labels: Sequence[str], color_map: Dict[str, str]) -> Dict[str, tuple]:
    """Map labels to colors by name.

    Labels present in ``color_map`` keep their color; the rest take the tab10
    cycle in order.

    Returns:
        Dictionary mapping label to RGBA tuple
    """
    cycle = plt.get_cmap("tab10")
    colors = {}
    extra = 0
    for label in labels:
        if label in color_map:
            colors[label] = mcolors.to_rgba(color_map[label])
        else:
            colors[label] = cycle(extra % 10)
            extra += 1
    return colors


def _figure(width_px: int, height_px: int, dpi: int):
    return plt.subplots(figsize=(width_px / dpi, height_px / dpi), dpi=dpi)


def _save(fig, out_path: Path, dpi: int) -> Path:
    out_path = Path(out_path)
    try:
        fig.savefig(out_path, dpi=dpi)
    finally:
        plt.close(fig)
    return out_path


def plot_boxplot(
    df: pd.DataFrame,
    value_col: str,
    age_order: Sequence[str],
    color_map: Dict[str, str],
    out_path: Path,
    age_col: str = "Age",
    width_px: int = 1800,
    height_px: int = 1200,
    dpi: int = 300,
) -> Path:
    """Boxplot of ``value_col`` by age, one fixed fill color per age label."""
    colors = choose_colors(age_order, color_map)
    data = df.assign(**{age_col: df[age_col].astype(str)})

    fig, ax = _figure(width_px, height_px, dpi)
    sns.boxplot(
        data=data,
        x=age_col,
        y=value_col,
        hue=age_col,
        order=list(age_order),
        hue_order=list(age_order),
        palette=colors,
        dodge=False,
        legend=False,
        ax=ax,
    )
    ax.set_xlabel(age_col)
    ax.set_ylabel(value_col)
    ax.set_title(f"Boxplot of {value_col} by {age_col} (Ascending Order)")
    sns.despine(ax=ax)
    ax.grid(axis="y", alpha=0.2)
    fig.tight_layout()

    return _save(fig, out_path, dpi)


def plot_ecdf(
    df: pd.DataFrame,
    value_col: str,
    age_order: Sequence[str],
    color_map: Dict[str, str],
    out_path: Path,
    age_col: str = "Age",
    xlim: Optional[Tuple[float, float]] = None,
    ylim: Optional[Tuple[float, float]] = None,
    title: Optional[str] = None,
    width_px: int = 1800,
    height_px: int = 1200,
    dpi: int = 300,
) -> Path:
    """ECDF curve per age group; ``xlim``/``ylim`` crop the view without dropping data."""
    colors = choose_colors(age_order, color_map)
    data = df.assign(**{age_col: df[age_col].astype(str)}).dropna(subset=[value_col])

    fig, ax = _figure(width_px, height_px, dpi)
    sns.ecdfplot(
        data=data,
        x=value_col,
        hue=age_col,
        hue_order=list(age_order),
        palette=colors,
        linewidth=0.8,
        ax=ax,
    )
    if xlim is not None:
        ax.set_xlim(*xlim)
    if ylim is not None:
        ax.set_ylim(*ylim)

    ax.set_xlabel(value_col)
    ax.set_ylabel("Cumulative Probability")
    ax.set_title(title or f"ECDF of {value_col} by {age_col}")
    sns.despine(ax=ax)
    fig.tight_layout()

    return _save(fig, out_path, dpi)


def plot_radar(
    radar: pd.DataFrame,
    chart: RadarChartConfig,
    out_path: Path,
    n_ticks: int = 5,
) -> Path:
    """Draw a radar chart from a RadarTable.

    The grid is a polygonal web from Min (center) to Max (rim) with
    ``n_ticks`` labelled levels. Each age row is one closed polyline colored
    by position in ``chart.colors``; the first axis points up and axes run
    counter-clockwise.
    """
    data = radar.drop(index=["Max", "Min"])
    regions = list(radar.columns)
    n_axes = len(regions)
    if n_axes < 3:
        raise ValueError(f"Radar chart needs at least 3 regions, got {n_axes}")

    lo = radar.loc["Min"].to_numpy(dtype=float)
    hi = radar.loc["Max"].to_numpy(dtype=float)
    span = np.where(hi - lo > 0, hi - lo, 1.0)

    theta = np.pi / 2 + 2 * np.pi * np.arange(n_axes) / n_axes
    ux, uy = np.cos(theta), np.sin(theta)

    fig, ax = _figure(chart.width_px, chart.height_px, chart.dpi)
    ax.set_aspect("equal")
    ax.axis("off")

    levels = np.linspace(0.0, 1.0, n_ticks)
    for r in levels[1:]:
        ax.plot(np.append(ux, ux[0]) * r, np.append(uy, uy[0]) * r, color="grey", lw=0.8)
    for x, y in zip(ux, uy):
        ax.plot([0, x], [0, y], color="grey", lw=0.8)

    for r, label in zip(levels, radar_axis_ticks(radar, n_ticks)):
        ax.text(0.02, r, f"{label:g}", color="grey", fontsize=6, ha="left", va="center")

    for x, y, name in zip(ux, uy, regions):
        ax.text(1.12 * x, 1.12 * y, name, fontsize=8, ha="center", va="center")

    handles = []
    for i, (age, row) in enumerate(data.iterrows()):
        color = chart.colors[i % len(chart.colors)]
        r = np.clip((row.to_numpy(dtype=float) - lo) / span, 0.0, None)
        r = np.nan_to_num(r, nan=0.0)
        (line,) = ax.plot(
            np.append(ux * r, ux[0] * r[0]),
            np.append(uy * r, uy[0] * r[0]),
            color=color,
            lw=2,
            label=str(age),
        )
        handles.append(line)

    ax.set_xlim(-1.35, 1.35)
    ax.set_ylim(-1.25, 1.25)
    ax.legend(handles=handles, loc="upper right", frameon=False, fontsize=8)
    if chart.title:
        ax.set_title(chart.title, fontsize=8)
    fig.tight_layout()

    return _save(fig, out_path, chart.dpi)


def plot_radar_charts(
    radar: pd.DataFrame, charts: Sequence[RadarChartConfig], out_dir: Path
) -> List[Path]:
    """Render every configured radar chart variant into ``out_dir``.

    Tables with fewer than three regions cannot form a radar web; they are
    reported and no chart is drawn.
    """
    if radar.shape[1] < 3:
        logger.warning(f"Skipping radar charts: need at least 3 regions, got {radar.shape[1]}")
        return []
    return [plot_radar(radar, chart, Path(out_dir) / chart.filename) for chart in charts]
