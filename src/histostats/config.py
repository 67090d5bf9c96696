"""Configuration dataclasses for histostats analyses."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, asdict
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

DEFAULT_AGE_CODES: Dict[str, str] = {
    "4m": "4 months",
    "24m": "24 months",
    "48m": "48 months",
}

DEFAULT_COLOR_MAP: Dict[str, str] = {
    "4 months": "#D81B60",
    "24 months": "#004D40",
    "48 months": "#1E88E5",
}

DEFAULT_OUTPUT_NAMES: Dict[str, str] = {
    "normality_csv": "normality_by_group.csv",
    "central_csv": "central_measures.csv",
    "radar_csv": "radar_table.csv",
    "kruskal_csv": "kruskal_Results_noCel.csv",
    "posthoc_csv": "posthoc_cells.csv",
    "summary_csv": "summary_by_age.csv",
    "mann_whitney_csv": "mann_whitney.csv",
    "ks_csv": "ks_test.csv",
    "boxplot": "boxplot_by_age.png",
    "ecdf": "ecdf.png",
    "ecdf_zoom": "ecdf_zoom.png",
    "radar_workbook": "radar_results.xlsx",
    "regions_workbook": "region_tests.xlsx",
    "density_workbook": "density_results.xlsx",
}


class CentralTendency(str, Enum):
    """Representative statistic used for every group of a run."""

    MEAN = "mean"
    MEDIAN = "median"


@dataclass
class RadarChartConfig:
    """One rendered radar chart.

    Attributes:
        filename: Output file name (extension selects JPEG/PNG)
        colors: Line colors, one per age group in age order
        width_px: Image width in pixels
        height_px: Image height in pixels
        dpi: Resolution used to save the image
        title: Optional chart title
    """

    filename: str
    colors: List[str]
    width_px: int = 2050
    height_px: int = 1200
    dpi: int = 300
    title: Optional[str] = None

    def __post_init__(self):
        if not self.colors:
            raise ValueError(f"Radar chart '{self.filename}' needs at least one color")
        if self.width_px <= 0 or self.height_px <= 0 or self.dpi <= 0:
            raise ValueError(f"Radar chart '{self.filename}' has non-positive size or dpi")


def default_radar_charts() -> List[RadarChartConfig]:
    return [
        RadarChartConfig(
            filename="radar_celulas_sept.jpg",
            colors=["#D81B60", "#004D40", "#1E88E5"],
            width_px=2050,
            height_px=1200,
            dpi=300,
        ),
        RadarChartConfig(
            filename="radar_celulas_color2.png",
            colors=["#8B0000", "#458B00", "black"],
            width_px=1200,
            height_px=700,
            dpi=200,
            title="Central tendency values of LCs count across different regions and ages",
        ),
    ]


@dataclass
class AnalysisConfig:
    """Configuration for one analysis run.

    Attributes:
        input_path: Spreadsheet (.xlsx/.xls), CSV or Parquet file with observations
        output_dir: Directory receiving CSV tables and figures
        measure_col: Numeric measurement column (cell count or density)
        age_col: Age group column
        region_col: Anatomical region column
        sheet_name: Excel sheet to read (index or name)
        age_codes: Raw age code -> display label
        color_map: Display age label -> color
        significance_threshold: Alpha for normality, Kruskal-Wallis gating and Dunn flags
        jitter_range: (low, high) of the uniform offset added to zeros before KS
        random_state: Seed for the KS jitter (None = nondeterministic)
        min_n: Minimum n per group for Shapiro-Wilk
        kurtosis_fisher: Report excess (Fisher) kurtosis instead of Pearson kurtosis
        ecdf_zoom_xlim: x window of the zoomed ECDF
        ecdf_zoom_ylim: y window of the zoomed ECDF
        figure_width_px: Width of boxplot/ECDF images
        figure_height_px: Height of boxplot/ECDF images
        fig_dpi: Resolution of boxplot/ECDF images
        radar_charts: Radar chart variants to render
        write_workbook: Also write all tables into one Excel workbook
        output_names: Output file names keyed by artifact (merged over the defaults)
    """

    input_path: Path
    output_dir: Path
    measure_col: str = "No_celulas"
    age_col: str = "Age"
    region_col: str = "Region"
    sheet_name: Any = 0
    age_codes: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_AGE_CODES))
    color_map: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_COLOR_MAP))
    significance_threshold: float = 0.05
    jitter_range: Tuple[float, float] = (1e-10, 1e-9)
    random_state: Optional[int] = None
    min_n: int = 3
    kurtosis_fisher: bool = True
    ecdf_zoom_xlim: Tuple[float, float] = (2.5, 3.5)
    ecdf_zoom_ylim: Tuple[float, float] = (0.45, 0.55)
    figure_width_px: int = 1800
    figure_height_px: int = 1200
    fig_dpi: int = 300
    radar_charts: List[RadarChartConfig] = field(default_factory=default_radar_charts)
    write_workbook: bool = True
    output_names: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        """Validate configuration."""
        unknown = sorted(set(self.output_names) - set(DEFAULT_OUTPUT_NAMES))
        if unknown:
            raise ValueError(f"Unknown output_names keys: {unknown}")
        self.output_names = {**DEFAULT_OUTPUT_NAMES, **self.output_names}

        self.input_path = Path(self.input_path)
        self.output_dir = Path(self.output_dir)
        self.jitter_range = tuple(float(v) for v in self.jitter_range)
        self.ecdf_zoom_xlim = tuple(self.ecdf_zoom_xlim)
        self.ecdf_zoom_ylim = tuple(self.ecdf_zoom_ylim)
        self.radar_charts = [
            c if isinstance(c, RadarChartConfig) else RadarChartConfig(**c)
            for c in self.radar_charts
        ]

        if not self.input_path.exists():
            raise FileNotFoundError(f"Input data not found: {self.input_path}")

        if self.significance_threshold <= 0 or self.significance_threshold >= 1:
            raise ValueError(
                f"significance_threshold must be in (0, 1), got {self.significance_threshold}"
            )

        if len(self.jitter_range) != 2:
            raise ValueError(f"jitter_range must be (low, high), got {self.jitter_range}")
        low, high = self.jitter_range
        if not 0 < low < high:
            raise ValueError(f"jitter_range must satisfy 0 < low < high, got {self.jitter_range}")

        if self.min_n < 3:
            raise ValueError(f"min_n must be >= 3 for Shapiro-Wilk, got {self.min_n}")

    def to_dict(self) -> Dict[str, Any]:
        """Plain representation used for run manifests."""
        payload = asdict(self)
        payload["input_path"] = str(self.input_path)
        payload["output_dir"] = str(self.output_dir)
        payload["jitter_range"] = list(self.jitter_range)
        payload["ecdf_zoom_xlim"] = list(self.ecdf_zoom_xlim)
        payload["ecdf_zoom_ylim"] = list(self.ecdf_zoom_ylim)
        return payload

    def output_path(self, artifact: str) -> Path:
        """Location of a named output artifact inside ``output_dir``."""
        return self.output_dir / self.output_names[artifact]


def load_yaml(path: Path) -> Any:
    """Load YAML from disk."""
    with open(path, "r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def load_config(path: Path | str, **overrides: Any) -> AnalysisConfig:
    """Build an AnalysisConfig from a YAML file.

    Relative ``input_path``/``output_dir`` entries are resolved against the
    directory of the YAML file. Keyword overrides that are not None win over
    file values.
    """
    path = Path(path)
    payload = load_yaml(path)
    if not isinstance(payload, dict):
        raise ValueError(f"Config {path} must contain a mapping, got {type(payload).__name__}")

    known = {f.name for f in fields(AnalysisConfig)}
    unknown = sorted(set(payload) - known)
    if unknown:
        raise ValueError(f"Unknown config keys in {path}: {unknown}")

    for key in ("input_path", "output_dir"):
        if key in payload and not Path(payload[key]).is_absolute():
            payload[key] = path.parent / payload[key]

    payload.update({k: v for k, v in overrides.items() if v is not None})
    return AnalysisConfig(**payload)
