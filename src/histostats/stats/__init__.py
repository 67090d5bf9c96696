"""Statistics subsystem for the histology analyses.

Three pipelines share one AnalysisConfig:

- radar: Shapiro-Wilk per (age, region) group picks mean or median for every
  group; the central values are pivoted into a radar table and charted
- regions: Kruskal-Wallis across ages within each region, then Dunn's test
  with Bonferroni correction for regions below the significance threshold
- density: per-age descriptive table, pairwise Mann-Whitney U and
  Kolmogorov-Smirnov tests, boxplot and ECDF curves

Public API:
-----------
from histostats import AnalysisConfig
from histostats.stats import run_region_tests

config = AnalysisConfig(
    input_path="data_scrip_INGLES.xlsx",
    output_dir="results",
    measure_col="No_celulas",
)
results = run_region_tests(config)
"""

from histostats.stats.api import (
    run_radar_analysis,
    run_region_tests,
    run_density_analysis,
    run_all,
)

__all__ = ["run_radar_analysis", "run_region_tests", "run_density_analysis", "run_all"]
