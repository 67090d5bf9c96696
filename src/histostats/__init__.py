"""
histostats: Statistical analysis of epidermal cell counts in axolotl histology.

This package provides:
- Age label recoding with numeric age ordering
- Descriptive statistics per age/region group
- Shapiro-Wilk normality checks driving a global mean/median policy
- Kruskal-Wallis per region with Dunn (Bonferroni) post-hoc tests
- Pairwise Mann-Whitney U and Kolmogorov-Smirnov tests between ages
- Boxplots, ECDF curves and radar charts
- A Typer CLI driven by YAML configs
"""

__version__ = "0.1.0"

from histostats.config import AnalysisConfig, RadarChartConfig, CentralTendency, load_config

__all__ = [
    "__version__",
    "AnalysisConfig",
    "RadarChartConfig",
    "CentralTendency",
    "load_config",
]
