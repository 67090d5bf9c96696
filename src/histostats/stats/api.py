"""Public API for the histology analyses."""

from __future__ import annotations

import logging
from typing import Dict, Any, List, Tuple
import numpy as np
import pandas as pd

from histostats.config import AnalysisConfig
from histostats.data import load_observations
from histostats.stats.recode import recode_ages, order_ages
from histostats.stats.preprocess import compute_group_stats
from histostats.stats.normality import check_normality_by_group, choose_central_tendency
from histostats.stats.reshape import central_measures, build_radar_table
from histostats.stats.tests import (
    kruskal_by_region,
    significant_regions,
    dunn_by_region,
    pairwise_mann_whitney,
    pairwise_ks,
)
from histostats.stats.excel import write_csv, write_results_workbook
from histostats.stats.reports import build_run_manifest

logger = logging.getLogger(__name__)


def prepare_dataset(
    config: AnalysisConfig, region_required: bool = True
) -> Tuple[pd.DataFrame, List[str]]:
    """Load, recode and order the observation table.

    Returns:
        Tuple of (observations with ordered categorical age column, age labels ascending)
    """
    logger.info(f"Loading data from {config.input_path}...")
    df = load_observations(config, region_required=region_required)
    df = recode_ages(df, config.age_codes, config.age_col)
    df = order_ages(df, config.age_col)
    age_order = list(df[config.age_col].cat.categories)

    logger.info(f"  • Rows: {len(df)}")
    logger.info(f"  • Age groups: {age_order}")
    if region_required:
        logger.info(f"  • Regions: {df[config.region_col].nunique()}")
    return df, age_order


def run_radar_analysis(config: AnalysisConfig) -> Dict[str, Any]:
    """Normality pass, central-tendency table and radar charts.

    Returns:
        Dictionary with result tables, the chosen policy and output paths
    """
    df, age_order = prepare_dataset(config)
    config.output_dir.mkdir(parents=True, exist_ok=True)
    group_cols = [config.age_col, config.region_col]

    logger.info("[1/3] Running normality tests (Shapiro–Wilk)...")
    normality = check_normality_by_group(
        df, config.measure_col, group_cols, config.significance_threshold, config.min_n
    )
    policy = choose_central_tendency(normality)
    logger.info(f"  • Central tendency: {policy.value}")

    logger.info("[2/3] Building radar table...")
    central = central_measures(
        df, config.measure_col, policy, config.age_col, config.region_col
    )
    radar = build_radar_table(
        central, config.measure_col, age_order, config.age_col, config.region_col
    )

    logger.info("[3/3] Writing outputs...")
    outputs = [
        write_csv(normality, config.output_path("normality_csv")),
        write_csv(central, config.output_path("central_csv")),
        write_csv(radar.reset_index(), config.output_path("radar_csv")),
    ]

    from histostats.stats.viz import plot_radar_charts

    charts = plot_radar_charts(radar, config.radar_charts, config.output_dir)
    outputs.extend(charts)

    if config.write_workbook:
        manifest = build_run_manifest(
            config, "radar", len(df), age_order, {"central_tendency": policy.value}
        )
        outputs.append(
            write_results_workbook(
                config.output_path("radar_workbook"),
                {
                    "Run_Manifest": manifest,
                    "Normality_By_Group": normality,
                    "Central_Measures": central,
                    "Radar_Table": radar.reset_index(),
                },
            )
        )

    return {
        "normality": normality,
        "policy": policy,
        "central": central,
        "radar": radar,
        "age_order": age_order,
        "charts": charts,
        "outputs": outputs,
    }


def run_region_tests(config: AnalysisConfig) -> Dict[str, Any]:
    """Kruskal-Wallis per region, then Dunn (Bonferroni) within significant regions.

    Returns:
        Dictionary with kruskal/posthoc tables, significant regions and output paths
    """
    df, age_order = prepare_dataset(config)
    config.output_dir.mkdir(parents=True, exist_ok=True)

    logger.info("[1/2] Running Kruskal–Wallis per region...")
    kruskal = kruskal_by_region(
        df, config.measure_col, age_order, config.region_col, config.age_col
    )
    outputs = [write_csv(kruskal, config.output_path("kruskal_csv"))]

    regions = significant_regions(kruskal, config.significance_threshold)
    logger.info(f"  • Significant regions: {regions}")

    logger.info("[2/2] Running Dunn post-hoc (Bonferroni)...")
    posthoc = dunn_by_region(
        df, config.measure_col, age_order, regions, config.region_col, config.age_col
    )
    outputs.append(write_csv(posthoc, config.output_path("posthoc_csv")))

    if config.write_workbook:
        manifest = build_run_manifest(
            config, "regions", len(df), age_order, {"dunn_p_adjust": "bonferroni"}
        )
        outputs.append(
            write_results_workbook(
                config.output_path("regions_workbook"),
                {"Run_Manifest": manifest, "Kruskal_Wallis": kruskal, "PostHoc_Dunn": posthoc},
            )
        )

    return {
        "kruskal": kruskal,
        "significant_regions": regions,
        "posthoc": posthoc,
        "age_order": age_order,
        "outputs": outputs,
    }


def run_density_analysis(config: AnalysisConfig) -> Dict[str, Any]:
    """Boxplot, per-age summary, pairwise Mann-Whitney/KS tests and ECDF plots.

    Zeros are jittered only inside the KS computation; the loaded table and
    every other result use the recorded values.

    Returns:
        Dictionary with result tables and output paths
    """
    from histostats.stats.viz import plot_boxplot, plot_ecdf

    df, age_order = prepare_dataset(config, region_required=False)
    config.output_dir.mkdir(parents=True, exist_ok=True)
    size = dict(width_px=config.figure_width_px, height_px=config.figure_height_px, dpi=config.fig_dpi)

    logger.info("[1/4] Creating boxplot...")
    outputs = [
        plot_boxplot(
            df, config.measure_col, age_order, config.color_map,
            config.output_path("boxplot"), config.age_col, **size,
        )
    ]

    logger.info("[2/4] Computing summary statistics...")
    summary = compute_group_stats(
        df, config.measure_col, [config.age_col], kurtosis_fisher=config.kurtosis_fisher
    )
    outputs.append(write_csv(summary, config.output_path("summary_csv")))

    logger.info("[3/4] Running pairwise Mann–Whitney U and Kolmogorov–Smirnov tests...")
    mann_whitney = pairwise_mann_whitney(df, config.measure_col, age_order, config.age_col)
    rng = np.random.default_rng(config.random_state)
    ks = pairwise_ks(
        df, config.measure_col, age_order, config.age_col, config.jitter_range, rng
    )
    outputs.append(write_csv(mann_whitney, config.output_path("mann_whitney_csv")))
    outputs.append(write_csv(ks, config.output_path("ks_csv")))

    logger.info("[4/4] Creating ECDF plots...")
    outputs.append(
        plot_ecdf(
            df, config.measure_col, age_order, config.color_map,
            config.output_path("ecdf"), config.age_col, **size,
        )
    )
    x0, x1 = config.ecdf_zoom_xlim
    y0, y1 = config.ecdf_zoom_ylim
    outputs.append(
        plot_ecdf(
            df, config.measure_col, age_order, config.color_map,
            config.output_path("ecdf_zoom"), config.age_col,
            xlim=(x0, x1), ylim=(y0, y1),
            title=f"ECDF (Zoom: x [{x0:g}, {x1:g}], y [{y0:g}, {y1:g}])",
            **size,
        )
    )

    if config.write_workbook:
        manifest = build_run_manifest(
            config, "density", len(df), age_order,
            {"jitter_range": f"{config.jitter_range[0]:g}-{config.jitter_range[1]:g}",
             "random_state": config.random_state},
        )
        outputs.append(
            write_results_workbook(
                config.output_path("density_workbook"),
                {
                    "Run_Manifest": manifest,
                    "Summary_By_Age": summary,
                    "Mann_Whitney": mann_whitney,
                    "Kolmogorov_Smirnov": ks,
                },
            )
        )

    return {
        "summary": summary,
        "mann_whitney": mann_whitney,
        "ks": ks,
        "age_order": age_order,
        "outputs": outputs,
    }


def run_all(config: AnalysisConfig) -> Dict[str, Any]:
    """Run the radar, region and density analyses on one configuration."""
    results = {
        "radar": run_radar_analysis(config),
        "regions": run_region_tests(config),
        "density": run_density_analysis(config),
    }
    logger.info("✓ Analysis complete.")
    return results
