"""
Plotting utilities for lineage × symbiont analyses.

All plotting functions accept precomputed statistics and do not fit models.

Modules:
    bar_charts:
        Ranked bar charts: bars ordered by descending mean, ± standard error
        error bars, significance letters above each bar, optional fill by
        symbiont status.

    multivariate_plots:
        PCA biplot, lower-triangle correlation plot, lineage × trait heatmap.

    style:
        Shared rcParams, palettes and multi-format save helpers.

Design Principles:
    1. No model fitting in plotting code.
    2. Input validation with explicit KeyError for missing required fields.
    3. Inputs are never mutated.
"""

from .bar_charts import ChartConfig, RankedBarChart, render_ranked_bar_chart
from .multivariate_plots import plot_correlation, plot_pca_biplot, plot_trait_heatmap

__all__ = [
    "ChartConfig",
    "RankedBarChart",
    "render_ranked_bar_chart",
    "plot_correlation",
    "plot_pca_biplot",
    "plot_trait_heatmap",
]
