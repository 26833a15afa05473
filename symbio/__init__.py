"""
A Python package for comparing life-history traits across aphid lineages that
differ in bacterial symbiont status.

Summarizes each lineage, tests lineage effects with standard models and
renders ranked bar charts annotated with Tukey significance letters.

Modules:
    - data_processing: Loads per-individual CSV tables into standardized observations.
    - analysis: Runs the per-dataset pipeline and the multivariate trait analysis.
    - stats: Group summaries, multiple comparisons, model fitting, PCA/MANOVA.
    - plotting: Ranked bar charts, biplots, correlation plots and heatmaps.
"""

__version__ = "1.0.0"

from .analysis import (
    GroupSummaryChart,
    process_all_datasets,
    run_dataset,
    run_multivariate,
)
from .data_processing import load_observations, load_trait_table
from .exceptions import (
    EmptyGroupError,
    LetterAlignmentError,
    MissingLetterError,
    SingleObservationWarning,
)
from .plotting import ChartConfig, render_ranked_bar_chart
from .stats import (
    attach_significance_letters,
    compute_group_statistics,
    significance_letters,
)

__all__ = [
    # Pipeline
    "GroupSummaryChart",
    "process_all_datasets",
    "run_dataset",
    "run_multivariate",
    # Data processing
    "load_observations",
    "load_trait_table",
    # Group summaries
    "compute_group_statistics",
    "attach_significance_letters",
    "significance_letters",
    # Plotting
    "ChartConfig",
    "render_ranked_bar_chart",
    # Errors
    "EmptyGroupError",
    "LetterAlignmentError",
    "MissingLetterError",
    "SingleObservationWarning",
]
