"""
Statistical utilities for lineage × symbiont analyses.

Modules:
    group_summary:
        Per-lineage mean and standard error, keyed significance-letter
        attachment, and deterministic ranking. Pure functions only.

    multcomp:
        Tukey HSD pairwise comparisons and compact letter display.

    models:
        Lineage-effect tests: binomial, inverse-Gaussian, negative-binomial
        and gamma GLMs, Cox proportional hazards, one-way ANOVA.

    multivariate:
        PCA, MANOVA and pairwise trait correlations.

Design Principle:
    This subpackage has no dependencies on plotting/ or on dataset
    configuration. It operates on standardized observation tables.
"""

from .group_summary import (
    attach_significance_letters,
    compute_group_statistics,
    rank_statistics,
    standard_error,
)
from .models import ModelFit, fit_anova, fit_cox, fit_glm, fit_model
from .multcomp import (
    compact_letter_display,
    letters_from_tukey,
    significance_letters,
    tukey_hsd,
)
from .multivariate import PCAResult, correlation_matrix, run_manova, run_pca

__all__ = [
    "attach_significance_letters",
    "compute_group_statistics",
    "rank_statistics",
    "standard_error",
    "ModelFit",
    "fit_anova",
    "fit_cox",
    "fit_glm",
    "fit_model",
    "compact_letter_display",
    "letters_from_tukey",
    "significance_letters",
    "tukey_hsd",
    "PCAResult",
    "correlation_matrix",
    "run_manova",
    "run_pca",
]
