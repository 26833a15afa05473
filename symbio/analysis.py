"""
Lineage × symbiont trait analysis.

For every dataset (parasitism, development time, fecundity, longevity, hind
tibia length, intrinsic rate of increase) this module:
- loads the per-individual table and standardizes its columns,
- tests the lineage effect with the model suited to the response,
- derives Tukey HSD compact letters keyed by lineage,
- summarizes each lineage (mean ± standard error) and renders the ranked bar
  chart with error bars and letters.

Morphometric traits are additionally analysed together (PCA biplot, MANOVA,
correlation plot and lineage heatmap).

Datasets are independent: a failure in one is logged and does not stop the
others.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Mapping, Tuple

import matplotlib.pyplot as plt
import pandas as pd

from .config import (
    DEFAULT_ALPHA,
    DEFAULT_DATASETS,
    DEFAULT_MORPHOMETRICS,
    DatasetSpec,
    MultivariateSpec,
)
from .data_processing import load_observations, load_trait_table
from .output import save_dataset_tables, save_table
from .plotting.bar_charts import ChartConfig, RankedBarChart, render_ranked_bar_chart
from .plotting.multivariate_plots import (
    plot_correlation,
    plot_pca_biplot,
    plot_trait_heatmap,
)
from .plotting.style import sanitize_filename
from .reporting import format_model_fit, print_group_statistics
from .schema import OBS
from .stats.group_summary import attach_significance_letters, compute_group_statistics
from .stats.models import ModelFit, fit_model
from .stats.multcomp import letters_from_tukey, tukey_hsd
from .stats.multivariate import (
    correlation_matrix,
    lineage_trait_means,
    run_manova,
    run_pca,
)

logger = logging.getLogger(__name__)


class GroupSummaryChart:
    """Group summary → significance letters → ranked bar chart.

    One instance is bound to one chart configuration and reused for any
    observation table in the standardized layout.
    """

    def __init__(
        self,
        config: ChartConfig | None = None,
        *,
        group_col: str = OBS.group,
        response_col: str = OBS.response,
        symbiont_col: str = OBS.symbiont,
    ):
        self.config = config or ChartConfig()
        self.group_col = group_col
        self.response_col = response_col
        self.symbiont_col = symbiont_col

    def compute_group_statistics(self, observations: pd.DataFrame) -> pd.DataFrame:
        return compute_group_statistics(
            observations,
            group_col=self.group_col,
            response_col=self.response_col,
            symbiont_col=self.symbiont_col,
        )

    def attach_significance_letters(
        self, statistics: pd.DataFrame, letter_map: Mapping
    ) -> pd.DataFrame:
        return attach_significance_letters(statistics, letter_map)

    def render(self, statistics: pd.DataFrame, output_path=None) -> RankedBarChart:
        return render_ranked_bar_chart(statistics, self.config, output_path=output_path)

    def run(
        self, observations: pd.DataFrame, letter_map: Mapping, output_path=None
    ) -> RankedBarChart:
        """Run the full pipeline on one observation table."""
        statistics = self.compute_group_statistics(observations)
        annotated = self.attach_significance_letters(statistics, letter_map)
        return self.render(annotated, output_path=output_path)


@dataclass(frozen=True)
class DatasetResult:
    key: str
    statistics: pd.DataFrame
    letters: dict
    model: ModelFit
    figure_path: Path | None
    table_paths: Tuple[str, ...]


def run_dataset(
    spec: DatasetSpec,
    data_dir: str | Path,
    output_dir: str | Path,
    alpha: float = DEFAULT_ALPHA,
) -> DatasetResult:
    """Load, model, summarize and chart one dataset."""
    data_dir = Path(data_dir)
    output_dir = Path(output_dir)

    observations = load_observations(data_dir / spec.filename, spec)
    logger.info(
        "%s: %d observations across %d lineages",
        spec.key,
        len(observations),
        observations[OBS.group].nunique(),
    )

    model = fit_model(observations, spec.model, spec.formula)
    pairwise = tukey_hsd(observations, alpha)
    letters = letters_from_tukey(observations, pairwise)

    stem = sanitize_filename(spec.key)
    chart = GroupSummaryChart(spec.chart)
    rendered = chart.run(
        observations, letters, output_path=output_dir / "figures" / f"{stem}_ranked_bar"
    )
    plt.close(rendered.figure)

    title = spec.description or spec.key
    print_group_statistics(rendered.statistics, title, scale=spec.chart.y_scale)
    print(f"   Lineage effect: {format_model_fit(model)}")

    tables_dir = output_dir / "tables"
    summary_path, model_path = save_dataset_tables(
        stem,
        rendered.statistics,
        model.as_row(),
        output_dir=str(tables_dir),
        scale=spec.chart.y_scale,
    )
    tukey_path = save_table(pairwise, str(tables_dir / f"{stem}_tukey.csv"), index=False)

    return DatasetResult(
        key=spec.key,
        statistics=rendered.statistics,
        letters=letters,
        model=model,
        figure_path=rendered.saved_path,
        table_paths=(summary_path, model_path, tukey_path),
    )


def run_multivariate(
    spec: MultivariateSpec,
    data_dir: str | Path,
    output_dir: str | Path,
) -> Dict[str, Path | str]:
    """PCA biplot, MANOVA, correlation plot and heatmap for a trait table."""
    data_dir = Path(data_dir)
    figures = Path(output_dir) / "figures"
    tables = Path(output_dir) / "tables"
    traits = list(spec.traits)
    stem = sanitize_filename(spec.key)

    frame = load_trait_table(data_dir / spec.filename, spec)

    pca = run_pca(frame, traits)
    manova = run_manova(frame, traits)
    r, p = correlation_matrix(frame, traits)
    means = lineage_trait_means(frame, traits)

    pillai = manova.loc["Pillai's trace"]
    logger.info(
        "%s MANOVA: Pillai=%.3f F=%.3f p=%.4g",
        spec.key,
        float(pillai["Value"]),
        float(pillai["F Value"]),
        float(pillai["Pr > F"]),
    )
    print(f"\n{spec.description or spec.key} (MANOVA on lineage):")
    print(manova.to_string())

    return {
        "biplot": plot_pca_biplot(pca, frame[OBS.group], figures / f"{stem}_pca_biplot"),
        "correlation": plot_correlation(r, p, figures / f"{stem}_correlation"),
        "heatmap": plot_trait_heatmap(means, figures / f"{stem}_heatmap"),
        "loadings": save_table(pca.loadings, str(tables / f"{stem}_pca_loadings.csv")),
        "manova": save_table(manova, str(tables / f"{stem}_manova.csv")),
        "correlation_table": save_table(r, str(tables / f"{stem}_correlation.csv")),
    }


def process_all_datasets(
    datasets: Iterable[DatasetSpec] = DEFAULT_DATASETS,
    data_dir: str | Path = "data",
    output_dir: str | Path = "output",
    alpha: float = DEFAULT_ALPHA,
    multivariate: MultivariateSpec | None = DEFAULT_MORPHOMETRICS,
) -> Tuple[Dict[str, object], Dict[str, str]]:
    """Run every dataset, collecting results and per-dataset failures.

    Returns:
        tuple[dict, dict]: Results keyed by dataset key, and error messages
        keyed by the datasets that failed.
    """
    results: Dict[str, object] = {}
    failures: Dict[str, str] = {}

    for spec in datasets:
        try:
            results[spec.key] = run_dataset(spec, data_dir, output_dir, alpha)
        except Exception as exc:
            logger.exception("Dataset %s failed", spec.key)
            failures[spec.key] = f"{type(exc).__name__}: {exc}"

    if multivariate is not None:
        try:
            results[multivariate.key] = run_multivariate(multivariate, data_dir, output_dir)
        except Exception as exc:
            logger.exception("Multivariate analysis %s failed", multivariate.key)
            failures[multivariate.key] = f"{type(exc).__name__}: {exc}"

    return results, failures
