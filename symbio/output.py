"""Write analysis outputs to reproducible CSV files.

This module is the boundary between in-memory analysis and the tabular
artifacts kept next to each figure.
"""

from __future__ import annotations

import os
from typing import Tuple

import pandas as pd

from .reporting import add_reported_column


def save_dataset_tables(
    key: str,
    statistics: pd.DataFrame,
    model_row: dict | None,
    output_dir: str = "output",
    scale: float = 1.0,
) -> Tuple[str, str | None]:
    """Save the per-lineage summary and the model test row for one dataset.

    Args:
        key (str): Dataset key used as the file prefix.
        statistics (pandas.DataFrame): Ranked, annotated summary table.
        model_row (dict | None): ``ModelFit.as_row()`` output.
        output_dir (str): Directory where CSV outputs are written.
        scale (float): Factor applied to the ``reported`` text column only.

    Returns:
        tuple[str, str | None]: Paths to ``<key>_group_summary.csv`` and
        ``<key>_model.csv`` (``None`` when no model row is given).
    """
    os.makedirs(output_dir, exist_ok=True)

    summary_path = os.path.join(output_dir, f"{key}_group_summary.csv")
    add_reported_column(statistics, scale=scale).to_csv(summary_path, index=False)

    model_path = None
    if model_row is not None:
        model_path = os.path.join(output_dir, f"{key}_model.csv")
        pd.DataFrame([model_row]).to_csv(model_path, index=False)

    return summary_path, model_path


def save_table(table: pd.DataFrame, path: str, index: bool = True) -> str:
    """Write one auxiliary table (Tukey, MANOVA, loadings...)."""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    table.to_csv(path, index=index)
    return path
