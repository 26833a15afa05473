"""PCA biplots, correlation plots and lineage trait heatmaps."""

from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from ..stats.multcomp import pvalue_stars
from ..stats.multivariate import PCAResult
from .style import (
    FONT_SIZES,
    SYMBIONT_PALETTE,
    clean_axis,
    fig_size,
    finalize_figure,
    save_figure,
    set_axis_labels,
    set_global_style,
)


def plot_pca_biplot(
    pca: PCAResult,
    groups: pd.Series,
    output_path: str | Path,
    *,
    title: str | None = None,
) -> Path:
    """Scatter PC1/PC2 scores colored by lineage with trait loading arrows.

    Args:
        pca (PCAResult): Output of ``run_pca`` with at least two components.
        groups (pandas.Series): Lineage labels indexed like the data passed
            to ``run_pca``.
        output_path: Extensionless base path for the figure bundle.
    """
    if pca.scores.shape[1] < 2:
        raise ValueError("Biplot needs at least two principal components.")
    set_global_style()

    scores = pca.scores.iloc[:, :2]
    labels = groups.reindex(scores.index).astype(str)
    fig, ax = plt.subplots(figsize=fig_size("square"))
    for k, lineage in enumerate(sorted(labels.unique())):
        mask = (labels == lineage).to_numpy()
        ax.scatter(
            scores.iloc[mask, 0],
            scores.iloc[mask, 1],
            s=28,
            alpha=0.75,
            color=SYMBIONT_PALETTE[k % len(SYMBIONT_PALETTE)],
            edgecolor="black",
            linewidth=0.4,
            label=lineage,
            zorder=2,
        )

    loadings = pca.loadings.iloc[:, :2].to_numpy(dtype=float)
    reach = float(np.abs(scores.to_numpy()).max())
    arrow_scale = 0.85 * reach / max(float(np.abs(loadings).max()), 1e-12)
    for trait, (lx, ly) in zip(pca.loadings.index, loadings):
        ax.annotate(
            "",
            xy=(lx * arrow_scale, ly * arrow_scale),
            xytext=(0.0, 0.0),
            arrowprops={"arrowstyle": "->", "color": "0.25", "lw": 1.2},
            zorder=3,
        )
        ax.text(
            lx * arrow_scale * 1.08,
            ly * arrow_scale * 1.08,
            str(trait),
            ha="center",
            va="center",
            fontsize=FONT_SIZES["legend"],
            color="0.15",
        )

    ax.axhline(0.0, color="0.6", linewidth=0.7, linestyle=":")
    ax.axvline(0.0, color="0.6", linewidth=0.7, linestyle=":")
    set_axis_labels(ax, x=pca.axis_label(0), y=pca.axis_label(1))
    clean_axis(ax, grid_axis="none")
    ax.legend(title="Lineage", loc="best", fontsize=FONT_SIZES["legend"])
    if title:
        ax.set_title(title)
    finalize_figure(fig)
    path = save_figure(fig, output_path)
    plt.close(fig)
    return path


def plot_correlation(
    r: pd.DataFrame,
    p: pd.DataFrame,
    output_path: str | Path,
    *,
    title: str | None = None,
) -> Path:
    """Lower-triangle correlation plot annotated with r and significance stars."""
    set_global_style()
    n = len(r)
    mask = np.triu(np.ones((n, n), dtype=bool), k=1)
    values = np.ma.masked_array(r.to_numpy(dtype=float), mask=mask)

    fig, ax = plt.subplots(figsize=fig_size("square"))
    im = ax.imshow(values, cmap="RdBu_r", vmin=-1.0, vmax=1.0)
    for i in range(n):
        for j in range(i + 1):
            rij = float(r.iat[i, j])
            if not np.isfinite(rij):
                continue
            stars = "" if i == j else pvalue_stars(float(p.iat[i, j])).replace("ns", "")
            ax.text(
                j,
                i,
                f"{rij:.2f}{stars}",
                ha="center",
                va="center",
                fontsize=FONT_SIZES["legend"],
                color="white" if abs(rij) > 0.6 else "black",
            )

    ax.set_xticks(range(n))
    ax.set_xticklabels(r.columns, rotation=45, ha="right")
    ax.set_yticks(range(n))
    ax.set_yticklabels(r.index)
    for side in ("top", "right"):
        ax.spines[side].set_visible(False)
    fig.colorbar(im, ax=ax, shrink=0.8, label="Pearson r")
    if title:
        ax.set_title(title)
    finalize_figure(fig)
    path = save_figure(fig, output_path)
    plt.close(fig)
    return path


def plot_trait_heatmap(
    means: pd.DataFrame,
    output_path: str | Path,
    *,
    title: str | None = None,
) -> Path:
    """Heatmap of lineage × trait means, each trait z-scored across lineages."""
    set_global_style()
    sd = means.std(axis=0, ddof=1).replace(0.0, np.nan)
    z = (means - means.mean(axis=0)) / sd

    fig, ax = plt.subplots(figsize=fig_size("wide"))
    sns.heatmap(
        z,
        ax=ax,
        cmap="vlag",
        center=0.0,
        annot=means.round(2),
        fmt="",
        linewidths=0.5,
        linecolor="white",
        cbar_kws={"label": "z-score across lineages"},
    )
    ax.set_xlabel("Trait", fontsize=FONT_SIZES["axis_label"])
    ax.set_ylabel("Lineage", fontsize=FONT_SIZES["axis_label"])
    ax.tick_params(axis="x", rotation=30)
    if title:
        ax.set_title(title)
    finalize_figure(fig)
    path = save_figure(fig, output_path)
    plt.close(fig)
    return path
