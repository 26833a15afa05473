"""Render ranked lineage bar charts with error bars and significance letters."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.axes import Axes
from matplotlib.figure import Figure
from matplotlib.patches import Patch

from ..schema import SUMMARY
from ..stats.group_summary import rank_statistics
from .style import (
    FONT_SIZES,
    NEUTRAL_FILL,
    OUTPUT_FORMATS,
    STYLE,
    clean_axis,
    fig_size,
    finalize_figure,
    save_figure,
    set_axis_labels,
    set_global_style,
    symbiont_colors,
)

FILL_MODES = ("symbiont", "none")


@dataclass(frozen=True)
class ChartConfig:
    """Options for one ranked bar chart.

    Attributes:
        y_label: Response axis label.
        x_label: Lineage axis label.
        fill_by: ``"symbiont"`` colors bars by symbiont status and adds a
            legend; ``"none"`` draws every bar in one neutral fill.
        y_limit: Fixed ``(min, max)`` response axis range, e.g. ``(0, 100)``
            for percentages. ``None`` lets the data set the range.
        letter_offset: Vertical gap, in plotted units, between the top of the
            error bar and the significance letter.
        y_scale: Factor applied to means and standard errors before drawing
            (``100`` turns proportions into percentages).
        title: Optional axes title.
    """

    y_label: str = "Mean"
    x_label: str = "Lineage"
    fill_by: str = "symbiont"
    y_limit: tuple[float, float] | None = None
    letter_offset: float = 0.0
    y_scale: float = 1.0
    title: str | None = None

    def __post_init__(self):
        if self.fill_by not in FILL_MODES:
            raise ValueError(f"fill_by must be one of {FILL_MODES}, got {self.fill_by!r}")
        if self.y_limit is not None:
            if len(self.y_limit) != 2 or not self.y_limit[0] < self.y_limit[1]:
                raise ValueError(f"y_limit must be (min, max) with min < max, got {self.y_limit!r}")


@dataclass(frozen=True)
class RankedBarChart:
    """A rendered chart and the values it was drawn from."""

    figure: Figure
    axes: Axes
    order: tuple
    statistics: pd.DataFrame
    letter_heights: tuple[float, ...]
    saved_path: Path | None = None


def render_ranked_bar_chart(
    statistics: pd.DataFrame,
    config: ChartConfig | None = None,
    *,
    output_path: str | Path | None = None,
    formats: Sequence[str] = OUTPUT_FORMATS,
) -> RankedBarChart:
    """Draw lineages as bars ranked by descending mean.

    Each bar has height ``mean``, an error bar spanning ``mean ± se`` and its
    significance letter at ``mean + se + letter_offset``. Ties in the mean
    are ordered by lineage identifier so the output is deterministic.

    Args:
        statistics (pandas.DataFrame): Annotated summary from
            ``attach_significance_letters`` (``group``, ``mean``, ``se``,
            ``letter``; plus ``symbiont`` when filling by symbiont).
        config (ChartConfig, optional): Chart options.
        output_path (str | Path, optional): Extensionless base path; when
            given the figure is saved in every format of ``formats``.

    Returns:
        RankedBarChart: Figure, axes, rendered order and ranked statistics.
        The caller owns the figure and should close it.

    Raises:
        KeyError: If required fields are missing from ``statistics``.

    Note:
        Lineages with an undefined standard error (single observation) get no
        error bar; their letter sits ``letter_offset`` above the bar.
    """
    config = config or ChartConfig()
    required = {SUMMARY.group, SUMMARY.mean, SUMMARY.se, SUMMARY.letter}
    if config.fill_by == "symbiont":
        required.add(SUMMARY.symbiont)
    missing = required - set(statistics.columns)
    if missing:
        raise KeyError(
            f"statistics missing required fields: {sorted(missing)}. "
            f"Expected fields: {sorted(required)}"
        )

    ranked = rank_statistics(statistics)
    set_global_style()

    scale = float(config.y_scale)
    heights = ranked[SUMMARY.mean].to_numpy(dtype=float) * scale
    errors = ranked[SUMMARY.se].to_numpy(dtype=float) * scale
    has_error = np.isfinite(errors)
    x = np.arange(len(ranked))

    if config.fill_by == "symbiont":
        # Lineages without a status are drawn neutral and left out of the legend.
        statuses = [
            None if pd.isna(s) else str(s).strip() for s in ranked[SUMMARY.symbiont]
        ]
        palette = symbiont_colors(statuses)
        colors = [palette.get(s, NEUTRAL_FILL) if s else NEUTRAL_FILL for s in statuses]
    else:
        palette = {}
        colors = [NEUTRAL_FILL] * len(ranked)

    fig, ax = plt.subplots(figsize=fig_size("single"))
    ax.bar(
        x,
        heights,
        width=STYLE.BAR_WIDTH,
        color=colors,
        edgecolor="black",
        linewidth=STYLE.LINEWIDTH_THIN,
        zorder=2,
    )
    if has_error.any():
        ax.errorbar(
            x[has_error],
            heights[has_error],
            yerr=errors[has_error],
            fmt="none",
            ecolor="black",
            elinewidth=STYLE.LINEWIDTH_THIN,
            capsize=STYLE.CAPSIZE,
            zorder=3,
        )

    letter_heights = heights + np.where(has_error, errors, 0.0) + float(config.letter_offset)
    for xi, yi, letter in zip(x, letter_heights, ranked[SUMMARY.letter]):
        ax.text(
            xi,
            yi,
            str(letter),
            ha="center",
            va="bottom",
            fontsize=FONT_SIZES["annotation"],
            zorder=4,
        )

    ax.set_xticks(x)
    ax.set_xticklabels([str(g) for g in ranked[SUMMARY.group]])
    set_axis_labels(ax, x=config.x_label, y=config.y_label)
    clean_axis(ax, grid_axis="y", categorical_x=True)

    if config.y_limit is not None:
        ax.set_ylim(*config.y_limit)
    elif len(ranked):
        lows = heights - np.where(has_error, errors, 0.0)
        top = float(np.nanmax(letter_heights))
        bottom = min(0.0, float(np.nanmin(lows)))
        ax.set_ylim(bottom, top + 0.08 * max(top - bottom, 1e-12))

    if palette:
        handles = [
            Patch(facecolor=color, edgecolor="black", label=status)
            for status, color in palette.items()
        ]
        ax.legend(handles=handles, title="Symbiont", loc="upper right")
    if config.title:
        ax.set_title(config.title)
    finalize_figure(fig)

    saved = None
    if output_path:
        try:
            saved = save_figure(fig, output_path, formats=formats)
        except Exception:
            plt.close(fig)
            raise
    return RankedBarChart(
        figure=fig,
        axes=ax,
        order=tuple(ranked[SUMMARY.group]),
        statistics=ranked,
        letter_heights=tuple(float(v) for v in letter_heights),
        saved_path=saved,
    )
