"""Format per-lineage summaries for console output and exported tables.

Means are reported to the precision implied by their standard error so that
printed tables never claim more digits than the data support.
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from .schema import SUMMARY


def uncertainty_decimal_places(uncertainty: float, default: int = 3) -> int:
    """Return decimal places implied by a standard error.

    The standard error is read to one significant figure (two when it leads
    with 1). A zero, undefined or non-finite standard error falls back to
    ``default``.
    """
    u = float(uncertainty)
    if not np.isfinite(u) or u <= 0:
        return int(default)
    exponent = int(np.floor(np.log10(u)))
    sig_figs = 2 if 1.0 <= u / (10**exponent) < 2.0 else 1
    return int(max(0, sig_figs - 1 - exponent))


def format_mean_se(mean: float, se: float, default_decimals: int = 3) -> str:
    """Format ``mean ± se`` with the precision implied by ``se``."""
    se = np.nan if se is None else float(se)
    if not np.isfinite(mean):
        return "n/a"
    dp = uncertainty_decimal_places(se, default=default_decimals)
    if not np.isfinite(se):
        return f"{float(mean):.{dp}f} ± n/a"
    return f"{float(mean):.{dp}f} ± {float(se):.{dp}f}"


def add_reported_column(statistics: pd.DataFrame, scale: float = 1.0) -> pd.DataFrame:
    """Return a copy of ``statistics`` with a ``mean ± se`` text column."""
    out = statistics.copy()
    out["reported"] = [
        format_mean_se(m * scale, s * scale)
        for m, s in zip(out[SUMMARY.mean].astype(float), out[SUMMARY.se].astype(float))
    ]
    return out


def format_group_statistics(
    statistics: pd.DataFrame, title: str, scale: float = 1.0
) -> list[str]:
    """Build the console lines for one dataset summary."""
    lines = [f"\n{title}:"]
    if statistics.empty:
        lines.append("  (no data)")
        return lines
    for _, row in statistics.iterrows():
        text = format_mean_se(float(row[SUMMARY.mean]) * scale, float(row[SUMMARY.se]) * scale)
        letter = row.get(SUMMARY.letter, "")
        symbiont = row.get(SUMMARY.symbiont)
        status = f" [{symbiont}]" if symbiont is not None and pd.notna(symbiont) else ""
        tag = f"  {letter}" if isinstance(letter, str) and letter else ""
        lines.append(f" - {row[SUMMARY.group]}{status}: {text} (n={int(row[SUMMARY.n])}){tag}")
    return lines


def print_group_statistics(
    statistics: pd.DataFrame, title: str, scale: float = 1.0
) -> None:
    for line in format_group_statistics(statistics, title, scale=scale):
        print(line)


def format_model_fit(fit) -> str:
    """One-line description of a lineage-effect test."""
    return (
        f"{fit.family} ({fit.test}): statistic={fit.statistic:.3f}, "
        f"df={fit.df:g}, p={fit.pvalue:.4g}, n={fit.n_obs}"
    )
