"""Tukey HSD pairwise comparisons and compact letter display."""

from __future__ import annotations

import string
from itertools import combinations
from typing import Hashable, Iterable, Mapping

import numpy as np
import pandas as pd
from statsmodels.stats.multicomp import pairwise_tukeyhsd

from ..schema import OBS

TUKEY_COLUMNS = ["group1", "group2", "meandiff", "p_adj", "lower", "upper", "reject"]


def tukey_hsd(
    observations: pd.DataFrame,
    alpha: float = 0.05,
    *,
    group_col: str = OBS.group,
    response_col: str = OBS.response,
) -> pd.DataFrame:
    """Run Tukey's honestly significant difference test across lineages.

    Returns:
        pandas.DataFrame: One row per lineage pair with the mean difference
        (``group2 - group1``), adjusted p-value, confidence bounds and a
        ``reject`` flag at level ``alpha``.
    """
    if not 0 < alpha < 1:
        raise ValueError(f"alpha must be in (0, 1), got {alpha!r}")
    data = observations[[group_col, response_col]].dropna()
    groups = data[group_col].to_numpy()
    if len(pd.unique(groups)) < 2:
        raise ValueError("Tukey HSD needs at least two lineages.")

    endog = pd.to_numeric(data[response_col], errors="raise").to_numpy(dtype=float)
    result = pairwise_tukeyhsd(endog=endog, groups=groups, alpha=alpha)

    labels = list(result.groupsunique)
    rows = []
    for k, (i, j) in enumerate(combinations(range(len(labels)), 2)):
        rows.append(
            {
                "group1": labels[i],
                "group2": labels[j],
                "meandiff": float(result.meandiffs[k]),
                "p_adj": float(result.pvalues[k]),
                "lower": float(result.confint[k, 0]),
                "upper": float(result.confint[k, 1]),
                "reject": bool(result.reject[k]),
            }
        )
    return pd.DataFrame(rows, columns=TUKEY_COLUMNS)


def _absorb(columns: list[set]) -> list[set]:
    unique: list[set] = []
    for col in columns:
        if col and col not in unique:
            unique.append(col)
    return [col for col in unique if not any(col < other for other in unique)]


def compact_letter_display(
    means: Mapping[Hashable, float],
    significant_pairs: Iterable[tuple[Hashable, Hashable]],
) -> dict:
    """Assign compact letters so that lineages sharing a letter do not differ.

    Uses the insert-and-absorb algorithm: start with one letter shared by
    every lineage, split any letter that covers a significantly different
    pair, then drop letters whose lineages are a subset of another letter.
    Letters are ordered by the highest-ranked lineage they contain, so the
    lineage with the largest mean always carries ``"a"``.

    Args:
        means: Lineage identifier to mean response.
        significant_pairs: Pairs of lineages that differ significantly.

    Returns:
        dict: Lineage identifier to letter string (e.g. ``"ab"``).

    Raises:
        KeyError: If a pair names a lineage absent from ``means``.
        ValueError: If more letters are needed than the alphabet provides.
    """
    order = sorted(means, key=lambda g: (-float(means[g]), str(g)))
    rank = {g: i for i, g in enumerate(order)}

    pairs = []
    for a, b in significant_pairs:
        if a not in rank or b not in rank:
            raise KeyError(f"Significant pair ({a!r}, {b!r}) names an unknown lineage.")
        pairs.append(tuple(sorted((a, b), key=rank.get)))

    columns = [set(order)] if order else []
    for a, b in sorted(set(pairs), key=lambda p: (rank[p[0]], rank[p[1]])):
        split: list[set] = []
        for col in columns:
            if a in col and b in col:
                split.append(col - {a})
                split.append(col - {b})
            else:
                split.append(col)
        columns = _absorb(split)

    columns.sort(key=lambda col: sorted(rank[g] for g in col))
    if len(columns) > len(string.ascii_lowercase):
        raise ValueError(f"Compact letter display needs {len(columns)} letters.")

    return {
        g: "".join(
            string.ascii_lowercase[k] for k, col in enumerate(columns) if g in col
        )
        for g in order
    }


def significance_letters(
    observations: pd.DataFrame,
    alpha: float = 0.05,
    *,
    group_col: str = OBS.group,
    response_col: str = OBS.response,
) -> dict:
    """Return Tukey-based compact letters keyed by lineage."""
    pairwise = tukey_hsd(
        observations, alpha, group_col=group_col, response_col=response_col
    )
    return letters_from_tukey(
        observations, pairwise, group_col=group_col, response_col=response_col
    )


def letters_from_tukey(
    observations: pd.DataFrame,
    pairwise: pd.DataFrame,
    *,
    group_col: str = OBS.group,
    response_col: str = OBS.response,
) -> dict:
    """Compact letters from an existing :func:`tukey_hsd` table."""
    means = (
        observations.groupby(group_col, sort=True)[response_col]
        .mean()
        .astype(float)
        .to_dict()
    )
    rejected = pairwise.loc[pairwise["reject"], ["group1", "group2"]]
    pairs = [(row.group1, row.group2) for row in rejected.itertuples(index=False)]
    return compact_letter_display(means, pairs)


def pvalue_stars(pvalue: float) -> str:
    """Convert a p-value to the usual star notation."""
    if pvalue is None or not np.isfinite(pvalue):
        return ""
    if pvalue <= 0.001:
        return "***"
    if pvalue <= 0.01:
        return "**"
    if pvalue <= 0.05:
        return "*"
    return "ns"
