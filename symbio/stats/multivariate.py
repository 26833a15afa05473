"""Multivariate summaries of morphometric and life-history traits."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd
from scipy.stats import pearsonr
from statsmodels.multivariate.manova import MANOVA
from statsmodels.multivariate.pca import PCA

from ..schema import OBS


@dataclass(frozen=True)
class PCAResult:
    """Scores, loadings and explained variance of a standardized PCA."""

    scores: pd.DataFrame
    loadings: pd.DataFrame
    explained_variance_ratio: pd.Series

    def axis_label(self, component: int) -> str:
        name = self.explained_variance_ratio.index[component]
        pct = 100.0 * float(self.explained_variance_ratio.iloc[component])
        return f"{name} ({pct:.1f}%)"


def _trait_frame(frame: pd.DataFrame, columns: Sequence[str], min_cols: int = 2) -> pd.DataFrame:
    columns = list(columns)
    missing = [c for c in columns if c not in frame.columns]
    if missing:
        raise KeyError(f"frame missing trait columns: {missing}")
    if len(columns) < min_cols:
        raise ValueError(f"At least {min_cols} trait columns are required, got {len(columns)}.")
    data = frame[columns].apply(pd.to_numeric, errors="coerce").dropna()
    if len(data) < 3:
        raise ValueError(f"At least 3 complete rows are required, got {len(data)}.")
    return data


def run_pca(
    frame: pd.DataFrame, columns: Sequence[str], n_components: int | None = None
) -> PCAResult:
    """Principal component analysis on standardized traits.

    Rows with any missing trait are dropped; score rows keep the index of
    ``frame`` so they can be joined back to lineage labels.
    """
    data = _trait_frame(frame, columns)
    ncomp = min(len(data.columns), len(data) - 1)
    if n_components is not None:
        ncomp = min(ncomp, int(n_components))

    pc = PCA(data, ncomp=ncomp, standardize=True, normalize=False, method="svd")
    names = [f"PC{k + 1}" for k in range(ncomp)]

    scores = pd.DataFrame(np.asarray(pc.factors)[:, :ncomp], index=data.index, columns=names)
    loadings = pd.DataFrame(
        np.asarray(pc.loadings)[:, :ncomp], index=list(data.columns), columns=names
    )
    total_var = float(np.var(np.asarray(pc.transformed_data, dtype=float), axis=0).sum())
    ratio = pd.Series(
        np.var(scores.to_numpy(), axis=0) / total_var, index=names, name="explained"
    )
    return PCAResult(scores=scores, loadings=loadings, explained_variance_ratio=ratio)


def run_manova(
    frame: pd.DataFrame, columns: Sequence[str], factor: str = OBS.group
) -> pd.DataFrame:
    """One-way MANOVA of traits on ``factor``.

    Returns:
        pandas.DataFrame: The four multivariate test statistics (Wilks,
        Pillai, Hotelling-Lawley, Roy) for the factor term.
    """
    if factor not in frame.columns:
        raise KeyError(f"frame missing factor column: '{factor}'")
    traits = _trait_frame(frame, columns)
    # Trait names may not be valid formula identifiers.
    safe = {col: f"y{k}" for k, col in enumerate(traits.columns)}
    data = traits.rename(columns=safe)
    data["factor"] = frame.loc[traits.index, factor].astype(str)
    if data["factor"].nunique() < 2:
        raise ValueError("MANOVA needs at least two factor levels.")

    formula = " + ".join(safe.values()) + " ~ C(factor)"
    tests = MANOVA.from_formula(formula, data=data).mv_test()
    table = tests.results["C(factor)"]["stat"].copy()
    return table.apply(pd.to_numeric, errors="coerce")


def correlation_matrix(
    frame: pd.DataFrame, columns: Sequence[str]
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Pairwise Pearson correlations and their p-values.

    Each pair uses the rows where both traits are present.
    """
    columns = list(columns)
    missing = [c for c in columns if c not in frame.columns]
    if missing:
        raise KeyError(f"frame missing trait columns: {missing}")
    data = frame[columns].apply(pd.to_numeric, errors="coerce")

    r = pd.DataFrame(np.eye(len(columns)), index=columns, columns=columns)
    p = pd.DataFrame(np.zeros((len(columns), len(columns))), index=columns, columns=columns)
    for i, a in enumerate(columns):
        for b in columns[i + 1 :]:
            pair = data[[a, b]].dropna()
            if len(pair) < 3:
                r_ab, p_ab = np.nan, np.nan
            else:
                r_ab, p_ab = pearsonr(pair[a], pair[b])
            r.loc[a, b] = r.loc[b, a] = float(r_ab)
            p.loc[a, b] = p.loc[b, a] = float(p_ab)
    return r, p


def lineage_trait_means(
    frame: pd.DataFrame, columns: Sequence[str], group_col: str = OBS.group
) -> pd.DataFrame:
    """Mean of each trait per lineage (lineages as rows)."""
    if group_col not in frame.columns:
        raise KeyError(f"frame missing group column: '{group_col}'")
    data = frame[[group_col, *columns]].copy()
    data[list(columns)] = data[list(columns)].apply(pd.to_numeric, errors="coerce")
    return data.groupby(group_col, sort=True)[list(columns)].mean()
