"""Fit the per-dataset model battery with statsmodels.

Each dataset is tested for a lineage effect with a model suited to its
response: binomial GLM for parasitism, inverse-Gaussian GLM for development
time, negative-binomial GLM for fecundity, Cox proportional hazards for
longevity, gamma GLM for body size and one-way ANOVA for life-table rates.
The fits are collaborators of the chart pipeline: their failures propagate
to the caller unchanged.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pandas as pd
import statsmodels.api as sm
import statsmodels.formula.api as smf
from scipy.stats import chi2
from statsmodels.duration.hazard_regression import PHReg
from statsmodels.stats.anova import anova_lm

from ..schema import OBS

logger = logging.getLogger(__name__)

DEFAULT_FORMULA = f"{OBS.response} ~ C({OBS.group})"
LINEAGE_TERM = f"C({OBS.group})"

GLM_FAMILIES = ("binomial", "inverse_gaussian", "negative_binomial", "gamma")
MODEL_FAMILIES = GLM_FAMILIES + ("cox", "anova")


@dataclass(frozen=True)
class ModelFit:
    """Container for one lineage-effect test."""

    family: str
    formula: str
    n_obs: int
    test: str
    statistic: float
    df: float
    pvalue: float
    aic: float = math.nan
    notes: str = ""
    result: Any = field(default=None, repr=False, compare=False)

    def as_row(self) -> dict:
        return {
            "family": self.family,
            "formula": self.formula,
            "n_obs": self.n_obs,
            "test": self.test,
            "statistic": self.statistic,
            "df": self.df,
            "pvalue": self.pvalue,
            "aic": self.aic,
            "notes": self.notes,
        }


def _model_frame(observations: pd.DataFrame, extra: tuple[str, ...] = ()) -> pd.DataFrame:
    cols = [OBS.group, OBS.response, *extra]
    missing = set(cols) - set(observations.columns)
    if missing:
        raise KeyError(f"observations missing model columns: {sorted(missing)}")
    data = observations[cols].dropna().copy()
    data[OBS.group] = data[OBS.group].astype(str)
    data[OBS.response] = pd.to_numeric(data[OBS.response], errors="raise").astype(float)
    return data.reset_index(drop=True)


def _glm_family(family: str):
    if family == "binomial":
        return sm.families.Binomial()
    if family == "inverse_gaussian":
        return sm.families.InverseGaussian()
    if family == "gamma":
        return sm.families.Gamma(link=sm.families.links.Log())
    raise ValueError(f"Unsupported GLM family '{family}'. Expected one of {GLM_FAMILIES}.")


def _lr_test(llf: float, llnull: float, df: float) -> tuple[float, float]:
    stat = float(max(2.0 * (llf - llnull), 0.0))
    pvalue = float(chi2.sf(stat, df)) if df > 0 else math.nan
    return stat, pvalue


def fit_glm(
    observations: pd.DataFrame, family: str, formula: str = DEFAULT_FORMULA
) -> ModelFit:
    """Fit a GLM and test the lineage effect by likelihood ratio.

    The negative-binomial dispersion is first estimated by maximum likelihood
    (NB2 count model) and then held fixed in the GLM.
    """
    data = _model_frame(observations)
    notes = ""
    if family == "negative_binomial":
        nb2 = smf.negativebinomial(formula, data=data).fit(disp=0)
        alpha = float(nb2.params["alpha"])
        glm_family = sm.families.NegativeBinomial(alpha=alpha)
        notes = f"dispersion alpha={alpha:.4g} (NB2 maximum likelihood)"
    else:
        glm_family = _glm_family(family)

    result = smf.glm(formula, data=data, family=glm_family).fit()
    df = float(result.df_model)
    stat, pvalue = _lr_test(result.llf, result.llnull, df)
    logger.info(
        "GLM %s: LR chi2=%.3f df=%d p=%.4g (n=%d)",
        family,
        stat,
        int(df),
        pvalue,
        int(result.nobs),
    )
    return ModelFit(
        family=family,
        formula=formula,
        n_obs=int(result.nobs),
        test="likelihood ratio chi2",
        statistic=stat,
        df=df,
        pvalue=pvalue,
        aic=float(result.aic),
        notes=notes,
        result=result,
    )


def fit_cox(observations: pd.DataFrame, formula: str = DEFAULT_FORMULA) -> ModelFit:
    """Fit a Cox proportional-hazards model with Efron tie handling.

    ``response`` is the survival time and ``censor`` is 1 when death was
    observed.
    """
    if OBS.censor not in observations.columns:
        raise KeyError(f"Cox model requires a '{OBS.censor}' column.")
    data = _model_frame(observations, extra=(OBS.censor,))
    status = pd.to_numeric(data[OBS.censor], errors="raise").to_numpy(dtype=float)
    if not np.isin(status, (0.0, 1.0)).all():
        raise ValueError("Censoring indicator must contain only 0 and 1.")

    model = PHReg.from_formula(formula, data=data, status=status, ties="efron")
    result = model.fit()
    params = np.asarray(result.params, dtype=float)
    llnull = float(model.loglike(np.zeros_like(params)))
    df = float(params.size)
    stat, pvalue = _lr_test(float(result.llf), llnull, df)
    logger.info(
        "Cox PH: LR chi2=%.3f df=%d p=%.4g (n=%d, events=%d)",
        stat,
        int(df),
        pvalue,
        len(data),
        int(status.sum()),
    )
    return ModelFit(
        family="cox",
        formula=formula,
        n_obs=len(data),
        test="likelihood ratio chi2",
        statistic=stat,
        df=df,
        pvalue=pvalue,
        aic=float(2.0 * df - 2.0 * result.llf),
        notes=f"events={int(status.sum())}",
        result=result,
    )


def fit_anova(observations: pd.DataFrame, formula: str = DEFAULT_FORMULA) -> ModelFit:
    """Fit a linear model and report the type-II ANOVA F test for lineage."""
    data = _model_frame(observations)
    result = smf.ols(formula, data=data).fit()
    table = anova_lm(result, typ=2)
    if LINEAGE_TERM not in table.index:
        raise KeyError(f"ANOVA table has no '{LINEAGE_TERM}' term: {list(table.index)}")
    row = table.loc[LINEAGE_TERM]
    logger.info(
        "ANOVA: F=%.3f df=%d p=%.4g (n=%d)",
        float(row["F"]),
        int(row["df"]),
        float(row["PR(>F)"]),
        int(result.nobs),
    )
    return ModelFit(
        family="anova",
        formula=formula,
        n_obs=int(result.nobs),
        test="F",
        statistic=float(row["F"]),
        df=float(row["df"]),
        pvalue=float(row["PR(>F)"]),
        aic=float(result.aic),
        notes=f"residual df={int(result.df_resid)}",
        result=table,
    )


def fit_model(
    observations: pd.DataFrame, family: str, formula: str = DEFAULT_FORMULA
) -> ModelFit:
    """Dispatch to the fitter for ``family``."""
    if family in GLM_FAMILIES:
        return fit_glm(observations, family, formula)
    if family == "cox":
        return fit_cox(observations, formula)
    if family == "anova":
        return fit_anova(observations, formula)
    raise ValueError(f"Unknown model family '{family}'. Expected one of {MODEL_FAMILIES}.")
