"""
Loads per-subject CSV tables and standardizes them into long-form observations.
"""

# Every dataset has one row per individual: a lineage column, an optional
# symbiont-status column, a numeric response and, for survival data, a 0/1
# event column. Loading renames these to the standardized labels in
# ``schema.OBS`` and fails fast on anything malformed; nothing is recovered or
# imputed.

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from .config import DatasetSpec, MultivariateSpec
from .schema import OBS

logger = logging.getLogger(__name__)


def load_table(filepath) -> pd.DataFrame:
    """
    Load a delimited table with a header row.

    The delimiter is sniffed so comma, semicolon and tab exports all load.

    Args:
        filepath (str | Path): Path to the file.

    Returns:
        pd.DataFrame: Loaded DataFrame with stripped column names.
    """
    path = Path(filepath)
    if not path.is_file():
        raise FileNotFoundError(f"Data file not found: {path}")
    df = pd.read_csv(path, sep=None, engine="python")
    df.columns = [str(c).strip() for c in df.columns]
    logger.info("Loaded %s (%d rows, %d columns)", path.name, len(df), df.shape[1])
    return df


def _require_columns(df: pd.DataFrame, columns, source: str) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise KeyError(
            f"{source}: missing required column(s) {missing}. "
            f"Available columns: {list(df.columns)}"
        )


def standardize_observations(raw_df: pd.DataFrame, spec: DatasetSpec) -> pd.DataFrame:
    """Rename and validate the columns named by ``spec``.

    Returns:
        pd.DataFrame: Columns ``group`` (str), ``response`` (float) and, when
        configured, ``symbiont`` (str) and ``censor`` (int 0/1).

    Raises:
        KeyError: If a configured column is absent.
        ValueError: If lineage or response values are missing or non-numeric,
            or the censoring column holds values other than 0 and 1.
    """
    wanted = {spec.group_col: OBS.group, spec.response_col: OBS.response}
    if spec.symbiont_col:
        wanted[spec.symbiont_col] = OBS.symbiont
    if spec.censor_col:
        wanted[spec.censor_col] = OBS.censor
    _require_columns(raw_df, list(wanted), spec.key)

    df = raw_df[list(wanted)].rename(columns=wanted).dropna(how="all").copy()

    if df[OBS.group].isna().any():
        raise ValueError(
            f"{spec.key}: {int(df[OBS.group].isna().sum())} rows have no lineage."
        )
    df[OBS.group] = df[OBS.group].astype(str).str.strip()

    response = pd.to_numeric(df[OBS.response], errors="coerce")
    bad = response.isna()
    if bad.any():
        raise ValueError(
            f"{spec.key}: {int(bad.sum())} rows have a missing or non-numeric "
            f"'{spec.response_col}' value."
        )
    df[OBS.response] = response.astype(float)

    if spec.symbiont_col:
        blank = df[OBS.symbiont].isna() | (df[OBS.symbiont].astype(str).str.strip() == "")
        if blank.any():
            raise ValueError(
                f"{spec.key}: {int(blank.sum())} rows have no '{spec.symbiont_col}' status."
            )
        df[OBS.symbiont] = df[OBS.symbiont].astype(str).str.strip()

    if spec.censor_col:
        status = pd.to_numeric(df[OBS.censor], errors="coerce")
        if status.isna().any() or not status.isin((0, 1)).all():
            raise ValueError(
                f"{spec.key}: censoring column '{spec.censor_col}' must contain only 0 and 1."
            )
        df[OBS.censor] = status.astype(int)

    return df.reset_index(drop=True)


def load_observations(filepath, spec: DatasetSpec) -> pd.DataFrame:
    """Load one dataset file and return standardized observations."""
    return standardize_observations(load_table(filepath), spec)


def load_trait_table(filepath, spec: MultivariateSpec) -> pd.DataFrame:
    """Load a multi-trait table keeping lineage, symbiont and trait columns.

    Trait values are coerced to numbers; rows with missing traits are kept so
    each analysis can decide how to handle them.
    """
    raw_df = load_table(filepath)
    columns = [spec.group_col, *spec.traits]
    if spec.symbiont_col:
        columns.append(spec.symbiont_col)
    _require_columns(raw_df, columns, spec.key)

    renames = {spec.group_col: OBS.group}
    if spec.symbiont_col:
        renames[spec.symbiont_col] = OBS.symbiont
    df = raw_df[columns].rename(columns=renames).copy()
    if df[OBS.group].isna().any():
        raise ValueError(f"{spec.key}: {int(df[OBS.group].isna().sum())} rows have no lineage.")
    df[OBS.group] = df[OBS.group].astype(str).str.strip()
    for trait in spec.traits:
        df[trait] = pd.to_numeric(df[trait], errors="coerce")
    return df.reset_index(drop=True)
