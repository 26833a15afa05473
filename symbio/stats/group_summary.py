"""Per-lineage summary statistics and significance-letter annotation.

These are the data-shaping steps behind every ranked bar chart: partition
observations by lineage, compute mean and standard error, attach the letters
produced by a multiple-comparison procedure, and rank lineages for display.
All functions are pure: inputs are never mutated.
"""

from __future__ import annotations

import warnings
from typing import Mapping

import numpy as np
import pandas as pd

from ..exceptions import (
    EmptyGroupError,
    LetterAlignmentError,
    MissingLetterError,
    SingleObservationWarning,
)
from ..schema import OBS, SUMMARY

SUMMARY_COLUMNS = [
    SUMMARY.group,
    SUMMARY.symbiont,
    SUMMARY.n,
    SUMMARY.mean,
    SUMMARY.sd,
    SUMMARY.se,
]


def standard_error(values) -> float:
    """Return the standard error of the mean of ``values``.

    Args:
        values: 1-D array-like of finite numbers.

    Returns:
        float: Sample standard deviation (``ddof=1``) divided by ``sqrt(n)``.
        ``nan`` when fewer than two values are supplied, since the sample
        standard deviation is undefined there.
    """
    arr = np.asarray(values, dtype=float)
    n = arr.size
    if n < 2:
        return float("nan")
    return float(np.std(arr, ddof=1) / np.sqrt(n))


def _numeric_response(series: pd.Series) -> pd.Series:
    if pd.api.types.is_bool_dtype(series):
        return series.astype(float)
    if not pd.api.types.is_numeric_dtype(series):
        raise ValueError(
            f"Response column '{series.name}' must be numeric, got dtype {series.dtype}."
        )
    return series.astype(float)


def compute_group_statistics(
    observations: pd.DataFrame,
    *,
    group_col: str = OBS.group,
    response_col: str = OBS.response,
    symbiont_col: str = OBS.symbiont,
) -> pd.DataFrame:
    """Compute mean and standard error of the response for every lineage.

    Args:
        observations (pandas.DataFrame): One row per observed individual.
        group_col (str): Lineage column.
        response_col (str): Numeric response column. Booleans and 0/1
            indicators are averaged like any other number.
        symbiont_col (str): Optional symbiont-status column. When present it
            must be constant within each lineage.

    Returns:
        pandas.DataFrame: One row per distinct lineage with columns
        ``group``, ``symbiont``, ``n``, ``mean``, ``sd`` and ``se``, sorted by
        lineage identifier.

    Raises:
        KeyError: If ``group_col`` or ``response_col`` is absent.
        ValueError: If a lineage or response is missing, the response is not
            numeric, or a lineage carries more than one symbiont status or
            leaves it blank on some rows only.
        EmptyGroupError: If a categorical lineage level has no observations.

    Warns:
        SingleObservationWarning: For lineages with exactly one observation.
            Their ``sd`` and ``se`` are reported as ``nan``.
    """
    missing = {group_col, response_col} - set(observations.columns)
    if missing:
        raise KeyError(f"observations missing required columns: {sorted(missing)}")

    groups = observations[group_col]
    if groups.isna().any():
        raise ValueError(
            f"Found {int(groups.isna().sum())} observations without a '{group_col}' value."
        )
    raw = observations[response_col]
    if raw.isna().any():
        raise ValueError(
            f"Found {int(raw.isna().sum())} observations without a '{response_col}' value."
        )
    response = _numeric_response(raw)

    if isinstance(groups.dtype, pd.CategoricalDtype):
        counts = groups.value_counts()
        empty = [level for level in groups.cat.categories if counts.get(level, 0) == 0]
        if empty:
            raise EmptyGroupError(f"Lineage level(s) with no observations: {empty}")
        groups = groups.astype(object)

    frame = pd.DataFrame(
        {"_group": groups.to_numpy(), "_response": response.to_numpy()}
    )
    has_symbiont = symbiont_col in observations.columns
    if has_symbiont:
        frame["_symbiont"] = observations[symbiont_col].to_numpy()

    rows = []
    singletons = []
    for group, block in frame.groupby("_group", sort=True):
        values = block["_response"].to_numpy(dtype=float)
        n = int(values.size)
        if n == 0:
            raise EmptyGroupError(f"Lineage '{group}' has no observations.")
        if n == 1:
            singletons.append(group)

        symbiont = None
        if has_symbiont:
            column = block["_symbiont"]
            statuses = pd.unique(column.dropna())
            if len(statuses) and column.isna().any():
                raise ValueError(
                    f"Lineage '{group}' has {int(column.isna().sum())} observation(s) "
                    "without a symbiont status."
                )
            if len(statuses) > 1:
                raise ValueError(
                    f"Lineage '{group}' has more than one symbiont status: "
                    f"{sorted(map(str, statuses))}"
                )
            symbiont = statuses[0] if len(statuses) else None

        rows.append(
            {
                SUMMARY.group: group,
                SUMMARY.symbiont: symbiont,
                SUMMARY.n: n,
                SUMMARY.mean: float(np.mean(values)),
                SUMMARY.sd: float(np.std(values, ddof=1)) if n > 1 else np.nan,
                SUMMARY.se: standard_error(values),
            }
        )

    if singletons:
        warnings.warn(
            f"Standard error undefined for single-observation lineage(s): {singletons}",
            SingleObservationWarning,
            stacklevel=2,
        )

    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def attach_significance_letters(
    statistics: pd.DataFrame,
    letter_map: Mapping,
    *,
    group_col: str = SUMMARY.group,
) -> pd.DataFrame:
    """Attach significance letters to summary rows by lineage identity.

    Letters are looked up by lineage key, never by row position, so a change
    in mean ranking cannot misalign a letter with the wrong lineage.

    Args:
        statistics (pandas.DataFrame): Output of
            :func:`compute_group_statistics`.
        letter_map (Mapping): Lineage identifier to letter string.

    Returns:
        pandas.DataFrame: Copy of ``statistics`` with a ``letter`` column.

    Raises:
        MissingLetterError: If any lineage has no entry (or a ``None`` entry).
        LetterAlignmentError: If ``letter_map`` names lineages that are not in
            ``statistics``.
    """
    if group_col not in statistics.columns:
        raise KeyError(f"statistics missing required column: '{group_col}'")

    groups = list(statistics[group_col])
    missing = [g for g in groups if letter_map.get(g) is None]
    if missing:
        raise MissingLetterError(missing)

    known = set(groups)
    unexpected = [key for key in letter_map if key not in known]
    if unexpected:
        raise LetterAlignmentError(
            f"Letter mapping names {len(letter_map)} groups but statistics hold "
            f"{len(known)}; unexpected group(s): {unexpected}"
        )

    annotated = statistics.copy()
    annotated[SUMMARY.letter] = [str(letter_map[g]) for g in groups]
    return annotated


def rank_statistics(
    statistics: pd.DataFrame,
    *,
    group_col: str = SUMMARY.group,
    mean_col: str = SUMMARY.mean,
) -> pd.DataFrame:
    """Order lineages by descending mean, breaking ties by ascending identifier."""
    missing = {group_col, mean_col} - set(statistics.columns)
    if missing:
        raise KeyError(f"statistics missing required columns: {sorted(missing)}")
    ranked = statistics.sort_values(
        [mean_col, group_col],
        ascending=[False, True],
        kind="mergesort",
        na_position="last",
    )
    return ranked.reset_index(drop=True)
