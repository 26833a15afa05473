"""Define standardized column names for observation and summary DataFrames."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ObservationColumns:
    """Container for standardized observation column labels.

    Raw CSV files name their columns freely (``Lineage``, ``Clone``,
    ``Hamiltonella``...). Loaders rename them to these labels so that every
    downstream step works on the same long-form table.

    Attributes:
        group: Lineage identifier. Categorical; every observation belongs to
            exactly one lineage.

        symbiont: Symbiont status of the lineage (e.g. ``"uninfected"``,
            ``"H. defensa"``). Constant within a lineage.

        response: Measured quantity. May be a 0/1 indicator (parasitized or
            not), an elapsed time in days, an offspring count, or a
            continuous size.

        censor: Event indicator for time-to-event data. ``1`` when death was
            observed, ``0`` when the individual was censored.
    """

    group: str = "group"
    symbiont: str = "symbiont"
    response: str = "response"
    censor: str = "censor"


@dataclass(frozen=True)
class SummaryColumns:
    """Container for per-lineage summary column labels."""

    group: str = "group"
    symbiont: str = "symbiont"
    n: str = "n"
    mean: str = "mean"
    sd: str = "sd"
    se: str = "se"
    letter: str = "letter"


OBS = ObservationColumns()
SUMMARY = SummaryColumns()
