"""Exceptions and warnings raised by the group-summary pipeline."""

from __future__ import annotations


class SymbioError(Exception):
    """Base class for errors raised by :mod:`symbio`."""


class EmptyGroupError(SymbioError, ValueError):
    """A lineage declared in the data has no observations."""


class MissingLetterError(SymbioError, KeyError):
    """A lineage has no entry in the significance-letter mapping."""

    def __init__(self, missing):
        self.missing = tuple(missing)
        super().__init__(
            f"No significance letter supplied for group(s): {list(self.missing)}"
        )

    def __str__(self) -> str:
        return str(self.args[0])


class LetterAlignmentError(SymbioError, ValueError):
    """Letter mapping and summary statistics disagree on the set of lineages."""


class SingleObservationWarning(RuntimeWarning):
    """A lineage has a single observation, so its standard error is undefined."""
