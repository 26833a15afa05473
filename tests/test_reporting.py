"""Tests for console and table formatting of lineage summaries."""

import math

import pandas as pd

from symbio.reporting import (
    add_reported_column,
    format_group_statistics,
    format_mean_se,
    format_model_fit,
    uncertainty_decimal_places,
)
from symbio.stats.models import ModelFit


def test_decimal_places_follow_uncertainty():
    assert uncertainty_decimal_places(0.25) == 1
    assert uncertainty_decimal_places(0.012) == 3
    assert uncertainty_decimal_places(3.0) == 0
    assert uncertainty_decimal_places(0.0, default=2) == 2
    assert uncertainty_decimal_places(math.nan) == 3


def test_format_mean_se():
    assert format_mean_se(0.75, 0.25) == "0.8 ± 0.2"
    assert format_mean_se(10.0, 0.0) == "10.000 ± 0.000"
    assert format_mean_se(5.0, math.nan) == "5.000 ± n/a"
    assert format_mean_se(5.0, None) == "5.000 ± n/a"
    assert format_mean_se(math.nan, 1.0) == "n/a"


def test_group_statistics_lines_include_letters_and_status():
    stats = pd.DataFrame(
        {
            "group": ["A", "B"],
            "symbiont": ["Hd", "none"],
            "n": [4, 1],
            "mean": [0.75, 0.5],
            "sd": [0.5, math.nan],
            "se": [0.25, math.nan],
            "letter": ["a", "ab"],
        }
    )
    lines = format_group_statistics(stats, "Parasitism", scale=100.0)
    assert lines[0] == "\nParasitism:"
    assert lines[1] == " - A [Hd]: 75 ± 25 (n=4)  a"
    assert lines[2] == " - B [none]: 50.000 ± n/a (n=1)  ab"

    reported = add_reported_column(stats, scale=100.0)
    assert reported["reported"].tolist() == ["75 ± 25", "50.000 ± n/a"]
    assert "reported" not in stats.columns


def test_empty_statistics():
    empty = pd.DataFrame(columns=["group", "n", "mean", "se"])
    assert format_group_statistics(empty, "Nothing")[-1] == "  (no data)"


def test_format_model_fit():
    fit = ModelFit(
        family="anova", formula="response ~ C(group)", n_obs=36, test="F",
        statistic=12.3456, df=5.0, pvalue=0.00012,
    )
    assert format_model_fit(fit) == (
        "anova (F): statistic=12.346, df=5, p=0.00012, n=36"
    )
