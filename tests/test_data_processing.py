"""Tests for loading and standardizing per-individual tables."""

import os

import pandas as pd
import pytest

from symbio.config import DEFAULT_MORPHOMETRICS, DatasetSpec, dataset_by_key
from symbio.data_processing import (
    load_observations,
    load_table,
    load_trait_table,
    standardize_observations,
)
from symbio.plotting import ChartConfig


def test_load_observations_standardizes_columns(data_dir):
    spec = dataset_by_key("parasitism")
    obs = load_observations(os.path.join(data_dir, spec.filename), spec)
    assert list(obs.columns) == ["group", "response", "symbiont"]
    assert len(obs) == 120
    assert obs["response"].dtype == float
    assert set(obs["response"].unique()) <= {0.0, 1.0}
    assert sorted(obs["group"].unique()) == ["L1", "L2", "L3", "L4", "L5", "L6"]


def test_censor_column_loaded_as_int(data_dir):
    spec = dataset_by_key("longevity")
    obs = load_observations(os.path.join(data_dir, spec.filename), spec)
    assert "censor" in obs.columns
    assert set(obs["censor"].unique()) == {0, 1}


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_table(tmp_path / "absent.csv")


def test_semicolon_delimited_file(tmp_path):
    path = tmp_path / "semi.csv"
    path.write_text(" Lineage ;Symbiont;rm\nL1;none;0.31\nL1;none;0.29\nL2;Hd;0.25\n")
    df = load_table(path)
    assert list(df.columns) == ["Lineage", "Symbiont", "rm"]
    obs = load_observations(path, dataset_by_key("life_table"))
    assert obs["response"].tolist() == pytest.approx([0.31, 0.29, 0.25])


def test_missing_column_raises_key_error():
    raw = pd.DataFrame({"Lineage": ["L1"], "Symbiont": ["none"]})
    with pytest.raises(KeyError, match="rm"):
        standardize_observations(raw, dataset_by_key("life_table"))


def test_non_numeric_response_raises():
    raw = pd.DataFrame({"Lineage": ["L1", "L2"], "Symbiont": ["none", "Hd"], "rm": [0.3, "x"]})
    with pytest.raises(ValueError, match="non-numeric"):
        standardize_observations(raw, dataset_by_key("life_table"))


def test_missing_lineage_raises():
    raw = pd.DataFrame({"Lineage": ["L1", None], "Symbiont": ["none", "Hd"], "rm": [0.3, 0.2]})
    with pytest.raises(ValueError, match="no lineage"):
        standardize_observations(raw, dataset_by_key("life_table"))


def test_bad_censor_values_raise():
    raw = pd.DataFrame(
        {"Lineage": ["L1", "L2"], "Symbiont": ["none", "Hd"], "Longevity": [10, 12], "Dead": [1, 2]}
    )
    with pytest.raises(ValueError, match="censoring"):
        standardize_observations(raw, dataset_by_key("longevity"))


def test_lineage_labels_are_stripped_strings():
    raw = pd.DataFrame({"Lineage": [" 7 ", 7], "Symbiont": ["none", "none"], "rm": [0.3, 0.2]})
    obs = standardize_observations(raw, dataset_by_key("life_table"))
    assert obs["group"].tolist() == ["7", "7"]


def test_trait_table_keeps_missing_traits(tmp_path):
    path = tmp_path / "morph.csv"
    path.write_text(
        "Lineage,Symbiont,HindTibia,BodyLength,Cauda,Antenna\n"
        "L1,none,1.0,2.4,0.2,2.0\n"
        "L2,Hd,,2.5,0.21,2.1\n"
    )
    traits = load_trait_table(path, DEFAULT_MORPHOMETRICS)
    assert len(traits) == 2
    assert traits["HindTibia"].isna().sum() == 1
    assert "symbiont" in traits.columns


def test_unknown_dataset_key():
    with pytest.raises(KeyError):
        dataset_by_key("wing_length")


def test_blank_symbiont_cells_raise(tmp_path):
    path = tmp_path / "blank.csv"
    path.write_text("Lineage,Symbiont,rm\nL1,,0.3\nL1,,0.31\nL2,Hd,0.2\nL2,Hd,0.22\n")
    with pytest.raises(ValueError, match="life_table: 2 rows have no 'Symbiont'"):
        load_observations(path, dataset_by_key("life_table"))


def test_dataset_without_symbiont_column_fills_neutral(tmp_path):
    spec = DatasetSpec(
        key="rm_only",
        filename="rm.csv",
        group_col="Lineage",
        response_col="rm",
        model="anova",
        chart=ChartConfig(y_label="r_m"),
        symbiont_col=None,
    )
    assert spec.chart.fill_by == "none"
    assert spec.chart.y_label == "r_m"

    path = tmp_path / "rm.csv"
    path.write_text("Lineage,rm\nL1,0.3\nL1,0.31\nL2,0.2\nL2,0.22\n")
    obs = load_observations(path, spec)
    assert list(obs.columns) == ["group", "response"]
