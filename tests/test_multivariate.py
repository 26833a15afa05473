"""Tests for PCA, MANOVA and trait correlations."""

import os

import numpy as np
import pandas as pd
import pytest

from symbio.config import DEFAULT_MORPHOMETRICS
from symbio.data_processing import load_trait_table
from symbio.stats.multivariate import (
    correlation_matrix,
    lineage_trait_means,
    run_manova,
    run_pca,
)

TRAITS = list(DEFAULT_MORPHOMETRICS.traits)


@pytest.fixture
def traits(data_dir):
    spec = DEFAULT_MORPHOMETRICS
    return load_trait_table(os.path.join(data_dir, spec.filename), spec)


def test_pca_shapes_and_variance(traits):
    pca = run_pca(traits, TRAITS)
    assert pca.scores.shape == (len(traits), len(TRAITS))
    assert list(pca.loadings.index) == TRAITS
    ratio = pca.explained_variance_ratio
    assert ratio.sum() == pytest.approx(1.0, abs=1e-6)
    assert (np.diff(ratio.to_numpy()) <= 1e-9).all()
    assert pca.axis_label(0).startswith("PC1 (")


def test_pca_limits_components(traits):
    pca = run_pca(traits, TRAITS, n_components=2)
    assert list(pca.scores.columns) == ["PC1", "PC2"]


def test_pca_needs_two_traits(traits):
    with pytest.raises(ValueError):
        run_pca(traits, TRAITS[:1])
    with pytest.raises(KeyError):
        run_pca(traits, ["NotATrait", "HindTibia"])


def test_manova_returns_four_statistics(traits):
    table = run_manova(traits, TRAITS)
    assert {"Wilks' lambda", "Pillai's trace"} <= set(table.index)
    assert "Pr > F" in table.columns
    assert 0.0 <= float(table.loc["Pillai's trace", "Pr > F"]) <= 1.0


def test_manova_needs_two_levels(traits):
    single = traits[traits["group"] == "L1"]
    with pytest.raises(ValueError):
        run_manova(single, TRAITS)


def test_correlation_matrix_symmetric():
    frame = pd.DataFrame(
        {
            "x": [1.0, 2.0, 3.0, 4.0, 5.0],
            "y": [2.0, 4.1, 5.9, 8.2, 9.9],
            "z": [5.0, 3.0, 4.0, 1.0, 2.0],
        }
    )
    r, p = correlation_matrix(frame, ["x", "y", "z"])
    assert np.allclose(r.to_numpy(), r.to_numpy().T)
    assert np.allclose(np.diag(r.to_numpy()), 1.0)
    assert r.loc["x", "y"] > 0.99
    assert r.loc["x", "z"] < 0
    assert p.loc["x", "y"] < 0.01


def test_lineage_trait_means(traits):
    means = lineage_trait_means(traits, TRAITS)
    assert list(means.index) == sorted(traits["group"].unique())
    assert list(means.columns) == TRAITS
