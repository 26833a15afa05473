"""Pytest configuration for repository-relative imports and synthetic data."""

import os
import sys

import matplotlib
import numpy as np
import pandas as pd
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

matplotlib.use("Agg")

LINEAGES = ("L1", "L2", "L3", "L4", "L5", "L6")
SYMBIONTS = {
    "L1": "uninfected",
    "L2": "uninfected",
    "L3": "H. defensa",
    "L4": "H. defensa",
    "L5": "R. insecticola",
    "L6": "R. insecticola",
}


def write_synthetic_datasets(data_dir, seed=0):
    """Write one CSV per default dataset plus the morphometrics table."""
    rng = np.random.default_rng(seed)
    os.makedirs(data_dir, exist_ok=True)

    parasitized = (4, 7, 10, 13, 15, 17)
    rows = []
    for lineage, k in zip(LINEAGES, parasitized):
        for i in range(20):
            rows.append(
                {"Lineage": lineage, "Symbiont": SYMBIONTS[lineage], "Parasitized": int(i < k)}
            )
    pd.DataFrame(rows).to_csv(os.path.join(data_dir, "parasitism.csv"), index=False)

    rows = []
    for j, lineage in enumerate(LINEAGES):
        for value in rng.normal(9.0 + 0.4 * j, 0.5, size=15):
            rows.append(
                {"Lineage": lineage, "Symbiont": SYMBIONTS[lineage], "DevelopmentTime": round(float(value), 2)}
            )
    pd.DataFrame(rows).to_csv(os.path.join(data_dir, "development.csv"), index=False)

    rows = []
    for j, lineage in enumerate(LINEAGES):
        mu = 30.0 + 6.0 * j
        for count in rng.negative_binomial(5, 5.0 / (5.0 + mu), size=15):
            rows.append(
                {"Lineage": lineage, "Symbiont": SYMBIONTS[lineage], "Offspring": int(count)}
            )
    pd.DataFrame(rows).to_csv(os.path.join(data_dir, "fecundity.csv"), index=False)

    rows = []
    for j, lineage in enumerate(LINEAGES):
        days = rng.exponential(10.0 + 2.0 * j, size=15) + 1.0
        for i, d in enumerate(days):
            rows.append(
                {
                    "Lineage": lineage,
                    "Symbiont": SYMBIONTS[lineage],
                    "Longevity": round(float(d), 1),
                    "Dead": 0 if i % 7 == 0 else 1,
                }
            )
    pd.DataFrame(rows).to_csv(os.path.join(data_dir, "longevity.csv"), index=False)

    rows = []
    for j, lineage in enumerate(LINEAGES):
        size = rng.normal(1.0 + 0.03 * j, 0.05, size=12)
        for s in size:
            rows.append(
                {
                    "Lineage": lineage,
                    "Symbiont": SYMBIONTS[lineage],
                    "HindTibia": round(float(s), 3),
                    "BodyLength": round(float(2.4 * s + rng.normal(0, 0.05)), 3),
                    "Cauda": round(float(0.2 * s + rng.normal(0, 0.01)), 3),
                    "Antenna": round(float(2.0 + rng.normal(0, 0.1)), 3),
                }
            )
    pd.DataFrame(rows).to_csv(os.path.join(data_dir, "morphometrics.csv"), index=False)

    rows = []
    for j, lineage in enumerate(LINEAGES):
        for value in rng.normal(0.30 + 0.01 * j, 0.01, size=6):
            rows.append({"Lineage": lineage, "Symbiont": SYMBIONTS[lineage], "rm": round(float(value), 4)})
    pd.DataFrame(rows).to_csv(os.path.join(data_dir, "life_table.csv"), index=False)

    return data_dir


@pytest.fixture
def data_dir(tmp_path):
    return write_synthetic_datasets(str(tmp_path / "data"))


def make_observations(groups, symbionts=None):
    """Build a standardized observation table from ``{group: [responses]}``."""
    rows = []
    for group, values in groups.items():
        for v in values:
            row = {"group": group, "response": v}
            if symbionts is not None:
                row["symbiont"] = symbionts[group]
            rows.append(row)
    return pd.DataFrame(rows)
