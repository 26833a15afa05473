"""Dataset definitions for the lineage × symbiont analyses.

Each :class:`DatasetSpec` names the CSV file, the raw column names mapped to
the standardized observation columns, the model used to test the lineage
effect, and the ranked bar chart options. The same chart component is run
once per entry of :data:`DEFAULT_DATASETS`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

from .plotting.bar_charts import ChartConfig
from .stats.models import DEFAULT_FORMULA

DEFAULT_DATA_DIR = Path("data")
DEFAULT_OUTPUT_DIR = Path("output")
DEFAULT_ALPHA = 0.05
LOG_FILENAME = "symbio_analysis.log"


@dataclass(frozen=True)
class DatasetSpec:
    key: str
    filename: str
    group_col: str
    response_col: str
    model: str
    chart: ChartConfig
    symbiont_col: str | None = "Symbiont"
    censor_col: str | None = None
    formula: str = DEFAULT_FORMULA
    description: str = ""

    def __post_init__(self):
        # No symbiont column means nothing to fill bars by.
        if self.symbiont_col is None and self.chart.fill_by == "symbiont":
            object.__setattr__(self, "chart", replace(self.chart, fill_by="none"))


@dataclass(frozen=True)
class MultivariateSpec:
    """Trait table analysed jointly by PCA, MANOVA and correlation."""

    key: str
    filename: str
    group_col: str
    traits: tuple[str, ...]
    symbiont_col: str | None = "Symbiont"
    description: str = ""


DEFAULT_DATASETS: tuple[DatasetSpec, ...] = (
    DatasetSpec(
        key="parasitism",
        filename="parasitism.csv",
        group_col="Lineage",
        response_col="Parasitized",
        model="binomial",
        chart=ChartConfig(
            y_label="Parasitism rate (%)",
            y_limit=(0.0, 100.0),
            y_scale=100.0,
            letter_offset=3.0,
        ),
        description="Proportion of aphids mummified after parasitoid exposure",
    ),
    DatasetSpec(
        key="development",
        filename="development.csv",
        group_col="Lineage",
        response_col="DevelopmentTime",
        model="inverse_gaussian",
        chart=ChartConfig(y_label="Development time (days)", letter_offset=0.3),
        description="Days from oviposition to adult emergence",
    ),
    DatasetSpec(
        key="fecundity",
        filename="fecundity.csv",
        group_col="Lineage",
        response_col="Offspring",
        model="negative_binomial",
        chart=ChartConfig(y_label="Offspring per female", letter_offset=2.0),
        description="Lifetime offspring count per female",
    ),
    DatasetSpec(
        key="longevity",
        filename="longevity.csv",
        group_col="Lineage",
        response_col="Longevity",
        censor_col="Dead",
        model="cox",
        chart=ChartConfig(y_label="Longevity (days)", letter_offset=0.8),
        description="Adult lifespan; censored when alive at the end of the assay",
    ),
    DatasetSpec(
        key="tibia",
        filename="morphometrics.csv",
        group_col="Lineage",
        response_col="HindTibia",
        model="gamma",
        chart=ChartConfig(y_label="Hind tibia length (mm)", letter_offset=0.02),
        description="Hind tibia length of adult females",
    ),
    DatasetSpec(
        key="life_table",
        filename="life_table.csv",
        group_col="Lineage",
        response_col="rm",
        model="anova",
        chart=ChartConfig(
            y_label=r"Intrinsic rate of increase $r_m$", letter_offset=0.01
        ),
        description="Jackknifed intrinsic rate of natural increase per replicate",
    ),
)

DEFAULT_MORPHOMETRICS = MultivariateSpec(
    key="morphometrics",
    filename="morphometrics.csv",
    group_col="Lineage",
    traits=("HindTibia", "BodyLength", "Cauda", "Antenna"),
    description="Adult female size traits",
)


def dataset_by_key(key: str, datasets=DEFAULT_DATASETS) -> DatasetSpec:
    """Return the dataset spec named ``key``."""
    for spec in datasets:
        if spec.key == key:
            return spec
    raise KeyError(f"Unknown dataset '{key}'. Expected one of {[s.key for s in datasets]}.")
