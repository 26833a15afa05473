"""End-to-end tests for the chart component and the dataset pipeline."""

import os

import matplotlib.pyplot as plt
import pandas as pd
import pytest
from matplotlib.colors import to_rgba

import main
from conftest import make_observations
from symbio import process_all_datasets
from symbio.analysis import GroupSummaryChart, run_dataset
from symbio.config import DEFAULT_DATASETS, dataset_by_key
from symbio.exceptions import MissingLetterError
from symbio.plotting import bar_charts
from symbio.plotting.style import NEUTRAL_FILL
from symbio.stats import multcomp


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


def test_group_summary_chart_end_to_end():
    obs = make_observations(
        {"A": [1, 1, 0, 1], "B": [0, 0, 0, 1]},
        symbionts={"A": "H. defensa", "B": "uninfected"},
    )
    chart = GroupSummaryChart().run(obs, {"A": "a", "B": "b"})

    assert chart.order == ("A", "B")
    stats = chart.statistics.set_index("group")
    assert stats.loc["A", "mean"] == pytest.approx(0.75)
    assert stats.loc["A", "se"] == pytest.approx(0.25)
    assert stats.loc["B", "mean"] == pytest.approx(0.25)
    assert stats.loc["B", "se"] == pytest.approx(0.25)
    assert stats.loc["A", "letter"] == "a"
    assert stats.loc["B", "letter"] == "b"


def test_group_summary_chart_rejects_incomplete_letters():
    obs = make_observations({"A": [1.0, 2.0], "B": [3.0, 4.0]}, symbionts={"A": "x", "B": "y"})
    with pytest.raises(MissingLetterError):
        GroupSummaryChart().run(obs, {"A": "a"})


def test_run_dataset_writes_figure_and_tables(data_dir, tmp_path):
    out = tmp_path / "out"
    result = run_dataset(dataset_by_key("parasitism"), data_dir, out)

    assert result.figure_path == out / "figures" / "parasitism_ranked_bar.png"
    assert result.figure_path.is_file()
    for path in result.table_paths:
        assert os.path.isfile(path)

    summary = pd.read_csv(out / "tables" / "parasitism_group_summary.csv")
    assert summary["group"].tolist() == ["L6", "L5", "L4", "L3", "L2", "L1"]
    assert summary["letter"].str.startswith("a").iloc[0]
    assert set(result.letters) == set(summary["group"])


def test_process_all_datasets(data_dir, tmp_path):
    out = tmp_path / "out"
    results, failures = process_all_datasets(data_dir=data_dir, output_dir=out)

    assert failures == {}
    assert set(results) == {spec.key for spec in DEFAULT_DATASETS} | {"morphometrics"}
    multivariate = results["morphometrics"]
    for key in ("biplot", "correlation", "heatmap"):
        assert os.path.isfile(multivariate[key])
    assert (out / "tables" / "morphometrics_manova.csv").is_file()


def test_one_failing_dataset_does_not_stop_the_others(data_dir, tmp_path):
    os.remove(os.path.join(data_dir, "fecundity.csv"))
    datasets = tuple(dataset_by_key(k) for k in ("fecundity", "life_table"))
    results, failures = process_all_datasets(
        datasets=datasets, data_dir=data_dir, output_dir=tmp_path / "out", multivariate=None
    )
    assert set(results) == {"life_table"}
    assert set(failures) == {"fecundity"}
    assert failures["fecundity"].startswith("FileNotFoundError")


def test_main_cli(data_dir, tmp_path):
    out = tmp_path / "cli"
    code = main.main(
        ["--data-dir", data_dir, "--outdir", str(out), "--datasets", "life_table", "--skip-multivariate"]
    )
    assert code == 0
    assert (out / "figures" / "life_table_ranked_bar.pdf").is_file()
    assert (out / "symbio_analysis.log").is_file()


def test_main_cli_reports_failure(tmp_path):
    code = main.main(
        ["--data-dir", str(tmp_path / "empty"), "--outdir", str(tmp_path / "cli"), "--skip-multivariate"]
    )
    assert code == 1


def test_main_cli_rejects_bad_alpha(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        main.main(["--alpha", "2", "--outdir", str(tmp_path)])
    assert excinfo.value.code == 2


def test_main_cli_rejects_unknown_dataset(tmp_path):
    with pytest.raises(SystemExit):
        main.main(["--datasets", "wing_length", "--outdir", str(tmp_path)])


def test_group_summary_chart_without_symbiont_column():
    obs = make_observations({"A": [1.0, 2.0], "B": [3.0, 4.0]})
    chart = GroupSummaryChart().run(obs, {"A": "b", "B": "a"})

    assert chart.order == ("B", "A")
    neutral = to_rgba(NEUTRAL_FILL)
    assert all(patch.get_facecolor() == neutral for patch in chart.axes.patches)
    assert chart.axes.get_legend() is None


def test_failed_save_closes_the_figure(data_dir, tmp_path, monkeypatch):
    def refuse(*args, **kwargs):
        raise OSError("disk full")

    plt.close("all")
    monkeypatch.setattr(bar_charts, "save_figure", refuse)
    with pytest.raises(OSError):
        run_dataset(dataset_by_key("life_table"), data_dir, tmp_path / "out")
    assert plt.get_fignums() == []


def test_run_dataset_runs_tukey_once(data_dir, tmp_path, monkeypatch):
    calls = []
    original = multcomp.pairwise_tukeyhsd

    def counting(*args, **kwargs):
        calls.append(1)
        return original(*args, **kwargs)

    monkeypatch.setattr(multcomp, "pairwise_tukeyhsd", counting)
    run_dataset(dataset_by_key("life_table"), data_dir, tmp_path / "out")
    assert len(calls) == 1
