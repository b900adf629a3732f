"""MLflow logging helpers and launch commands."""

import sys

from juliatiles.config import default_run_config
from juliatiles.execution import build_command
from juliatiles.logging import _records_to_table, load_balance_figure, log_to_mlflow
from juliatiles.report import TileReport

RANKS = [
    {"rank": 1, "comp_time": 0.5, "write_time": 0.1, "tiles": 3},
    {"rank": 0, "comp_time": 0.4, "write_time": 0.1, "tiles": 2},
]


def test_records_to_table():
    table = _records_to_table(RANKS)
    assert table["rank"] == [1, 0]
    assert table["tiles"] == [3, 2]


def test_load_balance_figure():
    fig = load_balance_figure(RANKS)
    assert len(fig.axes) == 2
    assert [bar.get_height() for bar in fig.axes[0].patches] == [2, 3]


def test_skip_mlflow(monkeypatch):
    monkeypatch.setenv("SKIP_MLFLOW", "1")
    assert log_to_mlflow(default_run_config(), TileReport({}, None)) is None


def test_build_command():
    config = default_run_config(n_ranks=4)
    cmd, env = build_command(config)
    assert cmd[:5] == ["mpirun", "-n", "4", sys.executable, sys.argv[0]]
    assert "--n-ranks=4" in cmd

    cmd, _ = build_command(config, use_mpi=False)
    assert cmd[:3] == [sys.executable, sys.argv[0], "--no-mpi"]
