"""MLflow logging for Julia tile rendering runs."""

from __future__ import annotations

import os
import socket
from typing import Any, Dict, List, Sequence

import mlflow
import pandas as pd
from matplotlib import pyplot as plt

from .config import RunConfig
from .report import TileReport

DEFAULT_TRACKING_URI = "databricks"
EXPERIMENT_NAME = "/Shared/julia_tiles"


def log_to_mlflow(
    config: RunConfig,
    report: TileReport,
    suite_name: str = "default",
) -> None:
    """Log a finished run to MLflow: parameters, timings, tile table and a load figure.

    Called on rank 0 only. If MLFLOW_RUN_ID is set in the environment the
    run started by the parent sweep process is continued, otherwise a new
    run is created.
    """
    if os.environ.get("SKIP_MLFLOW"):
        return

    mlflow.set_tracking_uri(_resolve_tracking_uri())
    mlflow.set_experiment(_resolve_experiment_name())

    existing_run_id = os.environ.get("MLFLOW_RUN_ID")
    if existing_run_id:
        run_context = mlflow.start_run(run_id=existing_run_id)
    else:
        run_context = mlflow.start_run(run_name=config.run_name)

    with run_context as run:
        tags = {
            "node_name": socket.gethostname(),
            "suite": suite_name,
        }
        job_id = os.environ.get("LSB_JOBID")
        if job_id:
            tags["job_id"] = job_id
        mlflow.set_tags(tags)

        tile_records = report.copy_tiles()
        if tile_records:
            mlflow.log_table(_records_to_table(tile_records), "tiles.json")

        timing_stats = report.timing or {}
        rank_records = timing_stats.get("rank_stats")
        if isinstance(rank_records, list) and rank_records:
            mlflow.log_table(_records_to_table(rank_records), "ranks.json")
            fig = load_balance_figure(rank_records)
            mlflow.log_figure(fig, "figures/load_balance.png")
            plt.close(fig)

        params = config.to_dict()
        params["zoom"] = tile_records[0]["zoom"] if tile_records else None
        mlflow.log_params(params)

        mlflow.log_metrics(
            {
                "wall_time": float(timing_stats.get("wall_time", 0.0)),
                "comp_total": float(timing_stats.get("comp_total", 0.0)),
                "write_total": float(timing_stats.get("write_total", 0.0)),
                "total_tiles": float(timing_stats.get("total_tiles", 0)),
            }
        )

        print(f"[MLflow] Logged run: {config.run_name} (suite: {suite_name})")
        print(f"[MLflow] Run ID: {run.info.run_id}")


def load_balance_figure(rank_records: Sequence[Dict[str, Any]]):
    """Bar chart of tiles and compute time per rank."""
    frame = pd.DataFrame.from_records(rank_records).sort_values("rank")
    fig, (ax_tiles, ax_time) = plt.subplots(1, 2, figsize=(10, 4))
    ax_tiles.bar(frame["rank"], frame["tiles"])
    ax_tiles.set_xlabel("Rank")
    ax_tiles.set_ylabel("Tiles")
    ax_time.bar(frame["rank"], frame["comp_time"], label="compute")
    ax_time.bar(frame["rank"], frame["write_time"], bottom=frame["comp_time"], label="write")
    ax_time.set_xlabel("Rank")
    ax_time.set_ylabel("Time [s]")
    ax_time.legend()
    fig.tight_layout()
    return fig


def _records_to_table(records: Sequence[Dict[str, Any]]) -> Dict[str, List[Any]]:
    """Convert row-wise records into MLflow table format."""

    frame = pd.DataFrame.from_records(records)
    return frame.to_dict(orient="list")


def _resolve_tracking_uri() -> str:
    return os.environ.get("MLFLOW_TRACKING_URI") or DEFAULT_TRACKING_URI


def _resolve_experiment_name() -> str:
    return os.environ.get("JULIA_EXPERIMENT") or EXPERIMENT_NAME
