#!/usr/bin/env python3
"""One-time Databricks credential bootstrap for MLflow."""

from __future__ import annotations

import mlflow

from juliatiles.logging import _resolve_experiment_name


def main() -> None:
    print("[setup] Launching interactive mlflow.login() - follow the prompts.")
    mlflow.login(backend="databricks")
    print("[setup] Credentials stored. Attempting a quick verification run...")
    mlflow.set_tracking_uri("databricks")
    mlflow.set_experiment(_resolve_experiment_name())
    with mlflow.start_run(run_name="setup_ping"):
        mlflow.log_param("setup_ping", "ok")
    print("[setup] Verification succeeded. Runs of main.py will be tracked.")


if __name__ == "__main__":
    main()
