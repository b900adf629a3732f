"""Execution helpers for the tile rendering CLI."""

from __future__ import annotations

import os
import selectors
import subprocess
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from .config import RunConfig, load_sweep_configs
from .logging import _resolve_experiment_name, _resolve_tracking_uri, log_to_mlflow
from .mpi import NodeContext, run_mpi_computation
from .report import TileReport


def run_single_experiment(
    config: RunConfig,
    suite_name: Optional[str],
    node: NodeContext,
) -> TileReport:
    """Render this node's share of one configuration and log it from rank 0."""
    if node.rank == 0:
        print(
            f"[Run] Starting rendering '{config.run_name}' "
            f"(nodes={node.size}, algorithm={config.algorithm}, color={config.color}, "
            f"image={config.image_size}, blocks={config.block_size}, output={config.output_dir})",
            flush=True,
        )

    report = run_mpi_computation(config, node)

    if node.rank != 0:
        return report

    suite = suite_name or os.environ.get("JULIA_SUITE") or "default"

    if os.environ.get("SKIP_MLFLOW"):
        print("[Run] SKIP_MLFLOW set - skipping MLflow logging.", flush=True)
    else:
        print("[Run] Rendering finished, logging to MLflow...", flush=True)

    log_to_mlflow(config, report, suite)

    wall_time = report.timing.get("wall_time", 0.0)
    print(f"[Timing] Total: {wall_time:.4f}s ({report.tile_count} tiles)")
    return report


def run_sweep(
    config_path: str | Path | None,
    task_id: Optional[int] = None,
    suite_name: Optional[str] = None,
    configs: Optional[List[RunConfig]] = None,
    descriptor: Optional[str] = None,
    use_mpi: bool = True,
) -> int:
    """Run every configuration of a sweep, each in its own subprocess."""
    if configs is None:
        if config_path is None:
            raise ValueError("config_path must be provided when configs is None")
        configs = load_sweep_configs(config_path)
    descriptor = descriptor or (str(config_path) if config_path else "sweep")

    if not configs:
        print("ERROR: No configurations found in sweep", file=sys.stderr)
        return 1

    if task_id is not None:
        if task_id < 0 or task_id >= len(configs):
            print(f"ERROR: task-id {task_id} out of range [0, {len(configs) - 1}]", file=sys.stderr)
            return 1
        config = configs[task_id]
        print(f"[Task {task_id}] Running: {config.run_name}")
        ok = run_single_config_subprocess(
            config,
            task_id,
            len(configs),
            show_progress=False,
            suite_name=suite_name,
            use_mpi=use_mpi,
        )
        return 0 if ok else 1

    print("=" * 70)
    print(f"Running {len(configs)} configurations from {descriptor}")
    print("=" * 70)

    failures: List[Tuple[int, str]] = []
    for idx, cfg in enumerate(configs):
        if not run_single_config_subprocess(
            cfg, idx, len(configs), suite_name=suite_name, use_mpi=use_mpi
        ):
            failures.append((idx, cfg.run_name))

    print("\n" + "=" * 70)
    print("Summary")
    print("=" * 70)
    print(f"Total:      {len(configs)}")
    print(f"Successful: {len(configs) - len(failures)}")
    print(f"Failed:     {len(failures)}")

    if failures:
        print("\nFailed configurations:")
        for idx, name in failures:
            print(f"  [{idx}] {name}")
        return 1

    return 0


def run_single_config_subprocess(
    config: RunConfig,
    config_idx: int,
    total_configs: int,
    *,
    show_progress: bool = True,
    suite_name: Optional[str] = None,
    use_mpi: bool = True,
) -> bool:
    """Render one configuration in a child process (``mpirun`` or plain Python)."""
    if show_progress:
        print(f"\n[{config_idx + 1}/{total_configs}] {config.run_name}")
        print(
            f"    n_ranks={config.n_ranks}, image={config.image_size}, blocks={config.block_size}, "
            f"algorithm={config.algorithm}, output={config.output_dir}"
        )

    import mlflow

    run_context = None
    if not os.environ.get("SKIP_MLFLOW"):
        mlflow.set_tracking_uri(_resolve_tracking_uri())
        mlflow.set_experiment(_resolve_experiment_name())
        run_context = mlflow.start_run(run_name=config.run_name)
        run_context.__enter__()

    cmd, env = build_command(config, use_mpi)
    if suite_name:
        env["JULIA_SUITE"] = suite_name
    if run_context:
        env["MLFLOW_RUN_ID"] = run_context.info.run_id

    returncode: Optional[int] = None
    stdout_text, stderr_text = "", ""
    try:
        returncode, stdout_text, stderr_text = _stream_process(cmd, env)
        if run_context:
            if stdout_text:
                mlflow.log_text(stdout_text, "logs/stdout.txt")
            if stderr_text:
                mlflow.log_text(stderr_text, "logs/stderr.txt")
    finally:
        if run_context:
            run_context.__exit__(*sys.exc_info())

    if returncode != 0:
        print(f"    FAILED with exit code {returncode}", file=sys.stderr)
        if stderr_text:
            print(f"    Error: {stderr_text[:200]}...", file=sys.stderr)
        return False

    if show_progress:
        print("    Completed")
    return True


def _stream_process(cmd: List[str], env: dict) -> Tuple[int, str, str]:
    """Run ``cmd`` echoing its output live; return exit code, stdout and stderr."""
    captured = {"stdout": [], "stderr": []}
    proc = subprocess.Popen(
        cmd,
        text=True,
        env=env,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        bufsize=1,
    )

    selector = selectors.DefaultSelector()
    selector.register(proc.stdout, selectors.EVENT_READ, ("stdout", sys.stdout))
    selector.register(proc.stderr, selectors.EVENT_READ, ("stderr", sys.stderr))

    try:
        while selector.get_map():
            for key, _ in selector.select():
                line = key.fileobj.readline()
                if line == "":
                    selector.unregister(key.fileobj)
                    key.fileobj.close()
                    continue
                name, sink = key.data
                captured[name].append(line)
                print(line, end="", file=sink, flush=True)
    except KeyboardInterrupt:
        proc.kill()
        proc.wait()
        raise
    finally:
        selector.close()

    return proc.wait(), "".join(captured["stdout"]), "".join(captured["stderr"])


def build_command(config: RunConfig, use_mpi: bool = True) -> Tuple[List[str], dict]:
    """Build the launch command and environment for a single configuration."""
    if use_mpi:
        cmd = ["mpirun", "-n", str(config.n_ranks), sys.executable, sys.argv[0]]
    else:
        cmd = [sys.executable, sys.argv[0], "--no-mpi"]

    cmd.extend(config.to_cli_args())
    return cmd, os.environ.copy()
