from __future__ import annotations

import argparse
import sys
from pathlib import Path

from juliatiles.config import DEFAULT_RUN_CONFIG, default_run_config, load_named_sweep_configs
from juliatiles.errors import JuliaTilesError
from juliatiles.execution import run_single_experiment, run_sweep
from juliatiles.mpi import mpi_node, standalone_node


def parse_args(argv=None):
    defaults = DEFAULT_RUN_CONFIG
    parser = argparse.ArgumentParser(description="Render Julia set tiles, optionally across MPI ranks.")
    parser.add_argument("--sweep", type=str, help="Path to sweep YAML file")
    parser.add_argument("--suite", type=str, help="Name of suite/experiment within sweep file")
    parser.add_argument("--list-suites", action="store_true", help="List suites in sweep file")
    parser.add_argument("--task-id", type=int, help="Run specific config index (for HPC arrays)")

    parser.add_argument("--image-size", type=str, default=defaults.image_size, help="Image size WxH")
    parser.add_argument("--block-size", type=str, default=defaults.block_size, help="Block size WxH")
    parser.add_argument("--xlim", type=str, default="%s:%s" % defaults.xlim, help="Real range min:max")
    parser.add_argument("--ylim", type=str, default="%s:%s" % defaults.ylim, help="Imaginary range min:max")
    parser.add_argument("--c", type=str, default="%s:%s" % defaults.c, help="Julia constant re:im")
    parser.add_argument("--iterations", type=int, default=defaults.iterations, help="Maximum iterations")
    parser.add_argument("--algorithm", choices=["legacy", "numba"], default=defaults.algorithm)
    parser.add_argument("--color", choices=["grey", "rgb"], default=defaults.color)
    parser.add_argument("--format", choices=["png", "bmp"], default=defaults.image_format)
    parser.add_argument("--output-dir", type=str, default=defaults.output_dir)
    parser.add_argument("--n-ranks", type=int, default=defaults.n_ranks, help="Ranks for mpirun (sweeps)")

    parser.add_argument("--no-mpi", action="store_true", help="Run without MPI (see --rank/--nodes)")
    parser.add_argument("--rank", type=int, default=0, help="Node rank when running without MPI")
    parser.add_argument("--nodes", type=int, default=1, help="Node count when running without MPI")

    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    # Handle sweep runs
    if args.sweep:
        sweep_path = Path(args.sweep)

        if args.list_suites:
            for name, configs in load_named_sweep_configs(sweep_path):
                print(f"{name or sweep_path.stem}: {len(configs)} configurations")
            return 0

        if args.task_id is not None and args.suite is None:
            sys.exit("ERROR: --task-id requires --suite")

        suites = load_named_sweep_configs(sweep_path, args.suite)

        exit_code = 0
        for suite_name, configs in suites:
            descriptor = f"{sweep_path}::{suite_name}" if suite_name else str(sweep_path)
            rc = run_sweep(sweep_path, args.task_id, suite_name, configs, descriptor, not args.no_mpi)
            exit_code = exit_code or rc
        return exit_code

    if args.suite:
        sys.exit("ERROR: --suite requires --sweep")

    try:
        config = default_run_config(
            n_ranks=args.n_ranks,
            image_size=args.image_size,
            block_size=args.block_size,
            xlim=args.xlim,
            ylim=args.ylim,
            c=args.c,
            iterations=args.iterations,
            algorithm=args.algorithm,
            color=args.color,
            image_format=args.format,
            output_dir=args.output_dir,
        )
    except ValueError as exc:
        sys.exit(f"ERROR: {exc}")

    node = standalone_node(args.rank, args.nodes) if args.no_mpi else mpi_node()

    try:
        run_single_experiment(config, None, node)
    except JuliaTilesError as exc:
        print(f"ERROR: [Rank {node.rank}] {exc}", file=sys.stderr, flush=True)
        # other ranks would wait forever in the final gather
        if node.comm is not None and node.size > 1:
            node.comm.Abort(1)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
