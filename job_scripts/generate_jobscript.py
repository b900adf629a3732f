#!/usr/bin/env python3
"""Generate an LSF array job script for one sweep suite."""

import argparse
import os
import subprocess
from pathlib import Path

from juliatiles.config import load_named_sweep_configs, load_suite_resources

parser = argparse.ArgumentParser()
parser.add_argument("--suite", required=True, help="Suite name (TESTS, blocks, nodes, ...)")
parser.add_argument("--sweep", default="configs/sweeps.yaml", help="Sweep YAML file")
args = parser.parse_args()

res = load_suite_resources(args.sweep, args.suite)
n_configs = len(load_named_sweep_configs(args.sweep, args.suite)[0][1])

env = os.environ.copy()
span_value = res.get("span")
env.update(
    {
        "JOB_NAME": f"julia_{args.suite}",
        "ARRAY_RANGE": f"1-{n_configs}",
        "QUEUE": str(res.get("queue", "hpcintro")),
        "N_CORES": str(res.get("n_cores", 4)),
        "WALLTIME": str(res.get("walltime", "00:30")),
        "MEM_PER_CORE": str(res.get("mem_per_core", "2GB")),
        "SPAN_DIRECTIVE": f'#BSUB -R "span[{span_value}]"' if span_value else '#BSUB -R "span[ptile=10]"',
        "SWEEP": args.sweep,
        "SUITE": args.suite,
    }
)

with open("job_scripts/job_template.sh", "rb") as f:
    result = subprocess.run(["envsubst"], input=f.read(), stdout=subprocess.PIPE, check=True, env=env)

output_dir = Path("job_scripts/generated")
output_dir.mkdir(exist_ok=True)
output_file = output_dir / f"{args.suite}.sh"
output_file.write_bytes(result.stdout)

print(f"Generated: {output_file} ({n_configs} configs)")
print(f"\nTo submit: bsub < {output_file}")
