"""End-to-end runs via main.py."""

import hashlib
import os
import subprocess
import sys
from pathlib import Path

import numpy as np
from PIL import Image

ROOT = Path(__file__).resolve().parent.parent
ENV = {**os.environ, "SKIP_MLFLOW": "1"}


def _run(*args, cwd=ROOT):
    return subprocess.run(
        [sys.executable, str(ROOT / "main.py"), *args],
        env=ENV,
        cwd=cwd,
        capture_output=True,
        text=True,
        timeout=300,
    )


def _digest(path):
    return hashlib.sha256(path.read_bytes()).hexdigest()


def test_single_tile_is_reproducible(tmp_path):
    digests = []
    for attempt in range(2):
        out = tmp_path / f"run{attempt}"
        result = _run(
            "--no-mpi",
            "--image-size=64x64",
            "--block-size=64x64",
            "--xlim=-2:2",
            "--ylim=-2:2",
            "--c=-0.8:0.156",
            "--iterations=100",
            f"--output-dir={out}",
        )
        assert result.returncode == 0, f"Run failed:\n{result.stdout}\n{result.stderr}"
        assert [p.name for p in out.iterdir()] == ["0-0-0.png"]
        with Image.open(out / "0-0-0.png") as image:
            assert np.asarray(image).shape == (64, 64, 3)
        digests.append(_digest(out / "0-0-0.png"))

    assert digests[0] == digests[1]


def test_four_tiles(tmp_path):
    result = _run("--no-mpi", "--image-size=32x32", "--block-size=16x16", "--iterations=100", f"--output-dir={tmp_path}")
    assert result.returncode == 0, f"Run failed:\n{result.stdout}\n{result.stderr}"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["1-0-0.png", "1-0-1.png", "1-1-0.png", "1-1-1.png"]
    assert "Taking care of blocks 0 to 3 (4 blocks assigned)." in result.stdout


def test_misconfiguration_produces_no_tiles(tmp_path):
    out = tmp_path / "tiles"
    result = _run("--no-mpi", "--image-size=100x100", "--block-size=16x16", f"--output-dir={out}")
    assert result.returncode == 1
    assert "ERROR" in result.stderr
    assert not out.exists()


def test_independent_processes_cover_the_image(tmp_path):
    for rank in range(2):
        result = _run(
            "--no-mpi",
            f"--rank={rank}",
            "--nodes=2",
            "--image-size=64x64",
            "--block-size=16x16",
            "--iterations=50",
            "--format=bmp",
            f"--output-dir={tmp_path}",
        )
        assert result.returncode == 0, f"Rank {rank} failed:\n{result.stdout}\n{result.stderr}"

    names = {p.name for p in tmp_path.iterdir()}
    assert names == {f"2-{row}-{column}.bmp" for row in range(4) for column in range(4)}


def test_sweep_suite(tmp_path):
    sweep = tmp_path / "sweeps.yaml"
    sweep.write_text(
        f"""
defaults:
  iterations: 50
  output_dir: "{tmp_path}/{{run_name}}"
experiments:
  - name: TESTS
    sweep:
      image_shape: ["32x32", "64x64"]
      block_shape: ["32x32"]
"""
    )
    listing = _run("--sweep", str(sweep), "--list-suites")
    assert listing.returncode == 0
    assert "TESTS: 2 configurations" in listing.stdout

    result = _run("--no-mpi", "--sweep", str(sweep), "--suite", "TESTS")
    assert result.returncode == 0, f"Suite failed:\n{result.stdout}\n{result.stderr}"
    tiles = sorted(p.relative_to(tmp_path).as_posix() for p in tmp_path.rglob("*.png"))
    assert len(tiles) == 1 + 2 * 2
