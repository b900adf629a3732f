"""The numba renderer must match the pure Python baseline byte for byte."""

from pathlib import Path

import numpy as np
import pytest

from juliatiles.config import load_sweep_configs
from juliatiles.partition import block_bounds
from juliatiles.render import RenderParams, render_block

TEST_CONFIGS = load_sweep_configs(Path(__file__).parent / "test_configs.yaml")


@pytest.mark.parametrize("config", TEST_CONFIGS, ids=lambda c: c.run_name)
def test_numba_matches_baseline(config):
    geometry = config.geometry
    params = RenderParams.from_config(config)

    for index in range(geometry.total_blocks):
        bounds = block_bounds(index, geometry, config.window)
        baseline = render_block(bounds, params, "legacy")
        fast = render_block(bounds, params, "numba")
        np.testing.assert_array_equal(fast, baseline, err_msg=f"Mismatch: {config.run_name} block {index}")
