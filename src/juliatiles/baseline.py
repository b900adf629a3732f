"""Baseline block renderer: a plain Python loop over every pixel."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from .colors import colorize
from .escape import iterate

if TYPE_CHECKING:
    from .partition import BlockBounds
    from .render import RenderParams


def compute_block_legacy(bounds: BlockBounds, params: RenderParams, pixels: np.ndarray) -> np.ndarray:
    """Fill ``pixels`` pixel by pixel with ``iterate`` and ``colorize``."""
    width, height = params.block_width, params.block_height

    step_r = (bounds.max_r - bounds.min_r) / width
    step_i = (bounds.max_i - bounds.min_i) / height

    for k in range(width * height):
        i = k % width
        j = k // width
        result = iterate(
            bounds.min_r + step_r * i,
            bounds.min_i + step_i * j,
            params.c_real,
            params.c_imag,
            params.max_iterations,
        )
        pixels[j, i] = colorize(result, params.max_iterations, params.color_mode)

    return pixels
