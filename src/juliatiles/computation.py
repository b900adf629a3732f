"""Numba block renderer: escape times computed in parallel over the block's pixels."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from numba import njit, prange

from .colors import palette
from .escape import escape_time

if TYPE_CHECKING:
    from .partition import BlockBounds
    from .render import RenderParams

__all__ = ["compute_block"]

_escape_time = njit(escape_time)
_palette = njit(palette)


@njit(parallel=True)
def _compute_block(
    pixels: np.ndarray,
    min_r: float,
    max_r: float,
    min_i: float,
    max_i: float,
    c_r: float,
    c_i: float,
    max_iterations: int,
    rgb: bool,
) -> np.ndarray:
    height, width = pixels.shape[0], pixels.shape[1]
    step_r = (max_r - min_r) / width
    step_i = (max_i - min_i) / height

    for k in prange(width * height):
        i = k % width
        j = k // width
        code = _escape_time(min_r + step_r * i, min_i + step_i * j, c_r, c_i, max_iterations)
        red, green, blue = _palette(code, max_iterations, rgb)
        pixels[j, i, 0] = red
        pixels[j, i, 1] = green
        pixels[j, i, 2] = blue

    return pixels


def compute_block(bounds: BlockBounds, params: RenderParams, pixels: np.ndarray) -> np.ndarray:
    return _compute_block(
        pixels,
        float(bounds.min_r),
        float(bounds.max_r),
        float(bounds.min_i),
        float(bounds.max_i),
        params.c_real,
        params.c_imag,
        params.max_iterations,
        params.rgb,
    )
