"""Block rendering front-end: parameters, variant selection and buffer ownership."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import numpy as np

from .colors import is_rgb
from .config import RunConfig
from .errors import ConfigurationError, ResourceError
from .partition import BlockBounds

__all__ = ["ALGORITHMS", "RenderParams", "Renderer", "select_renderer", "render_block"]

ALGORITHMS = ("legacy", "numba")


@dataclass(frozen=True)
class RenderParams:
    """Per-run constants shared by every block a node renders."""

    block_width: int
    block_height: int
    c_real: float
    c_imag: float
    max_iterations: int
    color_mode: str = "rgb"

    @property
    def rgb(self) -> bool:
        return is_rgb(self.color_mode)

    @classmethod
    def from_config(cls, config: RunConfig) -> "RenderParams":
        return cls(
            block_width=config.block_width,
            block_height=config.block_height,
            c_real=float(config.c[0]),
            c_imag=float(config.c[1]),
            max_iterations=config.iterations,
            color_mode=config.color,
        )


Renderer = Callable[[BlockBounds, RenderParams, np.ndarray], np.ndarray]


def select_renderer(algorithm: str) -> Renderer:
    """Return the block renderer for ``algorithm``."""
    if algorithm == "legacy":
        from .baseline import compute_block_legacy

        return compute_block_legacy
    if algorithm == "numba":
        from .computation import compute_block

        return compute_block
    raise ConfigurationError(f"Unknown algorithm {algorithm!r}, choose one of {ALGORITHMS}.")


def render_block(
    bounds: BlockBounds,
    params: RenderParams,
    renderer: Renderer | str = "numba",
) -> np.ndarray:
    """Render one block into a freshly allocated ``(height, width, 3)`` uint8 buffer.

    Row 0 of the buffer samples ``bounds.min_i``; column 0 samples ``bounds.min_r``.
    ``renderer`` is either a variant returned by ``select_renderer`` or its name.
    """
    if params.block_width <= 0 or params.block_height <= 0:
        raise ConfigurationError("Block size cannot be 0, check your configuration.", params)
    if isinstance(renderer, str):
        renderer = select_renderer(renderer)
    is_rgb(params.color_mode)
    pixels = _allocate_block(params, bounds)
    try:
        return renderer(bounds, params, pixels)
    except MemoryError as exc:
        raise ResourceError(f"Out of memory while rendering block {bounds}", bounds) from exc


def _allocate_block(params: RenderParams, bounds: BlockBounds) -> np.ndarray:
    # numpy reports buffers larger than the address space as ValueError
    try:
        return np.zeros((params.block_height, params.block_width, 3), dtype=np.uint8)
    except (MemoryError, ValueError) as exc:
        raise ResourceError(
            f"Cannot allocate a {params.block_width}x{params.block_height} pixel buffer", bounds
        ) from exc
