"""Iteration count to pixel colour."""

from __future__ import annotations

from typing import Optional, Tuple

from .errors import ConfigurationError
from .escape import INTERIOR

__all__ = ["COLOR_MODES", "palette", "colorize", "is_rgb"]

COLOR_MODES = ("grey", "rgb")


def palette(code: int, ceiling: int, rgb: bool) -> Tuple[int, int, int]:
    """Map an integer-coded escape result to an RGB triple.

    ``INTERIOR`` (any negative code) is black. Escaping counts are clamped to
    ``ceiling`` and never map to black: the grey ramp starts at 1 and the
    colour ramp keeps one channel saturated.
    """
    if code < 0:
        return 0, 0, 0
    if ceiling < 1:
        ceiling = 1
    n = min(code, ceiling)

    if not rgb:
        level = 1 + (254 * n) // ceiling
        return level, level, level

    hue = 6.0 * n / (ceiling + 1)
    sector = int(hue)
    up = int(255.0 * (hue - sector))
    down = 255 - up
    if sector == 0:
        return 255, up, 0
    if sector == 1:
        return down, 255, 0
    if sector == 2:
        return 0, 255, up
    if sector == 3:
        return 0, down, 255
    if sector == 4:
        return up, 0, 255
    return 255, 0, down


def is_rgb(mode: str) -> bool:
    if mode not in COLOR_MODES:
        raise ConfigurationError(f"Unknown color mode {mode!r}, choose one of {COLOR_MODES}.")
    return mode == "rgb"


def colorize(result: Optional[int], ceiling: int, mode: str) -> Tuple[int, int, int]:
    """Colour of one pixel; ``result`` is ``None`` for interior points."""
    code = INTERIOR if result is None else int(result)
    return palette(code, int(ceiling), is_rgb(mode))
