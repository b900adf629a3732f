"""Escape-time iteration of the quadratic Julia map."""

from __future__ import annotations

from typing import Optional

__all__ = ["INTERIOR", "BAILOUT_SQUARED", "escape_time", "iterate"]

# Integer code for points that never escape; real counts are >= 0.
INTERIOR = -1

# |z| > 2
BAILOUT_SQUARED = 4.0


def escape_time(b_r: float, b_i: float, c_r: float, c_i: float, max_iterations: int) -> int:
    """Return the first ``n`` in ``[0, max_iterations]`` with ``|z_n| > 2``, else ``INTERIOR``.

    ``z_0 = b_r + b_i j`` and ``z_{n+1} = z_n ** 2 + c``. Written with plain
    float arithmetic so the same function compiles under numba.
    """
    z_r = b_r
    z_i = b_i
    for n in range(max_iterations + 1):
        if z_r * z_r + z_i * z_i > BAILOUT_SQUARED:
            return n
        z_r, z_i = z_r * z_r - z_i * z_i + c_r, 2.0 * z_r * z_i + c_i
    return INTERIOR


def iterate(b_r: float, b_i: float, c_r: float, c_i: float, max_iterations: int) -> Optional[int]:
    """Escape iteration of ``b_r + b_i j``, or ``None`` when the point stays bounded."""
    n = escape_time(float(b_r), float(b_i), float(c_r), float(c_i), int(max_iterations))
    return None if n == INTERIOR else n
