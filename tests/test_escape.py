"""Escape-time iteration."""

import pytest

from juliatiles.escape import INTERIOR, escape_time, iterate


@pytest.mark.parametrize("max_iterations", [0, 1, 10, 100, 1000])
def test_origin_never_escapes_for_zero_constant(max_iterations):
    assert iterate(0.0, 0.0, 0.0, 0.0, max_iterations) is None


@pytest.mark.parametrize(
    "start,expected",
    [
        ((3.0, 0.0), 0),  # |z0| = 3
        ((0.0, -2.5), 0),
        ((1.5, 0.0), 1),  # 2.25
        ((1.2, 0.0), 2),  # 1.44, 2.0736
    ],
)
@pytest.mark.parametrize("extra", [0, 1, 50])
def test_escape_iteration_independent_of_ceiling(start, expected, extra):
    b_r, b_i = start
    assert iterate(b_r, b_i, 0.0, 0.0, expected + extra) == expected


def test_bailout_is_strictly_greater_than_two():
    # |z| == 2 is a fixed point of z^2 - 2 and never crosses the bound
    assert iterate(2.0, 0.0, -2.0, 0.0, 50) is None


def test_constant_drives_the_orbit():
    # z1 = c = 3 escapes on the first step
    assert iterate(0.0, 0.0, 3.0, 0.0, 10) == 1
    assert iterate(0.0, 0.0, -0.8, 0.156, 10) is None


def test_stops_at_max_iterations():
    # 1.2 needs two squarings
    assert iterate(1.2, 0.0, 0.0, 0.0, 1) is None


def test_integer_kernel_matches_tagged_result():
    assert escape_time(0.0, 0.0, 0.0, 0.0, 20) == INTERIOR
    assert escape_time(1.5, 0.0, 0.0, 0.0, 20) == 1
