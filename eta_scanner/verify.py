"""Exact perfect-square test on 64-bit unsigned integers.

The float64 square root is only a seed: it can be off by one or more for
values above 2^52. A fixed number of Newton steps pulls the seed close,
and the integer correction afterwards makes the result the exact floor,
so no floating-point error can reach the verdict.
"""
import math

import numpy as np
import numba

from .config import NEWTON_STEPS


@numba.njit(cache=True)
def isqrt_u64(v):
    """floor(sqrt(v)) for a uint64 v."""
    one = np.uint64(1)
    two = np.uint64(2)
    if v < two:
        return v
    r = np.uint64(math.sqrt(float(v)))
    if r == np.uint64(0):
        r = one
    for _ in range(NEWTON_STEPS):
        r = (r + v // r) // two
    # Division keeps the comparisons inside 64 bits.
    while r > v // r:
        r -= one
    while r + one <= v // (r + one):
        r += one
    return r


@numba.njit(cache=True)
def is_perfect_square(v):
    r = isqrt_u64(v)
    return r * r == v


def perfect_square(v):
    """is_perfect_square for a Python int (0 <= v < 2^64)."""
    return bool(is_perfect_square(np.uint64(v)))


def integer_sqrt(v):
    return int(isqrt_u64(np.uint64(v)))
