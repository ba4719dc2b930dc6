"""Quadratic-residue filter for candidate values.

A perfect square v satisfies v mod q in QR(q) for every modulus q, so a
candidate that lands on a non-residue for any small prime can be dropped
without computing a square root. The test is necessary, not sufficient:
survivors still go through exact verification.

Residue sets are stored as bitmasks (bit r set iff r = x^2 mod q for some
x), one uint64 per modulus, so a lookup is a shift and a mask.
"""
import numpy as np
import numba

from .config import SMALL_PRIMES


def quadratic_residues(q):
    """Sorted list of {x^2 mod q : 0 <= x < q}, including 0."""
    return sorted({(x * x) % q for x in range(q)})


def residue_mask(q):
    """Bitmask with bit r set iff r is a quadratic residue mod q."""
    if q < 2 or q > 64:
        raise ValueError(f"modulus must be in [2, 64], got {q}")
    mask = 0
    for r in quadratic_residues(q):
        mask |= 1 << r
    return mask


QR_MODULI = np.array(SMALL_PRIMES, dtype=np.uint64)
QR_MASKS = np.array([residue_mask(q) for q in SMALL_PRIMES], dtype=np.uint64)

_MASK_BY_MODULUS = {q: residue_mask(q) for q in SMALL_PRIMES}


def is_quadratic_residue(r, q):
    """Verdict for a single residue r = v mod q against the fixed table."""
    try:
        mask = _MASK_BY_MODULUS[q]
    except KeyError:
        raise ValueError(f"modulus {q} not in {SMALL_PRIMES}")
    return bool((mask >> (r % q)) & 1)


@numba.njit(cache=True)
def passes_residue_filter(v, moduli, masks):
    """True iff v mod q is a quadratic residue for every q in moduli.

    Short-circuits on the first failing modulus. v must be uint64; the
    reduction happens on the full 64-bit value.
    """
    one = np.uint64(1)
    for i in range(moduli.shape[0]):
        if ((masks[i] >> (v % moduli[i])) & one) != one:
            return False
    return True


def residue_filter(v):
    """Apply the fixed-prime filter to a Python int (0 <= v < 2^64)."""
    return passes_residue_filter(np.uint64(v), QR_MODULI, QR_MASKS)
