"""Per-index candidate evaluation shared by the CPU kernels.

eta -> d = 2*eta - 1 -> candidate = T + d^2, then residue filter, then
exact verification. Indices past the safety ceiling, or whose d^2 would
wrap when added to T, are never evaluated.
"""
import numpy as np
import numba

from .config import ETA_SAFETY_CEILING, UINT64_MAX
from .residues import passes_residue_filter, QR_MODULI, QR_MASKS
from .verify import is_perfect_square


@numba.njit(cache=True)
def candidate_passes(eta, T, moduli, masks):
    """True iff T + (2*eta - 1)^2 is a perfect square within uint64 range."""
    one = np.uint64(1)
    two = np.uint64(2)
    if eta < one or eta > np.uint64(ETA_SAFETY_CEILING):
        return False
    d = two * eta - one
    d2 = d * d
    if d2 > np.uint64(UINT64_MAX) - T:
        return False
    v = T + d2
    if not passes_residue_filter(v, moduli, masks):
        return False
    return is_perfect_square(v)


def evaluate(T, eta):
    """candidate_passes for Python ints."""
    return bool(candidate_passes(np.uint64(eta), np.uint64(T), QR_MODULI, QR_MASKS))


def gap_for(eta):
    """|p - q| = 4*eta - 2 for a found eta."""
    return 4 * eta - 2


def effective_limit(n_max):
    """Last index that is actually evaluated for a requested n_max."""
    return min(n_max, ETA_SAFETY_CEILING)
