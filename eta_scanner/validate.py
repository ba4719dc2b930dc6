"""Exhaustive validation of the parallel backends.

reference_search() is a plain sequential scan with math.isqrt and no
filter. cross_validate() runs a backend over a grid of (T, n_max) cases
and chunk sizes and requires it to agree with the reference on every one.
ZERO mismatches allowed.
"""
import math
import time

from .chunks import check_params
from .config import NOT_FOUND, UINT64_MAX, ETA_SAFETY_CEILING
from .core import search


def reference_search(T, n_max):
    """Sequential scan: smallest eta with T + (2*eta-1)^2 square, or NOT_FOUND."""
    T, n_max = check_params(T, n_max)
    for eta in range(1, min(n_max, ETA_SAFETY_CEILING) + 1):
        d = 2 * eta - 1
        v = T + d * d
        if v > UINT64_MAX:
            continue
        r = math.isqrt(v)
        if r * r == v:
            return eta
    return NOT_FOUND


def default_cases():
    """Small (T, n_max) grid: hits, misses and both residue classes."""
    cases = [(3, 10), (4, 50), (7, 100), (15, 100), (0, 5), (1, 5)]
    for T in range(3, 400, 4):
        cases.append((T, 64))
    # 4c + 3 with c large-ish: the first hit sits deep in the range
    cases.append((4 * 997 + 3, 1200))
    return cases


def cross_validate(cases=None, backend="cpu", chunk_sizes=(1, 7, 64, None),
                   verbose=True):
    """Compare a backend against reference_search on every case and chunking.

    Returns
    -------
    dict with keys: passed, total, mismatches, time_sec
    """
    if cases is None:
        cases = default_cases()

    total = 0
    mismatches = []
    t0 = time.time()

    for T, n_max in cases:
        expected = reference_search(T, n_max)
        for chunk_size in chunk_sizes:
            for early_exit in (True, False):
                result = search(T, n_max, backend=backend,
                                chunk_size=chunk_size,
                                early_exit=early_exit).unwrap()
                total += 1
                if result.eta != expected:
                    mismatches.append({
                        'T': T, 'n_max': n_max,
                        'chunk_size': chunk_size,
                        'early_exit': early_exit,
                        'expected': expected, 'got': result.eta,
                    })

    elapsed = time.time() - t0
    result = {
        'passed': not mismatches,
        'total': total,
        'mismatches': mismatches,
        'time_sec': elapsed,
    }

    if verbose:
        status = "PASS" if result['passed'] else "FAIL"
        print(f"  [{backend}] {status} ({total:,} runs, "
              f"{len(mismatches)} mismatches, {elapsed:.1f}s)")
        for m in mismatches[:5]:
            print(f"    T={m['T']} n_max={m['n_max']} chunk={m['chunk_size']}: "
                  f"expected {m['expected']}, got {m['got']}")
    return result
