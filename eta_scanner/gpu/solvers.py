"""GPU solver: one CUDA thread per candidate index.

Same interface as cpu.solvers. Each thread evaluates a single eta and, on
a hit, folds it into a one-element device register with atomic min. The
register lives across all chunks; the host reads it only after a
synchronize() barrier.
"""
import math
import time

import numpy as np
from numba import cuda

from ..chunks import plan_chunks, count_chunks
from ..config import (NOT_FOUND, UINT64_MAX, ETA_SAFETY_CEILING,
                      NEWTON_STEPS, ETA_THREADS_PER_BLOCK)
from ..residues import QR_MODULI, QR_MASKS
from . import wrapper


# Device copies of verify.is_perfect_square, residues.passes_residue_filter
# and candidates.candidate_passes. The bodies must change together;
# tests/test_gpu.py runs these through py_func against the CPU versions.
@cuda.jit(device=True)
def _is_square_dev(v):
    one = np.uint64(1)
    two = np.uint64(2)
    if v < two:
        return True
    r = np.uint64(math.sqrt(float(v)))
    if r == np.uint64(0):
        r = one
    for _ in range(NEWTON_STEPS):
        r = (r + v // r) // two
    while r > v // r:
        r -= one
    while r + one <= v // (r + one):
        r += one
    return r * r == v


@cuda.jit(device=True)
def _candidate_passes_dev(eta, T, moduli, masks):
    one = np.uint64(1)
    two = np.uint64(2)
    if eta < one or eta > np.uint64(ETA_SAFETY_CEILING):
        return False
    d = two * eta - one
    d2 = d * d
    if d2 > np.uint64(UINT64_MAX) - T:
        return False
    v = T + d2
    for i in range(moduli.shape[0]):
        if ((masks[i] >> (v % moduli[i])) & one) != one:
            return False
    return _is_square_dev(v)


@cuda.jit
def _scan_kernel(T, start, count, moduli, masks, register):
    i = cuda.grid(1)
    if i >= count:
        return
    eta = start + np.uint64(i)
    if _candidate_passes_dev(eta, T, moduli, masks):
        cuda.atomic.min(register, 0, eta)


def gpu_chunk_size(threads_per_block=None):
    """Chunk size bounded by what the device can run concurrently."""
    if threads_per_block is None:
        threads_per_block = ETA_THREADS_PER_BLOCK
    return min(wrapper.max_concurrent_threads(),
               wrapper.max_grid_threads(threads_per_block))


class _DeviceTables:
    def __init__(self):
        self.moduli = wrapper.to_device(QR_MODULI)
        self.masks = wrapper.to_device(QR_MASKS)


def _launch(T, start, count, tables, register, threads_per_block):
    blocks = (count + threads_per_block - 1) // threads_per_block
    with wrapper.device_call("kernel launch"):
        _scan_kernel[blocks, threads_per_block](
            np.uint64(T), np.uint64(start), count,
            tables.moduli, tables.masks, register)


def scan_chunk(T, start, count, threads_per_block=None):
    """Evaluate one chunk [start, start + count) on the GPU."""
    if count < 1:
        raise ValueError(f"count must be positive, got {count}")
    if threads_per_block is None:
        threads_per_block = ETA_THREADS_PER_BLOCK
    tables = _DeviceTables()
    register = wrapper.new_register()
    _launch(T, start, count, tables, register, threads_per_block)
    return wrapper.read_register(register)


def gpu_search(T, n_max, chunk_size=None, early_exit=True, verbose=True,
               threads_per_block=None):
    """GPU version of cpu_search. Raises DeviceError on runtime failure.

    Returns
    -------
    dict with keys: eta, n_chunks, n_dispatched, n_evaluated, chunk_size,
                    elapsed, device, compute_capability
    """
    if threads_per_block is None:
        threads_per_block = ETA_THREADS_PER_BLOCK
    dev = wrapper.get_device_name()
    cc = wrapper.get_compute_capability()
    if chunk_size is None:
        chunk_size = gpu_chunk_size(threads_per_block)
    n_chunks = count_chunks(n_max, chunk_size)

    if verbose:
        print(f"GPU scan: T={T}, n_max={n_max:,}")
        print(f"  Device: {dev} (compute {cc[0]}.{cc[1]})")
        print(f"  Chunks: {n_chunks:,} x {chunk_size:,} "
              f"({threads_per_block} threads/block)")
        if n_max > ETA_SAFETY_CEILING:
            print(f"  Clamped to safety ceiling {ETA_SAFETY_CEILING:,}")

    t0 = time.time()
    tables = _DeviceTables()
    register = wrapper.new_register()
    n_dispatched = 0
    n_evaluated = 0

    for start, count in plan_chunks(n_max, chunk_size):
        _launch(T, start, count, tables, register, threads_per_block)
        n_dispatched += 1
        n_evaluated += count
        if early_exit:
            eta = wrapper.read_register(register)
            if eta != NOT_FOUND:
                break

    eta = wrapper.read_register(register)
    elapsed = time.time() - t0

    if verbose:
        print(f"  Completed in {elapsed:.3f}s "
              f"({n_dispatched:,}/{n_chunks:,} chunks)")

    return {
        'eta': eta,
        'n_chunks': n_chunks,
        'n_dispatched': n_dispatched,
        'n_evaluated': n_evaluated,
        'chunk_size': chunk_size,
        'elapsed': elapsed,
        'device': dev,
        'compute_capability': cc,
    }
