"""CPU solver: chunked scan with Numba parallel workers.

Each chunk is split into blocks; prange hands blocks to worker threads,
and each worker walks its block in ascending order, so the first passing
index it meets is the block minimum. Workers only write their own slot of
block_mins, and the chunk result is the min over that array once the
parallel region has retired every worker.
"""
import math
import platform
import time

import numpy as np
import numba

from ..candidates import candidate_passes
from ..chunks import plan_chunks, count_chunks, MinRegister
from ..config import NOT_FOUND, ETA_CPU_BLOCK, ETA_SAFETY_CEILING
from ..residues import QR_MODULI, QR_MASKS


@numba.njit(parallel=True, cache=True)
def _scan_chunk_jit(T, start, count, block, moduli, masks):
    """Minimum eta in [start, start + count) passing the check, or NOT_FOUND."""
    n_blocks = (count + block - 1) // block
    block_mins = np.empty(n_blocks, dtype=np.uint64)
    for b in numba.prange(n_blocks):
        local_min = np.uint64(NOT_FOUND)
        lo = b * block
        hi = min(lo + block, count)
        for i in range(lo, hi):
            eta = start + np.uint64(i)
            if candidate_passes(eta, T, moduli, masks):
                local_min = eta
                break
        block_mins[b] = local_min
    return block_mins.min()


def get_device_name():
    cpu = platform.processor() or platform.machine() or "CPU"
    return f"{cpu} ({numba.get_num_threads()} threads)"


def cpu_chunk_size(block=None):
    """Indices the thread pool can have in flight at once."""
    if block is None:
        block = ETA_CPU_BLOCK
    return numba.get_num_threads() * block


def _block_for(count):
    per_thread = math.ceil(count / numba.get_num_threads())
    return max(1, min(ETA_CPU_BLOCK, per_thread))


def scan_chunk(T, start, count):
    """Evaluate one chunk [start, start + count). Returns an int (or NOT_FOUND)."""
    if count < 1:
        raise ValueError(f"count must be positive, got {count}")
    return int(_scan_chunk_jit(np.uint64(T), np.uint64(start), count,
                               _block_for(count), QR_MODULI, QR_MASKS))


def cpu_search(T, n_max, chunk_size=None, early_exit=True, verbose=True):
    """Scan [1, n_max] chunk by chunk on the CPU.

    Parameters
    ----------
    T : int
        Target value (uint64).
    n_max : int
        Inclusive upper bound on eta; clamped to the safety ceiling.
    chunk_size : int or None
        Indices per chunk. None derives it from the thread count.
    early_exit : bool
        Stop after the first chunk that produces a hit. Chunks run in
        ascending order, so later chunks cannot hold a smaller eta.

    Returns
    -------
    dict with keys: eta, n_chunks, n_dispatched, n_evaluated, chunk_size,
                    elapsed, device
    """
    if chunk_size is None:
        chunk_size = cpu_chunk_size()
    n_chunks = count_chunks(n_max, chunk_size)
    dev = get_device_name()

    if verbose:
        print(f"CPU scan: T={T}, n_max={n_max:,}")
        print(f"  Device: {dev}")
        print(f"  Chunks: {n_chunks:,} x {chunk_size:,}")
        if n_max > ETA_SAFETY_CEILING:
            print(f"  Clamped to safety ceiling {ETA_SAFETY_CEILING:,}")

    register = MinRegister()
    n_dispatched = 0
    n_evaluated = 0
    t0 = time.time()

    for start, count in plan_chunks(n_max, chunk_size):
        register.offer(scan_chunk(T, start, count))
        n_dispatched += 1
        n_evaluated += count
        if early_exit and register.found:
            break

    elapsed = time.time() - t0

    if verbose:
        print(f"  Completed in {elapsed:.3f}s "
              f"({n_dispatched:,}/{n_chunks:,} chunks)")

    return {
        'eta': register.value,
        'n_chunks': n_chunks,
        'n_dispatched': n_dispatched,
        'n_evaluated': n_evaluated,
        'chunk_size': chunk_size,
        'elapsed': elapsed,
        'device': dev,
    }
