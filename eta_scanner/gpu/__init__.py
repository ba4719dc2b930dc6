"""CUDA acceleration for the eta scan.

Usage:
    from eta_scanner.gpu import is_available, gpu_search

    if is_available():
        stats = gpu_search(T=3, n_max=10)
"""
from .wrapper import (is_available, get_device_name, get_compute_capability,
                      max_concurrent_threads)
from .solvers import gpu_search, scan_chunk, gpu_chunk_size

__all__ = [
    'is_available',
    'get_device_name',
    'get_compute_capability',
    'max_concurrent_threads',
    'gpu_search',
    'scan_chunk',
    'gpu_chunk_size',
]
