"""CPU backend: Numba prange evaluation of candidate chunks."""
from .solvers import scan_chunk, cpu_search, cpu_chunk_size, get_device_name

__all__ = [
    'scan_chunk',
    'cpu_search',
    'cpu_chunk_size',
    'get_device_name',
]
