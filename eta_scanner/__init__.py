"""Brute-force search for eta with T + (2*eta - 1)^2 a perfect square.

Usage:
    from eta_scanner import search

    result = search(T=3, n_max=10)
    if result.found:
        print(result.eta, result.gap)
"""
from .config import NOT_FOUND, ETA_SAFETY_CEILING, SMALL_PRIMES
from .core import search, Search, SearchResult, SearchState, resolve_backend
from .errors import DeviceError
from .residues import is_quadratic_residue, quadratic_residues, residue_filter
from .verify import perfect_square, integer_sqrt

__all__ = [
    'NOT_FOUND',
    'ETA_SAFETY_CEILING',
    'SMALL_PRIMES',
    'search',
    'Search',
    'SearchResult',
    'SearchState',
    'resolve_backend',
    'DeviceError',
    'is_quadratic_residue',
    'quadratic_residues',
    'residue_filter',
    'perfect_square',
    'integer_sqrt',
]
