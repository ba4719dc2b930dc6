"""Search parameters, chunk planning and the global minimum register."""
from .candidates import effective_limit
from .config import UINT64_MAX, NOT_FOUND


def check_params(T, n_max):
    """Validate (T, n_max) as uint64 values with n_max >= 1."""
    T = int(T)
    n_max = int(n_max)
    if not 0 <= T <= UINT64_MAX:
        raise ValueError(f"T must fit in 64 unsigned bits, got {T}")
    if not 1 <= n_max <= UINT64_MAX:
        raise ValueError(f"n_max must be in [1, 2^64 - 1], got {n_max}")
    return T, n_max


def congruence_ok(T):
    """T mod 4 == 3 is the class the search is meaningful for."""
    return T % 4 == 3


def plan_chunks(n_max, chunk_size, start=1):
    """Lazily yield contiguous (start, count) chunks over [start, min(n_max, ceiling)].

    Indices past the safety ceiling are never planned, whatever n_max is.
    Chunks are produced one at a time, so stopping early costs nothing.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    return _iter_chunks(effective_limit(n_max), chunk_size, start)


def _iter_chunks(last, chunk_size, lo):
    while lo <= last:
        count = min(chunk_size, last - lo + 1)
        yield lo, count
        lo += count


def count_chunks(n_max, chunk_size, start=1):
    """Number of chunks plan_chunks() would yield."""
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    span = effective_limit(n_max) - start + 1
    if span <= 0:
        return 0
    return (span + chunk_size - 1) // chunk_size


class MinRegister:
    """Monotonically decreasing minimum, starting at the NOT_FOUND sentinel.

    min() is commutative and associative, so the order in which chunk or
    worker results are offered does not affect the final value.
    """

    def __init__(self):
        self.value = NOT_FOUND

    def offer(self, eta):
        eta = int(eta)
        if eta < self.value:
            self.value = eta
        return self.value

    @property
    def found(self):
        return self.value != NOT_FOUND
