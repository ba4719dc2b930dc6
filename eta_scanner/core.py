"""Search entry point: backend selection, run state and result.

Finds the smallest eta in [1, n_max] such that T + (2*eta - 1)^2 is a
perfect square, for a fixed target T (meaningful for T = 3 mod 4).

Pipeline per candidate index (see candidates.py):
  1. eta past the safety ceiling, or T + d^2 past 2^64 - 1: skipped.
  2. Residue filter over {3, 5, ..., 29}: cheap necessary condition.
  3. Exact integer square root: decides.

Dispatch:
  [1, n_max] is cut into contiguous chunks sized to the backend's
  concurrency, each chunk is evaluated in parallel, and the minimum
  passing eta is folded into a single register. min() is order
  independent, so the answer matches a sequential scan exactly.

Runtime failures do not escape search(): they are captured in
SearchResult.error and the result carries no eta. Callers that want the
failure to be fatal call unwrap().
"""
import enum
from dataclasses import dataclass
from typing import Optional, Tuple

from .candidates import gap_for
from .chunks import check_params
from .config import NOT_FOUND, BACKENDS, ETA_BACKEND, ETA_CHUNK_SIZE
from .errors import DeviceError
from .cpu import solvers as cpu_solvers


class SearchState(enum.Enum):
    INITIALIZED = "initialized"
    DISPATCHING = "dispatching"
    SYNCHRONIZED = "synchronized"
    FINALIZED = "finalized"
    FAILED = "failed"


@dataclass(frozen=True)
class SearchResult:
    T: int
    n_max: int
    eta: int = NOT_FOUND
    backend: str = "cpu"
    device: str = ""
    compute_capability: Optional[Tuple[int, int]] = None
    elapsed: float = 0.0
    n_chunks: int = 0
    n_dispatched: int = 0
    n_evaluated: int = 0
    chunk_size: int = 0
    error: Optional[DeviceError] = None

    @property
    def found(self):
        return self.error is None and self.eta != NOT_FOUND

    @property
    def gap(self):
        """|p - q| = 4*eta - 2, or None when nothing was found."""
        return gap_for(self.eta) if self.found else None

    @property
    def throughput(self):
        """Candidates per second, or None when the run was too short to time."""
        if self.elapsed <= 1e-3:
            return None
        return self.n_evaluated / self.elapsed

    def unwrap(self):
        if self.error is not None:
            raise self.error
        return self


def gpu_available():
    # numba.cuda import is deferred so CPU-only runs never touch the driver
    try:
        from .gpu import wrapper
    except ImportError:
        return False
    return wrapper.is_available()


def resolve_backend(backend=None):
    """Map 'auto' (or None) to a concrete backend name."""
    if backend is None:
        backend = ETA_BACKEND
    backend = backend.lower()
    if backend not in BACKENDS:
        raise ValueError(f"backend must be one of {BACKENDS}, got {backend!r}")
    if backend == "auto":
        return "gpu" if gpu_available() else "cpu"
    return backend


class Search:
    """One search run: Initialized -> Dispatching -> Synchronized -> Finalized.

    The register value is only exposed once the run is Finalized.
    """

    def __init__(self, T, n_max, backend=None, chunk_size=None,
                 early_exit=True, verbose=False):
        self.T, self.n_max = check_params(T, n_max)
        if chunk_size is None and ETA_CHUNK_SIZE > 0:
            chunk_size = ETA_CHUNK_SIZE
        if chunk_size is not None and chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.backend = resolve_backend(backend)
        self.chunk_size = chunk_size
        self.early_exit = early_exit
        self.verbose = verbose
        self.state = SearchState.INITIALIZED
        self.result = None

    def _dispatch(self):
        if self.backend == "gpu":
            if not gpu_available():
                raise DeviceError("device enumeration", "no CUDA device available")
            from .gpu import solvers as gpu_solvers
            return gpu_solvers.gpu_search(
                self.T, self.n_max, chunk_size=self.chunk_size,
                early_exit=self.early_exit, verbose=self.verbose)
        return cpu_solvers.cpu_search(
            self.T, self.n_max, chunk_size=self.chunk_size,
            early_exit=self.early_exit, verbose=self.verbose)

    def run(self):
        if self.state is not SearchState.INITIALIZED:
            raise RuntimeError(f"search already {self.state.value}")
        self.state = SearchState.DISPATCHING
        try:
            stats = self._dispatch()
        except DeviceError as e:
            self.state = SearchState.FAILED
            self.result = SearchResult(T=self.T, n_max=self.n_max,
                                       backend=self.backend, error=e)
            return self.result
        # solvers return only after their final barrier
        self.state = SearchState.SYNCHRONIZED
        self.result = SearchResult(
            T=self.T,
            n_max=self.n_max,
            eta=stats['eta'],
            backend=self.backend,
            device=stats['device'],
            compute_capability=stats.get('compute_capability'),
            elapsed=stats['elapsed'],
            n_chunks=stats['n_chunks'],
            n_dispatched=stats['n_dispatched'],
            n_evaluated=stats['n_evaluated'],
            chunk_size=stats['chunk_size'],
        )
        self.state = SearchState.FINALIZED
        return self.result


def search(T, n_max, backend=None, chunk_size=None, early_exit=True,
           verbose=False):
    """Smallest eta in [1, n_max] with T + (2*eta - 1)^2 a perfect square.

    Parameters
    ----------
    T : int
        Target, 0 <= T < 2^64.
    n_max : int
        Inclusive bound on eta, >= 1. Indices past ETA_SAFETY_CEILING are
        never evaluated.
    backend : {'auto', 'cpu', 'gpu'} or None
        None reads ETA_BACKEND from the environment.
    chunk_size : int or None
        Indices per dispatched chunk. None derives it from the hardware.
    early_exit : bool
        Skip the remaining chunks once one produced a hit. Never changes
        the answer.

    Returns
    -------
    SearchResult
    """
    return Search(T, n_max, backend=backend, chunk_size=chunk_size,
                  early_exit=early_exit, verbose=verbose).run()
