"""Command-line entry point.

Usage:
    eta-scan T n_max [--backend {auto,cpu,gpu}] [--chunk-size N] [--no-early-exit]
    python -m eta_scanner T n_max

Exit codes:
    0  search completed (found or not)
    1  usage error (bad arguments, n_max == 0)
    2  hardware/runtime failure
"""
import argparse
import sys
from datetime import datetime

from .chunks import congruence_ok
from .config import (PROGRAM_NAME, PROGRAM_VERSION, AUTHOR, UINT64_MAX,
                     BACKENDS, ETA_SAFETY_CEILING)
from .core import search
from .errors import DeviceError


def log(msg):
    """Timestamped, flushed log line."""
    ts = datetime.now().strftime("%H:%M:%S")
    print(f"[{ts}] {msg}", flush=True)


def fmt_count(n):
    return f"{n:,}"


class _Parser(argparse.ArgumentParser):
    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _uint64(text):
    try:
        value = int(text, 10)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a decimal integer: {text!r}")
    if not 0 <= value <= UINT64_MAX:
        raise argparse.ArgumentTypeError(f"out of unsigned 64-bit range: {text}")
    return value


def build_parser():
    parser = _Parser(
        prog=PROGRAM_NAME,
        description='Find the smallest eta with T + (2*eta - 1)^2 a perfect square.')
    parser.add_argument('T', type=_uint64,
                        help='Target value (unsigned 64-bit, expected T mod 4 == 3)')
    parser.add_argument('n_max', type=_uint64,
                        help='Inclusive upper bound on eta (>= 1)')
    parser.add_argument('--backend', choices=BACKENDS, default=None,
                        help='Compute backend (default: ETA_BACKEND or auto)')
    parser.add_argument('--chunk-size', type=int, default=None,
                        help='Indices per chunk (default: derived from hardware)')
    parser.add_argument('--no-early-exit', action='store_true',
                        help='Dispatch every chunk even after a hit')
    parser.add_argument('--version', action='version',
                        version=f'{PROGRAM_NAME} {PROGRAM_VERSION} by {AUTHOR}')
    return parser


def _print_result(result):
    log("")
    if result.compute_capability is not None:
        cc = result.compute_capability
        log(f"Device: {result.device} (compute capability {cc[0]}.{cc[1]})")
    else:
        log(f"Device: {result.device}")
    log(f"Elapsed: {result.elapsed:.3f}s "
        f"({fmt_count(result.n_dispatched)}/{fmt_count(result.n_chunks)} chunks)")
    if result.throughput is not None:
        log(f"Throughput: {result.throughput:,.0f} candidates/s")
    log("=" * 64)
    if result.found:
        log(f"FOUND: eta = {result.eta}")
        log(f"  |p - q| = 4*eta - 2 = {result.gap}")
    else:
        log("NOT FOUND: no eta found in range")
    log("=" * 64)


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.n_max == 0:
        parser.error("n_max must be >= 1")
    if args.chunk_size is not None and args.chunk_size < 1:
        parser.error("--chunk-size must be >= 1")

    T, n_max = args.T, args.n_max

    log("=" * 64)
    log(f"{PROGRAM_NAME} {PROGRAM_VERSION}")
    log("=" * 64)
    log(f"  T        = {T}")
    log(f"  T mod 4  = {T % 4}")
    log(f"  n_max    = {fmt_count(n_max)}")
    if not congruence_ok(T):
        log("  WARNING: T mod 4 != 3, the result may not be meaningful")
    if n_max > ETA_SAFETY_CEILING:
        log(f"  NOTE: eta is capped at the 64-bit safety ceiling "
            f"{fmt_count(ETA_SAFETY_CEILING)}")

    result = search(T, n_max, backend=args.backend, chunk_size=args.chunk_size,
                    early_exit=not args.no_early_exit)
    try:
        result.unwrap()
    except DeviceError as e:
        print(f"FATAL: {e}", file=sys.stderr, flush=True)
        sys.exit(2)

    _print_result(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
