"""Configuration constants and .env loading for the eta scanner."""
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(PROJECT_ROOT / ".env")

# Identity
PROGRAM_NAME = "eta-scan"
PROGRAM_VERSION = "1.0.0"
AUTHOR = "Siarhei Tabalevich <xabpaxabp@gmail.com>"

# 64-bit bounds
UINT64_MAX = 2 ** 64 - 1
NOT_FOUND = UINT64_MAX  # sentinel: no eta passed

# Largest eta ever evaluated. d = 2*eta - 1 = 3_039_999_999 and d^2 < 2^64.
ETA_SAFETY_CEILING = 1_520_000_000

# Residue filter moduli
SMALL_PRIMES = (3, 5, 7, 11, 13, 17, 19, 23, 29)

# Newton refinements after the float seed in isqrt
NEWTON_STEPS = 2

BACKENDS = ("auto", "cpu", "gpu")


def _env_int(name, default):
    raw = os.environ.get(name, "")
    if not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


ETA_BACKEND = os.environ.get("ETA_BACKEND", "auto").strip().lower() or "auto"
ETA_CHUNK_SIZE = _env_int("ETA_CHUNK_SIZE", 0)              # 0 = derive from hardware
ETA_THREADS_PER_BLOCK = _env_int("ETA_THREADS_PER_BLOCK", 256)
ETA_CPU_BLOCK = _env_int("ETA_CPU_BLOCK", 65536)            # indices per CPU worker block
