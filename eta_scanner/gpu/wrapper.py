"""Thin layer over numba.cuda: device identity, limits and checked calls.

Every runtime call that can fail goes through device_call(), which turns
driver/runtime exceptions into DeviceError carrying the operation name and
the location that raised.
"""
import contextlib

import numpy as np
from numba import cuda
from numba.cuda.cudadrv.error import CudaSupportError, CudaDriverError

from ..config import NOT_FOUND
from ..errors import DeviceError


_RUNTIME_ERRORS = (CudaSupportError, CudaDriverError, RuntimeError, OSError)


@contextlib.contextmanager
def device_call(operation):
    try:
        yield
    except DeviceError:
        raise
    except _RUNTIME_ERRORS as e:
        raise DeviceError.from_exception(operation, e) from e


def is_available():
    """Check if a CUDA GPU is available."""
    try:
        return bool(cuda.is_available())
    except _RUNTIME_ERRORS:
        return False


def _device():
    if not is_available():
        raise DeviceError("device enumeration", "no CUDA device available")
    with device_call("device enumeration"):
        return cuda.get_current_device()


def get_device_name():
    name = _device().name
    if isinstance(name, bytes):
        name = name.decode('utf-8')
    return name


def get_compute_capability():
    """(major, minor) of the current device."""
    return tuple(_device().compute_capability)


def max_concurrent_threads():
    """Threads the device can keep resident at once (SMs x threads per SM)."""
    dev = _device()
    with device_call("device attribute query"):
        return dev.MULTIPROCESSOR_COUNT * dev.MAX_THREADS_PER_MULTI_PROCESSOR


def max_grid_threads(threads_per_block):
    dev = _device()
    with device_call("device attribute query"):
        return dev.MAX_GRID_DIM_X * threads_per_block


def to_device(arr):
    with device_call("device allocation"):
        return cuda.to_device(arr)


def new_register():
    """One-element uint64 device array holding the NOT_FOUND sentinel."""
    return to_device(np.array([NOT_FOUND], dtype=np.uint64))


def synchronize():
    with device_call("synchronization"):
        cuda.synchronize()


def read_register(register):
    """Barrier, then copy the register back to the host."""
    synchronize()
    with device_call("device-to-host copy"):
        return int(register.copy_to_host()[0])
