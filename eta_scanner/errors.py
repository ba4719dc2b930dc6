"""Error types for the eta scanner."""
import traceback


class DeviceError(RuntimeError):
    """Hardware/runtime failure (device enumeration, allocation, launch, sync).

    Carries the failing operation and the source location where the
    underlying runtime raised. Never retried.
    """

    def __init__(self, operation, detail, location=None):
        self.operation = operation
        self.detail = str(detail)
        self.location = location
        msg = f"{operation} failed: {self.detail}"
        if location:
            msg += f" (at {location})"
        super().__init__(msg)

    @classmethod
    def from_exception(cls, operation, exc):
        location = None
        if exc.__traceback__ is not None:
            frame = traceback.extract_tb(exc.__traceback__)[-1]
            location = f"{frame.filename}:{frame.lineno}"
        return cls(operation, f"{type(exc).__name__}: {exc}", location)
