"""Exception hierarchy for DazzleStore.

Absence is never an error: reads return ``ABSENT`` instead. Everything
below is raised at the point of failure and propagated unchanged; the first
error halts the current operation.
"""

from typing import Any, Optional


SNIPPET_LENGTH = 80


def snippet(value: Any, limit: int = SNIPPET_LENGTH) -> str:
    """Short repr of a value for diagnostics."""
    text = repr(value)
    if len(text) > limit:
        return text[:limit - 3] + "..."
    return text


class StoreError(Exception):
    """Base class for all errors raised by DazzleStore."""
    pass


class CapabilityNotSupportedError(StoreError):
    """Raised when a store cannot perform an operation for an address kind."""
    pass


class PathParseError(StoreError, ValueError):
    """Raised when a path string is malformed.

    Attributes:
        path: The full string being parsed
        chunk: The dot-separated chunk that failed
    """

    def __init__(self, message: str, path: str = "", chunk: Optional[str] = None):
        self.path = path
        self.chunk = chunk
        if chunk is not None:
            message = f"{message} in chunk {chunk!r} of path {path!r}"
        super().__init__(message)


class StructuralMismatchError(StoreError, TypeError):
    """Raised when a path segment does not fit the container it meets.

    A ``Key`` applied to a non-object, an ``Index`` applied to a non-array,
    or listing a scalar.

    Attributes:
        path: String form of the path being traversed
        part: String form of the offending segment
        snippet: Truncated repr of the conflicting value
    """

    def __init__(self, message: str, path: str = "", part: str = "", value: Any = None):
        self.path = path
        self.part = part
        self.snippet = snippet(value)
        super().__init__(f"{message} at {part or '<root>'} of {path or '<root>'}: {self.snippet}")


class MissingAddressError(StoreError, LookupError):
    """Raised when listing or classifying an address that holds nothing."""
    pass


class SuppressedWriteError(StoreError, PermissionError):
    """Raised when writing to an address hidden by a filter wrapper."""

    def __init__(self, address: Any):
        self.address = address
        super().__init__(f"Write to suppressed location: {address!r}")


class BackendError(StoreError):
    """Raised by a backend for failures it detects itself."""
    pass
