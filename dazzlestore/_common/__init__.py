"""Common components with no I/O.

This internal package holds the pure parts of DazzleStore: the address
model, the JSON path engine and the error hierarchy. It should NOT be
imported directly by users; everything here is re-exported from
``dazzlestore`` and ``dazzlestore.aio``.

Important: This package must NEVER import from aio to avoid circular
dependencies.
"""

from .errors import (
    StoreError,
    CapabilityNotSupportedError,
    PathParseError,
    StructuralMismatchError,
    MissingAddressError,
    SuppressedWriteError,
    BackendError,
)
from .address import (
    ABSENT,
    is_absent,
    Existence,
    Address,
    Branch,
    Leaf,
    BranchOrLeaf,
)
from .json_path import Key, Index, PathPart, JsonPath, parse_path
from .json_traverse import (
    get_path_value,
    get_mutable_path_value,
    set_path_value,
    delete_path_value,
    insert_path_values,
    list_path_children,
    classify_path,
)

__all__ = [
    # Errors
    'StoreError',
    'CapabilityNotSupportedError',
    'PathParseError',
    'StructuralMismatchError',
    'MissingAddressError',
    'SuppressedWriteError',
    'BackendError',
    # Addresses
    'ABSENT',
    'is_absent',
    'Existence',
    'Address',
    'Branch',
    'Leaf',
    'BranchOrLeaf',
    # JSON paths
    'Key',
    'Index',
    'PathPart',
    'JsonPath',
    'parse_path',
    'get_path_value',
    'get_mutable_path_value',
    'set_path_value',
    'delete_path_value',
    'insert_path_values',
    'list_path_children',
    'classify_path',
]
