"""DazzleStore - Addressable Store Library.

DazzleStore gives heterogeneous backing stores (in-memory values, JSON
documents, filesystems, paginated REST APIs) one model for naming,
composing and traversing nested locations:

    from dazzlestore.aio import json_value_store

    store = json_value_store({"a": {"b": 1}})
    await store.path("a.b").read()          # 1
    await store.path("a.c[0]").write("x")   # creates c as a list
    async for item in store.root().walk_tree_recursively():
        print(item)

The address model and JSON path engine have no I/O and are importable
from the package root.
"""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

from ._common import (
    StoreError,
    CapabilityNotSupportedError,
    PathParseError,
    StructuralMismatchError,
    MissingAddressError,
    SuppressedWriteError,
    BackendError,
    ABSENT,
    is_absent,
    Existence,
    Address,
    Branch,
    Leaf,
    BranchOrLeaf,
    Key,
    Index,
    PathPart,
    JsonPath,
    parse_path,
)
from . import aio

__all__ = [
    "__version__",
    "aio",
    # Errors
    "StoreError",
    "CapabilityNotSupportedError",
    "PathParseError",
    "StructuralMismatchError",
    "MissingAddressError",
    "SuppressedWriteError",
    "BackendError",
    # Addresses
    "ABSENT",
    "is_absent",
    "Existence",
    "Address",
    "Branch",
    "Leaf",
    "BranchOrLeaf",
    "Key",
    "Index",
    "PathPart",
    "JsonPath",
    "parse_path",
]
