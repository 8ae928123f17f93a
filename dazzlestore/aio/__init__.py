"""Asynchronous implementation of DazzleStore.

This package contains the async stores, locations, the tree walker and the
rate limiter. All operations are coroutines or async iterators so stores
backed by disks or networks never block the event loop.
"""

# Core abstractions
from .core import (
    Capability,
    AddressBinding,
    AsyncStore,
    AsyncReadWriteLock,
    Location,
    AsyncTreeWalker,
)

# Rate limiting
from .ratelimiter import RateLimiter

# Stores
from .adapters import (
    CellAddress,
    MemoryCellStore,
    RelativePath,
    FileSystemStore,
    JsonStore,
    json_value_store,
    json_file_store,
    ItemId,
    IndexedVecStore,
    AirtableError,
    AirtablePath,
    AirtableEntry,
    FilterByFormula,
    AirtableStore,
    FilterAddressesWrapper,
)

# High-level API
from .api import (
    collect,
    walk_tree,
    walk_with_depth,
    get_tree_paths,
    count_nodes,
    get_leaf_addresses,
    collect_leaf_values,
    filter_store,
    ignore_keys,
)

__all__ = [
    # Core abstractions
    'Capability',
    'AddressBinding',
    'AsyncStore',
    'AsyncReadWriteLock',
    'Location',
    'AsyncTreeWalker',
    'RateLimiter',
    # Stores
    'CellAddress',
    'MemoryCellStore',
    'RelativePath',
    'FileSystemStore',
    'JsonStore',
    'json_value_store',
    'json_file_store',
    'ItemId',
    'IndexedVecStore',
    'AirtableError',
    'AirtablePath',
    'AirtableEntry',
    'FilterByFormula',
    'AirtableStore',
    # Wrappers
    'FilterAddressesWrapper',
    'filter_store',
    'ignore_keys',
    # High-level API
    'collect',
    'walk_tree',
    'walk_with_depth',
    'get_tree_paths',
    'count_nodes',
    'get_leaf_addresses',
    'collect_leaf_values',
]
