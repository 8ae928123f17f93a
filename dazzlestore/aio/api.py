"""High-level async API for DazzleStore.

This module provides simple, user-friendly async functions for common
store operations: walking a store's tree, collecting addresses and values,
and wrapping stores with filters.
"""

from contextlib import aclosing
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Tuple

from .._common.address import ABSENT, Address, BranchOrLeaf
from .core import AsyncStore, AsyncTreeWalker, Location
from .adapters.filtering import FilterAddressesWrapper, ignore_keys


async def collect(stream: AsyncIterator[Any]) -> List[Any]:
    """Drain an async iterator into a list.

    Args:
        stream: Any async iterator, e.g. ``store.list(address)``

    Returns:
        Every item, in order
    """
    return [item async for item in stream]


async def walk_tree(
    start: Any,
    max_depth: Optional[int] = None
) -> AsyncIterator[BranchOrLeaf]:
    """Walk a store depth-first, pre-order.

    Args:
        start: Location to walk from, or a store to walk from its root
        max_depth: Maximum depth to expand (1 = children only)

    Yields:
        Branch or Leaf for each address below ``start``
    """
    async with aclosing(AsyncTreeWalker(max_depth=max_depth).walk(start)) as items:
        async for item in items:
            yield item


async def walk_with_depth(
    start: Any,
    max_depth: Optional[int] = None
) -> AsyncIterator[Tuple[BranchOrLeaf, int]]:
    """Walk a store yielding ``(item, depth)`` tuples.

    Example:
        >>> async for item, depth in walk_with_depth(store):
        ...     print(f"{'  ' * depth}{item.address.own_name()}")
    """
    async with aclosing(AsyncTreeWalker(max_depth=max_depth).walk_with_depth(start)) as pairs:
        async for item, depth in pairs:
            yield item, depth


async def get_tree_paths(
    start: Any,
    max_depth: Optional[int] = None
) -> List[str]:
    """Get the string form of every address below ``start``.

    Args:
        start: Location or store
        max_depth: Maximum depth to traverse

    Returns:
        Address strings in walk order
    """
    return [str(item.address) async for item in walk_tree(start, max_depth)]


async def count_nodes(
    start: Any,
    max_depth: Optional[int] = None
) -> Dict[str, int]:
    """Count branches and leaves below ``start``.

    Returns:
        Dictionary with ``branches``, ``leaves`` and ``total`` counts
    """
    counts = {'branches': 0, 'leaves': 0, 'total': 0}
    async for item in walk_tree(start, max_depth):
        counts['branches' if item.is_branch else 'leaves'] += 1
        counts['total'] += 1
    return counts


async def get_leaf_addresses(
    start: Any,
    max_depth: Optional[int] = None
) -> List[Address]:
    """Get the addresses of every leaf below ``start``."""
    return [item.address async for item in walk_tree(start, max_depth) if item.is_leaf]


async def collect_leaf_values(
    start: Any,
    max_depth: Optional[int] = None,
    value_type: Optional[Any] = None
) -> Dict[str, Any]:
    """Read every leaf below ``start``.

    Leaves that vanish between the walk and the read are skipped.

    Returns:
        Mapping of address string to value
    """
    location = start if isinstance(start, Location) else start.root()
    values = {}
    async for item in walk_tree(location, max_depth):
        if item.is_leaf:
            value = await location.store.read(item.address, value_type)
            if value is not ABSENT:
                values[str(item.address)] = value
    return values


def filter_store(
    store: AsyncStore,
    predicate: Callable[[Address], bool],
    track_filtered: bool = True
) -> FilterAddressesWrapper:
    """Wrap ``store`` so that addresses failing ``predicate`` are hidden.

    Args:
        store: Store to wrap
        predicate: Returns True for addresses to keep
        track_filtered: Whether to remember addresses dropped from listings

    Returns:
        FilterAddressesWrapper around ``store``
    """
    return FilterAddressesWrapper(store, predicate, track_filtered)


__all__ = [
    'collect',
    'walk_tree',
    'walk_with_depth',
    'get_tree_paths',
    'count_nodes',
    'get_leaf_addresses',
    'collect_leaf_values',
    'filter_store',
    'ignore_keys',
]
