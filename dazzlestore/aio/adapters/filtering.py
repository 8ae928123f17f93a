"""
Filtering wrapper for stores.

This wrapper decorates another store and hides every address that fails a
predicate: reads of hidden addresses come back ABSENT, writes to them are
rejected, and listings drop them. It also tracks what was filtered so tests
and callers can tell "not there" apart from "hidden".
"""

import logging
from contextlib import aclosing
from typing import Any, AsyncIterator, Callable, List, Union

from ..._common.address import ABSENT, Address, BranchOrLeaf, Existence
from ..._common.errors import SuppressedWriteError
from ..core.capabilities import AddressBinding
from ..core.store import AsyncStore, ChildEntry


logger = logging.getLogger(__name__)


class FilterAddressesWrapper(AsyncStore):
    """
    Store that filters addresses of an underlying store.

    The wrapper has the same capability registry as the store it wraps and
    the predicate sees full addresses of that store.

    Classification (``branch_or_leaf``) is not filtered: a hidden branch
    can still be classified by direct address even though no listing shows
    it.

    Inserts into a visible container still store every item, but new
    children whose addresses fail the predicate are not reported, the same
    as in listings.

    Attributes:
        store: The wrapped store
        predicate: Callable returning True to keep an address
        track_filtered: Whether to track addresses dropped from listings
        filtered_paths: Set of string forms of dropped addresses
    """

    def __init__(
        self,
        store: AsyncStore,
        predicate: Callable[[Address], bool],
        track_filtered: bool = True
    ):
        """
        Initialize the filtering wrapper.

        Args:
            store: The store to wrap
            predicate: Callable(address) -> bool
                       Returns True to keep the address, False to hide it
            track_filtered: Whether to track filtered addresses for queries
                            Set to False for memory efficiency with heavily filtered trees
        """
        self.store = store
        self.predicate = predicate
        self.track_filtered = track_filtered
        self.filtered_paths = set() if track_filtered else None
        self.address_type = store.address_type
        super().__init__()

    def _registry(self):
        return self.store._registry()

    def unwrap(self) -> AsyncStore:
        """Return the wrapped store."""
        return self.store

    def is_visible(self, address: Address) -> bool:
        return bool(self.predicate(address))

    def _track(self, address: Address):
        logger.debug("Filtered out %s", address)
        if self.track_filtered:
            self.filtered_paths.add(str(address))

    async def _filtered(self, stream: AsyncIterator[ChildEntry]) -> AsyncIterator[ChildEntry]:
        async with aclosing(stream):
            async for part, child in stream:
                if self.is_visible(child):
                    yield part, child
                else:
                    self._track(child)

    # Capability hooks

    async def _read(self, address: Address, value_type: Any) -> Any:
        if not self.is_visible(address):
            return ABSENT
        return await self.store.read(address, value_type)

    async def _read_existence(self, address: Address, binding: AddressBinding) -> Any:
        if not self.is_visible(address):
            return ABSENT
        return await self.store.read(address, Existence)

    async def _write(self, address: Address, value: Any, value_type: Any) -> None:
        if not self.is_visible(address):
            raise SuppressedWriteError(address)
        await self.store.write(address, value, value_type)

    async def _list(self, address: Address) -> AsyncIterator[ChildEntry]:
        async with aclosing(self._filtered(self.store.list(address))) as stream:
            async for entry in stream:
                yield entry

    async def _insert(self, address: Address, items: List[Any]) -> AsyncIterator[ChildEntry]:
        if not self.is_visible(address):
            raise SuppressedWriteError(address)
        async with aclosing(self._filtered(self.store.insert(address, items))) as stream:
            async for entry in stream:
                yield entry

    async def _query(self, address: Address, query: Any) -> AsyncIterator[ChildEntry]:
        async with aclosing(self._filtered(self.store.query(address, query))) as stream:
            async for entry in stream:
                yield entry

    async def _branch_or_leaf(self, address: Address) -> BranchOrLeaf:
        return await self.store.branch_or_leaf(address)

    async def close(self):
        await self.store.close()

    # === Tracking API ===

    def was_filtered(self, address: Union[str, Address]) -> bool:
        """
        Check if an address was hidden from a listing.

        Args:
            address: Address (or its string form) to check

        Returns:
            True if a listing dropped this address
            False if not filtered or tracking is disabled
        """
        if not self.track_filtered:
            # Tracking disabled, cannot determine
            return False
        return str(address) in self.filtered_paths

    def clear_tracking(self):
        """Clear all tracking data."""
        if self.filtered_paths is not None:
            self.filtered_paths.clear()

    def get_filtered_count(self) -> int:
        """
        Get count of filtered addresses.

        Returns:
            Number of addresses filtered, or 0 if tracking disabled
        """
        if self.filtered_paths is None:
            return 0
        return len(self.filtered_paths)

    def __repr__(self) -> str:
        return f"FilterAddressesWrapper({self.store!r})"


def ignore_keys(store: AsyncStore, prefix: str = "_", track_filtered: bool = True) -> FilterAddressesWrapper:
    """Hide every address that has a part starting with ``prefix``.

    Args:
        store: Store to wrap
        prefix: Name prefix marking hidden keys

    Returns:
        FilterAddressesWrapper around ``store``
    """
    def keep(address: Address) -> bool:
        return not any(name.startswith(prefix) for name in address.as_parts())

    return FilterAddressesWrapper(store, keep, track_filtered)
