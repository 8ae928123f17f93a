"""Locations: an address paired with the store it lives in.

A Location is the unit callers pass around. It forwards every capability
operation to its store with its own address, and composes into deeper
locations with ``sub`` and ``path``.
"""

from contextlib import aclosing
from typing import Any, AsyncIterator, Iterable, Optional, Tuple

from ..._common.address import ABSENT, Address, BranchOrLeaf, Existence


class Location:
    """Immutable (address, store) pair.

    The store is a shared reference: every location derived from this one
    talks to the same store instance.

    Attributes:
        address: Address inside the store
        store: The AsyncStore holding the address
    """

    __slots__ = ('address', 'store')

    def __init__(self, address: Address, store: Any):
        object.__setattr__(self, 'address', address)
        object.__setattr__(self, 'store', store)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Location is immutable")

    def sub(self, part: Any) -> 'Location':
        """Location one part (or one whole same-kind address) deeper."""
        return Location(self.address.append(part), self.store)

    def path(self, text: str) -> 'Location':
        """Location deeper by a parsed string path, e.g. ``"a.b[0]"``."""
        return Location(self.address.path(text), self.store)

    def __truediv__(self, part: Any) -> 'Location':
        return self.sub(part)

    def parent(self) -> Optional['Location']:
        parent = self.address.parent()
        return None if parent is None else Location(parent, self.store)

    def own_name(self) -> str:
        return self.address.own_name()

    # Capability operations

    async def read(self, value_type: Optional[Any] = None) -> Any:
        return await self.store.read(self.address, value_type)

    async def write(self, value: Any, value_type: Optional[Any] = None) -> None:
        await self.store.write(self.address, value, value_type)

    async def delete(self) -> None:
        """Remove whatever is stored here; a missing value is a no-op."""
        await self.store.write(self.address, ABSENT)

    async def exists(self) -> bool:
        return await self.store.read(self.address, Existence) is not ABSENT

    async def list(self) -> AsyncIterator[Tuple[Any, 'Location']]:
        """Stream ``(added_part, child_location)`` for each direct child."""
        async with aclosing(self.store.list(self.address)) as stream:
            async for part, address in stream:
                yield part, Location(address, self.store)

    async def insert(self, items: Iterable[Any]) -> AsyncIterator[Tuple[Any, 'Location']]:
        async with aclosing(self.store.insert(self.address, items)) as stream:
            async for part, address in stream:
                yield part, Location(address, self.store)

    async def query(self, query: Any) -> AsyncIterator[Tuple[Any, 'Location']]:
        async with aclosing(self.store.query(self.address, query)) as stream:
            async for part, address in stream:
                yield part, Location(address, self.store)

    async def branch_or_leaf(self) -> BranchOrLeaf:
        return await self.store.branch_or_leaf(self.address)

    def walk_tree_recursively(self, max_depth: Optional[int] = None) -> AsyncIterator[BranchOrLeaf]:
        """Lazily walk everything below this location, depth-first pre-order.

        Args:
            max_depth: Stop expanding branches at this depth (1 = children only)

        Returns:
            Async iterator of Branch/Leaf items for each descendant address
        """
        from .walker import AsyncTreeWalker
        return AsyncTreeWalker(max_depth=max_depth).walk(self)

    # Value semantics

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Location):
            return NotImplemented
        return self.address == other.address and self.store is other.store

    def __hash__(self) -> int:
        return hash((self.address, id(self.store)))

    def __repr__(self) -> str:
        return f"Location({self.address!r}, {self.store!r})"

    def __str__(self) -> str:
        return str(self.address)
