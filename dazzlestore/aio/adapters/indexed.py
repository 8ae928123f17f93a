"""Read-only store over a list of items looked up by id.

Each item's id is computed by a caller-supplied function, so any list of
records can be addressed without building an index up front.
"""

from typing import Any, AsyncIterator, Callable, Iterable, Hashable

from ..._common.address import ABSENT, Address, Branch, BranchOrLeaf, Leaf
from ..._common.errors import MissingAddressError
from ..core.capabilities import AddressBinding, Capability
from ..core.locks import AsyncReadWriteLock
from ..core.store import AsyncStore, ChildEntry


class ItemId(Address):
    """Address of one item by its id; ``ItemId()`` is the whole list."""

    __slots__ = ()

    def __init__(self, *ids: Hashable):
        if len(ids) > 1:
            raise ValueError("Items have no sub-addresses")
        super().__init__(ids)

    def append(self, part: Any) -> 'ItemId':
        address = super().append(part)
        if len(address) > 1:
            raise ValueError("Items have no sub-addresses")
        return address

    @property
    def item_id(self) -> Any:
        return self.last()


class IndexedVecStore(AsyncStore):
    """Items held in memory, read by id.

    Reading the root returns a copy of every item; reading ``ItemId(x)``
    returns the first item whose id equals ``x``, or ABSENT.

    Args:
        items: Items to hold
        get_id: Callable computing an item's id

    Example:
        store = IndexedVecStore(rows, lambda row: row["a"])
        row = await store.read(ItemId(3))
    """

    address_type = ItemId
    bindings = {
        ItemId: AddressBinding(
            {Capability.READ, Capability.LIST, Capability.TREE},
            (object,),
        ),
    }

    def __init__(self, items: Iterable[Any], get_id: Callable[[Any], Hashable]):
        super().__init__()
        self._items = list(items)
        self.get_id = get_id
        self._lock = AsyncReadWriteLock()

    async def _read(self, address: ItemId, value_type: Any) -> Any:
        async with self._lock.read_locked():
            if address.is_root:
                return list(self._items)
            for item in self._items:
                if self.get_id(item) == address.item_id:
                    return item
        return ABSENT

    async def _list(self, address: ItemId) -> AsyncIterator[ChildEntry]:
        if not address.is_root:
            raise MissingAddressError(f"Item {address.item_id!r} has no children")
        async with self._lock.read_locked():
            ids = [self.get_id(item) for item in self._items]
        for item_id in ids:
            yield item_id, address.append(item_id)

    async def _branch_or_leaf(self, address: ItemId) -> BranchOrLeaf:
        if address.is_root:
            return Branch(address)
        return Leaf(address)

    def __len__(self) -> int:
        return len(self._items)
