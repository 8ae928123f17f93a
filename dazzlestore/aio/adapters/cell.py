"""In-memory single-value store.

A memory cell holds one value at its only address, the root. It is mostly
used as the backing location for a JSON store that lives in memory.
"""

from typing import Any

from ..._common.address import ABSENT, Address, Existence
from ..core.capabilities import AddressBinding, Capability
from ..core.locks import AsyncReadWriteLock
from ..core.store import AsyncStore


class CellAddress(Address):
    """The unique root address of a memory cell. It has no parts."""

    __slots__ = ()

    @classmethod
    def _coerce_part(cls, part: Any) -> Any:
        raise TypeError("A memory cell has only a root address")

    @classmethod
    def parse(cls, text: str) -> 'CellAddress':
        if text:
            raise TypeError("A memory cell has only a root address")
        return cls()


class MemoryCellStore(AsyncStore):
    """Holds a single value guarded by a reader-writer lock.

    Args:
        value: Initial value; ABSENT for an empty cell
        value_type: Type of the values the cell accepts (``str`` by default)

    Example:
        cell = MemoryCellStore("hello")
        assert await cell.root().read() == "hello"
    """

    address_type = CellAddress

    def __init__(self, value: Any = ABSENT, value_type: type = str):
        self.value_type = value_type
        self.bindings = {
            CellAddress: AddressBinding(
                {Capability.READ, Capability.WRITE},
                (value_type, Existence),
            ),
        }
        super().__init__()
        self._value = value
        self._lock = AsyncReadWriteLock()

    async def _read(self, address: CellAddress, value_type: Any) -> Any:
        async with self._lock.read_locked():
            return self._value

    async def _write(self, address: CellAddress, value: Any, value_type: Any) -> None:
        async with self._lock.write_locked():
            self._value = value

    def __repr__(self) -> str:
        return f"MemoryCellStore(value_type={getattr(self.value_type, '__name__', self.value_type)})"
