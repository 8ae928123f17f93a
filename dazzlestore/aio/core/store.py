"""Async store abstraction.

Defines how different backends (memory, JSON documents, filesystems,
remote APIs) are adapted into one addressable interface. Listing-style
operations stream their results as async iterators of
``(added_part, child_address)`` pairs so large containers never have to be
materialized.
"""

import logging
from contextlib import aclosing
from typing import Any, AsyncIterator, Dict, Iterable, List, Optional, Tuple, Type

from ..._common.address import ABSENT, Address, BranchOrLeaf, Existence
from ..._common.errors import CapabilityNotSupportedError
from .capabilities import (
    AddressBinding,
    Capability,
    Registry,
    check_hooks,
    check_value,
    find_binding,
)


logger = logging.getLogger(__name__)

ChildEntry = Tuple[Any, Address]


class AsyncStore:
    """Base class for async stores.

    Subclasses set ``address_type`` (the kind of the root address) and
    ``bindings`` (the capability registry), then implement the hooks for
    the capabilities they declare: ``_read``, ``_write``, ``_list``,
    ``_insert``, ``_query`` and ``_branch_or_leaf``. The public methods
    check the registry before delegating, so hooks never see a request the
    store did not declare.
    """

    address_type: Type[Address] = Address
    bindings: Registry = {}

    def __init__(self):
        check_hooks(self, self._registry())

    def _registry(self) -> Registry:
        """Registry consulted for every call. Wrappers return the inner one."""
        return self.bindings

    # Registry queries

    def binding_for(self, address: Any) -> Optional[AddressBinding]:
        address_type = address if isinstance(address, type) else type(address)
        return find_binding(self._registry(), address_type)

    def supports(self, capability: Capability, address_type: Optional[Type[Address]] = None) -> bool:
        """Check if the store offers ``capability`` for an address kind.

        Args:
            capability: Capability to look for
            address_type: Address class; defaults to the root address kind

        Returns:
            True if the capability is declared
        """
        binding = self.binding_for(address_type or self.address_type)
        return binding is not None and binding.supports(capability)

    def default_value_type(self, address_type: Optional[Type[Address]] = None) -> Optional[Any]:
        binding = self.binding_for(address_type or self.address_type)
        return binding.default_value_type if binding else None

    def describe(self) -> Dict[str, Dict[str, Any]]:
        """Summarize the registry for debugging.

        Returns:
            Mapping of address class name to its capabilities and value types
        """
        summary = {}
        for address_type, binding in self._registry().items():
            summary[address_type.__name__] = {
                'capabilities': sorted(c.value for c in binding.capabilities),
                'value_types': [getattr(t, '__name__', repr(t)) for t in binding.value_types],
            }
        return summary

    def _require(self, address: Address, capability: Capability) -> AddressBinding:
        binding = self.binding_for(address)
        if binding is None or not binding.supports(capability):
            raise CapabilityNotSupportedError(
                f"{type(self).__name__} does not support {capability.value} "
                f"for {type(address).__name__}"
            )
        return binding

    def _resolve_value_type(self, binding: AddressBinding, address: Address,
                            value_type: Optional[Any]) -> Any:
        if value_type is None:
            if binding.default_value_type is None:
                raise CapabilityNotSupportedError(
                    f"{type(address).__name__} has no default value type in {type(self).__name__}"
                )
            return binding.default_value_type
        if not binding.accepts(value_type):
            name = getattr(value_type, '__name__', repr(value_type))
            raise CapabilityNotSupportedError(
                f"{type(self).__name__} cannot handle {name} values at {type(address).__name__}"
            )
        return value_type

    # Locations

    def root(self):
        """Location of this store's root address."""
        from .location import Location
        return Location(self.address_type(), self)

    def sub(self, address: Address):
        """Location of ``address`` inside this store."""
        from .location import Location
        return Location(address, self)

    def path(self, text: str):
        """Location of the root address joined with a parsed string path."""
        return self.sub(self.address_type.parse(text))

    # Capability operations

    async def read(self, address: Address, value_type: Optional[Any] = None) -> Any:
        """Read the value at ``address``.

        Args:
            address: Where to read
            value_type: Type to read as; defaults to the kind's first type

        Returns:
            The value, or ABSENT if nothing exists there
        """
        binding = self._require(address, Capability.READ)
        value_type = self._resolve_value_type(binding, address, value_type)
        if value_type is Existence:
            return await self._read_existence(address, binding)
        return await self._read(address, value_type)

    async def write(self, address: Address, value: Any, value_type: Optional[Any] = None) -> None:
        """Upsert ``value`` at ``address``; writing ABSENT deletes."""
        binding = self._require(address, Capability.WRITE)
        value_type = self._resolve_value_type(binding, address, value_type)
        check_value(value, value_type)
        await self._write(address, value, value_type)

    async def list(self, address: Address) -> AsyncIterator[ChildEntry]:
        """Stream the direct children of the container at ``address``."""
        self._require(address, Capability.LIST)
        async with aclosing(self._list(address)) as stream:
            async for entry in stream:
                yield entry

    async def insert(self, address: Address, items: Iterable[Any]) -> AsyncIterator[ChildEntry]:
        """Append ``items`` to the collection at ``address``.

        Yields:
            ``(added_part, child_address)`` for each new item, in order
        """
        self._require(address, Capability.INSERT)
        async with aclosing(self._insert(address, list(items))) as stream:
            async for entry in stream:
                yield entry

    async def query(self, address: Address, query: Any) -> AsyncIterator[ChildEntry]:
        """Stream the children of ``address`` matching a backend query."""
        self._require(address, Capability.QUERY)
        async with aclosing(self._query(address, query)) as stream:
            async for entry in stream:
                yield entry

    async def branch_or_leaf(self, address: Address) -> BranchOrLeaf:
        """Classify ``address`` as an internal node or a terminal value."""
        self._require(address, Capability.TREE)
        return await self._branch_or_leaf(address)

    # Hooks; the base versions are placeholders and count as unimplemented

    async def _read(self, address: Address, value_type: Any) -> Any:
        raise NotImplementedError

    async def _write(self, address: Address, value: Any, value_type: Any) -> None:
        raise NotImplementedError

    async def _list(self, address: Address) -> AsyncIterator[ChildEntry]:
        raise NotImplementedError
        yield

    async def _insert(self, address: Address, items: List[Any]) -> AsyncIterator[ChildEntry]:
        raise NotImplementedError
        yield

    async def _query(self, address: Address, query: Any) -> AsyncIterator[ChildEntry]:
        raise NotImplementedError
        yield

    async def _branch_or_leaf(self, address: Address) -> BranchOrLeaf:
        raise NotImplementedError

    async def _read_existence(self, address: Address, binding: AddressBinding) -> Any:
        """Answer an Existence read by reading the default type.

        Override when the backend can check presence more cheaply.
        """
        value = await self._read(address, binding.default_value_type)
        return ABSENT if value is ABSENT else Existence()

    # Lifecycle

    async def close(self):
        """Clean up store resources.

        Override if the store holds connections or handles.
        """
        pass

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
