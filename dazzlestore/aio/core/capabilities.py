"""Capability declarations for stores.

A store states, per address kind, which operations it performs and which
value types it can read and write. The declarations live in a registry on
the store class and are checked on every call, so an unsupported request
fails fast with CapabilityNotSupportedError instead of misbehaving.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple, Type

from ..._common.address import ABSENT, Address
from ..._common.errors import CapabilityNotSupportedError


class Capability(Enum):
    """Operations a store can offer for an address kind."""
    READ = "read"
    WRITE = "write"
    LIST = "list"
    INSERT = "insert"
    QUERY = "query"
    TREE = "branch_or_leaf"


# Hook a store must implement for each capability
CAPABILITY_HOOKS: Dict[Capability, str] = {
    Capability.READ: '_read',
    Capability.WRITE: '_write',
    Capability.LIST: '_list',
    Capability.INSERT: '_insert',
    Capability.QUERY: '_query',
    Capability.TREE: '_branch_or_leaf',
}


@dataclass(frozen=True)
class AddressBinding:
    """What a store supports for one address kind.

    Attributes:
        capabilities: Operations allowed on addresses of this kind
        value_types: Types accepted by read/write; the first is the default.
            Empty when the address has no meaningful value.
    """

    capabilities: FrozenSet[Capability]
    value_types: Tuple[Any, ...] = ()

    def __init__(self, capabilities: Iterable[Capability], value_types: Iterable[Any] = ()):
        object.__setattr__(self, 'capabilities', frozenset(capabilities))
        object.__setattr__(self, 'value_types', tuple(value_types))

    @property
    def default_value_type(self) -> Optional[Any]:
        return self.value_types[0] if self.value_types else None

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def accepts(self, value_type: Any) -> bool:
        return value_type in self.value_types


Registry = Mapping[Type[Address], AddressBinding]


def find_binding(registry: Registry, address_type: Type[Address]) -> Optional[AddressBinding]:
    """Look up the binding for an address class, following its MRO."""
    for klass in address_type.__mro__:
        if klass in registry:
            return registry[klass]
    return None


def check_hooks(store: Any, registry: Registry) -> None:
    """Verify that every declared capability has an implemented hook.

    A hook counts as implemented when the store's class overrides the
    placeholder defined on the base store.

    Raises:
        CapabilityNotSupportedError: Naming the first missing hook
    """
    from .store import AsyncStore

    for address_type, binding in registry.items():
        for capability in binding.capabilities:
            hook = CAPABILITY_HOOKS[capability]
            implementation = getattr(type(store), hook, None)
            if implementation is None or implementation is getattr(AsyncStore, hook):
                raise CapabilityNotSupportedError(
                    f"{type(store).__name__} declares {capability.value} for "
                    f"{address_type.__name__} but does not implement {hook}()"
                )


def check_value(value: Any, value_type: Any) -> None:
    """Reject a write whose value does not match the requested type.

    ``ABSENT`` always passes since writing it means delete. Types that
    are not classes (markers such as a JSON value alias) are not checked.
    """
    if value is ABSENT or not isinstance(value_type, type):
        return
    if value_type is float and isinstance(value, int) and not isinstance(value, bool):
        return
    if not isinstance(value, value_type):
        raise CapabilityNotSupportedError(
            f"Value of type {type(value).__name__} cannot be written as {value_type.__name__}"
        )
