"""Core abstractions for async stores.

This module defines the fundamental interfaces for addressable stores:
the capability registry, the store base class, locations and the tree
walker. All components use async/await patterns for non-blocking I/O.
"""

from .capabilities import Capability, AddressBinding, CAPABILITY_HOOKS
from .store import AsyncStore, ChildEntry
from .locks import AsyncReadWriteLock
from .location import Location
from .walker import AsyncTreeWalker

__all__ = [
    # Capabilities
    'Capability',
    'AddressBinding',
    'CAPABILITY_HOOKS',
    # Store
    'AsyncStore',
    'ChildEntry',
    'AsyncReadWriteLock',
    # Navigation
    'Location',
    'AsyncTreeWalker',
]
