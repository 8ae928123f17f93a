"""Testing utilities for DazzleStore consumers."""

from .fixtures import StoreTestHelper, FakeClock

__all__ = ['StoreTestHelper', 'FakeClock']
