"""Test fixtures for DazzleStore consumers.

These helpers let projects that implement their own stores check them
against the store contract without reaching into internals.
"""

from typing import Any, Dict, List, Optional

from .._common.address import ABSENT, Address, Existence
from ..aio.api import collect, collect_leaf_values, get_tree_paths
from ..aio.core import Capability


class StoreTestHelper:
    """Public test fixture for store verification.

    Example:
        store = MyStore()
        helper = StoreTestHelper(store)

        summary = helper.get_summary()
        assert summary['capabilities']['MyAddress'] == ['list', 'read']
        await helper.check_round_trip(MyAddress("x"), "value")
    """

    def __init__(self, store):
        """Initialize with the store under test.

        Args:
            store: Any AsyncStore
        """
        self._store = store

    def get_summary(self) -> Dict[str, Any]:
        """Returns the store's declared capabilities for testing.

        Returns:
            Dictionary containing:
            - store: Store class name
            - capabilities: Capability names per address class
            - value_types: Value type names per address class
        """
        description = self._store.describe()
        return {
            'store': type(self._store).__name__,
            'capabilities': {name: d['capabilities'] for name, d in description.items()},
            'value_types': {name: d['value_types'] for name, d in description.items()},
        }

    async def get_paths(self, start: Optional[Any] = None) -> List[str]:
        """Every address string below ``start`` (the root by default)."""
        return await get_tree_paths(start if start is not None else self._store)

    async def get_leaf_values(self, start: Optional[Any] = None) -> Dict[str, Any]:
        """Mapping of leaf address string to value below ``start``."""
        return await collect_leaf_values(start if start is not None else self._store)

    async def list_names(self, address: Address) -> List[str]:
        """Own names of the direct children of ``address``."""
        entries = await collect(self._store.list(address))
        return [child.own_name() for _, child in entries]

    async def check_round_trip(self, address: Address, value: Any) -> None:
        """Write, read back, delete and check absence at ``address``.

        Raises:
            AssertionError: Describing the first step that misbehaved
        """
        await self._store.write(address, value)
        read_back = await self._store.read(address)
        assert read_back == value, f"Read {read_back!r} after writing {value!r} at {address}"

        if self._store.binding_for(address).accepts(Existence):
            assert await self._store.read(address, Existence) == Existence(), \
                f"{address} does not exist after writing"

        await self._store.write(address, ABSENT)
        after = await self._store.read(address)
        assert after is ABSENT, f"Read {after!r} after deleting {address}"

    def supports_all(self, *capabilities: Capability) -> bool:
        """Check that the root address kind supports every capability given."""
        return all(self._store.supports(capability) for capability in capabilities)


class FakeClock:
    """Manual clock and sleep pair for time-dependent tests.

    Pass ``clock`` as a time source and ``clock.sleep`` as the sleep
    coroutine; sleeping advances the clock instantly and is recorded.

    Example:
        clock = FakeClock()
        limiter = RateLimiter(1.0, 5, clock=clock, sleep=clock.sleep)
    """

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds

    async def sleep(self, seconds: float):
        self.sleeps.append(seconds)
        self.now += seconds
