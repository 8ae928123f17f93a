"""Lazy depth-first walk over any store.

The walker only needs two capabilities from a store: ``list`` to enumerate
children and ``branch_or_leaf`` to classify them. It keeps an explicit stack
of open listing streams, most specific on top, so memory grows with the
depth of the tree rather than its size and nothing is fetched before the
consumer asks for it.
"""

import logging
from contextlib import aclosing
from typing import Any, AsyncIterator, List, Optional, Tuple

from ..._common.address import BranchOrLeaf
from ...config import WalkConfig, ensure_valid
from .location import Location


logger = logging.getLogger(__name__)


class AsyncTreeWalker:
    """Pre-order walker producing Branch/Leaf items.

    For each child pulled from the top stream: a Leaf is emitted; a Branch
    is emitted and its own listing is pushed, so its descendants come
    before its remaining siblings. Sibling order is whatever the store's
    ``list`` produces.

    There is no cycle detection. A store exposing a self-referential
    hierarchy makes the walk endless unless ``max_depth`` is set.

    A walker instance drives one walk at a time and each walk is
    single-pass. Errors from listing or classification are raised to the
    consumer after every item produced before them, and the walk ends.

    Example:
        walker = AsyncTreeWalker()
        async for item in walker.walk(store.root()):
            if item.is_leaf:
                print(item.address)
    """

    def __init__(self, max_depth: Optional[int] = None, config: Optional[WalkConfig] = None):
        """Initialize walker.

        Args:
            max_depth: Deepest level emitted; children of the start are
                depth 1, so 1 lists children only. None walks everything.
            config: Full walk configuration; overrides ``max_depth``
        """
        self.config = config or WalkConfig(max_depth=max_depth)
        ensure_valid(self.config)
        self._cancelled = False
        self.emitted = 0

    def cancel(self):
        """Stop the walk before the next pull. Open listings are closed."""
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def walk(self, start: Any) -> AsyncIterator[BranchOrLeaf]:
        """Walk everything below ``start``.

        Args:
            start: Location (or store, meaning its root) to walk from. The
                start itself is not emitted.

        Yields:
            Branch or Leaf for each descendant address
        """
        self._reset()
        return self._items(start)

    def walk_with_depth(self, start: Any) -> AsyncIterator[Tuple[BranchOrLeaf, int]]:
        """Walk like ``walk`` but yield ``(item, depth)`` tuples.

        Depth counts from the start: its direct children are depth 1.
        """
        self._reset()
        return self._pairs(start)

    def _reset(self):
        # Done before the generator exists so an early cancel() sticks
        self._cancelled = False
        self.emitted = 0

    async def _items(self, start: Any) -> AsyncIterator[BranchOrLeaf]:
        async with aclosing(self._pairs(start)) as pairs:
            async for item, _ in pairs:
                yield item

    async def _pairs(self, start: Any) -> AsyncIterator[Tuple[BranchOrLeaf, int]]:
        location = start if isinstance(start, Location) else start.root()
        store = location.store

        logger.debug("Walking %r from %s", store, location.address)
        stack: List[Tuple[AsyncIterator, int]] = [(store.list(location.address), 1)]
        try:
            while stack and not self._cancelled:
                stream, depth = stack[-1]
                try:
                    _, child = await stream.__anext__()
                except StopAsyncIteration:
                    stack.pop()
                    continue

                item = await store.branch_or_leaf(child)
                self.emitted += 1
                yield item, depth

                if item.is_branch and self.config.should_expand(depth) and not self._cancelled:
                    stack.append((store.list(child), depth + 1))
        finally:
            # Innermost first, mirroring the order they were opened in
            for stream, _ in reversed(stack):
                await stream.aclose()
            logger.debug(
                "Walk from %s ended after %d items%s",
                location.address, self.emitted, " (cancelled)" if self._cancelled else ""
            )
