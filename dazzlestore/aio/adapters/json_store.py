"""JSON document store over any string location.

The document is kept as JSON text at a location that can read and write
``str`` values: a memory cell, a file, or anything else implementing those
two capabilities. Every operation parses the text, so readers always see a
complete document, and every mutation serializes the whole document back.
"""

import json
import logging
from pathlib import Path
from typing import Any, AsyncIterator, Callable, List, Optional, Union

from ..._common.address import ABSENT, BranchOrLeaf, Existence
from ..._common.errors import BackendError, CapabilityNotSupportedError, snippet
from ..._common.json_path import JsonPath
from ..._common.json_traverse import (
    classify_path,
    delete_path_value,
    get_path_value,
    insert_path_values,
    list_path_children,
    set_path_value,
)
from ...config import FileSystemConfig, JsonStoreConfig, ensure_valid
from ..core.capabilities import AddressBinding, Capability
from ..core.locks import AsyncReadWriteLock
from ..core.location import Location
from ..core.store import AsyncStore, ChildEntry
from .cell import MemoryCellStore
from .filesystem import FileSystemStore, RelativePath


logger = logging.getLogger(__name__)


class JsonStore(AsyncStore):
    """Addressable JSON document stored as text at a location.

    Missing text reads as a ``null`` document. Values are plain Python
    JSON values; ``None`` is JSON null and ABSENT means "nothing here".

    Mutations are not transactional: if a write fails half way, whatever
    was already changed (for example intermediate containers created on the
    way down) is still saved.

    Args:
        location: Location holding the JSON text
        config: Serialization options
        pretty: Shortcut for ``JsonStoreConfig(pretty=True)``

    Example:
        store = json_value_store({"a": {"b": 1}})
        await store.path("a.c[1]").write("x")
        # {"a": {"b": 1, "c": [null, "x"]}}
    """

    address_type = JsonPath
    bindings = {
        JsonPath: AddressBinding(
            {Capability.READ, Capability.WRITE, Capability.LIST,
             Capability.INSERT, Capability.TREE},
            (object, Existence),
        ),
    }

    def __init__(
        self,
        location: Location,
        config: Optional[JsonStoreConfig] = None,
        pretty: Optional[bool] = None
    ):
        super().__init__()
        config = config or JsonStoreConfig()
        if pretty is not None:
            config = JsonStoreConfig(pretty=pretty, indent=config.indent, sort_keys=config.sort_keys)
        ensure_valid(config)
        self._check_location(location)
        self.config = config
        self.location = location
        self._lock = AsyncReadWriteLock()

    @staticmethod
    def _check_location(location: Location) -> None:
        """Require a location that can read and write ``str`` values."""
        binding = location.store.binding_for(location.address)
        if (binding is None
                or not binding.supports(Capability.READ)
                or not binding.supports(Capability.WRITE)
                or not binding.accepts(str)):
            raise CapabilityNotSupportedError(
                f"JSON text cannot be kept at {location!r}: it needs str read and write"
            )

    # Text <-> value

    def _parse(self, text: Any) -> Any:
        if text is ABSENT:
            return None
        return json.loads(text)

    def _serialize(self, value: Any) -> str:
        try:
            return json.dumps(value, **self.config.dumps_kwargs())
        except (TypeError, ValueError) as e:
            raise BackendError(
                f"Document is not JSON serializable, change not saved ({e}): {snippet(value)}"
            ) from e

    async def snapshot(self) -> Any:
        """Parse and return the whole document under the shared lock."""
        async with self._lock.read_locked():
            return self._parse(await self.location.read(str))

    async def _change(self, mutator: Callable[[List[Any]], Any]) -> Any:
        """Run ``mutator`` on a holder of the document under the exclusive lock.

        The document is written back even if the mutator raises, and the
        error is then re-raised.
        """
        async with self._lock.write_locked():
            holder = [self._parse(await self.location.read(str))]
            try:
                return mutator(holder)
            finally:
                await self.location.write(self._serialize(holder[0]), str)

    async def update(self, mutator: Callable[[Any], Any]) -> Any:
        """Replace the document with ``mutator(document)`` under the exclusive lock.

        The mutator runs while the store is locked exclusively. Calling back
        into this same store from inside it deadlocks.

        Args:
            mutator: Callable receiving the current document and returning
                the new one; it may also mutate the document in place

        Returns:
            The new document
        """
        def replace(holder: List[Any]) -> Any:
            holder[0] = mutator(holder[0])
            return holder[0]

        return await self._change(replace)

    # Capability hooks

    async def _read(self, address: JsonPath, value_type: Any) -> Any:
        return get_path_value(await self.snapshot(), address)

    async def _write(self, address: JsonPath, value: Any, value_type: Any) -> None:
        if value is ABSENT:
            await self._change(lambda holder: delete_path_value(holder, address))
        else:
            await self._change(lambda holder: set_path_value(holder, address, value))

    async def _list(self, address: JsonPath) -> AsyncIterator[ChildEntry]:
        for part in list_path_children(await self.snapshot(), address):
            yield part, address.append(part)

    async def _insert(self, address: JsonPath, items: List[Any]) -> AsyncIterator[ChildEntry]:
        indexes = await self._change(lambda holder: insert_path_values(holder, address, items))
        logger.debug("Inserted %d items at %s", len(indexes), address)
        for index in indexes:
            yield index, address.append(index)

    async def _branch_or_leaf(self, address: JsonPath) -> BranchOrLeaf:
        return classify_path(await self.snapshot(), address)

    def __repr__(self) -> str:
        return f"JsonStore({self.location!r})"


def json_value_store(value: Any = None, pretty: bool = False) -> JsonStore:
    """Create a JSON store backed by an in-memory cell.

    Args:
        value: Initial document
        pretty: Whether the stored text is indented

    Returns:
        JsonStore holding ``value``
    """
    config = JsonStoreConfig(pretty=pretty)
    cell = MemoryCellStore(json.dumps(value, **config.dumps_kwargs()), str)
    return JsonStore(cell.root(), config)


def json_file_store(
    path: Union[str, Path],
    pretty: bool = False,
    encoding: str = "utf-8"
) -> JsonStore:
    """Create a JSON store backed by a file.

    The file does not need to exist yet; it is created on the first write.
    """
    path = Path(path)
    files = FileSystemStore(config=FileSystemConfig(path.parent, encoding=encoding))
    return JsonStore(files.sub(RelativePath([path.name])), JsonStoreConfig(pretty=pretty))
