"""Async filesystem store.

Files and directories below a base directory are addressed by
RelativePath. Blocking filesystem calls run in worker threads via
``asyncio.to_thread`` so the event loop never stalls on disk I/O.
"""

import asyncio
import logging
import os
import stat as stat_module  # To avoid name collision with stat results
from pathlib import Path
from typing import Any, AsyncIterator, List, Optional, Union

from ..._common.address import ABSENT, Address, Branch, BranchOrLeaf, Existence, Leaf
from ..._common.errors import BackendError, MissingAddressError, PathParseError
from ...config import FileSystemConfig, ensure_valid
from ..core.capabilities import AddressBinding, Capability
from ..core.store import AsyncStore, ChildEntry


logger = logging.getLogger(__name__)


class RelativePath(Address):
    """Path of a file or directory relative to a store's base directory.

    Parts are single name components. ``RelativePath.parse("a/b.txt")``
    gives ``RelativePath(['a', 'b.txt'])``.
    """

    __slots__ = ()

    @classmethod
    def _coerce_part(cls, part: Any) -> str:
        if not isinstance(part, str):
            raise TypeError(f"Path component must be a string, got {part!r}")
        if not part or part in (".", "..") or "/" in part or "\\" in part:
            raise ValueError(f"Invalid path component: {part!r}")
        return part

    @classmethod
    def parse(cls, text: str) -> 'RelativePath':
        """Split a ``/``-separated relative path into components.

        Empty and ``.`` components are skipped.

        Raises:
            PathParseError: For absolute paths or ``..`` components
        """
        normalized = text.replace("\\", "/")
        if normalized.startswith("/") or os.path.isabs(text):
            raise PathParseError("Absolute paths are not allowed", text)
        names = [name for name in normalized.split("/") if name not in ("", ".")]
        if ".." in names:
            raise PathParseError("Parent references are not allowed", text)
        return cls(names)

    def to_path(self) -> Path:
        return Path(*self.parts) if self.parts else Path()


class FileSystemStore(AsyncStore):
    """Store over the files below a base directory.

    Reads and writes text (``str``, the default), raw ``bytes``, or just
    checks ``Existence``. Writing ABSENT removes a file or an empty
    directory. Directories are branches, regular files are leaves.

    Example:
        store = FileSystemStore("/tmp/data")
        await store.path("notes/today.txt").write("hello")
        async for item in store.root().walk_tree_recursively():
            print(item)
    """

    address_type = RelativePath
    bindings = {
        RelativePath: AddressBinding(
            {Capability.READ, Capability.WRITE, Capability.LIST, Capability.TREE},
            (str, bytes, Existence),
        ),
    }

    def __init__(
        self,
        base_directory: Optional[Union[str, Path]] = None,
        config: Optional[FileSystemConfig] = None
    ):
        """Initialize filesystem store.

        Args:
            base_directory: Directory every address is relative to
            config: Full configuration; ``base_directory`` overrides its root
        """
        super().__init__()
        if config is None:
            config = FileSystemConfig(base_directory if base_directory is not None else ".")
        elif base_directory is not None:
            config = FileSystemConfig(base_directory, config.encoding, config.create_parents)
        ensure_valid(config)
        self.config = config
        self.base_directory = Path(config.base_directory)

    @classmethod
    def here(cls, **kwargs) -> 'FileSystemStore':
        """Store rooted at the current working directory."""
        return cls(os.getcwd(), **kwargs)

    def full_path(self, address: RelativePath) -> Path:
        """Absolute-or-base-relative filesystem path for an address."""
        return self.base_directory.joinpath(*address.parts)

    async def _read(self, address: RelativePath, value_type: Any) -> Any:
        path = self.full_path(address)
        try:
            if value_type is bytes:
                return await asyncio.to_thread(path.read_bytes)
            return await asyncio.to_thread(path.read_text, self.config.encoding)
        except FileNotFoundError:
            return ABSENT

    async def _read_existence(self, address: RelativePath, binding: AddressBinding) -> Any:
        exists = await asyncio.to_thread(os.path.lexists, self.full_path(address))
        return Existence() if exists else ABSENT

    async def _write(self, address: RelativePath, value: Any, value_type: Any) -> None:
        path = self.full_path(address)
        if value is ABSENT:
            await asyncio.to_thread(self._remove, path)
            return

        if self.config.create_parents:
            await asyncio.to_thread(path.parent.mkdir, parents=True, exist_ok=True)
        if isinstance(value, bytes):
            await asyncio.to_thread(path.write_bytes, value)
        else:
            await asyncio.to_thread(path.write_text, value, self.config.encoding)

    @staticmethod
    def _remove(path: Path) -> None:
        try:
            mode = os.lstat(path).st_mode
        except FileNotFoundError:
            return
        if stat_module.S_ISDIR(mode):
            # Non-empty directories raise OSError
            os.rmdir(path)
        else:
            os.unlink(path)

    async def _list(self, address: RelativePath) -> AsyncIterator[ChildEntry]:
        try:
            names = await asyncio.to_thread(self._scan, self.full_path(address))
        except FileNotFoundError:
            raise MissingAddressError(f"No directory at {address}") from None
        for name in names:
            yield name, address.append(name)

    @staticmethod
    def _scan(path: Path) -> List[str]:
        """Names in a directory, sorted for a stable order."""
        names = []
        with os.scandir(path) as entries:
            for entry in entries:
                try:
                    entry.name.encode("utf-8")
                except UnicodeEncodeError:
                    logger.warning("Skipping entry with undecodable name in %s", path)
                    continue
                names.append(entry.name)
        names.sort()
        return names

    async def _branch_or_leaf(self, address: RelativePath) -> BranchOrLeaf:
        try:
            mode = (await asyncio.to_thread(os.stat, self.full_path(address))).st_mode
        except FileNotFoundError:
            raise MissingAddressError(f"Nothing at {address}") from None
        if stat_module.S_ISDIR(mode):
            return Branch(address)
        if stat_module.S_ISREG(mode):
            return Leaf(address)
        raise BackendError(f"Neither file nor directory: {self.full_path(address)}")

    def __repr__(self) -> str:
        return f"FileSystemStore({str(self.base_directory)!r})"
