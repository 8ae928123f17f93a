"""Async stores for various backends.

This module contains stores that bridge specific data sources
(memory, JSON documents, filesystems, REST APIs) to the generic
addressable interface, plus the filtering wrapper that decorates them.
"""

from .cell import CellAddress, MemoryCellStore
from .filesystem import RelativePath, FileSystemStore
from .json_store import JsonStore, json_value_store, json_file_store
from .indexed import ItemId, IndexedVecStore
from .airtable import (
    AirtableError,
    AirtablePath,
    AirtableEntry,
    FilterByFormula,
    AirtableStore,
)
from .filtering import FilterAddressesWrapper, ignore_keys

__all__ = [
    'CellAddress',
    'MemoryCellStore',
    'RelativePath',
    'FileSystemStore',
    'JsonStore',
    'json_value_store',
    'json_file_store',
    'ItemId',
    'IndexedVecStore',
    'AirtableError',
    'AirtablePath',
    'AirtableEntry',
    'FilterByFormula',
    'AirtableStore',
    'FilterAddressesWrapper',
    'ignore_keys',
]
