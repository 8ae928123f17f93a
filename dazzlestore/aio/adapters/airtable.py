"""Airtable REST store.

Addresses follow Airtable's hierarchy, one part per level:

    AirtablePath()                       all bases the token can see
    AirtablePath(base)                   tables of a base
    AirtablePath(base, table)            records of a table
    AirtablePath(base, table, record)    one record's fields

List endpoints are paginated: each response carries the objects under a
level-specific key and, when more remain, an ``offset`` to send back with
the next request. Every HTTP request first passes a shared rate limiter.
"""

import logging
from contextlib import aclosing
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple
from urllib.parse import quote

import httpx

from ..._common.address import ABSENT, Address, Branch, BranchOrLeaf, Existence, Leaf
from ..._common.errors import BackendError, CapabilityNotSupportedError
from ...config import AirtableConfig, ensure_valid
from ..core.capabilities import AddressBinding, Capability
from ..core.store import AsyncStore, ChildEntry
from ..ratelimiter import RateLimiter


logger = logging.getLogger(__name__)

BASES, TABLES, RECORDS, RECORD = 0, 1, 2, 3


class AirtableError(BackendError):
    """Raised when an Airtable response does not have the expected shape."""
    pass


class AirtablePath(Address):
    """Address of bases, a base, a table or a record, by id.

    Tables may also be addressed by name, as the API allows.
    """

    __slots__ = ()

    def __init__(self, *ids: str):
        if len(ids) > RECORD:
            raise ValueError(f"Airtable addresses have at most {RECORD} parts")
        super().__init__(ids)

    @classmethod
    def _coerce_part(cls, part: Any) -> str:
        if isinstance(part, AirtableEntry):
            return part.id
        if not isinstance(part, str) or not part:
            raise TypeError(f"Airtable id must be a non-empty string, got {part!r}")
        return part

    @classmethod
    def parse(cls, text: str) -> 'AirtablePath':
        return cls(*[name for name in text.split("/") if name])

    def append(self, part: Any) -> 'AirtablePath':
        address = super().append(part)
        if len(address) > RECORD:
            raise ValueError(f"Airtable addresses have at most {RECORD} parts")
        return address

    @property
    def base(self) -> Optional[str]:
        return self.parts[0] if len(self) > 0 else None

    @property
    def table(self) -> Optional[str]:
        return self.parts[1] if len(self) > 1 else None

    @property
    def record(self) -> Optional[str]:
        return self.parts[2] if len(self) > 2 else None


@dataclass(frozen=True)
class AirtableEntry:
    """A listed base, table or record.

    Attributes:
        id: Airtable id
        data: Metadata for bases and tables, fields for records
    """

    id: str
    data: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def __str__(self) -> str:
        return self.id


@dataclass(frozen=True)
class FilterByFormula:
    """Query selecting records with an Airtable formula, e.g. ``Find("x", {title})``."""

    formula: str


class AirtableStore(AsyncStore):
    """Store over the Airtable REST API.

    Args:
        token: Personal access token; ignored when ``config`` is given
        config: Full configuration
        client: httpx.AsyncClient to use instead of creating one
        limiter: RateLimiter to share with other stores

    Example:
        async with AirtableStore(config=AirtableConfig.from_env()) as store:
            async for entry, address in store.list(AirtablePath("appXXXX", "Tasks")):
                print(entry.id, entry.data)
    """

    address_type = AirtablePath
    bindings = {
        AirtablePath: AddressBinding(
            {Capability.READ, Capability.WRITE, Capability.LIST,
             Capability.INSERT, Capability.QUERY, Capability.TREE},
            (dict, Existence),
        ),
    }

    def __init__(
        self,
        token: Optional[str] = None,
        config: Optional[AirtableConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        limiter: Optional[RateLimiter] = None
    ):
        super().__init__()
        self.config = config or AirtableConfig(token=token or "")
        ensure_valid(self.config)
        self.limiter = limiter or RateLimiter.from_config(self.config.rate_limit)

        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=self.config.timeout_seconds)
        self._headers = {
            "Authorization": f"Bearer {self.config.token}",
            "Content-Type": "application/json",
        }
        self.request_count = 0

    def _url(self, *segments: str) -> str:
        return "/".join([self.config.base_url.rstrip("/")] + [quote(s, safe="") for s in segments])

    async def request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, str]] = None,
        body: Optional[Any] = None,
        allow_missing: bool = False
    ) -> Optional[Any]:
        """Send one rate-limited request and decode its JSON body.

        Args:
            method: HTTP method
            url: Absolute URL
            params: Query parameters
            body: JSON body
            allow_missing: Return None on 404 instead of raising

        Raises:
            httpx.HTTPStatusError: For any other error status
        """
        await self.limiter.ask()
        self.request_count += 1
        logger.debug("%s %s %s", method, url, params or "")

        response = await self.client.request(
            method, url, params=params, json=body, headers=self._headers
        )
        if allow_missing and response.status_code == 404:
            return None
        response.raise_for_status()
        return response.json()

    async def get_paginated(
        self,
        url: str,
        object_key: str,
        params: Optional[Dict[str, str]] = None
    ) -> AsyncIterator[Tuple[str, Dict[str, Any]]]:
        """Follow ``offset`` through every page of a list endpoint.

        Yields:
            ``(id, object)`` for each object under ``object_key``
        """
        offset = None
        while True:
            page_params = dict(params or {})
            if offset:
                page_params["offset"] = offset

            response = await self.request("GET", url, page_params)
            objects = response.get(object_key) if isinstance(response, dict) else None
            if not isinstance(objects, list):
                raise AirtableError(f"No {object_key} list in response: {response!r}")

            for obj in objects:
                object_id = obj.get("id") if isinstance(obj, dict) else None
                if not isinstance(object_id, str):
                    raise AirtableError(f"Object without an id in {object_key}: {obj!r}")
                yield object_id, obj

            offset = response.get("offset")
            if not offset:
                break

    # Capability hooks

    def _level(self, address: AirtablePath, *allowed: int, operation: str) -> int:
        if len(address) not in allowed:
            raise CapabilityNotSupportedError(
                f"Cannot {operation} at {address!r}"
            )
        return len(address)

    async def _list(self, address: AirtablePath) -> AsyncIterator[ChildEntry]:
        level = self._level(address, BASES, TABLES, RECORDS, operation="list")
        if level == BASES:
            pages = self.get_paginated(self._url("meta", "bases"), "bases")
        elif level == TABLES:
            pages = self.get_paginated(self._url("meta", "bases", address.base, "tables"), "tables")
        else:
            pages = self.get_paginated(self._url(address.base, address.table), "records")

        async with aclosing(pages):
            async for object_id, obj in pages:
                data = obj.get("fields", {}) if level == RECORDS else obj
                yield AirtableEntry(object_id, data), address.append(object_id)

    async def _query(self, address: AirtablePath, query: Any) -> AsyncIterator[ChildEntry]:
        self._level(address, RECORDS, operation="query")
        if isinstance(query, str):
            query = FilterByFormula(query)
        if not isinstance(query, FilterByFormula):
            raise CapabilityNotSupportedError(f"Unsupported Airtable query: {query!r}")

        pages = self.get_paginated(
            self._url(address.base, address.table), "records",
            {"filterByFormula": query.formula}
        )
        async with aclosing(pages):
            async for object_id, obj in pages:
                yield AirtableEntry(object_id, obj.get("fields", {})), address.append(object_id)

    async def _insert(self, address: AirtablePath, items: List[Any]) -> AsyncIterator[ChildEntry]:
        self._level(address, RECORDS, operation="insert")
        url = self._url(address.base, address.table)
        size = self.config.batch_size

        for start in range(0, len(items), size):
            batch = items[start:start + size]
            body = {"records": [{"fields": fields} for fields in batch]}
            response = await self.request("POST", url, body=body)

            records = response.get("records") if isinstance(response, dict) else None
            if not isinstance(records, list):
                raise AirtableError(f"Airtable response does not contain records: {response!r}")
            for record in records:
                record_id = record.get("id")
                if not isinstance(record_id, str):
                    raise AirtableError(f"Airtable record does not have an id: {record!r}")
                yield AirtableEntry(record_id, record.get("fields", {})), address.append(record_id)

    async def _read(self, address: AirtablePath, value_type: Any) -> Any:
        self._level(address, RECORD, operation="read")
        record = await self.request(
            "GET", self._url(address.base, address.table, address.record), allow_missing=True
        )
        if record is None:
            return ABSENT
        return record.get("fields", {})

    async def _write(self, address: AirtablePath, value: Any, value_type: Any) -> None:
        self._level(address, RECORD, operation="write")
        url = self._url(address.base, address.table, address.record)
        if value is ABSENT:
            await self.request("DELETE", url, allow_missing=True)
        else:
            await self.request("PATCH", url, body={"fields": value})

    async def _branch_or_leaf(self, address: AirtablePath) -> BranchOrLeaf:
        if len(address) == RECORD:
            return Leaf(address)
        return Branch(address)

    async def close(self):
        """Close the HTTP client if this store created it."""
        if self._owns_client:
            await self.client.aclose()

    def __repr__(self) -> str:
        return f"AirtableStore({self.config.base_url!r})"
