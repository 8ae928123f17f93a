"""Tests for the address filtering wrapper."""

import httpx
import pytest

from dazzlestore import ABSENT, Address, BackendError, JsonPath, SuppressedWriteError
from dazzlestore.aio import (
    AddressBinding,
    AirtablePath,
    AirtableStore,
    AsyncStore,
    Capability,
    FilterAddressesWrapper,
    RateLimiter,
    collect,
    filter_store,
    get_tree_paths,
    ignore_keys,
    json_value_store,
)


def hide_underscored(address):
    return not address.own_name().startswith("_")


class Name(Address):
    __slots__ = ()


class BrokenListing(AsyncStore):
    """Lists a few children, then fails."""

    address_type = Name
    bindings = {Name: AddressBinding({Capability.LIST})}

    async def _list(self, address):
        for name in ["a", "_b", "c"]:
            yield name, address.append(name)
        raise BackendError("connection lost")


@pytest.fixture
def document():
    return {
        "_ignore": {"haha": "hidden"},
        "another": {"basic": [1, 2, 3, {"hello": "there"}, {"_why": "hidden"}]},
        "wow": {"hello": "world"},
    }


class TestVisibility:
    """Test what the wrapper shows and hides."""

    @pytest.mark.asyncio
    async def test_walk_hides_underscored_keys(self, document):
        filtered = FilterAddressesWrapper(json_value_store(document), hide_underscored)

        paths = await get_tree_paths(filtered)

        for expected in ["another", "another.basic[2]", "another.basic[3].hello", "wow.hello"]:
            assert expected in paths
        for hidden in ["_ignore", "_ignore.haha", "another.basic[4]._why"]:
            assert hidden not in paths

    @pytest.mark.asyncio
    async def test_list_is_filtered(self):
        filtered = filter_store(json_value_store({"a": 1, "_b": 2}), hide_underscored)

        entries = await collect(filtered.root().list())

        assert [str(location) for _, location in entries] == ["a"]

    @pytest.mark.asyncio
    async def test_hidden_reads_are_absent(self):
        filtered = filter_store(json_value_store({"a": 1, "_b": 2}), hide_underscored)

        assert await filtered.path("a").read() == 1
        assert await filtered.path("_b").read() is ABSENT
        assert not await filtered.path("_b").exists()
        assert await filtered.path("a").exists()

    @pytest.mark.asyncio
    async def test_hidden_writes_are_rejected(self):
        inner = json_value_store({"a": 1, "_b": 2})
        filtered = filter_store(inner, hide_underscored)

        with pytest.raises(SuppressedWriteError):
            await filtered.path("_b").write(3)
        with pytest.raises(SuppressedWriteError):
            await filtered.path("_b").delete()

        assert await inner.path("_b").read() == 2

    @pytest.mark.asyncio
    async def test_hidden_inserts_are_rejected(self):
        filtered = filter_store(json_value_store({"_list": []}), hide_underscored)

        with pytest.raises(SuppressedWriteError):
            await collect(filtered.path("_list").insert([1]))

    @pytest.mark.asyncio
    async def test_visible_writes_pass_through(self):
        inner = json_value_store({})
        filtered = filter_store(inner, hide_underscored)

        await filtered.path("kept").write("yes")
        added = await collect(filtered.path("items").insert([1, 2]))

        assert await inner.root().read() == {"kept": "yes", "items": [1, 2]}
        assert [str(location) for _, location in added] == ["items[0]", "items[1]"]

    @pytest.mark.asyncio
    async def test_classification_is_not_filtered(self, document):
        filtered = FilterAddressesWrapper(json_value_store(document), hide_underscored)

        assert (await filtered.path("_ignore").branch_or_leaf()).is_branch

    def test_same_capabilities_as_wrapped_store(self):
        inner = json_value_store()
        filtered = filter_store(inner, hide_underscored)

        assert filtered.describe() == inner.describe()
        assert filtered.supports(Capability.INSERT)
        assert filtered.unwrap() is inner
        assert filtered.address_type is JsonPath


class TestTracking:
    """Test the record of filtered addresses."""

    @pytest.mark.asyncio
    async def test_tracks_listed_hidden_addresses(self, document):
        filtered = FilterAddressesWrapper(json_value_store(document), hide_underscored)

        await get_tree_paths(filtered)

        assert filtered.was_filtered("_ignore")
        assert filtered.was_filtered(JsonPath.parse("another.basic[4]._why"))
        assert not filtered.was_filtered("_ignore.haha")
        assert filtered.get_filtered_count() == 2

        filtered.clear_tracking()
        assert filtered.get_filtered_count() == 0

    @pytest.mark.asyncio
    async def test_tracking_disabled(self, document):
        filtered = FilterAddressesWrapper(
            json_value_store(document), hide_underscored, track_filtered=False
        )

        await get_tree_paths(filtered)

        assert not filtered.was_filtered("_ignore")
        assert filtered.get_filtered_count() == 0


class TestIgnoreKeys:
    """Test the prefix-based convenience wrapper."""

    @pytest.mark.asyncio
    async def test_hides_any_underscored_part(self, document):
        filtered = ignore_keys(json_value_store(document))

        assert await filtered.path("_ignore.haha").read() is ABSENT
        assert await filtered.path("another.basic[4]._why").read() is ABSENT
        assert await filtered.path("wow.hello").read() == "world"

    @pytest.mark.asyncio
    async def test_custom_prefix(self):
        filtered = ignore_keys(json_value_store({"tmp_a": 1, "b": 2}), prefix="tmp_")

        assert await get_tree_paths(filtered) == ["b"]


class TestPassThrough:
    """Test errors, queries and inserts flowing through the wrapper."""

    @pytest.mark.asyncio
    async def test_listing_error_after_visible_items(self):
        filtered = FilterAddressesWrapper(BrokenListing(), hide_underscored)
        seen = []

        with pytest.raises(BackendError):
            async for _, address in filtered.list(Name()):
                seen.append(str(address))

        assert seen == ["a", "c"]
        assert filtered.was_filtered("_b")

    @pytest.mark.asyncio
    async def test_query_results_are_filtered(self, fake_airtable):
        client = httpx.AsyncClient(transport=httpx.MockTransport(fake_airtable))
        store = AirtableStore(token="secret", client=client, limiter=RateLimiter(capacity=100))
        filtered = FilterAddressesWrapper(store, lambda address: address.record != "rec2")

        results = await collect(filtered.query(AirtablePath("app1", "tbl1"), "{done}"))

        assert [entry.id for entry, _ in results] == ["rec0", "rec4"]
        assert filtered.was_filtered("app1/tbl1/rec2")
        await client.aclose()

    @pytest.mark.asyncio
    async def test_insert_reports_only_visible_children(self):
        inner = json_value_store({"xs": []})
        filtered = ignore_keys(inner, prefix="1")

        added = await collect(filtered.path("xs").insert(["a", "b", "c", "d"]))

        assert [str(location) for _, location in added] == ["xs[0]", "xs[2]", "xs[3]"]
        assert await inner.path("xs").read() == ["a", "b", "c", "d"]
        assert filtered.was_filtered("xs[1]")
