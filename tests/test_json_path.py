"""Tests for JSON path parsing and the JsonPath address."""

import pickle

import pytest

from dazzlestore import (
    Index,
    JsonPath,
    Key,
    PathParseError,
    parse_path,
)


class TestParsePath:
    """Test the dotted/bracketed path syntax."""

    def test_keys_and_index(self):
        assert parse_path("a.b[2].c") == [Key("a"), Key("b"), Index(2), Key("c")]

    def test_consecutive_indexes(self):
        assert parse_path("x[0][1]") == [Key("x"), Index(0), Index(1)]

    def test_leading_index_without_key(self):
        assert parse_path("[3].name") == [Index(3), Key("name")]

    def test_empty_string_is_root(self):
        assert parse_path("") == []

    def test_empty_chunks_are_skipped(self):
        assert parse_path("a..b") == [Key("a"), Key("b")]

    def test_multi_digit_index(self):
        assert parse_path("list[120]") == [Key("list"), Index(120)]

    @pytest.mark.parametrize("text", ["a]", "a[1", "a[x]", "a[]", "a[-1]", "a[1]b", "[[1]]"])
    def test_malformed_paths_fail(self, text):
        with pytest.raises(PathParseError):
            parse_path(text)

    def test_error_names_the_chunk(self):
        with pytest.raises(PathParseError) as exc_info:
            parse_path("ok.bad]")

        assert exc_info.value.chunk == "bad]"
        assert exc_info.value.path == "ok.bad]"
        assert "bad]" in str(exc_info.value)

    def test_parse_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse_path("a]")


class TestPathParts:
    """Test Key and Index parts."""

    def test_string_forms(self):
        assert str(Key("a")) == ".a"
        assert str(Index(2)) == "[2]"

    def test_to_key(self):
        assert Key("a").to_key() == "a"
        assert Index(2).to_key() == "2"

    def test_index_rejects_negative(self):
        with pytest.raises(ValueError):
            Index(-1)

    def test_index_rejects_bool(self):
        with pytest.raises(TypeError):
            Index(True)

    def test_parts_are_hashable(self):
        assert len({Key("a"), Key("a"), Index(0)}) == 2


class TestJsonPath:
    """Test the JsonPath address."""

    def test_string_form(self):
        assert str(JsonPath.parse("a.b[0].c")) == "a.b[0].c"
        assert str(JsonPath.parse("[0].a")) == "[0].a"
        assert str(JsonPath()) == ""

    def test_append_part(self):
        path = JsonPath.parse("list")

        assert str(path.append(Index(4))) == "list[4]"
        assert str(path.append("name")) == "list.name"
        assert str(path.append(3)) == "list[3]"

    def test_append_is_not_in_place(self):
        path = JsonPath.parse("a")
        path.append("b")

        assert str(path) == "a"

    def test_append_address_concatenates(self):
        joined = JsonPath.parse("a.b").append(JsonPath.parse("c[1]"))

        assert joined == JsonPath.parse("a.b.c[1]")

    def test_path_parses_and_appends(self):
        assert JsonPath.parse("test").path("deeper[1]") == JsonPath.parse("test.deeper[1]")

    def test_structural_equality(self):
        assert JsonPath.parse("a[0]") == JsonPath([Key("a"), Index(0)])
        assert JsonPath.parse("a[0]") != JsonPath.parse("a.0")
        assert hash(JsonPath.parse("a.b")) == hash(JsonPath(["a", "b"]))

    def test_own_name_and_parts(self):
        path = JsonPath.parse("a.b[2]")

        assert path.own_name() == "2"
        assert path.as_parts() == ["a", "b", "2"]
        assert JsonPath().own_name() == ""

    def test_parent(self):
        assert JsonPath.parse("a.b[2]").parent() == JsonPath.parse("a.b")
        assert JsonPath().parent() is None

    def test_immutable(self):
        path = JsonPath.parse("a")

        with pytest.raises(AttributeError):
            path._parts = ()

    def test_rejects_foreign_parts(self):
        with pytest.raises(TypeError):
            JsonPath([1.5])

    def test_pickles(self):
        path = JsonPath.parse("a.b[3]")

        assert pickle.loads(pickle.dumps(path)) == path
