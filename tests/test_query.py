"""Tests for junction.http.query: immutable QueryParams."""

import pytest

from junction.http.query import QueryParams


class TestQueryParams:
    def test_getitem(self) -> None:
        q = QueryParams("q=hello&page=2")
        assert q["q"] == "hello"
        assert q["page"] == "2"

    def test_bytes(self) -> None:
        assert QueryParams(b"q=hello")["q"] == "hello"

    def test_missing_key_raises(self) -> None:
        with pytest.raises(KeyError):
            QueryParams("q=hello")["missing"]

    def test_contains_and_len(self) -> None:
        q = QueryParams("a=1&b=2&c=3")
        assert "a" in q
        assert "z" not in q
        assert len(q) == 3

    def test_repeated_keys(self) -> None:
        q = QueryParams("tag=a&tag=b")
        assert q["tag"] == "a"
        assert q.get_list("tag") == ["a", "b"]
        assert q.get_list("none") == []

    def test_blank_values_kept(self) -> None:
        assert QueryParams("empty=")["empty"] == ""

    def test_from_mapping(self) -> None:
        q = QueryParams({"page": 3})
        assert q["page"] == "3"
        assert q.raw == ""

    def test_get_int(self) -> None:
        q = QueryParams("page=2&bad=x")
        assert q.get_int("page") == 2
        assert q.get_int("bad", 1) == 1
        assert q.get_int("missing") is None

    def test_get_bool(self) -> None:
        q = QueryParams("a=true&b=0&c=on")
        assert q.get_bool("a") is True
        assert q.get_bool("b") is False
        assert q.get_bool("c") is True
        assert q.get_bool("missing", False) is False
