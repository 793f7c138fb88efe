"""Tests for reqmap.http.query — immutable QueryParams."""

import pytest

from reqmap._internal.multimap import MultiValueMapping
from reqmap.http.query import QueryParams


class TestQueryParams:
    def test_getitem(self) -> None:
        q = QueryParams(b"q=hello&page=2")
        assert q["q"] == "hello"
        assert q["page"] == "2"

    def test_missing_key_raises(self) -> None:
        q = QueryParams(b"q=hello")
        with pytest.raises(KeyError):
            q["missing"]

    def test_names_are_case_sensitive(self) -> None:
        q = QueryParams(b"userId=42")
        assert "userId" in q
        assert "UserId" not in q

    def test_get_list(self) -> None:
        q = QueryParams(b"tag=python&tag=rust&q=hello")
        assert q.get_list("tag") == ["python", "rust"]
        assert q.get_list("missing") == []

    def test_blank_value_preserved(self) -> None:
        q = QueryParams(b"flag=")
        assert q["flag"] == ""
        assert q.get_list("flag") == [""]

    def test_raw(self) -> None:
        assert QueryParams(b"a=1").raw == b"a=1"

    def test_empty(self) -> None:
        q = QueryParams()
        assert len(q) == 0
        assert list(q) == []

    def test_satisfies_multivalue_mapping(self) -> None:
        assert isinstance(QueryParams(b"a=1"), MultiValueMapping)

    def test_lookup_falls_back_to_second_name(self) -> None:
        q = QueryParams(b"UserId=7&UserId=8")
        assert q.lookup(("userId", "UserId")) == ["7", "8"]
        assert q.lookup(("userId", "userid")) is None

    def test_lookup_prefers_first_name(self) -> None:
        q = QueryParams(b"userId=1&UserId=2")
        assert q.lookup(("userId", "UserId")) == ["1"]

    def test_lookup_blank_value_is_present(self) -> None:
        assert QueryParams(b"flag=").lookup(("flag",)) == [""]
