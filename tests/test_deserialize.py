"""Tests for reqmap.deserialize — body deserializers."""

from dataclasses import dataclass, field
from typing import Any

from reqmap.config import MapperConfig
from reqmap.deserialize import Deserializer, JSONDeserializer, NullDeserializer


@dataclass
class Point:
    x: int
    y: int = 0
    label: str = field(default="", init=True)


class TestNullDeserializer:
    def test_always_none(self) -> None:
        assert NullDeserializer().deserialize('{"x": 1}', dict) is None

    def test_is_default(self) -> None:
        assert isinstance(MapperConfig().deserializer, NullDeserializer)

    def test_satisfies_protocol(self) -> None:
        assert isinstance(NullDeserializer(), Deserializer)


class TestJSONDeserializer:
    def test_dict(self) -> None:
        assert JSONDeserializer().deserialize('{"a": 1}', dict) == {"a": 1}

    def test_parameterized_generic(self) -> None:
        assert JSONDeserializer().deserialize("[1, 2]", list[int]) == [1, 2]

    def test_any(self) -> None:
        assert JSONDeserializer().deserialize('"text"', Any) == "text"

    def test_shape_mismatch(self) -> None:
        assert JSONDeserializer().deserialize("[1, 2]", dict) is None

    def test_invalid_json(self) -> None:
        assert JSONDeserializer().deserialize("{not json", dict) is None

    def test_dataclass(self) -> None:
        point = JSONDeserializer().deserialize('{"x": 1, "y": 2, "extra": true}', Point)
        assert point == Point(1, 2)

    def test_dataclass_missing_required(self) -> None:
        assert JSONDeserializer().deserialize('{"y": 2}', Point) is None

    def test_dataclass_from_non_object(self) -> None:
        assert JSONDeserializer().deserialize("[1]", Point) is None

    def test_satisfies_protocol(self) -> None:
        assert isinstance(JSONDeserializer(), Deserializer)

    def test_nesting_beyond_recursion_limit(self) -> None:
        assert JSONDeserializer().deserialize("[" * 200_000, Any) is None
