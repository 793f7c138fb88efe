"""Tests for reqmap.markers — markers, class markers, and the registry."""

import pytest

from reqmap.errors import InvalidMarker
from reqmap.markers import (
    FromBody,
    FromForm,
    FromHeader,
    FromQuery,
    Marker,
    MarkerRegistry,
    Source,
    class_markers,
)


class FromCookie(Marker):
    """Custom marker used by the registration tests."""


class StrictQuery(FromQuery):
    """Subclass of a built-in marker."""


class TestMarker:
    def test_equality_by_type(self) -> None:
        assert FromQuery() == FromQuery()
        assert FromQuery() != FromHeader()
        assert hash(FromQuery()) == hash(FromQuery())

    def test_repr(self) -> None:
        assert repr(FromHeader()) == "FromHeader()"

    def test_class_decorator(self) -> None:
        @FromQuery()
        class Search:
            q: str = ""

        assert class_markers(Search) == (FromQuery(),)

    def test_class_markers_stack(self) -> None:
        @FromHeader()
        @FromQuery()
        class Both:
            pass

        assert class_markers(Both) == (FromQuery(), FromHeader())

    def test_class_markers_inherited(self) -> None:
        @FromForm()
        class Base:
            pass

        class Child(Base):
            pass

        assert class_markers(Child) == (FromForm(),)

    def test_unmarked_class(self) -> None:
        class Plain:
            pass

        assert class_markers(Plain) == ()


class TestMarkerRegistry:
    def test_defaults(self) -> None:
        registry = MarkerRegistry()
        assert registry.markers_for(Source.HEADER) == frozenset({FromHeader})
        assert registry.markers_for(Source.QUERY) == frozenset({FromQuery})
        assert registry.markers_for(Source.FORM) == frozenset({FromForm})
        assert registry.markers_for(Source.BODY) == frozenset({FromBody})

    def test_classify_instance_and_class(self) -> None:
        registry = MarkerRegistry()
        assert registry.classify(Source.QUERY, [FromQuery()])
        assert registry.classify(Source.QUERY, [FromQuery])
        assert not registry.classify(Source.QUERY, [FromHeader()])

    def test_classify_subclass_marker(self) -> None:
        registry = MarkerRegistry()
        assert registry.classify(Source.QUERY, [StrictQuery()])

    def test_classify_ignores_unrelated_metadata(self) -> None:
        registry = MarkerRegistry()
        assert not registry.classify(Source.QUERY, ["doc string", 42])

    def test_register_custom_marker(self) -> None:
        registry = MarkerRegistry()
        registry.register(Source.HEADER, FromCookie)
        assert registry.classify(Source.HEADER, [FromCookie()])
        assert FromHeader in registry.markers_for(Source.HEADER)

    def test_register_rejects_non_marker(self) -> None:
        registry = MarkerRegistry()
        with pytest.raises(InvalidMarker) as exc_info:
            registry.register(Source.QUERY, str)
        assert exc_info.value.marker is str
        assert exc_info.value.source is Source.QUERY

    def test_register_rejects_marker_instance(self) -> None:
        with pytest.raises(InvalidMarker):
            MarkerRegistry().register(Source.QUERY, FromQuery())

    def test_registries_are_independent(self) -> None:
        first = MarkerRegistry()
        second = MarkerRegistry()
        first.register(Source.QUERY, FromCookie)
        assert FromCookie not in second.markers_for(Source.QUERY)


class TestResolve:
    def test_unmarked(self) -> None:
        assert MarkerRegistry().resolve([], []) is None

    @pytest.mark.parametrize(
        ("markers", "expected"),
        [
            ([FromQuery(), FromHeader()], Source.HEADER),
            ([FromQuery(), FromForm()], Source.FORM),
            ([FromBody(), FromQuery()], Source.QUERY),
            ([FromBody(), FromForm(), FromHeader()], Source.HEADER),
            ([FromBody()], Source.BODY),
        ],
    )
    def test_precedence(self, markers, expected: Source) -> None:
        assert MarkerRegistry().resolve(markers) is expected

    def test_member_markers_win_over_type_markers(self) -> None:
        registry = MarkerRegistry()
        assert registry.resolve([FromQuery()], [FromHeader()]) is Source.QUERY

    def test_type_markers_used_as_fallback(self) -> None:
        registry = MarkerRegistry()
        assert registry.resolve([], [FromForm()]) is Source.FORM
