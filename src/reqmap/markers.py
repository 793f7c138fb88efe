"""Source markers and the marker registry.

A marker declares which part of the request an attribute is read from.
Attach it through ``Annotated`` metadata, either as an instance or as the
class itself::

    class Search:
        q: Annotated[str, FromQuery()] = ""
        token: Annotated[str, FromHeader] = ""

Or mark a whole class by using a marker instance as a decorator. Every
annotated attribute without its own marker then binds from that source::

    @FromForm()
    class Signup:
        email: str = ""
        age: int = 0

Class markers are inherited. Attribute markers always win over class
markers; within each level the precedence is HEADER > FORM > QUERY > BODY.
"""

from collections.abc import Iterable
from enum import Enum
from typing import Any, TypeVar

from reqmap.errors import InvalidMarker

T = TypeVar("T")

# Attribute on decorated classes holding their class-level markers
CLASS_MARKERS_ATTR = "__reqmap_markers__"


class Source(Enum):
    """The request sub-structure an attribute binds from."""

    HEADER = "header"
    QUERY = "query"
    FORM = "form"
    BODY = "body"


# First match wins
PRECEDENCE: tuple[Source, ...] = (Source.HEADER, Source.FORM, Source.QUERY, Source.BODY)


class Marker:
    """Base class for source markers.

    Subclass it to define custom markers, then register the subclass with
    ``MarkerRegistry.register`` (or ``reqmap.register_marker``).
    """

    __slots__ = ()

    def __call__(self, cls: type[T]) -> type[T]:
        """Mark every bindable attribute of *cls* with this marker."""
        existing = getattr(cls, CLASS_MARKERS_ATTR, ())
        setattr(cls, CLASS_MARKERS_ATTR, (*existing, self))
        return cls

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))


class FromHeader(Marker):
    """Bind from a request header (case-insensitive)."""

    __slots__ = ()


class FromQuery(Marker):
    """Bind from a query string parameter."""

    __slots__ = ()


class FromForm(Marker):
    """Bind from a form field or uploaded file."""

    __slots__ = ()


class FromBody(Marker):
    """Bind from the whole request body."""

    __slots__ = ()


def class_markers(cls: type) -> tuple[Any, ...]:
    """Return the markers applied to *cls* or inherited from its bases."""
    return tuple(getattr(cls, CLASS_MARKERS_ATTR, ()))


def _is_present(marker_type: type, markers: Iterable[Any]) -> bool:
    for marker in markers:
        if isinstance(marker, marker_type):
            return True
        if isinstance(marker, type) and issubclass(marker, marker_type):
            return True
    return False


class MarkerRegistry:
    """Source -> marker classes. Grows only; markers are never removed.

    Each registry starts with the four built-in markers. Registering on one
    registry never affects another.
    """

    __slots__ = ("_markers",)

    def __init__(self) -> None:
        self._markers: dict[Source, set[type]] = {
            Source.HEADER: {FromHeader},
            Source.QUERY: {FromQuery},
            Source.FORM: {FromForm},
            Source.BODY: {FromBody},
        }

    def register(self, source: Source, marker_type: Any) -> None:
        """Make *marker_type* select *source*.

        Raises:
            InvalidMarker: If *marker_type* is not a ``Marker`` subclass.
        """
        if not isinstance(marker_type, type) or not issubclass(marker_type, Marker):
            raise InvalidMarker(marker_type, source)
        self._markers[Source(source)].add(marker_type)

    def markers_for(self, source: Source) -> frozenset[type]:
        """Return a snapshot of the marker classes registered for *source*."""
        return frozenset(self._markers[source])

    def classify(self, source: Source, markers: Iterable[Any]) -> bool:
        """True if any marker registered for *source* is among *markers*."""
        markers = tuple(markers)
        return any(_is_present(marker_type, markers) for marker_type in self._markers[source])

    def resolve(
        self,
        member_markers: Iterable[Any],
        type_markers: Iterable[Any] = (),
    ) -> Source | None:
        """Pick the source for an attribute.

        Attribute-level markers are checked first, then class-level markers.
        Returns ``None`` when neither level selects a source.
        """
        for markers in (tuple(member_markers), tuple(type_markers)):
            for source in PRECEDENCE:
                if self.classify(source, markers):
                    return source
        return None
