"""reqmap exception hierarchy.

Shared across the registries, the compiler, and the binders so every
module raises and catches the same types.

Configuration errors surface when a target class is compiled, before any
request is bound. Name errors surface for attribute names that can never
be looked up. Soft failures (missing or unparsable fields) never raise.
"""

from typing import Any


def _type_name(tp: Any) -> str:
    return getattr(tp, "__qualname__", None) or getattr(tp, "__name__", None) or repr(tp)


class ReqmapError(Exception):
    """Base for all reqmap-specific errors."""


class ConfigurationError(ReqmapError):
    """Raised when a target class or a registry is set up incorrectly.

    Raised at compile time, never per request. Not retried.
    """


class InvalidMarker(ConfigurationError):  # noqa: N818
    """A marker registration named something that is not a ``Marker`` subclass."""

    def __init__(self, marker: Any, source: Any = None) -> None:
        self.marker = marker
        self.source = source
        where = f" for source {source.name}" if source is not None else ""
        super().__init__(
            f"Cannot register {marker!r}{where}: markers must be subclasses of reqmap.Marker"
        )


class NoConverterRegistered(ConfigurationError):  # noqa: N818
    """No scalar converter exists for a value type.

    Attributes:
        value_type: The annotation that has no converter.
        target: The class being compiled, when known.
        attribute: The attribute being compiled, when known.
        source: The request source the attribute was marked with, when known.
    """

    def __init__(
        self,
        value_type: Any,
        *,
        target: type | None = None,
        attribute: str | None = None,
        source: Any = None,
    ) -> None:
        self.value_type = value_type
        self.target = target
        self.attribute = attribute
        self.source = source
        msg = f"No converter registered for {_type_name(value_type)}"
        if target is not None and attribute is not None:
            msg += f" (attribute {_type_name(target)}.{attribute}"
            if source is not None:
                msg += f" bound from {source.name}"
            msg += ")"
        super().__init__(msg)


class InvalidName(ReqmapError, ValueError):  # noqa: N818
    """An attribute name is empty and cannot be resolved to lookup keys."""

    def __init__(self, name: str, *, target: type | None = None) -> None:
        self.name = name
        self.target = target
        where = f" on {_type_name(target)}" if target is not None else ""
        super().__init__(f"Attribute name{where} must contain at least one character")


class UnsupportedCharacter(ReqmapError, ValueError):  # noqa: N818
    """An attribute name does not start with an ASCII letter."""

    def __init__(self, name: str, *, target: type | None = None) -> None:
        self.name = name
        self.target = target
        where = f" on {_type_name(target)}" if target is not None else ""
        first = name[0] if name else ""
        super().__init__(
            f"Attribute name {name!r}{where} must start with an ASCII letter, got {first!r}"
        )


class PayloadTooLarge(ReqmapError):  # noqa: N818
    """The declared request body is longer than the configured limit.

    Attributes:
        length: Declared (or actual) body length in bytes.
        limit: The configured ``max_content_length``.
        target: The class being bound, when known.
        attribute: The body-bound attribute, when known.
    """

    def __init__(
        self,
        length: int,
        limit: int,
        *,
        target: type | None = None,
        attribute: str | None = None,
    ) -> None:
        self.length = length
        self.limit = limit
        self.target = target
        self.attribute = attribute
        msg = f"Request body of {length} bytes exceeds limit of {limit} bytes"
        if target is not None and attribute is not None:
            msg += f" (binding {_type_name(target)}.{attribute})"
        super().__init__(msg)
