"""Target class introspection.

Finds the attributes of a class that a request can be bound onto and
strips their annotations down to a value type plus any source markers.
Runs once per class, at compile time.
"""

import dataclasses
import types
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Annotated, Any, ClassVar, Union, get_args, get_origin, get_type_hints

from reqmap.errors import ConfigurationError
from reqmap.http.forms import UploadFile

_UPLOAD_LIST_ORIGINS = (list, Sequence)


@dataclass(frozen=True, slots=True)
class PropertySpec:
    """A writable attribute of a target class.

    Attributes:
        name: Attribute name, also the canonical request field name.
        annotation: The annotation as declared (``Annotated`` included).
        value_type: The annotation with ``Annotated`` and ``| None`` removed.
        markers: ``Annotated`` metadata found on the annotation.
    """

    name: str
    annotation: Any
    value_type: Any
    markers: tuple[Any, ...] = ()


def unwrap_annotation(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    """Split *annotation* into ``(value_type, metadata)``.

    Peels ``Annotated[...]`` layers (collecting their metadata) and
    ``X | None`` / ``Optional[X]`` wrappers, in any nesting order.
    """
    metadata: list[Any] = []
    while True:
        origin = get_origin(annotation)
        if origin is Annotated:
            annotation, *extra = get_args(annotation)
            metadata.extend(extra)
            continue
        if origin is Union or origin is types.UnionType:
            args = [a for a in get_args(annotation) if a is not type(None)]
            if len(args) == 1:
                annotation = args[0]
                continue
        return annotation, tuple(metadata)


def is_upload(value_type: Any) -> bool:
    """True for a single uploaded file annotation."""
    return value_type is UploadFile


def is_upload_list(value_type: Any) -> bool:
    """True for ``list[UploadFile]`` / ``Sequence[UploadFile]`` annotations."""
    return get_origin(value_type) in _UPLOAD_LIST_ORIGINS and get_args(value_type) == (UploadFile,)


def is_frozen(cls: type) -> bool:
    """True if *cls* is a frozen dataclass (attributes cannot be assigned)."""
    if not dataclasses.is_dataclass(cls):
        return False
    return bool(cls.__dataclass_params__.frozen)  # type: ignore[attr-defined]


def _resolve_hints(obj: Any, owner: type) -> dict[str, Any]:
    try:
        return get_type_hints(obj, include_extras=True)
    except NameError as e:
        msg = f"Cannot resolve annotations of {owner.__qualname__}: {e}"
        raise ConfigurationError(msg) from e


def writable_properties(cls: type) -> list[PropertySpec]:
    """List the bindable attributes of *cls* in declaration order.

    Annotated public attributes come first (base classes before subclasses),
    followed by ``property`` objects that define a setter. Names starting
    with ``_`` and ``ClassVar`` annotations are skipped.
    """
    specs: dict[str, PropertySpec] = {}

    for name, hint in _resolve_hints(cls, cls).items():
        if name.startswith("_") or get_origin(hint) is ClassVar:
            continue
        if isinstance(getattr(cls, name, None), property):
            continue
        value_type, markers = unwrap_annotation(hint)
        specs[name] = PropertySpec(name, hint, value_type, markers)

    for klass in reversed(cls.__mro__):
        for name, attr in vars(klass).items():
            if name.startswith("_") or not isinstance(attr, property):
                continue
            if attr.fset is None:
                # Overridden as read-only further down the MRO
                specs.pop(name, None)
                continue
            hint = Any
            if attr.fget is not None:
                hint = _resolve_hints(attr.fget, cls).get("return", Any)
            value_type, markers = unwrap_annotation(hint)
            specs[name] = PropertySpec(name, hint, value_type, markers)

    return list(specs.values())
