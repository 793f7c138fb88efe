"""Binding operations — one per bound attribute.

Each factory here captures everything an attribute needs at compile time
(lookup names, converter, source accessor) in a closure, so binding a
request is a plain function call with no further introspection.

Binding is best-effort per field: a field that is missing under both
lookup names, or whose value does not convert, leaves the attribute
untouched. A form body that does not parse reads as an empty form.
Only ``PayloadTooLarge`` escapes a bind.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from reqmap._internal.multimap import MultiValueMapping
from reqmap._internal.types import BindFunc, Converter
from reqmap.config import MapperConfig
from reqmap.converters import ConverterRegistry
from reqmap.deserialize import NullDeserializer
from reqmap.errors import NoConverterRegistered, PayloadTooLarge
from reqmap.http.request import Request
from reqmap.introspect import PropertySpec, is_upload, is_upload_list
from reqmap.markers import Source
from reqmap.naming import resolve_names

logger = logging.getLogger("reqmap.binders")

_ACCESSORS: dict[Source, Callable[[Request], MultiValueMapping]] = {
    Source.HEADER: lambda request: request.headers,
    Source.QUERY: lambda request: request.query,
    Source.FORM: lambda request: request.form(),
}


@dataclass(frozen=True, slots=True)
class BindingOperation:
    """One compiled unit of binding work.

    Calling it reads one request field and assigns at most one attribute.

    Attributes:
        attribute: The attribute it assigns.
        source: The request source it reads.
        kind: ``"value"``, ``"file"``, ``"files"``, or ``"body"``.
        names: ``(canonical, alternate)`` lookup keys.
        value_type: The unwrapped annotation of the attribute.
    """

    attribute: str
    source: Source
    kind: str
    names: tuple[str, str]
    value_type: Any
    func: BindFunc = field(repr=False, compare=False)

    def __call__(self, instance: Any, request: Request) -> None:
        self.func(instance, request)


def value_binder(
    prop: PropertySpec,
    source: Source,
    names: tuple[str, str],
    converter: Converter,
) -> BindingOperation:
    """Bind a header, query, or form field through a scalar converter."""
    attribute = prop.name
    accessor = _ACCESSORS[source]

    def bind(instance: Any, request: Request) -> None:
        raw = accessor(request).lookup(names)
        if raw is None:
            return
        value = converter(raw)
        if value is None:
            logger.debug("%s: %r did not convert for %s", source.name, raw, attribute)
            return
        setattr(instance, attribute, value)

    return BindingOperation(attribute, source, "value", names, prop.value_type, bind)


def file_binder(prop: PropertySpec, names: tuple[str, str]) -> BindingOperation:
    """Bind a single uploaded file. Leaves the attribute unset when none was sent."""
    attribute = prop.name

    def bind(instance: Any, request: Request) -> None:
        uploads = request.form().files.lookup(names)
        if uploads is not None:
            setattr(instance, attribute, uploads[0])

    return BindingOperation(attribute, Source.FORM, "file", names, prop.value_type, bind)


def files_binder(prop: PropertySpec, names: tuple[str, str]) -> BindingOperation:
    """Bind every file uploaded under a field.

    Assigns the list when at least one file was sent, ``None`` otherwise.
    """
    attribute = prop.name

    def bind(instance: Any, request: Request) -> None:
        setattr(instance, attribute, request.form().files.lookup(names))

    return BindingOperation(attribute, Source.FORM, "files", names, prop.value_type, bind)


def body_binder(
    target: type,
    prop: PropertySpec,
    names: tuple[str, str],
    converters: ConverterRegistry,
    config: MapperConfig,
) -> BindingOperation:
    """Bind the whole request body.

    Scalar value types go through their registered converter with the
    decoded body as the only value. Anything else is handed to
    ``config.deserializer``. An empty body binds nothing.
    """
    attribute = prop.name
    value_type = prop.value_type
    converter = converters.find(value_type)
    deserializer = config.deserializer
    encoding = config.encoding
    limit = config.max_content_length

    if converter is None and isinstance(deserializer, NullDeserializer):
        logger.warning(
            "%s.%s binds %r from the body but no deserializer is configured; "
            "set MapperConfig.deserializer to enable it",
            target.__qualname__,
            attribute,
            value_type,
        )

    def bind(instance: Any, request: Request) -> None:
        length = request.content_length
        if length is None:
            length = len(request.body())
        if length > limit:
            raise PayloadTooLarge(length, limit, target=target, attribute=attribute)
        if not request.body():
            return

        text = request.text(encoding, errors="replace")
        if converter is not None:
            value = converter([text])
        else:
            value = deserializer.deserialize(text, value_type)
        if value is None:
            logger.debug("BODY: payload did not convert for %s", attribute)
            return
        setattr(instance, attribute, value)

    return BindingOperation(attribute, Source.BODY, "body", names, value_type, bind)


def build_operation(
    target: type,
    prop: PropertySpec,
    source: Source,
    converters: ConverterRegistry,
    config: MapperConfig,
) -> BindingOperation:
    """Build the binding operation for *prop* read from *source*.

    Form attributes typed ``UploadFile`` or ``list[UploadFile]`` bind files;
    every other non-body attribute needs a registered converter.

    Raises:
        NoConverterRegistered: If a header, query, or form value attribute
            has a value type with no converter.
        InvalidName: If the attribute name is empty.
        UnsupportedCharacter: If the attribute name does not start with an
            ASCII letter.
    """
    names = resolve_names(prop.name, target=target)

    if source is Source.BODY:
        return body_binder(target, prop, names, converters, config)

    if source is Source.FORM:
        if is_upload(prop.value_type):
            return file_binder(prop, names)
        if is_upload_list(prop.value_type):
            return files_binder(prop, names)

    converter = converters.find(prop.value_type)
    if converter is None:
        raise NoConverterRegistered(
            prop.value_type, target=target, attribute=prop.name, source=source
        )
    return value_binder(prop, source, names, converter)
