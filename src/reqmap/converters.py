"""Scalar converters — multi-valued request fields to typed values.

A converter takes every value sent for a field (``?tag=a&tag=b`` gives
``["a", "b"]``) and returns the typed value, or ``None`` when the text does
not parse. Converters never raise.

Scalar converters see the values joined with ``","``, so a field sent twice
only parses as a number when the joined text does.

A finite number outside the single-precision range is a failed ``Float32``
conversion; the literal ``"inf"`` still parses.

Sized numeric types are ``NewType`` aliases so they can be used directly as
annotations::

    class Page:
        size: Annotated[UInt16, FromQuery()] = UInt16(20)
"""

import math
import re
import struct
from collections.abc import Callable, Sequence
from typing import Any, NewType, get_args, get_origin

from reqmap._internal.types import Converter
from reqmap.errors import ConfigurationError, NoConverterRegistered

Byte = NewType("Byte", int)
Char = NewType("Char", str)
Int16 = NewType("Int16", int)
UInt16 = NewType("UInt16", int)
Int32 = NewType("Int32", int)
UInt32 = NewType("UInt32", int)
Int64 = NewType("Int64", int)
UInt64 = NewType("UInt64", int)
Float32 = NewType("Float32", float)
StringValues = NewType("StringValues", tuple[str, ...])

_INTEGER = re.compile(r"\s*[+-]?[0-9]+\s*")

_TRUE = frozenset({"true", "1", "yes", "on"})
_FALSE = frozenset({"false", "0", "no", "off"})


def _joined(values: Sequence[str]) -> str:
    return ",".join(values)


def _integer(low: int | None, high: int | None) -> Converter:
    def convert(values: Sequence[str]) -> int | None:
        text = _joined(values)
        if _INTEGER.fullmatch(text) is None:
            return None
        try:
            value = int(text)
        except ValueError:
            # Longer than the interpreter's int string conversion limit
            return None
        if low is not None and value < low:
            return None
        if high is not None and value > high:
            return None
        return value

    return convert


def _float64(values: Sequence[str]) -> float | None:
    text = _joined(values)
    if "_" in text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _float32(values: Sequence[str]) -> float | None:
    value = _float64(values)
    if value is None:
        return None
    try:
        result = struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        return None
    # Finite input past the single-precision range rounds to inf on some builds
    if math.isinf(result) and not math.isinf(value):
        return None
    return result


def _char(values: Sequence[str]) -> str | None:
    text = _joined(values)
    return text if len(text) == 1 else None


def _bool(values: Sequence[str]) -> bool | None:
    text = _joined(values).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    return None


def _normalize(value_type: Any) -> Any:
    """Map ``typing.List[str]`` and friends onto their builtin generic spelling."""
    origin = get_origin(value_type)
    if not isinstance(origin, type):
        return value_type
    try:
        return origin[get_args(value_type)]
    except TypeError:
        return value_type


BUILTIN_CONVERTERS: dict[Any, Converter] = {
    str: _joined,
    Byte: _integer(0, 2**8 - 1),
    Char: _char,
    UInt16: _integer(0, 2**16 - 1),
    Int16: _integer(-(2**15), 2**15 - 1),
    UInt32: _integer(0, 2**32 - 1),
    Int32: _integer(-(2**31), 2**31 - 1),
    UInt64: _integer(0, 2**64 - 1),
    Int64: _integer(-(2**63), 2**63 - 1),
    int: _integer(None, None),
    Float32: _float32,
    float: _float64,
    bool: _bool,
    StringValues: tuple,
    list[str]: list,
    Sequence[str]: list,
}


class ConverterRegistry:
    """Value type -> converter lookup table.

    Each registry starts from a copy of ``BUILTIN_CONVERTERS``; registering
    on one registry never affects another. Re-registering a type replaces
    its converter (last write wins).
    """

    __slots__ = ("_converters",)

    def __init__(self, converters: dict[Any, Converter] | None = None) -> None:
        self._converters: dict[Any, Converter] = dict(BUILTIN_CONVERTERS)
        if converters:
            for value_type, fn in converters.items():
                self.register(value_type, fn)

    def register(self, value_type: Any, fn: Callable[[Sequence[str]], Any]) -> None:
        """Add or replace the converter for *value_type*."""
        if not callable(fn):
            msg = f"Converter for {value_type!r} must be callable, got {fn!r}"
            raise ConfigurationError(msg)
        self._converters[_normalize(value_type)] = fn

    def get(self, value_type: Any) -> Converter:
        """Return the converter for *value_type*.

        Raises ``NoConverterRegistered`` if the type has none.
        """
        fn = self.find(value_type)
        if fn is None:
            raise NoConverterRegistered(value_type)
        return fn

    def find(self, value_type: Any) -> Converter | None:
        """Return the converter for *value_type*, or ``None``.

        ``typing.List[str]`` finds the converter registered for ``list[str]``.
        """
        return self._converters.get(_normalize(value_type))

    def __contains__(self, value_type: object) -> bool:
        return _normalize(value_type) in self._converters

    def __len__(self) -> int:
        return len(self._converters)
