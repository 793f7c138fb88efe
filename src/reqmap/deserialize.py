"""Pluggable body deserializers.

Body binding to a type outside the converter registry delegates to a
``Deserializer``. The default ``NullDeserializer`` always returns ``None``,
so complex body binding stays inert until the host opts in::

    from reqmap import Mapper, MapperConfig
    from reqmap.deserialize import JSONDeserializer

    mapper = Mapper(MapperConfig(deserializer=JSONDeserializer()))
"""

import dataclasses
import json
from typing import Any, Protocol, get_origin, runtime_checkable


@runtime_checkable
class Deserializer(Protocol):
    """Turns decoded body text into an instance of *target*, or ``None``."""

    def deserialize(self, text: str, target: Any) -> Any | None: ...


class NullDeserializer:
    """Deserializer that never produces a value."""

    __slots__ = ()

    def deserialize(self, text: str, target: Any) -> Any | None:
        return None

    def __repr__(self) -> str:
        return "NullDeserializer()"


class JSONDeserializer:
    """Deserialize JSON bodies with the stdlib ``json`` module.

    - ``dict`` / ``list`` / ``Any`` targets receive the parsed value when
      its shape matches.
    - Dataclass targets are built from the keys matching their init fields.
      Unknown keys are ignored.
    - Anything that fails to parse or construct yields ``None``.
    """

    __slots__ = ()

    def deserialize(self, text: str, target: Any) -> Any | None:
        try:
            data = json.loads(text)
        except (ValueError, RecursionError):
            # Malformed, or nested deeper than the interpreter can decode
            return None

        if target is Any:
            return data

        origin = get_origin(target) or target
        if isinstance(origin, type) and dataclasses.is_dataclass(origin):
            return _build_dataclass(origin, data)
        if isinstance(origin, type) and isinstance(data, origin):
            return data
        return None

    def __repr__(self) -> str:
        return "JSONDeserializer()"


def _build_dataclass(cls: type, data: Any) -> Any | None:
    if not isinstance(data, dict):
        return None
    kwargs = {f.name: data[f.name] for f in dataclasses.fields(cls) if f.init and f.name in data}
    try:
        return cls(**kwargs)
    except TypeError:
        # Required fields missing from the payload
        return None
