"""Shared type aliases used across reqmap modules."""

from collections.abc import Awaitable, Callable, MutableMapping, Sequence
from typing import Any, TypeAlias

# Raw ASGI types (matching the ASGI spec)
Scope: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[MutableMapping[str, Any]]]

# Scalar converter: multi-valued field in, typed value or None out
Converter: TypeAlias = Callable[[Sequence[str]], Any]

# Binding operation body, mutates one attribute of the instance
BindFunc: TypeAlias = Callable[[Any, Any], None]
