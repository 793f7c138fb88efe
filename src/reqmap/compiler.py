"""Binder compilation — per-class binding plans, built once.

The first bind for a class inspects its attributes, picks a request source
for each one from its markers, and turns the result into an ordered tuple
of ``BindingOperation``. The tuple is cached by class identity for the
life of the process. Later binds only call the cached operations.

Free-threading safety:
    - Each class gets its own ``_BinderCell`` guarded by its own lock
    - A cell publishes a fully built ``CompiledBinder`` in a single
      assignment; readers see either nothing or the finished binder
    - A compilation that raises publishes nothing, so the next call retries
"""

import logging
import threading
from collections.abc import Callable, Iterator
from typing import Any

from reqmap.binders import BindingOperation, build_operation
from reqmap.config import MapperConfig
from reqmap.converters import ConverterRegistry
from reqmap.errors import ConfigurationError
from reqmap.http.request import Request
from reqmap.introspect import is_frozen, writable_properties
from reqmap.markers import MarkerRegistry, class_markers

logger = logging.getLogger("reqmap.compiler")


class CompiledBinder:
    """The cached, ordered binding operations for one target class."""

    __slots__ = ("operations", "target")

    def __init__(self, target: type, operations: tuple[BindingOperation, ...]) -> None:
        self.target = target
        self.operations = operations

    def apply(self, instance: Any, request: Request) -> Any:
        """Run every operation against *instance*, in declaration order."""
        for operation in self.operations:
            operation(instance, request)
        return instance

    def __iter__(self) -> Iterator[BindingOperation]:
        return iter(self.operations)

    def __len__(self) -> int:
        return len(self.operations)

    def __repr__(self) -> str:
        bound = ", ".join(f"{op.attribute}<-{op.source.name}" for op in self.operations)
        return f"CompiledBinder({self.target.__qualname__}: {bound})"


def compile_binder(
    target: type,
    *,
    markers: MarkerRegistry,
    converters: ConverterRegistry,
    config: MapperConfig,
) -> CompiledBinder:
    """Inspect *target* and build its binding operations.

    Attributes without a marker (on the attribute or on the class) are
    skipped. Raises configuration errors eagerly so a class that can never
    bind fails before any request is processed.

    Raises:
        NoConverterRegistered: An attribute's value type has no converter.
        ConfigurationError: *target* is a frozen dataclass with bound
            attributes, or its annotations cannot be resolved.
        InvalidName: A bound attribute name is empty.
        UnsupportedCharacter: A bound attribute name does not start with
            an ASCII letter.
    """
    if not isinstance(target, type):
        msg = f"Binding target must be a class, got {target!r}"
        raise ConfigurationError(msg)

    type_markers = class_markers(target)
    operations: list[BindingOperation] = []

    for prop in writable_properties(target):
        source = markers.resolve(prop.markers, type_markers)
        if source is None:
            continue
        operations.append(build_operation(target, prop, source, converters, config))

    if operations and is_frozen(target):
        msg = (
            f"Cannot bind into frozen dataclass {target.__qualname__}; "
            f"declare it with frozen=False"
        )
        raise ConfigurationError(msg)

    binder = CompiledBinder(target, tuple(operations))
    logger.debug("Compiled %r", binder)
    return binder


class _BinderCell:
    """One-time initialization cell for a single class."""

    __slots__ = ("_lock", "value")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.value: CompiledBinder | None = None

    def get(self, build: Callable[[], CompiledBinder]) -> CompiledBinder:
        value = self.value
        if value is not None:
            return value
        with self._lock:
            if self.value is None:
                self.value = build()
            return self.value


class BinderCache:
    """Class identity -> ``CompiledBinder``. Entries are never evicted."""

    __slots__ = ("_build", "_cells", "_lock")

    def __init__(self, build: Callable[[type], CompiledBinder]) -> None:
        self._build = build
        self._cells: dict[type, _BinderCell] = {}
        self._lock = threading.Lock()

    def get(self, target: type) -> CompiledBinder:
        """Return the binder for *target*, compiling it on first use."""
        cell = self._cells.get(target)
        if cell is None:
            with self._lock:
                cell = self._cells.setdefault(target, _BinderCell())
        return cell.get(lambda: self._build(target))

    def __contains__(self, target: object) -> bool:
        cell = self._cells.get(target)  # type: ignore[arg-type]
        return cell is not None and cell.value is not None

    def __len__(self) -> int:
        return sum(1 for cell in self._cells.values() if cell.value is not None)
