"""Mapper — binds requests onto instances of marked classes.

A ``Mapper`` owns a marker registry, a converter registry, a config, and
the compiled-binder cache built from them. Set it up first, then bind::

    mapper = Mapper()
    mapper.register_converter(Decimal, parse_decimal)

    class Search:
        q: Annotated[str, FromQuery()] = ""
        page: Annotated[int, FromQuery()] = 1
        token: Annotated[str, FromHeader()] = ""

    search = mapper.generate(Search, request)

Registration must happen before the first bind of any class it should
affect. A class compiles on its first bind and keeps that binder for the
life of the mapper; later registrations do not change it.

The module-level functions operate on ``default_mapper``.
"""

from typing import Any, TypeVar

from reqmap.compiler import BinderCache, CompiledBinder, compile_binder
from reqmap.config import MapperConfig
from reqmap.converters import ConverterRegistry
from reqmap.http.request import Request
from reqmap.markers import MarkerRegistry, Source

T = TypeVar("T")


class Mapper:
    """Request-to-object mapper with its own registries and binder cache."""

    __slots__ = ("_cache", "config", "converters", "markers")

    def __init__(
        self,
        config: MapperConfig | None = None,
        *,
        markers: MarkerRegistry | None = None,
        converters: ConverterRegistry | None = None,
    ) -> None:
        self.config: MapperConfig = config or MapperConfig()
        self.markers: MarkerRegistry = markers or MarkerRegistry()
        self.converters: ConverterRegistry = converters or ConverterRegistry()
        self._cache = BinderCache(self._compile)

    # -- Setup --

    def register_marker(self, source: Source, marker_type: type) -> None:
        """Make *marker_type* select *source* for classes compiled from now on."""
        self.markers.register(source, marker_type)

    def register_converter(self, value_type: Any, fn: Any) -> None:
        """Add or replace the converter for *value_type* (last write wins)."""
        self.converters.register(value_type, fn)

    # -- Binding --

    def _compile(self, target: type) -> CompiledBinder:
        return compile_binder(
            target,
            markers=self.markers,
            converters=self.converters,
            config=self.config,
        )

    def binder_for(self, target: type) -> CompiledBinder:
        """Return the compiled binder for *target*, compiling it on first use."""
        return self._cache.get(target)

    def is_compiled(self, target: type) -> bool:
        """True if *target* already has a cached binder."""
        return target in self._cache

    def map(self, instance: T, request: Request) -> T:
        """Bind *request* onto *instance* and return it."""
        return self.binder_for(type(instance)).apply(instance, request)

    def generate(self, target: type[T], request: Request, *, construct: bool = True) -> T:
        """Create an instance of *target* and bind *request* onto it.

        Args:
            target: The class to instantiate.
            request: The request to bind.
            construct: Call ``target()`` when True. When False, allocate the
                instance with ``target.__new__`` and skip ``__init__``, for
                classes whose constructors have side effects. Attributes
                then fall back to class-level defaults.
        """
        binder = self.binder_for(target)
        instance = target() if construct else target.__new__(target)
        return binder.apply(instance, request)


default_mapper = Mapper()


def register_marker(source: Source, marker_type: type) -> None:
    """Register a marker class on ``default_mapper``."""
    default_mapper.register_marker(source, marker_type)


def register_converter(value_type: Any, fn: Any) -> None:
    """Register a converter on ``default_mapper``."""
    default_mapper.register_converter(value_type, fn)


def map_request(instance: T, request: Request) -> T:
    """Bind *request* onto *instance* with ``default_mapper``."""
    return default_mapper.map(instance, request)


def generate(target: type[T], request: Request, *, construct: bool = True) -> T:
    """Create and bind an instance of *target* with ``default_mapper``."""
    return default_mapper.generate(target, request, construct=construct)
