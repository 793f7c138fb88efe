"""Tests for reqmap.compiler — per-class compilation and the binder cache."""

import threading
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Annotated

import pytest

from reqmap.compiler import BinderCache, CompiledBinder, compile_binder
from reqmap.config import MapperConfig
from reqmap.converters import ConverterRegistry
from reqmap.errors import ConfigurationError, NoConverterRegistered, UnsupportedCharacter
from reqmap.markers import FromBody, FromForm, FromHeader, FromQuery, MarkerRegistry, Source
from reqmap.testing import make_request


class Mixed:
    plain: str = "untouched"
    page: Annotated[int, FromQuery()] = 1
    token: Annotated[str, FromHeader()] = ""
    both: Annotated[str, FromQuery(), FromHeader()] = ""
    note: Annotated[str, FromBody()] = ""


@FromQuery()
class ClassMarked:
    q: str = ""
    limit: int = 10
    token: Annotated[str, FromHeader()] = ""


class NeedsDecimal:
    price: Annotated[Decimal, FromQuery()] = Decimal(0)


@dataclass(frozen=True)
class FrozenForm:
    name: Annotated[str, FromForm()] = ""


@dataclass(frozen=True)
class FrozenUnmarked:
    name: str = ""


class Unmarked:
    a: int = 0


@FromQuery()
class NonAsciiName:
    ñame: str = ""


def _compile(target: type, **overrides) -> CompiledBinder:
    kwargs = {
        "markers": MarkerRegistry(),
        "converters": ConverterRegistry(),
        "config": MapperConfig(),
    }
    kwargs.update(overrides)
    return compile_binder(target, **kwargs)


class TestCompileBinder:
    def test_skips_unmarked_attributes(self) -> None:
        binder = _compile(Mixed)
        assert [op.attribute for op in binder] == ["page", "token", "both", "note"]

    def test_sources(self) -> None:
        sources = {op.attribute: op.source for op in _compile(Mixed)}
        assert sources == {
            "page": Source.QUERY,
            "token": Source.HEADER,
            "both": Source.HEADER,
            "note": Source.BODY,
        }

    def test_class_level_markers(self) -> None:
        sources = {op.attribute: op.source for op in _compile(ClassMarked)}
        assert sources == {"q": Source.QUERY, "limit": Source.QUERY, "token": Source.HEADER}

    def test_unmarked_class_compiles_empty(self) -> None:
        assert len(_compile(Unmarked)) == 0

    def test_missing_converter_fails_eagerly(self) -> None:
        with pytest.raises(NoConverterRegistered) as exc_info:
            _compile(NeedsDecimal)
        assert exc_info.value.target is NeedsDecimal
        assert exc_info.value.attribute == "price"

    def test_registered_converter_satisfies_compile(self) -> None:
        converters = ConverterRegistry({Decimal: lambda values: Decimal(values[0])})
        binder = _compile(NeedsDecimal, converters=converters)
        instance = binder.apply(NeedsDecimal(), make_request(query={"price": "9.99"}))
        assert instance.price == Decimal("9.99")

    def test_frozen_dataclass_with_bound_attributes(self) -> None:
        with pytest.raises(ConfigurationError, match="frozen"):
            _compile(FrozenForm)

    def test_frozen_dataclass_without_bound_attributes(self) -> None:
        assert len(_compile(FrozenUnmarked)) == 0

    def test_non_class_target(self) -> None:
        with pytest.raises(ConfigurationError, match="must be a class"):
            _compile(Mixed())  # type: ignore[arg-type]

    def test_bad_attribute_name_under_class_marker(self) -> None:
        with pytest.raises(UnsupportedCharacter, match="NonAsciiName"):
            _compile(NonAsciiName)

    def test_apply_runs_in_order(self) -> None:
        binder = _compile(Mixed)
        request = make_request(query={"page": "3"}, headers={"token": "t"})
        instance = binder.apply(Mixed(), request)
        assert (instance.page, instance.token, instance.plain) == (3, "t", "untouched")

    def test_repr(self) -> None:
        assert "page<-QUERY" in repr(_compile(Mixed))


class TestBinderCache:
    def test_compiles_once(self) -> None:
        calls: list[type] = []

        def build(target: type) -> CompiledBinder:
            calls.append(target)
            return CompiledBinder(target, ())

        cache = BinderCache(build)
        first = cache.get(Unmarked)
        second = cache.get(Unmarked)
        assert first is second
        assert calls == [Unmarked]
        assert Unmarked in cache
        assert len(cache) == 1

    def test_failed_compile_is_retried(self) -> None:
        attempts: list[int] = []

        def build(target: type) -> CompiledBinder:
            attempts.append(1)
            if len(attempts) == 1:
                raise NoConverterRegistered(Decimal)
            return CompiledBinder(target, ())

        cache = BinderCache(build)
        with pytest.raises(NoConverterRegistered):
            cache.get(Unmarked)
        assert Unmarked not in cache
        assert len(cache.get(Unmarked)) == 0
        assert len(attempts) == 2

    def test_concurrent_first_use_compiles_once(self) -> None:
        calls: list[type] = []
        workers = 16
        barrier = threading.Barrier(workers)
        results: list[CompiledBinder] = []
        results_lock = threading.Lock()

        def build(target: type) -> CompiledBinder:
            calls.append(target)
            time.sleep(0.05)
            return CompiledBinder(target, ())

        cache = BinderCache(build)

        def worker() -> None:
            barrier.wait()
            binder = cache.get(Mixed)
            with results_lock:
                results.append(binder)

        threads = [threading.Thread(target=worker) for _ in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert calls == [Mixed]
        assert len(results) == workers
        assert all(binder is results[0] for binder in results)
