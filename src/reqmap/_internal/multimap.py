"""Multi-valued field mappings shared by every request source.

Headers, query parameters, form fields, and uploaded files all map a field
name to one or more values. ``MultiValueMapping`` stores them once as
``name -> [values]`` and adds ``lookup``, which tries several names in
order. Binders use it to read the canonical name and then its alternate.
"""

from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import TypeVar

V = TypeVar("V")


class MultiValueMapping(Mapping[str, V]):
    """Read-only mapping where each field name holds one or more values.

    ``__getitem__`` and ``get`` return the first value for a name.
    ``get_list`` and ``lookup`` return every value, in arrival order.

    Subclasses override ``_key`` to normalize names (``Headers`` lowercases
    them). Names that differ only by normalization are merged.
    """

    __slots__ = ("_data",)

    _data: dict[str, list[V]]

    def __init__(self, data: Mapping[str, Sequence[V]] | None = None) -> None:
        fields: dict[str, list[V]] = {}
        for name, values in (data or {}).items():
            if values:
                fields.setdefault(self._key(name), []).extend(values)
        object.__setattr__(self, "_data", fields)

    @staticmethod
    def _key(name: str) -> str:
        return name

    def __getitem__(self, key: str) -> V:
        return self._data[self._key(key)][0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._key(key) in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r})"

    def get(self, key: str, default: V | None = None) -> V | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        values = self._data.get(self._key(key))
        return values[0] if values else default

    def get_list(self, key: str) -> list[V]:
        """Return all values for *key* (empty when missing)."""
        return list(self._data.get(self._key(key), ()))

    def lookup(self, names: Iterable[str]) -> list[V] | None:
        """Return every value of the first name in *names* that is present.

        ``None`` means no name matched. A match always holds at least one
        value, so callers can tell "absent" from "present".
        """
        for name in names:
            values = self._data.get(self._key(name))
            if values:
                return list(values)
        return None
