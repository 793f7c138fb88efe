"""Case-insensitive HTTP headers.

Header names are lowercased on the way in, so ``SessionToken``,
``sessionToken`` and ``sessiontoken`` all name the same field. The raw
ASGI byte pairs are kept alongside the decoded view.
"""

from __future__ import annotations

from collections.abc import Iterable

from reqmap._internal.multimap import MultiValueMapping


class Headers(MultiValueMapping[str]):
    """Immutable, case-insensitive HTTP headers.

    Repeated headers keep every value; ``get_list`` returns them in the
    order they were received. Iteration yields lowercase names.
    """

    __slots__ = ("_raw",)

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        fields: dict[str, list[str]] = {}
        for name, value in raw:
            fields.setdefault(name.decode("latin-1"), []).append(value.decode("latin-1"))
        super().__init__(fields)
        object.__setattr__(self, "_raw", raw)

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> Headers:
        """Build headers from decoded ``(name, value)`` string pairs."""
        return cls(tuple((k.encode("latin-1"), v.encode("latin-1")) for k, v in pairs))

    @staticmethod
    def _key(name: str) -> str:
        return name.lower()

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        """The undecoded header pairs, as received."""
        return self._raw
