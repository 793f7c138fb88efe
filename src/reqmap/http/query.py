"""Query string parameters.

Names are case-sensitive; ``?userId=1`` and ``?UserId=1`` are different
keys, which is why binders look up both spellings of an attribute name.
"""

from urllib.parse import parse_qs

from reqmap._internal.multimap import MultiValueMapping


class QueryParams(MultiValueMapping[str]):
    """Immutable query string parameters parsed from the raw bytes.

    Blank values (``?flag=``) are kept as ``""``.
    """

    __slots__ = ("_raw",)

    def __init__(self, query_string: bytes = b"") -> None:
        super().__init__(parse_qs(query_string.decode("latin-1"), keep_blank_values=True))
        object.__setattr__(self, "_raw", query_string)

    @property
    def raw(self) -> bytes:
        """The undecoded query string."""
        return self._raw
