"""Immutable HTTP request.

Frozen metadata with a fully received body. Binding is synchronous, so
the body is read off the ASGI channel once (``Request.from_asgi``) and
every later access works on the buffered bytes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from python_multipart.exceptions import FormParserError

from reqmap._internal.types import Receive, Scope
from reqmap.http.forms import FormData, is_form_content_type, parse_form_data
from reqmap.http.headers import Headers
from reqmap.http.query import QueryParams

logger = logging.getLogger("reqmap.http")

_EMPTY_FORM = FormData()


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, path, headers, query) is frozen at creation. The body
    is held as bytes; ``form()`` parses it once and caches the result.
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    http_version: str = "1.1"
    server: tuple[str, int] | None = None
    client: tuple[str, int] | None = None

    # Private: received body bytes
    _body: bytes = b""

    # Private: mutable cache for parsed form data
    # (dict contents are mutable even though the field reference is frozen)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def content_length(self) -> int | None:
        """The Content-Length header as int."""
        value = self.headers.get("content-length")
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    @property
    def has_form(self) -> bool:
        """True if the body is URL-encoded or multipart form data."""
        return "_form" in self._cache or is_form_content_type(self.content_type)

    @property
    def url(self) -> str:
        """Full request URL (path + query string)."""
        qs = self.query.raw
        if qs:
            return f"{self.path}?{qs.decode('latin-1')}"
        return self.path

    # -- Body access --

    def body(self) -> bytes:
        """Return the full request body."""
        return self._body

    def stream(self, chunk_size: int = 64 * 1024) -> Iterator[bytes]:
        """Iterate over the body in chunks of at most *chunk_size* bytes."""
        for start in range(0, len(self._body), chunk_size):
            yield self._body[start : start + chunk_size]

    def text(self, encoding: str = "utf-8", errors: str = "strict") -> str:
        """Decode the body as text."""
        return self._body.decode(encoding, errors)

    def json(self) -> Any:
        """Parse the body as JSON."""
        import json as json_module

        return json_module.loads(self._body)

    def form(self) -> FormData:
        """Parse the body as form data (URL-encoded or multipart).

        Result is cached: the body is parsed once, then the same
        ``FormData`` is returned on subsequent calls. Requests whose
        Content-Type is not a form encoding yield an empty ``FormData``,
        and so do bodies that cannot be parsed (missing boundary, broken
        multipart framing).
        """
        if "_form" in self._cache:
            return self._cache["_form"]

        if not is_form_content_type(self.content_type):
            return _EMPTY_FORM

        try:
            result = parse_form_data(self._body, self.content_type or "")
        except (ValueError, FormParserError) as exc:
            logger.debug("Unparsable %s body: %s", self.content_type, exc)
            result = _EMPTY_FORM
        self._cache["_form"] = result
        return result

    # -- Factory --

    @classmethod
    async def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        """Create a Request from an ASGI scope, draining *receive* once."""
        chunks: list[bytes] = []
        while True:
            message = await receive()
            body = message.get("body", b"")
            if body:
                chunks.append(body)
            if not message.get("more_body", False):
                break

        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers(tuple(scope.get("headers", ()))),
            query=QueryParams(scope.get("query_string", b"")),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            _body=b"".join(chunks),
        )
