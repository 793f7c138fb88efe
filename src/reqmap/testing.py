"""Test utilities — build requests without an ASGI server.

Usage::

    from reqmap.testing import make_request

    request = make_request(query={"userId": "42"}, headers={"sessionToken": "abc"})
    mapper.generate(Session, request)
"""

from collections.abc import Mapping, Sequence
from urllib.parse import urlencode

from reqmap.http.forms import FormData, UploadFile
from reqmap.http.headers import Headers
from reqmap.http.query import QueryParams
from reqmap.http.request import Request

FieldValues = str | Sequence[str]


def _as_list(value: FieldValues) -> list[str]:
    if isinstance(value, str):
        return [value]
    return list(value)


def upload(
    filename: str,
    content: bytes = b"",
    content_type: str = "application/octet-stream",
) -> UploadFile:
    """Build an in-memory ``UploadFile``."""
    return UploadFile(
        filename=filename,
        content_type=content_type,
        size=len(content),
        _content=content,
    )


def make_request(
    method: str = "GET",
    path: str = "/",
    *,
    headers: Mapping[str, FieldValues] | None = None,
    query: Mapping[str, FieldValues] | None = None,
    form: Mapping[str, FieldValues] | None = None,
    files: Mapping[str, UploadFile | Sequence[UploadFile]] | None = None,
    body: bytes = b"",
) -> Request:
    """Build a ``Request`` from plain Python values.

    Values may be a single string or a sequence of strings (repeated
    fields). When *form* or *files* is given the request carries them as
    already-parsed multipart form data.
    """
    header_pairs = [
        (name, value) for name, values in (headers or {}).items() for value in _as_list(values)
    ]
    query_string = urlencode(
        [(name, value) for name, values in (query or {}).items() for value in _as_list(values)]
    ).encode("latin-1")

    request = Request(
        method=method,
        path=path,
        headers=Headers.from_pairs(header_pairs),
        query=QueryParams(query_string),
        _body=body,
    )

    if form is not None or files is not None:
        file_lists = {
            name: [value] if isinstance(value, UploadFile) else list(value)
            for name, value in (files or {}).items()
        }
        field_lists = {name: _as_list(values) for name, values in (form or {}).items()}
        request._cache["_form"] = FormData(field_lists, file_lists)

    return request
