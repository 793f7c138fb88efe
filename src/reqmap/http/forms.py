"""Form bodies: URL-encoded fields and multipart uploads.

Field values land in ``FormData`` and uploaded files in ``FormFiles``,
both ``MultiValueMapping`` instances, so a field or file sent several
times keeps every occurrence.

URL-encoded forms use stdlib ``urllib.parse``. Multipart forms use
``python-multipart``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import parse_qs

from python_multipart.multipart import MultipartParser, parse_options_header

from reqmap._internal.multimap import MultiValueMapping

FORM_CONTENT_TYPES = frozenset({"application/x-www-form-urlencoded", "multipart/form-data"})


@dataclass(frozen=True, slots=True)
class UploadFile:
    """A file received in a multipart body, held in memory."""

    filename: str
    content_type: str
    size: int
    _content: bytes

    async def read(self) -> bytes:
        return self._content

    async def save(self, path: Path) -> None:
        """Write the content to *path*. Parent directories must exist."""
        path.write_bytes(self._content)

    def __repr__(self) -> str:
        return f"UploadFile({self.filename!r}, {self.content_type!r}, {self.size} bytes)"


class FormFiles(MultiValueMapping[UploadFile]):
    """Uploaded files by field name (``<input type=file multiple>`` keeps all)."""

    __slots__ = ()


class FormData(MultiValueMapping[str]):
    """Parsed form fields, with the uploaded files under ``files``.

    Usage::

        form = request.form()
        username = form["username"]
        avatar = form.files.get("avatar")  # UploadFile or None
    """

    __slots__ = ("_files",)

    def __init__(
        self,
        data: Mapping[str, Sequence[str]] | None = None,
        files: FormFiles | Mapping[str, Sequence[UploadFile]] | None = None,
    ) -> None:
        super().__init__(data)
        if not isinstance(files, FormFiles):
            files = FormFiles(files)
        object.__setattr__(self, "_files", files)

    @property
    def files(self) -> FormFiles:
        return self._files


def _media_type(content_type: str) -> str:
    return content_type.lower().split(";")[0].strip()


def is_form_content_type(content_type: str | None) -> bool:
    """True if *content_type* names a form encoding ``parse_form_data`` understands."""
    if not content_type:
        return False
    return _media_type(content_type) in FORM_CONTENT_TYPES


def parse_form_data(body: bytes, content_type: str) -> FormData:
    """Parse a form body according to its Content-Type.

    Undecodable bytes in field names or values become U+FFFD.

    Raises:
        ValueError: If the content type is not a form encoding, if a
            multipart body has no boundary, or if the multipart framing
            is malformed (``python_multipart`` parse errors are
            ``ValueError`` subclasses).
    """
    media_type = _media_type(content_type)

    if media_type == "application/x-www-form-urlencoded":
        fields = parse_qs(body.decode("utf-8", errors="replace"), keep_blank_values=True)
        return FormData(fields)

    if media_type == "multipart/form-data":
        return _parse_multipart(body, content_type)

    msg = f"Unsupported form content type: {content_type!r}"
    raise ValueError(msg)


class _PartCollector:
    """``MultipartParser`` callbacks that sort each part into fields or files."""

    def __init__(self) -> None:
        self.fields: dict[str, list[str]] = {}
        self.files: dict[str, list[UploadFile]] = {}
        self._header_name = bytearray()
        self._reset()

    def _reset(self) -> None:
        self._name: str | None = None
        self._filename: str | None = None
        self._part_type = "application/octet-stream"
        self._content = bytearray()

    def callbacks(self) -> dict[str, object]:
        return {
            "on_part_begin": self._reset,
            "on_part_data": self.on_part_data,
            "on_part_end": self.on_part_end,
            "on_header_field": self.on_header_field,
            "on_header_value": self.on_header_value,
        }

    def on_header_field(self, chunk: bytes, start: int, end: int) -> None:
        self._header_name.extend(chunk[start:end])

    def on_header_value(self, chunk: bytes, start: int, end: int) -> None:
        name = self._header_name.decode("latin-1").lower()
        self._header_name.clear()
        value = chunk[start:end]

        if name == "content-type":
            self._part_type = value.decode("latin-1")
        elif name == "content-disposition":
            _, params = parse_options_header(value)
            if b"name" in params:
                self._name = params[b"name"].decode("utf-8", errors="replace")
            if b"filename" in params:
                self._filename = params[b"filename"].decode("utf-8", errors="replace")

    def on_part_data(self, chunk: bytes, start: int, end: int) -> None:
        self._content.extend(chunk[start:end])

    def on_part_end(self) -> None:
        # Parts without a name cannot be addressed by any attribute
        if self._name is None:
            return
        if self._filename is None:
            value = self._content.decode("utf-8", errors="replace")
            self.fields.setdefault(self._name, []).append(value)
            return
        content = bytes(self._content)
        upload = UploadFile(self._filename, self._part_type, len(content), content)
        self.files.setdefault(self._name, []).append(upload)


def _parse_multipart(body: bytes, content_type: str) -> FormData:
    _, options = parse_options_header(content_type.encode("latin-1"))
    boundary = options.get(b"boundary")
    if not boundary:
        msg = "Multipart form data missing boundary parameter"
        raise ValueError(msg)

    collector = _PartCollector()
    parser = MultipartParser(boundary, collector.callbacks())
    parser.write(body)
    parser.finalize()
    return FormData(collector.fields, collector.files)
