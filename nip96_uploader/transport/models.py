import io
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import BinaryIO

# (file name, stream, content type)
FileField = tuple[str, BinaryIO | io.RawIOBase, str | None]


@dataclass(frozen=True)
class HttpRequest:
    """Outbound request handed to a transport.

    ``data`` and ``files`` are sent as ``multipart/form-data``, fields
    first and in order; ``body`` is sent as-is. File streams are consumed
    once, when sent.
    """

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes | None = None
    data: Mapping[str, str] | None = None
    files: Mapping[str, FileField] | None = None
