import io
from typing import BinaryIO

from nip96_uploader.transport.exceptions import TransportError


class DeclaredLengthReader(io.RawIOBase):
    """Binary reader that hands out exactly ``length`` bytes of ``source``.

    ``tell``/``seek`` report the declared length, so httpx can set the
    request's Content-Length before the source is read. The source is read
    once and never rewound.
    """

    mode = "rb"

    def __init__(self, source: BinaryIO, length: int) -> None:
        if length < 0:
            raise ValueError(f"length must not be negative, got {length}")
        super().__init__()
        self._source = source
        self._length = length
        self._position = 0

    def readable(self) -> bool:
        return True

    def read(self, size: int | None = -1) -> bytes:
        """Read up to ``size`` bytes.

        Raises:
            TransportError: if the source ends before the declared length,
                or still holds bytes once it has been reached.
        """
        remaining = self._length - self._position
        if remaining == 0:
            if self._source.read(1):
                raise TransportError(
                    f"Byte source holds more than the declared {self._length} bytes"
                )
            return b""

        wanted = remaining if size is None or size < 0 else min(size, remaining)
        chunk = self._source.read(wanted)
        if not chunk:
            raise TransportError(
                f"Byte source ended after {self._position} of {self._length} declared bytes"
            )
        self._position += len(chunk)
        return chunk

    def tell(self) -> int:
        return self._position

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        if whence == io.SEEK_END and offset == 0:
            return self._length
        if whence == io.SEEK_SET and offset == self._position:
            return self._position
        raise io.UnsupportedOperation("DeclaredLengthReader can only report its length")
