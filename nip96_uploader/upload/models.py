from dataclasses import dataclass
from typing import BinaryIO

from nip96_uploader.discovery.models import ServerDescriptor


@dataclass(frozen=True)
class UploadRequest:
    """A single upload: the byte stream, its exact length, and optional metadata."""

    byte_source: BinaryIO
    length_bytes: int
    server: ServerDescriptor
    content_type: str | None = None
    alt_text: str | None = None
    sensitivity_label: str | None = None


@dataclass(frozen=True)
class PartialEvent:
    """NIP-94 style event fragment returned by the server."""

    tags: tuple[tuple[str, ...], ...] = ()
    content: str | None = None


@dataclass(frozen=True)
class ProcessingStatus:
    """Parsed upload or processing-status response."""

    status: str | None = None
    message: str | None = None
    processing_url: str | None = None
    percentage: int | None = None
    final_payload: PartialEvent | None = None

    @property
    def progress(self) -> float:
        """Completion in [0, 1]; a missing percentage counts as complete."""
        return (self.percentage if self.percentage is not None else 100) / 100


@dataclass(frozen=True)
class StatusMessage:
    """The ``{status, message}`` shape used by error and delete responses."""

    status: str | None = None
    message: str | None = None


@dataclass(frozen=True)
class Dimension:
    width: int
    height: int

    @classmethod
    def parse(cls, value: str) -> "Dimension | None":
        """Parse ``<width>x<height>``; None if malformed."""
        width, sep, height = value.strip().lower().partition("x")
        if not sep:
            return None
        try:
            parsed = cls(width=int(width), height=int(height))
        except ValueError:
            return None
        if parsed.width < 0 or parsed.height < 0:
            return None
        return parsed


@dataclass(frozen=True)
class MediaUploadResult:
    """Stable description of an uploaded asset."""

    url: str | None = None
    mime_type: str | None = None
    sha256_hash: str | None = None
    dimension: Dimension | None = None
    magnet_link: str | None = None


@dataclass(frozen=True)
class DeleteOutcome:
    succeeded: bool
    raw_status: str | None = None


@dataclass(frozen=True)
class ImmediateSuccess:
    """The server answered with the final event right away."""

    event: PartialEvent


@dataclass(frozen=True)
class ProcessingPending:
    """The server accepted the file and is still processing it."""

    status: ProcessingStatus


@dataclass(frozen=True)
class Rejected:
    """The server declined the request; ``message`` is already resolved."""

    message: str
    status_code: int


UploadClassification = ImmediateSuccess | ProcessingPending | Rejected
