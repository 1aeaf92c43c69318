from typing import ClassVar

from nip96_uploader.upload.models import Dimension, MediaUploadResult, PartialEvent


class ResultNormalizer:
    """Converts the server's final event into a MediaUploadResult.

    Only the first tag of each known name is considered; a blank value
    counts as absent. Never raises: callers decide what a result without
    ``url`` means.
    """

    TAG_NAMES: ClassVar[frozenset[str]] = frozenset({"url", "m", "ox", "dim", "magnet"})

    def normalize(self, event: PartialEvent) -> MediaUploadResult:
        values = self._first_values(event)
        dim = values.get("dim")
        return MediaUploadResult(
            url=values.get("url"),
            mime_type=values.get("m"),
            sha256_hash=values.get("ox"),
            dimension=Dimension.parse(dim) if dim is not None else None,
            magnet_link=values.get("magnet"),
        )

    def _first_values(self, event: PartialEvent) -> dict[str, str]:
        seen: set[str] = set()
        values: dict[str, str] = {}
        for tag in event.tags:
            if len(tag) < 2 or tag[0] not in self.TAG_NAMES or tag[0] in seen:
                continue
            seen.add(tag[0])
            if tag[1].strip():
                values[tag[0]] = tag[1]
        return values
