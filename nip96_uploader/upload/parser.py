"""Builds typed responses from raw NIP-96 JSON bodies. Unknown fields are ignored."""

import json
import math
from typing import Any

from nip96_uploader.upload.exceptions import ResponseParseError
from nip96_uploader.upload.models import PartialEvent, ProcessingStatus, StatusMessage


def parse_processing_status(body: str) -> ProcessingStatus:
    """Parse an upload or processing-status body.

    Raises:
        ResponseParseError: if the body is not a JSON object or a known field
            has the wrong type.
    """
    data = _load_object(body)
    return ProcessingStatus(
        status=_optional_str(data, "status"),
        message=_optional_str(data, "message"),
        processing_url=_optional_str(data, "processing_url"),
        percentage=_build_percentage(data.get("percentage")),
        final_payload=_build_event(data.get("nip94_event")),
    )


def parse_status_message(body: str) -> StatusMessage | None:
    """Parse a ``{status, message}`` body, or return None if it has another shape."""
    try:
        data = _load_object(body)
        return StatusMessage(
            status=_optional_str(data, "status"),
            message=_optional_str(data, "message"),
        )
    except ResponseParseError:
        return None


def _load_object(body: str) -> dict[str, Any]:
    try:
        parsed = json.loads(body)
    except json.JSONDecodeError as exc:
        raise ResponseParseError(f"Invalid JSON response: {exc}") from exc
    if not isinstance(parsed, dict):
        raise ResponseParseError("JSON response must be an object")
    return parsed


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ResponseParseError(f"'{key}' must be a string or null")
    return value


def _build_percentage(raw: Any) -> int | None:
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise ResponseParseError("'percentage' must be a number or null")
    if isinstance(raw, str):
        try:
            raw = float(raw.strip())
        except ValueError as exc:
            raise ResponseParseError(f"'percentage' is not numeric: {raw!r}") from exc
    if not isinstance(raw, (int, float)):
        raise ResponseParseError("'percentage' must be a number or null")
    if isinstance(raw, float) and not math.isfinite(raw):
        raise ResponseParseError(f"'percentage' must be finite, got {raw!r}")
    return max(0, min(100, int(raw)))


def _build_event(raw: Any) -> PartialEvent | None:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ResponseParseError("'nip94_event' must be an object or null")
    content = raw.get("content")
    if content is not None and not isinstance(content, str):
        raise ResponseParseError("'nip94_event.content' must be a string or null")
    return PartialEvent(tags=_build_tags(raw.get("tags")), content=content)


def _build_tags(raw: Any) -> tuple[tuple[str, ...], ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ResponseParseError("'nip94_event.tags' must be a list")
    return tuple(_build_tag(item, i) for i, item in enumerate(raw))


def _build_tag(raw: Any, index: int) -> tuple[str, ...]:
    if not isinstance(raw, list):
        raise ResponseParseError(f"Tag at index {index} must be a list")
    values: list[str] = []
    for element in raw:
        if isinstance(element, str):
            values.append(element)
        elif isinstance(element, (int, float)) and not isinstance(element, bool):
            values.append(str(element))
        else:
            raise ResponseParseError(
                f"Tag at index {index} must contain only strings, got {element!r}"
            )
    return tuple(values)
