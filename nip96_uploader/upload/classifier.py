from collections.abc import Mapping

import httpx

from nip96_uploader.upload.exceptions import ResponseParseError
from nip96_uploader.upload.models import (
    DeleteOutcome,
    ImmediateSuccess,
    ProcessingPending,
    Rejected,
    UploadClassification,
)
from nip96_uploader.upload.parser import parse_processing_status, parse_status_message
from nip96_uploader.upload.status_messages import DEFAULT_STATUS_MESSAGES


class ResponseClassifier:
    """Maps server responses to exactly one outcome.

    Error messages are resolved in a fixed order: the server's structured
    ``{"status": "error", "message": ...}`` body, then the status table
    explanation for the HTTP code, then the raw code itself.
    """

    def __init__(self, status_messages: Mapping[int, str] = DEFAULT_STATUS_MESSAGES) -> None:
        self._status_messages = status_messages

    def classify_upload(self, response: httpx.Response) -> UploadClassification:
        if not response.is_success:
            return self._rejected(response)

        try:
            status = parse_processing_status(response.text)
        except ResponseParseError as exc:
            return Rejected(
                message=f"Upload failed: unreadable server response ({exc})",
                status_code=response.status_code,
            )

        if status.processing_url is not None and status.processing_url.strip():
            return ProcessingPending(status=status)
        if status.status == "success" and status.final_payload is not None:
            return ImmediateSuccess(event=status.final_payload)
        return Rejected(
            message=status.message or f"Upload failed with status {status.status!r}",
            status_code=response.status_code,
        )

    def classify_delete(self, response: httpx.Response) -> DeleteOutcome | Rejected:
        if not response.is_success:
            return self._rejected(response)

        parsed = parse_status_message(response.text)
        if parsed is None:
            return Rejected(
                message="Deletion failed: unreadable server response",
                status_code=response.status_code,
            )
        return DeleteOutcome(succeeded=parsed.status == "success", raw_status=parsed.status)

    def error_message(self, status_code: int, body: str) -> str:
        structured = parse_status_message(body)
        if (
            structured is not None
            and structured.status == "error"
            and structured.message is not None
        ):
            return structured.message

        explanation = self._status_messages.get(status_code)
        if explanation is not None:
            return explanation

        return f"Server responded with HTTP {status_code}"

    def _rejected(self, response: httpx.Response) -> Rejected:
        return Rejected(
            message=self.error_message(response.status_code, response.text),
            status_code=response.status_code,
        )
