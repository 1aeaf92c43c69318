import threading
from collections.abc import Callable

from nip96_uploader.logging.logger import Log
from nip96_uploader.transport.base import BaseTransport
from nip96_uploader.transport.exceptions import TransportError
from nip96_uploader.transport.models import HttpRequest
from nip96_uploader.upload.exceptions import (
    ProcessingIncompleteError,
    ProcessingTimeoutError,
    ResponseParseError,
    UploadCancelledError,
)
from nip96_uploader.upload.models import PartialEvent, ProcessingStatus
from nip96_uploader.upload.parser import parse_processing_status

ProgressCallback = Callable[[float], None]


class _ProgressReporter:
    """Forwards progress clamped to [0, 1] and never lower than before."""

    def __init__(self, callback: ProgressCallback | None) -> None:
        self._callback = callback
        self._last = 0.0

    def report(self, status: ProcessingStatus) -> None:
        if self._callback is None:
            return
        self._last = max(self._last, min(1.0, max(0.0, status.progress)))
        self._callback(self._last)


class ProcessingPoller:
    """Poll loop: report -> fetch status -> wait, until processing completes.

    Failed polls leave the last known status in place and the loop goes on.
    The poll target is the most recent non-blank ``processing_url`` seen,
    since status responses may omit it.
    """

    def __init__(
        self,
        transport: BaseTransport,
        *,
        user_agent: str,
        interval_seconds: float = 0.5,
        max_polls: int = 0,
    ) -> None:
        self._transport = transport
        self._user_agent = user_agent
        self._interval_seconds = interval_seconds
        self._max_polls = max_polls

    def wait(
        self,
        initial: ProcessingStatus,
        *,
        force_proxy: Callable[[str], bool],
        on_progress: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> PartialEvent:
        """Poll until processing completes and return the final event.

        ``max_polls`` of 0 polls without bound.

        Raises:
            ProcessingIncompleteError: if processing ends without a final event.
            ProcessingTimeoutError: if ``max_polls`` is reached first.
            UploadCancelledError: if ``cancel_event`` is set.
        """
        cancel = cancel_event if cancel_event is not None else threading.Event()
        reporter = _ProgressReporter(on_progress)
        current = initial
        poll_url = (initial.processing_url or "").strip()
        polls = 0

        while poll_url and (current.percentage if current.percentage is not None else 100) < 100:
            if cancel.is_set():
                raise UploadCancelledError("Upload cancelled while waiting for processing")
            if self._max_polls and polls >= self._max_polls:
                raise ProcessingTimeoutError(
                    f"Processing did not finish after {polls} polls of {poll_url}"
                )

            reporter.report(current)
            current = self._poll(poll_url, current, force_proxy)
            polls += 1
            if current.processing_url and current.processing_url.strip():
                poll_url = current.processing_url.strip()

            if cancel.wait(self._interval_seconds):
                raise UploadCancelledError("Upload cancelled while waiting for processing")

        reporter.report(current)
        Log.info(f"Processing finished after {polls} polls")

        if current.final_payload is None:
            detail = f": {current.message}" if current.message else ""
            raise ProcessingIncompleteError(
                f"Processing ended without a final asset{detail}"
            )
        return current.final_payload

    def _poll(
        self,
        url: str,
        current: ProcessingStatus,
        force_proxy: Callable[[str], bool],
    ) -> ProcessingStatus:
        request = HttpRequest(method="GET", url=url, headers={"User-Agent": self._user_agent})
        try:
            response = self._transport.send(request, use_proxy=force_proxy(url))
        except TransportError as exc:
            Log.warning(f"Processing poll failed, will retry: {exc}")
            return current

        if not response.is_success:
            Log.warning(f"Processing poll returned HTTP {response.status_code}, will retry")
            return current

        try:
            status = parse_processing_status(response.text)
        except ResponseParseError as exc:
            Log.warning(f"Unreadable processing status, will retry: {exc}")
            return current

        Log.debug(f"Processing status {status.status!r} at {status.percentage}%")
        return status
