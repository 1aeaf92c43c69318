"""NIP-96 upload flow.

Flow: build form request -> send -> classify -> (poll) -> normalize.
"""

import threading
from collections.abc import Callable
from typing import BinaryIO, assert_never

from nip96_uploader.auth.authorization import AuthorizationHeaderGenerator
from nip96_uploader.config.settings import Settings
from nip96_uploader.discovery.retriever import ServerInfoRetriever
from nip96_uploader.logging.logger import Log
from nip96_uploader.transport.base import BaseTransport
from nip96_uploader.transport.models import HttpRequest
from nip96_uploader.transport.proxy_policy import never_proxy
from nip96_uploader.transport.streams import DeclaredLengthReader
from nip96_uploader.upload.classifier import ResponseClassifier
from nip96_uploader.upload.exceptions import (
    MissingMediaUrlError,
    UploadCancelledError,
    UploadRejectedError,
)
from nip96_uploader.upload.models import (
    ImmediateSuccess,
    MediaUploadResult,
    ProcessingPending,
    Rejected,
    UploadRequest,
)
from nip96_uploader.upload.naming import (
    extension_for,
    file_name_with_extension,
    random_file_name,
)
from nip96_uploader.upload.normalizer import ResultNormalizer
from nip96_uploader.upload.poller import ProcessingPoller, ProgressCallback


class Uploader:
    """Uploads one file per call; never retries."""

    def __init__(
        self,
        *,
        transport: BaseTransport,
        authorization: AuthorizationHeaderGenerator,
        retriever: ServerInfoRetriever,
        classifier: ResponseClassifier,
        poller: ProcessingPoller,
        normalizer: ResultNormalizer,
        user_agent: str,
    ) -> None:
        self._transport = transport
        self._authorization = authorization
        self._retriever = retriever
        self._classifier = classifier
        self._poller = poller
        self._normalizer = normalizer
        self._user_agent = user_agent

    def upload_to_server(
        self,
        server_url: str,
        byte_source: BinaryIO,
        length_bytes: int,
        *,
        content_type: str | None = None,
        alt_text: str | None = None,
        sensitivity_label: str | None = None,
        force_proxy: Callable[[str], bool] = never_proxy,
        on_progress: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> MediaUploadResult:
        """Discover ``server_url``'s endpoints, then upload."""
        server = self._retriever.load_info(server_url, force_proxy)
        request = UploadRequest(
            byte_source=byte_source,
            length_bytes=length_bytes,
            server=server,
            content_type=content_type,
            alt_text=alt_text,
            sensitivity_label=sensitivity_label,
        )
        return self.upload(
            request,
            force_proxy=force_proxy,
            on_progress=on_progress,
            cancel_event=cancel_event,
        )

    def upload(
        self,
        request: UploadRequest,
        *,
        force_proxy: Callable[[str], bool] = never_proxy,
        on_progress: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> MediaUploadResult:
        """Upload a file to an already resolved server.

        Raises:
            UploadRejectedError: if the server declines the upload.
            ProcessingIncompleteError: if processing ends without an asset.
            ProcessingTimeoutError: if processing exceeds the poll bound.
            UploadCancelledError: if ``cancel_event`` is set.
            MissingMediaUrlError: if the final event has no url tag.
            TransportError: on network failure, or when ``byte_source`` does not
                hold exactly ``length_bytes`` bytes.
        """
        if cancel_event is not None and cancel_event.is_set():
            raise UploadCancelledError("Upload cancelled before it started")

        api_url = request.server.api_url
        Log.info("Uploading file", api_url=api_url, size=request.length_bytes)
        response = self._transport.send(
            self._build_upload_request(request),
            use_proxy=force_proxy(api_url),
        )

        classification = self._classifier.classify_upload(response)
        if isinstance(classification, Rejected):
            Log.error(f"Upload to {api_url} rejected: {classification.message}")
            raise UploadRejectedError(classification.message, classification.status_code)
        if isinstance(classification, ProcessingPending):
            Log.info(f"Upload accepted, waiting for processing at {api_url}")
            event = self._poller.wait(
                classification.status,
                force_proxy=force_proxy,
                on_progress=on_progress,
                cancel_event=cancel_event,
            )
        elif isinstance(classification, ImmediateSuccess):
            event = classification.event
        else:
            assert_never(classification)

        result = self._normalizer.normalize(event)
        if result.url is None:
            raise MissingMediaUrlError(
                f"{api_url} reported success but returned no url for the uploaded file"
            )
        Log.info(f"Upload complete: {result.url}")
        return result

    def _build_upload_request(self, request: UploadRequest) -> HttpRequest:
        file_name = file_name_with_extension(
            random_file_name(), extension_for(request.content_type)
        )

        data = {"expiration": "", "size": str(request.length_bytes)}
        optional_fields = (
            ("alt", request.alt_text),
            ("content-warning", request.sensitivity_label),
            ("content_type", request.content_type),
        )
        for name, value in optional_fields:
            if value is not None and value.strip():
                data[name] = value

        content_type = request.content_type.strip() if request.content_type else None
        source = DeclaredLengthReader(request.byte_source, request.length_bytes)

        headers = {"User-Agent": self._user_agent}
        token = self._authorization.header_for(request.server.api_url, "POST")
        if token is not None:
            headers["Authorization"] = token

        return HttpRequest(
            method="POST",
            url=request.server.api_url,
            headers=headers,
            data=data,
            files={"file": (file_name, source, content_type or None)},
        )


def build_uploader(
    settings: Settings,
    transport: BaseTransport,
    authorization: AuthorizationHeaderGenerator,
) -> Uploader:
    """Build an Uploader whose collaborators share one transport."""
    return Uploader(
        transport=transport,
        authorization=authorization,
        retriever=ServerInfoRetriever(transport, user_agent=settings.user_agent),
        classifier=ResponseClassifier(),
        poller=ProcessingPoller(
            transport,
            user_agent=settings.user_agent,
            interval_seconds=settings.poll_interval_seconds,
            max_polls=settings.processing_max_polls,
        ),
        normalizer=ResultNormalizer(),
        user_agent=settings.user_agent,
    )
