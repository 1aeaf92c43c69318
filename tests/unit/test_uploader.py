import base64
import io
import json
import re
import threading
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from nip96_uploader.auth.authorization import AuthorizationHeaderGenerator
from nip96_uploader.auth.example_signer import ExampleSigner
from nip96_uploader.config.settings import Settings
from nip96_uploader.discovery.exceptions import DiscoveryError
from nip96_uploader.discovery.models import ServerDescriptor
from nip96_uploader.transport.exceptions import TransportError
from nip96_uploader.transport.httpx_adapter import HttpxTransport
from nip96_uploader.upload.exceptions import (
    MissingMediaUrlError,
    ProcessingIncompleteError,
    UploadCancelledError,
    UploadRejectedError,
)
from nip96_uploader.upload.models import Dimension, MediaUploadResult, UploadRequest
from nip96_uploader.upload.uploader import Uploader, build_uploader

MakeTransport = Callable[..., HttpxTransport]

_FILE = b"\x89PNG fake image bytes"


def _make_uploader(transport: HttpxTransport, signer: ExampleSigner | None = None) -> Uploader:
    settings = Settings(user_agent="test-agent", poll_interval_seconds=0, processing_max_polls=10)
    return build_uploader(settings, transport, AuthorizationHeaderGenerator(signer))


def _request(server: ServerDescriptor, **kwargs: Any) -> UploadRequest:
    return UploadRequest(
        byte_source=io.BytesIO(_FILE),
        length_bytes=len(_FILE),
        server=server,
        **kwargs,
    )


def _capture(response: httpx.Response, seen: list[httpx.Request]) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return response

    return handler


def _field_names(body: bytes) -> list[str]:
    names = []
    for line in body.split(b"\r\n"):
        if line.startswith(b"Content-Disposition:"):
            names.append(line.split(b'name="', 1)[1].split(b'"', 1)[0].decode())
    return names


class TestImmediateSuccess:
    def test_returns_normalized_result(
        self,
        make_transport: MakeTransport,
        server: ServerDescriptor,
        final_event_payload: dict[str, object],
    ) -> None:
        response = httpx.Response(
            201, json={"status": "success", "message": "ok", "nip94_event": final_event_payload}
        )
        transport = make_transport(lambda request: response)

        result = _make_uploader(transport).upload(_request(server, content_type="image/png"))

        assert result == MediaUploadResult(
            url="https://media.example.com/a.png",
            mime_type="image/png",
            sha256_hash="deadbeef",
            dimension=Dimension(width=100, height=200),
        )

    def test_success_without_url_raises(self, make_transport: MakeTransport, server: ServerDescriptor) -> None:
        response = httpx.Response(
            200, json={"status": "success", "nip94_event": {"tags": [["m", "image/png"]]}}
        )
        transport = make_transport(lambda request: response)
        with pytest.raises(MissingMediaUrlError):
            _make_uploader(transport).upload(_request(server))


class TestUploadRequest:
    def test_posts_multipart_to_api_url(
        self,
        make_transport: MakeTransport,
        server: ServerDescriptor,
        final_event_payload: dict[str, object],
    ) -> None:
        seen: list[httpx.Request] = []
        response = httpx.Response(200, json={"status": "success", "nip94_event": final_event_payload})
        transport = make_transport(_capture(response, seen))

        _make_uploader(transport).upload(
            _request(server, content_type="image/png", alt_text="a cat", sensitivity_label="nsfw")
        )

        request = seen[0]
        body = request.content
        assert request.method == "POST"
        assert str(request.url) == server.api_url
        assert request.headers["Content-Type"].startswith("multipart/form-data; boundary=")
        assert int(request.headers["Content-Length"]) == len(body)
        assert request.headers["User-Agent"] == "test-agent"
        assert _field_names(body) == ["expiration", "size", "alt", "content-warning", "content_type", "file"]
        assert _FILE in body
        assert f"\r\n\r\n{len(_FILE)}\r\n".encode() in body
        assert "Transfer-Encoding" not in request.headers
        assert re.search(rb'name="file"; filename="[a-zA-Z0-9]{16}\.png"\r\nContent-Type: image/png\r\n', body)

    def test_omits_blank_optional_fields(
        self,
        make_transport: MakeTransport,
        server: ServerDescriptor,
        final_event_payload: dict[str, object],
    ) -> None:
        seen: list[httpx.Request] = []
        response = httpx.Response(200, json={"status": "success", "nip94_event": final_event_payload})
        transport = make_transport(_capture(response, seen))

        _make_uploader(transport).upload(_request(server, alt_text="  "))

        assert _field_names(seen[0].content) == ["expiration", "size", "file"]

    def test_signs_upload_with_identity(
        self,
        make_transport: MakeTransport,
        server: ServerDescriptor,
        final_event_payload: dict[str, object],
    ) -> None:
        seen: list[httpx.Request] = []
        response = httpx.Response(200, json={"status": "success", "nip94_event": final_event_payload})
        transport = make_transport(_capture(response, seen))

        _make_uploader(transport, ExampleSigner()).upload(_request(server))

        scheme, token = seen[0].headers["Authorization"].split(" ", 1)
        event = json.loads(base64.b64decode(token))
        assert scheme == "Nostr"
        assert event["kind"] == 27235
        assert ["u", server.api_url] in event["tags"]
        assert ["method", "POST"] in event["tags"]
        assert not any(tag[0] == "payload" for tag in event["tags"])

    def test_no_authorization_without_identity(
        self,
        make_transport: MakeTransport,
        server: ServerDescriptor,
        final_event_payload: dict[str, object],
    ) -> None:
        seen: list[httpx.Request] = []
        response = httpx.Response(200, json={"status": "success", "nip94_event": final_event_payload})
        transport = make_transport(_capture(response, seen))

        _make_uploader(transport).upload(_request(server))

        assert "Authorization" not in seen[0].headers


class TestProcessing:
    def test_polls_until_final_event(
        self,
        make_transport: MakeTransport,
        server: ServerDescriptor,
        final_event_payload: dict[str, object],
    ) -> None:
        poll_url = "https://media.example.com/status/1"

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                return httpx.Response(
                    202, json={"status": "processing", "processing_url": poll_url, "percentage": 0}
                )
            return httpx.Response(201, json={"status": "success", "nip94_event": final_event_payload})

        progress: list[float] = []
        result = _make_uploader(make_transport(handler)).upload(
            _request(server), on_progress=progress.append
        )

        assert result.url == "https://media.example.com/a.png"
        assert progress[0] == 0.0
        assert progress[-1] == 1.0

    def test_processing_error_raises(self, make_transport: MakeTransport, server: ServerDescriptor) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                return httpx.Response(
                    202,
                    json={"status": "processing", "processing_url": "https://m/s", "percentage": 5},
                )
            return httpx.Response(200, json={"status": "error", "message": "bad codec"})

        with pytest.raises(ProcessingIncompleteError, match="bad codec"):
            _make_uploader(make_transport(handler)).upload(_request(server))


class TestRejection:
    def test_structured_error_message(self, make_transport: MakeTransport, server: ServerDescriptor) -> None:
        transport = make_transport(
            lambda request: httpx.Response(400, json={"status": "error", "message": "File too big"})
        )
        with pytest.raises(UploadRejectedError) as exc_info:
            _make_uploader(transport).upload(_request(server))
        assert exc_info.value.message == "File too big"
        assert exc_info.value.status_code == 400

    def test_status_table_message(self, make_transport: MakeTransport, server: ServerDescriptor) -> None:
        transport = make_transport(lambda request: httpx.Response(413, text="<html>too large</html>"))
        with pytest.raises(UploadRejectedError, match="Payload too large"):
            _make_uploader(transport).upload(_request(server))

    def test_success_status_with_error_body(self, make_transport: MakeTransport, server: ServerDescriptor) -> None:
        transport = make_transport(
            lambda request: httpx.Response(200, json={"status": "error", "message": "quota exceeded"})
        )
        with pytest.raises(UploadRejectedError, match="quota exceeded"):
            _make_uploader(transport).upload(_request(server))

    @pytest.mark.parametrize("declared", [len(_FILE) + 5, len(_FILE) - 5])
    def test_length_mismatch_is_transport_error(
        self, make_transport: MakeTransport, server: ServerDescriptor, declared: int
    ) -> None:
        transport = make_transport(lambda request: httpx.Response(500))
        request = UploadRequest(byte_source=io.BytesIO(_FILE), length_bytes=declared, server=server)
        with pytest.raises(TransportError, match="declared"):
            _make_uploader(transport).upload(request)

    def test_transport_error_propagates(self, make_transport: MakeTransport, server: ServerDescriptor) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        with pytest.raises(TransportError):
            _make_uploader(make_transport(handler)).upload(_request(server))


class TestCancellation:
    def test_cancelled_before_start_sends_nothing(
        self, make_transport: MakeTransport, server: ServerDescriptor
    ) -> None:
        seen: list[httpx.Request] = []
        transport = make_transport(_capture(httpx.Response(500), seen))
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(UploadCancelledError):
            _make_uploader(transport).upload(_request(server), cancel_event=cancel)
        assert seen == []


class TestUploadToServer:
    def test_discovers_then_uploads(
        self, make_transport: MakeTransport, final_event_payload: dict[str, object]
    ) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            if request.url.path == "/.well-known/nostr/nip96.json":
                return httpx.Response(200, json={"api_url": "https://files.example.org/upload"})
            return httpx.Response(200, json={"status": "success", "nip94_event": final_event_payload})

        result = _make_uploader(make_transport(handler)).upload_to_server(
            "https://files.example.org", io.BytesIO(_FILE), len(_FILE), content_type="image/png"
        )

        assert result.url == "https://media.example.com/a.png"
        assert [str(r.url) for r in seen] == [
            "https://files.example.org/.well-known/nostr/nip96.json",
            "https://files.example.org/upload",
        ]

    def test_discovery_failure_propagates(self, make_transport: MakeTransport) -> None:
        transport = make_transport(lambda request: httpx.Response(404))
        with pytest.raises(DiscoveryError):
            _make_uploader(transport).upload_to_server(
                "https://files.example.org", io.BytesIO(_FILE), len(_FILE)
            )
