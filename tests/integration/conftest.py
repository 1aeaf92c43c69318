import json
import threading
from collections.abc import Generator
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import httpx
import pytest

from nip96_uploader.discovery.models import ServerDescriptor
from nip96_uploader.transport.httpx_adapter import HttpxTransport


class _MediaServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self) -> None:
        super().__init__(("127.0.0.1", 0), _UploadHandler)
        self.received: list[bytes] = []

    @property
    def base_url(self) -> str:
        host, port = self.server_address[:2]
        return f"http://{host}:{port}"


class _UploadHandler(BaseHTTPRequestHandler):
    server: _MediaServer

    def do_POST(self) -> None:
        length = int(self.headers.get("Content-Length", "0"))
        body = self.rfile.read(length)
        if len(body) < length:
            self.close_connection = True
            return
        self.server.received.append(body)

        payload = json.dumps(
            {
                "status": "success",
                "nip94_event": {"tags": [["url", f"{self.server.base_url}/f.png"], ["m", "image/png"]]},
            }
        ).encode()
        self.send_response(201)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, format: str, *args: object) -> None:
        pass


@pytest.fixture()
def media_server() -> Generator[_MediaServer, None, None]:
    server = _MediaServer()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture()
def received_bodies(media_server: _MediaServer) -> list[bytes]:
    """Request bodies the local server read in full, in arrival order."""
    return media_server.received


@pytest.fixture()
def local_descriptor(media_server: _MediaServer) -> ServerDescriptor:
    return ServerDescriptor(api_url=f"{media_server.base_url}/upload", base_url=media_server.base_url)


@pytest.fixture()
def local_transport() -> Generator[HttpxTransport, None, None]:
    """Direct transport that ignores proxy environment variables."""
    transport = HttpxTransport(direct_client=httpx.Client(timeout=5, trust_env=False))
    try:
        yield transport
    finally:
        transport.close()
