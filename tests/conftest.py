from collections.abc import Callable

import httpx
import pytest

from nip96_uploader.discovery.models import ServerDescriptor
from nip96_uploader.transport.httpx_adapter import HttpxTransport

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture()
def server() -> ServerDescriptor:
    """Descriptor for a media server that was already discovered."""
    return ServerDescriptor(
        api_url="https://media.example.com/api/v2/media",
        base_url="https://media.example.com",
    )


@pytest.fixture()
def make_transport() -> Callable[..., HttpxTransport]:
    """Build an HttpxTransport whose clients answer through MockTransport handlers."""

    def _make(handler: Handler, proxy_handler: Handler | None = None) -> HttpxTransport:
        direct = httpx.Client(transport=httpx.MockTransport(handler))
        proxied = (
            httpx.Client(transport=httpx.MockTransport(proxy_handler))
            if proxy_handler is not None
            else None
        )
        return HttpxTransport(direct_client=direct, proxy_client=proxied)

    return _make


@pytest.fixture()
def final_event_payload() -> dict[str, object]:
    """A typical nip94_event body."""
    return {
        "tags": [
            ["url", "https://media.example.com/a.png"],
            ["ox", "deadbeef"],
            ["x", "cafebabe"],
            ["m", "image/png"],
            ["dim", "100x200"],
        ],
        "content": "",
    }
