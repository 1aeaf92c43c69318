import h11
import httpx

from nip96_uploader.logging.logger import Log
from nip96_uploader.transport.base import BaseTransport
from nip96_uploader.transport.exceptions import TransportError
from nip96_uploader.transport.models import HttpRequest


class HttpxTransport(BaseTransport):
    """Transport built on two httpx clients: one direct, one proxied."""

    def __init__(
        self,
        *,
        direct_client: httpx.Client,
        proxy_client: httpx.Client | None = None,
    ) -> None:
        self._direct_client = direct_client
        self._proxy_client = proxy_client

    @classmethod
    def from_config(
        cls,
        *,
        timeout_seconds: float,
        proxy_url: str = "",
    ) -> "HttpxTransport":
        """Build both clients from plain configuration values."""
        direct = httpx.Client(timeout=timeout_seconds)
        proxied = (
            httpx.Client(timeout=timeout_seconds, proxy=proxy_url) if proxy_url else None
        )
        return cls(direct_client=direct, proxy_client=proxied)

    def send(self, request: HttpRequest, *, use_proxy: bool) -> httpx.Response:
        client = self._client_for(use_proxy)
        Log.request(request.method, request.url, use_proxy=use_proxy)
        try:
            built = client.build_request(
                request.method,
                request.url,
                headers=dict(request.headers),
                content=request.body,
                data=dict(request.data) if request.data is not None else None,
                files=dict(request.files) if request.files is not None else None,
            )
            response = client.send(built)
        except (httpx.TransportError, httpx.InvalidURL, h11.LocalProtocolError) as exc:
            raise TransportError(
                f"{request.method} {request.url} failed: {exc}"
            ) from exc
        Log.response(request.method, request.url, response.status_code)
        return response

    def close(self) -> None:
        self._direct_client.close()
        if self._proxy_client is not None:
            self._proxy_client.close()

    def _client_for(self, use_proxy: bool) -> httpx.Client:
        if not use_proxy:
            return self._direct_client
        if self._proxy_client is None:
            raise TransportError("Proxy routing requested but no proxy_url is configured")
        return self._proxy_client
