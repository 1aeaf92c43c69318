from abc import ABC, abstractmethod

import httpx

from nip96_uploader.transport.models import HttpRequest


class BaseTransport(ABC):
    """Contract for the HTTP transport used by every client component."""

    @abstractmethod
    def send(self, request: HttpRequest, *, use_proxy: bool) -> httpx.Response:
        """Send a request and return the fully read response.

        Args:
            request: Method, URL, headers and optional body.
            use_proxy: Route the request through the configured proxy.

        Returns:
            The response, whatever its status code.

        Raises:
            TransportError: on any network-level failure.
        """

    def close(self) -> None:
        """Release pooled connections. Adapters without resources keep the default."""
