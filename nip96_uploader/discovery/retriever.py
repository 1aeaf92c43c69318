"""Fetches and parses a server's NIP-96 descriptor from its well-known path."""

import json
from collections.abc import Callable
from typing import Any
from urllib.parse import urljoin

from nip96_uploader.discovery.exceptions import DiscoveryError
from nip96_uploader.discovery.models import ServerDescriptor
from nip96_uploader.logging.logger import Log
from nip96_uploader.transport.base import BaseTransport
from nip96_uploader.transport.exceptions import TransportError
from nip96_uploader.transport.models import HttpRequest
from nip96_uploader.transport.proxy_policy import never_proxy

WELL_KNOWN_PATH = "/.well-known/nostr/nip96.json"


def well_known_url(base_url: str) -> str:
    return base_url.rstrip("/") + WELL_KNOWN_PATH


class ServerInfoRetriever:
    """Resolves a media server base URL into its upload endpoints.

    A descriptor with a blank ``api_url`` and a ``delegated_to_url`` is
    followed once; the delegated server must advertise its own ``api_url``.
    """

    def __init__(self, transport: BaseTransport, *, user_agent: str) -> None:
        self._transport = transport
        self._user_agent = user_agent

    def load_info(
        self,
        base_url: str,
        force_proxy: Callable[[str], bool] = never_proxy,
    ) -> ServerDescriptor:
        """Fetch the descriptor for ``base_url``.

        ``force_proxy`` is asked once per fetched host, so a delegate gets
        its own routing decision.

        Raises:
            DiscoveryError: on network failure, non-2xx, malformed body or
                missing ``api_url``.
        """
        descriptor = _build_descriptor(self._fetch(base_url, force_proxy(base_url)), base_url)
        if descriptor.api_url:
            Log.info(f"Loaded NIP-96 descriptor for {base_url}: {descriptor.api_url}")
            return descriptor

        if not descriptor.delegated_to_url:
            raise DiscoveryError(f"{base_url} does not advertise an api_url")

        delegate = descriptor.delegated_to_url
        Log.info(f"{base_url} delegates uploads to {delegate}")
        delegated = _build_descriptor(self._fetch(delegate, force_proxy(delegate)), delegate)
        if not delegated.api_url:
            raise DiscoveryError(
                f"{delegate} (delegated from {base_url}) does not advertise an api_url"
            )
        return delegated

    def _fetch(self, base_url: str, use_proxy: bool) -> dict[str, Any]:
        url = well_known_url(base_url)
        request = HttpRequest(
            method="GET",
            url=url,
            headers={"User-Agent": self._user_agent, "Accept": "application/json"},
        )
        try:
            response = self._transport.send(request, use_proxy=use_proxy)
        except TransportError as exc:
            raise DiscoveryError(f"Failed to fetch {url}: {exc}") from exc

        if not response.is_success:
            raise DiscoveryError(f"{url} responded with HTTP {response.status_code}")

        try:
            parsed = json.loads(response.text)
        except json.JSONDecodeError as exc:
            raise DiscoveryError(f"Invalid JSON at {url}: {exc}") from exc
        if not isinstance(parsed, dict):
            raise DiscoveryError(f"Descriptor at {url} must be a JSON object")
        return parsed


def _build_descriptor(data: dict[str, Any], base_url: str) -> ServerDescriptor:
    return ServerDescriptor(
        api_url=_resolve(base_url, _optional_str(data, "api_url")) or "",
        base_url=base_url,
        download_url=_resolve(base_url, _optional_str(data, "download_url")),
        delegated_to_url=_optional_str(data, "delegated_to_url"),
        tos_url=_optional_str(data, "tos_url"),
        supported_nips=tuple(
            n for n in _list(data, "supported_nips")
            if isinstance(n, int) and not isinstance(n, bool)
        ),
        content_types=tuple(t for t in _list(data, "content_types") if isinstance(t, str)),
    )


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise DiscoveryError(f"'{key}' must be a string")
    return value.strip() or None


def _list(data: dict[str, Any], key: str) -> list[Any]:
    value = data.get(key)
    return value if isinstance(value, list) else []


def _resolve(base_url: str, url: str | None) -> str | None:
    if url is None:
        return None
    return urljoin(base_url.rstrip("/") + "/", url)
