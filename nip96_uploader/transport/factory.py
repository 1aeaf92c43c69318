from nip96_uploader.config.settings import Settings
from nip96_uploader.transport.base import BaseTransport
from nip96_uploader.transport.httpx_adapter import HttpxTransport
from nip96_uploader.transport.proxy_policy import ProxyPolicy


class TransportFactory:
    """Creates the transport and routing policy from settings."""

    @classmethod
    def create(cls, settings: Settings) -> BaseTransport:
        if settings.proxy_enabled and not settings.proxy_url.strip():
            raise ValueError("proxy_url is required when proxy_enabled is set")
        return HttpxTransport.from_config(
            timeout_seconds=settings.http_timeout_seconds,
            proxy_url=settings.proxy_url.strip(),
        )

    @classmethod
    def create_proxy_policy(cls, settings: Settings) -> ProxyPolicy:
        return ProxyPolicy(
            enabled=settings.proxy_enabled,
            onion_only=settings.proxy_onion_only,
        )
