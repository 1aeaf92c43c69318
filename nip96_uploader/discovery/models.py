from dataclasses import dataclass, field


@dataclass(frozen=True)
class ServerDescriptor:
    """Upload endpoints advertised by a NIP-96 server."""

    api_url: str
    base_url: str
    download_url: str | None = None
    delegated_to_url: str | None = None
    tos_url: str | None = None
    supported_nips: tuple[int, ...] = field(default_factory=tuple)
    content_types: tuple[str, ...] = field(default_factory=tuple)
