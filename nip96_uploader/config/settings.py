from pydantic_settings import BaseSettings, SettingsConfigDict

from nip96_uploader import __version__


class Settings(BaseSettings):
    """Client configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"

    user_agent: str = f"nip96-uploader/{__version__}"
    http_timeout_seconds: float = 60.0

    proxy_url: str = ""
    proxy_enabled: bool = False
    proxy_onion_only: bool = False

    poll_interval_seconds: float = 0.5
    processing_max_polls: int = 1200

    signer: str = "none"
    signer_pubkey: str = ""

    default_server_url: str = "https://nostr.build"
