from typing import ClassVar

from nip96_uploader.auth.base import BaseSigner
from nip96_uploader.auth.example_signer import ExampleSigner
from nip96_uploader.config.settings import Settings


class SignerFactory:
    """Creates the configured signer, or None for unauthenticated requests."""

    SIGNERS: ClassVar[tuple[str, ...]] = ("none", "example")

    @classmethod
    def create(cls, settings: Settings) -> BaseSigner | None:
        name = settings.signer.strip().lower()
        if name == "none":
            return None
        if name == "example":
            return ExampleSigner(pubkey=settings.signer_pubkey.strip())
        raise ValueError(f"Unknown signer '{name}'. Choose from: {list(cls.SIGNERS)}")
