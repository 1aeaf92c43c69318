"""Example signer.

Use this module as a reference when implementing real signers (local key,
remote bunker, external signer app). Implement BaseSigner and register the
signer in SignerFactory.
"""

from nip96_uploader.auth.base import BaseSigner
from nip96_uploader.auth.models import SignedEvent, UnsignedEvent


class ExampleSigner(BaseSigner):
    """Fills in a real event id with a zeroed signature.

    No cryptography. Servers that verify signatures will reject its tokens;
    useful for local development, tests, and servers that accept anonymous
    uploads.
    """

    DEFAULT_PUBKEY = "0" * 64
    ZERO_SIGNATURE = "0" * 128

    def __init__(self, pubkey: str = "") -> None:
        self._pubkey = pubkey or self.DEFAULT_PUBKEY

    def sign(self, event: UnsignedEvent) -> SignedEvent:
        return SignedEvent(
            id=event.compute_id(self._pubkey),
            pubkey=self._pubkey,
            created_at=event.created_at,
            kind=event.kind,
            tags=event.tags,
            content=event.content,
            sig=self.ZERO_SIGNATURE,
        )
