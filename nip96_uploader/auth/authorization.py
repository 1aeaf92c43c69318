"""NIP-98 HTTP authorization headers."""

import base64
import hashlib
import time
from collections.abc import Callable

from nip96_uploader.auth.base import BaseSigner
from nip96_uploader.auth.models import HTTP_AUTH_KIND, UnsignedEvent

AUTH_SCHEME = "Nostr"


class AuthorizationHeaderGenerator:
    """Produces single-use Authorization header values.

    Each value binds the method, the URL, the body digest when a body is
    given, and the current time. Nothing is cached: call ``header_for``
    immediately before every request.
    """

    def __init__(
        self,
        signer: BaseSigner | None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._signer = signer
        self._clock = clock

    @property
    def has_identity(self) -> bool:
        return self._signer is not None

    def header_for(self, url: str, method: str, body: bytes | None = None) -> str | None:
        """Return ``"Nostr <base64 event>"``, or None when no identity is configured."""
        if self._signer is None:
            return None

        signed = self._signer.sign(self._template(url, method, body))
        if signed is None:
            return None

        encoded = base64.b64encode(signed.to_json().encode("utf-8")).decode("ascii")
        return f"{AUTH_SCHEME} {encoded}"

    def _template(self, url: str, method: str, body: bytes | None) -> UnsignedEvent:
        tags: list[tuple[str, ...]] = [("u", url), ("method", method.upper())]
        if body is not None:
            tags.append(("payload", hashlib.sha256(body).hexdigest()))
        return UnsignedEvent(
            kind=HTTP_AUTH_KIND,
            created_at=int(self._clock()),
            tags=tuple(tags),
        )
