from abc import ABC, abstractmethod

from nip96_uploader.auth.models import SignedEvent, UnsignedEvent


class BaseSigner(ABC):
    """Contract for identity providers that sign authorization events."""

    @abstractmethod
    def sign(self, event: UnsignedEvent) -> SignedEvent | None:
        """Sign an event template.

        Must complete (or fail) synchronously; no signing work may outlive
        the call.

        Returns:
            The signed event, or None when no identity is available.
        """
