import hashlib
import json
from dataclasses import dataclass

HTTP_AUTH_KIND = 27235

Tags = tuple[tuple[str, ...], ...]


def _compact_json(value: object) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


@dataclass(frozen=True)
class UnsignedEvent:
    """Event template handed to a signer."""

    kind: int
    created_at: int
    tags: Tags
    content: str = ""

    def compute_id(self, pubkey: str) -> str:
        """NIP-01 event id: sha256 of the serialized event array."""
        serialized = _compact_json(
            [0, pubkey, self.created_at, self.kind, [list(t) for t in self.tags], self.content]
        )
        return hashlib.sha256(serialized.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class SignedEvent:
    """Event as returned by a signer, ready to be serialized."""

    id: str
    pubkey: str
    created_at: int
    kind: int
    tags: Tags
    content: str
    sig: str

    def to_json(self) -> str:
        return _compact_json(
            {
                "id": self.id,
                "pubkey": self.pubkey,
                "created_at": self.created_at,
                "kind": self.kind,
                "tags": [list(t) for t in self.tags],
                "content": self.content,
                "sig": self.sig,
            }
        )
