"""Content-hash deduplication of embedded images.

Decks often embed the same picture under several part names. Each image's
bytes are hashed with SHA-256 over the full content; the first part seen with
a digest becomes the canonical part for every later duplicate.
"""

import hashlib
import threading


class ImageCache:
    """Maps image digests to the first part name that carried them."""

    def __init__(self):
        self._canonical: dict[str, str] = {}
        self._lock = threading.Lock()
        self._duplicates = 0

    def __len__(self) -> int:
        return len(self._canonical)

    @staticmethod
    def digest(data: bytes) -> str:
        """SHA-256 hex digest of ``data``."""
        return hashlib.sha256(data).hexdigest()

    def register(self, part_name: str, data: bytes) -> tuple[str, str]:
        """Record an image and return ``(digest, canonical_part_name)``."""
        digest = self.digest(data)
        with self._lock:
            canonical = self._canonical.setdefault(digest, part_name)
            if canonical != part_name:
                self._duplicates += 1
        return digest, canonical

    def canonical(self, digest: str) -> str | None:
        with self._lock:
            return self._canonical.get(digest)

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {"unique": len(self._canonical), "duplicates": self._duplicates}
