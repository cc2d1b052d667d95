"""Read-only access to the content-addressed trace resource directory.

Resource bodies and snapshot JSON are stored as files named after the sha1
of their content, next to each other in a single directory.
"""

from __future__ import annotations

import asyncio
from pathlib import Path


class ResourceNotFoundError(Exception):
    """Raised when the blob store has no entry for a content hash."""

    def __init__(self, sha1: str, root: Path):
        super().__init__(f"No blob {sha1!r} in {root}")
        self.sha1 = sha1
        self.root = root


class BlobStore:
    def __init__(self, root: str | Path):
        self.root = Path(root)

    def path_for(self, sha1: str) -> Path:
        # Hashes are plain hex names; anything with a separator cannot be ours.
        if not sha1 or "/" in sha1 or "\\" in sha1 or sha1 in (".", ".."):
            raise ResourceNotFoundError(sha1, self.root)
        return self.root / sha1

    def read(self, sha1: str) -> bytes:
        """Return the raw bytes stored under *sha1*.

        Raises:
            ResourceNotFoundError: If the blob is missing or unreadable.
        """
        path = self.path_for(sha1)
        try:
            return path.read_bytes()
        except OSError as e:
            raise ResourceNotFoundError(sha1, self.root) from e

    async def read_async(self, sha1: str) -> bytes:
        """Like ``read`` but off the event loop thread."""
        return await asyncio.to_thread(self.read, sha1)
