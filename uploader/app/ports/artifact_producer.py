"""Port: turns a local recording id into the bytes of its archive."""
from __future__ import annotations

from typing import Protocol


class ArtifactProducerError(Exception):
    """Base error for payload production failures."""


class ArtifactUnavailableError(ArtifactProducerError):
    """Raised when the recording does not exist or cannot be read."""


class ArtifactProducer(Protocol):
    async def fetch_payload_bytes(self, item_id: str) -> bytes:
        """Return the archive bytes; raise ArtifactProducerError with a descriptive message on failure."""
        ...
