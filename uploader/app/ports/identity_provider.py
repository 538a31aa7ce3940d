"""Port: source of the actor on whose behalf recordings are submitted."""
from __future__ import annotations

from typing import Protocol

from uploader.app.domain.models import Identity


class IdentityProvider(Protocol):
    def get_identity(self) -> Identity | None:
        """Current identity, or None when no wallet is connected. May change between calls."""
        ...
