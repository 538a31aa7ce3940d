"""In-process wallet session: the connected address and its connect token."""
from __future__ import annotations

from uploader.app.domain.models import Identity


class WalletIdentityProvider:
    """Implements IdentityProvider. Empty address means no wallet is connected."""

    def __init__(self, address: str = "", token: str = "") -> None:
        self._identity: Identity | None = None
        if address.strip():
            self.connect(address, token)

    @property
    def connected(self) -> bool:
        return self._identity is not None

    def connect(self, address: str, token: str | None = None) -> None:
        address = address.strip()
        if not address:
            raise ValueError("wallet address must not be empty")
        self._identity = Identity(address=address, token=token or None)

    def disconnect(self) -> None:
        self._identity = None

    def get_identity(self) -> Identity | None:
        return self._identity
