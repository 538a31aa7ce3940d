from __future__ import annotations

import pytest

from uploader.app.domain.models import Identity
from uploader.app.infrastructure.identity.wallet_identity import WalletIdentityProvider


def test_empty_address_means_disconnected():
    wallet = WalletIdentityProvider("  ", "tok")

    assert wallet.connected is False
    assert wallet.get_identity() is None


def test_connect_and_disconnect():
    wallet = WalletIdentityProvider()
    wallet.connect(" 0xabc ", "")

    assert wallet.get_identity() == Identity(address="0xabc", token=None)

    wallet.disconnect()
    assert wallet.get_identity() is None


def test_connect_rejects_blank_address():
    with pytest.raises(ValueError):
        WalletIdentityProvider().connect("")
