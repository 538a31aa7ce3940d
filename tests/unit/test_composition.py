"""Composition root wiring with settings taken from the environment."""
from __future__ import annotations

import asyncio

import pytest

from uploader.app.config.settings import Settings
from uploader.app.composition import create_uploader_dependencies
from uploader.app.constants import UPLOAD_STATUS


@pytest.fixture()
def env(monkeypatch, tmp_path):
    monkeypatch.setenv("API_BASE_URL", "http://forge.invalid/api/forge")
    monkeypatch.setenv("RECORDINGS_DIR", str(tmp_path))
    monkeypatch.setenv("WALLET_ADDRESS", "0xabc")
    monkeypatch.setenv("POLL_INTERVAL_SECONDS", "0.5")
    return tmp_path


def test_settings_read_from_environment(env):
    settings = Settings()

    assert settings.api_base_url == "http://forge.invalid/api/forge"
    assert settings.poll_interval_seconds == 0.5
    assert settings.eviction_delay_seconds == 5.0
    assert settings.poll_max_attempts == 1


def test_unsupported_backend_rejected(env, monkeypatch):
    monkeypatch.setenv("GATEWAY_BACKEND", "carrier-pigeon")

    deps = create_uploader_dependencies()
    with pytest.raises(ValueError, match="Unsupported gateway backend"):
        asyncio.run(deps.connect())


@pytest.mark.asyncio
async def test_connect_wires_queue_and_close_releases(env):
    deps = create_uploader_dependencies()
    await deps.connect()

    assert deps.connected is True
    assert deps.wallet.get_identity().address == "0xabc"

    await deps.queue.upload("missing", "Missing recording")
    item = deps.queue.get("missing")
    assert item.status == UPLOAD_STATUS.FAILED
    assert item.error == "recording missing not found"

    await deps.close()
    assert deps.connected is False
    with pytest.raises(RuntimeError):
        _ = deps.queue
