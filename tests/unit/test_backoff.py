from __future__ import annotations

import pytest

from uploader.app.core.backoff import exponential_backoff


@pytest.mark.asyncio
async def test_yields_first_attempt_immediately_then_grows_to_cap(monkeypatch):
    slept: list[float] = []

    async def fake_sleep(delay: float) -> None:
        slept.append(delay)

    import uploader.app.core.backoff as mod

    monkeypatch.setattr(mod.asyncio, "sleep", fake_sleep)
    delays = [d async for d in exponential_backoff(1.0, 3.0, 2.0, 4)]

    assert delays == [0.0, 1.0, 2.0, 3.0]
    assert slept == [1.0, 2.0, 3.0]


@pytest.mark.asyncio
async def test_always_makes_one_attempt():
    delays = [d async for d in exponential_backoff(1.0, 1.0, 2.0, 0)]

    assert delays == [0.0]
