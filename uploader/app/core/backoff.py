"""Backoff utilities.

`exponential_backoff` yields the delay of the current attempt and sleeps before
handing out the next one, so callers write retry loops as
``async for delay in exponential_backoff(...)`` and ``break`` on success.
The first attempt is yielded immediately; at least one attempt is always made.
"""
from __future__ import annotations

import asyncio
from typing import AsyncIterator


async def exponential_backoff(
    initial_delay: float,
    max_delay: float,
    multiplier: float,
    max_attempts: int,
) -> AsyncIterator[float]:
    attempts = max(1, int(max_attempts))
    delay = 0.0
    next_delay = max(0.0, initial_delay)
    for attempt in range(1, attempts + 1):
        yield delay
        if attempt < attempts:
            delay = min(next_delay, max_delay)
            next_delay = delay * multiplier
            await asyncio.sleep(delay)
