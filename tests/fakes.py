from __future__ import annotations

import asyncio
from typing import Callable

from uploader.app.domain.models import Identity, SubmissionReceipt, SubmissionStatus, UploadPayload

FAST_POLL_SECONDS = 0.01
FAST_EVICTION_SECONDS = 0.05


class FakeIdentityProvider:
    """Implements IdentityProvider for tests; identity can be swapped between calls."""

    def __init__(self, identity: Identity | None = Identity(address="0xabc", token="tok")) -> None:
        self.identity = identity
        self.calls = 0

    def get_identity(self) -> Identity | None:
        self.calls += 1
        return self.identity


class FakeProducer:
    """Implements ArtifactProducer; returns fixed bytes, raises, or waits on a gate."""

    def __init__(
        self,
        content: bytes = b"PK\x03\x04fake-zip",
        *,
        raise_on_fetch: Exception | None = None,
        gate: asyncio.Event | None = None,
    ) -> None:
        self.content = content
        self.calls: list[str] = []
        self._raise_on_fetch = raise_on_fetch
        self._gate = gate

    async def fetch_payload_bytes(self, item_id: str) -> bytes:
        self.calls.append(item_id)
        if self._gate is not None:
            await self._gate.wait()
        if self._raise_on_fetch is not None:
            raise self._raise_on_fetch
        return self.content


class FakeGateway:
    """Implements SubmissionGateway; status replies are scripted (exceptions are raised) and can wait on a gate."""

    def __init__(
        self,
        submission_id: str = "s1",
        statuses: list[SubmissionStatus | Exception] | None = None,
        *,
        raise_on_submit: Exception | None = None,
        query_gate: asyncio.Event | None = None,
    ) -> None:
        self.submission_id = submission_id
        self.statuses = list(statuses or [])
        self.submitted: list[tuple[UploadPayload, Identity]] = []
        self.queried: list[str] = []
        self.closed = False
        self._raise_on_submit = raise_on_submit
        self._query_gate = query_gate

    async def submit_payload(self, payload: UploadPayload, identity: Identity) -> SubmissionReceipt:
        self.submitted.append((payload, identity))
        if self._raise_on_submit is not None:
            raise self._raise_on_submit
        return SubmissionReceipt(submission_id=self.submission_id)

    async def query_status(self, submission_id: str) -> SubmissionStatus:
        self.queried.append(submission_id)
        if self._query_gate is not None:
            await self._query_gate.wait()
        if not self.statuses:
            reply: SubmissionStatus | Exception = SubmissionStatus(status="processing")
        elif len(self.statuses) == 1:
            reply = self.statuses[0]
        else:
            reply = self.statuses.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def close(self) -> None:
        self.closed = True


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.005)
