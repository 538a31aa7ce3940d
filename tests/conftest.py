from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import pytest

from tests.fakes import FAST_EVICTION_SECONDS, FAST_POLL_SECONDS, FakeGateway, FakeIdentityProvider, FakeProducer
from uploader.app.application.poll_scheduler import PollScheduler
from uploader.app.application.upload_orchestrator import UploadOrchestrator
from uploader.app.application.upload_queue import UploadQueue
from uploader.app.domain.queue_store import QueueStore


@dataclass
class Harness:
    store: QueueStore
    scheduler: PollScheduler
    orchestrator: UploadOrchestrator
    queue: UploadQueue
    identity: FakeIdentityProvider
    producer: FakeProducer
    gateway: FakeGateway


@pytest.fixture()
def make_harness() -> Callable[..., Harness]:
    def _make(
        *,
        identity: FakeIdentityProvider | None = None,
        producer: FakeProducer | None = None,
        gateway: FakeGateway | None = None,
        **scheduler_options: Any,
    ) -> Harness:
        options: dict[str, Any] = {
            "poll_interval_seconds": FAST_POLL_SECONDS,
            "eviction_delay_seconds": FAST_EVICTION_SECONDS,
            "initial_backoff_seconds": 0.0,
            "max_backoff_seconds": 0.0,
        }
        options.update(scheduler_options)
        identity = identity or FakeIdentityProvider()
        producer = producer or FakeProducer()
        gateway = gateway or FakeGateway()
        store = QueueStore()
        scheduler = PollScheduler(store, gateway, **options)
        orchestrator = UploadOrchestrator(store, scheduler, identity, producer, gateway)
        queue = UploadQueue(store, orchestrator, scheduler)
        return Harness(store, scheduler, orchestrator, queue, identity, producer, gateway)

    return _make


