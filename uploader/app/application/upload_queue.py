"""Upload queue facade: the operations offered to callers (submit/remove/teardown) plus read access to the store."""
from __future__ import annotations

from typing import Any, Callable

from loguru import logger

from uploader.app.application.poll_scheduler import PollScheduler
from uploader.app.application.upload_orchestrator import UploadOrchestrator
from uploader.app.core import SERVICE_NAME
from uploader.app.domain.models import QueueItem
from uploader.app.domain.queue_store import QueueStore, Snapshot, Unsubscribe


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class UploadQueue:
    def __init__(self, store: QueueStore, orchestrator: UploadOrchestrator, scheduler: PollScheduler) -> None:
        self._store = store
        self._orchestrator = orchestrator
        self._scheduler = scheduler

    @property
    def store(self) -> QueueStore:
        return self._store

    def submit(self, item_id: str, name: str) -> None:
        self._orchestrator.submit(item_id, name)

    async def upload(self, item_id: str, name: str) -> None:
        await self._orchestrator.upload(item_id, name)

    def remove(self, item_id: str) -> None:
        """Forget ``item_id`` whatever its status; unknown ids are ignored."""
        self._orchestrator.cancel(item_id)
        self._scheduler.cancel(item_id)
        if self._store.remove(item_id):
            _log("item_removed", item_id=item_id)

    def teardown(self) -> None:
        """Stop all in-flight transfers, poll tasks and evictions. Idempotent."""
        self._orchestrator.cancel_all()
        self._scheduler.teardown()

    async def aclose(self) -> None:
        self._orchestrator.cancel_all()
        await self._scheduler.aclose()

    def get(self, item_id: str) -> QueueItem | None:
        return self._store.get(item_id)

    def snapshot(self) -> Snapshot:
        return self._store.snapshot()

    def subscribe(self, callback: Callable[[Snapshot], None]) -> Unsubscribe:
        return self._store.subscribe(callback)

    def subscribe_active(self, callback: Callable[[bool], None]) -> Unsubscribe:
        return self._store.subscribe_active(callback)

    def has_active_items(self) -> bool:
        return self._store.has_active_items()
