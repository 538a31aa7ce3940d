"""
Poll scheduler: per-item status polling for submitted recordings.

Lifecycle of one registration:
  register -> [sleep interval -> query status -> apply]* -> terminal outcome -> released.
  COMPLETED additionally schedules eviction of the item after eviction_delay_seconds.

Concurrency:
  - One asyncio task per item id; registering an id again cancels the previous task first.
  - A task only writes to the store while it is still the registered owner of its id,
    so a result that arrives after cancel()/teardown() is dropped.
  - Store writes are synchronous; the only awaits are the interval sleep and the status query.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

from loguru import logger

from uploader.app.constants import (
    PROGRESS,
    REMOTE_FAILED_MESSAGE,
    STATUS_CHECK_FAILED_MESSAGE,
    UPLOAD_STATUS,
)
from uploader.app.core import SERVICE_NAME
from uploader.app.core.backoff import exponential_backoff
from uploader.app.domain.models import SubmissionStatus
from uploader.app.domain.queue_store import QueueStore, QueueStoreError
from uploader.app.ports.submission_gateway import SubmissionGateway


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


@dataclass(eq=False)
class _Registration:
    item_id: str
    submission_id: str
    task: asyncio.Task[None] | None = None
    ticks: int = 0


class PollScheduler:
    """Owns every poll task and eviction timer; nothing else holds timer state."""

    def __init__(
        self,
        store: QueueStore,
        gateway: SubmissionGateway,
        *,
        poll_interval_seconds: float = 5.0,
        eviction_delay_seconds: float = 5.0,
        processing_progress: int = 50,
        max_attempts: int = 1,
        initial_backoff_seconds: float = 1.0,
        max_backoff_seconds: float = 10.0,
        backoff_multiplier: float = 2.0,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._poll_interval = float(poll_interval_seconds)
        self._eviction_delay = float(eviction_delay_seconds)
        self._processing_progress = int(processing_progress)
        self._max_attempts = max(1, int(max_attempts))
        self._initial_backoff = float(initial_backoff_seconds)
        self._max_backoff = float(max_backoff_seconds)
        self._backoff_multiplier = float(backoff_multiplier)
        self._registrations: dict[str, _Registration] = {}
        self._evictions: dict[str, asyncio.TimerHandle] = {}

    def register(self, item_id: str, submission_id: str) -> None:
        """Start polling ``submission_id`` for ``item_id``, replacing any existing registration."""
        self.cancel(item_id)
        registration = _Registration(item_id=item_id, submission_id=submission_id)
        self._registrations[item_id] = registration
        registration.task = asyncio.get_running_loop().create_task(
            self._run(registration),
            name=f"poll:{item_id}",
        )
        _log("poll_registered", item_id=item_id, submission_id=submission_id)

    def cancel(self, item_id: str) -> bool:
        """Cancel polling and any pending eviction for ``item_id``. Unknown ids are a no-op."""
        cancelled = False
        registration = self._registrations.pop(item_id, None)
        if registration is not None:
            if registration.task is not None and not registration.task.done():
                registration.task.cancel()
            cancelled = True
        handle = self._evictions.pop(item_id, None)
        if handle is not None:
            handle.cancel()
            cancelled = True
        return cancelled

    def is_polling(self, item_id: str) -> bool:
        return item_id in self._registrations

    def eviction_pending(self, item_id: str) -> bool:
        return item_id in self._evictions

    def active_item_ids(self) -> list[str]:
        return list(self._registrations)

    def teardown(self) -> None:
        """Cancel every poll task and eviction timer. Safe to call repeatedly."""
        if not self._registrations and not self._evictions:
            return
        polls = len(self._registrations)
        evictions = len(self._evictions)
        for item_id in list(self._registrations) + list(self._evictions):
            self.cancel(item_id)
        _log("scheduler_teardown", polls=polls, evictions=evictions)

    async def aclose(self) -> None:
        """Teardown and wait until the cancelled poll tasks have unwound."""
        tasks = [r.task for r in self._registrations.values() if r.task is not None]
        self.teardown()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _owns(self, registration: _Registration) -> bool:
        return (
            self._registrations.get(registration.item_id) is registration
            and registration.item_id in self._store
        )

    def _release(self, registration: _Registration) -> None:
        if self._registrations.get(registration.item_id) is registration:
            del self._registrations[registration.item_id]

    async def _run(self, registration: _Registration) -> None:
        item_id = registration.item_id
        while self._owns(registration):
            await asyncio.sleep(self._poll_interval)
            if not self._owns(registration):
                return
            registration.ticks += 1
            try:
                status = await self._query(registration.submission_id)
            except Exception as exc:
                if not self._owns(registration):
                    return
                logger.warning("submission status check failed for {}: {}", item_id, exc)
                self._finish(registration, status=UPLOAD_STATUS.FAILED, error=str(exc) or STATUS_CHECK_FAILED_MESSAGE)
                _log("poll_failed", item_id=item_id, tick=registration.ticks, error=str(exc))
                return

            if not self._owns(registration):
                return
            if not self._apply(registration, status):
                return

    async def _query(self, submission_id: str) -> SubmissionStatus:
        attempt = 0
        async for delay in exponential_backoff(
            self._initial_backoff,
            self._max_backoff,
            self._backoff_multiplier,
            self._max_attempts,
        ):
            attempt += 1
            try:
                return await self._gateway.query_status(submission_id)
            except Exception as exc:
                if attempt >= self._max_attempts:
                    raise
                logger.warning("status query attempt {} failed after {}s delay: {}", attempt, delay, exc)
        raise RuntimeError("status query failed")

    def _apply(self, registration: _Registration, status: SubmissionStatus) -> bool:
        """Write one tick's outcome. Returns True while polling should continue."""
        item_id = registration.item_id
        if status.is_completed:
            self._finish(registration, status=UPLOAD_STATUS.COMPLETED, progress=PROGRESS.COMPLETED)
            self._schedule_eviction(item_id)
            _log(
                "poll_completed",
                item_id=item_id,
                tick=registration.ticks,
                score=status.score,
                reward=status.reward,
            )
            return False

        if status.is_failed:
            error = status.error or REMOTE_FAILED_MESSAGE
            self._finish(registration, status=UPLOAD_STATUS.FAILED, error=error)
            _log("poll_remote_failed", item_id=item_id, tick=registration.ticks, error=error)
            return False

        try:
            self._store.upsert(item_id, status=UPLOAD_STATUS.PROCESSING, progress=self._processing_progress)
        except QueueStoreError as exc:
            logger.warning("dropping poll for {}: {}", item_id, exc)
            self._release(registration)
            return False
        _log("poll_tick", item_id=item_id, tick=registration.ticks, remote_status=status.status)
        return True

    def _finish(self, registration: _Registration, **changes: Any) -> None:
        self._release(registration)
        try:
            self._store.upsert(registration.item_id, **changes)
        except QueueStoreError as exc:
            logger.warning("could not record final state of {}: {}", registration.item_id, exc)

    def _schedule_eviction(self, item_id: str) -> None:
        previous = self._evictions.pop(item_id, None)
        if previous is not None:
            previous.cancel()
        loop = asyncio.get_running_loop()
        self._evictions[item_id] = loop.call_later(self._eviction_delay, self._evict, item_id)

    def _evict(self, item_id: str) -> None:
        self._evictions.pop(item_id, None)
        item = self._store.get(item_id)
        if item is None or item.status != UPLOAD_STATUS.COMPLETED:
            return
        self._store.remove(item_id)
        _log("item_evicted", item_id=item_id)
