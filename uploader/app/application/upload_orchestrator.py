from __future__ import annotations

import asyncio
from typing import Any

from loguru import logger

from uploader.app.application.poll_scheduler import PollScheduler
from uploader.app.constants import (
    PROGRESS,
    UPLOAD_FAILED_MESSAGE,
    UPLOAD_STATUS,
    WALLET_REQUIRED_MESSAGE,
)
from uploader.app.core import SERVICE_NAME
from uploader.app.domain.models import Identity, UploadPayload
from uploader.app.domain.queue_store import QueueStore
from uploader.app.ports.artifact_producer import ArtifactProducer
from uploader.app.ports.identity_provider import IdentityProvider
from uploader.app.ports.submission_gateway import SubmissionGateway


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def _error_message(exc: BaseException) -> str:
    return str(exc) or UPLOAD_FAILED_MESSAGE


class UploadOrchestrator:
    """
    Drives a recording from intake to submission: check identity, build the archive,
    submit it, then hand the submission over to the poll scheduler.

    Intake (identity check, QUEUED, UPLOADING at 0%) happens synchronously in submit();
    the transfer runs as a task. Every failure becomes FAILED state on the item; nothing
    is raised to the caller.
    """

    def __init__(
        self,
        store: QueueStore,
        scheduler: PollScheduler,
        identity_provider: IdentityProvider,
        producer: ArtifactProducer,
        gateway: SubmissionGateway,
        *,
        upload_filename: str = "recording.zip",
    ) -> None:
        self._store = store
        self._scheduler = scheduler
        self._identity_provider = identity_provider
        self._producer = producer
        self._gateway = gateway
        self._upload_filename = upload_filename
        self._transfers: dict[str, asyncio.Task[None]] = {}

    def submit(self, item_id: str, name: str) -> None:
        """Start uploading ``item_id``; returns at once. Outcomes are observed through the store."""
        identity = self._begin(item_id, name)
        if identity is None:
            return
        task = asyncio.get_running_loop().create_task(
            self._transfer(item_id, name),
            name=f"upload:{item_id}",
        )
        self._transfers[item_id] = task
        task.add_done_callback(lambda done: self._forget(item_id, done))

    async def upload(self, item_id: str, name: str) -> None:
        """Awaitable variant of submit(): returns once the item is submitted, FAILED or removed."""
        self.submit(item_id, name)
        task = self._transfers.get(item_id)
        if task is not None:
            await asyncio.wait({task})

    def is_transferring(self, item_id: str) -> bool:
        return item_id in self._transfers

    def cancel(self, item_id: str) -> bool:
        task = self._transfers.pop(item_id, None)
        if task is None:
            return False
        task.cancel()
        return True

    def cancel_all(self) -> None:
        for item_id in list(self._transfers):
            self.cancel(item_id)

    def _forget(self, item_id: str, task: asyncio.Task[None]) -> None:
        if self._transfers.get(item_id) is task:
            del self._transfers[item_id]
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("upload of {} stopped unexpectedly: {}", item_id, exc)
            self._fail(item_id, _error_message(exc))

    def _begin(self, item_id: str, name: str) -> Identity | None:
        current = self._store.get(item_id)
        if current is not None:
            if not current.is_terminal:
                logger.warning("ignoring submit for {}: already {}", item_id, current.status)
                return None
            self._scheduler.cancel(item_id)
            self._store.remove(item_id)

        identity = self._identity_provider.get_identity()
        if identity is None:
            self._store.upsert(item_id, status=UPLOAD_STATUS.FAILED, name=name, error=WALLET_REQUIRED_MESSAGE)
            _log("upload_rejected", item_id=item_id, reason="no_identity")
            return None

        self._store.upsert(item_id, status=UPLOAD_STATUS.QUEUED, name=name)
        _log("upload_queued", item_id=item_id, name=name)
        self._store.upsert(item_id, status=UPLOAD_STATUS.UPLOADING, progress=PROGRESS.UPLOAD_STARTED)
        return identity

    def _fail(self, item_id: str, error: str) -> None:
        current = self._store.get(item_id)
        if current is None or current.is_terminal:
            return
        self._store.upsert(item_id, status=UPLOAD_STATUS.FAILED, error=error)
        _log("upload_failed", item_id=item_id, error=error)

    async def _transfer(self, item_id: str, name: str) -> None:
        try:
            content = await self._producer.fetch_payload_bytes(item_id)
        except Exception as exc:
            logger.warning("failed to build recording archive for {}: {}", item_id, exc)
            self._fail(item_id, _error_message(exc))
            return
        if item_id not in self._store:
            return
        self._store.upsert(item_id, progress=PROGRESS.BYTES_READY)

        try:
            payload = UploadPayload(content=bytes(content), filename=self._upload_filename)
        except (TypeError, ValueError) as exc:
            self._fail(item_id, _error_message(exc))
            return
        self._store.upsert(item_id, progress=PROGRESS.PAYLOAD_READY)

        identity = self._identity_provider.get_identity()
        if identity is None:
            self._fail(item_id, WALLET_REQUIRED_MESSAGE)
            return

        try:
            receipt = await self._gateway.submit_payload(payload, identity)
        except Exception as exc:
            logger.warning("failed to upload recording {}: {}", item_id, exc)
            self._fail(item_id, _error_message(exc))
            return
        if item_id not in self._store:
            return

        self._store.upsert(
            item_id,
            status=UPLOAD_STATUS.PROCESSING,
            progress=PROGRESS.SUBMITTED,
            submission_id=receipt.submission_id,
        )
        _log(
            "upload_submitted",
            item_id=item_id,
            name=name,
            submission_id=receipt.submission_id,
            size=payload.size,
        )
        self._scheduler.register(item_id, receipt.submission_id)
