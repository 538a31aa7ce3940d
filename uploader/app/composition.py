"""Uploader composition root: build and lifecycle-manage concrete dependencies.

Composition may: import concrete classes, call factories, store interface types,
manage high-level lifecycle.
"""
from __future__ import annotations

from typing import Any

from loguru import logger

from uploader.app.application.poll_scheduler import PollScheduler
from uploader.app.application.upload_orchestrator import UploadOrchestrator
from uploader.app.application.upload_queue import UploadQueue
from uploader.app.config.settings import Settings
from uploader.app.core import SERVICE_NAME
from uploader.app.domain.queue_store import QueueStore
from uploader.app.infrastructure.artifacts.factory import create_artifact_producer
from uploader.app.infrastructure.http.factory import create_submission_gateway
from uploader.app.infrastructure.identity.wallet_identity import WalletIdentityProvider
from uploader.app.ports.submission_gateway import SubmissionGateway


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class UploaderDependencies:
    """Holds wired uploader dependencies and their lifecycle."""

    def __init__(self, *, settings: Settings) -> None:
        self._settings = settings
        self._wallet: WalletIdentityProvider | None = None
        self._gateway: SubmissionGateway | None = None
        self._queue: UploadQueue | None = None
        self._connected = False

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def wallet(self) -> WalletIdentityProvider:
        if self._wallet is None:
            raise RuntimeError("wallet is not initialized")
        return self._wallet

    @property
    def queue(self) -> UploadQueue:
        if self._queue is None:
            raise RuntimeError("upload queue is not initialized")
        return self._queue

    async def connect(self) -> None:
        settings = self._settings
        self._wallet = WalletIdentityProvider(settings.wallet_address, settings.connect_token)
        self._gateway = create_submission_gateway(settings)
        producer = create_artifact_producer(settings)

        store = QueueStore()
        scheduler = PollScheduler(
            store,
            self._gateway,
            poll_interval_seconds=settings.poll_interval_seconds,
            eviction_delay_seconds=settings.eviction_delay_seconds,
            processing_progress=settings.processing_progress,
            max_attempts=settings.poll_max_attempts,
            initial_backoff_seconds=settings.initial_backoff_seconds,
            max_backoff_seconds=settings.max_backoff_seconds,
            backoff_multiplier=settings.backoff_multiplier,
        )
        orchestrator = UploadOrchestrator(
            store,
            scheduler,
            self._wallet,
            producer,
            self._gateway,
            upload_filename=settings.upload_filename,
        )
        self._queue = UploadQueue(store, orchestrator, scheduler)
        self._connected = True
        _log("uploader_connected", api_base_url=settings.api_base_url, wallet_connected=self._wallet.connected)

    async def close(self) -> None:
        if self._queue is not None:
            try:
                await self._queue.aclose()
            except Exception as exc:
                logger.warning("upload queue teardown failed: {}", exc)
            self._queue = None

        if self._gateway is not None:
            try:
                await self._gateway.close()
            except Exception as exc:
                logger.warning("submission gateway close failed: {}", exc)
            self._gateway = None

        self._wallet = None
        self._connected = False


def create_uploader_dependencies(settings: Settings | None = None) -> UploaderDependencies:
    return UploaderDependencies(settings=settings or Settings())
