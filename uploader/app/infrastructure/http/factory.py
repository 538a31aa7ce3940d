"""Gateway factory: builds the SubmissionGateway and its HTTP client from settings."""
from __future__ import annotations

import httpx

from uploader.app.config.settings import Settings
from uploader.app.infrastructure.http.httpx_client import HttpxHttpClient
from uploader.app.infrastructure.http.submission_gateway import HttpSubmissionGateway
from uploader.app.ports.http_client import AbstractHttpClient
from uploader.app.ports.submission_gateway import SubmissionGateway


def create_http_client(settings: Settings) -> AbstractHttpClient:
    """Build an HTTP client. Timeouts are applied per-request by the adapter."""
    async_client = httpx.AsyncClient()
    return HttpxHttpClient(async_client)


def create_submission_gateway(settings: Settings, client: AbstractHttpClient | None = None) -> SubmissionGateway:
    backend = settings.gateway_backend.strip().lower()

    if backend == "http":
        return HttpSubmissionGateway(
            client or create_http_client(settings),
            settings.api_base_url,
            connect_timeout_seconds=settings.http_connect_timeout_seconds,
            read_timeout_seconds=settings.http_read_timeout_seconds,
        )

    raise ValueError(f"Unsupported gateway backend: {backend}")
