"""HTTP client port: contract for the GET/POST requests the gateway needs.

Application code depends on this port; infrastructure (e.g. httpx) implements
it. Keeps the gateway free of transport-library imports.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


class HttpClientError(Exception):
    """Base for HTTP client failures (status, network, etc.)."""


class HttpClientTimeoutError(HttpClientError):
    """Raised when the request times out."""


@runtime_checkable
class HttpResponse(Protocol):
    """Minimal read-only view of an HTTP response."""

    def json(self) -> Any: ...

    def raise_for_status(self) -> None: ...


@dataclass(frozen=True)
class RequestTimeout:
    """Connect and read timeouts in seconds."""

    connect_seconds: float
    read_seconds: float


@dataclass(frozen=True)
class UploadFile:
    """One multipart file field."""

    filename: str
    content: bytes
    content_type: str


@runtime_checkable
class AbstractHttpClient(Protocol):
    """Port: perform HTTP requests. Implementations live in infrastructure."""

    async def get(
        self,
        url: str,
        *,
        timeout: RequestTimeout,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        """Perform GET; raise HttpClientTimeoutError or HttpClientError on failure."""
        ...

    async def post(
        self,
        url: str,
        *,
        timeout: RequestTimeout,
        files: dict[str, UploadFile] | None = None,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        """Perform a (multipart) POST; raise HttpClientTimeoutError or HttpClientError on failure."""
        ...

    async def close(self) -> None:
        """Release resources (e.g. connection pool). No-op allowed if nothing to close."""
        ...
