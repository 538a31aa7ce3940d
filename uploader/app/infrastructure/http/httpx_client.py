"""Concrete HTTP client implementation using httpx (injected where AbstractHttpClient is needed)."""
from __future__ import annotations

from typing import Any

import httpx

from uploader.app.ports.http_client import (
    AbstractHttpClient,
    HttpClientError,
    HttpClientTimeoutError,
    HttpResponse,
    RequestTimeout,
    UploadFile,
)


class _HttpxResponseAdapter:
    """Adapts httpx.Response to the HttpResponse protocol."""

    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    def json(self) -> Any:
        try:
            return self._response.json()
        except ValueError as exc:
            raise HttpClientError(f"invalid json body from {self._response.url}") from exc

    def raise_for_status(self) -> None:
        try:
            self._response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise HttpClientError(
                f"http status {exc.response.status_code} for {exc.request.url}"
            ) from exc


def _to_httpx_timeout(timeout: RequestTimeout) -> httpx.Timeout:
    return httpx.Timeout(
        connect=timeout.connect_seconds,
        read=timeout.read_seconds,
        write=timeout.read_seconds,
        pool=timeout.connect_seconds,
    )


class HttpxHttpClient(AbstractHttpClient):
    """AbstractHttpClient implementation using httpx.AsyncClient."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def get(
        self,
        url: str,
        *,
        timeout: RequestTimeout,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        try:
            response = await self._client.get(
                url,
                timeout=_to_httpx_timeout(timeout),
                headers=headers or {},
            )
            return _HttpxResponseAdapter(response)
        except httpx.TimeoutException as exc:
            raise HttpClientTimeoutError(f"timeout while fetching {url}") from exc
        except httpx.HTTPError as exc:
            raise HttpClientError(f"http request failed for {url}: {exc}") from exc

    async def post(
        self,
        url: str,
        *,
        timeout: RequestTimeout,
        files: dict[str, UploadFile] | None = None,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        multipart = {
            field: (upload.filename, upload.content, upload.content_type)
            for field, upload in (files or {}).items()
        }
        try:
            response = await self._client.post(
                url,
                timeout=_to_httpx_timeout(timeout),
                files=multipart or None,
                headers=headers or {},
            )
            return _HttpxResponseAdapter(response)
        except httpx.TimeoutException as exc:
            raise HttpClientTimeoutError(f"timeout while posting to {url}") from exc
        except httpx.HTTPError as exc:
            raise HttpClientError(f"http request failed for {url}: {exc}") from exc

    async def close(self) -> None:
        await self._client.aclose()
