"""Submission gateway over HTTP: uploads recording archives and reads submission status.

Uses the HTTP port (AbstractHttpClient); the client is built in the composition
root. Transport errors and unexpected response bodies are mapped to
SubmissionGatewayError so the application layer never sees httpx or pydantic
exceptions.
"""
from __future__ import annotations

from urllib.parse import quote

from loguru import logger
from pydantic import ValidationError

from uploader.app.domain.models import Identity, SubmissionReceipt, SubmissionStatus, UploadPayload
from uploader.app.ports.http_client import (
    AbstractHttpClient,
    HttpClientError,
    HttpClientTimeoutError,
    RequestTimeout,
    UploadFile,
)
from uploader.app.ports.submission_gateway import SubmissionGatewayError, SubmissionGatewayTimeoutError
from uploader.app.schemas.submission import SubmissionStatusResponse, UploadResponse

WALLET_ADDRESS_HEADER = "x-wallet-address"
CONNECT_TOKEN_HEADER = "x-connect-token"


class HttpSubmissionGateway:
    """SubmissionGateway implementation for the recording submission API."""

    def __init__(
        self,
        client: AbstractHttpClient,
        base_url: str,
        connect_timeout_seconds: float,
        read_timeout_seconds: float,
    ) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._timeout = RequestTimeout(
            connect_seconds=connect_timeout_seconds,
            read_seconds=read_timeout_seconds,
        )

    async def submit_payload(self, payload: UploadPayload, identity: Identity) -> SubmissionReceipt:
        headers = {WALLET_ADDRESS_HEADER: identity.address}
        if identity.token:
            headers[CONNECT_TOKEN_HEADER] = identity.token
        url = f"{self._base_url}/upload-race"
        try:
            response = await self._client.post(
                url,
                timeout=self._timeout,
                files={"file": UploadFile(payload.filename, bytes(payload.content), payload.content_type)},
                headers=headers,
            )
            response.raise_for_status()
            body = response.json()
        except HttpClientTimeoutError as exc:
            raise SubmissionGatewayTimeoutError(str(exc)) from exc
        except HttpClientError as exc:
            raise SubmissionGatewayError(f"Failed to upload recording: {exc}") from exc

        try:
            parsed = UploadResponse.model_validate(body)
        except ValidationError as exc:
            raise SubmissionGatewayError("upload response did not include a submission id") from exc
        logger.debug("upload accepted: {} bytes, submission {}", payload.size, parsed.submission_id)
        return SubmissionReceipt(submission_id=parsed.submission_id)

    async def query_status(self, submission_id: str) -> SubmissionStatus:
        url = f"{self._base_url}/submission/{quote(submission_id, safe='')}"
        try:
            response = await self._client.get(url, timeout=self._timeout)
            response.raise_for_status()
            body = response.json()
        except HttpClientTimeoutError as exc:
            raise SubmissionGatewayTimeoutError(str(exc)) from exc
        except HttpClientError as exc:
            raise SubmissionGatewayError(f"Failed to get submission status: {exc}") from exc

        try:
            parsed = SubmissionStatusResponse.model_validate(body)
        except ValidationError as exc:
            raise SubmissionGatewayError(f"malformed status response for submission {submission_id}") from exc

        score = parsed.clamped_score
        if score is None and parsed.grade_result is not None:
            score = parsed.grade_result.score
        return SubmissionStatus(
            status=parsed.status.strip().lower(),
            error=parsed.error,
            score=score,
            reward=parsed.reward,
        )

    async def close(self) -> None:
        await self._client.close()
