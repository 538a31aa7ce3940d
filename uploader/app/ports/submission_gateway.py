"""Port: the remote submission service. Implementations live in infrastructure."""
from __future__ import annotations

from typing import Protocol

from uploader.app.domain.models import Identity, SubmissionReceipt, SubmissionStatus, UploadPayload


class SubmissionGatewayError(Exception):
    """Base for submission service failures (HTTP status, network, malformed response)."""


class SubmissionGatewayTimeoutError(SubmissionGatewayError):
    """Raised when the submission service does not answer in time."""


class SubmissionGateway(Protocol):
    async def submit_payload(self, payload: UploadPayload, identity: Identity) -> SubmissionReceipt: ...

    async def query_status(self, submission_id: str) -> SubmissionStatus: ...

    async def close(self) -> None:
        """Release resources (e.g. connection pool). No-op allowed if nothing to close."""
        ...
