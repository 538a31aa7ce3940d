"""Domain models."""
from __future__ import annotations

from dataclasses import dataclass

from uploader.app.constants import (
    ALL_STATUSES,
    PAYLOAD_CONTENT_TYPE,
    REMOTE_STATUS,
    TERMINAL_STATUSES,
    UPLOAD_STATUS,
)


@dataclass(frozen=True)
class Identity:
    """The actor a recording is submitted on behalf of."""

    address: str
    token: str | None = None


@dataclass(frozen=True)
class QueueItem:
    """Tracked state of one recording in the upload queue (value object)."""

    status: str
    name: str | None = None
    progress: int | None = None
    submission_id: str | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if self.status not in ALL_STATUSES:
            raise ValueError(f"unknown upload status: {self.status!r}")
        if self.progress is not None:
            if not isinstance(self.progress, int) or isinstance(self.progress, bool):
                raise TypeError("queue item progress must be an int")
            if not 0 <= self.progress <= 100:
                raise ValueError(f"queue item progress out of range: {self.progress}")
        if self.error is not None and self.status != UPLOAD_STATUS.FAILED:
            raise ValueError("queue item error is only allowed on FAILED items")

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


@dataclass(frozen=True)
class UploadPayload:
    """Recording archive packaged for transmission."""

    content: bytes
    filename: str = "recording.zip"
    content_type: str = PAYLOAD_CONTENT_TYPE

    def __post_init__(self) -> None:
        if not isinstance(self.content, (bytes, bytearray)):
            raise TypeError("upload payload content must be bytes")
        if not self.content:
            raise ValueError("recording archive is empty")

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class SubmissionReceipt:
    submission_id: str


@dataclass(frozen=True)
class SubmissionStatus:
    """Remote view of a submission as returned by the status endpoint."""

    status: str
    error: str | None = None
    score: float | None = None
    reward: float | None = None

    @property
    def is_completed(self) -> bool:
        return self.status.strip().lower() == REMOTE_STATUS.COMPLETED

    @property
    def is_failed(self) -> bool:
        return self.status.strip().lower() == REMOTE_STATUS.FAILED
