"""Uploader-level constants shared across modules."""
from __future__ import annotations


class UPLOAD_STATUS:
    QUEUED = "QUEUED"
    UPLOADING = "UPLOADING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


ALL_STATUSES = frozenset(
    {
        UPLOAD_STATUS.QUEUED,
        UPLOAD_STATUS.UPLOADING,
        UPLOAD_STATUS.PROCESSING,
        UPLOAD_STATUS.COMPLETED,
        UPLOAD_STATUS.FAILED,
    }
)
ACTIVE_STATUSES = frozenset({UPLOAD_STATUS.QUEUED, UPLOAD_STATUS.UPLOADING, UPLOAD_STATUS.PROCESSING})
TERMINAL_STATUSES = frozenset({UPLOAD_STATUS.COMPLETED, UPLOAD_STATUS.FAILED})


class REMOTE_STATUS:
    """Submission states as reported by the remote service."""

    COMPLETED = "completed"
    FAILED = "failed"


class PROGRESS:
    UPLOAD_STARTED = 0
    BYTES_READY = 30
    PAYLOAD_READY = 60
    SUBMITTED = 80
    COMPLETED = 100


WALLET_REQUIRED_MESSAGE = "Please connect your wallet first"
UPLOAD_FAILED_MESSAGE = "Failed to upload recording"
REMOTE_FAILED_MESSAGE = "Upload failed"
STATUS_CHECK_FAILED_MESSAGE = "Failed to check status"

PAYLOAD_CONTENT_TYPE = "application/zip"
