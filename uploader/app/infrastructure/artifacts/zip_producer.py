"""Artifact producer backed by a recordings directory: each recording id is a sub-directory zipped in memory."""
from __future__ import annotations

import asyncio
import io
import zipfile
from pathlib import Path

from uploader.app.ports.artifact_producer import ArtifactUnavailableError


class ZipDirectoryProducer:
    """Implements ArtifactProducer by archiving ``<recordings_dir>/<item_id>/``."""

    def __init__(self, recordings_dir: str | Path) -> None:
        self._root = Path(recordings_dir)

    def _recording_dir(self, item_id: str) -> Path:
        if not item_id or item_id in (".", "..") or "/" in item_id or "\\" in item_id:
            raise ArtifactUnavailableError(f"invalid recording id: {item_id!r}")
        path = self._root / item_id
        if not path.is_dir():
            raise ArtifactUnavailableError(f"recording {item_id} not found")
        return path

    def _build_archive(self, item_id: str) -> bytes:
        source = self._recording_dir(item_id)
        files = sorted(p for p in source.rglob("*") if p.is_file())
        if not files:
            raise ArtifactUnavailableError(f"recording {item_id} has no files")

        buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
                for path in files:
                    archive.write(path, arcname=path.relative_to(source).as_posix())
        except OSError as exc:
            raise ArtifactUnavailableError(f"failed to read recording {item_id}: {exc}") from exc
        return buffer.getvalue()

    async def fetch_payload_bytes(self, item_id: str) -> bytes:
        return await asyncio.to_thread(self._build_archive, item_id)
