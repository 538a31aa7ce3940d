"""Artifact producer factory: selects implementation from config."""
from __future__ import annotations

from uploader.app.config.settings import Settings
from uploader.app.infrastructure.artifacts.zip_producer import ZipDirectoryProducer
from uploader.app.ports.artifact_producer import ArtifactProducer


def create_artifact_producer(settings: Settings) -> ArtifactProducer:
    backend = settings.producer_backend.strip().lower()

    if backend == "zip":
        return ZipDirectoryProducer(settings.recordings_dir)

    raise ValueError(f"Unsupported producer backend: {backend}")
