from __future__ import annotations

import argparse

import pytest

from tests.fakes import FakeGateway
from uploader.app.main import _parse_args, _parse_recording, run_uploader


def test_recording_name_defaults_to_id():
    assert _parse_recording("r1") == ("r1", "r1")
    assert _parse_recording(" r2 : Open settings ") == ("r2", "Open settings")


def test_blank_recording_id_rejected():
    with pytest.raises(argparse.ArgumentTypeError):
        _parse_recording(":name")


def test_parse_args_collects_recordings():
    args = _parse_args(["r1:First", "r2"])

    assert args.recordings == [("r1", "First"), ("r2", "r2")]


@pytest.mark.asyncio
async def test_failed_connect_still_closes_gateway(monkeypatch, tmp_path):
    gateway = FakeGateway()
    monkeypatch.setenv("RECORDINGS_DIR", str(tmp_path))
    monkeypatch.setenv("PRODUCER_BACKEND", "tarball")
    monkeypatch.setattr("uploader.app.composition.create_submission_gateway", lambda settings: gateway)

    with pytest.raises(ValueError, match="Unsupported producer backend"):
        await run_uploader([("r1", "r1")])

    assert gateway.closed is True
