"""Submit recordings from the command line and follow them until none is active.

    python -m uploader.app.main RECORDING_ID[:NAME] [RECORDING_ID[:NAME] ...]
"""
from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from typing import Any, Sequence

from loguru import logger

from uploader.app.composition import create_uploader_dependencies
from uploader.app.constants import UPLOAD_STATUS
from uploader.app.core import SERVICE_NAME
from uploader.app.domain.queue_store import Snapshot


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def _parse_recording(value: str) -> tuple[str, str]:
    item_id, _, name = value.partition(":")
    item_id = item_id.strip()
    if not item_id:
        raise argparse.ArgumentTypeError(f"invalid recording: {value!r}")
    return item_id, name.strip() or item_id


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="uploader", description=__doc__.splitlines()[0])
    parser.add_argument("recordings", nargs="+", type=_parse_recording, metavar="RECORDING_ID[:NAME]")
    return parser.parse_args(argv)


async def run_uploader(recordings: Sequence[tuple[str, str]]) -> int:
    shutdown = asyncio.Event()
    failed: dict[str, str | None] = {}
    seen: dict[str, tuple[str, int | None]] = {}

    def on_change(snapshot: Snapshot) -> None:
        for item_id, item in snapshot.items():
            state = (item.status, item.progress)
            if seen.get(item_id) == state:
                continue
            seen[item_id] = state
            _log("item_state", item_id=item_id, status=item.status, progress=item.progress)
            if item.status == UPLOAD_STATUS.FAILED:
                failed[item_id] = item.error

    def on_active(active: bool) -> None:
        if not active:
            shutdown.set()

    def request_shutdown() -> None:
        if not shutdown.is_set():
            _log("shutdown_signal")
            shutdown.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, request_shutdown)
        except NotImplementedError:
            pass

    deps = create_uploader_dependencies()
    unsubscribe = None
    try:
        await deps.connect()
        queue = deps.queue
        unsubscribe = queue.subscribe(on_change)
        for item_id, name in recordings:
            queue.submit(item_id, name)
        queue.subscribe_active(on_active)
        _log("uploader_started", recordings=len(recordings))
        await shutdown.wait()
    finally:
        if unsubscribe is not None:
            unsubscribe()
        await deps.close()
        _log("uploader_stopped", failed=len(failed))

    for item_id, error in failed.items():
        logger.error("recording {} failed: {}", item_id, error)
    return 1 if failed else 0


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)
    try:
        code = asyncio.run(run_uploader(args.recordings))
    except KeyboardInterrupt:
        _log("uploader_interrupted")
        code = 130
    except Exception as e:
        logger.exception("uploader failed: {}", e)
        raise
    sys.exit(code)


if __name__ == "__main__":
    main()
