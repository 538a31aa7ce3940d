"""In-memory queue store: item id -> QueueItem, with synchronous change notification.

Every mutation is a complete read-modify-write with no suspension point, and
all subscribers have seen the new snapshot before the outermost mutating call
returns. A write made by a subscriber while it is being notified is queued and
delivered after the current snapshot, so every subscriber sees snapshots in
mutation order.
"""
from __future__ import annotations

from collections import deque
from dataclasses import replace
from types import MappingProxyType
from typing import Any, Callable, Mapping

from loguru import logger

from uploader.app.constants import ACTIVE_STATUSES, UPLOAD_STATUS
from uploader.app.domain.models import QueueItem

Snapshot = Mapping[str, QueueItem]
Unsubscribe = Callable[[], None]

# None stands for "not tracked yet".
ALLOWED_TRANSITIONS: dict[str | None, frozenset[str]] = {
    None: frozenset({UPLOAD_STATUS.QUEUED, UPLOAD_STATUS.FAILED}),
    UPLOAD_STATUS.QUEUED: frozenset({UPLOAD_STATUS.UPLOADING, UPLOAD_STATUS.FAILED}),
    UPLOAD_STATUS.UPLOADING: frozenset({UPLOAD_STATUS.PROCESSING, UPLOAD_STATUS.FAILED}),
    UPLOAD_STATUS.PROCESSING: frozenset({UPLOAD_STATUS.COMPLETED, UPLOAD_STATUS.FAILED}),
    UPLOAD_STATUS.COMPLETED: frozenset(),
    UPLOAD_STATUS.FAILED: frozenset(),
}

_IMMUTABLE_FIELDS = ("name", "submission_id")
_MUTABLE_FIELDS = frozenset({"status", "progress", "error", "name", "submission_id"})


class QueueStoreError(Exception):
    """Base error for rejected queue store writes."""


class InvalidTransitionError(QueueStoreError):
    """Raised when a write would move an item along an edge the lifecycle does not allow."""


class ImmutableFieldError(QueueStoreError):
    """Raised when a write would change a field that is fixed once set."""


def check_transition(current: str | None, new: str) -> None:
    if current == new and current is not None:
        if current in ACTIVE_STATUSES:
            return
        raise InvalidTransitionError(f"{current} is terminal")
    if new not in ALLOWED_TRANSITIONS.get(current, frozenset()):
        raise InvalidTransitionError(f"transition {current} -> {new} is not allowed")


class QueueStore:
    """Authoritative mapping of tracked items; single source of truth for observers."""

    def __init__(self) -> None:
        self._items: dict[str, QueueItem] = {}
        self._subscribers: list[Callable[[Snapshot], None]] = []
        self._pending: deque[Snapshot] = deque()
        self._notifying = False

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def get(self, item_id: str) -> QueueItem | None:
        return self._items.get(item_id)

    def snapshot(self) -> Snapshot:
        return MappingProxyType(dict(self._items))

    def has_active_items(self) -> bool:
        return any(item.status in ACTIVE_STATUSES for item in self._items.values())

    def upsert(self, item_id: str, **changes: Any) -> QueueItem:
        """Merge ``changes`` into the item (creating it if absent) and notify subscribers.

        ``error`` is cleared automatically when the new status is not FAILED.
        """
        unknown = set(changes) - _MUTABLE_FIELDS
        if unknown:
            raise TypeError(f"unknown queue item fields: {sorted(unknown)}")

        current = self._items.get(item_id)
        if current is None:
            if "status" not in changes:
                raise QueueStoreError(f"item {item_id!r} is not tracked; status is required")
            check_transition(None, changes["status"])
            updated = QueueItem(**changes)
        else:
            new_status = changes.get("status", current.status)
            check_transition(current.status, new_status)
            for name in _IMMUTABLE_FIELDS:
                before = getattr(current, name)
                after = changes.get(name, before)
                if before is not None and after != before:
                    raise ImmutableFieldError(f"{name} of item {item_id!r} is already set")
            if new_status != UPLOAD_STATUS.FAILED:
                changes.setdefault("error", None)
            updated = replace(current, **changes)

        self._items[item_id] = updated
        self._notify()
        return updated

    def remove(self, item_id: str) -> bool:
        if self._items.pop(item_id, None) is None:
            return False
        self._notify()
        return True

    def subscribe(self, callback: Callable[[Snapshot], None]) -> Unsubscribe:
        """Register ``callback``; it receives the current snapshot now and after every mutation."""
        self._subscribers.append(callback)
        self._deliver(callback, self.snapshot())

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def subscribe_active(self, callback: Callable[[bool], None]) -> Unsubscribe:
        """Derived view: ``callback`` gets has_active_items() now and whenever it changes."""
        last: list[bool] = []

        def on_change(snapshot: Snapshot) -> None:
            active = any(item.status in ACTIVE_STATUSES for item in snapshot.values())
            if last and last[0] == active:
                return
            last[:] = [active]
            callback(active)

        return self.subscribe(on_change)

    def _notify(self) -> None:
        self._pending.append(self.snapshot())
        if self._notifying:
            return
        self._notifying = True
        try:
            while self._pending:
                snapshot = self._pending.popleft()
                for callback in list(self._subscribers):
                    self._deliver(callback, snapshot)
        finally:
            self._notifying = False

    def _deliver(self, callback: Callable[[Snapshot], None], snapshot: Snapshot) -> None:
        try:
            callback(snapshot)
        except Exception as exc:
            logger.warning("queue store subscriber failed: {}", exc)
