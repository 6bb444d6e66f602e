from __future__ import annotations

import copy
from datetime import datetime
from typing import Callable, Optional, Protocol

from ..common.datetime_utils import to_iso
from ..database.subscriptions import Subscription

DocumentCallback = Callable[[Optional[dict]], None]


class StoreTransaction:
    """One read-then-conditional-write attempt against a single document.

    ``snapshot``/``version`` are what the store held when the attempt began and
    ``now`` is the server time stamped on anything written by this attempt.
    Writes are buffered and only reach the store on commit.
    """

    def __init__(self, *, key: str, snapshot: Optional[dict], version: int, now: datetime):
        self.key = key
        self.version = int(version)
        self.now = now
        self._snapshot = snapshot
        self._pending: Optional[dict] = None

    @property
    def snapshot(self) -> Optional[dict]:
        return copy.deepcopy(self._snapshot)

    def set(self, document: dict) -> None:
        self._pending = copy.deepcopy(document)

    def merge(self, fields: dict) -> None:
        base = self._pending if self._pending is not None else (self._snapshot or {})
        merged = copy.deepcopy(base)
        merged.update(copy.deepcopy(fields))
        self._pending = merged

    def result(self) -> Optional[dict]:
        """Document to persist, with server timestamps applied; None when nothing was written."""
        if self._pending is None:
            return None
        doc = copy.deepcopy(self._pending)
        stamp = to_iso(self.now)
        if not doc.get("createdAt"):
            doc["createdAt"] = stamp
        doc["updatedAt"] = stamp
        return doc


class AttendanceStore(Protocol):
    """Keyed document store with single-document transactions.

    Guarantee: between ``begin(key)`` and ``commit(tx)`` no other commit to the
    same key may succeed unnoticed. If one did, ``commit`` raises
    TransientStoreConflict and writes nothing. Backend outages raise
    StoreUnreachableError.
    """

    def server_time(self) -> datetime:
        raise NotImplementedError

    def get(self, key: str) -> Optional[dict]:
        raise NotImplementedError

    def begin(self, key: str) -> StoreTransaction:
        raise NotImplementedError

    def commit(self, tx: StoreTransaction) -> None:
        raise NotImplementedError

    def subscribe(self, key: str, callback: DocumentCallback) -> Subscription:
        """Deliver the current document (or None) now, then every committed write, until cancelled."""

        raise NotImplementedError
