from __future__ import annotations

import copy
import threading
from datetime import datetime
from typing import Callable, Dict, Optional, Tuple

from ..common.datetime_utils import now_utc
from ..core.exceptions import TransientStoreConflict
from ..database.subscriptions import Subscription, SubscriptionHub
from .repository import AttendanceStore, DocumentCallback, StoreTransaction


class InMemoryAttendanceStore(AttendanceStore):
    """Process-local document store with versioned optimistic commits.

    Used for development and tests. ``clock`` is the server clock.
    """

    def __init__(self, *, clock: Callable[[], datetime] = now_utc, hub: Optional[SubscriptionHub] = None):
        self._clock = clock
        self._hub = hub or SubscriptionHub()
        self._lock = threading.RLock()
        self._docs: Dict[str, Tuple[int, dict]] = {}

    def server_time(self) -> datetime:
        return self._clock()

    def _read(self, key: str) -> Tuple[int, Optional[dict]]:
        version, doc = self._docs.get(key, (0, None))
        return version, copy.deepcopy(doc)

    def get(self, key: str) -> Optional[dict]:
        with self._lock:
            return self._read(key)[1]

    def begin(self, key: str) -> StoreTransaction:
        with self._lock:
            version, doc = self._read(key)
        return StoreTransaction(key=key, snapshot=doc, version=version, now=self._clock())

    def commit(self, tx: StoreTransaction) -> None:
        doc = tx.result()
        if doc is None:
            return
        with self._lock:
            current_version = self._docs.get(tx.key, (0, None))[0]
            if current_version != tx.version:
                raise TransientStoreConflict(
                    f"{tx.key} changed (read v{tx.version}, now v{current_version})"
                )
            new_version = current_version + 1
            self._docs[tx.key] = (new_version, doc)
        self._hub.publish(tx.key, new_version, doc)

    def subscribe(self, key: str, callback: DocumentCallback) -> Subscription:
        with self._lock:
            sub = self._hub.add(key, callback)
            version, doc = self._read(key)
        sub.deliver(version, doc)
        return sub

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._docs)

    def subscriber_count(self, key: str) -> int:
        return self._hub.count(key)
