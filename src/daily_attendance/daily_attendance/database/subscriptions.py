from __future__ import annotations

import copy
import logging
import threading
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class Subscription:
    """Handle for one listener on one document key.

    Deliveries are ordered by document version; a version older than one
    already delivered is dropped. Once ``cancel()`` returns the callback is
    never invoked again. Cancelling twice is a no-op.
    """

    def __init__(self, hub: "SubscriptionHub", key: str, callback: Callable[[Optional[dict]], None]):
        self.key = key
        self._hub = hub
        self._callback = callback
        self._lock = threading.RLock()
        self._active = True
        self._last_version = -1

    @property
    def active(self) -> bool:
        return self._active

    def deliver(self, version: int, document: Optional[dict]) -> None:
        with self._lock:
            if not self._active or version <= self._last_version:
                return
            self._last_version = version
            try:
                self._callback(copy.deepcopy(document))
            except Exception:
                logger.exception("Subscriber callback failed for %s", self.key)

    def cancel(self) -> None:
        with self._lock:
            if not self._active:
                return
            self._active = False
        self._hub.remove(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc) -> None:
        self.cancel()


class SubscriptionHub:
    """Fan-out of committed document versions to in-process subscribers."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_key: Dict[str, List[Subscription]] = {}

    def add(self, key: str, callback: Callable[[Optional[dict]], None]) -> Subscription:
        sub = Subscription(self, key, callback)
        with self._lock:
            self._by_key.setdefault(key, []).append(sub)
        return sub

    def remove(self, sub: Subscription) -> None:
        with self._lock:
            subs = self._by_key.get(sub.key)
            if not subs:
                return
            if sub in subs:
                subs.remove(sub)
            if not subs:
                del self._by_key[sub.key]

    def publish(self, key: str, version: int, document: Optional[dict]) -> None:
        with self._lock:
            subs = list(self._by_key.get(key, ()))
        for sub in subs:
            sub.deliver(version, document)

    def count(self, key: str) -> int:
        with self._lock:
            return len(self._by_key.get(key, ()))
