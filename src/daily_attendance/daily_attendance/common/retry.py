from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

from ..core.exceptions import StoreUnreachableError, TransientStoreConflict

logger = logging.getLogger(__name__)

T = TypeVar("T")


def retry_on_conflict(
    attempt: Callable[[], T],
    *,
    max_attempts: int,
    backoff_seconds: float = 0.0,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Run ``attempt`` until it stops raising TransientStoreConflict.

    Every other exception propagates immediately. After ``max_attempts``
    conflicting attempts the failure is reported as StoreUnreachableError.
    """

    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    for n in range(1, max_attempts + 1):
        try:
            return attempt()
        except TransientStoreConflict as exc:
            if n == max_attempts:
                logger.error("Giving up after %d conflicting attempts: %s", n, exc)
                raise StoreUnreachableError(
                    f"Store kept conflicting after {max_attempts} attempts"
                ) from exc
            logger.warning("Store conflict on attempt %d/%d, retrying", n, max_attempts)
            if backoff_seconds:
                sleep(backoff_seconds * n)

    raise AssertionError("unreachable")
