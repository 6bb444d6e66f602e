from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import mysql.connector

from ..core.exceptions import StoreUnreachableError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def store_errors(action: str):
    """Translate connector failures into StoreUnreachableError."""
    try:
        yield
    except mysql.connector.Error as exc:
        raise StoreUnreachableError(f"Database unavailable while {action}: {exc}") from exc


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def load_json(value: Any) -> Optional[dict]:
    """JSON columns come back as str, bytes or already-decoded dicts depending on the connector."""
    if value is None:
        return None
    if isinstance(value, dict):
        return value
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    return json.loads(value)


def to_mysql_datetime(value: datetime) -> datetime:
    """DATETIME columns hold naive UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
