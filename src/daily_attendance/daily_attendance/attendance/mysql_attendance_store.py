from __future__ import annotations

import json
from datetime import datetime
from typing import Callable, Optional

import mysql.connector

from ..common.datetime_utils import now_utc
from ..core.exceptions import TransientStoreConflict
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, load_json, store_errors, to_mysql_datetime
from ..database.subscriptions import Subscription, SubscriptionHub
from .repository import AttendanceStore, DocumentCallback, StoreTransaction


class MySQLAttendanceStore(AttendanceStore):
    """Attendance documents as JSON rows in ``attendance_documents``.

    Optimistic concurrency: creating a document is an INSERT (a duplicate key
    means another writer got there first) and updating one is an UPDATE guarded
    by the version read in ``begin``. Commits made by this process are fanned
    out to in-process subscribers.
    """

    def __init__(
        self,
        conn_factory: DatabaseConnection,
        *,
        clock: Callable[[], datetime] = now_utc,
        hub: Optional[SubscriptionHub] = None,
    ):
        self._conn_factory = conn_factory
        self._clock = clock
        self._hub = hub or SubscriptionHub()

    def server_time(self) -> datetime:
        return self._clock()

    def _read(self, key: str) -> tuple[int, Optional[dict]]:
        with store_errors("reading attendance"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT version, data
                FROM attendance_documents
                WHERE doc_id=%s
                """,
                (key,),
            )
            row = fetchone(cur)
            if not row:
                return 0, None
            return int(row["version"]), load_json(row["data"])

    def get(self, key: str) -> Optional[dict]:
        return self._read(key)[1]

    def begin(self, key: str) -> StoreTransaction:
        version, doc = self._read(key)
        return StoreTransaction(key=key, snapshot=doc, version=version, now=self._clock())

    def commit(self, tx: StoreTransaction) -> None:
        doc = tx.result()
        if doc is None:
            return

        payload = json.dumps(doc, sort_keys=True)
        stamp = to_mysql_datetime(tx.now)
        with store_errors("committing attendance"):
            try:
                with db_cursor(self._conn_factory) as (_, cur):
                    if tx.version == 0:
                        cur.execute(
                            """
                            INSERT INTO attendance_documents(doc_id, employee_id, work_date, version, data, created_at, updated_at)
                            VALUES(%s,%s,%s,1,%s,%s,%s)
                            """,
                            (tx.key, doc["employeeId"], doc["date"], payload, stamp, stamp),
                        )
                        new_version = 1
                    else:
                        cur.execute(
                            """
                            UPDATE attendance_documents
                            SET version=version+1, data=%s, updated_at=%s
                            WHERE doc_id=%s AND version=%s
                            """,
                            (payload, stamp, tx.key, tx.version),
                        )
                        if cur.rowcount == 0:
                            raise TransientStoreConflict(f"{tx.key} changed since v{tx.version}")
                        new_version = tx.version + 1
            except mysql.connector.IntegrityError as exc:
                raise TransientStoreConflict(f"{tx.key} was created concurrently") from exc

        self._hub.publish(tx.key, new_version, doc)

    def subscribe(self, key: str, callback: DocumentCallback) -> Subscription:
        sub = self._hub.add(key, callback)
        try:
            version, doc = self._read(key)
        except Exception:
            sub.cancel()
            raise
        sub.deliver(version, doc)
        return sub
