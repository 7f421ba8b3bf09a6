from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.enums import AttendanceMethod
from ..core.exceptions import DuplicateAttendance
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, to_db_datetime
from .model import AlreadyExists, Attendance, Inserted, InsertResult, SessionAttendanceRow
from .repository import AttendanceRepository


def _row_to_attendance(r: dict) -> Attendance:
    return Attendance(
        attendance_id=r["id"],
        user_id=r["user_id"],
        session_id=r["session_id"],
        marked_at=from_db_datetime(r["marked_at"]),
        method=AttendanceMethod(r["method"]),
        device_id=r.get("device_id"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user_and_session(self, user_id: str, session_id: str) -> Optional[Attendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, user_id, session_id, marked_at, method, device_id
                FROM attendance
                WHERE user_id=%s AND session_id=%s
                """,
                (user_id, session_id),
            )
            r = fetchone(cur)
            return _row_to_attendance(r) if r else None

    def _insert(self, row: Attendance) -> None:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance(id, user_id, session_id, marked_at, method, device_id)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        row.attendance_id,
                        row.user_id,
                        row.session_id,
                        to_db_datetime(row.marked_at),
                        row.method.value,
                        row.device_id,
                    ),
                )
        except mysql.connector.IntegrityError as e:
            # Only the (user_id, session_id) key can collide; ids are fresh UUIDs.
            if e.errno == errorcode.ER_DUP_ENTRY:
                raise DuplicateAttendance(f"{row.user_id}/{row.session_id}") from e
            raise

    def insert_if_absent(
        self,
        *,
        attendance_id: str,
        user_id: str,
        session_id: str,
        marked_at: datetime,
        method: AttendanceMethod,
        device_id: Optional[str] = None,
    ) -> InsertResult:
        row = Attendance(
            attendance_id=attendance_id,
            user_id=user_id,
            session_id=session_id,
            marked_at=marked_at,
            method=method,
            device_id=device_id,
        )
        try:
            self._insert(row)
        except DuplicateAttendance:
            existing = self.get_for_user_and_session(user_id, session_id)
            if existing is None:
                raise
            return AlreadyExists(existing)
        return Inserted(row)

    def list_for_session(self, session_id: str) -> Sequence[SessionAttendanceRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT a.id, a.user_id, a.marked_at, a.method, a.device_id,
                       u.phone, u.email, u.name, u.external_id
                FROM attendance a
                JOIN users u ON u.id = a.user_id
                WHERE a.session_id=%s
                ORDER BY a.marked_at DESC
                """,
                (session_id,),
            )
            return [
                SessionAttendanceRow(
                    attendance_id=r["id"],
                    user_id=r["user_id"],
                    marked_at=from_db_datetime(r["marked_at"]),
                    method=AttendanceMethod(r["method"]),
                    device_id=r.get("device_id"),
                    phone=r.get("phone"),
                    email=r.get("email"),
                    name=r.get("name"),
                    external_id=r.get("external_id"),
                )
                for r in fetchall(cur)
            ]

    def count_all(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM attendance")
            return int(fetchone(cur)["n"])

    def count_unique_users(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(DISTINCT user_id) AS n FROM attendance")
            return int(fetchone(cur)["n"])
