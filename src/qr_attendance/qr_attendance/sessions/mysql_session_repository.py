from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    from_db_datetime,
    normalize_mysql_time,
    to_db_datetime,
)
from .model import Session
from .repository import SessionRepository

_COLUMNS = "id, session_date, start_time, end_time, created_at, updated_at"


def _row_to_session(r: dict) -> Session:
    return Session(
        session_id=r["id"],
        session_date=r["session_date"],
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        created_at=from_db_datetime(r["created_at"]),
        updated_at=from_db_datetime(r["updated_at"]),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, session_id: str) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM sessions WHERE id=%s", (session_id,))
            r = fetchone(cur)
            return _row_to_session(r) if r else None

    def list_all(self) -> Sequence[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM sessions ORDER BY session_date DESC, start_time DESC")
            return [_row_to_session(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        session_id: str,
        session_date: date,
        start_time: time,
        end_time: time,
        created_at: datetime,
    ) -> Session:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO sessions(id, session_date, start_time, end_time, created_at, updated_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (session_id, session_date, start_time, end_time, to_db_datetime(created_at), to_db_datetime(created_at)),
            )
        return Session(
            session_id=session_id,
            session_date=session_date,
            start_time=start_time,
            end_time=end_time,
            created_at=created_at,
            updated_at=created_at,
        )

    def update(
        self,
        *,
        session_id: str,
        session_date: date,
        start_time: time,
        end_time: time,
        updated_at: datetime,
    ) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE sessions
                SET session_date=%s, start_time=%s, end_time=%s, updated_at=%s
                WHERE id=%s
                """,
                (session_date, start_time, end_time, to_db_datetime(updated_at), session_id),
            )
            if cur.rowcount == 0:
                return None
        return self.get_by_id(session_id)

    def count_all(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM sessions")
            return int(fetchone(cur)["n"])

    def count_by_date_since(self, since: date) -> Sequence[tuple[date, int]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT session_date, COUNT(*) AS n
                FROM sessions
                WHERE session_date >= %s
                GROUP BY session_date
                ORDER BY session_date DESC
                """,
                (since,),
            )
            return [(r["session_date"], int(r["n"])) for r in fetchall(cur)]
