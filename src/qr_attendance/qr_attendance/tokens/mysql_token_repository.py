from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, to_db_datetime
from .model import SessionToken
from .repository import SessionTokenRepository


def _row_to_token(r: dict) -> SessionToken:
    return SessionToken(
        token_id=int(r["id"]),
        session_id=r["session_id"],
        token=r["token"],
        valid_from=from_db_datetime(r["valid_from"]),
        valid_to=from_db_datetime(r["valid_to"]),
        created_at=from_db_datetime(r["created_at"]),
    )


class MySQLSessionTokenRepository(SessionTokenRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_latest_covering(self, *, session_id: str, now: datetime) -> Optional[SessionToken]:
        db_now = to_db_datetime(now)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, session_id, token, valid_from, valid_to, created_at
                FROM session_tokens
                WHERE session_id=%s AND valid_from<=%s AND valid_to>%s
                ORDER BY created_at DESC, id DESC
                LIMIT 1
                """,
                (session_id, db_now, db_now),
            )
            r = fetchone(cur)
            return _row_to_token(r) if r else None

    def append(
        self,
        *,
        session_id: str,
        token: str,
        valid_from: datetime,
        valid_to: datetime,
        created_at: datetime,
    ) -> SessionToken:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO session_tokens(session_id, token, valid_from, valid_to, created_at)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (
                    session_id,
                    token,
                    to_db_datetime(valid_from),
                    to_db_datetime(valid_to),
                    to_db_datetime(created_at),
                ),
            )
            token_id = int(cur.lastrowid)
        return SessionToken(
            token_id=token_id,
            session_id=session_id,
            token=token,
            valid_from=valid_from,
            valid_to=valid_to,
            created_at=created_at,
        )

    def list_for_session(self, *, session_id: str, limit: int) -> Sequence[SessionToken]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, session_id, token, valid_from, valid_to, created_at
                FROM session_tokens
                WHERE session_id=%s
                ORDER BY created_at DESC, id DESC
                LIMIT %s
                """,
                (session_id, int(limit)),
            )
            return [_row_to_token(r) for r in fetchall(cur)]
