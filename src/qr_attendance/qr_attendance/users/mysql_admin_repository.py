from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, from_db_datetime
from .model import Admin
from .repository import AdminRepository


class MySQLAdminRepository(AdminRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_username(self, username: str) -> Optional[Admin]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, username, password_hash, created_at FROM admins WHERE username=%s",
                (username,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Admin(
                admin_id=r["id"],
                username=r["username"],
                password_hash=r["password_hash"],
                created_at=from_db_datetime(r["created_at"]),
            )
