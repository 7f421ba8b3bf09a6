from __future__ import annotations

from typing import Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, from_db_datetime, to_db_datetime
from .model import User
from .repository import UserRepository

_COLUMNS = "id, phone, email, external_id, name, age, gender, location, password_hash, created_at"


def _row_to_user(r: dict) -> User:
    return User(
        user_id=r["id"],
        phone=r.get("phone"),
        email=r.get("email"),
        external_id=r.get("external_id"),
        name=r.get("name"),
        age=int(r["age"]) if r.get("age") is not None else None,
        gender=r.get("gender"),
        location=r.get("location"),
        password_hash=r.get("password_hash"),
        created_at=from_db_datetime(r["created_at"]),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_where(self, column: str, value: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE {column}=%s", (value,))
            r = fetchone(cur)
            return _row_to_user(r) if r else None

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self._get_where("id", user_id)

    def get_by_phone(self, phone: str) -> Optional[User]:
        return self._get_where("phone", phone)

    def get_by_email(self, email: str) -> Optional[User]:
        return self._get_where("email", email)

    def get_by_external_id(self, external_id: str) -> Optional[User]:
        return self._get_where("external_id", external_id)

    def create(self, user: User) -> User:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"""
                    INSERT INTO users({_COLUMNS})
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        user.user_id,
                        user.phone,
                        user.email,
                        user.external_id,
                        user.name,
                        user.age,
                        user.gender,
                        user.location,
                        user.password_hash,
                        to_db_datetime(user.created_at),
                    ),
                )
        except mysql.connector.IntegrityError as e:
            if e.errno == errorcode.ER_DUP_ENTRY:
                raise ValidationError("an account with this phone, email or membership id already exists") from e
            raise
        return user
