from __future__ import annotations

import logging
import uuid
from typing import Iterable

from werkzeug.security import generate_password_hash

from ..common.datetime_utils import now_utc
from .connection import DatabaseConnection
from .migrations import MIGRATIONS, MIGRATIONS_TABLE_SQL, Migration, pending
from .mysql_base import db_cursor, fetchall, fetchone, to_db_datetime

logger = logging.getLogger(__name__)


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for migration scripts (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
            buf.append(ch)
            continue

        if ch == '"' and not in_single:
            in_double = not in_double
            buf.append(ch)
            continue

        if ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(conn_factory: DatabaseConnection) -> None:
    database = conn_factory.config.database
    conn = conn_factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def applied_versions(conn_factory: DatabaseConnection) -> set[int]:
    with db_cursor(conn_factory) as (_, cur):
        cur.execute(MIGRATIONS_TABLE_SQL)
        cur.execute("SELECT version FROM schema_migrations")
        return {int(r["version"]) for r in fetchall(cur)}


def apply_migrations(
    conn_factory: DatabaseConnection,
    *,
    migrations: tuple[Migration, ...] = MIGRATIONS,
) -> list[int]:
    """Apply pending migrations in order. Returns the versions applied now."""

    ensure_database_exists(conn_factory)
    done: list[int] = []
    for migration in pending(applied_versions(conn_factory), migrations):
        with db_cursor(conn_factory) as (_, cur):
            for stmt in _iter_sql_statements(migration.sql):
                cur.execute(stmt)
            cur.execute(
                "INSERT INTO schema_migrations(version, name, applied_at) VALUES(%s,%s,%s)",
                (migration.version, migration.name, to_db_datetime(now_utc())),
            )
        logger.info("applied migration %03d_%s", migration.version, migration.name)
        done.append(migration.version)
    return done


def ensure_default_admin(conn_factory: DatabaseConnection, *, username: str, password: str | None) -> bool:
    """Create the configured admin account if it does not exist yet."""

    if not username or not password:
        logger.warning("default admin not configured; skipping")
        return False

    with db_cursor(conn_factory) as (_, cur):
        cur.execute("SELECT id FROM admins WHERE username=%s", (username,))
        if fetchone(cur):
            return False
        cur.execute(
            "INSERT INTO admins(id, username, password_hash, created_at) VALUES(%s,%s,%s,%s)",
            (str(uuid.uuid4()), username, generate_password_hash(password), to_db_datetime(now_utc())),
        )
    logger.info("created default admin %r", username)
    return True


def list_tables(conn_factory: DatabaseConnection) -> list[str]:
    with db_cursor(conn_factory, dictionary=False) as (_, cur):
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
