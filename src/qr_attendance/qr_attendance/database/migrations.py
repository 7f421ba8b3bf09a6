"""Versioned schema migrations.

Each entry runs exactly once per database, in version order; applied versions are
recorded in ``schema_migrations``. Append new entries, never edit shipped ones.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Migration:
    version: int
    name: str
    sql: str


MIGRATIONS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    version INT NOT NULL PRIMARY KEY,
    name VARCHAR(128) NOT NULL,
    applied_at DATETIME(6) NOT NULL
) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
"""


MIGRATIONS: tuple[Migration, ...] = (
    Migration(
        version=1,
        name="identities_and_sessions",
        sql="""
        CREATE TABLE IF NOT EXISTS users (
            id CHAR(36) NOT NULL PRIMARY KEY,
            phone VARCHAR(32) NULL,
            email VARCHAR(255) NULL,
            external_id VARCHAR(64) NULL,
            name VARCHAR(255) NULL,
            age INT NULL,
            gender VARCHAR(32) NULL,
            location VARCHAR(255) NULL,
            password_hash VARCHAR(255) NULL,
            created_at DATETIME(6) NOT NULL,
            UNIQUE KEY uq_users_phone (phone),
            UNIQUE KEY uq_users_email (email),
            UNIQUE KEY uq_users_external_id (external_id)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;

        CREATE TABLE IF NOT EXISTS admins (
            id CHAR(36) NOT NULL PRIMARY KEY,
            username VARCHAR(64) NOT NULL,
            password_hash VARCHAR(255) NOT NULL,
            created_at DATETIME(6) NOT NULL,
            UNIQUE KEY uq_admins_username (username)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;

        CREATE TABLE IF NOT EXISTS sessions (
            id CHAR(36) NOT NULL PRIMARY KEY,
            session_date DATE NOT NULL,
            start_time TIME NOT NULL,
            end_time TIME NOT NULL,
            created_at DATETIME(6) NOT NULL,
            updated_at DATETIME(6) NOT NULL
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
        """,
    ),
    Migration(
        version=2,
        name="tokens_and_attendance",
        sql="""
        CREATE TABLE IF NOT EXISTS session_tokens (
            id BIGINT NOT NULL AUTO_INCREMENT PRIMARY KEY,
            session_id CHAR(36) NOT NULL,
            token CHAR(64) NOT NULL,
            valid_from DATETIME(6) NOT NULL,
            valid_to DATETIME(6) NOT NULL,
            created_at DATETIME(6) NOT NULL,
            CONSTRAINT fk_session_tokens_session FOREIGN KEY (session_id) REFERENCES sessions(id)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;

        CREATE TABLE IF NOT EXISTS attendance (
            id CHAR(36) NOT NULL PRIMARY KEY,
            user_id CHAR(36) NOT NULL,
            session_id CHAR(36) NOT NULL,
            marked_at DATETIME(6) NOT NULL,
            method VARCHAR(16) NOT NULL,
            device_id VARCHAR(255) NULL,
            UNIQUE KEY uq_attendance_user_session (user_id, session_id),
            CONSTRAINT fk_attendance_user FOREIGN KEY (user_id) REFERENCES users(id),
            CONSTRAINT fk_attendance_session FOREIGN KEY (session_id) REFERENCES sessions(id)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
        """,
    ),
    Migration(
        version=3,
        name="lookup_indexes",
        sql="""
        CREATE INDEX ix_session_tokens_session_created ON session_tokens (session_id, created_at);
        CREATE INDEX ix_attendance_session_marked ON attendance (session_id, marked_at);
        CREATE INDEX ix_sessions_date ON sessions (session_date, start_time);
        """,
    ),
)


def pending(applied: set[int], migrations: tuple[Migration, ...] = MIGRATIONS) -> list[Migration]:
    """Migrations not yet applied, in version order."""
    versions = [m.version for m in migrations]
    if len(versions) != len(set(versions)):
        raise ValueError("duplicate migration version")
    return sorted((m for m in migrations if m.version not in applied), key=lambda m: m.version)
