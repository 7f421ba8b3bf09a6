from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceRecorder
from .auth.store import InMemoryPrincipalStore, SessionAuth
from .core.constants import DEFAULT_GRACE_WINDOWS, DEFAULT_OTP_TTL_SECONDS, DEFAULT_WINDOW_MINUTES
from .database.connection import DatabaseConnection, DBConfig
from .reports.service import StatsService
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .sessions.service import SessionService
from .tokens.engine import TokenEngine
from .tokens.ledger import TokenLedger
from .tokens.mysql_token_repository import MySQLSessionTokenRepository
from .tokens.repository import SessionTokenRepository
from .users.mysql_admin_repository import MySQLAdminRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.otp import OtpStore
from .users.repository import AdminRepository, UserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    admins_repo: AdminRepository
    sessions_repo: SessionRepository
    tokens_repo: SessionTokenRepository
    attendance_repo: AttendanceRepository

    token_engine: TokenEngine
    session_auth: SessionAuth

    auth_service: AuthService
    session_service: SessionService
    token_ledger: TokenLedger
    attendance_recorder: AttendanceRecorder
    stats_service: StatsService

    conn: Optional[DatabaseConnection] = None


def wire_container(
    *,
    users_repo: UserRepository,
    admins_repo: AdminRepository,
    sessions_repo: SessionRepository,
    tokens_repo: SessionTokenRepository,
    attendance_repo: AttendanceRepository,
    qr_secret_key: str,
    window_minutes: int = DEFAULT_WINDOW_MINUTES,
    grace_windows: int = DEFAULT_GRACE_WINDOWS,
    bearer_ttl_minutes: Optional[int] = None,
    otp_ttl_seconds: int = DEFAULT_OTP_TTL_SECONDS,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build services over any repository implementations (MySQL or in-memory)."""

    engine = TokenEngine(qr_secret_key, window_minutes=window_minutes, grace_windows=grace_windows)
    ttl = timedelta(minutes=int(bearer_ttl_minutes)) if bearer_ttl_minutes else None
    session_auth = SessionAuth(InMemoryPrincipalStore(), ttl=ttl)

    return Container(
        users_repo=users_repo,
        admins_repo=admins_repo,
        sessions_repo=sessions_repo,
        tokens_repo=tokens_repo,
        attendance_repo=attendance_repo,
        token_engine=engine,
        session_auth=session_auth,
        auth_service=AuthService(
            users_repo,
            admins_repo,
            session_auth,
            OtpStore(),
            otp_ttl_seconds=otp_ttl_seconds,
        ),
        session_service=SessionService(sessions_repo),
        token_ledger=TokenLedger(tokens_repo, engine),
        attendance_recorder=AttendanceRecorder(attendance_repo, sessions_repo, users_repo, engine),
        stats_service=StatsService(sessions_repo, attendance_repo),
        conn=conn,
    )


def build_container(*, db_config: dict, **settings) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))
    return wire_container(
        users_repo=MySQLUserRepository(conn),
        admins_repo=MySQLAdminRepository(conn),
        sessions_repo=MySQLSessionRepository(conn),
        tokens_repo=MySQLSessionTokenRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        conn=conn,
        **settings,
    )
