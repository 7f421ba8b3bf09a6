from __future__ import annotations

import itertools
import threading
from datetime import date, datetime, time, timezone
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.qr_attendance.qr_attendance.attendance.model import (
    AlreadyExists,
    Attendance,
    Inserted,
    SessionAttendanceRow,
)
from src.qr_attendance.qr_attendance.container import wire_container
from src.qr_attendance.qr_attendance.core.enums import AttendanceMethod
from src.qr_attendance.qr_attendance.core.exceptions import ValidationError
from src.qr_attendance.qr_attendance.sessions.model import Session
from src.qr_attendance.qr_attendance.tokens.model import SessionToken
from src.qr_attendance.qr_attendance.users.model import Admin, User

QR_SECRET = "test-qr-secret"


class InMemoryUsers:
    def __init__(self):
        self._lock = threading.Lock()
        self.by_id: dict[str, User] = {}

    def _find(self, attr: str, value) -> Optional[User]:
        return next((u for u in self.by_id.values() if value and getattr(u, attr) == value), None)

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self.by_id.get(user_id)

    def get_by_phone(self, phone: str) -> Optional[User]:
        return self._find("phone", phone)

    def get_by_email(self, email: str) -> Optional[User]:
        return self._find("email", email)

    def get_by_external_id(self, external_id: str) -> Optional[User]:
        return self._find("external_id", external_id)

    def create(self, user: User) -> User:
        with self._lock:
            for attr in ("phone", "email", "external_id"):
                if self._find(attr, getattr(user, attr)):
                    raise ValidationError(f"{attr} taken")
            self.by_id[user.user_id] = user
        return user


class InMemoryAdmins:
    def __init__(self, admins: list[Admin]):
        self.by_username = {a.username: a for a in admins}

    def get_by_username(self, username: str) -> Optional[Admin]:
        return self.by_username.get(username)


class InMemorySessions:
    def __init__(self):
        self.by_id: dict[str, Session] = {}

    def get_by_id(self, session_id: str) -> Optional[Session]:
        return self.by_id.get(session_id)

    def list_all(self):
        return sorted(self.by_id.values(), key=lambda s: (s.session_date, s.start_time), reverse=True)

    def create(self, *, session_id, session_date, start_time, end_time, created_at) -> Session:
        s = Session(
            session_id=session_id,
            session_date=session_date,
            start_time=start_time,
            end_time=end_time,
            created_at=created_at,
            updated_at=created_at,
        )
        self.by_id[session_id] = s
        return s

    def update(self, *, session_id, session_date, start_time, end_time, updated_at) -> Optional[Session]:
        cur = self.by_id.get(session_id)
        if not cur:
            return None
        s = Session(
            session_id=session_id,
            session_date=session_date,
            start_time=start_time,
            end_time=end_time,
            created_at=cur.created_at,
            updated_at=updated_at,
        )
        self.by_id[session_id] = s
        return s

    def count_all(self) -> int:
        return len(self.by_id)

    def count_by_date_since(self, since: date):
        counts: dict[date, int] = {}
        for s in self.by_id.values():
            if s.session_date >= since:
                counts[s.session_date] = counts.get(s.session_date, 0) + 1
        return sorted(counts.items(), reverse=True)


class InMemoryTokens:
    def __init__(self):
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self.rows: list[SessionToken] = []

    def get_latest_covering(self, *, session_id: str, now: datetime) -> Optional[SessionToken]:
        with self._lock:
            live = [t for t in self.rows if t.session_id == session_id and t.covers(now)]
        return max(live, key=lambda t: (t.created_at, t.token_id), default=None)

    def append(self, *, session_id, token, valid_from, valid_to, created_at) -> SessionToken:
        with self._lock:
            row = SessionToken(
                token_id=next(self._ids),
                session_id=session_id,
                token=token,
                valid_from=valid_from,
                valid_to=valid_to,
                created_at=created_at,
            )
            self.rows.append(row)
        return row

    def list_for_session(self, *, session_id: str, limit: int):
        rows = [t for t in self.rows if t.session_id == session_id]
        rows.sort(key=lambda t: (t.created_at, t.token_id), reverse=True)
        return rows[:limit]


class InMemoryAttendance:
    """Mirrors UNIQUE(user_id, session_id): the lock plays the database's part."""

    def __init__(self, users: Optional[InMemoryUsers] = None):
        self._lock = threading.Lock()
        self._users = users
        self.rows: dict[tuple[str, str], Attendance] = {}

    def get_for_user_and_session(self, user_id: str, session_id: str) -> Optional[Attendance]:
        with self._lock:
            return self.rows.get((user_id, session_id))

    def insert_if_absent(self, *, attendance_id, user_id, session_id, marked_at, method, device_id=None):
        with self._lock:
            existing = self.rows.get((user_id, session_id))
            if existing:
                return AlreadyExists(existing)
            row = Attendance(
                attendance_id=attendance_id,
                user_id=user_id,
                session_id=session_id,
                marked_at=marked_at,
                method=AttendanceMethod(method),
                device_id=device_id,
            )
            self.rows[(user_id, session_id)] = row
            return Inserted(row)

    def list_for_session(self, session_id: str):
        out = []
        for a in self.rows.values():
            if a.session_id != session_id:
                continue
            u = self._users.get_by_id(a.user_id) if self._users else None
            out.append(
                SessionAttendanceRow(
                    attendance_id=a.attendance_id,
                    user_id=a.user_id,
                    marked_at=a.marked_at,
                    method=a.method,
                    device_id=a.device_id,
                    phone=u.phone if u else None,
                    email=u.email if u else None,
                    name=u.name if u else None,
                    external_id=u.external_id if u else None,
                )
            )
        out.sort(key=lambda r: r.marked_at, reverse=True)
        return out

    def count_all(self) -> int:
        return len(self.rows)

    def count_unique_users(self) -> int:
        return len({user_id for user_id, _ in self.rows})


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 1, 1, 10, 2, 0, tzinfo=timezone.utc)


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return InMemoryUsers()


@pytest.fixture
def sessions_repo() -> InMemorySessions:
    return InMemorySessions()


@pytest.fixture
def tokens_repo() -> InMemoryTokens:
    return InMemoryTokens()


@pytest.fixture
def attendance_repo(users_repo) -> InMemoryAttendance:
    return InMemoryAttendance(users_repo)


@pytest.fixture
def admins_repo() -> InMemoryAdmins:
    admin = Admin(
        admin_id="admin-1",
        username="admin",
        password_hash=generate_password_hash("admin123"),
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    return InMemoryAdmins([admin])


@pytest.fixture
def container(users_repo, admins_repo, sessions_repo, tokens_repo, attendance_repo):
    return wire_container(
        users_repo=users_repo,
        admins_repo=admins_repo,
        sessions_repo=sessions_repo,
        tokens_repo=tokens_repo,
        attendance_repo=attendance_repo,
        qr_secret_key=QR_SECRET,
        window_minutes=5,
    )


@pytest.fixture
def morning_session(sessions_repo) -> Session:
    return sessions_repo.create(
        session_id="session-1",
        session_date=date(2024, 1, 1),
        start_time=time(10, 0),
        end_time=time(11, 0),
        created_at=datetime(2023, 12, 31, 9, 0, tzinfo=timezone.utc),
    )


def make_user(users_repo: InMemoryUsers, user_id: str, phone: str) -> User:
    return users_repo.create(
        User(user_id=user_id, phone=phone, email=None, created_at=datetime(2023, 12, 1, tzinfo=timezone.utc))
    )


@pytest.fixture
def alice(users_repo) -> User:
    return make_user(users_repo, "user-alice", "+15550001")


@pytest.fixture
def bob(users_repo) -> User:
    return make_user(users_repo, "user-bob", "+15550002")
