from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import as_utc, now_utc
from ..core.enums import AttendanceMethod, MarkStatus
from ..core.exceptions import InvalidToken, SessionNotFound, ValidationError
from ..sessions.repository import SessionRepository
from ..tokens.engine import TokenEngine
from ..users.repository import UserRepository
from .model import Inserted, MarkResult, SessionAttendanceRow
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceRecorder:
    """Use case: turn scans (or admin entries) into at most one row per (user, session).

    Repeat submissions are normal (network retries, double taps) and answer
    ``already_marked`` with the original row's id. The storage uniqueness
    constraint, not the read in step 3, is what settles concurrent submissions.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        sessions: SessionRepository,
        users: UserRepository,
        engine: TokenEngine,
    ):
        self._attendance = attendance
        self._sessions = sessions
        self._users = users
        self._engine = engine

    def _session_exists(self, session_id: object) -> bool:
        # ids arrive from request bodies; anything but a non-empty str is unknown
        return isinstance(session_id, str) and bool(session_id) and self._sessions.get_by_id(session_id) is not None

    def mark_attendance(
        self,
        user_id: str,
        session_id: str,
        presented_token: object,
        device_id: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> MarkResult:
        now = as_utc(now) if now else now_utc()

        if not self._session_exists(session_id):
            logger.info("scan rejected: unknown session %r (user %s)", session_id, user_id)
            raise SessionNotFound(session_id)

        if not self._engine.validate_token(session_id, presented_token, now):
            logger.info("scan rejected: invalid or expired token for session %s (user %s)", session_id, user_id)
            raise InvalidToken(session_id)

        if device_id is not None:
            device_id = str(device_id).strip() or None
        return self._record(user_id, session_id, AttendanceMethod.QR, device_id, now)

    def mark_attendance_manual(self, user_id: str, session_id: str, *, now: Optional[datetime] = None) -> MarkResult:
        now = as_utc(now) if now else now_utc()

        if not self._session_exists(session_id):
            raise SessionNotFound(session_id)
        if not isinstance(user_id, str) or not user_id or not self._users.get_by_id(user_id):
            raise ValidationError("user does not exist")

        return self._record(user_id, session_id, AttendanceMethod.MANUAL, None, now)

    def _record(
        self,
        user_id: str,
        session_id: str,
        method: AttendanceMethod,
        device_id: Optional[str],
        now: datetime,
    ) -> MarkResult:
        existing = self._attendance.get_for_user_and_session(user_id, session_id)
        if existing:
            logger.debug("attendance already marked: user %s session %s", user_id, session_id)
            return MarkResult(status=MarkStatus.ALREADY_MARKED, attendance_id=existing.attendance_id)

        result = self._attendance.insert_if_absent(
            attendance_id=str(uuid.uuid4()),
            user_id=user_id,
            session_id=session_id,
            marked_at=now,
            method=method,
            device_id=device_id,
        )
        if isinstance(result, Inserted):
            logger.info("attendance marked (%s): user %s session %s", method.value, user_id, session_id)
            return MarkResult(status=MarkStatus.MARKED, attendance_id=result.row.attendance_id)

        logger.debug("attendance insert lost race: user %s session %s", user_id, session_id)
        return MarkResult(status=MarkStatus.ALREADY_MARKED, attendance_id=result.row.attendance_id)

    def list_for_session(self, session_id: str) -> Sequence[SessionAttendanceRow]:
        if not self._session_exists(session_id):
            raise SessionNotFound(session_id)
        return self._attendance.list_for_session(session_id)
