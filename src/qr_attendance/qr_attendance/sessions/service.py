from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_utc, parse_clock_time, parse_iso_date
from ..common.validators import require_non_empty
from ..core.exceptions import SessionNotFound, ValidationError
from .model import Session
from .repository import SessionRepository


class SessionService:
    """Use case: admins schedule sessions; everyone can list them."""

    def __init__(self, sessions: SessionRepository):
        self._sessions = sessions

    @staticmethod
    def _parse(date_s: str, start_s: str, end_s: str):
        try:
            session_date = parse_iso_date(require_non_empty(date_s, "date"))
            start_time = parse_clock_time(require_non_empty(start_s, "startTime"))
            end_time = parse_clock_time(require_non_empty(end_s, "endTime"))
        except ValueError:
            raise ValidationError("date must be YYYY-MM-DD and times HH:MM")

        if start_time >= end_time:
            raise ValidationError("startTime must be before endTime")
        return session_date, start_time, end_time

    def get(self, session_id: str) -> Session:
        session = self._sessions.get_by_id(session_id) if session_id else None
        if not session:
            raise SessionNotFound(session_id)
        return session

    def list_all(self) -> Sequence[Session]:
        return self._sessions.list_all()

    def create(self, *, date: str, start_time: str, end_time: str, now: Optional[datetime] = None) -> Session:
        session_date, start, end = self._parse(date, start_time, end_time)
        return self._sessions.create(
            session_id=str(uuid.uuid4()),
            session_date=session_date,
            start_time=start,
            end_time=end,
            created_at=now or now_utc(),
        )

    def update(
        self,
        session_id: str,
        *,
        date: Optional[str] = None,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Session:
        current = self.get(session_id)
        session_date, start, end = self._parse(
            date or current.session_date.strftime("%Y-%m-%d"),
            start_time or current.start_time.strftime("%H:%M:%S"),
            end_time or current.end_time.strftime("%H:%M:%S"),
        )
        updated = self._sessions.update(
            session_id=current.session_id,
            session_date=session_date,
            start_time=start,
            end_time=end,
            updated_at=now or now_utc(),
        )
        if not updated:
            raise SessionNotFound(session_id)
        return updated
