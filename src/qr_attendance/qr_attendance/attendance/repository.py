from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceMethod
from .model import Attendance, InsertResult, SessionAttendanceRow


class AttendanceRepository(Protocol):
    def get_for_user_and_session(self, user_id: str, session_id: str) -> Optional[Attendance]:
        raise NotImplementedError

    def insert_if_absent(
        self,
        *,
        attendance_id: str,
        user_id: str,
        session_id: str,
        marked_at: datetime,
        method: AttendanceMethod,
        device_id: Optional[str] = None,
    ) -> InsertResult:
        """Insert unless (user_id, session_id) already has a row.

        Returns Inserted(new_row) or AlreadyExists(existing_row). The uniqueness
        constraint decides races: of two concurrent callers exactly one gets
        Inserted, the other AlreadyExists with the winner's row.
        """

        raise NotImplementedError

    def list_for_session(self, session_id: str) -> Sequence[SessionAttendanceRow]:
        """Newest first."""

        raise NotImplementedError

    def count_all(self) -> int:
        raise NotImplementedError

    def count_unique_users(self) -> int:
        raise NotImplementedError
