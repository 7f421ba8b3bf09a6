from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_utc
from ..core.constants import DEFAULT_STATS_DAYS
from ..sessions.repository import SessionRepository


@dataclass(frozen=True)
class StatsSummary:
    sessions: int
    attendance: int
    unique_users: int
    recent_sessions: list[dict]

    def to_dict(self) -> dict:
        return {
            "sessions": self.sessions,
            "attendance": self.attendance,
            "uniqueUsers": self.unique_users,
            "lastSevenDays": self.recent_sessions,
        }


class StatsService:
    def __init__(self, sessions: SessionRepository, attendance: AttendanceRepository):
        self._sessions = sessions
        self._attendance = attendance

    def summary(self, *, today: Optional[date] = None, days: int = DEFAULT_STATS_DAYS) -> StatsSummary:
        today = today or now_utc().date()
        since = today - timedelta(days=int(days))
        recent = [
            {"date": d.strftime("%Y-%m-%d"), "count": n}
            for d, n in self._sessions.count_by_date_since(since)
        ]
        return StatsSummary(
            sessions=self._sessions.count_all(),
            attendance=self._attendance.count_all(),
            unique_users=self._attendance.count_unique_users(),
            recent_sessions=recent,
        )
