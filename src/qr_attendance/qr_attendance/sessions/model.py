from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time

from ..common.datetime_utils import to_iso


@dataclass(frozen=True)
class Session:
    """Domain entity: a scheduled in-person session.

    Note: start_time < end_time is checked by SessionService, not by the table.
    """

    session_id: str
    session_date: date
    start_time: time
    end_time: time
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.session_id,
            "date": self.session_date.strftime("%Y-%m-%d"),
            "startTime": self.start_time.strftime("%H:%M"),
            "endTime": self.end_time.strftime("%H:%M"),
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }
