from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Protocol, Sequence

from .model import Session


class SessionRepository(Protocol):
    def get_by_id(self, session_id: str) -> Optional[Session]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Session]:
        """Newest first: date DESC, start_time DESC."""

        raise NotImplementedError

    def create(
        self,
        *,
        session_id: str,
        session_date: date,
        start_time: time,
        end_time: time,
        created_at: datetime,
    ) -> Session:
        raise NotImplementedError

    def update(
        self,
        *,
        session_id: str,
        session_date: date,
        start_time: time,
        end_time: time,
        updated_at: datetime,
    ) -> Optional[Session]:
        raise NotImplementedError

    def count_all(self) -> int:
        raise NotImplementedError

    def count_by_date_since(self, since: date) -> Sequence[tuple[date, int]]:
        """(session_date, count) pairs for dates >= since, newest first."""

        raise NotImplementedError
