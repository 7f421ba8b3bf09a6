from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import SessionToken


class SessionTokenRepository(Protocol):
    """Append-only history of issued tokens."""

    def get_latest_covering(self, *, session_id: str, now: datetime) -> Optional[SessionToken]:
        """Most recently created token for the session whose interval contains ``now``."""

        raise NotImplementedError

    def append(
        self,
        *,
        session_id: str,
        token: str,
        valid_from: datetime,
        valid_to: datetime,
        created_at: datetime,
    ) -> SessionToken:
        raise NotImplementedError

    def list_for_session(self, *, session_id: str, limit: int) -> Sequence[SessionToken]:
        raise NotImplementedError
