from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..common.datetime_utils import to_iso


@dataclass(frozen=True)
class SessionToken:
    """One issued QR token; the ledger only ever appends these."""

    token_id: int
    session_id: str
    token: str
    valid_from: datetime
    valid_to: datetime
    created_at: datetime

    def covers(self, now: datetime) -> bool:
        return self.valid_from <= now < self.valid_to

    def to_dict(self) -> dict:
        return {
            "id": self.token_id,
            "sessionId": self.session_id,
            "token": self.token,
            "validFrom": to_iso(self.valid_from),
            "validTo": to_iso(self.valid_to),
            "createdAt": to_iso(self.created_at),
        }
