from __future__ import annotations

import hmac
import secrets
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..core.constants import OTP_DIGITS


@dataclass(frozen=True)
class OtpChallenge:
    request_id: str
    code: str
    expires_at: datetime


class OtpStore:
    """One pending code per phone; a new request replaces the previous code."""

    def __init__(self):
        self._lock = threading.Lock()
        self._pending: dict[str, OtpChallenge] = {}

    def issue(self, phone: str, *, now: datetime, ttl: timedelta) -> OtpChallenge:
        code = str(secrets.randbelow(9 * 10 ** (OTP_DIGITS - 1)) + 10 ** (OTP_DIGITS - 1))
        challenge = OtpChallenge(request_id=str(uuid.uuid4()), code=code, expires_at=now + ttl)
        with self._lock:
            for stale in [p for p, c in self._pending.items() if c.expires_at <= now]:
                del self._pending[stale]
            self._pending[phone] = challenge
        return challenge

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)

    def consume(self, phone: str, code: Optional[str], *, now: datetime) -> bool:
        """True once for a matching, unexpired code."""

        if not code:
            return False
        with self._lock:
            challenge = self._pending.get(phone)
            if not challenge or challenge.expires_at <= now:
                return False
            if not hmac.compare_digest(challenge.code.encode(), str(code).strip().encode()):
                return False
            del self._pending[phone]
            return True
