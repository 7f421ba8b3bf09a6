"""Keyed, window-bound QR tokens.

A token is HMAC-SHA256(secret, session_id + window_start) in hex. Anyone holding
the secret re-derives the same token for the same window, so validation never
needs to look anything up.
"""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass
from datetime import datetime, timedelta

from ..common.datetime_utils import to_iso
from ..core.constants import DEFAULT_GRACE_WINDOWS, DEFAULT_WINDOW_MINUTES
from ..core.exceptions import ConfigurationError
from .window import window_end, window_start

TOKEN_HEX_LENGTH = hashlib.sha256().digest_size * 2


@dataclass(frozen=True)
class IssuedToken:
    token: str
    valid_from: datetime
    valid_to: datetime

    def to_dict(self) -> dict:
        return {
            "token": self.token,
            "validFrom": to_iso(self.valid_from),
            "validTo": to_iso(self.valid_to),
        }


def derive_token(session_id: str, start: datetime, secret_key: bytes) -> str:
    message = f"{session_id}{to_iso(start)}".encode("utf-8")
    return hmac.new(secret_key, message, hashlib.sha256).hexdigest()


class TokenEngine:
    def __init__(
        self,
        secret_key: str | bytes,
        *,
        window_minutes: int = DEFAULT_WINDOW_MINUTES,
        grace_windows: int = DEFAULT_GRACE_WINDOWS,
    ):
        if not secret_key:
            raise ConfigurationError("QR secret key is not configured")
        if int(window_minutes) <= 0:
            raise ConfigurationError("QR window length must be a positive number of minutes")
        if int(grace_windows) < 0:
            raise ConfigurationError("QR grace windows cannot be negative")

        self._secret = secret_key.encode("utf-8") if isinstance(secret_key, str) else bytes(secret_key)
        self._window_minutes = int(window_minutes)
        self._grace_windows = int(grace_windows)

    def issue_token(self, session_id: str, now: datetime) -> IssuedToken:
        start = window_start(now, self._window_minutes)
        return IssuedToken(
            token=derive_token(session_id, start, self._secret),
            valid_from=start,
            valid_to=window_end(start, self._window_minutes),
        )

    def validate_token(self, session_id: str, presented_token: object, now: datetime) -> bool:
        if not isinstance(presented_token, str) or not presented_token:
            return False
        if len(presented_token) != TOKEN_HEX_LENGTH:
            return False

        presented = presented_token.lower().encode("ascii", errors="replace")
        step = timedelta(minutes=self._window_minutes)
        start = window_start(now, self._window_minutes)
        # Current window first, then up to grace_windows preceding ones.
        for _ in range(self._grace_windows + 1):
            expected = derive_token(session_id, start, self._secret).encode("ascii")
            if hmac.compare_digest(expected, presented):
                return True
            start -= step
        return False
