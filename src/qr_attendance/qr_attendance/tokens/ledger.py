from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

from ..common.datetime_utils import as_utc
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..sessions.model import Session
from .engine import IssuedToken, TokenEngine
from .model import SessionToken
from .repository import SessionTokenRepository

logger = logging.getLogger(__name__)


class TokenLedger:
    """Read-through cache of issued tokens with append-only history.

    A QR code shown on screen keeps the same token for the whole window, however
    often it is requested. Validation never reads the ledger; two requests racing
    at a window boundary may both append a row for the same window, which only
    duplicates an audit entry.
    """

    def __init__(self, tokens: SessionTokenRepository, engine: TokenEngine):
        self._tokens = tokens
        self._engine = engine

    def current_or_new_token(self, session: Session, now: datetime) -> IssuedToken:
        now = as_utc(now)
        existing = self._tokens.get_latest_covering(session_id=session.session_id, now=now)
        if existing:
            return IssuedToken(token=existing.token, valid_from=existing.valid_from, valid_to=existing.valid_to)

        issued = self._engine.issue_token(session.session_id, now)
        self._tokens.append(
            session_id=session.session_id,
            token=issued.token,
            valid_from=issued.valid_from,
            valid_to=issued.valid_to,
            created_at=now,
        )
        logger.info("issued token for session %s valid until %s", session.session_id, issued.valid_to.isoformat())
        return issued

    def history(self, session_id: str, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[SessionToken]:
        return self._tokens.list_for_session(session_id=session_id, limit=int(limit))
