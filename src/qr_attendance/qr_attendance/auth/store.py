"""Bearer-credential sessions.

Bearer tokens are random and unrelated to QR tokens; the two are never compared.
Entries live in process memory behind a PrincipalStore handle, so a restart logs
everyone out.
"""

from __future__ import annotations

import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Protocol

from ..common.datetime_utils import now_utc
from ..core.constants import BEARER_TOKEN_BYTES
from ..core.enums import Role


@dataclass(frozen=True)
class Principal:
    role: Role
    principal_id: str
    display_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {"role": self.role.value, "id": self.principal_id, "name": self.display_name}


@dataclass(frozen=True)
class PrincipalSession:
    principal: Principal
    issued_at: datetime


class PrincipalStore(Protocol):
    def put(self, bearer: str, session: PrincipalSession) -> None:
        raise NotImplementedError

    def get(self, bearer: str) -> Optional[PrincipalSession]:
        raise NotImplementedError

    def evict(self, bearer: str) -> bool:
        raise NotImplementedError


class InMemoryPrincipalStore(PrincipalStore):
    def __init__(self):
        self._lock = threading.Lock()
        self._sessions: dict[str, PrincipalSession] = {}

    def put(self, bearer: str, session: PrincipalSession) -> None:
        with self._lock:
            self._sessions[bearer] = session

    def get(self, bearer: str) -> Optional[PrincipalSession]:
        with self._lock:
            return self._sessions.get(bearer)

    def evict(self, bearer: str) -> bool:
        with self._lock:
            return self._sessions.pop(bearer, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


class SessionAuth:
    """Issues and resolves bearer credentials.

    ``ttl`` of None keeps a credential until logout or restart.
    """

    def __init__(self, store: PrincipalStore, *, ttl: Optional[timedelta] = None):
        self._store = store
        self._ttl = ttl

    def login(self, principal: Principal, *, now: Optional[datetime] = None) -> str:
        bearer = secrets.token_urlsafe(BEARER_TOKEN_BYTES)
        self._store.put(bearer, PrincipalSession(principal=principal, issued_at=now or now_utc()))
        return bearer

    def resolve(self, bearer: Optional[str], *, now: Optional[datetime] = None) -> Optional[Principal]:
        if not bearer:
            return None
        session = self._store.get(bearer)
        if not session:
            return None
        if self._ttl is not None and (now or now_utc()) - session.issued_at >= self._ttl:
            self._store.evict(bearer)
            return None
        return session.principal

    def logout(self, bearer: Optional[str]) -> bool:
        return bool(bearer) and self._store.evict(bearer)
