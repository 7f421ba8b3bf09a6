from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Kind of authenticated principal."""

    ADMIN = "admin"
    USER = "user"


class AttendanceMethod(str, Enum):
    """How an attendance row was created."""

    QR = "qr"
    MANUAL = "manual"


class MarkStatus(str, Enum):
    """Outcome of a mark request, as returned to the client."""

    MARKED = "marked"
    ALREADY_MARKED = "already_marked"
