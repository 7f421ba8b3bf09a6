from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from ..common.datetime_utils import to_iso
from ..core.enums import AttendanceMethod, MarkStatus


@dataclass(frozen=True)
class Attendance:
    """Domain entity: one row per (user, session) pair, never updated."""

    attendance_id: str
    user_id: str
    session_id: str
    marked_at: datetime
    method: AttendanceMethod
    device_id: Optional[str] = None


@dataclass(frozen=True)
class Inserted:
    row: Attendance


@dataclass(frozen=True)
class AlreadyExists:
    row: Attendance


InsertResult = Union[Inserted, AlreadyExists]


@dataclass(frozen=True)
class MarkResult:
    status: MarkStatus
    attendance_id: str

    def to_dict(self) -> dict:
        return {"status": self.status.value, "attendanceId": self.attendance_id}


@dataclass(frozen=True)
class SessionAttendanceRow:
    """Read-model for the admin per-session view (joined with user contact fields)."""

    attendance_id: str
    user_id: str
    marked_at: datetime
    method: AttendanceMethod
    device_id: Optional[str]
    phone: Optional[str]
    email: Optional[str]
    name: Optional[str]
    external_id: Optional[str]

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "userId": self.user_id,
            "markedAt": to_iso(self.marked_at),
            "method": self.method.value,
            "deviceId": self.device_id,
            "phone": self.phone,
            "email": self.email,
            "name": self.name,
            "externalId": self.external_id,
        }
