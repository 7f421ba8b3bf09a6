from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_iso


@dataclass(frozen=True)
class User:
    """Domain entity: an attendee.

    At least one of phone/email is set. password_hash is None for accounts
    created through OTP login.
    """

    user_id: str
    phone: Optional[str]
    email: Optional[str]
    created_at: datetime
    external_id: Optional[str] = None
    name: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    location: Optional[str] = None
    password_hash: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.user_id,
            "phone": self.phone,
            "email": self.email,
            "externalId": self.external_id,
            "name": self.name,
            "age": self.age,
            "gender": self.gender,
            "location": self.location,
            "createdAt": to_iso(self.created_at),
        }


@dataclass(frozen=True)
class Admin:
    admin_id: str
    username: str
    password_hash: str
    created_at: datetime
