from __future__ import annotations

import re
from typing import Optional

from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_PHONE_RE = re.compile(r"^\+?[0-9]{6,15}$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def normalize_phone(value: Optional[str]) -> Optional[str]:
    if value is None or not str(value).strip():
        return None
    phone = re.sub(r"[\s\-()]", "", str(value))
    if not _PHONE_RE.match(phone):
        raise ValidationError("phone is invalid")
    return phone


def normalize_email(value: Optional[str]) -> Optional[str]:
    if value is None or not str(value).strip():
        return None
    email = str(value).strip().lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError("email is invalid")
    return email
