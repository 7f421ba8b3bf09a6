from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..auth.store import Principal, SessionAuth
from ..common.datetime_utils import now_utc
from ..common.validators import normalize_email, normalize_phone, require_min_length, require_non_empty
from ..core.constants import DEFAULT_OTP_TTL_SECONDS
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ValidationError
from .model import Admin, User
from .otp import OtpStore
from .repository import AdminRepository, UserRepository

logger = logging.getLogger(__name__)


def _check_password(password_hash: Optional[str], password: str) -> bool:
    if not password_hash or not password:
        return False
    try:
        return check_password_hash(password_hash, password)
    except ValueError:
        # e.g. placeholder hashes or corrupted values
        return False


def _user_principal(user: User) -> Principal:
    return Principal(role=Role.USER, principal_id=user.user_id, display_name=user.name or user.phone or user.email)


class AuthService:
    """Use cases: attendee sign-up/login (OTP or password) and admin login."""

    def __init__(
        self,
        users: UserRepository,
        admins: AdminRepository,
        session_auth: SessionAuth,
        otp_store: OtpStore,
        *,
        otp_ttl_seconds: int = DEFAULT_OTP_TTL_SECONDS,
    ):
        self._users = users
        self._admins = admins
        self._auth = session_auth
        self._otp = otp_store
        self._otp_ttl = timedelta(seconds=int(otp_ttl_seconds))

    # --- attendees ---

    def request_otp(self, phone: str, *, now: Optional[datetime] = None) -> dict:
        phone = normalize_phone(require_non_empty(phone, "phone"))
        challenge = self._otp.issue(phone, now=now or now_utc(), ttl=self._otp_ttl)

        # No SMS gateway: the log is the delivery channel.
        logger.info("[otp] phone=%s code=%s", phone, challenge.code)
        return {"requestId": challenge.request_id, "expiresIn": int(self._otp_ttl.total_seconds())}

    def verify_otp(self, phone: str, code: str, *, now: Optional[datetime] = None) -> tuple[str, User]:
        now = now or now_utc()
        try:
            phone = normalize_phone(require_non_empty(phone, "phone"))
        except ValidationError:
            raise AuthenticationError("invalid_otp")

        if not self._otp.consume(phone, code, now=now):
            raise AuthenticationError("invalid_otp")

        user = self._users.get_by_phone(phone)
        if not user:
            user = self._users.create(User(user_id=str(uuid.uuid4()), phone=phone, email=None, created_at=now))
            logger.info("created contact-only user %s", user.user_id)

        return self._auth.login(_user_principal(user), now=now), user

    def register(
        self,
        *,
        password: str,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        external_id: Optional[str] = None,
        name: Optional[str] = None,
        age: Optional[int] = None,
        gender: Optional[str] = None,
        location: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> tuple[str, User]:
        now = now or now_utc()
        phone = normalize_phone(phone)
        email = normalize_email(email)
        if not phone and not email:
            raise ValidationError("phone or email is required")
        require_min_length(password, "password", 6)

        external_id = (external_id or "").strip() or None
        if phone and self._users.get_by_phone(phone):
            raise ValidationError("phone is already registered")
        if email and self._users.get_by_email(email):
            raise ValidationError("email is already registered")
        if external_id and self._users.get_by_external_id(external_id):
            raise ValidationError("membership id is already registered")

        if age is not None:
            try:
                age = int(age)
            except (TypeError, ValueError):
                raise ValidationError("age must be a number")

        user = self._users.create(
            User(
                user_id=str(uuid.uuid4()),
                phone=phone,
                email=email,
                external_id=external_id,
                name=(name or "").strip() or None,
                age=age,
                gender=(gender or "").strip() or None,
                location=(location or "").strip() or None,
                password_hash=generate_password_hash(password),
                created_at=now,
            )
        )
        return self._auth.login(_user_principal(user), now=now), user

    def login(self, identifier: str, password: str, *, now: Optional[datetime] = None) -> tuple[str, User]:
        identifier = (identifier or "").strip()
        user = None
        if "@" in identifier:
            user = self._users.get_by_email(identifier.lower())
        elif identifier:
            try:
                user = self._users.get_by_phone(normalize_phone(identifier))
            except ValidationError:
                user = None

        if not user or not _check_password(user.password_hash, password):
            raise AuthenticationError("invalid_credentials")
        return self._auth.login(_user_principal(user), now=now), user

    # --- admins ---

    def admin_login(self, username: str, password: str, *, now: Optional[datetime] = None) -> tuple[str, Admin]:
        admin = self._admins.get_by_username((username or "").strip()) if username else None
        if not admin or not _check_password(admin.password_hash, password):
            logger.warning("admin login failed for %r", username)
            raise AuthenticationError("invalid_credentials")

        principal = Principal(role=Role.ADMIN, principal_id=admin.admin_id, display_name=admin.username)
        return self._auth.login(principal, now=now), admin

    def logout(self, bearer: Optional[str]) -> bool:
        return self._auth.logout(bearer)
