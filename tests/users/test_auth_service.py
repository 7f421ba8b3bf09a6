from datetime import timedelta

import pytest

from src.qr_attendance.qr_attendance.core.enums import Role
from src.qr_attendance.qr_attendance.core.exceptions import AuthenticationError, ValidationError
from src.qr_attendance.qr_attendance.users.otp import OtpStore


def _issued_code(container, phone):
    # the code only leaves the process through the log; read it from the store
    return container.auth_service._otp._pending[phone].code


def test_otp_flow_creates_contact_only_user(container, users_repo, fixed_now):
    auth = container.auth_service
    challenge = auth.request_otp("+1 555-0009", now=fixed_now)
    assert challenge["expiresIn"] == 300
    assert challenge["requestId"]

    bearer, user = auth.verify_otp("+15550009", _issued_code(container, "+15550009"), now=fixed_now)

    assert user.phone == "+15550009"
    assert user.password_hash is None
    assert users_repo.get_by_phone("+15550009") == user
    principal = container.session_auth.resolve(bearer)
    assert principal.role == Role.USER
    assert principal.principal_id == user.user_id


def test_otp_for_existing_user_logs_in_same_user(container, alice, fixed_now):
    auth = container.auth_service
    auth.request_otp(alice.phone, now=fixed_now)
    _, user = auth.verify_otp(alice.phone, _issued_code(container, alice.phone), now=fixed_now)
    assert user.user_id == alice.user_id


def test_otp_is_single_use(container, fixed_now):
    auth = container.auth_service
    auth.request_otp("+15550009", now=fixed_now)
    code = _issued_code(container, "+15550009")
    auth.verify_otp("+15550009", code, now=fixed_now)

    with pytest.raises(AuthenticationError):
        auth.verify_otp("+15550009", code, now=fixed_now)


def test_otp_wrong_or_expired_code(container, fixed_now):
    auth = container.auth_service
    auth.request_otp("+15550009", now=fixed_now)
    code = _issued_code(container, "+15550009")
    wrong = "000000" if code != "000000" else "111111"

    with pytest.raises(AuthenticationError):
        auth.verify_otp("+15550009", wrong, now=fixed_now)
    with pytest.raises(AuthenticationError):
        auth.verify_otp("+15550009", code, now=fixed_now + timedelta(seconds=300))
    with pytest.raises(AuthenticationError):
        auth.verify_otp("bad phone", code, now=fixed_now)


def test_otp_store_new_request_replaces_old_code(fixed_now):
    store = OtpStore()
    first = store.issue("+15550009", now=fixed_now, ttl=timedelta(minutes=5))
    second = store.issue("+15550009", now=fixed_now, ttl=timedelta(minutes=5))

    assert len(second.code) == 6
    if first.code != second.code:
        assert not store.consume("+15550009", first.code, now=fixed_now)
    assert store.consume("+15550009", second.code, now=fixed_now)


def test_request_otp_rejects_invalid_phone(container, fixed_now):
    with pytest.raises(ValidationError):
        container.auth_service.request_otp("call me", now=fixed_now)


def test_register_and_login_by_email_or_phone(container, fixed_now):
    auth = container.auth_service
    _, user = auth.register(
        password="secret1",
        phone="+15550100",
        email="Carol@Example.com",
        name="Carol",
        age="31",
        now=fixed_now,
    )
    assert user.email == "carol@example.com"
    assert user.age == 31
    assert "password_hash" not in user.to_dict()

    bearer, by_email = auth.login("carol@example.com", "secret1")
    assert by_email.user_id == user.user_id
    assert container.session_auth.resolve(bearer).display_name == "Carol"

    _, by_phone = auth.login("+1 555 0100", "secret1")
    assert by_phone.user_id == user.user_id


def test_login_rejects_bad_credentials(container, alice, fixed_now):
    auth = container.auth_service
    auth.register(password="secret1", email="dan@example.com", now=fixed_now)

    for identifier, password in [("dan@example.com", "wrong!"), ("nobody@example.com", "secret1"), ("", "")]:
        with pytest.raises(AuthenticationError):
            auth.login(identifier, password)
    # OTP-only users have no password
    with pytest.raises(AuthenticationError):
        auth.login(alice.phone, "anything")


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"password": "secret1"}, "phone or email is required"),
        ({"password": "123", "email": "e@example.com"}, "password must be at least 6 characters"),
        ({"password": "secret1", "email": "e@example.com", "age": "old"}, "age must be a number"),
    ],
)
def test_register_validation(container, kwargs, message):
    with pytest.raises(ValidationError, match=message):
        container.auth_service.register(**kwargs)


def test_register_rejects_taken_identifiers(container, alice):
    auth = container.auth_service
    with pytest.raises(ValidationError, match="phone is already registered"):
        auth.register(password="secret1", phone=alice.phone)

    auth.register(password="secret1", email="e@example.com", external_id="M-1")
    with pytest.raises(ValidationError, match="email is already registered"):
        auth.register(password="secret1", email="E@example.com")
    with pytest.raises(ValidationError, match="membership id is already registered"):
        auth.register(password="secret1", email="f@example.com", external_id="M-1")


def test_admin_login(container):
    auth = container.auth_service
    bearer, admin = auth.admin_login("admin", "admin123")

    principal = container.session_auth.resolve(bearer)
    assert principal.role == Role.ADMIN
    assert principal.principal_id == admin.admin_id

    for username, password in [("admin", "nope"), ("ghost", "admin123"), ("", "")]:
        with pytest.raises(AuthenticationError):
            auth.admin_login(username, password)


def test_logout_revokes_bearer(container):
    bearer, _ = container.auth_service.admin_login("admin", "admin123")
    assert container.auth_service.logout(bearer) is True
    assert container.session_auth.resolve(bearer) is None


def test_otp_store_drops_expired_challenges_on_issue(fixed_now):
    store = OtpStore()
    ttl = timedelta(minutes=5)
    store.issue("+15550001", now=fixed_now, ttl=ttl)
    store.issue("+15550002", now=fixed_now + timedelta(minutes=1), ttl=ttl)
    assert len(store) == 2

    later = fixed_now + timedelta(minutes=5, seconds=30)
    store.issue("+15550003", now=later, ttl=ttl)

    assert len(store) == 2
    assert not store.consume("+15550001", "123456", now=later)
