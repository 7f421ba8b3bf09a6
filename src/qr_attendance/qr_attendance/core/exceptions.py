class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class SessionNotFound(DomainError):
    """Raised when a session id does not resolve to a session."""


class InvalidToken(DomainError):
    """Raised when a presented QR token is malformed, forged or expired.

    The three causes are collapsed on purpose; callers only learn "invalid".
    """


class DuplicateAttendance(DomainError):
    """Raised by storage when (user_id, session_id) already has a row.

    Never leaves the storage layer: insert_if_absent turns it into AlreadyExists.
    """


class ConfigurationError(DomainError):
    """Raised when required settings are missing or inconsistent."""
