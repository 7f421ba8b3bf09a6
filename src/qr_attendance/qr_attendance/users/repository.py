from __future__ import annotations

from typing import Optional, Protocol

from .model import Admin, User


class UserRepository(Protocol):
    """Repository interface for User.

    Note: the service layer depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_phone(self, phone: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_external_id(self, external_id: str) -> Optional[User]:
        raise NotImplementedError

    def create(self, user: User) -> User:
        """Insert; raises ValidationError if a unique contact/external id is taken."""

        raise NotImplementedError


class AdminRepository(Protocol):
    def get_by_username(self, username: str) -> Optional[Admin]:
        raise NotImplementedError
