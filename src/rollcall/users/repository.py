from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): services depend on this interface, not on a concrete store.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        """Case-insensitive; inactive users included."""

        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        username: str,
        password_hash: str,
        role: Role,
        name: str,
        email: str,
        phone: Optional[str] = None,
        subject_ids: Sequence[int] = (),
    ) -> User:
        """Raises UniquenessViolationError when the username or email is taken."""

        raise NotImplementedError

    def update_user(self, user_id: int, **changes) -> Optional[User]:
        """Raises UniquenessViolationError when a new email belongs to another user."""

        raise NotImplementedError

    def set_password_hash(self, user_id: int, password_hash: str) -> Optional[User]:
        raise NotImplementedError

    def update_login_info(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def soft_delete(self, user_id: int) -> bool:
        raise NotImplementedError

    def list_users(self, *, role: Optional[Role] = None, include_inactive: bool = False) -> Sequence[User]:
        raise NotImplementedError
