from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import (
    normalize_email,
    normalize_phone,
    require_id_list,
    require_min_length,
    require_non_empty,
)
from ..core.constants import MIN_PASSWORD_LENGTH, MIN_USERNAME_LENGTH
from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    name: str
    role: Role
    subject_ids: tuple[int, ...]


def require_principal(current_role: Role) -> None:
    if current_role != Role.PRINCIPAL:
        raise AuthorizationError("Principal access required")


class AuthService:
    """Use case: authenticate user (login) and manage own password."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, username: str, password: str) -> SessionUser:
        user = self._users.get_by_username(username or "")
        if not user or not user.is_active:
            logger.warning("Login rejected for username=%r", username)
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes or corrupted values from an imported snapshot
            ok = False

        if not ok:
            logger.warning("Login rejected for username=%r", username)
            raise AuthenticationError("Invalid username or password")

        self._users.update_login_info(user.user_id)
        logger.info("User %s logged in", user.username)

        return SessionUser(user_id=user.user_id, name=user.name, role=user.role, subject_ids=user.subject_ids)

    def change_password(self, *, user_id: int, current_password: str, new_password: str) -> None:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        if not check_password_hash(user.password_hash, current_password or ""):
            raise AuthenticationError("Current password is incorrect")
        require_min_length(new_password, "Password", MIN_PASSWORD_LENGTH)

        self._users.set_password_hash(user.user_id, generate_password_hash(new_password))


class UserService:
    """Use case: manage users (principal)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def register(
        self,
        *,
        current_role: Role,
        username: str,
        password: str,
        role: Role,
        name: str,
        email: str,
        phone: Optional[str] = None,
        subject_ids: Optional[Sequence[int]] = None,
    ) -> User:
        require_principal(current_role)

        username = require_min_length(require_non_empty(username, "Username"), "Username", MIN_USERNAME_LENGTH)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        name = require_non_empty(name, "Name")
        email = normalize_email(require_non_empty(email, "Email"))
        phone = normalize_phone(phone)
        subjects = require_id_list(subject_ids, "Subjects") if role == Role.TEACHER else []

        password_hash = generate_password_hash(password)

        # Username/email uniqueness is checked by the repository under the store lock.
        user = self._users.create_user(
            username=username,
            password_hash=password_hash,
            role=role,
            name=name,
            email=email,
            phone=phone,
            subject_ids=subjects,
        )
        logger.info("Registered %s %s (id=%s)", role.value, user.username, user.user_id)
        return user

    def get_user(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def list_users(self, *, role: Optional[Role] = None, include_inactive: bool = False) -> Sequence[User]:
        return self._users.list_users(role=role, include_inactive=include_inactive)

    def update_profile(
        self,
        *,
        current_user_id: int,
        current_role: Role,
        user_id: int,
        name: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        subject_ids: Optional[Sequence[int]] = None,
    ) -> User:
        if current_role != Role.PRINCIPAL and int(current_user_id) != int(user_id):
            raise AuthorizationError("You can only edit your own profile")

        user = self.get_user(user_id)
        changes: dict = {}
        if name is not None:
            changes["name"] = require_non_empty(name, "Name")
        if email is not None:
            changes["email"] = normalize_email(require_non_empty(email, "Email"))
        if phone is not None:
            changes["phone"] = normalize_phone(phone)
        if subject_ids is not None:
            if current_role != Role.PRINCIPAL:
                raise AuthorizationError("Only the principal can assign subjects")
            changes["subject_ids"] = require_id_list(subject_ids, "Subjects")

        if not changes:
            raise ValidationError("Nothing to update")
        return self._users.update_user(user.user_id, **changes)

    def deactivate(self, *, current_user_id: int, current_role: Role, user_id: int) -> None:
        require_principal(current_role)
        if int(current_user_id) == int(user_id):
            raise ValidationError("You cannot deactivate your own account")

        self.get_user(user_id)
        self._users.soft_delete(user_id)
        logger.info("User id=%s deactivated", user_id)
