from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Sequence

from ..core.enums import Role
from ..core.exceptions import UniquenessViolationError
from ..database.memory_base import InMemoryTable, reject_fields
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)

# Owned by set_password_hash / update_login_info, never by the generic update.
_PROTECTED_FIELDS = ("user_id", "password_hash", "last_login", "login_count", "created_at", "updated_at")


class InMemoryUserRepository(InMemoryTable[User], UserRepository):
    table_name = "users"

    def get_by_username(self, username: str) -> Optional[User]:
        wanted = username.strip().lower()
        matches = self._scan(lambda u: u.username.lower() == wanted)
        return matches[0] if matches else None

    def get_by_email(self, email: str) -> Optional[User]:
        wanted = email.strip().lower()
        matches = self._scan(lambda u: u.email.lower() == wanted)
        return matches[0] if matches else None

    def _ensure_unique(
        self, *, username: Optional[str] = None, email: Optional[str] = None, user_id: Optional[int] = None
    ) -> None:
        # Caller holds the session.
        if username is not None:
            other = self.get_by_username(username)
            if other and other.user_id != user_id:
                raise UniquenessViolationError("Username already exists")
        if email is not None:
            other = self.get_by_email(email)
            if other and other.user_id != user_id:
                raise UniquenessViolationError("Email already exists")

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
        with self._db.session():
            self._ensure_unique(username=username, email=email)
            return self._insert(
                lambda new_id, now: User(
                    user_id=new_id,
                    username=username,
                    password_hash=password_hash,
                    role=role,
                    name=name,
                    email=email,
                    phone=phone,
                    subject_ids=tuple(subject_ids),
                    created_at=now,
                    updated_at=now,
                )
            )

    def update_user(self, user_id: int, **changes) -> Optional[User]:
        reject_fields(changes, _PROTECTED_FIELDS, "User")
        if "subject_ids" in changes:
            changes["subject_ids"] = tuple(changes["subject_ids"])
        with self._db.session():
            if "email" in changes:
                self._ensure_unique(email=changes["email"], user_id=int(user_id))
            return self._replace(user_id, changes)

    def set_password_hash(self, user_id: int, password_hash: str) -> Optional[User]:
        return self._replace(user_id, {"password_hash": password_hash})

    def update_login_info(self, user_id: int) -> Optional[User]:
        with self._db.session():
            user = self._rows().get(int(user_id))
            if user is None:
                return None
            # Login bookkeeping does not count as a profile change: updated_at stays.
            updated = replace(user, last_login=self._db.now(), login_count=user.login_count + 1)
            self._rows()[user.user_id] = updated
            return updated

    def list_users(self, *, role: Optional[Role] = None, include_inactive: bool = False) -> Sequence[User]:
        return self._scan(
            lambda u: (include_inactive or u.is_active) and (role is None or u.role == role)
        )
