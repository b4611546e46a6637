from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import from_iso, to_iso
from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a principal or teacher account.

    Note: Plain data object, no storage access here.
    """

    user_id: int
    username: str
    password_hash: str
    role: Role
    name: str
    email: str
    created_at: datetime
    updated_at: datetime
    phone: Optional[str] = None
    subject_ids: tuple[int, ...] = field(default_factory=tuple)
    is_active: bool = True
    last_login: Optional[datetime] = None
    login_count: int = 0

    def to_public_dict(self) -> dict[str, Any]:
        """Shape returned to API clients (never includes the password hash)."""
        return {
            "id": self.user_id,
            "username": self.username,
            "role": self.role.value,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "subjects": list(self.subject_ids),
            "isActive": self.is_active,
            "lastLogin": to_iso(self.last_login),
            "loginCount": self.login_count,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    def to_dict(self) -> dict[str, Any]:
        data = self.to_public_dict()
        data["password"] = self.password_hash
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        return cls(
            user_id=int(data["id"]),
            username=data["username"],
            password_hash=data.get("password", ""),
            role=Role(data["role"]),
            name=data.get("name", ""),
            email=data.get("email", ""),
            phone=data.get("phone"),
            subject_ids=tuple(int(s) for s in data.get("subjects") or ()),
            is_active=bool(data.get("isActive", True)),
            last_login=from_iso(data.get("lastLogin")),
            login_count=int(data.get("loginCount") or 0),
            created_at=from_iso(data.get("createdAt")),
            updated_at=from_iso(data.get("updatedAt")),
        )
