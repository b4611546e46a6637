from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import from_iso, to_iso


@dataclass(frozen=True)
class Subject:
    subject_id: int
    name: str
    code: str
    created_at: datetime
    updated_at: datetime
    description: Optional[str] = None
    is_active: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.subject_id,
            "name": self.name,
            "code": self.code,
            "description": self.description,
            "isActive": self.is_active,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Subject":
        return cls(
            subject_id=int(data["id"]),
            name=data.get("name", ""),
            code=data.get("code", ""),
            description=data.get("description"),
            is_active=bool(data.get("isActive", True)),
            created_at=from_iso(data.get("createdAt")),
            updated_at=from_iso(data.get("updatedAt")),
        )
