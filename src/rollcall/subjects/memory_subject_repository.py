from __future__ import annotations

from typing import Optional, Sequence

from ..core.exceptions import UniquenessViolationError
from ..database.memory_base import InMemoryTable, reject_fields
from .model import Subject
from .repository import SubjectRepository


class InMemorySubjectRepository(InMemoryTable[Subject], SubjectRepository):
    table_name = "subjects"

    def get_by_code(self, code: str) -> Optional[Subject]:
        wanted = code.strip().upper()
        matches = self._scan(lambda s: s.code.upper() == wanted)
        return matches[0] if matches else None

    def _ensure_unique_code(self, code: str, *, subject_id: Optional[int] = None) -> None:
        other = self.get_by_code(code)
        if other and other.subject_id != subject_id:
            raise UniquenessViolationError(f"Subject code {code} already exists")

    def list_subjects(self, *, code: Optional[str] = None) -> Sequence[Subject]:
        term = code.lower() if code else None
        return self._scan(lambda s: s.is_active and (term is None or term in s.code.lower()))

    def create_subject(self, *, name: str, code: str, description: Optional[str] = None) -> Subject:
        with self._db.session():
            self._ensure_unique_code(code)
            return self._insert(
                lambda new_id, now: Subject(
                    subject_id=new_id,
                    name=name,
                    code=code,
                    description=description,
                    created_at=now,
                    updated_at=now,
                )
            )

    def update_subject(self, subject_id: int, **changes) -> Optional[Subject]:
        reject_fields(changes, ("subject_id", "created_at", "updated_at"), "Subject")
        with self._db.session():
            if "code" in changes:
                self._ensure_unique_code(changes["code"], subject_id=int(subject_id))
            return self._replace(subject_id, changes)
