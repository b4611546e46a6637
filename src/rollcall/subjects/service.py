from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..attendance.model import AttendanceFilter
from ..attendance.repository import AttendanceRepository
from ..common.validators import normalize_subject_code, require_non_empty
from ..core.enums import Role
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..schedules.repository import ScheduleRepository
from ..users.service import require_principal
from .model import Subject
from .repository import SubjectRepository

logger = logging.getLogger(__name__)


class SubjectService:
    def __init__(self, subjects: SubjectRepository, schedules: ScheduleRepository, attendance: AttendanceRepository):
        self._subjects = subjects
        self._schedules = schedules
        self._attendance = attendance

    def _require_subject(self, subject_id: int) -> Subject:
        subject = self._subjects.get_by_id(subject_id)
        if not subject or not subject.is_active:
            raise NotFoundError("Subject not found")
        return subject

    def list_subjects(self, *, code: Optional[str] = None) -> Sequence[Subject]:
        return self._subjects.list_subjects(code=code)

    def get_subject(self, subject_id: int) -> Subject:
        return self._require_subject(subject_id)

    def create(self, *, current_role: Role, name: str, code: str, description: Optional[str] = None) -> Subject:
        require_principal(current_role)
        name = require_non_empty(name, "Subject name")
        code = normalize_subject_code(code)

        subject = self._subjects.create_subject(
            name=name,
            code=code,
            description=description.strip() if description else None,
        )
        logger.info("Subject created: %s (id=%s)", subject.code, subject.subject_id)
        return subject

    def update(
        self,
        *,
        current_role: Role,
        subject_id: int,
        name: Optional[str] = None,
        code: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Subject:
        require_principal(current_role)
        subject = self._require_subject(subject_id)

        changes: dict = {}
        if name is not None:
            changes["name"] = require_non_empty(name, "Subject name")
        if code is not None:
            changes["code"] = normalize_subject_code(code)
        if description is not None:
            changes["description"] = description.strip() or None

        if not changes:
            raise ValidationError("Nothing to update")
        return self._subjects.update_subject(subject.subject_id, **changes)

    def delete(self, *, current_role: Role, subject_id: int) -> None:
        require_principal(current_role)
        subject = self._require_subject(subject_id)

        if self._schedules.list_schedules(subject_id=subject.subject_id):
            raise ConflictError("Cannot delete subject used by schedule entries")
        if self._attendance.list_records(AttendanceFilter(subject_id=subject.subject_id)):
            raise ConflictError("Cannot delete subject with existing attendance records")

        self._subjects.soft_delete(subject.subject_id)
        logger.info("Subject deleted: %s (id=%s)", subject.code, subject.subject_id)
