from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..classes.repository import ClassRepository
from ..common.validators import require_hhmm, require_int
from ..core.enums import DayOfWeek, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..subjects.repository import SubjectRepository
from ..users.repository import UserRepository
from ..users.service import require_principal
from .model import Schedule, TeacherScheduleRow
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)


def parse_day(value) -> DayOfWeek:
    try:
        return DayOfWeek.parse(value)
    except ValueError:
        raise ValidationError("Invalid day of week") from None


class ScheduleService:
    def __init__(
        self,
        schedules: ScheduleRepository,
        users: UserRepository,
        classes: ClassRepository,
        subjects: SubjectRepository,
    ):
        self._schedules = schedules
        self._users = users
        self._classes = classes
        self._subjects = subjects

    def _check_references(self, *, teacher_id: int, class_id: int, subject_id: int) -> None:
        teacher = self._users.get_by_id(teacher_id)
        if not teacher or not teacher.is_active or teacher.role != Role.TEACHER:
            raise ValidationError("Teacher not found")
        cls = self._classes.get_by_id(class_id)
        if not cls or not cls.is_active:
            raise ValidationError("Class not found")
        subject = self._subjects.get_by_id(subject_id)
        if not subject or not subject.is_active:
            raise ValidationError("Subject not found")

    def list_schedules(
        self,
        *,
        teacher_id: Optional[int] = None,
        class_id: Optional[int] = None,
        day_of_week: Optional[str] = None,
    ) -> Sequence[Schedule]:
        return self._schedules.list_schedules(
            teacher_id=teacher_id,
            class_id=class_id,
            day_of_week=parse_day(day_of_week) if day_of_week else None,
        )

    def teacher_schedule(
        self,
        *,
        current_user_id: int,
        current_role: Role,
        teacher_id: int,
        day_of_week: Optional[str] = None,
    ) -> Sequence[TeacherScheduleRow]:
        if current_role != Role.PRINCIPAL and int(current_user_id) != int(teacher_id):
            raise AuthorizationError("You can only view your own schedule")
        return self._schedules.list_for_teacher(
            int(teacher_id),
            day_of_week=parse_day(day_of_week) if day_of_week else None,
        )

    def can_take_attendance(self, *, teacher_id: int, class_id: int, subject_id: int) -> bool:
        """True when the teacher has a slot for the pair or is the class teacher."""
        if self._schedules.list_schedules(teacher_id=teacher_id, class_id=class_id, subject_id=subject_id):
            return True
        cls = self._classes.get_by_id(class_id)
        return bool(cls and cls.class_teacher_id == teacher_id)

    def create(
        self,
        *,
        current_role: Role,
        teacher_id,
        class_id,
        subject_id,
        day_of_week: str,
        start_time: str,
        end_time: str,
        room: Optional[str] = None,
    ) -> Schedule:
        require_principal(current_role)

        teacher_id = require_int(teacher_id, "Teacher")
        class_id = require_int(class_id, "Class")
        subject_id = require_int(subject_id, "Subject")
        day = parse_day(day_of_week)
        start = require_hhmm(start_time, "Start time")
        end = require_hhmm(end_time, "End time")
        if end <= start:
            raise ValidationError("End time must be after start time")
        self._check_references(teacher_id=teacher_id, class_id=class_id, subject_id=subject_id)

        schedule = self._schedules.create_schedule(
            teacher_id=teacher_id,
            class_id=class_id,
            subject_id=subject_id,
            day_of_week=day,
            start_time=start,
            end_time=end,
            room=room.strip() if room else None,
        )
        logger.info("Schedule created id=%s (teacher=%s class=%s subject=%s)", schedule.schedule_id, teacher_id, class_id, subject_id)
        return schedule

    def update(self, *, current_role: Role, schedule_id: int, **fields) -> Schedule:
        require_principal(current_role)
        current = self._schedules.get_by_id(schedule_id)
        if not current or not current.is_active:
            raise NotFoundError("Schedule not found")

        changes: dict = {}
        for name, label in (("teacher_id", "Teacher"), ("class_id", "Class"), ("subject_id", "Subject")):
            if fields.get(name) is not None:
                changes[name] = require_int(fields[name], label)
        if fields.get("day_of_week") is not None:
            changes["day_of_week"] = parse_day(fields["day_of_week"])
        if fields.get("start_time") is not None:
            changes["start_time"] = require_hhmm(fields["start_time"], "Start time")
        if fields.get("end_time") is not None:
            changes["end_time"] = require_hhmm(fields["end_time"], "End time")
        if "room" in fields:
            changes["room"] = fields["room"].strip() if fields["room"] else None

        if not changes:
            raise ValidationError("Nothing to update")
        if changes.get("end_time", current.end_time) <= changes.get("start_time", current.start_time):
            raise ValidationError("End time must be after start time")
        self._check_references(
            teacher_id=changes.get("teacher_id", current.teacher_id),
            class_id=changes.get("class_id", current.class_id),
            subject_id=changes.get("subject_id", current.subject_id),
        )
        return self._schedules.update_schedule(current.schedule_id, **changes)

    def delete(self, *, current_role: Role, schedule_id: int) -> None:
        require_principal(current_role)
        current = self._schedules.get_by_id(schedule_id)
        if not current or not current.is_active:
            raise NotFoundError("Schedule not found")
        self._schedules.soft_delete(current.schedule_id)
