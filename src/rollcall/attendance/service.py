from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from ..classes.model import StudentMatch
from ..classes.repository import ClassRepository
from ..common.datetime_utils import to_iso, utc_now
from ..common.validators import require_id_list, require_int, require_iso_date
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, DomainError, NotFoundError, ValidationError
from ..schedules.service import ScheduleService
from ..subjects.repository import SubjectRepository
from ..users.repository import UserRepository
from .model import AttendanceFilter, AttendanceRecord, AttendanceStatistics, HistoryEntry
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def filter_from_params(params: Mapping[str, Any]) -> AttendanceFilter:
    """Build an AttendanceFilter from request-style string parameters."""

    def _int(name: str) -> Optional[int]:
        value = params.get(name)
        return require_int(value, name) if value not in (None, "") else None

    def _date(name: str):
        value = params.get(name)
        return require_iso_date(value, name) if value not in (None, "") else None

    start, end = _date("startDate"), _date("endDate")
    if start and end and start > end:
        raise ValidationError("startDate must not be after endDate")

    return AttendanceFilter(
        class_id=_int("classId"),
        subject_id=_int("subjectId"),
        teacher_id=_int("teacherId"),
        attendance_date=_date("date"),
        start_date=start,
        end_date=end,
        student_id=_int("studentId"),
    )


@dataclass
class BulkResult:
    successful: list[AttendanceRecord] = field(default_factory=list)
    failed: list[dict[str, Any]] = field(default_factory=list)


class AttendanceService:
    """Use cases around attendance submission and reporting."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        classes: ClassRepository,
        subjects: SubjectRepository,
        users: UserRepository,
        schedule_service: ScheduleService,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._attendance = attendance
        self._classes = classes
        self._subjects = subjects
        self._users = users
        self._schedule_service = schedule_service
        self._clock = clock

    def _require_record(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise NotFoundError("Attendance record not found")
        return record

    def _require_owner(self, record: AttendanceRecord, *, current_user_id: int, current_role: Role) -> None:
        if current_role == Role.TEACHER and record.teacher_id != int(current_user_id):
            raise AuthorizationError("You can only modify your own attendance records")

    def _validate_absentees(self, class_id: int, absent_ids: Sequence[int]) -> None:
        cls = self._classes.get_by_id(class_id)
        roster = set(cls.active_student_ids) if cls else set()
        invalid = [s for s in absent_ids if s not in roster]
        if invalid:
            raise ValidationError(f"Invalid student IDs found: {invalid}")

    def _scope(self, filters: Optional[AttendanceFilter], *, current_user_id: int, current_role: Role) -> AttendanceFilter:
        filters = filters or AttendanceFilter()
        if current_role == Role.TEACHER:
            return filters.with_changes(teacher_id=int(current_user_id))
        return filters

    def submit(
        self,
        *,
        current_user_id: int,
        current_role: Role,
        class_id,
        subject_id,
        attendance_date,
        absent_student_ids=None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        now = now or self._clock()
        if class_id in (None, "") or subject_id in (None, "") or not attendance_date:
            raise ValidationError("Class ID, Subject ID, and date are required")

        class_id = require_int(class_id, "Class ID")
        subject_id = require_int(subject_id, "Subject ID")
        day = require_iso_date(attendance_date)
        if day > now.date():
            raise ValidationError("Cannot take attendance for future dates")
        absent = require_id_list(absent_student_ids, "Absent students")

        cls = self._classes.get_by_id(class_id)
        if not cls or not cls.is_active:
            raise NotFoundError("Class not found")
        subject = self._subjects.get_by_id(subject_id)
        if not subject or not subject.is_active:
            raise NotFoundError("Subject not found")

        if current_role == Role.TEACHER and not self._schedule_service.can_take_attendance(
            teacher_id=int(current_user_id), class_id=class_id, subject_id=subject_id
        ):
            raise AuthorizationError("You do not have permission to take attendance for this class/subject")

        self._validate_absentees(class_id, absent)

        record = self._attendance.submit(
            teacher_id=int(current_user_id),
            class_id=class_id,
            subject_id=subject_id,
            attendance_date=day,
            absent_student_ids=absent,
            notes=(notes or "").strip(),
            submitted_by=int(current_user_id),
        )
        logger.info(
            "Attendance submitted: %s - %s (%s) by user id=%s, %s/%s present",
            cls.name, subject.name, day.isoformat(), current_user_id, record.present_count, record.total_students,
        )
        return record

    def bulk_submit(
        self,
        *,
        current_user_id: int,
        current_role: Role,
        records: Sequence[Mapping[str, Any]],
        now: Optional[datetime] = None,
    ) -> BulkResult:
        if not isinstance(records, (list, tuple)) or not records:
            raise ValidationError("Attendance records array is required")

        result = BulkResult()
        for item in records:
            try:
                if not isinstance(item, Mapping):
                    raise ValidationError("Each attendance record must be an object")
                result.successful.append(
                    self.submit(
                        current_user_id=current_user_id,
                        current_role=current_role,
                        class_id=item.get("classId"),
                        subject_id=item.get("subjectId"),
                        attendance_date=item.get("date"),
                        absent_student_ids=item.get("absentStudents"),
                        notes=item.get("notes"),
                        now=now,
                    )
                )
            except DomainError as e:
                result.failed.append({"record": item, "error": str(e)})

        logger.info(
            "Bulk attendance: %s successful, %s failed by user id=%s",
            len(result.successful), len(result.failed), current_user_id,
        )
        return result

    def get_record(self, *, current_user_id: int, current_role: Role, attendance_id: int) -> AttendanceRecord:
        record = self._require_record(attendance_id)
        self._require_owner(record, current_user_id=current_user_id, current_role=current_role)
        return record

    def update(
        self,
        *,
        current_user_id: int,
        current_role: Role,
        attendance_id: int,
        absent_student_ids=None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        record = self._require_record(attendance_id)
        self._require_owner(record, current_user_id=current_user_id, current_role=current_role)

        absent = None
        if absent_student_ids is not None:
            absent = require_id_list(absent_student_ids, "Absent students")
            self._validate_absentees(record.class_id, absent)
        if absent is None and notes is None:
            raise ValidationError("Nothing to update")

        updated = self._attendance.update_record(
            record.attendance_id,
            absent_student_ids=absent,
            notes=notes.strip() if notes is not None else None,
        )
        logger.info("Attendance id=%s updated by user id=%s", record.attendance_id, current_user_id)
        return updated

    def delete(self, *, current_user_id: int, current_role: Role, attendance_id: int) -> AttendanceRecord:
        record = self._require_record(attendance_id)
        self._require_owner(record, current_user_id=current_user_id, current_role=current_role)

        self._attendance.delete_record(record.attendance_id)
        logger.info("Attendance id=%s deleted by user id=%s", record.attendance_id, current_user_id)
        return record

    def list_records(
        self,
        *,
        current_user_id: int,
        current_role: Role,
        filters: Optional[AttendanceFilter] = None,
    ) -> Sequence[AttendanceRecord]:
        scoped = self._scope(filters, current_user_id=current_user_id, current_role=current_role)
        records = list(self._attendance.list_records(scoped))
        records.sort(key=lambda r: (r.attendance_date, r.submitted_at), reverse=True)
        return records

    def statistics(
        self,
        *,
        current_user_id: int,
        current_role: Role,
        filters: Optional[AttendanceFilter] = None,
    ) -> AttendanceStatistics:
        scoped = self._scope(filters, current_user_id=current_user_id, current_role=current_role)
        return self._attendance.get_statistics(scoped)

    def student_history(
        self,
        student_id,
        filters: Optional[AttendanceFilter] = None,
    ) -> tuple[StudentMatch, Sequence[HistoryEntry]]:
        student_id = require_int(student_id, "Student ID")
        # Removed students keep their history.
        student = self._classes.get_student(student_id, include_inactive=True)
        if not student:
            raise NotFoundError("Student not found")

        history = self._attendance.get_student_history(student_id, filters)
        return student, history

    def format_record(self, record: AttendanceRecord) -> dict[str, Any]:
        """Display-ready dict joined with teacher/class/subject names."""
        cls = self._classes.get_by_id(record.class_id)
        subject = self._subjects.get_by_id(record.subject_id)
        teacher = self._users.get_by_id(record.teacher_id)

        return {
            "id": record.attendance_id,
            "teacherId": record.teacher_id,
            "teacherName": teacher.name if teacher else None,
            "classId": record.class_id,
            "className": cls.name if cls else None,
            "subjectId": record.subject_id,
            "subjectName": subject.name if subject else None,
            "date": record.attendance_date.isoformat(),
            "totalStudents": record.total_students,
            "presentStudents": list(record.present_student_ids),
            "absentStudents": list(record.absent_student_ids),
            "presentCount": record.present_count,
            "absentCount": record.absent_count,
            "attendanceRate": record.attendance_rate,
            "notes": record.notes,
            "submittedAt": to_iso(record.submitted_at),
            "submittedBy": record.submitted_by,
            "createdAt": to_iso(record.created_at),
            "updatedAt": to_iso(record.updated_at),
        }
