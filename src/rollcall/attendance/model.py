from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date, datetime
from typing import Any, Optional

from ..common.datetime_utils import from_iso, parse_iso_date, to_iso
from ..core.enums import AttendanceMark


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: attendance of one class for one subject on one date.

    `present_student_ids` and `total_students` are derived from the class
    roster whenever the record is written; only the absent list is input.
    """

    attendance_id: int
    teacher_id: int
    class_id: int
    subject_id: int
    attendance_date: date
    absent_student_ids: tuple[int, ...]
    present_student_ids: tuple[int, ...]
    total_students: int
    submitted_at: datetime
    submitted_by: int
    created_at: datetime
    updated_at: datetime
    notes: str = ""

    @property
    def key(self) -> tuple[int, int, date]:
        return (self.class_id, self.subject_id, self.attendance_date)

    @property
    def present_count(self) -> int:
        return len(self.present_student_ids)

    @property
    def absent_count(self) -> int:
        return len(self.absent_student_ids)

    @property
    def attendance_rate(self) -> int:
        """Whole-number percentage of the roster marked present."""
        if self.total_students <= 0:
            return 0
        return round(self.present_count / self.total_students * 100)

    def mark_for(self, student_id: int) -> Optional[AttendanceMark]:
        if student_id in self.present_student_ids:
            return AttendanceMark.PRESENT
        if student_id in self.absent_student_ids:
            return AttendanceMark.ABSENT
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.attendance_id,
            "teacherId": self.teacher_id,
            "classId": self.class_id,
            "subjectId": self.subject_id,
            "date": self.attendance_date.isoformat(),
            "absentStudents": list(self.absent_student_ids),
            "presentStudents": list(self.present_student_ids),
            "totalStudents": self.total_students,
            "notes": self.notes,
            "submittedAt": to_iso(self.submitted_at),
            "submittedBy": self.submitted_by,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AttendanceRecord":
        return cls(
            attendance_id=int(data["id"]),
            teacher_id=int(data["teacherId"]),
            class_id=int(data["classId"]),
            subject_id=int(data["subjectId"]),
            attendance_date=parse_iso_date(data["date"]),
            absent_student_ids=tuple(int(s) for s in data.get("absentStudents") or ()),
            present_student_ids=tuple(int(s) for s in data.get("presentStudents") or ()),
            total_students=int(data.get("totalStudents") or 0),
            notes=data.get("notes") or "",
            submitted_at=from_iso(data.get("submittedAt")),
            submitted_by=int(data.get("submittedBy") or data["teacherId"]),
            created_at=from_iso(data.get("createdAt")),
            updated_at=from_iso(data.get("updatedAt")),
        )


_ID_FILTERS = ("class_id", "subject_id", "teacher_id", "student_id")
_DATE_FILTERS = ("attendance_date", "start_date", "end_date")


@dataclass(frozen=True)
class AttendanceFilter:
    """Criteria for attendance queries. Every unset field matches anything.

    `start_date`/`end_date` are inclusive bounds. `student_id` matches records
    that list the student as either present or absent.
    """

    class_id: Optional[int] = None
    subject_id: Optional[int] = None
    teacher_id: Optional[int] = None
    attendance_date: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    student_id: Optional[int] = None

    def __post_init__(self) -> None:
        for name in _ID_FILTERS:
            value = getattr(self, name)
            if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
                raise TypeError(f"AttendanceFilter.{name} must be int, got {type(value).__name__}")
        for name in _DATE_FILTERS:
            value = getattr(self, name)
            if value is not None and (isinstance(value, datetime) or not isinstance(value, date)):
                raise TypeError(f"AttendanceFilter.{name} must be date, got {type(value).__name__}")

    def with_changes(self, **changes) -> "AttendanceFilter":
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update(changes)
        return AttendanceFilter(**values)

    def matches(self, record: AttendanceRecord) -> bool:
        if self.class_id is not None and record.class_id != self.class_id:
            return False
        if self.subject_id is not None and record.subject_id != self.subject_id:
            return False
        if self.teacher_id is not None and record.teacher_id != self.teacher_id:
            return False
        if self.attendance_date is not None and record.attendance_date != self.attendance_date:
            return False
        if self.start_date is not None and record.attendance_date < self.start_date:
            return False
        if self.end_date is not None and record.attendance_date > self.end_date:
            return False
        if self.student_id is not None and record.mark_for(self.student_id) is None:
            return False
        return True


@dataclass
class SummaryBucket:
    """Running totals for one class, subject or date."""

    name: Optional[str] = None
    total_records: int = 0
    total_present: int = 0
    total_absent: int = 0

    def add(self, record: AttendanceRecord) -> None:
        self.total_records += 1
        self.total_present += record.present_count
        self.total_absent += record.absent_count

    def to_dict(self, name_key: Optional[str] = None) -> dict[str, Any]:
        data: dict[str, Any] = {
            "totalRecords": self.total_records,
            "totalPresent": self.total_present,
            "totalAbsent": self.total_absent,
        }
        if name_key:
            data[name_key] = self.name
        return data


@dataclass(frozen=True)
class AttendanceStatistics:
    total_records: int
    total_students: int
    total_present: int
    total_absent: int
    attendance_rate: float
    class_summary: dict[int, SummaryBucket] = field(default_factory=dict)
    subject_summary: dict[int, SummaryBucket] = field(default_factory=dict)
    daily_summary: dict[date, SummaryBucket] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalRecords": self.total_records,
            "totalStudents": self.total_students,
            "totalPresent": self.total_present,
            "totalAbsent": self.total_absent,
            "attendanceRate": self.attendance_rate,
            "classSummary": {str(k): v.to_dict("className") for k, v in self.class_summary.items()},
            "subjectSummary": {str(k): v.to_dict("subjectName") for k, v in self.subject_summary.items()},
            "dailySummary": {k.isoformat(): v.to_dict() for k, v in self.daily_summary.items()},
        }


@dataclass(frozen=True)
class HistoryEntry:
    """One line of a student's attendance history."""

    attendance_date: date
    class_id: int
    class_name: Optional[str]
    subject_id: int
    subject_name: Optional[str]
    status: AttendanceMark
    submitted_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.attendance_date.isoformat(),
            "classId": self.class_id,
            "className": self.class_name,
            "subjectId": self.subject_id,
            "subjectName": self.subject_name,
            "status": self.status.value,
            "submittedAt": to_iso(self.submitted_at),
        }
