from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Any, Optional

from ..common.datetime_utils import format_hhmm, from_iso, parse_hhmm, to_iso
from ..core.enums import DayOfWeek


@dataclass(frozen=True)
class Schedule:
    """A recurring weekly teaching slot (teacher x class x subject)."""

    schedule_id: int
    teacher_id: int
    class_id: int
    subject_id: int
    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    created_at: datetime
    updated_at: datetime
    room: Optional[str] = None
    is_active: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.schedule_id,
            "teacherId": self.teacher_id,
            "classId": self.class_id,
            "subjectId": self.subject_id,
            "dayOfWeek": self.day_of_week.value,
            "startTime": format_hhmm(self.start_time),
            "endTime": format_hhmm(self.end_time),
            "room": self.room,
            "isActive": self.is_active,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Schedule":
        return cls(
            schedule_id=int(data["id"]),
            teacher_id=int(data["teacherId"]),
            class_id=int(data["classId"]),
            subject_id=int(data["subjectId"]),
            day_of_week=DayOfWeek.parse(data["dayOfWeek"]),
            start_time=parse_hhmm(data["startTime"]),
            end_time=parse_hhmm(data["endTime"]),
            room=data.get("room"),
            is_active=bool(data.get("isActive", True)),
            created_at=from_iso(data.get("createdAt")),
            updated_at=from_iso(data.get("updatedAt")),
        )


@dataclass(frozen=True)
class TeacherScheduleRow:
    """Read-model: a schedule entry joined with class/subject display data."""

    schedule: Schedule
    class_name: Optional[str]
    class_grade: Optional[int]
    subject_name: Optional[str]
    subject_code: Optional[str]
    student_count: int

    def to_dict(self) -> dict[str, Any]:
        data = self.schedule.to_dict()
        data.update(
            {
                "className": self.class_name,
                "classGrade": self.class_grade,
                "subjectName": self.subject_name,
                "subjectCode": self.subject_code,
                "studentCount": self.student_count,
            }
        )
        return data
