from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Any

from ..common.datetime_utils import format_hhmm, parse_hhmm
from ..core import constants


@dataclass(frozen=True)
class SchoolSettings:
    """Singleton school-wide settings record."""

    school_name: str = constants.DEFAULT_SCHOOL_NAME
    academic_year: str = constants.DEFAULT_ACADEMIC_YEAR
    current_semester: str = constants.DEFAULT_SEMESTER
    attendance_deadline: time = constants.DEFAULT_ATTENDANCE_DEADLINE
    timezone: str = constants.DEFAULT_TIMEZONE

    def to_dict(self) -> dict[str, Any]:
        return {
            "schoolName": self.school_name,
            "academicYear": self.academic_year,
            "currentSemester": self.current_semester,
            "attendanceDeadline": format_hhmm(self.attendance_deadline),
            "timezone": self.timezone,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SchoolSettings":
        defaults = cls()
        deadline = data.get("attendanceDeadline")
        return cls(
            school_name=data.get("schoolName", defaults.school_name),
            academic_year=data.get("academicYear", defaults.academic_year),
            current_semester=data.get("currentSemester", defaults.current_semester),
            attendance_deadline=parse_hhmm(deadline) if deadline else defaults.attendance_deadline,
            timezone=data.get("timezone", defaults.timezone),
        )
