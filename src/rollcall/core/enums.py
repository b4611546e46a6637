from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    PRINCIPAL = "principal"
    TEACHER = "teacher"


class DayOfWeek(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

    @classmethod
    def parse(cls, value: str) -> "DayOfWeek":
        """Case-insensitive lookup ("monday", "MONDAY" and "Monday" all match)."""
        for day in cls:
            if day.value.lower() == str(value).strip().lower():
                return day
        raise ValueError(f"Unknown day of week: {value!r}")


class AttendanceMark(str, Enum):
    """Status of one student in one attendance record."""

    PRESENT = "present"
    ABSENT = "absent"
