from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import from_iso, to_iso


@dataclass(frozen=True)
class Student:
    """A student embedded in (and owned by) one class roster."""

    student_id: int
    name: str
    student_code: str
    enrolled_at: datetime
    email: Optional[str] = None
    date_of_birth: Optional[str] = None
    parent_contact: Optional[str] = None
    is_active: bool = True
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.student_id,
            "name": self.name,
            "studentId": self.student_code,
            "email": self.email,
            "dateOfBirth": self.date_of_birth,
            "parentContact": self.parent_contact,
            "isActive": self.is_active,
            "enrolledDate": to_iso(self.enrolled_at),
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Student":
        return cls(
            student_id=int(data["id"]),
            name=data.get("name", ""),
            student_code=data.get("studentId", ""),
            email=data.get("email"),
            date_of_birth=data.get("dateOfBirth"),
            parent_contact=data.get("parentContact"),
            is_active=bool(data.get("isActive", True)),
            enrolled_at=from_iso(data.get("enrolledDate")),
            updated_at=from_iso(data.get("updatedAt")),
        )


@dataclass(frozen=True)
class SchoolClass:
    """Domain entity: a class (e.g. 10A) with its embedded roster."""

    class_id: int
    name: str
    grade: int
    section: str
    academic_year: str
    max_students: int
    created_at: datetime
    updated_at: datetime
    class_teacher_id: Optional[int] = None
    students: tuple[Student, ...] = field(default_factory=tuple)
    is_active: bool = True

    @property
    def active_students(self) -> tuple[Student, ...]:
        return tuple(s for s in self.students if s.is_active)

    @property
    def active_student_ids(self) -> list[int]:
        return [s.student_id for s in self.students if s.is_active]

    def find_student(self, student_id: int) -> Optional[Student]:
        for s in self.students:
            if s.student_id == student_id:
                return s
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.class_id,
            "name": self.name,
            "grade": self.grade,
            "section": self.section,
            "classTeacher": self.class_teacher_id,
            "academicYear": self.academic_year,
            "maxStudents": self.max_students,
            "students": [s.to_dict() for s in self.students],
            "isActive": self.is_active,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    def to_summary_dict(self) -> dict[str, Any]:
        """Class without the roster, plus head counts (used for listings)."""
        data = self.to_dict()
        del data["students"]
        data["studentCount"] = len(self.active_students)
        data["availableSpots"] = max(self.max_students - len(self.active_students), 0)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SchoolClass":
        teacher = data.get("classTeacher")
        return cls(
            class_id=int(data["id"]),
            name=data.get("name", ""),
            grade=int(data.get("grade") or 0),
            section=data.get("section", ""),
            class_teacher_id=int(teacher) if teacher is not None else None,
            academic_year=data.get("academicYear", ""),
            max_students=int(data.get("maxStudents") or 0),
            students=tuple(Student.from_dict(s) for s in data.get("students") or ()),
            is_active=bool(data.get("isActive", True)),
            created_at=from_iso(data.get("createdAt")),
            updated_at=from_iso(data.get("updatedAt")),
        )


@dataclass(frozen=True)
class StudentMatch:
    """Read-model for student search results (student + owning class)."""

    student: Student
    class_id: int
    class_name: str
    grade: int

    def to_dict(self) -> dict[str, Any]:
        data = self.student.to_dict()
        data.update({"classId": self.class_id, "className": self.class_name, "grade": self.grade})
        return data
