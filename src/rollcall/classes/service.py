from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from ..attendance.model import AttendanceFilter
from ..attendance.repository import AttendanceRepository
from ..common.validators import (
    normalize_email,
    normalize_phone,
    require_int,
    require_int_range,
    require_min_length,
    require_non_empty,
)
from ..core import constants
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..schedules.repository import ScheduleRepository
from ..users.repository import UserRepository
from ..users.service import require_principal
from .model import SchoolClass, Student, StudentMatch
from .repository import ClassRepository

logger = logging.getLogger(__name__)


@dataclass
class ClassStatistics:
    total_classes: int = 0
    total_students: int = 0
    total_capacity: int = 0
    average_class_size: int = 0
    capacity_utilization: int = 0
    grade_distribution: dict[int, dict[str, int]] = field(default_factory=dict)
    teacher_assignments: dict[int, dict[str, int]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "totalClasses": self.total_classes,
            "totalStudents": self.total_students,
            "totalCapacity": self.total_capacity,
            "averageClassSize": self.average_class_size,
            "capacityUtilization": self.capacity_utilization,
            "gradeDistribution": {str(k): v for k, v in self.grade_distribution.items()},
            "teacherAssignments": {str(k): v for k, v in self.teacher_assignments.items()},
        }


class ClassService:
    """Use cases for classes and their rosters."""

    def __init__(
        self,
        classes: ClassRepository,
        users: UserRepository,
        schedules: ScheduleRepository,
        attendance: AttendanceRepository,
    ):
        self._classes = classes
        self._users = users
        self._schedules = schedules
        self._attendance = attendance

    def _require_class(self, class_id: int) -> SchoolClass:
        cls = self._classes.get_by_id(class_id)
        if not cls or not cls.is_active:
            raise NotFoundError("Class not found")
        return cls

    def _require_teacher(self, teacher_id: Optional[int]) -> Optional[int]:
        if teacher_id is None:
            return None
        teacher = self._users.get_by_id(require_int(teacher_id, "Class teacher"))
        if not teacher or not teacher.is_active or teacher.role != Role.TEACHER:
            raise ValidationError("Class teacher must be an active teacher")
        return teacher.user_id

    def teaches_class(self, teacher_id: int, cls: SchoolClass) -> bool:
        return cls.class_teacher_id == teacher_id or bool(
            self._schedules.list_schedules(teacher_id=teacher_id, class_id=cls.class_id)
        )

    def list_classes(
        self,
        *,
        current_user_id: int,
        current_role: Role,
        grade: Optional[int] = None,
        teacher_id: Optional[int] = None,
    ) -> Sequence[SchoolClass]:
        classes = self._classes.list_classes(grade=grade, teacher_id=teacher_id)
        if current_role == Role.TEACHER:
            classes = [c for c in classes if self.teaches_class(current_user_id, c)]
        return classes

    def get_class(self, *, current_user_id: int, current_role: Role, class_id: int) -> SchoolClass:
        cls = self._require_class(class_id)
        if current_role == Role.TEACHER and not self.teaches_class(current_user_id, cls):
            raise AuthorizationError("You do not have access to this class")
        return cls

    def create_class(
        self,
        *,
        current_role: Role,
        name: str,
        grade,
        section: str,
        academic_year: str,
        max_students=None,
        class_teacher_id: Optional[int] = None,
    ) -> SchoolClass:
        require_principal(current_role)

        name = require_non_empty(name, "Class name")
        grade = require_int_range(grade, "Grade", constants.MIN_GRADE, constants.MAX_GRADE)
        section = require_non_empty(section, "Section").upper()
        academic_year = require_non_empty(academic_year, "Academic year")
        capacity = constants.DEFAULT_MAX_STUDENTS if max_students is None else require_int_range(
            max_students, "Max students", 1, 100
        )

        # Name uniqueness per academic year is checked by the repository under the store lock.
        cls = self._classes.create_class(
            name=name,
            grade=grade,
            section=section,
            academic_year=academic_year,
            max_students=capacity,
            class_teacher_id=self._require_teacher(class_teacher_id),
        )
        logger.info("Class created: %s (id=%s)", cls.name, cls.class_id)
        return cls

    def update_class(self, *, current_role: Role, class_id: int, **fields) -> SchoolClass:
        require_principal(current_role)
        cls = self._require_class(class_id)

        changes: dict = {}
        if fields.get("name") is not None:
            changes["name"] = require_non_empty(fields["name"], "Class name")
        if fields.get("grade") is not None:
            changes["grade"] = require_int_range(fields["grade"], "Grade", constants.MIN_GRADE, constants.MAX_GRADE)
        if fields.get("section") is not None:
            changes["section"] = require_non_empty(fields["section"], "Section").upper()
        if fields.get("academic_year") is not None:
            changes["academic_year"] = require_non_empty(fields["academic_year"], "Academic year")
        if fields.get("max_students") is not None:
            changes["max_students"] = require_int_range(fields["max_students"], "Max students", 1, 100)
        if "class_teacher_id" in fields:
            changes["class_teacher_id"] = self._require_teacher(fields["class_teacher_id"])

        if not changes:
            raise ValidationError("Nothing to update")

        # Name uniqueness and capacity are checked by the repository against the live roster.
        return self._classes.update_class(cls.class_id, **changes)

    def delete_class(self, *, current_role: Role, class_id: int) -> None:
        require_principal(current_role)
        cls = self._require_class(class_id)

        records = self._attendance.list_records(AttendanceFilter(class_id=cls.class_id))
        if records:
            raise ConflictError(f"Cannot delete class with existing attendance records ({len(records)})")

        self._classes.soft_delete(cls.class_id)
        logger.info("Class deleted: %s (id=%s)", cls.name, cls.class_id)

    def list_students(self, *, current_user_id: int, current_role: Role, class_id: int) -> Sequence[Student]:
        return self.get_class(current_user_id=current_user_id, current_role=current_role, class_id=class_id).active_students

    def add_student(
        self,
        *,
        current_role: Role,
        class_id: int,
        name: str,
        student_code: str,
        email: Optional[str] = None,
        date_of_birth: Optional[str] = None,
        parent_contact: Optional[str] = None,
    ) -> Student:
        require_principal(current_role)
        self._require_class(class_id)

        name = require_min_length(require_non_empty(name, "Student name"), "Student name", constants.MIN_STUDENT_NAME_LENGTH)
        student_code = require_min_length(
            require_non_empty(student_code, "Student ID"), "Student ID", constants.MIN_STUDENT_CODE_LENGTH
        )

        # Capacity and duplicate-code checks live in the repository (under the store lock).
        student = self._classes.add_student(
            class_id,
            name=name,
            student_code=student_code,
            email=normalize_email(email),
            date_of_birth=date_of_birth or None,
            parent_contact=normalize_phone(parent_contact, "Parent contact"),
        )
        logger.info("Student %s added to class id=%s", student.student_code, class_id)
        return student

    def update_student(
        self,
        *,
        current_role: Role,
        class_id: int,
        student_id: int,
        name: Optional[str] = None,
        email: Optional[str] = None,
        date_of_birth: Optional[str] = None,
        parent_contact: Optional[str] = None,
    ) -> Student:
        require_principal(current_role)
        cls = self._require_class(class_id)
        if cls.find_student(int(student_id)) is None:
            raise NotFoundError("Student not found")

        changes: dict = {}
        if name is not None:
            changes["name"] = require_non_empty(name, "Student name")
        if email is not None:
            changes["email"] = normalize_email(email)
        if date_of_birth is not None:
            changes["date_of_birth"] = date_of_birth or None
        if parent_contact is not None:
            changes["parent_contact"] = normalize_phone(parent_contact, "Parent contact")

        return self._classes.update_student(cls.class_id, int(student_id), **changes)

    def remove_student(self, *, current_role: Role, class_id: int, student_id: int) -> None:
        require_principal(current_role)
        cls = self._require_class(class_id)
        student = cls.find_student(int(student_id))
        if student is None or not student.is_active:
            raise NotFoundError("Student not found")

        self._classes.remove_student(cls.class_id, student.student_id)
        logger.info("Student %s removed from class %s", student.student_code, cls.name)

    def search_students(self, query: str) -> Sequence[StudentMatch]:
        query = (query or "").strip()
        if len(query) < constants.MIN_SEARCH_QUERY_LENGTH:
            raise ValidationError(f"Search query must be at least {constants.MIN_SEARCH_QUERY_LENGTH} characters")
        return self._classes.search_students(query)

    def search_classes(self, query: str) -> Sequence[SchoolClass]:
        query = (query or "").strip()
        if not query:
            raise ValidationError("Search query is required")
        return self._classes.search_classes(query)

    def statistics(self) -> ClassStatistics:
        stats = ClassStatistics()
        for cls in self._classes.list_classes():
            size = len(cls.active_students)
            stats.total_classes += 1
            stats.total_students += size
            stats.total_capacity += cls.max_students

            grade = stats.grade_distribution.setdefault(cls.grade, {"classes": 0, "students": 0, "capacity": 0})
            grade["classes"] += 1
            grade["students"] += size
            grade["capacity"] += cls.max_students

            if cls.class_teacher_id is not None:
                teacher = stats.teacher_assignments.setdefault(cls.class_teacher_id, {"classes": 0, "students": 0})
                teacher["classes"] += 1
                teacher["students"] += size

        if stats.total_classes:
            stats.average_class_size = round(stats.total_students / stats.total_classes)
        if stats.total_capacity:
            stats.capacity_utilization = round(stats.total_students / stats.total_capacity * 100)
        return stats
