from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Sequence

from ..core.exceptions import CapacityExceededError, UniquenessViolationError, ValidationError
from ..database.memory_base import InMemoryTable, reject_fields
from .model import SchoolClass, Student, StudentMatch
from .repository import ClassRepository

logger = logging.getLogger(__name__)

_PROTECTED_CLASS_FIELDS = ("class_id", "students", "created_at", "updated_at")
_PROTECTED_STUDENT_FIELDS = ("student_id", "is_active", "enrolled_at", "updated_at")


def _contains(value: Optional[str], term: str) -> bool:
    return bool(value) and term in value.lower()


class InMemoryClassRepository(InMemoryTable[SchoolClass], ClassRepository):
    """Classes and their embedded rosters.

    The class exclusively owns its student tuple; every roster change
    replaces the whole class row under the store lock.
    """

    table_name = "classes"

    def list_classes(self, *, grade: Optional[int] = None, teacher_id: Optional[int] = None) -> Sequence[SchoolClass]:
        return self._scan(
            lambda c: c.is_active
            and (grade is None or c.grade == int(grade))
            and (teacher_id is None or c.class_teacher_id == int(teacher_id))
        )

    def _ensure_unique_name(self, name: str, academic_year: str, *, class_id: Optional[int] = None) -> None:
        wanted = name.lower()
        for other in self.list_classes():
            if other.class_id != class_id and other.name.lower() == wanted and other.academic_year == academic_year:
                raise UniquenessViolationError(f"Class {name} already exists for {academic_year}")

    def create_class(
        self,
        *,
        name: str,
        grade: int,
        section: str,
        academic_year: str,
        max_students: int,
        class_teacher_id: Optional[int] = None,
    ) -> SchoolClass:
        with self._db.session():
            self._ensure_unique_name(name, academic_year)
            return self._insert(
                lambda new_id, now: SchoolClass(
                    class_id=new_id,
                    name=name,
                    grade=int(grade),
                    section=section,
                    academic_year=academic_year,
                    max_students=int(max_students),
                    class_teacher_id=class_teacher_id,
                    created_at=now,
                    updated_at=now,
                )
            )

    def update_class(self, class_id: int, **changes) -> Optional[SchoolClass]:
        reject_fields(changes, _PROTECTED_CLASS_FIELDS, "Class")
        with self._db.session():
            cls = self._rows().get(int(class_id))
            if cls is None:
                return None
            if "name" in changes or "academic_year" in changes:
                self._ensure_unique_name(
                    changes.get("name", cls.name),
                    changes.get("academic_year", cls.academic_year),
                    class_id=cls.class_id,
                )
            enrolled = len(cls.active_students)
            if "max_students" in changes and changes["max_students"] < enrolled:
                raise ValidationError(f"Max students cannot be lower than the current roster ({enrolled})")
            return self._replace(cls.class_id, changes)

    def add_student(
        self,
        class_id: int,
        *,
        name: str,
        student_code: str,
        email: Optional[str] = None,
        date_of_birth: Optional[str] = None,
        parent_contact: Optional[str] = None,
    ) -> Optional[Student]:
        with self._db.session():
            cls = self._rows().get(int(class_id))
            if cls is None:
                return None

            active = cls.active_students
            if any(s.student_code == student_code for s in active):
                raise UniquenessViolationError(f"Student ID {student_code} already exists in class {cls.name}")
            if len(active) >= cls.max_students:
                raise CapacityExceededError(
                    f"Class {cls.name} has reached maximum capacity of {cls.max_students} students"
                )

            now = self._db.now()
            student = Student(
                student_id=self._db.next_id("students"),
                name=name,
                student_code=student_code,
                email=email,
                date_of_birth=date_of_birth,
                parent_contact=parent_contact,
                enrolled_at=now,
            )
            self._rows()[cls.class_id] = replace(cls, students=cls.students + (student,), updated_at=now)

        logger.debug("classes: student id=%s added to class id=%s", student.student_id, class_id)
        return student

    def _replace_student(self, class_id: int, student_id: int, changes: dict) -> Optional[Student]:
        with self._db.session():
            cls = self._rows().get(int(class_id))
            if cls is None:
                return None
            current = cls.find_student(int(student_id))
            if current is None:
                return None

            now = self._db.now()
            updated = replace(current, **changes, updated_at=now)
            students = tuple(updated if s.student_id == current.student_id else s for s in cls.students)
            self._rows()[cls.class_id] = replace(cls, students=students, updated_at=now)
            return updated

    def update_student(self, class_id: int, student_id: int, **changes) -> Optional[Student]:
        reject_fields(changes, _PROTECTED_STUDENT_FIELDS, "Student")
        return self._replace_student(class_id, student_id, changes)

    def remove_student(self, class_id: int, student_id: int) -> bool:
        removed = self._replace_student(class_id, student_id, {"is_active": False})
        if removed is not None:
            logger.debug("classes: student id=%s removed from class id=%s", student_id, class_id)
        return removed is not None

    def get_student(self, student_id: int, *, include_inactive: bool = False) -> Optional[StudentMatch]:
        with self._db.session():
            for cls in self._rows().values():
                for s in cls.students:
                    if s.student_id == int(student_id) and (include_inactive or s.is_active):
                        return StudentMatch(student=s, class_id=cls.class_id, class_name=cls.name, grade=cls.grade)
        return None

    def search_students(self, query: str) -> Sequence[StudentMatch]:
        term = query.lower()
        out: list[StudentMatch] = []
        with self._db.session():
            for cls in self._rows().values():
                if not cls.is_active:
                    continue
                for s in cls.active_students:
                    if _contains(s.name, term) or _contains(s.student_code, term) or _contains(s.email, term):
                        out.append(StudentMatch(student=s, class_id=cls.class_id, class_name=cls.name, grade=cls.grade))
        return out

    def search_classes(self, query: str) -> Sequence[SchoolClass]:
        term = query.lower()
        return self._scan(
            lambda c: c.is_active
            and (_contains(c.name, term) or term in str(c.grade) or _contains(c.section, term))
        )
