from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import SchoolClass, Student, StudentMatch


class ClassRepository(Protocol):
    def get_by_id(self, class_id: int) -> Optional[SchoolClass]:
        raise NotImplementedError

    def list_classes(self, *, grade: Optional[int] = None, teacher_id: Optional[int] = None) -> Sequence[SchoolClass]:
        """Active classes only, optionally filtered by grade and class teacher."""

        raise NotImplementedError

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
        """Raises UniquenessViolationError when an active class of the same academic year has the name."""

        raise NotImplementedError

    def update_class(self, class_id: int, **changes) -> Optional[SchoolClass]:
        """Raises ValidationError when max_students would drop below the active roster."""

        raise NotImplementedError

    def soft_delete(self, class_id: int) -> bool:
        raise NotImplementedError

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
        """Append a student to the roster.

        Raises CapacityExceededError / UniquenessViolationError and leaves the
        roster unchanged when the class is full or the student code is taken.
        Returns None when the class does not exist.
        """

        raise NotImplementedError

    def update_student(self, class_id: int, student_id: int, **changes) -> Optional[Student]:
        raise NotImplementedError

    def remove_student(self, class_id: int, student_id: int) -> bool:
        raise NotImplementedError

    def get_student(self, student_id: int, *, include_inactive: bool = False) -> Optional[StudentMatch]:
        """Find a student in any class; removed students only with include_inactive."""

        raise NotImplementedError

    def search_students(self, query: str) -> Sequence[StudentMatch]:
        raise NotImplementedError

    def search_classes(self, query: str) -> Sequence[SchoolClass]:
        raise NotImplementedError
