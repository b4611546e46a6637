from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Subject


class SubjectRepository(Protocol):
    def get_by_id(self, subject_id: int) -> Optional[Subject]:
        raise NotImplementedError

    def get_by_code(self, code: str) -> Optional[Subject]:
        """Exact (case-insensitive) code lookup, inactive subjects included."""

        raise NotImplementedError

    def list_subjects(self, *, code: Optional[str] = None) -> Sequence[Subject]:
        raise NotImplementedError

    def create_subject(self, *, name: str, code: str, description: Optional[str] = None) -> Subject:
        """Raises UniquenessViolationError when the code is taken, inactive subjects included."""

        raise NotImplementedError

    def update_subject(self, subject_id: int, **changes) -> Optional[Subject]:
        raise NotImplementedError

    def soft_delete(self, subject_id: int) -> bool:
        raise NotImplementedError
