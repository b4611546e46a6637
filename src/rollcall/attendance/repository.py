from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceFilter, AttendanceRecord, AttendanceStatistics, HistoryEntry


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_by_triple(self, class_id: int, subject_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def submit(
        self,
        *,
        teacher_id: int,
        class_id: int,
        subject_id: int,
        attendance_date: date,
        absent_student_ids: Sequence[int],
        notes: str = "",
        submitted_by: Optional[int] = None,
    ) -> AttendanceRecord:
        """Create or overwrite the record for (class, subject, date).

        Returns the stored record; its id and created_at survive resubmission.
        """

        raise NotImplementedError

    def update_record(
        self,
        attendance_id: int,
        *,
        absent_student_ids: Optional[Sequence[int]] = None,
        notes: Optional[str] = None,
    ) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def delete_record(self, attendance_id: int) -> bool:
        raise NotImplementedError

    def list_records(self, filters: Optional[AttendanceFilter] = None) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def get_statistics(self, filters: Optional[AttendanceFilter] = None) -> AttendanceStatistics:
        raise NotImplementedError

    def get_student_history(self, student_id: int, filters: Optional[AttendanceFilter] = None) -> Sequence[HistoryEntry]:
        raise NotImplementedError
