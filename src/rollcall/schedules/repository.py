from __future__ import annotations

from datetime import time
from typing import Optional, Protocol, Sequence

from ..core.enums import DayOfWeek
from .model import Schedule, TeacherScheduleRow


class ScheduleRepository(Protocol):
    def get_by_id(self, schedule_id: int) -> Optional[Schedule]:
        raise NotImplementedError

    def list_schedules(
        self,
        *,
        teacher_id: Optional[int] = None,
        class_id: Optional[int] = None,
        subject_id: Optional[int] = None,
        day_of_week: Optional[DayOfWeek] = None,
    ) -> Sequence[Schedule]:
        raise NotImplementedError

    def create_schedule(
        self,
        *,
        teacher_id: int,
        class_id: int,
        subject_id: int,
        day_of_week: DayOfWeek,
        start_time: time,
        end_time: time,
        room: Optional[str] = None,
    ) -> Schedule:
        raise NotImplementedError

    def update_schedule(self, schedule_id: int, **changes) -> Optional[Schedule]:
        raise NotImplementedError

    def soft_delete(self, schedule_id: int) -> bool:
        raise NotImplementedError

    def list_for_teacher(self, teacher_id: int, *, day_of_week: Optional[DayOfWeek] = None) -> Sequence[TeacherScheduleRow]:
        """List a teacher's active slots for UI (joined with class/subject)."""

        raise NotImplementedError
