from __future__ import annotations

from datetime import time
from typing import Optional, Sequence

from ..core.enums import DayOfWeek
from ..database.memory_base import InMemoryTable, reject_fields
from .model import Schedule, TeacherScheduleRow
from .repository import ScheduleRepository


class InMemoryScheduleRepository(InMemoryTable[Schedule], ScheduleRepository):
    table_name = "schedules"

    def list_schedules(
        self,
        *,
        teacher_id: Optional[int] = None,
        class_id: Optional[int] = None,
        subject_id: Optional[int] = None,
        day_of_week: Optional[DayOfWeek] = None,
    ) -> Sequence[Schedule]:
        return self._scan(
            lambda s: s.is_active
            and (teacher_id is None or s.teacher_id == int(teacher_id))
            and (class_id is None or s.class_id == int(class_id))
            and (subject_id is None or s.subject_id == int(subject_id))
            and (day_of_week is None or s.day_of_week == day_of_week)
        )

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
        return self._insert(
            lambda new_id, now: Schedule(
                schedule_id=new_id,
                teacher_id=int(teacher_id),
                class_id=int(class_id),
                subject_id=int(subject_id),
                day_of_week=day_of_week,
                start_time=start_time,
                end_time=end_time,
                room=room,
                created_at=now,
                updated_at=now,
            )
        )

    def update_schedule(self, schedule_id: int, **changes) -> Optional[Schedule]:
        reject_fields(changes, ("schedule_id", "created_at", "updated_at"), "Schedule")
        return self._replace(schedule_id, changes)

    def list_for_teacher(self, teacher_id: int, *, day_of_week: Optional[DayOfWeek] = None) -> Sequence[TeacherScheduleRow]:
        out: list[TeacherScheduleRow] = []
        with self._db.session():
            classes = self._db.tables["classes"]
            subjects = self._db.tables["subjects"]
            for s in self.list_schedules(teacher_id=teacher_id, day_of_week=day_of_week):
                cls = classes.get(s.class_id)
                subject = subjects.get(s.subject_id)
                out.append(
                    TeacherScheduleRow(
                        schedule=s,
                        class_name=cls.name if cls else None,
                        class_grade=cls.grade if cls else None,
                        subject_name=subject.name if subject else None,
                        subject_code=subject.code if subject else None,
                        student_count=len(cls.active_students) if cls else 0,
                    )
                )
        return out
