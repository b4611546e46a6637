from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

from ..attendance.memory_attendance_repository import InMemoryAttendanceRepository
from ..classes.memory_class_repository import InMemoryClassRepository
from ..common.datetime_utils import utc_now
from ..schedules.memory_schedule_repository import InMemoryScheduleRepository
from ..settings.memory_settings_repository import InMemorySettingsRepository
from ..subjects.memory_subject_repository import InMemorySubjectRepository
from ..users.memory_user_repository import InMemoryUserRepository
from . import snapshot
from .memory import InMemoryDatabase


@dataclass(frozen=True)
class AttendanceStore:
    """The in-memory store: one database instance plus a repository per collection.

    Callers that need several operations to run as one unit can hold
    `store.db.session()` around them; the lock is re-entrant.
    """

    db: InMemoryDatabase
    users: InMemoryUserRepository
    classes: InMemoryClassRepository
    subjects: InMemorySubjectRepository
    schedules: InMemoryScheduleRepository
    attendance: InMemoryAttendanceRepository
    settings: InMemorySettingsRepository

    @classmethod
    def create(cls, *, clock: Callable[[], datetime] = utc_now) -> "AttendanceStore":
        db = InMemoryDatabase(clock=clock)
        return cls(
            db=db,
            users=InMemoryUserRepository(db),
            classes=InMemoryClassRepository(db),
            subjects=InMemorySubjectRepository(db),
            schedules=InMemoryScheduleRepository(db),
            attendance=InMemoryAttendanceRepository(db),
            settings=InMemorySettingsRepository(db),
        )

    def reset(self) -> None:
        self.db.reset()

    def export_snapshot(self) -> dict[str, Any]:
        return snapshot.export_snapshot(self.db)

    def import_snapshot(self, data: Any) -> dict[str, int]:
        return snapshot.import_snapshot(self.db, data)
